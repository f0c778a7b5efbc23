import pytest

from core import targets
from core.errors import TargetError


def test_domain_match_allowlist(monkeypatch):
    monkeypatch.setattr(targets.settings, "allowlist_domains", ["example.com"])
    monkeypatch.setattr(targets.settings, "allowlist_cidrs", ["93.184.216.0/24"])
    monkeypatch.setattr(targets, "_resolve_host", lambda host: ["93.184.216.34"])
    assert targets.is_authorized_target("www.example.com") is True


def test_domain_match_outside_cidr(monkeypatch):
    monkeypatch.setattr(targets.settings, "allowlist_domains", ["example.com"])
    monkeypatch.setattr(targets.settings, "allowlist_cidrs", ["10.0.0.0/8"])
    monkeypatch.setattr(targets, "_resolve_host", lambda host: ["93.184.216.34"])
    assert targets.is_authorized_target("example.com") is False


def test_empty_allowlist_refuses_everything(monkeypatch):
    monkeypatch.setattr(targets.settings, "allowlist_domains", [])
    monkeypatch.setattr(targets.settings, "allowlist_cidrs", [])
    assert targets.is_authorized_target("127.0.0.1") is False


def test_resolve_ip_literal(monkeypatch):
    monkeypatch.setattr(targets.settings, "safe_mode", True)
    monkeypatch.setattr(targets.settings, "allowlist_cidrs", ["127.0.0.0/8"])
    t = targets.resolve_target(" 127.0.0.1 ")
    assert str(t) == "127.0.0.1"
    assert t.hostname is None


def test_resolve_refuses_unlisted_target(monkeypatch):
    monkeypatch.setattr(targets.settings, "safe_mode", True)
    monkeypatch.setattr(targets.settings, "allowlist_cidrs", ["127.0.0.0/8"])
    monkeypatch.setattr(targets.settings, "allowlist_domains", [])
    with pytest.raises(TargetError):
        targets.resolve_target("192.0.2.10")


def test_resolve_hostname_prefers_ipv4(monkeypatch):
    monkeypatch.setattr(targets.settings, "safe_mode", False)
    monkeypatch.setattr(
        targets.socket,
        "getaddrinfo",
        lambda host, port, proto=0: [
            (None, None, None, "", ("::1", 0, 0, 0)),
            (None, None, None, "", ("127.0.0.1", 0)),
        ],
    )
    t = targets.resolve_target("box.internal")
    assert str(t) == "127.0.0.1"
    assert t.hostname == "box.internal"


def test_resolve_unknown_host(monkeypatch):
    monkeypatch.setattr(targets.settings, "safe_mode", False)
    monkeypatch.setattr(targets, "_resolve_host", lambda host: [])
    with pytest.raises(TargetError):
        targets.resolve_target("does-not-exist.invalid")
