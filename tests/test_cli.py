import json

from cli import main as cli
from core.models import ScanReport


def test_scan_prints_report(monkeypatch, capsys):
    seen = {}

    def fake_scan(target, config):
        seen["target"] = str(target)
        seen["config"] = config
        return ScanReport(target=str(target), open_ports=[22], ports_requested=3, ports_scanned=3)

    monkeypatch.setattr(cli, "scan", fake_scan)
    monkeypatch.setattr(cli.settings, "safe_mode", True)
    monkeypatch.setattr(cli.settings, "allowlist_cidrs", ["127.0.0.0/8"])
    rc = cli.main(["scan", "127.0.0.1", "--ports", "22,80,443", "--concurrency", "4", "--timeout", "0.5"])
    assert rc == 0
    out = json.loads(capsys.readouterr().out)
    assert out["open_ports"] == [22]
    assert seen["target"] == "127.0.0.1"
    assert seen["config"].work_list() == [22, 80, 443]
    assert seen["config"].concurrency_limit == 4
    assert seen["config"].timeout_per_probe == 0.5


def test_bad_config_exits_2(monkeypatch, capsys):
    monkeypatch.setattr(cli, "scan", lambda *a: _must_not_scan())
    monkeypatch.setattr(cli.settings, "safe_mode", False)
    rc = cli.main(["scan", "127.0.0.1", "--ports", "80", "--concurrency", "0"])
    assert rc == 2
    assert "concurrency_limit" in capsys.readouterr().err


def test_bad_port_spec_exits_2(capsys):
    assert cli.main(["ports", "70000"]) == 2


def test_deadline_and_all_status_passed_through(monkeypatch, capsys):
    seen = {}

    def fake_scan(target, config):
        seen["config"] = config
        return ScanReport(target=str(target), complete=False, unscanned=[81])

    monkeypatch.setattr(cli, "scan", fake_scan)
    monkeypatch.setattr(cli.settings, "safe_mode", False)
    rc = cli.main(["scan", "127.0.0.1", "--ports", "80-81", "--deadline", "2.5", "--all-status"])
    assert rc == 0
    assert seen["config"].scan_deadline == 2.5
    assert seen["config"].include_status is True
    out = json.loads(capsys.readouterr().out)
    assert out["complete"] is False
    assert out["unscanned"] == [81]


def test_ports_command(capsys):
    assert cli.main(["ports", "80,22-23"]) == 0
    assert json.loads(capsys.readouterr().out) == [22, 23, 80]


def _must_not_scan():
    raise AssertionError("scan must not run for an invalid config")
