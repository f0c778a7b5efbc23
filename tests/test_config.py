import pytest
from pydantic import ValidationError

from core.config import Settings


def test_log_level_normalized(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    assert Settings().log_level == "DEBUG"


def test_unknown_log_level_rejected(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "chatty")
    with pytest.raises(ValidationError):
        Settings()


def test_scan_knobs_from_env(monkeypatch):
    monkeypatch.setenv("SCAN_CONCURRENCY", "12")
    monkeypatch.setenv("SCAN_DEADLINE_S", "30")
    s = Settings()
    assert s.scan_concurrency == 12
    assert s.scan_deadline_s == 30.0
