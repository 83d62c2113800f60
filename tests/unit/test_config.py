"""Unit tests for boatsync.config."""

import json

import pytest
from pydantic import ValidationError

from src.boatsync.config import SyncConfig
from src.boatsync.models import SessionWindow

ENV_VARS = (
    "REVSPORT_URL",
    "REVSPORT_USER",
    "REVSPORT_PASS",
    "CLUB_TIMEZONE",
    "DAYS_AHEAD",
    "SESSIONS",
    "REQUEST_TIMEOUT",
    "DEBUG",
    "LOG_JSON",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestSyncConfig:
    def test_defaults(self):
        config = SyncConfig(_env_file=None)
        assert config.revsport_user == ""
        assert config.club_timezone == "Australia/Sydney"
        assert config.days_ahead == 7
        assert config.sessions == {
            "morning1": SessionWindow(start="06:30", end="07:30"),
            "morning2": SessionWindow(start="07:30", end="08:30"),
        }
        assert config.log_json is False

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("REVSPORT_URL", "https://club.example.org")
        monkeypatch.setenv("REVSPORT_USER", "rower")
        monkeypatch.setenv("REVSPORT_PASS", "s3cret")
        monkeypatch.setenv("DAYS_AHEAD", "14")
        monkeypatch.setenv("DEBUG", "true")

        config = SyncConfig(_env_file=None)
        assert config.revsport_url == "https://club.example.org"
        assert config.revsport_user == "rower"
        assert config.days_ahead == 14
        assert config.debug is True

    def test_sessions_from_json(self, monkeypatch):
        monkeypatch.setenv(
            "SESSIONS", json.dumps({"evening": {"start": "17:00", "end": "18:00"}})
        )
        config = SyncConfig(_env_file=None)
        assert config.sessions == {"evening": SessionWindow(start="17:00", end="18:00")}

    def test_bad_session_time_rejected(self, monkeypatch):
        monkeypatch.setenv("SESSIONS", json.dumps({"x": {"start": "6:30", "end": "07:30"}}))
        with pytest.raises(ValidationError):
            SyncConfig(_env_file=None)

    def test_days_ahead_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("DAYS_AHEAD", "0")
        with pytest.raises(ValidationError):
            SyncConfig(_env_file=None)

    def test_adapter_config(self, monkeypatch):
        monkeypatch.setenv("REVSPORT_USER", "rower")
        monkeypatch.setenv("REVSPORT_PASS", "s3cret")
        monkeypatch.setenv("CLUB_TIMEZONE", "Australia/Perth")
        monkeypatch.setenv("REQUEST_TIMEOUT", "5")

        adapter_config = SyncConfig(_env_file=None).adapter_config()
        assert adapter_config.username == "rower"
        assert adapter_config.password == "s3cret"
        assert adapter_config.timezone == "Australia/Perth"
        assert adapter_config.request_timeout == 5.0
        assert set(adapter_config.sessions) == {"morning1", "morning2"}
