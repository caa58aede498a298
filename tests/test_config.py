"""Tests for Settings loading."""

import pytest
from pydantic import ValidationError

from devcenter_deploy.core.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.login_base_url == "https://login.microsoftonline.com"
    assert settings.store_base_url == "https://manage.devcenter.microsoft.com/v1.0/my"
    assert settings.store_resource == "https://manage.devcenter.microsoft.com"
    assert settings.poll_interval_seconds == 30
    assert settings.flight_id is None


def test_reads_prefixed_environment(monkeypatch):
    monkeypatch.setenv("DEVCENTER_TENANT_ID", "t1")
    monkeypatch.setenv("DEVCENTER_CLIENT_SECRET", "s3cret")
    monkeypatch.setenv("DEVCENTER_POLL_INTERVAL_SECONDS", "5")
    settings = Settings(_env_file=None)
    assert settings.tenant_id == "t1"
    assert settings.client_secret == "s3cret"
    assert settings.poll_interval_seconds == 5


def test_reads_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("DEVCENTER_APP_ID=9NBLGGH0000\nDEVCENTER_FLIGHT_ID=f-1\n")
    settings = Settings(_env_file=str(env_file))
    assert settings.app_id == "9NBLGGH0000"
    assert settings.flight_id == "f-1"


def test_base_urls_trailing_slash_stripped():
    settings = Settings(_env_file=None, store_base_url="https://store.test/v1.0/my/")
    assert settings.store_base_url == "https://store.test/v1.0/my"


def test_negative_poll_interval_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, poll_interval_seconds=-1)


def test_unknown_log_format_rejected():
    with pytest.raises(ValidationError):
        Settings(_env_file=None, log_format="xml")
