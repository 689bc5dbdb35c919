"""Tests for configuration validation."""

from pathlib import Path

import pytest

from src.core.config import Constants, Settings
from src.core.config import settings as app_settings
from src.main import validate_startup_configuration


def test_require_credential_with_valid_value() -> None:
    """Test require_credential returns value when credential is set."""
    settings = Settings(database_url="/var/lib/payskill", database_name="payskill")

    result = settings.require_credential("database_name", "Database name")

    assert result == "payskill"


def test_require_credential_with_none_raises_error() -> None:
    """Test require_credential raises ValueError when credential is None."""
    settings = Settings(database_url=None, database_name="payskill")

    with pytest.raises(ValueError, match="Storage location not configured"):
        settings.require_credential("database_url", "Storage location")


def test_require_credential_with_empty_string_raises_error() -> None:
    """Test require_credential raises ValueError when credential is empty."""
    settings = Settings(database_url="/tmp", database_name="")

    with pytest.raises(ValueError, match="Database name not configured"):
        settings.require_credential("database_name", "Database name")


def test_require_credential_error_message_includes_field_name() -> None:
    """Test error message includes the environment variable name."""
    settings = Settings(database_url=None)

    with pytest.raises(ValueError, match="DATABASE_URL"):
        settings.require_credential("database_url", "Storage location")


def test_database_path_joins_url_and_name() -> None:
    settings = Settings(database_url="/var/lib/payskill", database_name="prod")

    assert settings.database_path == Path("/var/lib/payskill") / "prod.sqlite3"


def test_database_path_requires_name() -> None:
    settings = Settings(database_url="/var/lib/payskill", database_name=None)

    with pytest.raises(ValueError, match="DATABASE_NAME"):
        _ = settings.database_path


def test_auth_gate_defaults() -> None:
    settings = Settings()

    assert settings.approved_phones == ["1234567890", "9842470497", "9998887776"]
    assert settings.referral_code == "far55"
    assert settings.priority_referral_code == "99"
    assert settings.conceal_auth_failures is False


def test_settings_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_NAME", "from_env")
    monkeypatch.setenv("CONCEAL_AUTH_FAILURES", "true")
    monkeypatch.setenv("APPROVED_PHONES", '["1112223334"]')

    settings = Settings()

    assert settings.database_name == "from_env"
    assert settings.conceal_auth_failures is True
    assert settings.approved_phones == ["1112223334"]


def test_video_size_limit_is_50_mib() -> None:
    assert Constants.MAX_VIDEO_SIZE_BYTES == 52_428_800


def test_startup_validation_passes_with_storage_configured(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(app_settings, "database_url", str(tmp_path))
    monkeypatch.setattr(app_settings, "database_name", "payskill")

    validate_startup_configuration()


@pytest.mark.parametrize("field", ["database_url", "database_name"])
def test_startup_validation_exits_without_storage(monkeypatch: pytest.MonkeyPatch, tmp_path: Path, field: str) -> None:
    monkeypatch.setattr(app_settings, "database_url", str(tmp_path))
    monkeypatch.setattr(app_settings, "database_name", "payskill")
    monkeypatch.setattr(app_settings, field, None)

    with pytest.raises(SystemExit) as exc:
        validate_startup_configuration()

    assert exc.value.code == 1
