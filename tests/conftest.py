"""Pytest configuration and shared fixtures."""

import logging
from collections.abc import AsyncIterator
from pathlib import Path

import pytest

from src.core.config import settings
from src.core.db_client import DatabaseClient
from tests.factories import APPROVED_PHONE, PRIORITY_PHONE


logger = logging.getLogger(__name__)


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin the auth gate to known values and point file paths at the test's tmp dir."""
    monkeypatch.setattr(settings, "approved_phones", [APPROVED_PHONE, PRIORITY_PHONE, "9998887776"])
    monkeypatch.setattr(settings, "referral_code", "far55")
    monkeypatch.setattr(settings, "priority_phone", PRIORITY_PHONE)
    monkeypatch.setattr(settings, "priority_referral_code", "99")
    monkeypatch.setattr(settings, "conceal_auth_failures", False)
    monkeypatch.setattr(settings, "attempt_timezone", "Asia/Kolkata")
    monkeypatch.setattr(settings, "uploads_dir", tmp_path / "uploads" / "videos")
    monkeypatch.setattr(settings, "levels_file", tmp_path / "levels.json")
    monkeypatch.setattr(settings, "login_rate_limit_per_phone", 10)


@pytest.fixture
async def db(tmp_path: Path) -> AsyncIterator[DatabaseClient]:
    """A connected client on a fresh SQLite file, closed after the test."""
    client = DatabaseClient(db_path=tmp_path / "data" / "payskill_test.sqlite3")
    await client.connect()
    yield client
    await client.close()

