"""Fixtures for HTTP tests running the real application lifespan."""

from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.core.config import settings
from src.main import app


@pytest.fixture
def client(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[TestClient]:
    """TestClient whose lifespan opens a throwaway SQLite database."""
    monkeypatch.setattr(settings, "database_url", str(tmp_path / "data"))
    monkeypatch.setattr(settings, "database_name", "payskill_api_test")

    with TestClient(app) as test_client:
        yield test_client
