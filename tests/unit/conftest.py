"""Pytest configuration and fixtures for unit tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_redis() -> MagicMock:
    """A Redis client stand-in that reports itself available."""
    client = MagicMock()
    client.is_available = True
    client.count_in_window = AsyncMock(return_value=1)
    return client
