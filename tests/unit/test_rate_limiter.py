"""Tests for the Redis-backed login rate limiter."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import HTTPException, status
from redis.exceptions import ConnectionError as RedisConnectionError

from src.core.config import settings
from src.core.rate_limiter import RateLimiter
from src.core.redis_client import RedisClient


@pytest.mark.unit
async def test_check_rate_limit_counts_hit_in_current_window(mock_redis):
    limiter = RateLimiter(mock_redis)

    await limiter.check_rate_limit(scope="login", identifier="9842470497", limit=5, window_seconds=60)

    key, window = mock_redis.count_in_window.call_args.args
    assert key.startswith("ratelimit:login:9842470497:")
    assert window == 60


@pytest.mark.unit
async def test_check_rate_limit_at_limit_passes(mock_redis):
    mock_redis.count_in_window.return_value = 5
    limiter = RateLimiter(mock_redis)

    await limiter.check_rate_limit(scope="login", identifier="9842470497", limit=5, window_seconds=60)


@pytest.mark.unit
async def test_check_rate_limit_exceeded(mock_redis):
    mock_redis.count_in_window.return_value = 6
    limiter = RateLimiter(mock_redis)

    with pytest.raises(HTTPException) as exc:
        await limiter.check_rate_limit(scope="login", identifier="9842470497", limit=5, window_seconds=60)

    assert exc.value.status_code == status.HTTP_429_TOO_MANY_REQUESTS
    assert "Too many login attempts" in exc.value.detail
    assert exc.value.headers is not None
    assert 0 < int(exc.value.headers["Retry-After"]) <= 60
    assert exc.value.headers["X-RateLimit-Limit"] == "5"


@pytest.mark.unit
async def test_check_rate_limit_redis_unavailable(mock_redis):
    mock_redis.is_available = False
    limiter = RateLimiter(mock_redis)

    # Should not raise exception
    await limiter.check_rate_limit(scope="login", identifier="9842470497", limit=1, window_seconds=60)

    mock_redis.count_in_window.assert_not_called()


@pytest.mark.unit
async def test_check_rate_limit_redis_error_fails_open(mock_redis):
    mock_redis.count_in_window.return_value = None
    limiter = RateLimiter(mock_redis)

    await limiter.check_rate_limit(scope="login", identifier="9842470497", limit=1, window_seconds=60)


@pytest.mark.unit
async def test_check_login_rate_limit_uses_configured_limit(mock_redis, monkeypatch):
    monkeypatch.setattr(settings, "login_rate_limit_per_phone", 2)
    mock_redis.count_in_window.return_value = 3
    limiter = RateLimiter(mock_redis)

    with pytest.raises(HTTPException) as exc:
        await limiter.check_login_rate_limit("9842470497")

    assert exc.value.status_code == status.HTTP_429_TOO_MANY_REQUESTS


@pytest.mark.unit
async def test_redis_client_without_url_is_disabled():
    client = RedisClient(None)

    assert not client.is_available
    assert await client.ping() is False
    assert await client.count_in_window("ratelimit:login:x:1", 60) is None
    assert client.get_health_status()["enabled"] is False


@pytest.mark.unit
async def test_redis_client_count_in_window_uses_pipeline():
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[3, True])
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    client = RedisClient(None)
    client._client = MagicMock()
    client._client.pipeline.return_value = pipe

    hits = await client.count_in_window("ratelimit:login:9842470497:1", 60)

    assert hits == 3
    pipe.incr.assert_called_once_with("ratelimit:login:9842470497:1")
    pipe.expire.assert_called_once_with("ratelimit:login:9842470497:1", 60)
    assert client.get_health_status()["total_operations"] == 1


@pytest.mark.unit
async def test_redis_client_count_in_window_error_returns_none():
    pipe = MagicMock()
    pipe.execute = AsyncMock(side_effect=RedisConnectionError("down"))
    pipe.__aenter__ = AsyncMock(return_value=pipe)
    pipe.__aexit__ = AsyncMock(return_value=False)
    client = RedisClient(None)
    client._client = MagicMock()
    client._client.pipeline.return_value = pipe

    assert await client.count_in_window("ratelimit:login:9842470497:1", 60) is None
    assert client.get_health_status()["failure_count"] == 1
