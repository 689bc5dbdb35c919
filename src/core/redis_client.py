"""Optional Redis connection backing the login throttle.

Without ``REDIS_URL`` the client stays disabled and every call reports
"no answer" (``None``/``False``); callers treat that as "do not throttle".
"""

import logging
from datetime import UTC, datetime
from typing import Any

from redis.asyncio import Redis
from redis.asyncio.connection import ConnectionPool
from redis.exceptions import RedisError

from src.core.config import Constants, settings


logger = logging.getLogger(__name__)


class RedisClient:
    """Thin async wrapper over a pooled ``redis.asyncio.Redis``."""

    def __init__(self, redis_url: str | None = None) -> None:
        self._client: Redis | None = None
        self._last_ok: datetime | None = None
        self._errors = 0
        self._calls = 0

        if not redis_url:
            logger.info("Redis URL not configured. Login throttling disabled.")
            return

        try:
            pool = ConnectionPool.from_url(
                redis_url,
                decode_responses=True,
                max_connections=Constants.REDIS_MAX_CONNECTIONS,
            )
        except (RedisError, ValueError) as e:
            logger.warning("Invalid Redis URL, login throttling disabled: %s", e)
            return

        self._client = Redis(connection_pool=pool)
        logger.info("Redis client initialized")

    @property
    def is_available(self) -> bool:
        return self._client is not None

    def get_health_status(self) -> dict[str, Any]:
        """Counters for the diagnostics endpoint."""
        return {
            "enabled": self.is_available,
            "last_successful_operation": self._last_ok.isoformat() if self._last_ok else None,
            "failure_count": self._errors,
            "total_operations": self._calls,
        }

    def _track(self, *, ok: bool) -> None:
        self._calls += 1
        if ok:
            self._last_ok = datetime.now(UTC)
        else:
            self._errors += 1

    async def ping(self) -> bool:
        if self._client is None:
            return False

        try:
            answered = bool(await self._client.ping())  # type: ignore[misc]
        except RedisError as e:
            self._track(ok=False)
            logger.warning("Redis PING failed: %s", e)
            return False

        self._track(ok=True)
        return answered

    async def count_in_window(self, key: str, window_seconds: int) -> int | None:
        """Increment ``key`` and (re)arm its expiry in one MULTI/EXEC.

        Returns:
            Hits recorded in the window including this one, or None when Redis is unusable
        """
        if self._client is None:
            return None

        try:
            async with self._client.pipeline(transaction=True) as pipe:
                pipe.incr(key)
                pipe.expire(key, window_seconds)
                hits, _ = await pipe.execute()
        except RedisError as e:
            self._track(ok=False)
            logger.warning("Redis window count failed for key %s: %s", key, e)
            return None

        self._track(ok=True)
        return int(hits)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            logger.info("Redis client closed")


# Global Redis client instance
redis_client = RedisClient(settings.redis_url)
