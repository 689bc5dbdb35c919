"""Fixed-window throttle for login submissions, backed by Redis."""

import logging
import time

from fastapi import HTTPException, status

from src.core.config import Constants, settings
from src.core.redis_client import RedisClient, redis_client


logger = logging.getLogger(__name__)


class RateLimiter:
    """Counts hits per (scope, identifier, window) and rejects the overflow.

    Fails open: with Redis missing or erroring, nothing is throttled.
    """

    def __init__(self, client: RedisClient) -> None:
        self._redis = client

    async def check_rate_limit(
        self,
        scope: str,
        identifier: str,
        limit: int,
        window_seconds: int,
    ) -> None:
        """Record one hit and raise once more than ``limit`` land in the current window.

        Raises:
            HTTPException: 429 with ``Retry-After`` set to the seconds left in the window
        """
        if not self._redis.is_available:
            logger.debug("rate_limit_check_skipped", extra={"reason": "redis_unavailable"})
            return

        now = int(time.time())
        window = now // window_seconds
        key = f"ratelimit:{scope}:{identifier}:{window}"

        hits = await self._redis.count_in_window(key, window_seconds)
        if hits is None:
            logger.warning("rate_limit_check_failed", extra={"scope": scope, "reason": "redis_error"})
            return

        if hits <= limit:
            return

        retry_after = (window + 1) * window_seconds - now
        logger.warning(
            "rate_limit_exceeded",
            extra={"scope": scope, "identifier": identifier, "hits": hits, "limit": limit, "retry_after": retry_after},
        )
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Too many login attempts. Please wait before trying again.",
            headers={"Retry-After": str(retry_after), "X-RateLimit-Limit": str(limit)},
        )

    async def check_login_rate_limit(self, phone: str) -> None:
        await self.check_rate_limit(
            scope="login",
            identifier=phone,
            limit=settings.login_rate_limit_per_phone,
            window_seconds=Constants.RATE_LIMIT_WINDOW_SECONDS,
        )


# Global rate limiter instance
rate_limiter = RateLimiter(redis_client)
