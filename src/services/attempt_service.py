"""Attempt logger: insert-only audit trail of login submissions."""

import logging
from datetime import UTC, datetime
from zoneinfo import ZoneInfo

from src.core.config import constants, settings
from src.core.db_client import DatabaseClient, sanitize_param
from src.core.logging import span
from src.domain.attempt import AttemptReason, AttemptResult, LoginAttempt


logger = logging.getLogger(__name__)


def civil_timestamp(*, now: datetime | None = None, timezone: str | None = None) -> str:
    """Format ``now`` as 'YYYY-MM-DD HH:MM:SS' in the attempt timezone."""
    moment = now or datetime.now(UTC)
    tz = ZoneInfo(timezone or settings.attempt_timezone)
    return moment.astimezone(tz).strftime(constants.ATTEMPT_TIMESTAMP_FORMAT)


async def log_attempt(
    *,
    db: DatabaseClient,
    phone: str,
    referral_code: str,
    result: AttemptResult | None = None,
    reason: AttemptReason | None = None,
) -> LoginAttempt:
    """Append one login attempt to the audit trail.

    Attempts are never updated, deduplicated or retried; each call writes
    exactly one row.
    """
    with span("attempt_service.log_attempt"):
        record = await db.create_record(
            collection="login_attempts",
            data={
                "phone": phone.strip(),
                "referral_code": referral_code.strip(),
                "result": result or AttemptResult.PENDING,
                "reason": reason,
                "timestamp": civil_timestamp(),
            },
        )

        attempt = LoginAttempt.model_validate(record)
        logger.info(
            "Logged login attempt",
            extra={"attempt_id": attempt.id, "phone": attempt.phone, "result": attempt.result, "reason": attempt.reason},
        )
        return attempt


async def list_attempts(*, db: DatabaseClient, phone: str | None = None, limit: int = 50) -> list[LoginAttempt]:
    """Most recent attempts first, optionally for one phone."""
    filter_query = ""
    if phone:
        filter_query = f'phone = "{sanitize_param(phone)}"'
    records = await db.list_records(
        collection="login_attempts",
        per_page=limit,
        filter_query=filter_query,
        sort="id DESC",
    )
    return [LoginAttempt.model_validate(record) for record in records]
