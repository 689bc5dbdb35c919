"""Authentication gate: phone allow-list plus per-phone referral code."""

import logging
import re
import secrets
from enum import StrEnum

from pydantic import BaseModel

from src.core.config import constants, settings
from src.core.db_client import DatabaseClient
from src.core.errors import InvalidPhoneError
from src.core.logging import span
from src.domain.attempt import AttemptReason, AttemptResult
from src.domain.user import User
from src.services import attempt_service, user_service


logger = logging.getLogger(__name__)


class AuthOutcome(StrEnum):
    """Result variants of an authentication attempt."""

    SUCCESS = "success"
    PENDING = "pending"  # Failure the caller has chosen not to reveal
    FAILED = "failed"


class AuthResult(BaseModel):
    """Outcome of :func:`authenticate`.

    ``reason`` is set for both FAILED and PENDING so the server can log and
    test it; the HTTP layer omits it from PENDING responses.
    """

    outcome: AuthOutcome
    reason: AttemptReason | None = None
    user: User | None = None

    @property
    def success(self) -> bool:
        return self.outcome == AuthOutcome.SUCCESS


def extract_phone_digits(raw: str) -> str:
    """Keep only digits, trimmed to the last 10 when longer."""
    digits = re.sub(r"\D", "", raw or "")
    return digits[-constants.PHONE_DIGITS :] if len(digits) > constants.PHONE_DIGITS else digits


def normalize_phone(raw: str) -> str:
    """Normalize a phone number to its last 10 digits.

    ``"+91 9842470497"`` becomes ``"9842470497"``.

    Raises:
        InvalidPhoneError: If fewer than 10 digits remain
    """
    normalized = extract_phone_digits(raw)
    if len(normalized) != constants.PHONE_DIGITS:
        msg = "Please enter a valid 10-digit phone number"
        raise InvalidPhoneError(msg)
    return normalized


def is_approved_phone(phone: str) -> bool:
    """Whether the normalized phone is on the allow-list."""
    return phone in settings.approved_phones


def expected_referral_code(phone: str) -> str:
    """Referral code the phone must present."""
    if phone == settings.priority_phone:
        return settings.priority_referral_code
    return settings.referral_code


def is_valid_referral(phone: str, referral_code: str) -> bool:
    """Case-insensitive referral check for the normalized phone."""
    submitted = (referral_code or "").strip().lower()
    expected = expected_referral_code(phone).strip().lower()
    return secrets.compare_digest(submitted.encode(), expected.encode())


def _rejection(reason: AttemptReason, *, conceal: bool) -> AuthResult:
    outcome = AuthOutcome.PENDING if conceal else AuthOutcome.FAILED
    return AuthResult(outcome=outcome, reason=reason)


async def authenticate(
    *,
    db: DatabaseClient,
    phone: str,
    referral_code: str,
    conceal_failures: bool | None = None,
) -> AuthResult:
    """Authenticate a phone number plus referral code.

    Checks run in order: phone format, allow-list, referral code. Exactly
    one attempt is logged per call, whatever the outcome. Malformed phones are
    always FAILED; allow-list and referral failures are PENDING instead of
    FAILED when ``conceal_failures`` (default: settings) is on.

    Args:
        db: Storage client
        phone: Phone number as submitted
        referral_code: Referral code as submitted
        conceal_failures: Override for ``settings.conceal_auth_failures``

    Returns:
        AuthResult with the user on success
    """
    with span("auth_service.authenticate"):
        conceal = settings.conceal_auth_failures if conceal_failures is None else conceal_failures

        try:
            normalized = normalize_phone(phone)
        except InvalidPhoneError:
            logger.warning("Login rejected: invalid phone", extra={"phone": phone})
            await attempt_service.log_attempt(
                db=db,
                phone=phone,
                referral_code=referral_code,
                result=AttemptResult.FAILED,
                reason=AttemptReason.INVALID_PHONE,
            )
            return AuthResult(outcome=AuthOutcome.FAILED, reason=AttemptReason.INVALID_PHONE)

        if not is_approved_phone(normalized):
            logger.warning("Login rejected: phone not on allow-list", extra={"phone": normalized})
            await attempt_service.log_attempt(
                db=db,
                phone=normalized,
                referral_code=referral_code,
                result=AttemptResult.FAILED,
                reason=AttemptReason.UNAUTHORIZED_PHONE,
            )
            return _rejection(AttemptReason.UNAUTHORIZED_PHONE, conceal=conceal)

        if not is_valid_referral(normalized, referral_code):
            logger.warning("Login rejected: invalid referral code", extra={"phone": normalized})
            await attempt_service.log_attempt(
                db=db,
                phone=normalized,
                referral_code=referral_code,
                result=AttemptResult.FAILED,
                reason=AttemptReason.INVALID_REFERER,
            )
            return _rejection(AttemptReason.INVALID_REFERER, conceal=conceal)

        user = await user_service.find_or_create_and_add_login_time(db=db, phone=normalized)
        await attempt_service.log_attempt(
            db=db,
            phone=normalized,
            referral_code=referral_code,
            result=AttemptResult.SUCCESS,
        )

        logger.info("Login succeeded", extra={"phone": normalized, "login_count": len(user.login_times)})
        return AuthResult(outcome=AuthOutcome.SUCCESS, user=user)
