"""Authentication endpoints: login and client-reported login attempts."""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.core.db_client import DatabaseClient, get_db
from src.core.errors import InvalidPhoneError, InvalidReferralError, UnauthorizedPhoneError
from src.core.rate_limiter import rate_limiter
from src.domain.attempt import AttemptReason
from src.domain.create_models import AttemptCreate, LoginRequest
from src.domain.user import PublicUser
from src.services import attempt_service, auth_service
from src.services.auth_service import AuthOutcome


router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", response_model=None)
async def login(body: LoginRequest, db: DatabaseClient = Depends(get_db)) -> dict[str, Any] | JSONResponse:
    """Sign in with a phone number and referral code.

    Returns:
        Success payload with the user summary, or 202 ``pending`` when
        failures are concealed

    Raises:
        InvalidPhoneError: 400 when the phone is not 10 digits
        UnauthorizedPhoneError: 401 when the phone is not on the allow-list
        InvalidReferralError: 401 when the referral code does not match
    """
    await rate_limiter.check_login_rate_limit(auth_service.extract_phone_digits(body.phone) or body.phone)

    result = await auth_service.authenticate(db=db, phone=body.phone, referral_code=body.referral_code)

    if result.outcome == AuthOutcome.SUCCESS and result.user is not None:
        return {
            "success": True,
            "message": "Login successful",
            "user": PublicUser.from_user(result.user).model_dump(by_alias=True),
        }

    if result.outcome == AuthOutcome.PENDING:
        return JSONResponse(status_code=202, content={"success": False, "status": "pending"})

    if result.reason == AttemptReason.INVALID_PHONE:
        raise InvalidPhoneError("Please enter a valid 10-digit phone number", reason=result.reason)
    if result.reason == AttemptReason.UNAUTHORIZED_PHONE:
        raise UnauthorizedPhoneError("Phone number not authorized", reason=result.reason)
    raise InvalidReferralError("Invalid referral code", reason=result.reason)


@router.post("/attempts")
async def record_attempt(body: AttemptCreate, db: DatabaseClient = Depends(get_db)) -> dict[str, Any]:
    """Record a login attempt reported by the client (e.g., a network failure)."""
    attempt = await attempt_service.log_attempt(
        db=db,
        phone=body.phone,
        referral_code=body.referer,
        result=body.result,
        reason=body.reason,
    )
    return {"success": True, "message": "Attempt logged successfully", "attemptId": attempt.id}
