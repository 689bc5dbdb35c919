"""Login attempt domain models for the audit trail."""

from enum import StrEnum

from pydantic import BaseModel, Field


class AttemptResult(StrEnum):
    """Outcome recorded for a login attempt."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class AttemptReason(StrEnum):
    """Why a login attempt did not succeed."""

    INVALID_REFERER = "invalid_referer"
    UNAUTHORIZED_PHONE = "unauthorized_phone"
    NETWORK_ERROR = "network_error"
    INVALID_PHONE = "invalid_phone"


class LoginAttempt(BaseModel):
    """Login attempt entry. Immutable once written."""

    id: str = Field(..., description="Unique attempt ID from database")
    phone: str = Field(..., description="Phone number as submitted (trimmed)")
    referral_code: str = Field(..., description="Referral code as submitted (trimmed)")
    result: AttemptResult = Field(default=AttemptResult.PENDING, description="Attempt outcome")
    reason: AttemptReason | None = Field(default=None, description="Failure reason, if any")
    timestamp: str = Field(..., description="Civil time 'YYYY-MM-DD HH:MM:SS' in the configured timezone")
