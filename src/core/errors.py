"""Error taxonomy shared by services and the HTTP layer.

Every error carries a stable ``code`` and the HTTP ``status_code`` it maps to.
Services raise these; ``src.main`` turns them into structured JSON responses.
"""

from pydantic import BaseModel


class ErrorCode:
    """Error codes for specific error conditions."""

    # Input errors
    ERR_VALIDATION = "ERR_VALIDATION"
    ERR_INVALID_PHONE = "ERR_INVALID_PHONE"
    ERR_MISSING_FIELD = "ERR_MISSING_FIELD"
    ERR_INVALID_VIDEO_TYPE = "ERR_INVALID_VIDEO_TYPE"
    ERR_VIDEO_TOO_LARGE = "ERR_VIDEO_TOO_LARGE"

    # Authentication errors
    ERR_UNAUTHORIZED_PHONE = "ERR_UNAUTHORIZED_PHONE"
    ERR_INVALID_REFERRAL = "ERR_INVALID_REFERRAL"

    # Ledger errors
    ERR_COMPLETION_EXISTS = "ERR_COMPLETION_EXISTS"
    ERR_INVALID_STATE_TRANSITION = "ERR_INVALID_STATE_TRANSITION"

    # Storage errors
    ERR_NOT_FOUND = "ERR_NOT_FOUND"
    ERR_STORAGE = "ERR_STORAGE"
    ERR_CONFIGURATION = "ERR_CONFIGURATION"

    # Transport errors
    ERR_RATE_LIMITED = "ERR_RATE_LIMITED"

    # Generic errors
    ERR_UNKNOWN = "ERR_UNKNOWN"


class ErrorResponse(BaseModel):
    """Structured error body returned to API clients."""

    success: bool = False
    code: str
    error: str
    reason: str | None = None


class AppError(Exception):
    """Base class for errors raised by payskill services."""

    code: str = ErrorCode.ERR_UNKNOWN
    status_code: int = 500

    def __init__(self, message: str, *, reason: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.reason = reason

    def to_response(self) -> ErrorResponse:
        """Build the client-facing error body."""
        return ErrorResponse(code=self.code, error=self.message, reason=self.reason)


class ValidationError(AppError):
    """Input has the wrong shape or value."""

    code = ErrorCode.ERR_VALIDATION
    status_code = 400


class InvalidPhoneError(ValidationError):
    """Phone number does not normalize to exactly 10 digits."""

    code = ErrorCode.ERR_INVALID_PHONE


class MissingFieldError(ValidationError):
    """A required request field is absent or blank."""

    code = ErrorCode.ERR_MISSING_FIELD


class InvalidVideoTypeError(ValidationError):
    """Uploaded file is not declared as a video."""

    code = ErrorCode.ERR_INVALID_VIDEO_TYPE


class VideoTooLargeError(ValidationError):
    """Uploaded file exceeds the size limit."""

    code = ErrorCode.ERR_VIDEO_TOO_LARGE


class AuthorizationError(AppError):
    """Caller is not allowed to sign in."""

    status_code = 401


class UnauthorizedPhoneError(AuthorizationError):
    """Phone number is not on the allow-list."""

    code = ErrorCode.ERR_UNAUTHORIZED_PHONE


class InvalidReferralError(AuthorizationError):
    """Referral code does not match the rule for the phone."""

    code = ErrorCode.ERR_INVALID_REFERRAL


class ConflictError(AppError):
    """Request conflicts with the current state of a record."""

    status_code = 409


class CompletionConflictError(ConflictError):
    """A completion already exists for the (user, task) pair."""

    code = ErrorCode.ERR_COMPLETION_EXISTS


class InvalidTransitionError(ConflictError):
    """Completion status cannot move to the requested state."""

    code = ErrorCode.ERR_INVALID_STATE_TRANSITION


class NotFoundError(AppError):
    """Requested record does not exist."""

    code = ErrorCode.ERR_NOT_FOUND
    status_code = 404


class StorageError(AppError):
    """Storage backend failed; details are logged, never returned."""

    code = ErrorCode.ERR_STORAGE
    status_code = 500


class ConfigurationError(AppError):
    """An external configuration file could not be read."""

    code = ErrorCode.ERR_CONFIGURATION
    status_code = 500
