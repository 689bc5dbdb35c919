"""Tests for the error taxonomy."""

import pytest

from src.core.db_client import DatabaseError, RecordNotFoundError, UniqueConstraintError
from src.core.errors import (
    AppError,
    CompletionConflictError,
    ConfigurationError,
    ErrorCode,
    InvalidPhoneError,
    InvalidReferralError,
    InvalidTransitionError,
    InvalidVideoTypeError,
    MissingFieldError,
    NotFoundError,
    StorageError,
    UnauthorizedPhoneError,
    ValidationError,
    VideoTooLargeError,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("error_class", "status_code", "code"),
    [
        (InvalidPhoneError, 400, ErrorCode.ERR_INVALID_PHONE),
        (MissingFieldError, 400, ErrorCode.ERR_MISSING_FIELD),
        (InvalidVideoTypeError, 400, ErrorCode.ERR_INVALID_VIDEO_TYPE),
        (VideoTooLargeError, 400, ErrorCode.ERR_VIDEO_TOO_LARGE),
        (UnauthorizedPhoneError, 401, ErrorCode.ERR_UNAUTHORIZED_PHONE),
        (InvalidReferralError, 401, ErrorCode.ERR_INVALID_REFERRAL),
        (CompletionConflictError, 409, ErrorCode.ERR_COMPLETION_EXISTS),
        (InvalidTransitionError, 409, ErrorCode.ERR_INVALID_STATE_TRANSITION),
        (NotFoundError, 404, ErrorCode.ERR_NOT_FOUND),
        (StorageError, 500, ErrorCode.ERR_STORAGE),
        (ConfigurationError, 500, ErrorCode.ERR_CONFIGURATION),
    ],
)
def test_error_status_and_code(error_class, status_code, code):
    error = error_class("boom")

    assert error.status_code == status_code
    assert error.code == code
    assert error.message == "boom"


@pytest.mark.unit
def test_to_response_shape():
    body = InvalidPhoneError("Please enter a valid 10-digit phone number").to_response()

    assert body.model_dump(exclude_none=True) == {
        "success": False,
        "code": ErrorCode.ERR_INVALID_PHONE,
        "error": "Please enter a valid 10-digit phone number",
    }


@pytest.mark.unit
def test_storage_errors_share_hierarchy():
    assert issubclass(UniqueConstraintError, DatabaseError)
    assert issubclass(DatabaseError, StorageError)
    assert issubclass(RecordNotFoundError, NotFoundError)
    assert issubclass(InvalidPhoneError, ValidationError)
    assert issubclass(StorageError, AppError)


@pytest.mark.unit
def test_to_response_includes_reason_when_given():
    body = UnauthorizedPhoneError("Phone number not authorized", reason="unauthorized_phone").to_response()

    assert body.reason == "unauthorized_phone"
    assert body.success is False
