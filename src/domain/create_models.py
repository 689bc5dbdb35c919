"""Pydantic models for request bodies that create records."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.attempt import AttemptReason, AttemptResult
from src.domain.completion import CompletionStatus, PaymentStatus


class LoginRequest(BaseModel):
    """Phone number plus referral code submitted by the login form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    phone: str = Field(..., min_length=1, description="Phone number in any format; last 10 digits are used")
    # Optional so a login without a code still reaches the gate and is logged
    referral_code: str = Field(
        default="",
        validation_alias=AliasChoices("referralCode", "referer", "referral_code"),
        description="Referral code; a missing code is rejected as an invalid referral",
    )


class AttemptCreate(BaseModel):
    """Login attempt reported by the client."""

    model_config = ConfigDict(str_strip_whitespace=True)

    phone: str = Field(..., min_length=1, description="Phone number as entered")
    referer: str = Field(..., min_length=1, description="Referral code as entered")
    result: AttemptResult | None = Field(default=None, description="Outcome; defaults to pending")
    reason: AttemptReason | None = Field(default=None, description="Failure reason")


class CompletionCreate(BaseModel):
    """Request to register a task completion."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1, description="Phone number of the user")
    task_id: str = Field(..., min_length=1, description="Catalog task slug")
    task_title: str = Field(..., min_length=1, description="Task title")
    video_file_name: str | None = Field(default=None, description="Stored video file name")
    video_path: str | None = Field(default=None, description="Public path of the stored video")
    status: CompletionStatus | None = Field(
        default=None,
        description="Initial status; defaults to under_evaluation, always approved for the first task",
    )
    payment_status: PaymentStatus | None = Field(default=None, description="Initial payment status")


class FirstTaskRewardRequest(BaseModel):
    """Request to grant the first-task reward to a user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1, description="Phone number of the user")
