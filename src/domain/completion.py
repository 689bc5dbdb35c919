"""Task completion domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CompletionStatus(StrEnum):
    """Review state of a task completion."""

    UNDER_EVALUATION = "under_evaluation"
    APPROVED = "approved"
    REJECTED = "rejected"


class PaymentStatus(StrEnum):
    """Payment state of a task completion."""

    PENDING = "pending"
    ALLOTTED = "allotted"
    PAID = "paid"


# States an evaluator may move a completion into; both are terminal
TERMINAL_STATUSES = frozenset({CompletionStatus.APPROVED, CompletionStatus.REJECTED})


class TaskCompletion(BaseModel):
    """Task completion data transfer object (one row of ``task_completions``)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Unique completion ID from database")
    user_id: str = Field(..., description="Phone number of the user")
    task_id: str = Field(..., description="Catalog task slug")
    task_title: str = Field(..., description="Task title at the time of completion")
    video_file_name: str | None = Field(default=None, description="Stored video file name")
    video_path: str | None = Field(default=None, description="Public path of the stored video")
    status: CompletionStatus = Field(default=CompletionStatus.UNDER_EVALUATION, description="Review state")
    payment_status: PaymentStatus | None = Field(default=None, description="Payment state")
    uploaded_at: str = Field(..., description="Upload timestamp (ISO format)")
    evaluated_at: str | None = Field(default=None, description="Evaluation timestamp (ISO format)")
    feedback: str | None = Field(default=None, description="Evaluator feedback")
    created_at: str = Field(..., description="Creation timestamp (ISO format)")
    updated_at: str = Field(..., description="Last update timestamp (ISO format)")
