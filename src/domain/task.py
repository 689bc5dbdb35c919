"""Task catalog domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.domain.completion import CompletionStatus, PaymentStatus


class Difficulty(StrEnum):
    """How demanding a task is."""

    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class UnlockRequirement(StrEnum):
    """What the client requires before a task can be attempted."""

    AUTO = "auto"
    QR_SCAN = "qr_scan"
    PREVIOUS_TASK = "previous_task"


class Task(BaseModel):
    """Catalog task definition (immutable configuration)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str = Field(..., description="Stable slug, unique within the catalog")
    title: str = Field(..., description="Task title")
    description: str = Field(..., description="What the user has to do")
    category: str = Field(..., description="Skill category (e.g., 'Life Skills')")
    difficulty: Difficulty = Field(..., description="Task difficulty")
    estimated_time: str = Field(..., description="Human-readable time estimate")
    icon: str = Field(..., description="Emoji icon shown next to the task")


class TaskUnlockState(BaseModel):
    """Client-side unlock state of one catalog task for one user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    task_id: str
    order: int = Field(..., description="1-based display order")
    requirement: UnlockRequirement
    unlocked: bool
    completed: bool
    status: CompletionStatus | None = Field(default=None, description="Completion status when a completion exists")
    payment_status: PaymentStatus | None = None
