"""Domain models and DTOs."""

from src.domain.attempt import AttemptReason, AttemptResult, LoginAttempt
from src.domain.completion import CompletionStatus, PaymentStatus, TaskCompletion
from src.domain.create_models import AttemptCreate, CompletionCreate, FirstTaskRewardRequest, LoginRequest
from src.domain.task import Difficulty, Task, TaskUnlockState, UnlockRequirement
from src.domain.update_models import CompletionStatusUpdate
from src.domain.user import PublicUser, User


__all__ = [
    "AttemptCreate",
    "AttemptReason",
    "AttemptResult",
    "CompletionCreate",
    "CompletionStatus",
    "CompletionStatusUpdate",
    "Difficulty",
    "FirstTaskRewardRequest",
    "LoginAttempt",
    "LoginRequest",
    "PaymentStatus",
    "PublicUser",
    "Task",
    "TaskCompletion",
    "TaskUnlockState",
    "UnlockRequirement",
    "User",
]
