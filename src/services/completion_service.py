"""Task completion ledger: at most one completion per (user, task).

Lifecycle: ``under_evaluation -> approved | rejected``. Both targets are
terminal. The first catalog task skips the lifecycle and is created directly
as ``approved`` with payment ``allotted``.
"""

import logging
from collections.abc import Iterable
from datetime import UTC, datetime

from src.core.config import constants
from src.core.db_client import DatabaseClient, RecordNotFoundError, UniqueConstraintError, sanitize_param
from src.core.errors import CompletionConflictError, InvalidTransitionError, MissingFieldError
from src.core.logging import span
from src.domain.completion import TERMINAL_STATUSES, CompletionStatus, PaymentStatus, TaskCompletion
from src.domain.task import TaskUnlockState, UnlockRequirement
from src.services import task_catalog


logger = logging.getLogger(__name__)

# 1-based display order of the task gated behind the QR-scan flow
QR_GATED_TASK_ORDER = 2


def _now() -> str:
    return datetime.now(UTC).isoformat()


def _require(value: str | None, field_name: str) -> str:
    """Return the stripped value, raising MissingFieldError if blank."""
    stripped = (value or "").strip()
    if not stripped:
        msg = f"{field_name} is required"
        raise MissingFieldError(msg)
    return stripped


def _pair_filter(user_id: str, task_id: str) -> str:
    return f'user_id = "{sanitize_param(user_id)}" && task_id = "{sanitize_param(task_id)}"'


async def get_by_user(*, db: DatabaseClient, user_id: str) -> list[TaskCompletion]:
    """All completions for a user, newest first."""
    with span("completion_service.get_by_user"):
        user_id = _require(user_id, "User ID")
        records = await db.list_records(
            collection="task_completions",
            per_page=constants.DEFAULT_PER_PAGE_LIMIT,
            filter_query=f'user_id = "{sanitize_param(user_id)}"',
            sort="created_at DESC, id DESC",
        )
        return [TaskCompletion.model_validate(record) for record in records]


async def get_one(*, db: DatabaseClient, user_id: str, task_id: str) -> TaskCompletion | None:
    """The completion for (user, task), or None."""
    record = await db.get_first_record(collection="task_completions", filter_query=_pair_filter(user_id, task_id))
    return TaskCompletion.model_validate(record) if record else None


async def get_by_id(*, db: DatabaseClient, completion_id: str) -> TaskCompletion:
    """Fetch a completion by ID.

    Raises:
        RecordNotFoundError: If the completion does not exist
    """
    record = await db.get_record(collection="task_completions", record_id=completion_id)
    return TaskCompletion.model_validate(record)


async def create(
    *,
    db: DatabaseClient,
    user_id: str,
    task_id: str,
    task_title: str,
    video_file_name: str | None = None,
    video_path: str | None = None,
    status: CompletionStatus | None = None,
    payment_status: PaymentStatus | None = None,
) -> TaskCompletion:
    """Register a completion for (user, task).

    Insert-if-absent is a single insert against the unique (user_id, task_id)
    index; a duplicate is reported as a conflict no matter how many times it
    is retried or how many requests race. The first catalog task is always
    stored approved, with payment allotted unless told otherwise.

    Raises:
        MissingFieldError: If user_id, task_id or task_title is blank
        CompletionConflictError: If a completion already exists for the pair
    """
    with span("completion_service.create"):
        user_id = _require(user_id, "User ID")
        task_id = _require(task_id, "Task ID")
        task_title = _require(task_title, "Task title")

        if task_id == task_catalog.get_first_task().id:
            status = CompletionStatus.APPROVED
            payment_status = payment_status or PaymentStatus.ALLOTTED

        now = _now()
        data = {
            "user_id": user_id,
            "task_id": task_id,
            "task_title": task_title,
            "video_file_name": video_file_name,
            "video_path": video_path,
            "status": status or CompletionStatus.UNDER_EVALUATION,
            "payment_status": payment_status,
            "uploaded_at": now,
            "created_at": now,
            "updated_at": now,
        }

        try:
            record = await db.create_record(collection="task_completions", data=data)
        except UniqueConstraintError as e:
            logger.warning("Duplicate completion rejected", extra={"user_id": user_id, "task_id": task_id})
            msg = "Task already completed by this user"
            raise CompletionConflictError(msg) from e

        completion = TaskCompletion.model_validate(record)
        logger.info(
            "Created task completion",
            extra={"completion_id": completion.id, "user_id": user_id, "task_id": task_id, "status": completion.status},
        )
        return completion


async def update_status(
    *,
    db: DatabaseClient,
    completion_id: str,
    status: CompletionStatus,
    feedback: str | None = None,
) -> TaskCompletion:
    """Record an evaluator decision on a completion under evaluation.

    The status guard is part of the UPDATE itself, so two evaluators racing
    on the same completion cannot both win.

    Raises:
        InvalidTransitionError: If ``status`` is not terminal or the completion already left evaluation
        RecordNotFoundError: If the completion does not exist
    """
    with span("completion_service.update_status"):
        if status not in TERMINAL_STATUSES:
            msg = f"Cannot move a completion to {status}; only approved or rejected are allowed"
            raise InvalidTransitionError(msg)

        current = await get_by_id(db=db, completion_id=completion_id)
        if current.status != CompletionStatus.UNDER_EVALUATION:
            msg = f"Cannot change completion {completion_id}: status {current.status} is final"
            raise InvalidTransitionError(msg)

        now = _now()
        updated = await db.update_where(
            collection="task_completions",
            filter_query=(
                f'id = "{sanitize_param(completion_id)}" && status = "{CompletionStatus.UNDER_EVALUATION}"'
            ),
            data={
                "status": status,
                "feedback": feedback,
                "evaluated_at": now,
                "updated_at": now,
            },
        )
        if updated == 0:
            msg = f"Cannot change completion {completion_id}: it was evaluated concurrently"
            raise InvalidTransitionError(msg)

        logger.info(
            "Evaluated task completion",
            extra={"completion_id": completion_id, "status": status, "has_feedback": feedback is not None},
        )
        return await get_by_id(db=db, completion_id=completion_id)


async def grant_first_task_reward(*, db: DatabaseClient, user_id: str) -> tuple[TaskCompletion, bool]:
    """Ensure the user holds the approved, payment-allotted first-task completion.

    Returns:
        Tuple of (completion, created) where created is False when it already existed
    """
    with span("completion_service.grant_first_task_reward"):
        first_task = task_catalog.get_first_task()
        try:
            completion = await create(
                db=db,
                user_id=user_id,
                task_id=first_task.id,
                task_title=first_task.title,
            )
        except CompletionConflictError:
            existing = await get_one(db=db, user_id=user_id.strip(), task_id=first_task.id)
            if existing is None:
                msg = f"First-task completion for {user_id} vanished after conflict"
                raise RecordNotFoundError(msg) from None
            return existing, False

        logger.info("Granted first-task reward", extra={"user_id": user_id, "completion_id": completion.id})
        return completion, True


def compute_unlock_states(
    completions: Iterable[TaskCompletion],
    *,
    qr_scanned: bool = False,
) -> list[TaskUnlockState]:
    """Unlock state of every catalog task for the client.

    Task 1 is always unlocked, task 2 opens through the QR-scan flow, and every
    later task needs a completion for the task before it. This is a read-only
    view; ``create`` does not enforce it.
    """
    by_task = {completion.task_id: completion for completion in completions}
    states: list[TaskUnlockState] = []
    previous_completed = False

    for order, task in enumerate(task_catalog.get_available_tasks(), start=1):
        completion = by_task.get(task.id)
        completed = completion is not None

        if order == 1:
            requirement = UnlockRequirement.AUTO
            unlocked = True
        elif order == QR_GATED_TASK_ORDER:
            requirement = UnlockRequirement.QR_SCAN
            unlocked = qr_scanned or completed
        else:
            requirement = UnlockRequirement.PREVIOUS_TASK
            unlocked = previous_completed or completed

        states.append(
            TaskUnlockState(
                task_id=task.id,
                order=order,
                requirement=requirement,
                unlocked=unlocked,
                completed=completed,
                status=completion.status if completion else None,
                payment_status=completion.payment_status if completion else None,
            )
        )
        previous_completed = completed

    return states
