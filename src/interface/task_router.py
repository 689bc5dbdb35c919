"""Task catalog and completion ledger endpoints."""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Query, Response, status

from src.core.db_client import DatabaseClient, get_db
from src.domain.completion import CompletionStatus, TaskCompletion
from src.domain.create_models import CompletionCreate, FirstTaskRewardRequest
from src.domain.task import Task, TaskUnlockState
from src.domain.update_models import CompletionStatusUpdate
from src.services import completion_service, level_override_service, task_catalog
from src.services.auth_service import extract_phone_digits


router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)


@router.get("/available")
async def get_available_tasks() -> list[Task]:
    """The fixed task catalog in display order."""
    return task_catalog.get_available_tasks()


@router.get("/completions")
async def get_completions(
    user_id: str = Query(..., alias="userId", min_length=1),
    db: DatabaseClient = Depends(get_db),
) -> list[TaskCompletion]:
    """All completions for a user, newest first."""
    return await completion_service.get_by_user(db=db, user_id=user_id)


@router.post("/completions", status_code=status.HTTP_201_CREATED)
async def create_completion(body: CompletionCreate, db: DatabaseClient = Depends(get_db)) -> TaskCompletion:
    """Register a completion; 409 when one already exists for the user and task."""
    return await completion_service.create(
        db=db,
        user_id=body.user_id,
        task_id=body.task_id,
        task_title=body.task_title,
        video_file_name=body.video_file_name,
        video_path=body.video_path,
        status=body.status,
        payment_status=body.payment_status,
    )


@router.patch("/completions/{completion_id}/status")
async def update_completion_status(
    completion_id: str,
    body: CompletionStatusUpdate,
    db: DatabaseClient = Depends(get_db),
) -> TaskCompletion:
    """Record an evaluator decision; 409 once the completion is approved or rejected."""
    return await completion_service.update_status(
        db=db,
        completion_id=completion_id,
        status=CompletionStatus(body.status),
        feedback=body.feedback,
    )


@router.post("/first-task-reward")
async def grant_first_task_reward(
    body: FirstTaskRewardRequest,
    response: Response,
    db: DatabaseClient = Depends(get_db),
) -> TaskCompletion:
    """Grant the approved first-task completion when the user reaches the task list."""
    completion, created = await completion_service.grant_first_task_reward(db=db, user_id=body.user_id)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return completion


@router.get("/progress")
async def get_progress(
    user_id: str = Query(..., alias="userId", min_length=1),
    qr_scanned: bool = Query(default=False, alias="qrScanned"),
    db: DatabaseClient = Depends(get_db),
) -> list[TaskUnlockState]:
    """Per-task unlock state as the client presents it."""
    completions = await completion_service.get_by_user(db=db, user_id=user_id)
    return completion_service.compute_unlock_states(completions, qr_scanned=qr_scanned)


@router.get("/levels")
async def get_levels(phone: str = Query(..., min_length=1)) -> dict[str, Any]:
    """Display overrides for a phone from ``levels.json`` (or the default block)."""
    normalized = extract_phone_digits(phone) or phone
    overrides = level_override_service.get_levels_for_phone(normalized)
    return {
        "phone": normalized,
        "levels": {task_id: override.model_dump(by_alias=True, exclude_none=True) for task_id, override in overrides.items()},
    }
