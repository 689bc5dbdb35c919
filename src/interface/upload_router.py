"""Video upload endpoint."""

import logging
from typing import Any

from fastapi import APIRouter, File, Form, UploadFile

from src.core.errors import MissingFieldError
from src.services import video_service


router = APIRouter(prefix="/upload", tags=["upload"])
logger = logging.getLogger(__name__)


@router.post("/video")
async def upload_video(
    video: UploadFile | None = File(default=None),
    user_id: str | None = Form(default=None, alias="userId"),
    task_id: str | None = Form(default=None, alias="taskId"),
) -> dict[str, Any]:
    """Accept a multipart proof video and return the stored file reference.

    Raises:
        MissingFieldError: 400 when the file or the ids are missing
        InvalidVideoTypeError: 400 when the file is not a video
        VideoTooLargeError: 400 when the file exceeds 50 MiB
    """
    if video is None:
        raise MissingFieldError("No video file provided")
    if not user_id or not task_id:
        raise MissingFieldError("User ID and Task ID are required")

    mime_type = video.content_type or ""

    # Reject on declared size before reading the body into memory
    if video.size is not None:
        video_service.validate_video(declared_mime_type=mime_type, size_bytes=video.size)

    file_bytes = await video.read()
    stored = await video_service.store(
        file_bytes=file_bytes,
        declared_mime_type=mime_type,
        size_bytes=video.size if video.size is not None else len(file_bytes),
        user_id=user_id,
        task_id=task_id,
        original_name=video.filename,
    )

    return {
        "success": True,
        "fileName": stored.file_name,
        "filePath": stored.file_path,
        "fileSize": stored.size_bytes,
        "fileType": stored.mime_type,
        "uploadedAt": stored.uploaded_at,
    }
