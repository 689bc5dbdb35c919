"""Video intake: validate uploaded proof videos and write them to the uploads directory."""

import asyncio
import logging
import re
from datetime import UTC, datetime
from pathlib import Path

from pydantic import BaseModel

from src.core.config import constants, settings
from src.core.errors import InvalidVideoTypeError, MissingFieldError, StorageError, VideoTooLargeError
from src.core.logging import span


logger = logging.getLogger(__name__)

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")


class StoredVideo(BaseModel):
    """Reference to a stored video, later embedded into a task completion."""

    file_name: str
    file_path: str
    size_bytes: int
    mime_type: str
    uploaded_at: str


def _safe_component(value: str, field_name: str) -> str:
    cleaned = _UNSAFE_NAME_CHARS.sub("", (value or "").strip())
    if not cleaned:
        msg = f"{field_name} is required"
        raise MissingFieldError(msg)
    return cleaned


def _extension(original_name: str | None) -> str:
    suffix = Path(original_name or "").suffix.lstrip(".")
    suffix = re.sub(r"[^A-Za-z0-9]", "", suffix).lower()
    return suffix or constants.DEFAULT_VIDEO_EXTENSION


def validate_video(*, declared_mime_type: str, size_bytes: int) -> None:
    """Reject non-video MIME types and files over the size limit.

    Raises:
        InvalidVideoTypeError: If the MIME type does not start with ``video/``
        VideoTooLargeError: If the file is larger than 50 MiB
    """
    if not (declared_mime_type or "").lower().startswith("video/"):
        msg = "File must be a video"
        raise InvalidVideoTypeError(msg)

    if size_bytes > constants.MAX_VIDEO_SIZE_BYTES:
        msg = "Video file size must be less than 50MB"
        raise VideoTooLargeError(msg)


def build_file_name(*, user_id: str, task_id: str, original_name: str | None, now: datetime) -> str:
    """``{user_id}_{task_id}_{epoch_millis}.{ext}``."""
    epoch_millis = int(now.timestamp() * 1000)
    return f"{user_id}_{task_id}_{epoch_millis}.{_extension(original_name)}"


async def store(
    *,
    file_bytes: bytes,
    declared_mime_type: str,
    size_bytes: int,
    user_id: str,
    task_id: str,
    original_name: str | None = None,
    uploads_dir: Path | None = None,
) -> StoredVideo:
    """Validate and persist an uploaded video.

    Returns a public relative path (``/uploads/videos/<file>``), not the bytes.
    The uploads directory is created on first use.
    """
    with span("video_service.store"):
        safe_user_id = _safe_component(user_id, "User ID")
        safe_task_id = _safe_component(task_id, "Task ID")

        # The limit applies to whichever of declared and received size is larger
        validate_video(declared_mime_type=declared_mime_type, size_bytes=max(size_bytes, len(file_bytes)))

        now = datetime.now(UTC)
        file_name = build_file_name(user_id=safe_user_id, task_id=safe_task_id, original_name=original_name, now=now)

        target_dir = uploads_dir or settings.uploads_dir
        target_path = target_dir / file_name

        def _write() -> None:
            target_dir.mkdir(parents=True, exist_ok=True)
            target_path.write_bytes(file_bytes)

        try:
            await asyncio.to_thread(_write)
        except OSError as e:
            logger.error("video_write_failed", extra={"file_name": file_name, "error": str(e)})
            msg = f"Failed to write video {file_name}: {e}"
            raise StorageError(msg) from e

        logger.info(
            "Stored video",
            extra={
                "user_id": safe_user_id,
                "task_id": safe_task_id,
                "file_name": file_name,
                "size_bytes": len(file_bytes),
            },
        )
        return StoredVideo(
            file_name=file_name,
            file_path=f"{constants.UPLOADS_URL_PREFIX}/{file_name}",
            size_bytes=len(file_bytes),
            mime_type=declared_mime_type,
            uploaded_at=now.isoformat(),
        )
