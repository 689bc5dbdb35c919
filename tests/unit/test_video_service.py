"""Tests for video intake."""

from datetime import UTC, datetime

import pytest

from src.core.config import constants, settings
from src.core.errors import InvalidVideoTypeError, MissingFieldError, StorageError, VideoTooLargeError
from src.services import video_service


@pytest.mark.unit
@pytest.mark.parametrize("mime_type", ["image/png", "application/octet-stream", "", "text/video"])
def test_validate_video_rejects_non_video(mime_type):
    with pytest.raises(InvalidVideoTypeError):
        video_service.validate_video(declared_mime_type=mime_type, size_bytes=10)


@pytest.mark.unit
def test_validate_video_size_boundary():
    video_service.validate_video(declared_mime_type="video/mp4", size_bytes=constants.MAX_VIDEO_SIZE_BYTES)

    with pytest.raises(VideoTooLargeError):
        video_service.validate_video(declared_mime_type="video/mp4", size_bytes=constants.MAX_VIDEO_SIZE_BYTES + 1)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("original_name", "expected"),
    [
        ("clip.MOV", "9842470497_basic-coding_1704067200000.mov"),
        ("recording.webm", "9842470497_basic-coding_1704067200000.webm"),
        (None, "9842470497_basic-coding_1704067200000.mp4"),
        ("no_extension", "9842470497_basic-coding_1704067200000.mp4"),
    ],
)
def test_build_file_name(original_name, expected):
    now = datetime(2024, 1, 1, tzinfo=UTC)

    name = video_service.build_file_name(
        user_id="9842470497", task_id="basic-coding", original_name=original_name, now=now
    )

    assert name == expected


@pytest.mark.unit
async def test_store_writes_file_and_returns_public_path():
    payload = b"\x00\x00\x00\x18ftypmp42"

    stored = await video_service.store(
        file_bytes=payload,
        declared_mime_type="video/mp4",
        size_bytes=len(payload),
        user_id="9842470497",
        task_id="basic-coding",
        original_name="proof.mp4",
    )

    written = settings.uploads_dir / stored.file_name
    assert stored.file_path == f"/uploads/videos/{stored.file_name}"
    assert stored.file_name.startswith("9842470497_basic-coding_")
    assert stored.size_bytes == len(payload)
    assert stored.mime_type == "video/mp4"
    assert written.read_bytes() == payload


@pytest.mark.unit
async def test_store_uses_explicit_directory(tmp_path):
    target = tmp_path / "elsewhere"

    stored = await video_service.store(
        file_bytes=b"video",
        declared_mime_type="video/quicktime",
        size_bytes=5,
        user_id="1234567890",
        task_id="creative-art",
        original_name="art.mov",
        uploads_dir=target,
    )

    assert (target / stored.file_name).exists()


@pytest.mark.unit
async def test_store_strips_path_components_from_ids():
    stored = await video_service.store(
        file_bytes=b"video",
        declared_mime_type="video/mp4",
        size_bytes=5,
        user_id="../../etc",
        task_id="basic/../coding",
    )

    written = settings.uploads_dir / stored.file_name
    assert written.parent == settings.uploads_dir
    assert "/" not in stored.file_name
    assert stored.file_name.startswith("etc_basiccoding_")


@pytest.mark.unit
async def test_store_checks_actual_byte_count(monkeypatch):
    monkeypatch.setattr(constants, "MAX_VIDEO_SIZE_BYTES", 10)

    with pytest.raises(VideoTooLargeError):
        await video_service.store(
            file_bytes=b"x" * 20,
            declared_mime_type="video/mp4",
            size_bytes=5,
            user_id="9842470497",
            task_id="basic-coding",
        )

    assert not settings.uploads_dir.exists()


@pytest.mark.unit
async def test_store_rejects_blank_ids():
    with pytest.raises(MissingFieldError):
        await video_service.store(
            file_bytes=b"video", declared_mime_type="video/mp4", size_bytes=5, user_id="  ", task_id="basic-coding"
        )


@pytest.mark.unit
async def test_store_write_failure_is_storage_error(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("occupied")

    with pytest.raises(StorageError):
        await video_service.store(
            file_bytes=b"video",
            declared_mime_type="video/mp4",
            size_bytes=5,
            user_id="9842470497",
            task_id="basic-coding",
            uploads_dir=blocker / "videos",
        )


@pytest.mark.unit
async def test_store_accepts_49_mib_and_rejects_51_mib():
    mib = 1024 * 1024

    stored = await video_service.store(
        file_bytes=b"video",
        declared_mime_type="video/mp4",
        size_bytes=49 * mib,
        user_id="9842470497",
        task_id="basic-coding",
    )
    assert stored.size_bytes == len(b"video")

    with pytest.raises(VideoTooLargeError):
        await video_service.store(
            file_bytes=b"video",
            declared_mime_type="video/mp4",
            size_bytes=51 * mib,
            user_id="9842470497",
            task_id="public-speaking",
        )
