from src.services import (
    attempt_service,
    auth_service,
    completion_service,
    level_override_service,
    task_catalog,
    user_service,
    video_service,
)


__all__ = [
    "attempt_service",
    "auth_service",
    "completion_service",
    "level_override_service",
    "task_catalog",
    "user_service",
    "video_service",
]
