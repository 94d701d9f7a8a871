# Core infrastructure
from progression.core.context import (
    clear_context,
    evaluation_context,
    get_context,
    get_request_id,
    get_track_id,
    get_user_id,
    set_request_id,
)
from progression.core.exceptions import (
    CatalogValidationError,
    InvalidPolicyError,
    InvalidTransitionError,
    LessonLockedError,
    NotFoundError,
    ProgressionError,
)
from progression.core.logging import configure_structlog, get_logger


__all__ = [
    "CatalogValidationError",
    "InvalidPolicyError",
    "InvalidTransitionError",
    "LessonLockedError",
    "NotFoundError",
    "ProgressionError",
    "clear_context",
    "configure_structlog",
    "evaluation_context",
    "get_context",
    "get_logger",
    "get_request_id",
    "get_track_id",
    "get_user_id",
    "set_request_id",
]
