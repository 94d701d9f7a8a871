"""Sequential learning progression and certification eligibility engine."""

from progression.core.exceptions import (
    CatalogValidationError,
    InvalidPolicyError,
    InvalidTransitionError,
    LessonLockedError,
    NotFoundError,
    ProgressionError,
)
from progression.engine import (
    ProgressionEngine,
    compute_progress,
    evaluate_certificate_eligibility,
    is_lesson_locked,
)


__version__ = "0.1.0"

__all__ = [
    "CatalogValidationError",
    "InvalidPolicyError",
    "InvalidTransitionError",
    "LessonLockedError",
    "NotFoundError",
    "ProgressionEngine",
    "ProgressionError",
    "compute_progress",
    "evaluate_certificate_eligibility",
    "is_lesson_locked",
]
