"""Learner progress module.

Provides:
- Progress records and immutable snapshots
- Sequential lesson locking
- Track/module aggregation, statistics and recommendations
- Forward-only status write path over a pluggable store
"""

from .aggregator import compute_progress, recommend_lessons, summarize_tracks
from .locking import is_locked, lesson_states, next_available_lesson
from .models import (
    PROGRESS_TABLES_CQL,
    LessonProgressStatus,
    ProgressRecord,
    ProgressSnapshot,
)
from .schemas import (
    LessonAvailability,
    LessonRecommendation,
    ModuleProgressSummary,
    TrackProgress,
    UserLearningStats,
)
from .service import ProgressService
from .store import CassandraProgressStore, InMemoryProgressStore, ProgressStore


__all__ = [
    "PROGRESS_TABLES_CQL",
    "CassandraProgressStore",
    "InMemoryProgressStore",
    "LessonAvailability",
    "LessonProgressStatus",
    "LessonRecommendation",
    "ModuleProgressSummary",
    "ProgressRecord",
    "ProgressService",
    "ProgressSnapshot",
    "ProgressStore",
    "TrackProgress",
    "UserLearningStats",
    "compute_progress",
    "is_locked",
    "lesson_states",
    "next_available_lesson",
    "recommend_lessons",
    "summarize_tracks",
]
