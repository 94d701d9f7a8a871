"""Pydantic schemas for progress evaluation results.

Response models for:
- Per-lesson availability (lock state)
- Module and track aggregation
- Cross-track learning statistics and recommendations
- Write path requests

All result models are frozen so two evaluations over identical inputs compare
equal field by field.
"""

from pydantic import BaseModel, ConfigDict, Field

from .models import LessonProgressStatus


class ResultModel(BaseModel):
    """Base for immutable evaluation results."""

    model_config = ConfigDict(frozen=True)


# ==============================================================================
# Lesson Availability Schemas
# ==============================================================================


class LessonAvailability(ResultModel):
    """Lock state and status of one lesson at its catalog position."""

    track_id: str
    module_id: str
    lesson_id: str
    module_index: int = Field(..., ge=0)
    lesson_index: int = Field(..., ge=0)
    status: LessonProgressStatus
    locked: bool

    @property
    def completed(self) -> bool:
        return self.status is LessonProgressStatus.COMPLETED


# ==============================================================================
# Aggregation Schemas
# ==============================================================================


class ModuleProgressSummary(ResultModel):
    """Completion counts for one module."""

    module_id: str
    completed_count: int = Field(..., ge=0)
    total_count: int = Field(..., ge=0)
    is_complete: bool
    status: LessonProgressStatus


class TrackProgress(ResultModel):
    """Aggregated progress of one learner through one track."""

    track_id: str
    completed_lessons: int = Field(..., ge=0)
    total_lessons: int = Field(..., ge=0)
    completion_percentage: int = Field(..., ge=0, le=100)
    available_lessons: int = Field(..., ge=0)
    modules: tuple[ModuleProgressSummary, ...] = ()
    total_minutes: int = Field(0, ge=0, description="Sum of lesson durations")
    completed_minutes: int = Field(0, ge=0, description="Duration of completed lessons")

    @property
    def is_complete(self) -> bool:
        return self.total_lessons > 0 and self.completed_lessons == self.total_lessons


class UserLearningStats(ResultModel):
    """Totals across several tracks."""

    total_tracks: int = Field(..., ge=0)
    completed_tracks: int = Field(..., ge=0)
    total_lessons: int = Field(..., ge=0)
    completed_lessons: int = Field(..., ge=0)
    completion_rate: int = Field(..., ge=0, le=100)
    total_minutes: int = Field(..., ge=0)
    completed_minutes: int = Field(..., ge=0)


class LessonRecommendation(ResultModel):
    """Next lesson suggestion (unlocked and not completed)."""

    track_id: str
    track_title: str
    module_id: str
    module_title: str
    lesson_id: str
    lesson_title: str
    lesson_type: str
    duration_min: int
    status: LessonProgressStatus


# ==============================================================================
# Write Path Schemas
# ==============================================================================


class SetLessonStatusRequest(BaseModel):
    """Request to move a lesson to a new status."""

    user_id: str = Field(..., min_length=1, description="Learner id")
    track_id: str = Field(..., min_length=1, description="Track id")
    module_id: str = Field(..., min_length=1, description="Module id")
    lesson_id: str = Field(..., min_length=1, description="Lesson id")
    status: LessonProgressStatus = Field(..., description="Target status")
