"""Progress aggregation.

Business logic for:
- Track completion counts and percentage
- Per-module breakdown
- Available (unlocked) lesson count
- Cross-track statistics and next-lesson recommendations

Aggregation is a pure function of (track, snapshot): no clock, no I/O, no
dependence on call order.
"""

from collections.abc import Iterable
from decimal import ROUND_HALF_UP, Decimal

from progression.config import get_settings
from progression.curriculum.models import Track

from .locking import lesson_states
from .models import LessonProgressStatus, ProgressSnapshot
from .schemas import (
    LessonRecommendation,
    ModuleProgressSummary,
    TrackProgress,
    UserLearningStats,
)


def completion_percentage(completed: int, total: int) -> int:
    """Whole-number percentage, rounding halves up; 0 when total is 0."""
    if total <= 0:
        return 0
    ratio = Decimal(100 * completed) / Decimal(total)
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def _module_status(completed: int, started: int, total: int) -> LessonProgressStatus:
    if completed == total:
        return LessonProgressStatus.COMPLETED
    if completed > 0 or started > 0:
        return LessonProgressStatus.IN_PROGRESS
    return LessonProgressStatus.NOT_STARTED


def compute_progress(track: Track, snapshot: ProgressSnapshot) -> TrackProgress:
    """Aggregate a learner's progress through a track.

    Args:
        track: Track to aggregate
        snapshot: Learner progress

    Returns:
        TrackProgress with counts, percentage, module breakdown and the number
        of lessons currently unlocked
    """
    states = lesson_states(track, snapshot)
    available = sum(1 for state in states if not state.locked)

    modules: list[ModuleProgressSummary] = []
    total_minutes = 0
    completed_minutes = 0
    for module in track.modules:
        completed = 0
        started = 0
        for lesson in module.lessons:
            status = snapshot.status_of(track.id, module.id, lesson.id)
            total_minutes += lesson.duration_min
            if status is LessonProgressStatus.COMPLETED:
                completed += 1
                completed_minutes += lesson.duration_min
            elif status is LessonProgressStatus.IN_PROGRESS:
                started += 1

        total = len(module.lessons)
        modules.append(
            ModuleProgressSummary(
                module_id=module.id,
                completed_count=completed,
                total_count=total,
                is_complete=completed == total,
                status=_module_status(completed, started, total),
            )
        )

    completed_lessons = sum(module.completed_count for module in modules)
    total_lessons = sum(module.total_count for module in modules)

    return TrackProgress(
        track_id=track.id,
        completed_lessons=completed_lessons,
        total_lessons=total_lessons,
        completion_percentage=completion_percentage(completed_lessons, total_lessons),
        available_lessons=available,
        modules=tuple(modules),
        total_minutes=total_minutes,
        completed_minutes=completed_minutes,
    )


def summarize_tracks(
    tracks: Iterable[Track], snapshot: ProgressSnapshot
) -> UserLearningStats:
    """Learning statistics across several tracks."""
    results = [compute_progress(track, snapshot) for track in tracks]

    total_lessons = sum(result.total_lessons for result in results)
    completed_lessons = sum(result.completed_lessons for result in results)

    return UserLearningStats(
        total_tracks=len(results),
        completed_tracks=sum(1 for result in results if result.is_complete),
        total_lessons=total_lessons,
        completed_lessons=completed_lessons,
        completion_rate=completion_percentage(completed_lessons, total_lessons),
        total_minutes=sum(result.total_minutes for result in results),
        completed_minutes=sum(result.completed_minutes for result in results),
    )


def recommend_lessons(
    tracks: Iterable[Track],
    snapshot: ProgressSnapshot,
    limit: int | None = None,
) -> list[LessonRecommendation]:
    """Unlocked, not yet completed lessons in catalog order.

    Args:
        tracks: Tracks to scan, in the order they should be recommended
        snapshot: Learner progress
        limit: Max number of lessons; defaults to the configured limit

    Returns:
        Up to ``limit`` recommendations
    """
    if limit is None:
        limit = get_settings().recommendation_limit

    recommendations: list[LessonRecommendation] = []
    for track in tracks:
        for state in lesson_states(track, snapshot):
            if len(recommendations) >= limit:
                return recommendations
            if state.locked or state.completed:
                continue
            module = track.modules[state.module_index]
            lesson = module.lessons[state.lesson_index]
            recommendations.append(
                LessonRecommendation(
                    track_id=track.id,
                    track_title=track.title,
                    module_id=module.id,
                    module_title=module.title,
                    lesson_id=lesson.id,
                    lesson_title=lesson.title,
                    lesson_type=lesson.type.value,
                    duration_min=lesson.duration_min,
                    status=state.status,
                )
            )
    return recommendations
