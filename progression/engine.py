"""Caller-facing API of the progression engine.

Every function here is pure: it takes the track and an explicit progress
snapshot and never reaches into storage or global state, so it can be called
identically from an API handler, a worker, or a client-side renderer.

``ProgressionEngine`` is the same API bound to a catalog, addressed by track
id instead of by Track object.
"""

from progression.certificates import EligibilityResult, evaluate
from progression.curriculum.catalog import (
    CurriculumCatalog,
    LessonNeighbours,
    locate_lesson,
    neighbours,
)
from progression.curriculum.models import CertificationPolicy, Track
from progression.progress import aggregator, locking
from progression.progress.models import ProgressSnapshot
from progression.progress.schemas import (
    LessonAvailability,
    LessonRecommendation,
    TrackProgress,
    UserLearningStats,
)


def is_lesson_locked(
    track: Track, module_id: str, lesson_id: str, snapshot: ProgressSnapshot
) -> bool:
    """Whether a lesson, addressed by ids, is locked for the learner.

    Raises:
        NotFoundError: If the module or lesson is not part of the track
    """
    location = locate_lesson(track, module_id, lesson_id)
    return locking.is_locked(
        track, location.module_index, location.lesson_index, snapshot
    )


def compute_progress(track: Track, snapshot: ProgressSnapshot) -> TrackProgress:
    """Aggregated progress of a learner through a track."""
    return aggregator.compute_progress(track, snapshot)


def evaluate_certificate_eligibility(
    track: Track,
    snapshot: ProgressSnapshot,
    assessment_score: float | None = None,
    policy: CertificationPolicy | None = None,
) -> EligibilityResult:
    """Aggregate progress and evaluate the track's certification policy.

    Raises:
        InvalidPolicyError: If the policy thresholds are malformed
    """
    progress = aggregator.compute_progress(track, snapshot)
    return evaluate(
        track,
        progress,
        policy,
        snapshot=snapshot,
        assessment_score=assessment_score,
    )


class ProgressionEngine:
    """Engine API over a fixed catalog."""

    def __init__(self, catalog: CurriculumCatalog):
        self.catalog = catalog

    def is_lesson_locked(
        self,
        track_id: str,
        module_id: str,
        lesson_id: str,
        snapshot: ProgressSnapshot,
    ) -> bool:
        return is_lesson_locked(
            self.catalog.track(track_id), module_id, lesson_id, snapshot
        )

    def lesson_states(
        self, track_id: str, snapshot: ProgressSnapshot
    ) -> list[LessonAvailability]:
        return locking.lesson_states(self.catalog.track(track_id), snapshot)

    def next_lesson(
        self, track_id: str, snapshot: ProgressSnapshot
    ) -> LessonAvailability | None:
        """Where the learner should resume (None once the track is done)."""
        return locking.next_available_lesson(self.catalog.track(track_id), snapshot)

    def neighbours(self, track_id: str, module_id: str, lesson_id: str) -> LessonNeighbours:
        location = self.catalog.locate(track_id, module_id, lesson_id)
        return neighbours(location.track, location.module_index, location.lesson_index)

    def compute_progress(self, track_id: str, snapshot: ProgressSnapshot) -> TrackProgress:
        return compute_progress(self.catalog.track(track_id), snapshot)

    def evaluate_certificate_eligibility(
        self,
        track_id: str,
        snapshot: ProgressSnapshot,
        assessment_score: float | None = None,
        policy: CertificationPolicy | None = None,
    ) -> EligibilityResult:
        return evaluate_certificate_eligibility(
            self.catalog.track(track_id), snapshot, assessment_score, policy
        )

    def learning_stats(
        self, snapshot: ProgressSnapshot, role: str | None = None
    ) -> UserLearningStats:
        """Totals over every track (or only the tracks for a role)."""
        return aggregator.summarize_tracks(self.catalog.tracks_for_role(role), snapshot)

    def recommendations(
        self,
        snapshot: ProgressSnapshot,
        role: str | None = None,
        limit: int | None = None,
    ) -> list[LessonRecommendation]:
        """Next unlocked lessons across the tracks for a role."""
        return aggregator.recommend_lessons(
            self.catalog.tracks_for_role(role), snapshot, limit
        )
