"""Lesson status write path.

Business logic for:
- Forward-only status transitions (not_started -> in_progress -> completed)
- Refusing to start or complete a lesson that is still locked
- Timestamp bookkeeping on stored records
- Snapshot reads for the pure evaluators

This is the only place learner progress is mutated. Each call reads the
learner's records once before writing. Concurrent writers to the same key
resolve last-write-wins in the store, except that a store never lets a stale
write move a lesson backwards; the losing call then returns what was stored.
"""

from datetime import UTC, datetime

import structlog

from progression.core.context import evaluation_context
from progression.core.exceptions import InvalidTransitionError, LessonLockedError
from progression.curriculum.catalog import CurriculumCatalog, LessonLocation

from .aggregator import compute_progress
from .locking import is_locked
from .models import LessonProgressStatus, ProgressRecord, ProgressSnapshot
from .schemas import SetLessonStatusRequest, TrackProgress
from .store import ProgressStore


logger = structlog.get_logger(__name__)


ALLOWED_TRANSITIONS: dict[LessonProgressStatus, frozenset[LessonProgressStatus]] = {
    LessonProgressStatus.NOT_STARTED: frozenset(
        {
            LessonProgressStatus.NOT_STARTED,
            LessonProgressStatus.IN_PROGRESS,
            LessonProgressStatus.COMPLETED,
        }
    ),
    LessonProgressStatus.IN_PROGRESS: frozenset(
        {LessonProgressStatus.IN_PROGRESS, LessonProgressStatus.COMPLETED}
    ),
    LessonProgressStatus.COMPLETED: frozenset({LessonProgressStatus.COMPLETED}),
}


def validate_transition(
    current: LessonProgressStatus, target: LessonProgressStatus
) -> None:
    """Raise InvalidTransitionError unless ``current -> target`` is allowed.

    Repeating the current status is allowed (idempotent write).
    """
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(
            f"Cannot change lesson status from '{current.value}' to '{target.value}'"
        )


def _find_record(
    records: list[ProgressRecord], track_id: str, module_id: str, lesson_id: str
) -> ProgressRecord | None:
    key = (track_id, module_id, lesson_id)
    return next((record for record in records if record.key == key), None)


class ProgressService:
    """Service for learner progress writes and snapshot reads."""

    def __init__(self, catalog: CurriculumCatalog, store: ProgressStore):
        self.catalog = catalog
        self.store = store

    async def get_snapshot(self, user_id: str) -> ProgressSnapshot:
        """Point-in-time snapshot of all of a learner's records."""
        records = await self.store.get_progress(user_id)
        return ProgressSnapshot.from_records(records)

    async def get_track_progress(self, user_id: str, track_id: str) -> TrackProgress:
        """Aggregate a learner's progress through one track."""
        track = self.catalog.track(track_id)
        snapshot = await self.get_snapshot(user_id)
        return compute_progress(track, snapshot)

    async def set_lesson_status(
        self,
        user_id: str,
        track_id: str,
        module_id: str,
        lesson_id: str,
        status: LessonProgressStatus | str,
    ) -> ProgressRecord:
        """Move a lesson to a new status.

        Args:
            user_id: Learner id
            track_id: Track id
            module_id: Module id
            lesson_id: Lesson id
            status: Target status

        Returns:
            The stored record (or the unchanged one for a repeated status)

        Raises:
            NotFoundError: If the lesson is not in the catalog
            InvalidTransitionError: If the change would regress the lesson
            LessonLockedError: If the lesson is still locked
        """
        try:
            target = LessonProgressStatus(status)
        except ValueError:
            raise InvalidTransitionError(f"Unknown lesson status '{status}'") from None

        with evaluation_context(user_id=user_id, track_id=track_id):
            location = self.catalog.locate(track_id, module_id, lesson_id)
            records = await self.store.get_progress(user_id)
            return await self._transition(user_id, location, records, target)

    async def _transition(
        self,
        user_id: str,
        location: LessonLocation,
        records: list[ProgressRecord],
        target: LessonProgressStatus,
    ) -> ProgressRecord:
        ref = location.ref
        existing = _find_record(records, ref.track_id, ref.module_id, ref.lesson_id)
        current = existing.status if existing else LessonProgressStatus.NOT_STARTED

        try:
            validate_transition(current, target)
        except InvalidTransitionError:
            logger.warning(
                "lesson_status_rejected",
                lesson_id=ref.lesson_id,
                current=current.value,
                target=target.value,
            )
            raise

        if current is target:
            logger.debug("lesson_status_unchanged", lesson_id=ref.lesson_id)
            return existing or ProgressRecord(
                user_id, ref.track_id, ref.module_id, ref.lesson_id, current
            )

        snapshot = ProgressSnapshot.from_records(records)
        if is_locked(
            location.track, location.module_index, location.lesson_index, snapshot
        ):
            logger.warning(
                "lesson_status_rejected",
                lesson_id=ref.lesson_id,
                current=current.value,
                target=target.value,
                reason="locked",
            )
            raise LessonLockedError(
                f"Lesson '{ref.lesson_id}' in module '{ref.module_id}' is locked"
            )

        now = datetime.now(UTC)
        record = ProgressRecord(
            user_id=user_id,
            track_id=ref.track_id,
            module_id=ref.module_id,
            lesson_id=ref.lesson_id,
            status=target,
            started_at=(existing.started_at if existing else None) or now,
            completed_at=now if target is LessonProgressStatus.COMPLETED else None,
            updated_at=now,
        )

        if not await self.store.save_record(record):
            # A concurrent write moved the lesson further; keep what it stored.
            stored = _find_record(
                await self.store.get_progress(user_id),
                ref.track_id,
                ref.module_id,
                ref.lesson_id,
            )
            logger.info(
                "lesson_status_superseded",
                lesson_id=ref.lesson_id,
                status=target.value,
                stored=stored.status.value if stored else None,
            )
            return stored or record

        logger.info(
            "lesson_status_changed",
            module_id=ref.module_id,
            lesson_id=ref.lesson_id,
            previous=current.value,
            status=target.value,
        )
        return record

    async def apply(self, request: SetLessonStatusRequest) -> ProgressRecord:
        """Apply a validated status change request."""
        return await self.set_lesson_status(
            request.user_id,
            request.track_id,
            request.module_id,
            request.lesson_id,
            request.status,
        )

    async def start_lesson(
        self, user_id: str, track_id: str, module_id: str, lesson_id: str
    ) -> ProgressRecord:
        """Mark a lesson as opened.

        Re-opening a completed lesson is a no-op rather than a regression.
        """
        with evaluation_context(user_id=user_id, track_id=track_id):
            location = self.catalog.locate(track_id, module_id, lesson_id)
            records = await self.store.get_progress(user_id)
            existing = _find_record(records, track_id, module_id, lesson_id)
            if existing is not None and existing.is_completed:
                return existing
            return await self._transition(
                user_id, location, records, LessonProgressStatus.IN_PROGRESS
            )

    async def complete_lesson(
        self, user_id: str, track_id: str, module_id: str, lesson_id: str
    ) -> ProgressRecord:
        """Mark a lesson as completed."""
        return await self.set_lesson_status(
            user_id, track_id, module_id, lesson_id, LessonProgressStatus.COMPLETED
        )
