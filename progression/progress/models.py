"""Progress records and snapshots.

- ProgressRecord: one learner's status for one lesson, with timestamps
- ProgressSnapshot: immutable point-in-time view of a learner's records,
  the only progress input the evaluators accept
- Cassandra table definition for the persistence adapter

Absence of a record means ``not_started``; no record is needed to represent
a lesson that was never opened.
"""

from collections.abc import Iterable, Iterator, Mapping
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any


class LessonProgressStatus(str, Enum):
    """Lesson progress status."""

    NOT_STARTED = "not_started"  # Never opened (default, no record)
    IN_PROGRESS = "in_progress"  # Opened, not finished
    COMPLETED = "completed"  # Finished

    @property
    def rank(self) -> int:
        """Position in the forward-only lifecycle."""
        return _STATUS_RANK[self]


_STATUS_RANK = {
    LessonProgressStatus.NOT_STARTED: 0,
    LessonProgressStatus.IN_PROGRESS: 1,
    LessonProgressStatus.COMPLETED: 2,
}


ProgressKey = tuple[str, str, str]


def ensure_utc_aware(dt: datetime | None) -> datetime | None:
    """Ensure datetime is UTC-aware (Cassandra returns naive datetimes)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Lesson status per user
# Partition key: user_id, so one read returns the whole snapshot
# Clustering: track_id, module_id, lesson_id
LESSON_PROGRESS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.lesson_progress (
    user_id TEXT,
    track_id TEXT,
    module_id TEXT,
    lesson_id TEXT,
    status TEXT,
    started_at TIMESTAMP,
    completed_at TIMESTAMP,
    updated_at TIMESTAMP,
    PRIMARY KEY ((user_id), track_id, module_id, lesson_id)
)
"""

PROGRESS_TABLES_CQL = [
    LESSON_PROGRESS_TABLE_CQL,
]


# ==============================================================================
# Entity Classes
# ==============================================================================


class ProgressRecord:
    """Lesson progress entity for a specific user.

    Attributes:
        user_id: Learner id
        track_id: Track id
        module_id: Module id (unique within the track)
        lesson_id: Lesson id (unique within the module)
        status: Progress status (not_started, in_progress, completed)
        started_at: First time the lesson left not_started
        completed_at: Completion timestamp (null if not completed)
        updated_at: Last write timestamp
    """

    def __init__(
        self,
        user_id: str,
        track_id: str,
        module_id: str,
        lesson_id: str,
        status: LessonProgressStatus | str = LessonProgressStatus.NOT_STARTED,
        started_at: datetime | None = None,
        completed_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.user_id = user_id
        self.track_id = track_id
        self.module_id = module_id
        self.lesson_id = lesson_id
        self.status = LessonProgressStatus(status)
        self.started_at = ensure_utc_aware(started_at)
        self.completed_at = ensure_utc_aware(completed_at)
        self.updated_at = ensure_utc_aware(updated_at) or datetime.now(UTC)

    @property
    def key(self) -> ProgressKey:
        """Lookup key inside a user's snapshot."""
        return (self.track_id, self.module_id, self.lesson_id)

    @property
    def is_completed(self) -> bool:
        """Check if lesson is completed."""
        return self.status is LessonProgressStatus.COMPLETED

    @classmethod
    def from_row(cls, row: Any) -> "ProgressRecord":
        """Create ProgressRecord instance from Cassandra row."""
        return cls(
            user_id=row.user_id,
            track_id=row.track_id,
            module_id=row.module_id,
            lesson_id=row.lesson_id,
            status=row.status or LessonProgressStatus.NOT_STARTED.value,
            started_at=row.started_at,
            completed_at=row.completed_at,
            updated_at=row.updated_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "user_id": self.user_id,
            "track_id": self.track_id,
            "module_id": self.module_id,
            "lesson_id": self.lesson_id,
            "status": self.status.value,
            "started_at": self.started_at,
            "completed_at": self.completed_at,
            "updated_at": self.updated_at,
        }

    def __repr__(self) -> str:
        return (
            f"<ProgressRecord user={self.user_id} "
            f"{self.track_id}/{self.module_id}/{self.lesson_id} {self.status.value}>"
        )


class ProgressSnapshot(Mapping[ProgressKey, LessonProgressStatus]):
    """Read-only map of (track_id, module_id, lesson_id) to status.

    Missing keys read as ``not_started``. Duplicate keys in the input resolve
    last-write-wins; order of records is otherwise irrelevant.
    """

    __slots__ = ("_statuses",)

    def __init__(
        self,
        statuses: Mapping[ProgressKey, LessonProgressStatus | str] | None = None,
    ):
        self._statuses: Mapping[ProgressKey, LessonProgressStatus] = MappingProxyType(
            {key: LessonProgressStatus(value) for key, value in (statuses or {}).items()}
        )

    @classmethod
    def from_records(cls, records: Iterable[ProgressRecord]) -> "ProgressSnapshot":
        """Build a snapshot from stored records."""
        return cls({record.key: record.status for record in records})

    @classmethod
    def empty(cls) -> "ProgressSnapshot":
        return cls()

    def __getitem__(self, key: ProgressKey) -> LessonProgressStatus:
        return self._statuses[key]

    def __iter__(self) -> Iterator[ProgressKey]:
        return iter(self._statuses)

    def __len__(self) -> int:
        return len(self._statuses)

    def __repr__(self) -> str:
        return f"<ProgressSnapshot records={len(self)}>"

    def status_of(
        self, track_id: str, module_id: str, lesson_id: str
    ) -> LessonProgressStatus:
        """Status of a lesson, ``not_started`` when no record exists."""
        return self._statuses.get(
            (track_id, module_id, lesson_id), LessonProgressStatus.NOT_STARTED
        )

    def is_completed(self, track_id: str, module_id: str, lesson_id: str) -> bool:
        return (
            self.status_of(track_id, module_id, lesson_id)
            is LessonProgressStatus.COMPLETED
        )

    def for_track(self, track_id: str) -> "ProgressSnapshot":
        """Restrict the snapshot to one track."""
        return ProgressSnapshot(
            {key: status for key, status in self._statuses.items() if key[0] == track_id}
        )

    def with_status(
        self,
        track_id: str,
        module_id: str,
        lesson_id: str,
        status: LessonProgressStatus | str,
    ) -> "ProgressSnapshot":
        """Return a copy with one lesson's status replaced."""
        statuses = dict(self._statuses)
        statuses[(track_id, module_id, lesson_id)] = LessonProgressStatus(status)
        return ProgressSnapshot(statuses)
