"""Progress persistence adapters.

The engine only needs two operations from storage: read all records of a
learner, and write one record forward. A write never moves a stored lesson
backwards; when a concurrent writer got further first, the write is dropped
and ``save_record`` returns False. Caching, retries and network failures are
the adapter's business; the engine calls these as black boxes.

Adapters:
- InMemoryProgressStore: process-local dictionary, for tests and single-process use
- CassandraProgressStore: lesson_progress table via cassandra-asyncio-driver
"""

from typing import TYPE_CHECKING, Protocol

import structlog

from .models import ProgressKey, ProgressRecord


if TYPE_CHECKING:
    from cassandra.cluster import Session

logger = structlog.get_logger(__name__)


class ProgressStore(Protocol):
    """Contract for progress persistence."""

    async def get_progress(self, user_id: str) -> list[ProgressRecord]:
        """Get all progress records of a learner."""
        ...

    async def save_record(self, record: ProgressRecord) -> bool:
        """Write the record for its (user, lesson) key.

        Returns:
            False if the stored record was already further along
        """
        ...


class InMemoryProgressStore:
    """Dictionary-backed store; the latest forward write wins per (user, lesson) key."""

    def __init__(self, records: list[ProgressRecord] | None = None):
        self._records: dict[str, dict[ProgressKey, ProgressRecord]] = {}
        for record in records or []:
            self._records.setdefault(record.user_id, {})[record.key] = record

    async def get_progress(self, user_id: str) -> list[ProgressRecord]:
        return list(self._records.get(user_id, {}).values())

    async def save_record(self, record: ProgressRecord) -> bool:
        user_records = self._records.setdefault(record.user_id, {})
        stored = user_records.get(record.key)
        if stored is not None and stored.status.rank > record.status.rank:
            return False
        user_records[record.key] = record
        return True


class CassandraProgressStore:
    """Store backed by the ``lesson_progress`` Cassandra table.

    ``in_progress`` is only ever written for a lesson that has no row yet, so
    it goes through a lightweight transaction (``IF NOT EXISTS``) and cannot
    overwrite a concurrent completion. ``completed`` is the final status and
    is written as a plain upsert.
    """

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._get_user_progress = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.lesson_progress
            WHERE user_id = ?
        """)

        self._upsert_lesson_progress = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lesson_progress
            (user_id, track_id, module_id, lesson_id, status,
             started_at, completed_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._insert_lesson_progress_if_absent = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.lesson_progress
            (user_id, track_id, module_id, lesson_id, status,
             started_at, completed_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            IF NOT EXISTS
        """)

    async def get_progress(self, user_id: str) -> list[ProgressRecord]:
        """Get all progress records of a learner (single partition read)."""
        rows = await self.session.aexecute(self._get_user_progress, [user_id])
        return [ProgressRecord.from_row(row) for row in rows]

    async def save_record(self, record: ProgressRecord) -> bool:
        """Write one record forward.

        Returns:
            False if a row already existed for a conditional ``in_progress``
            write
        """
        params = [
            record.user_id,
            record.track_id,
            record.module_id,
            record.lesson_id,
            record.status.value,
            record.started_at,
            record.completed_at,
            record.updated_at,
        ]

        if record.is_completed:
            await self.session.aexecute(self._upsert_lesson_progress, params)
            applied = True
        else:
            result = await self.session.aexecute(
                self._insert_lesson_progress_if_absent, params
            )
            applied = result.was_applied

        logger.debug(
            "lesson_progress_saved",
            user_id=record.user_id,
            lesson_id=record.lesson_id,
            status=record.status.value,
            applied=applied,
        )
        return applied
