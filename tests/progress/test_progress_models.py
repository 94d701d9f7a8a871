"""Tests for progress records and snapshots."""

from datetime import UTC, datetime
from types import SimpleNamespace

import pytest

from progression.progress.models import (
    LessonProgressStatus,
    ProgressRecord,
    ProgressSnapshot,
    ensure_utc_aware,
)


class TestLessonProgressStatus:
    """Tests for status ordering."""

    def test_rank_follows_lifecycle(self):
        assert (
            LessonProgressStatus.NOT_STARTED.rank
            < LessonProgressStatus.IN_PROGRESS.rank
            < LessonProgressStatus.COMPLETED.rank
        )

    def test_unknown_value_rejected(self):
        with pytest.raises(ValueError):
            LessonProgressStatus("done")


class TestProgressRecord:
    """Tests for ProgressRecord entity."""

    def test_key_and_completion(self):
        record = ProgressRecord("u1", "T1", "m0", "L1", "completed")
        assert record.key == ("T1", "m0", "L1")
        assert record.status is LessonProgressStatus.COMPLETED
        assert record.is_completed is True

    def test_from_row_makes_timestamps_aware(self):
        row = SimpleNamespace(
            user_id="u1",
            track_id="T1",
            module_id="m0",
            lesson_id="L1",
            status=None,
            started_at=datetime(2025, 1, 1, 12, 0),
            completed_at=None,
            updated_at=datetime(2025, 1, 2, 12, 0),
        )

        record = ProgressRecord.from_row(row)

        assert record.status is LessonProgressStatus.NOT_STARTED
        assert record.started_at.tzinfo is UTC
        assert record.updated_at == datetime(2025, 1, 2, 12, 0, tzinfo=UTC)

    def test_to_dict(self):
        record = ProgressRecord("u1", "T1", "m0", "L1", LessonProgressStatus.IN_PROGRESS)
        data = record.to_dict()
        assert data["status"] == "in_progress"
        assert data["lesson_id"] == "L1"

    def test_ensure_utc_aware_none(self):
        assert ensure_utc_aware(None) is None


class TestProgressSnapshot:
    """Tests for ProgressSnapshot."""

    def test_missing_key_is_not_started(self):
        snapshot = ProgressSnapshot.empty()
        assert snapshot.status_of("T", "m", "l") is LessonProgressStatus.NOT_STARTED
        assert snapshot.is_completed("T", "m", "l") is False

    def test_from_records_last_write_wins(self):
        records = [
            ProgressRecord("u1", "T1", "m0", "L1", "in_progress"),
            ProgressRecord("u1", "T1", "m0", "L1", "completed"),
        ]
        snapshot = ProgressSnapshot.from_records(records)
        assert len(snapshot) == 1
        assert snapshot.is_completed("T1", "m0", "L1")

    def test_is_read_only(self):
        snapshot = ProgressSnapshot({("T", "m", "l"): "completed"})
        with pytest.raises(TypeError):
            snapshot[("T", "m", "l")] = LessonProgressStatus.NOT_STARTED  # type: ignore[index]

    def test_for_track(self):
        snapshot = ProgressSnapshot(
            {("A", "m", "l"): "completed", ("B", "m", "l"): "in_progress"}
        )
        only_a = snapshot.for_track("A")
        assert list(only_a) == [("A", "m", "l")]

    def test_with_status_returns_copy(self):
        snapshot = ProgressSnapshot.empty()
        updated = snapshot.with_status("T", "m", "l", "completed")
        assert len(snapshot) == 0
        assert updated.is_completed("T", "m", "l")

    def test_equality_by_content(self):
        a = ProgressSnapshot({("T", "m", "l"): "completed"})
        b = ProgressSnapshot({("T", "m", "l"): LessonProgressStatus.COMPLETED})
        assert a == b
