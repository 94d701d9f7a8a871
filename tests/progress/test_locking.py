"""Tests for sequential lesson locking.

Covers:
- The three unlocking rules and their precedence
- Empty modules
- Out-of-range positions
- Monotonic unlocking and first-lesson invariant over enumerated progress
"""

import pytest

from progression.core.exceptions import NotFoundError
from progression.curriculum.catalog import iter_positions
from progression.progress.locking import (
    first_incomplete_lesson,
    is_locked,
    is_module_complete,
    lesson_states,
    next_available_lesson,
)
from progression.progress.models import ProgressSnapshot
from tests.factories import (
    COMPLETED,
    IN_PROGRESS,
    all_snapshots,
    build_track,
    completed_prefix,
    snapshot_of,
)


TRACK_SHAPES = [[2, 2], [1, 0, 3], [0, 2], [3], [1, 1, 1], [2, 0, 0, 2]]


def locked_flags(track, snapshot) -> list[bool]:
    return [
        is_locked(track, loc.module_index, loc.lesson_index, snapshot)
        for loc in iter_positions(track)
    ]


class TestRules:
    """Tests for the individual unlocking rules."""

    def test_first_lesson_never_locked(self, track_t1):
        assert is_locked(track_t1, 0, 0, ProgressSnapshot.empty()) is False

    def test_later_lesson_needs_previous_completed(self, track_t1):
        assert is_locked(track_t1, 0, 1, ProgressSnapshot.empty()) is True
        snapshot = snapshot_of(track_t1, {"L1": COMPLETED})
        assert is_locked(track_t1, 0, 1, snapshot) is False

    def test_in_progress_previous_does_not_unlock(self, track_t1):
        snapshot = snapshot_of(track_t1, {"L1": IN_PROGRESS})
        assert is_locked(track_t1, 0, 1, snapshot) is True

    def test_first_lesson_of_module_needs_whole_previous_module(self, track_t1):
        only_first = snapshot_of(track_t1, {"L1": COMPLETED})
        assert is_locked(track_t1, 1, 0, only_first) is True

        only_second = snapshot_of(track_t1, {"L2": COMPLETED})
        assert is_locked(track_t1, 1, 0, only_second) is True

        both = snapshot_of(track_t1, {"L1": COMPLETED, "L2": COMPLETED})
        assert is_locked(track_t1, 1, 0, both) is False

    def test_only_immediate_predecessor_is_checked_within_module(self):
        track = build_track("T", [3])
        snapshot = snapshot_of(track, {"L2": COMPLETED})
        assert is_locked(track, 0, 2, snapshot) is False

    def test_progress_in_other_track_is_ignored(self, track_t1):
        snapshot = ProgressSnapshot({("OTHER", "m0", "L1"): COMPLETED})
        assert is_locked(track_t1, 0, 1, snapshot) is True


class TestEmptyModules:
    """Tests for modules without lessons."""

    def test_empty_module_is_vacuously_complete(self):
        track = build_track("T", [0])
        assert is_module_complete(track, track.modules[0], ProgressSnapshot.empty())

    def test_lesson_after_empty_module_checks_nearest_non_empty_module(self):
        track = build_track("T", [1, 0, 1])
        assert is_locked(track, 2, 0, ProgressSnapshot.empty()) is True
        snapshot = snapshot_of(track, {"L1": COMPLETED})
        assert is_locked(track, 2, 0, snapshot) is False

    def test_first_lesson_after_leading_empty_module_is_open(self):
        track = build_track("T", [0, 2])
        assert is_locked(track, 1, 0, ProgressSnapshot.empty()) is False
        assert is_locked(track, 1, 1, ProgressSnapshot.empty()) is True


class TestOutOfRange:
    """Positions outside the catalog raise instead of reporting locked."""

    @pytest.mark.parametrize(
        "module_index,lesson_index",
        [(2, 0), (0, 5), (-1, 0), (0, -1), (99, 99)],
    )
    def test_raises_not_found(self, track_t1, module_index, lesson_index):
        with pytest.raises(NotFoundError):
            is_locked(track_t1, module_index, lesson_index, ProgressSnapshot.empty())

    def test_empty_module_has_no_lesson_positions(self):
        track = build_track("T", [1, 0])
        with pytest.raises(NotFoundError):
            is_locked(track, 1, 0, ProgressSnapshot.empty())


class TestProperties:
    """Invariants checked over enumerated tracks and progress."""

    @pytest.mark.parametrize("shape", TRACK_SHAPES)
    def test_monotonic_unlocking(self, shape):
        track = build_track("T", shape)
        total = track.total_lessons
        for count in range(total + 1):
            snapshots = [completed_prefix(track, count)]
            if count < total:
                next_id = list(iter_positions(track))[count].lesson.id
                snapshots.append(
                    snapshots[0].with_status("T", *_ids(track, next_id), IN_PROGRESS)
                )
            for snapshot in snapshots:
                flags = locked_flags(track, snapshot)
                first_locked = flags.index(True) if True in flags else len(flags)
                assert all(flags[first_locked:]), (shape, count, flags)
                assert not any(flags[:first_locked])

    @pytest.mark.parametrize("shape", [[2, 2], [0, 2], [1, 0, 2]])
    def test_first_lesson_never_locked_for_any_progress(self, shape):
        track = build_track("T", shape)
        first = next(iter_positions(track))
        for snapshot in all_snapshots(track):
            assert not is_locked(track, first.module_index, first.lesson_index, snapshot)

    @pytest.mark.parametrize("shape", TRACK_SHAPES)
    def test_completed_prefix_unlocks_exactly_one_more(self, shape):
        track = build_track("T", shape)
        total = track.total_lessons
        for count in range(total + 1):
            flags = locked_flags(track, completed_prefix(track, count))
            assert flags.count(False) == min(count + 1, total)


def _ids(track, lesson_id) -> tuple[str, str]:
    for loc in iter_positions(track):
        if loc.lesson.id == lesson_id:
            return loc.module.id, loc.lesson.id
    raise AssertionError(lesson_id)


class TestLessonStates:
    """Tests for per-lesson availability listing."""

    def test_states_in_catalog_order(self, track_t1):
        snapshot = snapshot_of(track_t1, {"L1": COMPLETED, "L2": IN_PROGRESS})
        states = lesson_states(track_t1, snapshot)

        assert [s.lesson_id for s in states] == ["L1", "L2", "L3", "L4"]
        assert [s.locked for s in states] == [False, False, True, True]
        assert states[0].completed is True
        assert states[1].status == IN_PROGRESS

    def test_next_available_lesson(self, track_t1):
        snapshot = snapshot_of(track_t1, {"L1": COMPLETED, "L2": COMPLETED})
        state = next_available_lesson(track_t1, snapshot)
        assert (state.module_id, state.lesson_id) == ("m1", "L3")

    def test_next_available_lesson_none_when_done(self, track_t1):
        assert next_available_lesson(track_t1, completed_prefix(track_t1, 4)) is None

    def test_first_incomplete_lesson_ignores_later_completions(self, track_t1):
        snapshot = snapshot_of(track_t1, {"L2": COMPLETED})
        state = first_incomplete_lesson(track_t1, snapshot)
        assert state.lesson_id == "L1"
        assert state.locked is False


class TestScenario:
    """Track T1 walkthrough."""

    def test_unlocks_step_by_step(self, track_t1):
        assert locked_flags(track_t1, ProgressSnapshot.empty()) == [
            False,
            True,
            True,
            True,
        ]
        assert locked_flags(track_t1, completed_prefix(track_t1, 1)) == [
            False,
            False,
            True,
            True,
        ]
        assert locked_flags(track_t1, completed_prefix(track_t1, 2)) == [
            False,
            False,
            False,
            True,
        ]
