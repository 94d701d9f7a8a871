"""Sequential lesson locking.

A lesson is accessible only when the lesson before it has been completed:
1. The first lesson of the first module is never locked.
2. Any later lesson in a module needs the preceding lesson of that module
   completed.
3. The first lesson of a later module needs every lesson of the preceding
   module completed. Modules without lessons are vacuously complete and are
   skipped, so the check reaches back to the nearest module that has lessons.

Everything here is a pure function of (track, snapshot). Positions outside
the catalog raise ``NotFoundError`` instead of reporting "locked".
"""

from progression.curriculum.catalog import get_location, iter_positions
from progression.curriculum.models import Module, Track

from .models import ProgressSnapshot
from .schemas import LessonAvailability


def is_module_complete(track: Track, module: Module, snapshot: ProgressSnapshot) -> bool:
    """Every lesson of the module is completed (true for an empty module)."""
    return all(
        snapshot.is_completed(track.id, module.id, lesson.id)
        for lesson in module.lessons
    )


def _preceding_module(track: Track, module_index: int) -> Module | None:
    # Departs from the literal "immediately preceding module" rule: an empty
    # predecessor is skipped, so its own predecessor still gates this module.
    for index in range(module_index - 1, -1, -1):
        if track.modules[index].lessons:
            return track.modules[index]
    return None


def is_locked(
    track: Track,
    module_index: int,
    lesson_index: int,
    snapshot: ProgressSnapshot,
) -> bool:
    """Check whether the lesson at a catalog position is locked.

    Args:
        track: Track the position belongs to
        module_index: Zero-based module position
        lesson_index: Zero-based lesson position inside the module
        snapshot: Learner progress

    Returns:
        True when the learner may not access the lesson yet

    Raises:
        NotFoundError: If the position does not exist in the track
    """
    location = get_location(track, module_index, lesson_index)
    if module_index == 0 and lesson_index == 0:
        return False

    module = location.module
    if lesson_index > 0:
        previous = module.lessons[lesson_index - 1]
        return not snapshot.is_completed(track.id, module.id, previous.id)

    previous_module = _preceding_module(track, module_index)
    if previous_module is None:
        return False
    return not is_module_complete(track, previous_module, snapshot)


def lesson_states(track: Track, snapshot: ProgressSnapshot) -> list[LessonAvailability]:
    """Lock state and status of every lesson, in catalog order."""
    return [
        LessonAvailability(
            track_id=track.id,
            module_id=location.module.id,
            lesson_id=location.lesson.id,
            module_index=location.module_index,
            lesson_index=location.lesson_index,
            status=snapshot.status_of(track.id, location.module.id, location.lesson.id),
            locked=is_locked(
                track, location.module_index, location.lesson_index, snapshot
            ),
        )
        for location in iter_positions(track)
    ]


def next_available_lesson(
    track: Track, snapshot: ProgressSnapshot
) -> LessonAvailability | None:
    """First unlocked lesson that is not completed (the resume point)."""
    for state in lesson_states(track, snapshot):
        if not state.locked and not state.completed:
            return state
    return None


def first_incomplete_lesson(
    track: Track, snapshot: ProgressSnapshot
) -> LessonAvailability | None:
    """First lesson in catalog order that is not completed, locked or not."""
    for state in lesson_states(track, snapshot):
        if not state.completed:
            return state
    return None
