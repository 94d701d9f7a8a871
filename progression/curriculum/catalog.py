"""Read-only curriculum catalog.

Lookups by identifier, role filtering and catalog-order traversal. Every
lookup of an absent track, module or lesson raises ``NotFoundError``; callers
never get a ``None`` they could mistake for "locked".
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any

import structlog
from pydantic import ValidationError

from progression.core.exceptions import CatalogValidationError, NotFoundError

from .models import Lesson, Module, Track


logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class LessonRef:
    """Identifier triple of a lesson."""

    track_id: str
    module_id: str
    lesson_id: str


@dataclass(frozen=True)
class LessonLocation:
    """A lesson resolved to its position inside a track."""

    track: Track
    module_index: int
    lesson_index: int

    @property
    def module(self) -> Module:
        return self.track.modules[self.module_index]

    @property
    def lesson(self) -> Lesson:
        return self.module.lessons[self.lesson_index]

    @property
    def ref(self) -> LessonRef:
        return LessonRef(self.track.id, self.module.id, self.lesson.id)


@dataclass(frozen=True)
class LessonNeighbours:
    """Previous and next lesson in catalog order (None at the edges)."""

    previous: LessonRef | None
    next: LessonRef | None


# ==============================================================================
# Track traversal helpers
# ==============================================================================


def iter_positions(track: Track) -> Iterator[LessonLocation]:
    """Yield every lesson of a track in catalog order."""
    for module_index, module in enumerate(track.modules):
        for lesson_index in range(len(module.lessons)):
            yield LessonLocation(track, module_index, lesson_index)


def get_module(track: Track, module_index: int) -> Module:
    """Return module at index or raise NotFoundError."""
    if not 0 <= module_index < len(track.modules):
        raise NotFoundError(
            f"Module index {module_index} out of range in track '{track.id}'"
        )
    return track.modules[module_index]


def get_location(track: Track, module_index: int, lesson_index: int) -> LessonLocation:
    """Validate a (module_index, lesson_index) pair against the track."""
    module = get_module(track, module_index)
    if not 0 <= lesson_index < len(module.lessons):
        raise NotFoundError(
            f"Lesson index {lesson_index} out of range in module '{module.id}'"
        )
    return LessonLocation(track, module_index, lesson_index)


def locate_lesson(track: Track, module_id: str, lesson_id: str) -> LessonLocation:
    """Resolve module and lesson ids to positions inside the track.

    Raises:
        NotFoundError: If the module or the lesson is not part of the track.
    """
    for module_index, module in enumerate(track.modules):
        if module.id != module_id:
            continue
        for lesson_index, lesson in enumerate(module.lessons):
            if lesson.id == lesson_id:
                return LessonLocation(track, module_index, lesson_index)
        raise NotFoundError(f"Lesson '{lesson_id}' not found in module '{module_id}'")
    raise NotFoundError(f"Module '{module_id}' not found in track '{track.id}'")


def neighbours(track: Track, module_index: int, lesson_index: int) -> LessonNeighbours:
    """Find the lessons immediately before and after a position.

    Module boundaries are crossed transparently; modules without lessons are
    skipped.
    """
    current = get_location(track, module_index, lesson_index)
    positions = list(iter_positions(track))
    idx = next(
        i
        for i, loc in enumerate(positions)
        if (loc.module_index, loc.lesson_index)
        == (current.module_index, current.lesson_index)
    )
    previous = positions[idx - 1].ref if idx > 0 else None
    following = positions[idx + 1].ref if idx + 1 < len(positions) else None
    return LessonNeighbours(previous=previous, next=following)


# ==============================================================================
# Catalog
# ==============================================================================


class CurriculumCatalog:
    """Immutable set of tracks supplied by the catalog provider."""

    def __init__(self, tracks: Iterable[Track]):
        self._tracks: tuple[Track, ...] = tuple(tracks)
        self._by_id: dict[str, Track] = {}
        for track in self._tracks:
            if track.id in self._by_id:
                raise CatalogValidationError(f"Duplicate track id '{track.id}'")
            self._by_id[track.id] = track

    @classmethod
    def from_dicts(cls, data: Iterable[dict[str, Any]]) -> "CurriculumCatalog":
        """Build a catalog from authoring payloads (camelCase or snake_case).

        Raises:
            CatalogValidationError: If any track fails model validation.
            InvalidPolicyError: If a certification threshold is not a number.
        """
        tracks: list[Track] = []
        for raw in data:
            try:
                tracks.append(Track.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "catalog_track_invalid",
                    track_id=raw.get("id"),
                    errors=e.error_count(),
                )
                raise CatalogValidationError(
                    f"Invalid track '{raw.get('id')}': {e}"
                ) from e
        catalog = cls(tracks)
        logger.debug("catalog_loaded", tracks=len(catalog))
        return catalog

    def __len__(self) -> int:
        return len(self._tracks)

    def __iter__(self) -> Iterator[Track]:
        return iter(self._tracks)

    def __contains__(self, track_id: object) -> bool:
        return track_id in self._by_id

    @property
    def tracks(self) -> tuple[Track, ...]:
        return self._tracks

    def track(self, track_id: str) -> Track:
        """Get track by id."""
        try:
            return self._by_id[track_id]
        except KeyError:
            raise NotFoundError(f"Track '{track_id}' not found") from None

    def tracks_for_role(self, role: str | None) -> list[Track]:
        """Tracks targeting a role; all tracks when role is None."""
        if role is None:
            return list(self._tracks)
        return [track for track in self._tracks if track.role == role]

    def locate(self, track_id: str, module_id: str, lesson_id: str) -> LessonLocation:
        """Resolve an identifier triple to a catalog position."""
        return locate_lesson(self.track(track_id), module_id, lesson_id)

    def neighbours(
        self, track_id: str, module_id: str, lesson_id: str
    ) -> LessonNeighbours:
        """Previous/next lesson for navigation around a lesson."""
        location = self.locate(track_id, module_id, lesson_id)
        return neighbours(location.track, location.module_index, location.lesson_index)
