"""Curriculum catalog models.

Immutable description of tracks, modules and lessons as authored by the
content layer:
- Lesson: smallest unit of content and completion tracking
- Module: ordered group of lessons within a track
- Track: ordered group of modules for a role/audience, with its
  certification policy

Positions are implicit: a module's (or lesson's) position is its zero-based
index in the parent sequence. Identifiers only need to be unique within their
parent scope. Field names accept the camelCase spelling used by authoring
exports (``durationMin``, ``minCompletionPercentage``...).
"""

from enum import Enum
from numbers import Real
from typing import Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from progression.core.exceptions import InvalidPolicyError


class LessonType(str, Enum):
    """Lesson content type (presentation only, never affects locking)."""

    VIDEO = "video"
    TEXT = "text"
    INTERACTIVE = "interactive"
    QUIZ = "quiz"
    SANDBOX = "sandbox"
    ASSESSMENT = "assessment"


class CatalogModel(BaseModel):
    """Base for frozen catalog entities."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


def _find_duplicate(ids: list[str]) -> str | None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            return item_id
        seen.add(item_id)
    return None


class Lesson(CatalogModel):
    """Single lesson inside a module."""

    id: str = Field(..., min_length=1, description="Lesson id (unique in module)")
    title: str = ""
    duration_min: int = Field(0, ge=0, description="Estimated duration in minutes")
    type: LessonType = LessonType.TEXT


class Module(CatalogModel):
    """Ordered sequence of lessons."""

    id: str = Field(..., min_length=1, description="Module id (unique in track)")
    title: str = ""
    lessons: tuple[Lesson, ...] = ()

    @model_validator(mode="after")
    def validate_unique_lessons(self) -> Self:
        """Reject duplicate lesson ids within the module."""
        duplicate = _find_duplicate([lesson.id for lesson in self.lessons])
        if duplicate is not None:
            msg = f"Duplicate lesson id '{duplicate}' in module '{self.id}'"
            raise ValueError(msg)
        return self

    @property
    def duration_min(self) -> int:
        """Total duration of the module's lessons."""
        return sum(lesson.duration_min for lesson in self.lessons)


class CertificationPolicy(CatalogModel):
    """Authoring-supplied certificate thresholds.

    Thresholds must be numbers; booleans and strings raise
    ``InvalidPolicyError`` on load instead of being coerced. Range checks
    happen when the policy is evaluated, so out-of-range values are carried
    as given and surface as ``InvalidPolicyError`` there.
    """

    min_completion_percentage: float = 100
    min_assessment_score: float | None = None

    @field_validator("min_completion_percentage", "min_assessment_score", mode="before")
    @classmethod
    def reject_non_numeric(cls, value: Any, info: ValidationInfo) -> Any:
        """Refuse values pydantic would otherwise coerce (true -> 1.0, "80" -> 80.0)."""
        if value is None and info.field_name == "min_assessment_score":
            return value
        if isinstance(value, bool) or not isinstance(value, Real):
            raise InvalidPolicyError(f"{info.field_name} must be a number, got {value!r}")
        return value


class Track(CatalogModel):
    """Top-level curriculum unit for a role/audience."""

    id: str = Field(..., min_length=1, description="Track id")
    title: str = ""
    role: str | None = Field(None, description="Target role/audience tag")
    modules: tuple[Module, ...] = ()
    certification: CertificationPolicy = Field(default_factory=CertificationPolicy)
    estimated_hours: float | None = None

    @model_validator(mode="after")
    def validate_unique_modules(self) -> Self:
        """Reject duplicate module ids within the track."""
        duplicate = _find_duplicate([module.id for module in self.modules])
        if duplicate is not None:
            msg = f"Duplicate module id '{duplicate}' in track '{self.id}'"
            raise ValueError(msg)
        return self

    @property
    def total_lessons(self) -> int:
        """Number of lessons across all modules."""
        return sum(len(module.lessons) for module in self.modules)

    @property
    def duration_min(self) -> int:
        """Total duration of the track in minutes."""
        return sum(module.duration_min for module in self.modules)
