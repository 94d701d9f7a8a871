"""Curriculum catalog module.

Provides:
- Immutable Track / Module / Lesson models with per-scope id validation
- Catalog lookups, role filtering and catalog-order traversal
"""

from .catalog import (
    CurriculumCatalog,
    LessonLocation,
    LessonNeighbours,
    LessonRef,
    iter_positions,
    locate_lesson,
)
from .models import CertificationPolicy, Lesson, LessonType, Module, Track


__all__ = [
    "CertificationPolicy",
    "CurriculumCatalog",
    "Lesson",
    "LessonLocation",
    "LessonNeighbours",
    "LessonRef",
    "LessonType",
    "Module",
    "Track",
    "iter_positions",
    "locate_lesson",
]
