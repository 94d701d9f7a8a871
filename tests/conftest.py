"""Shared fixtures for progression tests."""

import pytest

from progression.curriculum.catalog import CurriculumCatalog
from progression.curriculum.models import Track
from progression.progress.service import ProgressService
from progression.progress.store import InMemoryProgressStore
from tests.factories import build_track


@pytest.fixture
def track_t1() -> Track:
    """Track T1: two modules of two lessons (L1, L2 | L3, L4)."""
    return build_track("T1", [2, 2])


@pytest.fixture
def catalog(track_t1: Track) -> CurriculumCatalog:
    """Catalog with T1 and a second, role-tagged track."""
    return CurriculumCatalog([track_t1, build_track("T2", [1, 3], role="engineer")])


@pytest.fixture
def store() -> InMemoryProgressStore:
    """Empty in-memory progress store."""
    return InMemoryProgressStore()


@pytest.fixture
def progress_service(
    catalog: CurriculumCatalog, store: InMemoryProgressStore
) -> ProgressService:
    """ProgressService over the test catalog and in-memory store."""
    return ProgressService(catalog=catalog, store=store)
