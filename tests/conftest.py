"""
Shared pytest fixtures for RecallForge tests.

Fixture Organization
--------------------
- **now / clock**: Fixed reference time and a clock returning it
- **rng**: Seeded random.Random
- **memory_repo**: Empty InMemoryRepository
- **sqlite_repo**: SQLiteRepository in tmp_path
- **make_item**: Builder for StudyItem with optional attempt history
- **engine**: ReviewEngine wired to memory_repo, clock and rng
"""

import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest

from recallforge.storage.memory import InMemoryRepository
from recallforge.storage.sqlite import SQLiteRepository
from recallforge.study.engine import ReviewEngine
from recallforge.study.models import AttemptRecord, StudyItem

FIXED_NOW = datetime(2024, 3, 15, 12, 0, 0)


class FakeClock:
    """Clock that returns a settable time."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(FIXED_NOW)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def memory_repo() -> InMemoryRepository:
    return InMemoryRepository()


@pytest.fixture
def sqlite_repo(tmp_path: Path) -> SQLiteRepository:
    return SQLiteRepository(tmp_path / "data" / "recall.db")


@pytest.fixture
def make_item() -> Callable[..., StudyItem]:
    """Build a StudyItem.

    ratings is a sequence of (success, rating) pairs recorded one hour apart,
    ending at last_reviewed; confidence is recomputed from them.
    """

    def _make(
        question: str = "What is the capital of France?",
        solution: str = "Paris",
        difficulty: int = 2,
        last_reviewed: Optional[datetime] = None,
        next_review: datetime = FIXED_NOW,
        ratings: Sequence[Tuple[bool, int]] = (),
        created_at: datetime = FIXED_NOW - timedelta(days=30),
        item_id: Optional[str] = None,
    ) -> StudyItem:
        attempts: List[AttemptRecord] = []
        if ratings:
            end = last_reviewed or FIXED_NOW
            for offset, (success, rating) in enumerate(reversed(ratings)):
                attempts.insert(
                    0,
                    AttemptRecord(
                        timestamp=end - timedelta(hours=offset),
                        success=success,
                        confidence_rating=rating,
                    ),
                )
            last_reviewed = end
        item = StudyItem(
            question=question,
            solution=solution,
            difficulty=difficulty,
            next_review=next_review,
            last_reviewed=last_reviewed,
            attempts=attempts,
            created_at=created_at,
        )
        if item_id is not None:
            item.item_id = item_id
        item.recompute_confidence()
        return item

    return _make


@pytest.fixture
def engine(
    memory_repo: InMemoryRepository, clock: FakeClock, rng: random.Random
) -> ReviewEngine:
    return ReviewEngine(memory_repo, rng=rng, clock=clock)
