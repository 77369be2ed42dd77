"""Study statistics aggregator.

Summarizes progress for the stats screen:
- Items due and reviewed today
- Accuracy and completion
- Review streak
- Mastery levels per item
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Callable, Dict, Iterable, List, Optional

from recallforge.core.logging import get_logger
from recallforge.study.models import StudyItem
from recallforge.study.weights import WeightModel

if TYPE_CHECKING:
    from recallforge.storage.base import StudyItemRepository

logger = get_logger(__name__)

LEARNING_CONFIDENCE = 3.0
LEARNING_ATTEMPTS = 3
MATURE_CONFIDENCE = 4.5
MATURE_ATTEMPTS = 5


class MasteryLevel(Enum):
    """Mastery level classification."""

    NEW = "new"  # Never reviewed
    LEARNING = "learning"  # confidence < 3.0 or attempts < 3
    REVIEWING = "reviewing"  # Normal state
    MATURE = "mature"  # confidence >= 4.5 and attempts >= 5


def classify_mastery(item: StudyItem) -> MasteryLevel:
    """Classify an item's mastery level from its confidence and history."""
    attempts = item.attempt_count
    if attempts == 0:
        return MasteryLevel.NEW
    if item.confidence < LEARNING_CONFIDENCE or attempts < LEARNING_ATTEMPTS:
        return MasteryLevel.LEARNING
    if item.confidence >= MATURE_CONFIDENCE and attempts >= MATURE_ATTEMPTS:
        return MasteryLevel.MATURE
    return MasteryLevel.REVIEWING


@dataclass
class ItemStats:
    """Statistics for a single item.

    Attributes:
        item_id: Item identifier
        question: Item prompt
        attempts: Number of reviews
        successes: Number of successful reviews
        success_rate: Successes / attempts, None if never reviewed
        confidence: Mean confidence rating
        mastery_level: Current mastery level
        weight: Current selection weight
    """

    item_id: str
    question: str
    attempts: int = 0
    successes: int = 0
    success_rate: Optional[float] = None
    confidence: float = 0.0
    mastery_level: MasteryLevel = MasteryLevel.NEW
    weight: int = 0


@dataclass
class StudyStats:
    """Aggregate study statistics.

    Attributes:
        total_items: Items in the store
        due_now: Items due for review
        completed_items: Items with at least one successful review
        total_attempts: Reviews across all items
        average_accuracy: Successful reviews as a percentage
        reviewed_today: Reviews submitted since midnight
        streak_days: Consecutive days with at least one review
        items: Per-item statistics
        mastery_distribution: Count by mastery level
    """

    total_items: int = 0
    due_now: int = 0
    completed_items: int = 0
    total_attempts: int = 0
    average_accuracy: float = 0.0
    reviewed_today: int = 0
    streak_days: int = 0
    items: List[ItemStats] = field(default_factory=list)
    mastery_distribution: Dict[MasteryLevel, int] = field(default_factory=dict)


class StatsAggregator:
    """Aggregates study statistics from a repository."""

    def __init__(
        self,
        repository: "StudyItemRepository",
        weight_model: Optional[WeightModel] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.weight_model = weight_model or WeightModel(clock=clock)

    def get_stats(self) -> StudyStats:
        """Get comprehensive study statistics.

        Returns:
            StudyStats with all metrics
        """
        now = self.clock()
        items = self.repository.fetch_all()
        stats = StudyStats(total_items=len(items))
        if not items:
            stats.mastery_distribution = {level: 0 for level in MasteryLevel}
            return stats

        stats.due_now = sum(1 for item in items if item.is_due(now))
        stats.completed_items = sum(1 for item in items if item.has_succeeded)
        stats.total_attempts = sum(item.attempt_count for item in items)
        stats.average_accuracy = self._calculate_accuracy(items)
        stats.reviewed_today = self._count_reviewed_today(items, now)
        stats.streak_days = calculate_streak(
            (a.timestamp.date() for item in items for a in item.attempts), now.date()
        )
        stats.items = self._get_item_stats(items, now)
        stats.mastery_distribution = self._get_mastery_distribution(stats.items)

        logger.debug(
            "Stats computed",
            total=stats.total_items,
            due=stats.due_now,
            streak=stats.streak_days,
        )
        return stats

    def _calculate_accuracy(self, items: List[StudyItem]) -> float:
        attempts = sum(item.attempt_count for item in items)
        if attempts == 0:
            return 0.0
        successes = sum(item.success_count for item in items)
        return round(successes / attempts * 100, 1)

    def _count_reviewed_today(self, items: List[StudyItem], now: datetime) -> int:
        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        return sum(
            1
            for item in items
            for attempt in item.attempts
            if today_start <= attempt.timestamp <= now
        )

    def _get_item_stats(self, items: List[StudyItem], now: datetime) -> List[ItemStats]:
        weights = self.weight_model.calculate_weights(items, now)
        return [
            ItemStats(
                item_id=item.item_id,
                question=item.question,
                attempts=item.attempt_count,
                successes=item.success_count,
                success_rate=item.success_rate,
                confidence=round(item.confidence, 2),
                mastery_level=classify_mastery(item),
                weight=weight,
            )
            for item, weight in zip(items, weights)
        ]

    def _get_mastery_distribution(
        self, item_stats: List[ItemStats]
    ) -> Dict[MasteryLevel, int]:
        distribution = {level: 0 for level in MasteryLevel}
        for entry in item_stats:
            distribution[entry.mastery_level] += 1
        return distribution


def calculate_streak(review_dates: Iterable[date], today: date) -> int:
    """Count consecutive review days ending today.

    A streak still counts if the latest review was yesterday, so it is not
    lost before the day's first review.

    Args:
        review_dates: Dates with at least one review (duplicates allowed)
        today: Reference date

    Returns:
        Streak length in days, 0 if the last review is older than yesterday
    """
    days = set(review_dates)
    if not days:
        return 0

    current = today if today in days else today - timedelta(days=1)
    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)
    return streak
