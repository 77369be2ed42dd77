"""Review scheduling.

Applies the outcome of one review to an item: records the attempt,
recomputes confidence and sets the next review time.

Interval formula (hours):
    success:  BASE_INTERVAL_HOURS * 2 ** (rating - 1)    6, 12, 24, 48, 96
    failure:  rating / 2                                0.5 .. 2.5
    both:     interval *= 0.5 + 1 / difficulty

Difficulty 1 stretches intervals by 1.5x; difficulty 5 shrinks them to 0.7x.

Examples:
    >>> calculate_interval_hours(True, 3, 2)
    24.0
    >>> calculate_interval_hours(False, 4, 1)
    3.0
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from recallforge.core.config import SchedulerConfig
from recallforge.core.logging import get_logger
from recallforge.study.models import (
    AttemptRecord,
    StudyItem,
    validate_difficulty,
    validate_rating,
)

logger = get_logger(__name__)

BASE_INTERVAL_HOURS: float = 6.0
SUCCESS_GROWTH: float = 2.0
FAILURE_DIVISOR: float = 2.0
DIFFICULTY_OFFSET: float = 0.5


@dataclass(frozen=True)
class ReviewOutcome:
    """Result of applying one review.

    Attributes:
        confidence: Item confidence after the review
        next_review: When the item is due again
        interval_hours: Hours between the review and next_review
        attempt: The attempt that was appended
    """

    confidence: float
    next_review: datetime
    interval_hours: float
    attempt: AttemptRecord


def calculate_interval_hours(
    success: bool,
    confidence_rating: int,
    difficulty: int,
    config: Optional[SchedulerConfig] = None,
) -> float:
    """Calculate hours until the next review.

    Args:
        success: Whether the review was answered correctly
        confidence_rating: Self-reported recall strength (1-5)
        difficulty: Item difficulty (1-5)
        config: Interval constants (defaults match the module constants)

    Returns:
        Interval in hours

    Raises:
        InvalidRatingError: If confidence_rating is outside [1, 5]
        InvalidDifficultyError: If difficulty is outside [1, 5]
    """
    validate_rating(confidence_rating)
    validate_difficulty(difficulty)
    cfg = config or SchedulerConfig()

    if success:
        interval = cfg.base_interval_hours * cfg.success_growth ** (confidence_rating - 1)
    else:
        interval = confidence_rating / cfg.failure_divisor

    return interval * (cfg.difficulty_offset + 1.0 / difficulty)


class ReviewScheduler:
    """Applies review outcomes to study items."""

    def __init__(
        self,
        config: Optional[SchedulerConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or SchedulerConfig()
        self.clock = clock

    def apply_review(
        self,
        item: StudyItem,
        success: bool,
        confidence_rating: int,
        now: Optional[datetime] = None,
    ) -> ReviewOutcome:
        """Record a review on the item and reschedule it.

        Mutates the item in place. Inputs are validated before anything
        changes, so a rejected review leaves the item untouched.

        Args:
            item: Item that was reviewed
            success: Whether the answer was correct
            confidence_rating: Self-reported recall strength (1-5)
            now: Review time (defaults to the scheduler's clock)

        Returns:
            ReviewOutcome with the new confidence and next review time

        Raises:
            InvalidRatingError: If confidence_rating is outside [1, 5]
            InvalidDifficultyError: If the item's difficulty is outside [1, 5]
        """
        interval_hours = calculate_interval_hours(
            success, confidence_rating, item.difficulty, self.config
        )
        now = now or self.clock()

        attempt = AttemptRecord(
            timestamp=now,
            success=bool(success),
            confidence_rating=confidence_rating,
        )
        item.attempts.append(attempt)
        confidence = item.recompute_confidence()
        item.last_reviewed = now
        item.next_review = now + timedelta(hours=interval_hours)

        logger.debug(
            "Review applied",
            item_id=item.item_id,
            success=success,
            rating=confidence_rating,
            confidence=f"{confidence:.2f}",
            interval_hours=f"{interval_hours:.2f}",
        )

        return ReviewOutcome(
            confidence=confidence,
            next_review=item.next_review,
            interval_hours=interval_hours,
            attempt=attempt,
        )
