"""Selection weight model.

Turns an item's confidence, difficulty and time since last review into an
integer desirability weight for weighted random practice. Items with low
confidence, high difficulty or a long gap since review weigh more.

Stages, in order:
    weight = base
           + round((5 - confidence) * 20)
           + difficulty * 10
           + min(days_since_review * 5, 100)
    weight = floor(weight * (2 - e^(-days / 5)))    if days > 0
    weight = max(weight, 1)

The second stage is a forgetting-curve amplification: the multiplier grows
from 1.0 towards 2.0 as days pass without review. Never-reviewed items use
WeightConfig.never_reviewed_days, which saturates both the recency term and
the multiplier.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from recallforge.core.config import WeightConfig
from recallforge.study.models import MAX_RATING, StudyItem

MIN_WEIGHT = 1


class WeightModel:
    """Computes selection weights from item state.

    Pure: the result depends only on the item and the current time.
    """

    def __init__(
        self,
        config: Optional[WeightConfig] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.config = config or WeightConfig()
        self.clock = clock

    def days_since_review(self, item: StudyItem, now: datetime) -> int:
        """Whole days between last review and now, never negative."""
        if item.last_reviewed is None:
            return self.config.never_reviewed_days
        return max((now - item.last_reviewed).days, 0)

    def forgetting_multiplier(self, days: int) -> float:
        """Multiplier in [1.0, 2.0) that grows with days since review."""
        if days <= 0:
            return 1.0
        factor = days / self.config.forgetting_scale_days
        return 1.0 + (1.0 - math.exp(-factor))

    def calculate_weight(self, item: StudyItem, now: Optional[datetime] = None) -> int:
        """Calculate the selection weight of an item.

        Args:
            item: Item to weigh
            now: Current time (defaults to the model's clock)

        Returns:
            Integer weight, at least 1
        """
        now = now or self.clock()
        cfg = self.config

        weight = cfg.base_weight
        weight += round((MAX_RATING - item.confidence) * cfg.confidence_multiplier)
        weight += item.difficulty * cfg.difficulty_multiplier

        days = self.days_since_review(item, now)
        weight += min(days * cfg.recency_multiplier, cfg.recency_cap)

        if days > 0:
            weight = math.floor(weight * self.forgetting_multiplier(days))

        return max(int(weight), MIN_WEIGHT)

    def calculate_weights(
        self, items: Sequence[StudyItem], now: Optional[datetime] = None
    ) -> List[int]:
        """Weights for several items, in the same order, at a single instant."""
        now = now or self.clock()
        return [self.calculate_weight(item, now) for item in items]


def calculate_weight(item: StudyItem, now: Optional[datetime] = None) -> int:
    """Calculate an item's weight with the default constants."""
    return WeightModel().calculate_weight(item, now)
