"""
Study engine for RecallForge.

Components
----------
**models.py**     StudyItem and AttemptRecord
**weights.py**    Selection weights from confidence, difficulty and recency
**sampler.py**    Prefix-sum weighted index picker
**scheduler.py**  Attempt recording and next-review intervals
**engine.py**     ReviewEngine tying the above to a repository
**stats.py**      Progress statistics and mastery levels
**due_check.py**  Due counts and "due in" text
"""

from recallforge.study.models import AttemptRecord, StudyItem
from recallforge.study.sampler import WeightedSampler
from recallforge.study.scheduler import (
    ReviewOutcome,
    ReviewScheduler,
    calculate_interval_hours,
)
from recallforge.study.weights import WeightModel, calculate_weight
from recallforge.study.engine import ReviewEngine, ReviewNotifier

__all__ = [
    "AttemptRecord",
    "StudyItem",
    "WeightModel",
    "calculate_weight",
    "WeightedSampler",
    "ReviewScheduler",
    "ReviewOutcome",
    "calculate_interval_hours",
    "ReviewEngine",
    "ReviewNotifier",
]
