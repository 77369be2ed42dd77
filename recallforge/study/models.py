"""Study item and attempt history models.

A StudyItem owns its attempt history: attempts are appended by the review
scheduler, never edited or removed individually, and are deleted together
with the item.

Invariants:
- confidence is the mean of all attempt ratings, 0.0 with no attempts
- difficulty is always in [1, 5]
- last_reviewed is None until the first review
"""

from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from recallforge.core.exceptions import InvalidDifficultyError, InvalidRatingError

MIN_RATING = 1
MAX_RATING = 5
MIN_DIFFICULTY = 1
MAX_DIFFICULTY = 5
DEFAULT_DIFFICULTY = 2


def validate_rating(rating: Any) -> int:
    """Return the rating if it is a whole number in [1, 5].

    Raises:
        InvalidRatingError: For booleans, non-integers and out-of-range values
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise InvalidRatingError(rating)
    if not MIN_RATING <= rating <= MAX_RATING:
        raise InvalidRatingError(rating)
    return rating


def validate_difficulty(difficulty: Any) -> int:
    """Return the difficulty if it is a whole number in [1, 5].

    Raises:
        InvalidDifficultyError: For booleans, non-integers and out-of-range values
    """
    if isinstance(difficulty, bool) or not isinstance(difficulty, int):
        raise InvalidDifficultyError(difficulty)
    if not MIN_DIFFICULTY <= difficulty <= MAX_DIFFICULTY:
        raise InvalidDifficultyError(difficulty)
    return difficulty


@dataclass(frozen=True)
class AttemptRecord:
    """A single submitted review.

    Attributes:
        timestamp: When the attempt was submitted
        success: Whether the answer was correct
        confidence_rating: Self-reported recall strength (1-5)
    """

    timestamp: datetime
    success: bool
    confidence_rating: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp.isoformat(),
            "success": self.success,
            "confidence_rating": self.confidence_rating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AttemptRecord":
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            success=bool(data["success"]),
            confidence_rating=int(data["confidence_rating"]),
        )


@dataclass
class StudyItem:
    """A question/solution pair with its review schedule.

    Attributes:
        item_id: Stable unique identifier
        question: Prompt shown to the learner
        solution: Expected answer
        difficulty: 1 (easy) to 5 (hard); set by the user, never by scheduling
        next_review: Item is due once now >= next_review
        last_reviewed: Time of the latest attempt, None if never reviewed
        confidence: Mean confidence rating over all attempts
        attempts: Append-only attempt history
        created_at: When the item was added
    """

    question: str
    solution: str
    next_review: datetime
    difficulty: int = DEFAULT_DIFFICULTY
    last_reviewed: Optional[datetime] = None
    confidence: float = 0.0
    attempts: List[AttemptRecord] = field(default_factory=list)
    item_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        question: str,
        solution: str,
        difficulty: int = DEFAULT_DIFFICULTY,
        now: Optional[datetime] = None,
    ) -> "StudyItem":
        """Create a new item that is due immediately."""
        now = now or datetime.now()
        return cls(
            question=question,
            solution=solution,
            difficulty=validate_difficulty(difficulty),
            next_review=now,
            created_at=now,
        )

    def is_due(self, now: datetime) -> bool:
        return now >= self.next_review

    @property
    def never_reviewed(self) -> bool:
        return self.last_reviewed is None

    @property
    def attempt_count(self) -> int:
        return len(self.attempts)

    @property
    def success_count(self) -> int:
        return sum(1 for attempt in self.attempts if attempt.success)

    @property
    def has_succeeded(self) -> bool:
        """True once the item has at least one successful attempt."""
        return any(attempt.success for attempt in self.attempts)

    @property
    def success_rate(self) -> Optional[float]:
        """Fraction of successful attempts, None with no attempts."""
        if not self.attempts:
            return None
        return self.success_count / len(self.attempts)

    def recompute_confidence(self) -> float:
        """Set confidence to the mean attempt rating and return it."""
        if not self.attempts:
            self.confidence = 0.0
        else:
            total = sum(attempt.confidence_rating for attempt in self.attempts)
            self.confidence = total / len(self.attempts)
        return self.confidence

    def copy(self) -> "StudyItem":
        return copy.deepcopy(self)

    def update_from(self, other: "StudyItem") -> None:
        """Overwrite this item's state with another copy of the same item."""
        self.question = other.question
        self.solution = other.solution
        self.difficulty = other.difficulty
        self.next_review = other.next_review
        self.last_reviewed = other.last_reviewed
        self.confidence = other.confidence
        self.attempts = list(other.attempts)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "item_id": self.item_id,
            "question": self.question,
            "solution": self.solution,
            "difficulty": self.difficulty,
            "next_review": self.next_review.isoformat(),
            "last_reviewed": self.last_reviewed.isoformat() if self.last_reviewed else None,
            "confidence": self.confidence,
            "created_at": self.created_at.isoformat(),
            "attempts": [attempt.to_dict() for attempt in self.attempts],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StudyItem":
        last_reviewed = data.get("last_reviewed")
        return cls(
            item_id=data["item_id"],
            question=data["question"],
            solution=data["solution"],
            difficulty=int(data["difficulty"]),
            next_review=datetime.fromisoformat(data["next_review"]),
            last_reviewed=datetime.fromisoformat(last_reviewed) if last_reviewed else None,
            confidence=float(data.get("confidence", 0.0)),
            created_at=datetime.fromisoformat(data["created_at"]),
            attempts=[AttemptRecord.from_dict(a) for a in data.get("attempts", [])],
        )
