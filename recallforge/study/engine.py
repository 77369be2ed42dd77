"""Review engine.

Coordinates the weight model, sampler and scheduler against a repository.
The repository is always injected; the engine holds no global store.

Review submission is transactional from the caller's point of view:

    copy = item.copy()
    scheduler.apply_review(copy, ...)
    repository.save(copy)        # raises -> item untouched
    item.update_from(copy)

Usage:
    engine = ReviewEngine(InMemoryRepository(), rng=random.Random(42))
    item = engine.add_item("2 + 2?", "4")
    picked = engine.pick_weighted_random_item()
    engine.submit_review(picked, success=True, confidence_rating=4)
"""

from __future__ import annotations

import random
from datetime import datetime
from typing import TYPE_CHECKING, Callable, List, Optional, Protocol, Sequence, Tuple

from recallforge.core.exceptions import InvalidItemError, ItemNotFoundError
from recallforge.core.logging import get_logger
from recallforge.study.models import DEFAULT_DIFFICULTY, StudyItem, validate_difficulty
from recallforge.study.sampler import WeightedSampler
from recallforge.study.scheduler import ReviewOutcome, ReviewScheduler
from recallforge.study.weights import WeightModel

if TYPE_CHECKING:
    from recallforge.storage.base import StudyItemRepository

logger = get_logger(__name__)


class ReviewNotifier(Protocol):
    """Delivers "item is due" reminders outside the engine."""

    def schedule(self, item: StudyItem, at: datetime) -> None:
        ...

    def cancel(self, item_id: str) -> None:
        ...


def _clean_text(value: str, field_name: str) -> str:
    text = (value or "").strip()
    if not text:
        raise InvalidItemError(f"Study item {field_name} must not be empty")
    return text


class ReviewEngine:
    """Selection, scheduling and item management over a repository.

    Args:
        repository: Store for study items
        weight_model: Weight calculator (default constants if omitted)
        scheduler: Review scheduler (default constants if omitted)
        rng: Random source for weighted picks
        clock: Returns the current time
        notifier: Optional reminder delivery
    """

    def __init__(
        self,
        repository: "StudyItemRepository",
        weight_model: Optional[WeightModel] = None,
        scheduler: Optional[ReviewScheduler] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        notifier: Optional[ReviewNotifier] = None,
    ) -> None:
        self.repository = repository
        self.clock = clock
        self.weight_model = weight_model or WeightModel(clock=clock)
        self.scheduler = scheduler or ReviewScheduler(clock=clock)
        self.rng = rng or random.Random()
        self.notifier = notifier

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def item_weights(
        self, items: Optional[Sequence[StudyItem]] = None
    ) -> List[Tuple[StudyItem, int]]:
        """Pair each item with its current selection weight."""
        if items is None:
            items = self.repository.fetch_all()
        weights = self.weight_model.calculate_weights(items, self.clock())
        return list(zip(items, weights))

    def pick_weighted_random_item(
        self, items: Optional[Sequence[StudyItem]] = None
    ) -> Optional[StudyItem]:
        """Pick one item with probability proportional to its weight.

        Args:
            items: Candidates (defaults to every stored item)

        Returns:
            The chosen item, or None when there are no candidates
        """
        if items is None:
            items = self.repository.fetch_all()
        if not items:
            return None

        weights = self.weight_model.calculate_weights(items, self.clock())
        index = WeightedSampler(weights).pick_index(self.rng)
        chosen = items[index]
        logger.debug(
            "Item picked",
            item_id=chosen.item_id,
            weight=weights[index],
            total=sum(weights),
        )
        return chosen

    def due_items(
        self,
        items: Optional[Sequence[StudyItem]] = None,
        now: Optional[datetime] = None,
        ordered: bool = True,
    ) -> List[StudyItem]:
        """Items whose next_review is at or before now.

        Args:
            items: Candidates (defaults to every stored item)
            now: Reference time (defaults to the clock)
            ordered: Sort by next_review, earliest first. Otherwise
                candidates keep their input (or repository) order

        Returns:
            Due items
        """
        now = now or self.clock()
        if items is None:
            if ordered:
                return self.repository.fetch_due(now)
            items = self.repository.fetch_all()

        due = [item for item in items if item.is_due(now)]
        if ordered:
            due.sort(key=lambda item: item.next_review)
        return due

    def search(self, text: str) -> List[StudyItem]:
        """Case-insensitive substring match on question or solution."""
        needle = text.strip().lower()
        items = self.repository.fetch_all()
        if not needle:
            return items
        return [
            item
            for item in items
            if needle in item.question.lower() or needle in item.solution.lower()
        ]

    # ------------------------------------------------------------------
    # Reviews
    # ------------------------------------------------------------------

    def submit_review(
        self, item: StudyItem, success: bool, confidence_rating: int
    ) -> ReviewOutcome:
        """Apply and persist a review.

        The item is only updated once the repository accepted the new state.

        Raises:
            InvalidRatingError: If confidence_rating is outside [1, 5]
            ItemNotFoundError: If the item is no longer stored
            StorageError: If the save fails
        """
        updated = item.copy()
        outcome = self.scheduler.apply_review(
            updated, success, confidence_rating, now=self.clock()
        )
        self.repository.save(updated)
        item.update_from(updated)

        logger.info(
            "Review recorded",
            item_id=item.item_id,
            success=success,
            rating=confidence_rating,
            next_review=outcome.next_review.isoformat(timespec="minutes"),
        )
        self._schedule_reminder(item, outcome.next_review)
        return outcome

    def submit_review_by_id(
        self, item_id: str, success: bool, confidence_rating: int
    ) -> Tuple[StudyItem, ReviewOutcome]:
        item = self.get_item(item_id)
        outcome = self.submit_review(item, success, confidence_rating)
        return item, outcome

    # ------------------------------------------------------------------
    # Item management
    # ------------------------------------------------------------------

    def get_item(self, item_id: str) -> StudyItem:
        """Fetch an item or raise ItemNotFoundError."""
        item = self.repository.fetch_by_id(item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    def add_item(
        self, question: str, solution: str, difficulty: int = DEFAULT_DIFFICULTY
    ) -> StudyItem:
        """Create, store and return a new item that is due immediately.

        Raises:
            InvalidItemError: If question or solution is blank
            InvalidDifficultyError: If difficulty is outside [1, 5]
        """
        item = StudyItem.create(
            _clean_text(question, "question"),
            _clean_text(solution, "solution"),
            difficulty=difficulty,
            now=self.clock(),
        )
        self.repository.insert(item)
        logger.info("Item added", item_id=item.item_id, difficulty=item.difficulty)
        self._schedule_reminder(item, item.next_review)
        return item

    def edit_item(
        self,
        item_id: str,
        question: Optional[str] = None,
        solution: Optional[str] = None,
        difficulty: Optional[int] = None,
    ) -> StudyItem:
        """Change an item's text or difficulty. Schedule and history are kept."""
        item = self.get_item(item_id)
        if question is not None:
            item.question = _clean_text(question, "question")
        if solution is not None:
            item.solution = _clean_text(solution, "solution")
        if difficulty is not None:
            item.difficulty = validate_difficulty(difficulty)

        self.repository.save(item)
        logger.info("Item edited", item_id=item_id)
        return item

    def force_due(self, item_id: str) -> StudyItem:
        """Make an item due now without touching confidence or attempts."""
        item = self.get_item(item_id)
        item.next_review = self.clock()
        self.repository.save(item)
        logger.info("Item forced due", item_id=item_id)
        self._schedule_reminder(item, item.next_review)
        return item

    def delete_item(self, item_id: str) -> None:
        """Delete an item and its attempt history."""
        self.repository.delete(item_id)
        logger.info("Item deleted", item_id=item_id)
        self._cancel_reminder(item_id)

    def reset(self) -> int:
        """Delete every item. Returns how many were removed."""
        item_ids = [item.item_id for item in self.repository.fetch_all()]
        removed = self.repository.clear()
        logger.info("All items deleted", count=removed)
        for item_id in item_ids:
            self._cancel_reminder(item_id)
        return removed

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    def _schedule_reminder(self, item: StudyItem, when: datetime) -> None:
        """Hand a stored item to the notifier.

        Runs after the repository write, so a delivery failure is logged
        and the stored state stands.
        """
        if self.notifier is None:
            return
        try:
            self.notifier.schedule(item, when)
        except Exception:
            logger.exception("Reminder scheduling failed", item_id=item.item_id)

    def _cancel_reminder(self, item_id: str) -> None:
        if self.notifier is None:
            return
        try:
            self.notifier.cancel(item_id)
        except Exception:
            logger.exception("Reminder cancel failed", item_id=item_id)
