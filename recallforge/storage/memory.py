"""
In-memory storage backend.

Holds items in an insertion-ordered dict. Items are deep-copied on the way in
and on the way out, so it behaves like a real store: callers only change
stored state through save().

Used by tests and by the `memory` backend for throwaway sessions.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from recallforge.core.exceptions import ItemNotFoundError, StorageError
from recallforge.core.logging import get_logger
from recallforge.storage.base import StudyItemRepository
from recallforge.study.models import StudyItem

logger = get_logger(__name__)


class InMemoryRepository(StudyItemRepository):
    """Dict-backed repository."""

    def __init__(self) -> None:
        self._items: Dict[str, StudyItem] = {}

    def fetch_all(self) -> List[StudyItem]:
        items = sorted(self._items.values(), key=lambda item: item.created_at)
        return [item.copy() for item in items]

    def fetch_by_id(self, item_id: str) -> Optional[StudyItem]:
        item = self._items.get(item_id)
        return item.copy() if item is not None else None

    def insert(self, item: StudyItem) -> None:
        if item.item_id in self._items:
            raise StorageError(f"Study item already exists: {item.item_id}")
        self._items[item.item_id] = item.copy()
        logger.debug("Item inserted", item_id=item.item_id)

    def save(self, item: StudyItem) -> None:
        if item.item_id not in self._items:
            raise ItemNotFoundError(item.item_id)
        self._items[item.item_id] = item.copy()

    def delete(self, item_id: str) -> None:
        if self._items.pop(item_id, None) is None:
            raise ItemNotFoundError(item_id)

    def count(self) -> int:
        return len(self._items)

    def clear(self) -> int:
        removed = len(self._items)
        self._items.clear()
        return removed
