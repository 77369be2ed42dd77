"""
Base Interface for Storage Backends.

This module defines the StudyItemRepository interface that all storage
backends implement. The review engine only ever talks to this interface, so
backends can be swapped without touching scheduling or selection.

Architecture Context
--------------------
    ┌─────────────────┐     ┌─────────────────┐
    │  ReviewEngine   │     │ StatsAggregator │
    └────────┬────────┘     └────────┬────────┘
             └───────────┬───────────┘
              ┌──────────┴──────────┐
              │ StudyItemRepository │
              │   (abstract base)   │
              └──────────┬──────────┘
                 ┌───────┴───────┐
                 ↓               ↓
           ┌──────────┐    ┌──────────┐
           │ InMemory │    │  SQLite  │
           └──────────┘    └──────────┘

Interface Contract
------------------
- Items returned by a repository are independent copies; mutating them
  never changes stored state until save() is called.
- save() persists the item and its full attempt history atomically.
- delete() removes the item and its attempts together.
- A missing id on save() or delete() raises ItemNotFoundError.
- Backend failures surface as StorageError with the original exception
  chained as __cause__.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from recallforge.study.models import StudyItem


class StudyItemRepository(ABC):
    """Abstract interface for study item storage."""

    @abstractmethod
    def fetch_all(self) -> List[StudyItem]:
        """Return every item, oldest first."""

    @abstractmethod
    def fetch_by_id(self, item_id: str) -> Optional[StudyItem]:
        """Return the item with this id, or None."""

    @abstractmethod
    def insert(self, item: StudyItem) -> None:
        """
        Store a new item.

        Raises:
            StorageError: If an item with the same id already exists
        """

    @abstractmethod
    def save(self, item: StudyItem) -> None:
        """
        Persist an existing item together with its attempt history.

        Raises:
            ItemNotFoundError: If the item is not in the store
            StorageError: If the write fails; nothing is persisted
        """

    @abstractmethod
    def delete(self, item_id: str) -> None:
        """
        Delete an item and all of its attempts.

        Raises:
            ItemNotFoundError: If the item is not in the store
        """

    @abstractmethod
    def count(self) -> int:
        """Number of stored items."""

    @abstractmethod
    def clear(self) -> int:
        """Delete every item. Returns the number deleted."""

    def fetch_due(self, now: datetime) -> List[StudyItem]:
        """Items with next_review <= now, earliest first.

        Backends with an index on next_review should override this.
        """
        due = [item for item in self.fetch_all() if item.is_due(now)]
        return sorted(due, key=lambda item: item.next_review)
