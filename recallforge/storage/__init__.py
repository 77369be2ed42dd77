"""
Storage layer for RecallForge.

Backends implement StudyItemRepository; use get_repository(config) to build
the one named in configuration.
"""

from recallforge.storage.base import StudyItemRepository
from recallforge.storage.factory import get_repository, register_backend
from recallforge.storage.memory import InMemoryRepository
from recallforge.storage.sqlite import SQLiteRepository

__all__ = [
    "StudyItemRepository",
    "InMemoryRepository",
    "SQLiteRepository",
    "get_repository",
    "register_backend",
]
