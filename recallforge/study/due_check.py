"""Due item checks.

Small helpers used by the CLI to tell the user what is waiting:

    >>> get_due_notification(3)
    '3 items are due for review. Run `recallforge due`'
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Optional, Tuple

from recallforge.study.models import StudyItem

if TYPE_CHECKING:
    from recallforge.storage.base import StudyItemRepository


def count_due(repository: "StudyItemRepository", now: datetime) -> Tuple[int, int]:
    """Count due items.

    Returns:
        Tuple of (due_count, total_count)
    """
    return len(repository.fetch_due(now)), repository.count()


def time_remaining_text(item: StudyItem, now: datetime) -> str:
    """Describe how long until an item is due.

    Examples:
        "Due now", "Due in 1 hour", "Due in 5 hours", "Due in 42 minutes"
    """
    remaining = item.next_review - now
    seconds = int(remaining.total_seconds())
    if seconds < 60:
        return "Due now"

    hours = seconds // 3600
    if hours >= 1:
        return f"Due in {hours} hour{'s' if hours != 1 else ''}"

    minutes = seconds // 60
    return f"Due in {minutes} minute{'s' if minutes != 1 else ''}"


def get_due_notification(due_count: int) -> Optional[str]:
    """Notification message for due items, None if nothing is due."""
    if due_count <= 0:
        return None
    if due_count == 1:
        return "1 item is due for review. Run `recallforge due`"
    return f"{due_count} items are due for review. Run `recallforge due`"
