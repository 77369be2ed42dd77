"""
Centralized Exception Hierarchy for RecallForge.

All exceptions inherit from RecallForgeError so callers can catch any
RecallForge-specific failure in one place.

Each exception includes:
- user_message: Human-readable description of what went wrong
- why_it_happened: Explanation of the root cause
- how_to_fix: Actionable steps to resolve the issue
- error_code: Unique identifier for documentation lookup (e.g., "RF-VAL-001")

Exception Hierarchy
-------------------
    RecallForgeError (base)
    ├── ValidationError
    │   ├── InvalidRatingError
    │   ├── InvalidDifficultyError
    │   ├── InvalidWeightError
    │   ├── InvalidItemError
    │   └── ConfigValidationError
    ├── EmptyInputError
    └── StorageError
        └── ItemNotFoundError

Propagation
-----------
Validation errors are raised at the boundary, before any item is mutated.
Storage errors are always surfaced to the caller: a review that was not
saved must be treated as a review that never happened.
"""

from __future__ import annotations

import re
from typing import Any, List, Optional


def sanitize_path(path: str) -> str:
    """Replace user home directories in a path with a placeholder.

    Args:
        path: Original file path

    Returns:
        Sanitized path
    """
    if not path:
        return path

    patterns = [
        (r"[A-Za-z]:\\Users\\[^\\]+", r"<user-home>"),
        (r"/(?:home|Users)/[^/]+", r"<user-home>"),
    ]

    result = path
    for pattern, replacement in patterns:
        result = re.sub(pattern, replacement, result)

    return result


def sanitize_message(message: str) -> str:
    """Mask file paths inside an error message.

    Args:
        message: Original error message

    Returns:
        Sanitized message
    """
    if not message:
        return message

    patterns = [
        r"[A-Za-z]:\\[^\s\"']+",
        r"/(?:home|Users)/[^\s\"']+",
    ]

    result = message
    for pattern in patterns:
        result = re.sub(pattern, lambda m: sanitize_path(m.group(0)), result)

    return result


def get_root_cause(exc: BaseException) -> BaseException:
    """Follow __cause__ and __context__ to the original error.

    Args:
        exc: Exception to analyze

    Returns:
        Root cause exception (may be the same as input)
    """
    seen = set()
    current = exc

    while current is not None:
        if id(current) in seen:
            break
        seen.add(id(current))

        if current.__cause__ is not None:
            current = current.__cause__
        elif current.__context__ is not None:
            current = current.__context__
        else:
            break

    return current


class RecallForgeError(Exception):
    """
    Base exception for all RecallForge errors.

    Example
    -------
        try:
            engine.submit_review(item, success=True, confidence_rating=7)
        except RecallForgeError as e:
            logger.error(f"Review failed: {e}")
            print(f"Fix: {e.how_to_fix}")
    """

    error_code: str = "RF-ERR-000"
    why_it_happened: str = "An unexpected error occurred"
    how_to_fix: List[str] = ["Check the error message for details"]

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        why_it_happened: Optional[str] = None,
        how_to_fix: Optional[List[str]] = None,
    ) -> None:
        """Initialize RecallForgeError with helpful information.

        Args:
            message: Human-readable error message
            error_code: Unique identifier (e.g., "RF-VAL-001")
            why_it_happened: Explanation of root cause
            how_to_fix: List of actionable fix suggestions
        """
        super().__init__(sanitize_message(message))

        if error_code is not None:
            self.error_code = error_code
        if why_it_happened is not None:
            self.why_it_happened = why_it_happened
        if how_to_fix is not None:
            self.how_to_fix = how_to_fix

    @property
    def user_message(self) -> str:
        """Get the user-friendly error message."""
        return str(self)

    def get_root_cause(self) -> BaseException:
        """Get the root cause of this exception chain."""
        return get_root_cause(self)


# ============================================================================
# Validation Exceptions
# ============================================================================


class ValidationError(RecallForgeError):
    """
    Raised when input data doesn't meet requirements.

    Validation always happens before any state change, so catching a
    ValidationError guarantees nothing was modified.
    """

    error_code = "RF-VAL-000"
    why_it_happened = "Validation failed for input data or configuration"
    how_to_fix = [
        "Check the error message for specific validation failures",
        "Review the expected format or value constraints",
    ]


class InvalidRatingError(ValidationError):
    """
    Raised when a confidence rating falls outside [1, 5].

    Attributes
    ----------
    rating : any
        The rejected rating
    """

    error_code = "RF-VAL-001"
    why_it_happened = "Confidence ratings are self-reported recall strength on a 1-5 scale"
    how_to_fix = ["Submit a whole number between 1 and 5"]

    def __init__(self, rating: Any, **kwargs: Any) -> None:
        self.rating = rating
        super().__init__(f"Confidence rating must be 1-5, got {rating!r}", **kwargs)


class InvalidDifficultyError(ValidationError):
    """Raised when an item difficulty falls outside [1, 5]."""

    error_code = "RF-VAL-002"
    why_it_happened = "Difficulty scales review intervals and is used as a divisor"
    how_to_fix = ["Use a whole number between 1 (easy) and 5 (hard)"]

    def __init__(self, difficulty: Any, **kwargs: Any) -> None:
        self.difficulty = difficulty
        super().__init__(f"Difficulty must be 1-5, got {difficulty!r}", **kwargs)


class InvalidWeightError(ValidationError):
    """Raised when a sampler weight is negative or not an integer."""

    error_code = "RF-VAL-003"
    why_it_happened = "Weighted selection needs non-negative integer weights"
    how_to_fix = ["Clamp weights to zero or above before building the sampler"]

    def __init__(self, index: int, weight: Any, **kwargs: Any) -> None:
        self.index = index
        self.weight = weight
        super().__init__(
            f"Weight at index {index} must be a non-negative integer, got {weight!r}",
            **kwargs,
        )


class InvalidItemError(ValidationError):
    """Raised when a study item is missing its question or solution."""

    error_code = "RF-VAL-004"
    why_it_happened = "A study item needs both a question and a solution"
    how_to_fix = ["Enter non-blank text for both the question and the solution"]


class ConfigValidationError(ValidationError):
    """
    Raised when configuration validation fails.

    Attributes
    ----------
    field : str
        The configuration field that failed validation
    value : any
        The invalid value
    """

    error_code = "RF-VAL-010"
    why_it_happened = "A configuration value is outside its allowed range"
    how_to_fix = [
        "Check config.yaml for the field named in the message",
        "Remove the field to fall back to the default",
    ]

    def __init__(self, field: str, value: Any, reason: str, **kwargs: Any) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Invalid config '{field}'={value!r}: {reason}", **kwargs)


# ============================================================================
# Selection Exceptions
# ============================================================================


class EmptyInputError(RecallForgeError):
    """
    Raised when a weighted pick is attempted over zero candidates.

    High-level selection returns None instead; only direct sampler use
    without any weights raises this.
    """

    error_code = "RF-SEL-001"
    why_it_happened = "There were no candidates to choose from"
    how_to_fix = [
        "Check that the candidate list is non-empty before picking",
        "Add study items with 'recallforge add'",
    ]


# ============================================================================
# Storage Exceptions
# ============================================================================


class StorageError(RecallForgeError):
    """
    Raised when storage operations fail.

    This can occur when:
    - Database connection fails
    - Write operation fails
    - The database file is locked or corrupted
    """

    error_code = "RF-STOR-000"
    why_it_happened = (
        "A storage operation failed. The database may be locked by another "
        "process, corrupted, or the disk may be full"
    )
    how_to_fix = [
        "Ensure no other RecallForge processes are writing to the database",
        "Check free disk space",
        "Retry the operation; the review was not recorded",
    ]


class ItemNotFoundError(StorageError):
    """
    Raised when an item id is not present in the store.

    Never retried and never replaced with a fallback item.

    Attributes
    ----------
    item_id : str
        The id that was requested
    """

    error_code = "RF-STOR-001"
    why_it_happened = "No study item with this id exists in the store"
    how_to_fix = [
        "List items with 'recallforge list' to find a valid id",
        "The item may have been deleted by another session",
    ]

    def __init__(self, item_id: str, **kwargs: Any) -> None:
        self.item_id = item_id
        super().__init__(f"Study item not found: {item_id}", **kwargs)


__all__ = [
    "sanitize_path",
    "sanitize_message",
    "get_root_cause",
    "RecallForgeError",
    "ValidationError",
    "InvalidRatingError",
    "InvalidDifficultyError",
    "InvalidWeightError",
    "InvalidItemError",
    "ConfigValidationError",
    "EmptyInputError",
    "StorageError",
    "ItemNotFoundError",
]
