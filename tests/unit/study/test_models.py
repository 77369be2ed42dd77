"""Tests for StudyItem and AttemptRecord."""

import dataclasses
from datetime import timedelta

import pytest

from recallforge.core.exceptions import InvalidDifficultyError, InvalidRatingError
from recallforge.study.models import (
    AttemptRecord,
    StudyItem,
    validate_difficulty,
    validate_rating,
)


class TestValidation:
    @pytest.mark.parametrize("value", [1, 3, 5])
    def test_valid_rating(self, value) -> None:
        """Ratings 1 to 5 pass through."""
        assert validate_rating(value) == value

    @pytest.mark.parametrize("value", [0, 6, 2.0, "3", None, False])
    def test_invalid_rating(self, value) -> None:
        """Out-of-range, float, string, None and bool ratings are rejected."""
        with pytest.raises(InvalidRatingError):
            validate_rating(value)

    @pytest.mark.parametrize("value", [0, 6, 1.5, True])
    def test_invalid_difficulty(self, value) -> None:
        """Difficulty must be an int in [1, 5]."""
        with pytest.raises(InvalidDifficultyError):
            validate_difficulty(value)


class TestStudyItem:
    """Test item lifecycle helpers."""

    def test_create(self, now) -> None:
        """New items are due immediately and never reviewed."""
        item = StudyItem.create("Q", "A", difficulty=3, now=now)
        assert item.next_review == now
        assert item.created_at == now
        assert item.last_reviewed is None
        assert item.never_reviewed
        assert item.confidence == 0.0
        assert item.attempts == []
        assert len(item.item_id) == 32

    def test_create_rejects_difficulty(self, now) -> None:
        """create validates difficulty."""
        with pytest.raises(InvalidDifficultyError):
            StudyItem.create("Q", "A", difficulty=0, now=now)

    def test_unique_ids(self, now) -> None:
        """Every item gets its own id."""
        assert StudyItem.create("Q", "A", now=now).item_id != StudyItem.create(
            "Q", "A", now=now
        ).item_id

    def test_is_due(self, make_item, now) -> None:
        """Due at next_review, not a second before."""
        item = make_item(next_review=now)
        assert item.is_due(now)
        assert not item.is_due(now - timedelta(seconds=1))

    def test_success_helpers(self, make_item) -> None:
        """Attempt counts and success rate."""
        item = make_item(ratings=[(False, 1), (True, 4), (True, 3), (False, 2)])
        assert item.attempt_count == 4
        assert item.success_count == 2
        assert item.success_rate == 0.5
        assert item.has_succeeded

    def test_success_rate_without_attempts(self, make_item) -> None:
        """No attempts means no rate."""
        item = make_item()
        assert item.success_rate is None
        assert not item.has_succeeded

    def test_recompute_confidence(self, make_item) -> None:
        """Confidence is the mean rating, 0 with no attempts."""
        item = make_item(ratings=[(True, 2), (True, 4), (True, 5)])
        assert item.confidence == pytest.approx(11 / 3)
        item.attempts.clear()
        assert item.recompute_confidence() == 0.0

    def test_copy_is_deep(self, make_item) -> None:
        """Changing a copy's attempts leaves the original alone."""
        item = make_item(ratings=[(True, 3)])
        clone = item.copy()
        clone.attempts.append(clone.attempts[0])
        assert item.attempt_count == 1

    def test_update_from(self, make_item, now) -> None:
        """update_from copies state without sharing the attempt list."""
        item = make_item()
        other = item.copy()
        other.question = "changed"
        other.next_review = now + timedelta(hours=6)
        item.update_from(other)
        assert item == other
        assert item.attempts is not other.attempts

    def test_dict_round_trip(self, make_item, now) -> None:
        """to_dict and from_dict preserve every field."""
        item = make_item(ratings=[(True, 3), (False, 1)])
        assert StudyItem.from_dict(item.to_dict()) == item


class TestAttemptRecord:
    def test_frozen(self, now) -> None:
        """Attempts cannot be edited after the fact."""
        attempt = AttemptRecord(now, True, 4)
        with pytest.raises(dataclasses.FrozenInstanceError):
            attempt.success = False
