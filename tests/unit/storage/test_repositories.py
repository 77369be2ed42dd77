"""Contract tests run against every repository backend."""

from datetime import timedelta

import pytest

from recallforge.core.exceptions import ItemNotFoundError, StorageError
from recallforge.storage.memory import InMemoryRepository
from recallforge.storage.sqlite import SQLiteRepository


@pytest.fixture(params=["memory", "sqlite"])
def repo(request, tmp_path):
    if request.param == "memory":
        return InMemoryRepository()
    return SQLiteRepository(tmp_path / "recall.db")


class TestInsertAndFetch:
    """Test storing and reading items."""

    def test_round_trip(self, repo, make_item, now) -> None:
        """A stored item with history comes back equal but not identical."""
        item = make_item(
            difficulty=4,
            ratings=[(True, 3), (False, 2), (True, 5)],
            next_review=now + timedelta(hours=6),
        )
        repo.insert(item)

        loaded = repo.fetch_by_id(item.item_id)
        assert loaded == item
        assert loaded is not item

    def test_never_reviewed_round_trip(self, repo, make_item) -> None:
        """last_reviewed None and an empty history survive storage."""
        item = make_item()
        repo.insert(item)
        loaded = repo.fetch_by_id(item.item_id)
        assert loaded.last_reviewed is None
        assert loaded.attempts == []
        assert loaded.confidence == 0.0

    def test_fetch_missing(self, repo) -> None:
        """Unknown ids return None."""
        assert repo.fetch_by_id("missing") is None

    def test_duplicate_insert(self, repo, make_item) -> None:
        """Inserting the same id twice fails and keeps one row."""
        item = make_item()
        repo.insert(item)
        with pytest.raises(StorageError, match="already exists"):
            repo.insert(item)
        assert repo.count() == 1

    def test_fetch_all_ordered_by_creation(self, repo, make_item, now) -> None:
        """fetch_all returns oldest first."""
        repo.insert(make_item(question="second", created_at=now - timedelta(days=1)))
        repo.insert(make_item(question="first", created_at=now - timedelta(days=2)))
        repo.insert(make_item(question="third", created_at=now))
        assert [i.question for i in repo.fetch_all()] == ["first", "second", "third"]

    def test_returned_items_are_copies(self, repo, make_item) -> None:
        """Mutating a fetched item does not touch the store."""
        item = make_item()
        repo.insert(item)

        loaded = repo.fetch_by_id(item.item_id)
        loaded.question = "changed"
        loaded.attempts.clear()

        assert repo.fetch_by_id(item.item_id).question == item.question

    def test_inserted_item_is_copied(self, repo, make_item) -> None:
        """Mutating after insert does not touch the store."""
        item = make_item()
        repo.insert(item)
        item.question = "changed after insert"
        assert repo.fetch_by_id(item.item_id).question != "changed after insert"


class TestFetchDue:
    def test_boundary_and_order(self, repo, make_item, now) -> None:
        """Due at the boundary, earliest first, future items excluded."""
        repo.insert(make_item(question="now", next_review=now))
        repo.insert(make_item(question="old", next_review=now - timedelta(days=3)))
        repo.insert(make_item(question="later", next_review=now + timedelta(seconds=1)))
        assert [i.question for i in repo.fetch_due(now)] == ["old", "now"]


class TestSave:
    """Test persisting changes."""

    def test_save_attempts_and_schedule(self, repo, make_item, now) -> None:
        """Save persists text, schedule and the full attempt list."""
        item = make_item()
        repo.insert(item)

        item.question = "edited"
        item.difficulty = 5
        item.next_review = now + timedelta(days=2)
        item.last_reviewed = now
        item.attempts = make_item(ratings=[(True, 4), (True, 2)]).attempts
        item.recompute_confidence()
        repo.save(item)

        assert repo.fetch_by_id(item.item_id) == item

    def test_save_missing(self, repo, make_item) -> None:
        """Saving an item that was never inserted is not found."""
        with pytest.raises(ItemNotFoundError):
            repo.save(make_item())


class TestDelete:
    def test_delete(self, repo, make_item) -> None:
        """Delete removes the item."""
        item = make_item(ratings=[(True, 3)])
        repo.insert(item)
        repo.delete(item.item_id)
        assert repo.fetch_by_id(item.item_id) is None
        assert repo.count() == 0

    def test_delete_missing(self, repo) -> None:
        """Deleting an unknown id reports that id."""
        with pytest.raises(ItemNotFoundError) as exc_info:
            repo.delete("missing")
        assert exc_info.value.item_id == "missing"

    def test_clear(self, repo, make_item) -> None:
        """Clear returns how many items it removed."""
        for n in range(3):
            repo.insert(make_item(question=str(n)))
        assert repo.clear() == 3
        assert repo.count() == 0
        assert repo.clear() == 0
