"""Tests for the recallforge command line.

Each test runs against its own SQLite database passed with --db.
"""

import pytest
from typer.testing import CliRunner

from recallforge import __version__
from recallforge.cli.main import app
from recallforge.storage.sqlite import SQLiteRepository

ENV_VARS = ("RECALLFORGE_DB_PATH", "RECALLFORGE_STORAGE_BACKEND", "RECALLFORGE_LOG_LEVEL")


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def db_path(tmp_path, monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path / "recall.db"


@pytest.fixture
def invoke(runner, db_path):
    def _invoke(*args: str, **kwargs):
        return runner.invoke(app, ["--db", str(db_path), *args], **kwargs)

    return _invoke


@pytest.fixture
def item_id(invoke, db_path) -> str:
    result = invoke("add", "What is the capital of France?", "Paris", "--difficulty", "2")
    assert result.exit_code == 0, result.output
    (item,) = SQLiteRepository(db_path).fetch_all()
    return item.item_id


class TestVersionAndHelp:
    def test_version(self, runner) -> None:
        """--version prints the package version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner) -> None:
        """Top-level help names every command."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("add", "list", "due", "pick", "review", "stats", "weights"):
            assert command in result.output


class TestAddAndList:
    def test_add(self, invoke, db_path, item_id) -> None:
        """add stores the item with its difficulty."""
        (item,) = SQLiteRepository(db_path).fetch_all()
        assert item.question == "What is the capital of France?"
        assert item.solution == "Paris"
        assert item.difficulty == 2

    def test_add_blank_question(self, invoke) -> None:
        """A whitespace-only question is rejected with its error code."""
        result = invoke("add", "   ", "Paris")
        assert result.exit_code == 1
        assert "RF-VAL-004" in result.output

    def test_add_bad_difficulty(self, invoke) -> None:
        """Difficulty 0 is out of range."""
        result = invoke("add", "Q", "A", "--difficulty", "0")
        assert result.exit_code == 1
        assert "RF-VAL-002" in result.output

    def test_list_empty(self, invoke) -> None:
        """An empty store prints a friendly message."""
        result = invoke("list")
        assert result.exit_code == 0
        assert "No study items found" in result.output

    def test_list_search(self, invoke, item_id) -> None:
        """--search filters on question text."""
        invoke("add", "Largest planet?", "Jupiter")
        result = invoke("list", "--search", "france")
        assert result.exit_code == 0
        assert "France" in result.output
        assert "planet" not in result.output


class TestReview:
    """Test recording reviews."""

    def test_success(self, invoke, db_path, item_id) -> None:
        """A successful rating-3 review schedules 24 hours out."""
        result = invoke("review", item_id, "--success", "--rating", "3")
        assert result.exit_code == 0, result.output
        assert "Next review in 24.0h" in result.output

        item = SQLiteRepository(db_path).fetch_by_id(item_id)
        assert item.attempt_count == 1
        assert item.confidence == 3.0

    def test_fail(self, invoke, item_id) -> None:
        """A failed rating-4 review comes back in 2 hours."""
        result = invoke("review", item_id, "--fail", "--rating", "4")
        assert result.exit_code == 0, result.output
        assert "Next review in 2.0h" in result.output

    def test_out_of_range_rating(self, invoke, db_path, item_id) -> None:
        """Rating 6 is rejected and nothing is recorded."""
        result = invoke("review", item_id, "--success", "--rating", "6")
        assert result.exit_code == 1
        assert "RF-VAL-001" in result.output
        assert "How to fix" in result.output
        assert SQLiteRepository(db_path).fetch_by_id(item_id).attempts == []

    def test_unknown_item(self, invoke) -> None:
        """Reviewing a missing id reports not found."""
        result = invoke("review", "does-not-exist", "--success", "--rating", "3")
        assert result.exit_code == 1
        assert "RF-STOR-001" in result.output


class TestDueAndPick:
    def test_new_item_is_due(self, invoke, item_id) -> None:
        """A freshly added item shows up as due."""
        result = invoke("due")
        assert result.exit_code == 0
        assert "Due for review (1)" in result.output

    def test_nothing_due_after_review(self, invoke, item_id) -> None:
        """A successful review moves the item out of the due list."""
        invoke("review", item_id, "--success", "--rating", "5")
        result = invoke("due")
        assert "Nothing is due" in result.output

    def test_force_due(self, invoke, item_id) -> None:
        """force-due puts a reviewed item back in the due list."""
        invoke("review", item_id, "--success", "--rating", "5")
        result = invoke("force-due", item_id)
        assert result.exit_code == 0
        assert "Due for review (1)" in invoke("due").output

    def test_pick(self, invoke, item_id) -> None:
        """A seeded pick with --reveal shows question and answer."""
        result = invoke("pick", "--seed", "1", "--reveal")
        assert result.exit_code == 0, result.output
        assert "France" in result.output
        assert "Paris" in result.output

    def test_pick_empty(self, invoke) -> None:
        """Picking from an empty store is not an error."""
        result = invoke("pick")
        assert result.exit_code == 0
        assert "No study items" in result.output


class TestEditDelete:
    def test_edit(self, invoke, db_path, item_id) -> None:
        """edit changes the solution and difficulty."""
        result = invoke("edit", item_id, "--solution", "Paris, France", "--difficulty", "4")
        assert result.exit_code == 0, result.output
        item = SQLiteRepository(db_path).fetch_by_id(item_id)
        assert item.solution == "Paris, France"
        assert item.difficulty == 4

    def test_delete_with_confirmation(self, invoke, db_path, item_id) -> None:
        """Answering yes at the prompt deletes the item."""
        result = invoke("delete", item_id, input="y\n")
        assert result.exit_code == 0, result.output
        assert SQLiteRepository(db_path).count() == 0

    def test_delete_aborted(self, invoke, db_path, item_id) -> None:
        """Answering no keeps the item and exits non-zero."""
        result = invoke("delete", item_id, input="n\n")
        assert result.exit_code == 1
        assert SQLiteRepository(db_path).count() == 1

    def test_delete_missing(self, invoke) -> None:
        """Deleting a missing id reports not found."""
        result = invoke("delete", "missing", "--yes")
        assert result.exit_code == 1
        assert "RF-STOR-001" in result.output


class TestDiagnostics:
    def test_weights(self, invoke, item_id) -> None:
        """A lone never-reviewed item has weight 640 and the whole share."""
        result = invoke("weights")
        assert result.exit_code == 0, result.output
        assert "640" in result.output
        assert "100.0%" in result.output

    def test_stats(self, invoke, item_id) -> None:
        """stats reports totals and the success rate."""
        invoke("review", item_id, "--success", "--rating", "4")
        result = invoke("stats")
        assert result.exit_code == 0, result.output
        assert "Total items" in result.output
        assert "100.0%" in result.output

    def test_config_file(self, runner, tmp_path, db_path) -> None:
        """--config can switch to the memory backend."""
        config = tmp_path / "custom.yaml"
        config.write_text("storage:\n  backend: memory\n", encoding="utf-8")
        result = runner.invoke(app, ["--config", str(config), "list"])
        assert result.exit_code == 0, result.output
        assert not db_path.exists()
