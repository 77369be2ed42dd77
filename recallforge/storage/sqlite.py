"""
SQLite storage backend.

Schema
------
    items     one row per study item
    attempts  one row per review, FOREIGN KEY item_id ON DELETE CASCADE

Rows map through StudyItem.to_dict / from_dict, so timestamps are stored as
ISO-8601 text. Every public operation opens its own connection with foreign
keys enabled and runs in a single transaction, so a save writes the item row and its full attempt history or nothing at all.

All sqlite3 errors are logged and re-raised as StorageError with the
original exception chained.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

from recallforge.core.exceptions import ItemNotFoundError, StorageError
from recallforge.core.logging import get_logger
from recallforge.storage.base import StudyItemRepository
from recallforge.study.models import StudyItem

logger = get_logger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    item_id TEXT PRIMARY KEY,
    question TEXT NOT NULL,
    solution TEXT NOT NULL,
    difficulty INTEGER NOT NULL DEFAULT 2,
    confidence REAL NOT NULL DEFAULT 0.0,
    last_reviewed TEXT,
    next_review TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS attempts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    item_id TEXT NOT NULL,
    seq INTEGER NOT NULL,
    timestamp TEXT NOT NULL,
    success INTEGER NOT NULL,
    confidence_rating INTEGER NOT NULL,
    FOREIGN KEY (item_id) REFERENCES items(item_id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_items_next_review ON items(next_review);
CREATE INDEX IF NOT EXISTS idx_attempts_item ON attempts(item_id, seq);
"""


class SQLiteRepository(StudyItemRepository):
    """SQLite-backed repository.

    Args:
        db_path: Database file; parent directories are created
    """

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path)
        self._init_database()

    def _init_database(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(
                "Cannot create database directory", path=str(self.db_path.parent), error=str(e)
            )
            raise StorageError(f"Cannot create database directory: {e}") from e
        with self._transaction() as conn:
            conn.executescript(_SCHEMA)

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        """Open a connection, commit on success, roll back on error, close."""
        try:
            conn = sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.error("Cannot open database", path=str(self.db_path), error=str(e))
            raise StorageError(f"Cannot open database: {e}") from e

        conn.row_factory = sqlite3.Row
        try:
            conn.execute("PRAGMA foreign_keys = ON")
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error("Storage operation failed", path=str(self.db_path), error=str(e))
            raise StorageError(f"Storage operation failed: {e}") from e
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    # ------------------------------------------------------------------
    # Row mapping
    # ------------------------------------------------------------------

    def _load_attempts(
        self, conn: sqlite3.Connection, item_ids: List[str]
    ) -> Dict[str, List[Dict[str, Any]]]:
        attempts: Dict[str, List[Dict[str, Any]]] = {item_id: [] for item_id in item_ids}
        if not item_ids:
            return attempts

        placeholders = ", ".join("?" for _ in item_ids)
        rows = conn.execute(
            f"""
            SELECT item_id, timestamp, success, confidence_rating
            FROM attempts
            WHERE item_id IN ({placeholders})
            ORDER BY item_id, seq
            """,
            item_ids,
        ).fetchall()

        for row in rows:
            attempts[row["item_id"]].append(dict(row))
        return attempts

    def _rows_to_items(
        self, conn: sqlite3.Connection, rows: List[sqlite3.Row]
    ) -> List[StudyItem]:
        attempts = self._load_attempts(conn, [row["item_id"] for row in rows])
        return [
            StudyItem.from_dict({**dict(row), "attempts": attempts[row["item_id"]]})
            for row in rows
        ]

    def _write_attempts(self, conn: sqlite3.Connection, data: Dict[str, Any]) -> None:
        conn.execute("DELETE FROM attempts WHERE item_id = :item_id", data)
        conn.executemany(
            """
            INSERT INTO attempts (item_id, seq, timestamp, success, confidence_rating)
            VALUES (:item_id, :seq, :timestamp, :success, :confidence_rating)
            """,
            [
                {**attempt, "item_id": data["item_id"], "seq": seq}
                for seq, attempt in enumerate(data["attempts"])
            ],
        )

    # ------------------------------------------------------------------
    # Repository interface
    # ------------------------------------------------------------------

    def fetch_all(self) -> List[StudyItem]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM items ORDER BY created_at, rowid"
            ).fetchall()
            return self._rows_to_items(conn, rows)

    def fetch_by_id(self, item_id: str) -> Optional[StudyItem]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM items WHERE item_id = ?", (item_id,)
            ).fetchall()
            items = self._rows_to_items(conn, rows)
        return items[0] if items else None

    def fetch_due(self, now: datetime) -> List[StudyItem]:
        with self._transaction() as conn:
            rows = conn.execute(
                "SELECT * FROM items WHERE next_review <= ? ORDER BY next_review",
                (now.isoformat(),),
            ).fetchall()
            items = self._rows_to_items(conn, rows)
        # ISO text ordering breaks down across mixed offsets; re-check in Python
        due = [item for item in items if item.is_due(now)]
        return sorted(due, key=lambda item: item.next_review)

    def insert(self, item: StudyItem) -> None:
        with self._transaction() as conn:
            if self._exists(conn, item.item_id):
                raise StorageError(f"Study item already exists: {item.item_id}")
            data = item.to_dict()
            conn.execute(
                """
                INSERT INTO items
                (item_id, question, solution, difficulty, confidence,
                 last_reviewed, next_review, created_at)
                VALUES (:item_id, :question, :solution, :difficulty, :confidence,
                        :last_reviewed, :next_review, :created_at)
                """,
                data,
            )
            self._write_attempts(conn, data)
        logger.debug("Item inserted", item_id=item.item_id)

    def save(self, item: StudyItem) -> None:
        data = item.to_dict()
        with self._transaction() as conn:
            cursor = conn.execute(
                """
                UPDATE items
                SET question = :question, solution = :solution,
                    difficulty = :difficulty, confidence = :confidence,
                    last_reviewed = :last_reviewed, next_review = :next_review
                WHERE item_id = :item_id
                """,
                data,
            )
            if cursor.rowcount == 0:
                raise ItemNotFoundError(item.item_id)
            self._write_attempts(conn, data)

    def delete(self, item_id: str) -> None:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM items WHERE item_id = ?", (item_id,))
            if cursor.rowcount == 0:
                raise ItemNotFoundError(item_id)

    def count(self) -> int:
        with self._transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM items").fetchone()[0]

    def clear(self) -> int:
        with self._transaction() as conn:
            cursor = conn.execute("DELETE FROM items")
            return cursor.rowcount

    def attempt_count(self) -> int:
        """Total attempt rows across all items."""
        with self._transaction() as conn:
            return conn.execute("SELECT COUNT(*) FROM attempts").fetchone()[0]

    def _exists(self, conn: sqlite3.Connection, item_id: str) -> bool:
        row = conn.execute(
            "SELECT 1 FROM items WHERE item_id = ?", (item_id,)
        ).fetchone()
        return row is not None
