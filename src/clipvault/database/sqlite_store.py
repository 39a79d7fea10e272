"""
SQLite history store for clipvault.

Each operation opens its own short-lived connection, so the store can be
shared by the persistence pool threads and the command surface without a
connection lock. SQLite's own file locking serialises writers.
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Union

from clipvault.database.base import (
    DEFAULT_HISTORY_LIMIT,
    ClipboardStore,
    StorageError,
    now_timestamp,
)
from clipvault.models.clipboard_entry import ClipboardEntry, ContentType

logger = logging.getLogger(__name__)

# Seconds to wait on a locked database before giving up.
DB_TIMEOUT = 30

SCHEMA_DDL = """
    CREATE TABLE IF NOT EXISTS clipboard_history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        content TEXT NOT NULL,
        timestamp TEXT DEFAULT (datetime('now')),
        content_type TEXT DEFAULT 'text'
    );

    CREATE INDEX IF NOT EXISTS idx_timestamp
    ON clipboard_history(timestamp DESC);
"""

_LATEST_CONTENT_SQL = (
    "SELECT content FROM clipboard_history "
    "ORDER BY timestamp DESC, id DESC LIMIT 1"
)


class SQLiteStore(ClipboardStore):

    def __init__(self, db_path: Union[str, Path]) -> None:
        self.db_path = Path(db_path).expanduser()
        self._init_database()

    def _init_database(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to create data directory: {exc}") from exc

        with self._connect() as conn:
            conn.executescript(SCHEMA_DDL)
        logger.info("History database ready at %s", self.db_path)

    @contextmanager
    def _connect(self) -> Iterator[sqlite3.Connection]:
        conn = None
        try:
            conn = sqlite3.connect(
                self.db_path, timeout=DB_TIMEOUT, isolation_level=None)
            conn.row_factory = sqlite3.Row
            yield conn
        except sqlite3.Error as exc:
            raise StorageError(str(exc)) from exc
        finally:
            if conn is not None:
                conn.close()

    def insert_if_not_duplicate(
        self,
        content: str,
        content_type: ContentType,
        timestamp: Optional[str] = None,
    ) -> Optional[int]:
        timestamp = timestamp or now_timestamp()

        with self._connect() as conn:
            # IMMEDIATE takes the write lock before the duplicate check.
            conn.execute("BEGIN IMMEDIATE")
            try:
                row = conn.execute(_LATEST_CONTENT_SQL).fetchone()
                if row is not None and row["content"] == content:
                    conn.execute("ROLLBACK")
                    logger.debug("Skipping duplicate of latest entry")
                    return None

                cursor = conn.execute(
                    "INSERT INTO clipboard_history (content, content_type, timestamp) "
                    "VALUES (?, ?, ?)",
                    (content, ContentType(content_type).value, timestamp),
                )
                conn.execute("COMMIT")
            except BaseException:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

        return cursor.lastrowid

    def most_recent_content(self) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(_LATEST_CONTENT_SQL).fetchone()
        return row["content"] if row is not None else None

    def list_recent(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[ClipboardEntry]:
        if limit <= 0:
            return []

        with self._connect() as conn:
            rows = conn.execute(
                "SELECT id, content, timestamp, content_type FROM clipboard_history "
                "ORDER BY timestamp DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()

        return [
            ClipboardEntry(
                id=row["id"],
                content=row["content"],
                timestamp=row["timestamp"] or now_timestamp(),
                content_type=row["content_type"] or ContentType.TEXT,
            )
            for row in rows
        ]

    def delete_by_id(self, entry_id: int) -> bool:
        with self._connect() as conn:
            conn.execute("DELETE FROM clipboard_history WHERE id = ?", (entry_id,))
        return True

    def delete_all(self) -> bool:
        with self._connect() as conn:
            conn.execute("DELETE FROM clipboard_history")
        return True

    def __repr__(self) -> str:
        return f"<SQLiteStore path={str(self.db_path)!r}>"
