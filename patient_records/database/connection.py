"""Database connection manager and record store for SQLite."""

import logging
import sqlite3
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Sequence, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def get_connection(db_path: str | Path) -> sqlite3.Connection:
    """Get a database connection with row factory and foreign keys enabled."""
    # isolation_level=None keeps the connection in autocommit mode; explicit
    # transactions are opened by RecordStore.transaction.
    conn = sqlite3.connect(str(db_path), isolation_level=None)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


@dataclass
class ExecuteResult:
    changes: int
    inserted_id: int | None


class RecordStore:
    """Thin wrapper around a single SQLite connection.

    Exposes parameterized query/command/transaction primitives. Errors raised
    by sqlite3 propagate unchanged.
    """

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn
        self._transaction_depth = 0

    @classmethod
    def open(cls, db_path: str | Path) -> "RecordStore":
        """Open a store on a database file (or ":memory:")."""
        logger.debug("Opening database at %s", db_path)
        return cls(get_connection(db_path))

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def in_transaction(self) -> bool:
        return self._transaction_depth > 0

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        """Run a SELECT and return every row as a dict."""
        cursor = self._cursor()
        cursor.execute(sql, tuple(params))
        rows = cursor.fetchall()
        cursor.close()
        return [dict(row) for row in rows]

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> dict | None:
        """Run a SELECT and return the first row, or None."""
        cursor = self._cursor()
        cursor.execute(sql, tuple(params))
        row = cursor.fetchone()
        cursor.close()
        return dict(row) if row else None

    def execute(self, sql: str, params: Sequence[Any] = ()) -> ExecuteResult:
        """Run an INSERT, UPDATE or DELETE."""
        cursor = self._cursor()
        cursor.execute(sql, tuple(params))
        result = ExecuteResult(changes=cursor.rowcount, inserted_id=cursor.lastrowid)
        cursor.close()
        return result

    def transaction(self, fn: Callable[[], T]) -> T:
        """Run fn inside a transaction, rolling back if it raises.

        A call made while a transaction is already open joins it.
        """
        if self.in_transaction:
            return fn()

        self._cursor().execute("BEGIN")
        self._transaction_depth += 1
        try:
            result = fn()
        except BaseException:
            self._transaction_depth -= 1
            self._conn.execute("ROLLBACK")
            raise
        self._transaction_depth -= 1
        self._conn.execute("COMMIT")
        return result

    def exec_script(self, sql: str) -> None:
        """Run raw multi-statement SQL (schema changes)."""
        self._cursor().executescript(sql)

    def table_columns(self, table: str) -> list[str]:
        """Column names of a table, empty if the table does not exist."""
        return [row["name"] for row in self.query(f"PRAGMA table_info({table})")]

    def table_exists(self, table: str) -> bool:
        row = self.query_one(
            "SELECT 1 FROM sqlite_master WHERE type = 'table' AND name = ?", (table,)
        )
        return row is not None

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def _cursor(self) -> sqlite3.Cursor:
        if self._conn is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        return self._conn.cursor()
