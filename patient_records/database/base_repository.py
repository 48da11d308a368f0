"""Common repository plumbing shared by the entity repositories."""

from dataclasses import asdict
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic.alias_generators import to_camel

from ..exceptions import IntegrityError
from .connection import RecordStore

T = TypeVar("T")

# SQLite timestamp with millisecond precision, used on every update
NOW_MS = "strftime('%Y-%m-%d %H:%M:%f', 'now')"

# Pair with like_pattern(); % and _ in user terms match literally
LIKE_ESCAPE = "ESCAPE '\\'"


def like_pattern(term: str) -> str:
    """Lower-cased substring pattern with LIKE wildcards escaped."""
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def record_to_dict(record) -> dict:
    """Convert a record dataclass to a camelCase dict for the UI and backups."""
    return {to_camel(key): value for key, value in asdict(record).items()}


def to_db_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class BaseRepository(Generic[T]):
    """Repository base with lookups, counting, deletes and patch handling.

    Subclasses set ``table_name``, ``entity_name`` and ``UPDATABLE_COLUMNS``
    (attribute name -> column name) and implement ``_row_to_record``.
    """

    table_name: str = ""
    entity_name: str = "record"
    ORDER_BY = "createdAt DESC, id DESC"

    # Attribute name on the patch model -> column name
    UPDATABLE_COLUMNS: dict[str, str] = {}

    def __init__(self, store: RecordStore):
        self.store = store

    def find_by_id(self, record_id: int) -> T | None:
        row = self.store.query_one(f"SELECT * FROM {self.table_name} WHERE id = ?", (record_id,))
        return self._row_to_record(row) if row else None

    def find_all(self) -> list[T]:
        rows = self.store.query(f"SELECT * FROM {self.table_name} ORDER BY {self.ORDER_BY}")
        return [self._row_to_record(row) for row in rows]

    def delete(self, record_id: int) -> bool:
        result = self.store.execute(f"DELETE FROM {self.table_name} WHERE id = ?", (record_id,))
        return result.changes > 0

    def exists(self, record_id: int) -> bool:
        row = self.store.query_one(
            f"SELECT 1 FROM {self.table_name} WHERE id = ? LIMIT 1", (record_id,)
        )
        return row is not None

    def count(self) -> int:
        row = self.store.query_one(f"SELECT COUNT(*) AS count FROM {self.table_name}")
        return row["count"] if row else 0

    def update(self, record_id: int, patch) -> T | None:
        """Apply a partial update; an empty patch only re-fetches the record."""
        pairs = self.patch_columns(patch)
        if not pairs:
            return self.find_by_id(record_id)

        set_clause = ", ".join(f"{column} = ?" for column, _ in pairs)
        values = [value for _, value in pairs]
        self.store.execute(
            f"UPDATE {self.table_name} SET {set_clause}, updatedAt = {NOW_MS} WHERE id = ?",
            values + [record_id],
        )
        return self.find_by_id(record_id)

    def patch_columns(self, patch) -> list[tuple[str, Any]]:
        """Map the supplied fields of a patch model to (column, value) pairs."""
        supplied = patch.model_fields_set
        return [
            (column, to_db_value(getattr(patch, attr)))
            for attr, column in self.UPDATABLE_COLUMNS.items()
            if attr in supplied
        ]

    # Private helpers

    def _insert(self, pairs: list[tuple[str, Any]]) -> T:
        """Insert a row from (column, value) pairs and return the stored record."""
        columns = ", ".join(column for column, _ in pairs)
        placeholders = ", ".join("?" for _ in pairs)
        result = self.store.execute(
            f"INSERT INTO {self.table_name} ({columns}) VALUES ({placeholders})",
            [to_db_value(value) for _, value in pairs],
        )
        created = self.find_by_id(result.inserted_id) if result.inserted_id else None
        if created is None:
            raise IntegrityError(f"Failed to create {self.entity_name}")
        return created

    def _rows_to_records(self, rows: list[dict]) -> list[T]:
        return [self._row_to_record(row) for row in rows]

    def _row_to_record(self, row: dict) -> T:
        raise NotImplementedError
