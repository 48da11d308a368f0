"""Note repository: session notes owned by a patient."""

from dataclasses import dataclass

from ..schemas import NoteCreate
from .base_repository import LIKE_ESCAPE, BaseRepository, like_pattern, record_to_dict


@dataclass
class Note:
    id: int
    patient_id: int
    title: str
    content: str
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict:
        return record_to_dict(self)


class NoteRepository(BaseRepository[Note]):
    """Repository for note rows."""

    table_name = "notes"
    entity_name = "note"

    UPDATABLE_COLUMNS = {
        "title": "title",
        "content": "content",
    }

    def create(self, data: NoteCreate) -> Note:
        return self._insert([
            ("patientId", data.patient_id),
            ("title", data.title),
            ("content", data.content),
        ])

    def find_by_patient_id(self, patient_id: int) -> list[Note]:
        rows = self.store.query(
            f"SELECT * FROM notes WHERE patientId = ? ORDER BY {self.ORDER_BY}", (patient_id,)
        )
        return self._rows_to_records(rows)

    def delete_by_patient_id(self, patient_id: int) -> int:
        """Delete every note of a patient, returning how many were removed."""
        return self.store.execute("DELETE FROM notes WHERE patientId = ?", (patient_id,)).changes

    def count_by_patient_id(self, patient_id: int) -> int:
        row = self.store.query_one(
            "SELECT COUNT(*) AS count FROM notes WHERE patientId = ?", (patient_id,)
        )
        return row["count"] if row else 0

    def search(self, term: str) -> list[Note]:
        """Case-insensitive substring search over title and content."""
        like_term = like_pattern(term)
        rows = self.store.query(
            f"""SELECT * FROM notes
               WHERE LOWER(title) LIKE ? {LIKE_ESCAPE} OR LOWER(content) LIKE ? {LIKE_ESCAPE}
               ORDER BY {self.ORDER_BY}""",
            (like_term, like_term),
        )
        return self._rows_to_records(rows)

    def _row_to_record(self, row: dict) -> Note:
        return Note(
            id=row["id"],
            patient_id=row["patientId"],
            title=row["title"],
            content=row["content"],
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
