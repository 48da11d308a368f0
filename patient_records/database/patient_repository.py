"""Patient repository with CRUD, search and status lookups."""

from dataclasses import dataclass

from ..schemas import PatientCreate, PatientStatus
from .base_repository import LIKE_ESCAPE, NOW_MS, BaseRepository, like_pattern, record_to_dict, to_db_value


@dataclass
class Patient:
    id: int
    name: str
    age: int
    email: str
    phone_number: str
    birth_date: str
    marital_status: str
    gender: str
    sexual_orientation: str
    educational_level: str
    profession: str
    lives_with: str
    children: int
    previous_psychological_experience: str | None = None
    first_appointment_date: str | None = None
    status: str = PatientStatus.ACTIVE.value
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict:
        return record_to_dict(self)


class PatientRepository(BaseRepository[Patient]):
    """Repository for patient rows. No business rules live here."""

    table_name = "patients"
    entity_name = "patient"

    UPDATABLE_COLUMNS = {
        "name": "name",
        "age": "age",
        "email": "email",
        "phone_number": "phoneNumber",
        "birth_date": "birthDate",
        "marital_status": "maritalStatus",
        "gender": "gender",
        "sexual_orientation": "sexualOrientation",
        "educational_level": "educationalLevel",
        "profession": "profession",
        "lives_with": "livesWith",
        "children": "children",
        "previous_psychological_experience": "previousPsychologicalExperience",
        "first_appointment_date": "firstAppointmentDate",
        "status": "status",
    }

    def create(self, data: PatientCreate) -> Patient:
        """Insert a patient and return it as stored."""
        return self._insert([
            (column, getattr(data, attr)) for attr, column in self.UPDATABLE_COLUMNS.items()
        ])

    def search(self, term: str, status: PatientStatus | str | None = None) -> list[Patient]:
        """Case-insensitive substring search over name, email and phone."""
        like_term = like_pattern(term)
        query = f"""
            SELECT * FROM patients
            WHERE (LOWER(name) LIKE ? {LIKE_ESCAPE}
                   OR LOWER(email) LIKE ? {LIKE_ESCAPE}
                   OR LOWER(phoneNumber) LIKE ? {LIKE_ESCAPE})
        """
        params = [like_term, like_term, like_term]

        if status:
            query += " AND status = ?"
            params.append(to_db_value(status))

        query += f" ORDER BY {self.ORDER_BY}"
        return self._rows_to_records(self.store.query(query, params))

    def find_by_status(self, status: PatientStatus | str) -> list[Patient]:
        rows = self.store.query(
            f"SELECT * FROM patients WHERE status = ? ORDER BY {self.ORDER_BY}",
            (to_db_value(status),),
        )
        return self._rows_to_records(rows)

    def find_by_email(self, email: str) -> Patient | None:
        """Look up a patient by natural key."""
        row = self.store.query_one("SELECT * FROM patients WHERE email = ?", (email,))
        return self._row_to_record(row) if row else None

    def update_first_appointment_date(self, patient_id: int, first_date: str) -> None:
        self.store.execute(
            f"UPDATE patients SET firstAppointmentDate = ?, updatedAt = {NOW_MS} WHERE id = ?",
            (first_date, patient_id),
        )

    def find_without_first_appointment(self) -> list[Patient]:
        rows = self.store.query(
            f"SELECT * FROM patients WHERE firstAppointmentDate IS NULL ORDER BY {self.ORDER_BY}"
        )
        return self._rows_to_records(rows)

    def average_age(self) -> float:
        row = self.store.query_one("SELECT AVG(age) AS average FROM patients")
        return row["average"] or 0.0

    def _row_to_record(self, row: dict) -> Patient:
        """Convert a database row to a Patient object."""
        return Patient(
            id=row["id"],
            name=row["name"],
            age=row["age"],
            email=row["email"],
            phone_number=row["phoneNumber"],
            birth_date=row["birthDate"],
            marital_status=row["maritalStatus"],
            gender=row["gender"],
            sexual_orientation=row.get("sexualOrientation") or "prefer_not_to_say",
            educational_level=row["educationalLevel"],
            profession=row["profession"],
            lives_with=row["livesWith"],
            children=row["children"],
            previous_psychological_experience=row["previousPsychologicalExperience"],
            first_appointment_date=row.get("firstAppointmentDate"),
            status=row.get("status") or PatientStatus.ACTIVE.value,
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
