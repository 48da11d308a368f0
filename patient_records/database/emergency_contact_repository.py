"""Emergency contact repository."""

from dataclasses import dataclass

from ..schemas import EmergencyContactCreate
from .base_repository import BaseRepository, record_to_dict


@dataclass
class EmergencyContact:
    id: int
    patient_id: int
    full_name: str
    phone_number: str
    relation: str
    email: str
    address: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    def to_dict(self) -> dict:
        return record_to_dict(self)


class EmergencyContactRepository(BaseRepository[EmergencyContact]):
    """Repository for emergency contact rows."""

    table_name = "emergency_contacts"
    entity_name = "emergency contact"

    UPDATABLE_COLUMNS = {
        "full_name": "fullName",
        "phone_number": "phoneNumber",
        "relation": "relation",
        "email": "email",
        "address": "address",
    }

    def create(self, data: EmergencyContactCreate) -> EmergencyContact:
        return self._insert(
            [("patientId", data.patient_id)]
            + [(column, getattr(data, attr)) for attr, column in self.UPDATABLE_COLUMNS.items()]
        )

    def find_by_patient_id(self, patient_id: int) -> list[EmergencyContact]:
        rows = self.store.query(
            f"SELECT * FROM {self.table_name} WHERE patientId = ? ORDER BY {self.ORDER_BY}",
            (patient_id,),
        )
        return self._rows_to_records(rows)

    def delete_by_patient_id(self, patient_id: int) -> int:
        return self.store.execute(
            f"DELETE FROM {self.table_name} WHERE patientId = ?", (patient_id,)
        ).changes

    def _row_to_record(self, row: dict) -> EmergencyContact:
        return EmergencyContact(
            id=row["id"],
            patient_id=row["patientId"],
            full_name=row["fullName"],
            phone_number=row["phoneNumber"],
            relation=row["relation"],
            email=row["email"],
            address=row["address"],
            created_at=row["createdAt"],
            updated_at=row["updatedAt"],
        )
