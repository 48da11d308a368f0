"""Emergency contact service."""

import logging

from ..database.emergency_contact_repository import EmergencyContact, EmergencyContactRepository
from ..database.patient_repository import PatientRepository
from ..exceptions import NotFoundError
from ..schemas import EmergencyContactCreate, EmergencyContactUpdate
from .patient_service import check_id

logger = logging.getLogger(__name__)


class EmergencyContactService:
    """Validation and normalization for a patient's emergency contacts."""

    def __init__(
        self,
        emergency_contact_repository: EmergencyContactRepository,
        patient_repository: PatientRepository,
    ):
        self.emergency_contact_repository = emergency_contact_repository
        self.patient_repository = patient_repository

    def create_emergency_contact(self, data: EmergencyContactCreate | dict) -> EmergencyContact:
        contact_data = EmergencyContactCreate.parse(data)
        if not self.patient_repository.exists(contact_data.patient_id):
            raise NotFoundError(f"Patient with ID {contact_data.patient_id} not found")
        contact = self.emergency_contact_repository.create(contact_data)
        logger.info("Created emergency contact %s for patient %s", contact.id, contact.patient_id)
        return contact

    def get_emergency_contact_by_id(self, contact_id: int) -> EmergencyContact | None:
        check_id(contact_id, "emergency contact")
        return self.emergency_contact_repository.find_by_id(contact_id)

    def get_emergency_contacts_by_patient_id(self, patient_id: int) -> list[EmergencyContact]:
        check_id(patient_id, "patient")
        return self.emergency_contact_repository.find_by_patient_id(patient_id)

    def update_emergency_contact(self, contact_id: int, data: EmergencyContactUpdate | dict) -> EmergencyContact:
        """Update a contact; the merged record must still pass validation."""
        check_id(contact_id, "emergency contact")
        existing = self.emergency_contact_repository.find_by_id(contact_id)
        if not existing:
            raise NotFoundError("Emergency contact not found")

        patch = EmergencyContactUpdate.parse(data)
        merged = EmergencyContactCreate.parse({
            "patient_id": existing.patient_id,
            "full_name": existing.full_name,
            "phone_number": existing.phone_number,
            "relation": existing.relation,
            "email": existing.email,
            "address": existing.address,
            **patch.changes(),
        })
        normalized = EmergencyContactUpdate.model_validate(
            {field: getattr(merged, field) for field in patch.model_fields_set}
        )
        return self.emergency_contact_repository.update(contact_id, normalized)

    def delete_emergency_contact(self, contact_id: int) -> bool:
        check_id(contact_id, "emergency contact")
        if not self.emergency_contact_repository.exists(contact_id):
            raise NotFoundError("Emergency contact not found")
        return self.emergency_contact_repository.delete(contact_id)

    def delete_emergency_contacts_by_patient_id(self, patient_id: int) -> int:
        check_id(patient_id, "patient")
        return self.emergency_contact_repository.delete_by_patient_id(patient_id)
