"""Legal tutor service."""

import logging

from ..database.legal_tutor_repository import LegalTutor, LegalTutorRepository
from ..database.patient_repository import PatientRepository
from ..exceptions import NotFoundError
from ..schemas import LegalTutorCreate, LegalTutorUpdate
from .patient_service import check_id

logger = logging.getLogger(__name__)


class LegalTutorService:
    """Validation and normalization for a patient's legal tutors."""

    def __init__(self, legal_tutor_repository: LegalTutorRepository, patient_repository: PatientRepository):
        self.legal_tutor_repository = legal_tutor_repository
        self.patient_repository = patient_repository

    def create_legal_tutor(self, data: LegalTutorCreate | dict) -> LegalTutor:
        tutor_data = LegalTutorCreate.parse(data)
        if not self.patient_repository.exists(tutor_data.patient_id):
            raise NotFoundError(f"Patient with ID {tutor_data.patient_id} not found")
        tutor = self.legal_tutor_repository.create(tutor_data)
        logger.info("Created legal tutor %s for patient %s", tutor.id, tutor.patient_id)
        return tutor

    def get_legal_tutor_by_id(self, tutor_id: int) -> LegalTutor | None:
        check_id(tutor_id, "legal tutor")
        return self.legal_tutor_repository.find_by_id(tutor_id)

    def get_legal_tutors_by_patient_id(self, patient_id: int) -> list[LegalTutor]:
        check_id(patient_id, "patient")
        return self.legal_tutor_repository.find_by_patient_id(patient_id)

    def update_legal_tutor(self, tutor_id: int, data: LegalTutorUpdate | dict) -> LegalTutor:
        check_id(tutor_id, "legal tutor")
        existing = self.legal_tutor_repository.find_by_id(tutor_id)
        if not existing:
            raise NotFoundError("Legal tutor not found")

        patch = LegalTutorUpdate.parse(data)
        merged = LegalTutorCreate.parse({
            "patient_id": existing.patient_id,
            "full_name": existing.full_name,
            "phone_number": existing.phone_number,
            "relation": existing.relation,
            "email": existing.email,
            "birth_date": existing.birth_date,
            "address": existing.address,
            **patch.changes(),
        })
        normalized = LegalTutorUpdate.model_validate(
            {field: getattr(merged, field) for field in patch.model_fields_set}
        )
        return self.legal_tutor_repository.update(tutor_id, normalized)

    def delete_legal_tutor(self, tutor_id: int) -> bool:
        check_id(tutor_id, "legal tutor")
        if not self.legal_tutor_repository.exists(tutor_id):
            raise NotFoundError("Legal tutor not found")
        return self.legal_tutor_repository.delete(tutor_id)

    def delete_legal_tutors_by_patient_id(self, patient_id: int) -> int:
        check_id(patient_id, "patient")
        return self.legal_tutor_repository.delete_by_patient_id(patient_id)
