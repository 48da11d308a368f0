"""Patient service: validation, normalization and patient business rules."""

import logging
from datetime import date

from ..database.patient_repository import Patient, PatientRepository
from ..exceptions import NotFoundError, ValidationError
from ..schemas import PatientCreate, PatientStatus, PatientUpdate

logger = logging.getLogger(__name__)


def check_id(record_id: int, label: str) -> None:
    if not isinstance(record_id, int) or isinstance(record_id, bool) or record_id <= 0:
        raise ValidationError(f"Invalid {label} ID")


def today() -> str:
    """Today's local date as YYYY-MM-DD."""
    return date.today().isoformat()


class PatientService:
    """Business logic for patients.

    Input is parsed through ``PatientCreate``/``PatientUpdate``, which trim
    names and phones, lower-case emails and enforce ranges.
    """

    def __init__(self, patient_repository: PatientRepository):
        self.patient_repository = patient_repository

    def create_patient(self, data: PatientCreate | dict) -> Patient:
        patient_data = PatientCreate.parse(data)
        self._ensure_email_available(patient_data.email)
        patient = self.patient_repository.create(patient_data)
        logger.info("Created patient %s", patient.id)
        return patient

    def get_patient_by_id(self, patient_id: int) -> Patient | None:
        check_id(patient_id, "patient")
        return self.patient_repository.find_by_id(patient_id)

    def get_all_patients(self) -> list[Patient]:
        return self.patient_repository.find_all()

    def update_patient(self, patient_id: int, data: PatientUpdate | dict) -> Patient:
        check_id(patient_id, "patient")
        existing = self.patient_repository.find_by_id(patient_id)
        if not existing:
            raise NotFoundError(f"Patient with ID {patient_id} not found")

        patch = PatientUpdate.parse(data)
        if "email" in patch.model_fields_set and patch.email != existing.email:
            self._ensure_email_available(patch.email)

        updated = self.patient_repository.update(patient_id, patch)
        if patch.model_fields_set:
            logger.info("Updated patient %s (%s)", patient_id, ", ".join(sorted(patch.model_fields_set)))
        return updated

    def delete_patient(self, patient_id: int) -> bool:
        """Delete a patient; notes, contacts and tutors go with it."""
        check_id(patient_id, "patient")
        if not self.patient_repository.exists(patient_id):
            raise NotFoundError(f"Patient with ID {patient_id} not found")
        deleted = self.patient_repository.delete(patient_id)
        logger.info("Deleted patient %s", patient_id)
        return deleted

    def search_patients(self, term: str | None, status: PatientStatus | str | None = None) -> list[Patient]:
        """Search by name, email or phone. A blank term lists all (or by status)."""
        status = self._parse_status(status) if status else None
        if not term or not term.strip():
            if status:
                return self.patient_repository.find_by_status(status)
            return self.get_all_patients()
        return self.patient_repository.search(term.strip(), status)

    def get_patients_by_status(self, status: PatientStatus | str) -> list[Patient]:
        return self.patient_repository.find_by_status(self._parse_status(status))

    def set_first_appointment_date_if_not_set(self, patient_id: int) -> bool:
        """Set the first appointment date to today if missing.

        Returns True when the date was written.
        """
        patient = self.patient_repository.find_by_id(patient_id)
        if not patient:
            raise NotFoundError(f"Patient with ID {patient_id} not found")

        if patient.first_appointment_date:
            return False

        self.patient_repository.update_first_appointment_date(patient_id, today())
        logger.info("Set first appointment date for patient %s", patient_id)
        return True

    def get_patient_statistics(self) -> dict:
        total = self.patient_repository.count()
        without_first = len(self.patient_repository.find_without_first_appointment())
        average_age = self.patient_repository.average_age() if total else 0.0
        return {
            "total": total,
            "withoutFirstAppointment": without_first,
            "averageAge": round(average_age, 2),
        }

    # Private helpers

    def _ensure_email_available(self, email: str) -> None:
        if self.patient_repository.find_by_email(email):
            raise ValidationError(f"A patient with email {email} already exists")

    def _parse_status(self, status: PatientStatus | str) -> PatientStatus:
        try:
            return PatientStatus(status)
        except ValueError:
            allowed = ", ".join(s.value for s in PatientStatus)
            raise ValidationError(f"Invalid patient status '{status}'. Expected one of: {allowed}")
