"""Request/response bridge between the UI layer and the services.

Each channel maps to a handler. Handlers never raise: every error is turned
into ``{"success": False, "error": message}``.
"""

import logging
from typing import Any, Callable

from .app import RecordsApp
from .backup import ProgressCallback
from .exceptions import ValidationError
from .responses import fail, ok, to_payload

logger = logging.getLogger(__name__)


def split_id(data: dict | None, label: str) -> tuple[Any, dict]:
    """Separate the record id from an update payload."""
    if not data or "id" not in data:
        raise ValidationError(f"Invalid {label} ID")
    return data["id"], {key: value for key, value in data.items() if key != "id"}


class RecordsAPI:
    """Dispatches channel requests to the application services."""

    def __init__(self, app: RecordsApp):
        self.app = app
        self.handlers: dict[str, Callable[..., dict]] = {
            # Patients
            "patient:create": self.create_patient,
            "patient:getAll": self.get_all_patients,
            "patient:getById": self.get_patient_by_id,
            "patient:update": self.update_patient,
            "patient:delete": self.delete_patient,
            "patient:search": self.search_patients,
            "patient:getByStatus": self.get_patients_by_status,
            "patient:statistics": self.get_patient_statistics,
            # Notes
            "note:create": self.create_note,
            "note:getAll": self.get_all_notes,
            "note:getById": self.get_note_by_id,
            "note:getByPatientId": self.get_notes_by_patient_id,
            "note:update": self.update_note,
            "note:delete": self.delete_note,
            "note:search": self.search_notes,
            "note:countByPatientId": self.count_notes_for_patient,
            "note:statistics": self.get_notes_statistics,
            # Emergency contacts
            "emergencyContact:create": self.create_emergency_contact,
            "emergencyContact:getById": self.get_emergency_contact_by_id,
            "emergencyContact:getByPatientId": self.get_emergency_contacts_by_patient_id,
            "emergencyContact:update": self.update_emergency_contact,
            "emergencyContact:delete": self.delete_emergency_contact,
            # Legal tutors
            "legalTutor:create": self.create_legal_tutor,
            "legalTutor:getById": self.get_legal_tutor_by_id,
            "legalTutor:getByPatientId": self.get_legal_tutors_by_patient_id,
            "legalTutor:update": self.update_legal_tutor,
            "legalTutor:delete": self.delete_legal_tutor,
            # Backups
            "backup:export": self.export_database,
            "backup:import": self.import_database,
        }

    def invoke(self, channel: str, *args, **kwargs) -> dict:
        """Run the handler for a channel and return its response envelope."""
        handler = self.handlers.get(channel)
        if handler is None:
            return fail(f"Unknown channel: {channel}")
        try:
            return handler(*args, **kwargs)
        except Exception as e:
            logger.warning("Request %s failed: %s", channel, e)
            return fail(str(e))

    # Patients

    def create_patient(self, data: dict) -> dict:
        return ok(to_payload(self.app.patient_service.create_patient(data)))

    def get_all_patients(self) -> dict:
        return ok(to_payload(self.app.patient_service.get_all_patients()))

    def get_patient_by_id(self, patient_id: int) -> dict:
        patient = self.app.patient_service.get_patient_by_id(patient_id)
        if not patient:
            return fail("Patient not found")
        return ok(to_payload(patient))

    def update_patient(self, data: dict) -> dict:
        patient_id, changes = split_id(data, "patient")
        return ok(to_payload(self.app.patient_service.update_patient(patient_id, changes)))

    def delete_patient(self, patient_id: int) -> dict:
        return ok(self.app.patient_service.delete_patient(patient_id))

    def search_patients(self, term: str, status: str | None = None) -> dict:
        return ok(to_payload(self.app.patient_service.search_patients(term, status)))

    def get_patients_by_status(self, status: str) -> dict:
        return ok(to_payload(self.app.patient_service.get_patients_by_status(status)))

    def get_patient_statistics(self) -> dict:
        return ok(self.app.patient_service.get_patient_statistics())

    # Notes

    def create_note(self, data: dict) -> dict:
        return ok(to_payload(self.app.note_service.create_note(data)))

    def get_all_notes(self) -> dict:
        return ok(to_payload(self.app.note_service.get_all_notes()))

    def get_note_by_id(self, note_id: int) -> dict:
        note = self.app.note_service.get_note_by_id(note_id)
        if not note:
            return fail("Note not found")
        return ok(to_payload(note))

    def get_notes_by_patient_id(self, patient_id: int) -> dict:
        return ok(to_payload(self.app.note_service.get_notes_by_patient_id(patient_id)))

    def update_note(self, data: dict) -> dict:
        note_id, changes = split_id(data, "note")
        return ok(to_payload(self.app.note_service.update_note(note_id, changes)))

    def delete_note(self, note_id: int) -> dict:
        return ok(self.app.note_service.delete_note(note_id))

    def search_notes(self, term: str) -> dict:
        return ok(to_payload(self.app.note_service.search_notes(term)))

    def count_notes_for_patient(self, patient_id: int) -> dict:
        return ok(self.app.note_service.get_note_count_for_patient(patient_id))

    def get_notes_statistics(self) -> dict:
        return ok(self.app.note_service.get_notes_statistics())

    # Emergency contacts

    def create_emergency_contact(self, data: dict) -> dict:
        return ok(to_payload(self.app.emergency_contact_service.create_emergency_contact(data)))

    def get_emergency_contact_by_id(self, contact_id: int) -> dict:
        contact = self.app.emergency_contact_service.get_emergency_contact_by_id(contact_id)
        if not contact:
            return fail("Emergency contact not found")
        return ok(to_payload(contact))

    def get_emergency_contacts_by_patient_id(self, patient_id: int) -> dict:
        service = self.app.emergency_contact_service
        return ok(to_payload(service.get_emergency_contacts_by_patient_id(patient_id)))

    def update_emergency_contact(self, data: dict) -> dict:
        contact_id, changes = split_id(data, "emergency contact")
        service = self.app.emergency_contact_service
        return ok(to_payload(service.update_emergency_contact(contact_id, changes)))

    def delete_emergency_contact(self, contact_id: int) -> dict:
        return ok(self.app.emergency_contact_service.delete_emergency_contact(contact_id))

    # Legal tutors

    def create_legal_tutor(self, data: dict) -> dict:
        return ok(to_payload(self.app.legal_tutor_service.create_legal_tutor(data)))

    def get_legal_tutor_by_id(self, tutor_id: int) -> dict:
        tutor = self.app.legal_tutor_service.get_legal_tutor_by_id(tutor_id)
        if not tutor:
            return fail("Legal tutor not found")
        return ok(to_payload(tutor))

    def get_legal_tutors_by_patient_id(self, patient_id: int) -> dict:
        return ok(to_payload(self.app.legal_tutor_service.get_legal_tutors_by_patient_id(patient_id)))

    def update_legal_tutor(self, data: dict) -> dict:
        tutor_id, changes = split_id(data, "legal tutor")
        return ok(to_payload(self.app.legal_tutor_service.update_legal_tutor(tutor_id, changes)))

    def delete_legal_tutor(self, tutor_id: int) -> dict:
        return ok(self.app.legal_tutor_service.delete_legal_tutor(tutor_id))

    # Backups

    def export_database(self, file_path: str) -> dict:
        return self.app.backup_service.export_database(file_path)

    def import_database(self, file_path: str, progress_callback: ProgressCallback | None = None) -> dict:
        return self.app.backup_service.import_database(file_path, progress_callback)
