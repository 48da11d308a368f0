"""Note service: session notes and the first-appointment rule."""

import logging

from ..database.note_repository import Note, NoteRepository
from ..database.patient_repository import PatientRepository
from ..exceptions import NotFoundError
from ..schemas import NoteCreate, NoteUpdate
from .patient_service import check_id, today

logger = logging.getLogger(__name__)


class NoteService:
    """Business logic for notes, coordinating the note and patient repositories."""

    def __init__(self, note_repository: NoteRepository, patient_repository: PatientRepository):
        self.note_repository = note_repository
        self.patient_repository = patient_repository

    def create_note(self, data: NoteCreate | dict) -> Note:
        """Create a note.

        The first note logged for a patient without a first appointment date
        sets that date to today, once the note itself has been stored.
        """
        note_data = NoteCreate.parse(data)

        patient = self.patient_repository.find_by_id(note_data.patient_id)
        if not patient:
            raise NotFoundError(f"Patient with ID {note_data.patient_id} not found")

        note = self.note_repository.create(note_data)
        logger.info("Created note %s for patient %s", note.id, patient.id)

        if not patient.first_appointment_date:
            self.patient_repository.update_first_appointment_date(patient.id, today())
            logger.info("Set first appointment date for patient %s", patient.id)

        return note

    def get_note_by_id(self, note_id: int) -> Note | None:
        check_id(note_id, "note")
        return self.note_repository.find_by_id(note_id)

    def get_notes_by_patient_id(self, patient_id: int) -> list[Note]:
        check_id(patient_id, "patient")
        if not self.patient_repository.exists(patient_id):
            raise NotFoundError(f"Patient with ID {patient_id} not found")
        return self.note_repository.find_by_patient_id(patient_id)

    def get_all_notes(self) -> list[Note]:
        return self.note_repository.find_all()

    def update_note(self, note_id: int, data: NoteUpdate | dict) -> Note:
        check_id(note_id, "note")
        if not self.note_repository.exists(note_id):
            raise NotFoundError(f"Note with ID {note_id} not found")
        return self.note_repository.update(note_id, NoteUpdate.parse(data))

    def delete_note(self, note_id: int) -> bool:
        check_id(note_id, "note")
        if not self.note_repository.exists(note_id):
            raise NotFoundError(f"Note with ID {note_id} not found")
        return self.note_repository.delete(note_id)

    def delete_notes_by_patient_id(self, patient_id: int) -> int:
        check_id(patient_id, "patient")
        return self.note_repository.delete_by_patient_id(patient_id)

    def search_notes(self, term: str | None) -> list[Note]:
        if not term or not term.strip():
            return self.get_all_notes()
        return self.note_repository.search(term.strip())

    def get_note_count_for_patient(self, patient_id: int) -> int:
        check_id(patient_id, "patient")
        return self.note_repository.count_by_patient_id(patient_id)

    def get_notes_statistics(self) -> dict:
        total_notes = self.note_repository.count()
        total_patients = self.patient_repository.count()
        average = total_notes / total_patients if total_patients else 0
        return {
            "totalNotes": total_notes,
            "averageNotesPerPatient": round(average, 2),
        }
