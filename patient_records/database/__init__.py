from .connection import ExecuteResult, RecordStore, get_connection
from .emergency_contact_repository import EmergencyContact, EmergencyContactRepository
from .legal_tutor_repository import LegalTutor, LegalTutorRepository
from .note_repository import Note, NoteRepository
from .patient_repository import Patient, PatientRepository

__all__ = [
    "get_connection",
    "ExecuteResult",
    "RecordStore",
    "Patient",
    "PatientRepository",
    "Note",
    "NoteRepository",
    "EmergencyContact",
    "EmergencyContactRepository",
    "LegalTutor",
    "LegalTutorRepository",
]
