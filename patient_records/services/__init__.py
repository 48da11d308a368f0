from .emergency_contact_service import EmergencyContactService
from .legal_tutor_service import LegalTutorService
from .note_service import NoteService
from .patient_service import PatientService

__all__ = ["PatientService", "NoteService", "EmergencyContactService", "LegalTutorService"]
