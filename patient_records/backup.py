"""Backup service: export to and import from compressed JSON archives.

The archive is gzip-compressed UTF-8 JSON::

    {"version": "1.0", "exportDate": "...", "patients": [
        {..., "notes": [...], "emergencyContacts": [...], "legalTutors": [...]}
    ]}

Numeric ids are never written; on import patients are matched by email and
child records by their natural keys, so importing the same archive twice adds
nothing the second time. Backups read and write the store directly.
"""

import gzip
import json
import logging
import math
import os
import tempfile
import zlib
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

import pydantic
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from .database.connection import RecordStore
from .exceptions import BackupError
from .responses import fail, ok
from .schemas import PatientStatus, SexualOrientation, validation_message

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0"
SUPPORTED_VERSIONS = {"1.0"}

FILE_EXISTS_ERROR = "File already exists. Please choose a different location."

PATIENT_COLUMNS = [
    "name", "age", "email", "phoneNumber", "birthDate", "maritalStatus", "gender",
    "sexualOrientation", "educationalLevel", "profession", "livesWith", "children",
    "previousPsychologicalExperience", "firstAppointmentDate", "status",
    "createdAt", "updatedAt",
]
NOTE_COLUMNS = ["title", "content", "createdAt", "updatedAt"]
EMERGENCY_CONTACT_COLUMNS = [
    "fullName", "phoneNumber", "relation", "email", "address", "createdAt", "updatedAt",
]
LEGAL_TUTOR_COLUMNS = [
    "fullName", "phoneNumber", "relation", "email", "birthDate", "address",
    "createdAt", "updatedAt",
]

# Columns that fall back to the database default when missing from an archive
TIMESTAMP_COLUMNS = {"createdAt", "updatedAt"}


# Import stages, in the order they are reported
STAGE_READING = "reading"
STAGE_PARSING = "parsing"
STAGE_IMPORTING_PATIENTS = "importing_patients"
STAGE_IMPORTING_NOTES = "importing_notes"
STAGE_COMPLETE = "complete"


@dataclass
class ImportProgress:
    stage: str
    current: int
    total: int
    message: str

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class ImportStats:
    patients: int = 0
    notes: int = 0
    emergency_contacts: int = 0
    legal_tutors: int = 0
    skipped: dict = field(default_factory=lambda: {
        "patients": 0, "notes": 0, "emergencyContacts": 0, "legalTutors": 0,
    })

    def to_dict(self) -> dict:
        return {
            "patients": self.patients,
            "notes": self.notes,
            "emergencyContacts": self.emergency_contacts,
            "legalTutors": self.legal_tutors,
            "skipped": dict(self.skipped),
        }


ProgressCallback = Callable[[ImportProgress], None]


# Archive document models

class ArchiveModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def columns(self, names: list[str]) -> list[tuple[str, object]]:
        """(column, value) pairs for the given columns, skipping unset timestamps."""
        data = self.model_dump(by_alias=True)
        return [
            (name, data.get(name))
            for name in names
            if not (name in TIMESTAMP_COLUMNS and data.get(name) is None)
        ]


class ExportedNote(ArchiveModel):
    title: str
    content: str
    created_at: str | None = None
    updated_at: str | None = None


class ExportedEmergencyContact(ArchiveModel):
    full_name: str
    phone_number: str
    relation: str
    email: str
    address: str | None = None
    created_at: str | None = None
    updated_at: str | None = None


class ExportedLegalTutor(ExportedEmergencyContact):
    birth_date: str


class ExportedPatient(ArchiveModel):
    name: str
    age: int
    email: str
    phone_number: str
    birth_date: str
    marital_status: str
    gender: str
    sexual_orientation: str = SexualOrientation.PREFER_NOT_TO_SAY.value
    educational_level: str
    profession: str
    lives_with: str
    children: int = 0
    previous_psychological_experience: str | None = None
    first_appointment_date: str | None = None
    status: str = PatientStatus.ACTIVE.value
    created_at: str | None = None
    updated_at: str | None = None
    notes: list[ExportedNote] = []
    emergency_contacts: list[ExportedEmergencyContact] = []
    legal_tutors: list[ExportedLegalTutor] = []


class ExportDocument(ArchiveModel):
    version: str
    export_date: str | None = None
    patients: list[ExportedPatient] = []


class BackupService:
    """Exports all patients with their children, and merges archives back in."""

    def __init__(self, store: RecordStore):
        self.store = store

    # Export

    def export_database(self, file_path: str | Path) -> dict:
        """Write every patient to a compressed archive. Never overwrites a file."""
        path = Path(file_path)
        try:
            if path.exists():
                return fail(FILE_EXISTS_ERROR)

            document = self.build_export_document()
            payload = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
            self._write_atomic(path, gzip.compress(payload))

            logger.info("Exported %d patient(s) to %s", len(document["patients"]), path)
            return ok({"path": str(path), "patients": len(document["patients"])})
        except FileExistsError:
            return fail(FILE_EXISTS_ERROR)
        except Exception as e:
            logger.error("Export to %s failed: %s", path, e)
            return fail(str(e))

    def build_export_document(self) -> dict:
        """Assemble the versioned export document from the store."""
        patients = self.store.query(
            f"SELECT {', '.join(PATIENT_COLUMNS)} FROM patients ORDER BY id"
        )
        notes = self._children_by_email("notes", NOTE_COLUMNS)
        contacts = self._children_by_email("emergency_contacts", EMERGENCY_CONTACT_COLUMNS)
        tutors = self._children_by_email("legal_tutors", LEGAL_TUTOR_COLUMNS)

        return {
            "version": EXPORT_VERSION,
            "exportDate": _iso_now(),
            "patients": [
                {
                    **patient,
                    "notes": notes.get(patient["email"], []),
                    "emergencyContacts": contacts.get(patient["email"], []),
                    "legalTutors": tutors.get(patient["email"], []),
                }
                for patient in patients
            ],
        }

    # Import

    def import_database(self, file_path: str | Path, progress_callback: ProgressCallback | None = None) -> dict:
        """Merge an archive into the store.

        Any error aborts the run; rows inserted before it are kept.
        """
        try:
            self._report(progress_callback, STAGE_READING, 0, "Reading backup file...")
            raw = self._read_archive(Path(file_path))

            self._report(progress_callback, STAGE_PARSING, 0, "Parsing backup data...")
            document = self.parse_document(raw)

            total = len(document.patients)
            stats = ImportStats()
            self._report(progress_callback, STAGE_IMPORTING_PATIENTS, 0, f"Importing patients... (0/{total})")

            for index, patient in enumerate(document.patients, start=1):
                self.insert_patient(patient, stats)
                self._report(
                    progress_callback,
                    STAGE_IMPORTING_PATIENTS,
                    self.calculate_percentage(index, total),
                    f"Importing patients... ({index}/{total})",
                )

            self._report(
                progress_callback,
                STAGE_IMPORTING_NOTES,
                100,
                f"Imported {stats.notes} note(s), {stats.emergency_contacts} emergency contact(s) "
                f"and {stats.legal_tutors} legal tutor(s)",
            )
            self._report(progress_callback, STAGE_COMPLETE, 100, "Import complete!")

            logger.info("Imported %s from %s", stats.to_dict(), file_path)
            return ok(stats.to_dict())
        except Exception as e:
            logger.error("Import from %s failed: %s", file_path, e)
            return fail(str(e))

    def get_export_data(self, file_path: str | Path) -> ExportDocument:
        """Read and validate an archive without importing it."""
        return self.parse_document(self._read_archive(Path(file_path)))

    def parse_document(self, raw: str) -> ExportDocument:
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise BackupError(f"Backup file is not valid JSON: {e}") from e

        try:
            document = ExportDocument.model_validate(data)
        except pydantic.ValidationError as e:
            raise BackupError(f"Backup file has an invalid format: {validation_message(e)}") from e

        if document.version not in SUPPORTED_VERSIONS:
            raise BackupError(f"Unsupported backup version: {document.version}")
        return document

    def insert_patient(self, patient: ExportedPatient, stats: ImportStats) -> int:
        """Insert a patient unless its email is already present, then its children."""
        email = patient.email.strip().lower()
        patient_id = self.patient_exists(email)

        if patient_id is None:
            pairs = [
                (column, email if column == "email" else value)
                for column, value in patient.columns(PATIENT_COLUMNS)
            ]
            patient_id = self._insert("patients", pairs)
            stats.patients += 1
        else:
            stats.skipped["patients"] += 1

        for note in patient.notes:
            if self.insert_note(patient_id, note):
                stats.notes += 1
            else:
                stats.skipped["notes"] += 1

        for contact in patient.emergency_contacts:
            if self.insert_contact("emergency_contacts", EMERGENCY_CONTACT_COLUMNS, patient_id, contact):
                stats.emergency_contacts += 1
            else:
                stats.skipped["emergencyContacts"] += 1

        for tutor in patient.legal_tutors:
            if self.insert_contact("legal_tutors", LEGAL_TUTOR_COLUMNS, patient_id, tutor):
                stats.legal_tutors += 1
            else:
                stats.skipped["legalTutors"] += 1

        return patient_id

    def patient_exists(self, email: str) -> int | None:
        """Id of the patient with this email, or None."""
        row = self.store.query_one("SELECT id FROM patients WHERE email = ?", (email,))
        return row["id"] if row else None

    def insert_note(self, patient_id: int, note: ExportedNote) -> bool:
        """Insert a note unless one with the same title and createdAt exists."""
        duplicate = self.store.query_one(
            "SELECT COUNT(*) AS count FROM notes WHERE patientId = ? AND title = ? AND createdAt IS ?",
            (patient_id, note.title, note.created_at),
        )
        if duplicate["count"] > 0:
            return False
        self._insert("notes", [("patientId", patient_id)] + note.columns(NOTE_COLUMNS))
        return True

    def insert_contact(self, table: str, columns: list[str], patient_id: int, contact) -> bool:
        """Insert a contact or tutor unless one with the same email and phone exists."""
        email = contact.email.strip().lower()
        duplicate = self.store.query_one(
            f"SELECT COUNT(*) AS count FROM {table} WHERE patientId = ? AND email = ? AND phoneNumber = ?",
            (patient_id, email, contact.phone_number),
        )
        if duplicate["count"] > 0:
            return False
        pairs = [
            (column, email if column == "email" else value)
            for column, value in contact.columns(columns)
        ]
        self._insert(table, [("patientId", patient_id)] + pairs)
        return True

    @staticmethod
    def calculate_percentage(current: int, total: int) -> int:
        if total == 0:
            return 100
        return math.floor(current / total * 100)

    # Private helpers

    def _children_by_email(self, table: str, columns: list[str]) -> dict[str, list[dict]]:
        selected = ", ".join(f"c.{column}" for column in columns)
        rows = self.store.query(
            f"""SELECT {selected}, p.email AS patientEmail
                FROM {table} c
                JOIN patients p ON c.patientId = p.id
                ORDER BY c.id"""
        )
        grouped: dict[str, list[dict]] = {}
        for row in rows:
            email = row.pop("patientEmail")
            grouped.setdefault(email, []).append(row)
        return grouped

    def _insert(self, table: str, pairs: list[tuple[str, object]]) -> int:
        columns = ", ".join(column for column, _ in pairs)
        placeholders = ", ".join("?" for _ in pairs)
        result = self.store.execute(
            f"INSERT INTO {table} ({columns}) VALUES ({placeholders})",
            [value for _, value in pairs],
        )
        return result.inserted_id

    def _read_archive(self, path: Path) -> str:
        if not path.exists():
            raise BackupError(f"Backup file not found: {path}")
        try:
            with gzip.open(path, "rb") as f:
                return f.read().decode("utf-8")
        except (OSError, EOFError, zlib.error, UnicodeDecodeError) as e:
            raise BackupError(f"Backup file is not a valid compressed archive: {e}") from e

    def _write_atomic(self, path: Path, data: bytes) -> None:
        """Write data to a temp file, then link it into place.

        Raises FileExistsError if path appeared meanwhile; it is never replaced.
        """
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            os.link(tmp_path, path)
        finally:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def _report(self, callback: ProgressCallback | None, stage: str, current: int, message: str) -> None:
        progress = ImportProgress(stage=stage, current=current, total=100, message=message)
        logger.debug("Import progress: %s", progress)
        if callback:
            callback(progress)


def _iso_now() -> str:
    """Current UTC time as ISO-8601 with milliseconds and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
