"""Create the legal_tutors table."""

from ..database.connection import RecordStore

NAME = "006-create-legal-tutors"


def up(store: RecordStore) -> None:
    store.exec_script("""
        CREATE TABLE IF NOT EXISTS legal_tutors (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            patientId INTEGER NOT NULL,
            fullName TEXT NOT NULL,
            phoneNumber TEXT NOT NULL,
            relation TEXT NOT NULL,
            email TEXT NOT NULL,
            birthDate TEXT NOT NULL,
            address TEXT,
            createdAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updatedAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (patientId) REFERENCES patients(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_legal_tutors_patient ON legal_tutors(patientId);
    """)


def down(store: RecordStore) -> None:
    store.exec_script("DROP TABLE IF EXISTS legal_tutors")
