"""Create the patients and notes tables."""

from ..database.connection import RecordStore

NAME = "001-create-main-tables"


def up(store: RecordStore) -> None:
    store.exec_script("""
        CREATE TABLE IF NOT EXISTS patients (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            age INTEGER NOT NULL,
            email TEXT NOT NULL,
            phoneNumber TEXT NOT NULL,
            birthDate TEXT NOT NULL,
            maritalStatus TEXT NOT NULL,
            gender TEXT NOT NULL,
            educationalLevel TEXT NOT NULL,
            profession TEXT NOT NULL,
            livesWith TEXT NOT NULL,
            children INTEGER NOT NULL DEFAULT 0,
            previousPsychologicalExperience TEXT,
            createdAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updatedAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
        );

        CREATE INDEX IF NOT EXISTS idx_patients_email ON patients(email);

        CREATE TABLE IF NOT EXISTS notes (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            patientId INTEGER NOT NULL,
            title TEXT NOT NULL,
            content TEXT NOT NULL,
            createdAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updatedAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (patientId) REFERENCES patients(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_notes_patient ON notes(patientId);
    """)


def down(store: RecordStore) -> None:
    store.exec_script("""
        DROP TABLE IF EXISTS notes;
        DROP TABLE IF EXISTS patients;
    """)
