"""Create the emergency_contacts table."""

from ..database.connection import RecordStore

NAME = "005-create-emergency-contacts"


def up(store: RecordStore) -> None:
    store.exec_script("""
        CREATE TABLE IF NOT EXISTS emergency_contacts (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            patientId INTEGER NOT NULL,
            fullName TEXT NOT NULL,
            phoneNumber TEXT NOT NULL,
            relation TEXT NOT NULL,
            email TEXT NOT NULL,
            address TEXT,
            createdAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updatedAt TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
            FOREIGN KEY (patientId) REFERENCES patients(id) ON DELETE CASCADE
        );

        CREATE INDEX IF NOT EXISTS idx_emergency_contacts_patient ON emergency_contacts(patientId);
    """)


def down(store: RecordStore) -> None:
    store.exec_script("DROP TABLE IF EXISTS emergency_contacts")
