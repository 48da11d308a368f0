"""Add the status column to patients.

Status tracks where a patient is in treatment: active, paused,
medical_discharge or abandoned.
"""

from ..database.connection import RecordStore

NAME = "003-add-patient-status"


def up(store: RecordStore) -> None:
    if "status" not in store.table_columns("patients"):
        store.exec_script("""
            ALTER TABLE patients ADD COLUMN status TEXT NOT NULL DEFAULT 'active';
            CREATE INDEX IF NOT EXISTS idx_patients_status ON patients(status);
        """)


def down(store: RecordStore) -> None:
    if "status" in store.table_columns("patients"):
        store.exec_script("""
            DROP INDEX IF EXISTS idx_patients_status;
            ALTER TABLE patients DROP COLUMN status;
        """)
