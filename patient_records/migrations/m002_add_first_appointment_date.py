"""Add the firstAppointmentDate column to patients."""

from ..database.connection import RecordStore

NAME = "002-add-first-appointment-date"


def up(store: RecordStore) -> None:
    if "firstAppointmentDate" not in store.table_columns("patients"):
        store.exec_script("ALTER TABLE patients ADD COLUMN firstAppointmentDate TEXT")


def down(store: RecordStore) -> None:
    if "firstAppointmentDate" in store.table_columns("patients"):
        store.exec_script("ALTER TABLE patients DROP COLUMN firstAppointmentDate")
