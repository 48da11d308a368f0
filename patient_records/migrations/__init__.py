"""Schema migrations, applied in the order listed in MIGRATIONS."""

from ..config import Settings
from ..database.connection import RecordStore
from . import (
    m001_create_main_tables,
    m002_add_first_appointment_date,
    m003_add_patient_status,
    m004_add_sexual_orientation,
    m005_create_emergency_contacts,
    m006_create_legal_tutors,
)
from .runner import JSONLedger, MemoryLedger, Migration, MigrationRunner, validate_migrations

MIGRATIONS = [
    Migration(module.NAME, module.up, module.down)
    for module in (
        m001_create_main_tables,
        m002_add_first_appointment_date,
        m003_add_patient_status,
        m004_add_sexual_orientation,
        m005_create_emergency_contacts,
        m006_create_legal_tutors,
    )
]


def create_runner(store: RecordStore, settings: Settings) -> MigrationRunner:
    """Build a runner using the ledger chosen by the settings."""
    if settings.memory_ledger:
        ledger = MemoryLedger()
    else:
        ledger = JSONLedger(settings.migrations_path)
    return MigrationRunner(store, ledger, MIGRATIONS)


__all__ = [
    "MIGRATIONS",
    "Migration",
    "MigrationRunner",
    "JSONLedger",
    "MemoryLedger",
    "create_runner",
    "validate_migrations",
]
