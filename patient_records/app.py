"""Application lifecycle: opens the store, migrates it and wires the layers.

Layers, bottom to top::

    RecordStore -> repositories -> services -> RecordsAPI

Migrations always finish before any repository is constructed.
"""

import logging

from .backup import BackupService
from .config import Settings, load_settings
from .database import (
    EmergencyContactRepository,
    LegalTutorRepository,
    NoteRepository,
    PatientRepository,
    RecordStore,
)
from .migrations import MigrationRunner, create_runner
from .services import EmergencyContactService, LegalTutorService, NoteService, PatientService

logger = logging.getLogger(__name__)


class RecordsApp:
    """Owns the single database connection and the service graph."""

    def __init__(self, settings: Settings | None = None, runner_factory=create_runner):
        self.settings = settings or load_settings()
        self._runner_factory = runner_factory
        self.initialized = False
        self.store: RecordStore | None = None
        self.runner: MigrationRunner | None = None

        self._patient_service: PatientService | None = None
        self._note_service: NoteService | None = None
        self._emergency_contact_service: EmergencyContactService | None = None
        self._legal_tutor_service: LegalTutorService | None = None
        self._backup_service: BackupService | None = None

    def initialize(self) -> None:
        """Open the database, run pending migrations and build the services.

        A migration failure propagates and leaves the app uninitialized.
        """
        if self.initialized:
            return

        logger.info("Database path: %s", self.settings.db_path)
        store = RecordStore.open(self.settings.db_path)
        try:
            self.runner = self._runner_factory(store, self.settings)
            self.runner.up()
        except Exception:
            logger.error("Database initialization failed; pending migrations were not applied")
            store.close()
            raise

        self.store = store
        patient_repository = PatientRepository(store)
        note_repository = NoteRepository(store)
        emergency_contact_repository = EmergencyContactRepository(store)
        legal_tutor_repository = LegalTutorRepository(store)

        self._patient_service = PatientService(patient_repository)
        self._note_service = NoteService(note_repository, patient_repository)
        self._emergency_contact_service = EmergencyContactService(
            emergency_contact_repository, patient_repository
        )
        self._legal_tutor_service = LegalTutorService(legal_tutor_repository, patient_repository)
        self._backup_service = BackupService(store)

        self.initialized = True
        logger.info("Database initialized successfully")

    @property
    def patient_service(self) -> PatientService:
        self._require_initialized()
        return self._patient_service

    @property
    def note_service(self) -> NoteService:
        self._require_initialized()
        return self._note_service

    @property
    def emergency_contact_service(self) -> EmergencyContactService:
        self._require_initialized()
        return self._emergency_contact_service

    @property
    def legal_tutor_service(self) -> LegalTutorService:
        self._require_initialized()
        return self._legal_tutor_service

    @property
    def backup_service(self) -> BackupService:
        self._require_initialized()
        return self._backup_service

    def close(self) -> None:
        if self.store is not None:
            self.store.close()
            self.store = None
        self.initialized = False

    def __enter__(self) -> "RecordsApp":
        self.initialize()
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _require_initialized(self) -> None:
        if not self.initialized:
            raise RuntimeError("Database not initialized")
