"""Shared pytest fixtures."""

import pytest

from patient_records.api import RecordsAPI
from patient_records.app import RecordsApp
from patient_records.backup import BackupService
from patient_records.config import Settings
from patient_records.database import (
    EmergencyContactRepository,
    LegalTutorRepository,
    NoteRepository,
    PatientRepository,
    RecordStore,
)
from patient_records.migrations import MIGRATIONS, MemoryLedger, MigrationRunner
from patient_records.services import (
    EmergencyContactService,
    LegalTutorService,
    NoteService,
    PatientService,
)


@pytest.fixture
def make_store():
    """Factory for fresh, fully migrated in-memory stores."""
    stores = []

    def factory() -> RecordStore:
        store = RecordStore.open(":memory:")
        MigrationRunner(store, MemoryLedger(), MIGRATIONS).up()
        stores.append(store)
        return store

    yield factory

    for store in stores:
        store.close()


@pytest.fixture
def store(make_store):
    return make_store()


@pytest.fixture
def patient_repo(store):
    return PatientRepository(store)


@pytest.fixture
def note_repo(store):
    return NoteRepository(store)


@pytest.fixture
def contact_repo(store):
    return EmergencyContactRepository(store)


@pytest.fixture
def tutor_repo(store):
    return LegalTutorRepository(store)


@pytest.fixture
def patient_service(patient_repo):
    return PatientService(patient_repo)


@pytest.fixture
def note_service(note_repo, patient_repo):
    return NoteService(note_repo, patient_repo)


@pytest.fixture
def contact_service(contact_repo, patient_repo):
    return EmergencyContactService(contact_repo, patient_repo)


@pytest.fixture
def tutor_service(tutor_repo, patient_repo):
    return LegalTutorService(tutor_repo, patient_repo)


@pytest.fixture
def backup_service(store):
    return BackupService(store)


@pytest.fixture
def patient_data():
    """Factory for valid camelCase patient payloads."""

    def factory(**overrides) -> dict:
        data = {
            "name": "Ana Ruiz",
            "age": 34,
            "email": "ana@x.com",
            "phoneNumber": "555-0101",
            "birthDate": "1991-03-15",
            "maritalStatus": "married",
            "gender": "female",
            "educationalLevel": "University",
            "profession": "Architect",
            "livesWith": "Partner",
            "children": 1,
        }
        data.update(overrides)
        return data

    return factory


@pytest.fixture
def patient(patient_service, patient_data):
    """A stored patient for tests that need one."""
    return patient_service.create_patient(patient_data())


@pytest.fixture
def contact_data():
    def factory(patient_id: int, **overrides) -> dict:
        data = {
            "patientId": patient_id,
            "fullName": "Pablo Ruiz",
            "phoneNumber": "555-0201",
            "relation": "Husband",
            "email": "pablo@x.com",
            "address": "12 Calle Mayor",
        }
        data.update(overrides)
        return data

    return factory


@pytest.fixture
def tutor_data(contact_data):
    def factory(patient_id: int, **overrides) -> dict:
        data = contact_data(
            patient_id,
            fullName="Carmen Moreno",
            phoneNumber="555-0301",
            relation="Mother",
            email="carmen@x.com",
            birthDate="1980-05-02",
        )
        data.update(overrides)
        return data

    return factory


@pytest.fixture
def settings(tmp_path):
    return Settings(
        db_path=tmp_path / "records.db",
        migrations_path=tmp_path / "migrations.json",
    )


@pytest.fixture
def app(settings):
    records_app = RecordsApp(settings)
    records_app.initialize()
    yield records_app
    records_app.close()


@pytest.fixture
def api(app):
    return RecordsAPI(app)
