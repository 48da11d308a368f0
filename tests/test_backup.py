"""Tests for compressed JSON export and import."""

import gzip
import json
from unittest.mock import patch

import pytest

from patient_records.backup import FILE_EXISTS_ERROR, BackupService
from patient_records.database import NoteRepository, PatientRepository


@pytest.fixture
def populated(patient_service, note_service, contact_service, tutor_service, patient_data, contact_data, tutor_data):
    """Two patients, one of them with a note, a contact and a tutor."""
    ana = patient_service.create_patient(patient_data())
    patient_service.create_patient(patient_data(name="Marcos Vidal", email="marcos@x.com"))
    note_service.create_note({"patientId": ana.id, "title": "Intake", "content": "<p>Poor sleep</p>"})
    contact_service.create_emergency_contact(contact_data(ana.id))
    tutor_service.create_legal_tutor(tutor_data(ana.id))
    return ana


def read_archive(path):
    with gzip.open(path, "rb") as f:
        return json.loads(f.read().decode("utf-8"))


def write_archive(path, document):
    path.write_bytes(gzip.compress(json.dumps(document).encode("utf-8")))


class TestExport:
    """Tests for export_database."""

    def test_export_writes_versioned_document(self, backup_service, populated, tmp_path):
        path = tmp_path / "backup.json.gz"
        result = backup_service.export_database(path)

        assert result == {"success": True, "data": {"path": str(path), "patients": 2}}
        document = read_archive(path)
        assert document["version"] == "1.0"
        assert document["exportDate"].endswith("Z")

        ana = next(p for p in document["patients"] if p["email"] == "ana@x.com")
        assert ana["phoneNumber"] == "555-0101"
        assert [n["title"] for n in ana["notes"]] == ["Intake"]
        assert ana["emergencyContacts"][0]["fullName"] == "Pablo Ruiz"
        assert ana["legalTutors"][0]["birthDate"] == "1980-05-02"

    def test_export_omits_ids(self, backup_service, populated, tmp_path):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        patient = read_archive(path)["patients"][0]
        assert "id" not in patient
        assert "id" not in patient["notes"][0]
        assert "patientId" not in patient["notes"][0]

    def test_export_refuses_existing_file(self, backup_service, populated, tmp_path):
        path = tmp_path / "backup.json.gz"
        path.write_bytes(b"keep me")

        result = backup_service.export_database(path)

        assert result == {"success": False, "error": FILE_EXISTS_ERROR}
        assert path.read_bytes() == b"keep me"

    def test_export_never_replaces_file_created_during_export(self, backup_service, populated, tmp_path):
        """Test that a file appearing after the existence check is kept."""
        path = tmp_path / "backup.json.gz"
        real_build = backup_service.build_export_document

        def build_then_race():
            document = real_build()
            path.write_bytes(b"someone else's file")
            return document

        with patch.object(backup_service, "build_export_document", side_effect=build_then_race):
            result = backup_service.export_database(path)

        assert result == {"success": False, "error": FILE_EXISTS_ERROR}
        assert path.read_bytes() == b"someone else's file"
        assert [p.name for p in tmp_path.iterdir()] == ["backup.json.gz"]

    def test_export_empty_database(self, backup_service, tmp_path):
        path = tmp_path / "empty.json.gz"
        assert backup_service.export_database(path)["success"]
        assert read_archive(path)["patients"] == []


class TestImport:
    """Tests for import_database."""

    def test_round_trip_into_empty_store(self, backup_service, populated, tmp_path, make_store):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        target = make_store()
        result = BackupService(target).import_database(path)

        assert result["success"]
        assert result["data"]["patients"] == 2
        assert result["data"]["notes"] == 1
        assert result["data"]["emergencyContacts"] == 1
        assert result["data"]["legalTutors"] == 1

        patient = PatientRepository(target).find_by_email("ana@x.com")
        assert patient.name == "Ana Ruiz"
        assert patient.first_appointment_date is not None
        note = NoteRepository(target).find_by_patient_id(patient.id)[0]
        assert note.title == "Intake"

    def test_import_preserves_timestamps(self, backup_service, populated, tmp_path, make_store):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)
        exported = read_archive(path)["patients"][0]

        target = make_store()
        BackupService(target).import_database(path)

        patient = PatientRepository(target).find_by_email(exported["email"])
        assert patient.created_at == exported["createdAt"]

    def test_second_import_adds_nothing(self, backup_service, populated, tmp_path, make_store):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        target = BackupService(make_store())
        target.import_database(path)
        result = target.import_database(path)

        assert result["data"]["patients"] == 0
        assert result["data"]["notes"] == 0
        assert result["data"]["emergencyContacts"] == 0
        assert result["data"]["legalTutors"] == 0
        assert result["data"]["skipped"]["patients"] == 2

    def test_import_into_same_store_is_noop(self, backup_service, populated, store, tmp_path):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        result = backup_service.import_database(path)

        assert result["data"]["patients"] == 0
        assert PatientRepository(store).count() == 2

    def test_existing_patient_gets_new_children(self, backup_service, populated, tmp_path, store):
        path = tmp_path / "extra.json.gz"
        write_archive(path, {
            "version": "1.0",
            "patients": [{
                "name": "Ana Ruiz",
                "age": 34,
                "email": "ANA@X.COM",
                "phoneNumber": "555-0101",
                "birthDate": "1991-03-15",
                "maritalStatus": "married",
                "gender": "female",
                "educationalLevel": "University",
                "profession": "Architect",
                "livesWith": "Partner",
                "notes": [{"title": "Follow-up", "content": "<p>Better</p>", "createdAt": "2024-02-01 10:00:00"}],
            }],
        })

        result = backup_service.import_database(path)

        assert result["data"]["patients"] == 0
        assert result["data"]["notes"] == 1
        assert NoteRepository(store).count_by_patient_id(populated.id) == 2

    def test_missing_fields_use_defaults(self, backup_service, tmp_path, store):
        path = tmp_path / "minimal.json.gz"
        write_archive(path, {
            "version": "1.0",
            "patients": [{
                "name": "Old Record",
                "age": 50,
                "email": "old@x.com",
                "phoneNumber": "555",
                "birthDate": "1975-01-01",
                "maritalStatus": "single",
                "gender": "male",
                "educationalLevel": "",
                "profession": "",
                "livesWith": "",
            }],
        })

        assert backup_service.import_database(path)["success"]
        patient = PatientRepository(store).find_by_email("old@x.com")
        assert patient.status == "active"
        assert patient.sexual_orientation == "prefer_not_to_say"
        assert patient.children == 0

    def test_progress_stages(self, backup_service, populated, tmp_path, make_store):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        events = []
        BackupService(make_store()).import_database(path, events.append)

        assert [e.stage for e in events] == [
            "reading",
            "parsing",
            "importing_patients",
            "importing_patients",
            "importing_patients",
            "importing_notes",
            "complete",
        ]
        assert [e.current for e in events if e.stage == "importing_patients"] == [0, 50, 100]
        assert events[-1].current == 100
        assert all(e.total == 100 for e in events)


class TestImportErrors:
    """Tests for import failures."""

    def test_missing_file(self, backup_service, tmp_path):
        result = backup_service.import_database(tmp_path / "missing.json.gz")
        assert not result["success"]
        assert "not found" in result["error"]

    def test_corrupt_archive(self, backup_service, tmp_path):
        path = tmp_path / "corrupt.json.gz"
        path.write_bytes(b"this is not gzip")

        result = backup_service.import_database(path)
        assert not result["success"]
        assert "not a valid compressed archive" in result["error"]

    def test_invalid_json(self, backup_service, tmp_path):
        path = tmp_path / "bad.json.gz"
        path.write_bytes(gzip.compress(b"{not json"))

        result = backup_service.import_database(path)
        assert not result["success"]
        assert "not valid JSON" in result["error"]

    def test_unsupported_version(self, backup_service, tmp_path):
        path = tmp_path / "future.json.gz"
        write_archive(path, {"version": "2.0", "patients": []})

        result = backup_service.import_database(path)
        assert result == {"success": False, "error": "Unsupported backup version: 2.0"}

    def test_invalid_format(self, backup_service, tmp_path):
        path = tmp_path / "shape.json.gz"
        write_archive(path, {"version": "1.0", "patients": [{"name": "No email"}]})

        result = backup_service.import_database(path)
        assert not result["success"]
        assert "invalid format" in result["error"]

    def test_failure_keeps_earlier_rows(self, backup_service, populated, tmp_path, make_store):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        target_store = make_store()
        target = BackupService(target_store)
        real_insert = target.insert_patient
        calls = []

        def flaky(patient, stats):
            if calls:
                raise RuntimeError("disk full")
            calls.append(patient.email)
            return real_insert(patient, stats)

        with patch.object(target, "insert_patient", side_effect=flaky):
            result = target.import_database(path)

        assert result == {"success": False, "error": "disk full"}
        assert PatientRepository(target_store).count() == 1


class TestHelpers:
    """Tests for backup helpers."""

    @pytest.mark.parametrize("current, total, expected", [(0, 0, 100), (1, 3, 33), (2, 3, 66), (3, 3, 100)])
    def test_calculate_percentage(self, current, total, expected):
        assert BackupService.calculate_percentage(current, total) == expected

    def test_get_export_data(self, backup_service, populated, tmp_path):
        path = tmp_path / "backup.json.gz"
        backup_service.export_database(path)

        document = backup_service.get_export_data(path)
        assert document.version == "1.0"
        assert len(document.patients) == 2
