"""Tests for notes and the first appointment rule."""

from datetime import date

import pytest

from patient_records.exceptions import NotFoundError, ValidationError


def note_payload(patient_id, **overrides):
    data = {"patientId": patient_id, "title": "Intake", "content": "<p>Reports poor sleep.</p>"}
    data.update(overrides)
    return data


class TestCreateNote:
    """Tests for create_note."""

    def test_first_note_sets_first_appointment(self, note_service, patient_service, patient):
        """Test that the first note records today's date on the patient."""
        note_service.create_note(note_payload(patient.id))

        stored = patient_service.get_patient_by_id(patient.id)
        assert stored.first_appointment_date == date.today().isoformat()

    def test_second_note_leaves_patient_untouched(self, note_service, patient_service, patient):
        """Test that only the first note writes the first appointment date."""
        note_service.create_note(note_payload(patient.id))
        after_first = patient_service.get_patient_by_id(patient.id)

        note_service.create_note(note_payload(patient.id, title="Follow-up"))
        after_second = patient_service.get_patient_by_id(patient.id)

        assert after_second.first_appointment_date == after_first.first_appointment_date
        assert after_second.updated_at == after_first.updated_at

    def test_first_appointment_not_overwritten(self, note_service, patient_service, patient):
        patient_service.update_patient(patient.id, {"firstAppointmentDate": "2023-02-01"})
        note_service.create_note(note_payload(patient.id))

        stored = patient_service.get_patient_by_id(patient.id)
        assert stored.first_appointment_date == "2023-02-01"

    def test_trims_title(self, note_service, patient):
        note = note_service.create_note(note_payload(patient.id, title="  Intake  "))
        assert note.title == "Intake"

    def test_missing_patient(self, note_service):
        with pytest.raises(NotFoundError):
            note_service.create_note(note_payload(999))

    def test_missing_title(self, note_service, patient):
        with pytest.raises(ValidationError, match="Note title is required"):
            note_service.create_note(note_payload(patient.id, title=" "))

    def test_title_too_long(self, note_service, patient):
        with pytest.raises(ValidationError):
            note_service.create_note(note_payload(patient.id, title="t" * 501))

    def test_content_too_long(self, note_service, patient):
        with pytest.raises(ValidationError):
            note_service.create_note(note_payload(patient.id, content="c" * 50_001))

    def test_invalid_patient_id(self, note_service):
        with pytest.raises(ValidationError, match="Valid patient ID is required"):
            note_service.create_note(note_payload(0))

    def test_failed_note_leaves_first_appointment_unset(self, note_service, patient_service, patient):
        with pytest.raises(ValidationError):
            note_service.create_note(note_payload(patient.id, content=""))
        assert patient_service.get_patient_by_id(patient.id).first_appointment_date is None


class TestNoteQueries:
    """Tests for note lookups, updates and statistics."""

    def test_get_notes_by_patient_id(self, note_service, patient):
        note_service.create_note(note_payload(patient.id))
        note_service.create_note(note_payload(patient.id, title="Follow-up"))

        titles = [n.title for n in note_service.get_notes_by_patient_id(patient.id)]
        assert titles == ["Follow-up", "Intake"]

    def test_get_notes_for_missing_patient(self, note_service):
        with pytest.raises(NotFoundError):
            note_service.get_notes_by_patient_id(999)

    def test_update_note(self, note_service, patient):
        note = note_service.create_note(note_payload(patient.id))
        updated = note_service.update_note(note.id, {"content": "<p>Edited</p>"})
        assert updated.content == "<p>Edited</p>"
        assert updated.title == "Intake"

    def test_update_rejects_empty_title(self, note_service, patient):
        note = note_service.create_note(note_payload(patient.id))
        with pytest.raises(ValidationError, match="Note title cannot be empty"):
            note_service.update_note(note.id, {"title": ""})

    def test_update_missing_note(self, note_service):
        with pytest.raises(NotFoundError):
            note_service.update_note(999, {"title": "x"})

    def test_delete_note(self, note_service, patient):
        note = note_service.create_note(note_payload(patient.id))
        assert note_service.delete_note(note.id) is True
        assert note_service.get_note_by_id(note.id) is None

    def test_delete_notes_by_patient_id(self, note_service, patient):
        note_service.create_note(note_payload(patient.id))
        note_service.create_note(note_payload(patient.id, title="Second"))
        assert note_service.delete_notes_by_patient_id(patient.id) == 2
        assert note_service.get_note_count_for_patient(patient.id) == 0

    def test_search_blank_returns_all(self, note_service, patient):
        note_service.create_note(note_payload(patient.id))
        assert len(note_service.search_notes("")) == 1
        assert note_service.search_notes("nothing like this") == []

    def test_statistics(self, note_service, patient_service, patient, patient_data):
        patient_service.create_patient(patient_data(email="b@x.com"))
        note_service.create_note(note_payload(patient.id))

        assert note_service.get_notes_statistics() == {
            "totalNotes": 1,
            "averageNotesPerPatient": 0.5,
        }

    def test_statistics_without_patients(self, note_service):
        assert note_service.get_notes_statistics() == {
            "totalNotes": 0,
            "averageNotesPerPatient": 0,
        }
