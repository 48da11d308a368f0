"""Tests for the patient-records command line."""

import pytest

from patient_records.app import RecordsApp
from patient_records.config import Settings
from patient_records.main import console, main
from patient_records.scripts.seed_database import MOCK_NOTES, MOCK_PATIENTS, seed_database


@pytest.fixture
def cli_env(monkeypatch, tmp_path):
    """Point the CLI at a database inside tmp_path."""
    # Wide enough that table cells never wrap
    monkeypatch.setattr(console, "width", 200)
    monkeypatch.setenv("PATIENT_RECORDS_DB_PATH", str(tmp_path / "records.db"))
    monkeypatch.setenv("PATIENT_RECORDS_MIGRATIONS_PATH", str(tmp_path / "ledger.json"))
    monkeypatch.delenv("PATIENT_RECORDS_MEMORY_LEDGER", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)
    return Settings(db_path=tmp_path / "records.db", migrations_path=tmp_path / "ledger.json")


class TestMigrationCommands:
    """Tests for migrate, status and rollback."""

    def test_migrate_then_status(self, cli_env, capsys):
        assert main(["migrate"]) == 0
        assert cli_env.migrations_path.exists()
        capsys.readouterr()

        assert main(["status"]) == 0
        out = capsys.readouterr().out
        assert "applied" in out
        assert "pending" not in out

    def test_rollback(self, cli_env, capsys):
        main(["migrate"])
        assert main(["rollback"]) == 0
        assert "006-create-legal-tutors" in capsys.readouterr().out

        main(["status"])
        assert "pending" in capsys.readouterr().out


class TestDataCommands:
    """Tests for export, import, list and stats."""

    def test_export_refuses_existing_file(self, cli_env, tmp_path):
        seed_database(cli_env)
        path = tmp_path / "backup.json.gz"

        assert main(["export", str(path)]) == 0
        assert path.exists()
        assert main(["export", str(path)]) == 1

    def test_import_into_new_database(self, cli_env, tmp_path, monkeypatch, capsys):
        seed_database(cli_env)
        path = tmp_path / "backup.json.gz"
        main(["export", str(path)])

        monkeypatch.setenv("PATIENT_RECORDS_DB_PATH", str(tmp_path / "copy.db"))
        monkeypatch.setenv("PATIENT_RECORDS_MIGRATIONS_PATH", str(tmp_path / "copy-ledger.json"))
        capsys.readouterr()

        assert main(["import", str(path)]) == 0
        assert f"Imported {len(MOCK_PATIENTS)} patient(s)" in capsys.readouterr().out

    def test_import_missing_file(self, cli_env, tmp_path):
        assert main(["import", str(tmp_path / "missing.json.gz")]) == 1

    def test_list_and_stats(self, cli_env, capsys):
        seed_database(cli_env)
        capsys.readouterr()

        assert main(["list", "--status", "paused"]) == 0
        out = capsys.readouterr().out
        assert "Marcos Vidal" in out
        assert "Ana Ruiz" not in out

        assert main(["stats"]) == 0
        assert "Notes:" in capsys.readouterr().out

    def test_unknown_status_rejected(self, cli_env):
        with pytest.raises(SystemExit):
            main(["list", "--status", "retired"])


class TestSeedDatabase:
    """Tests for the seed script."""

    def test_seed_is_repeatable(self, cli_env, capsys):
        seed_database(cli_env)
        seed_database(cli_env)

        out = capsys.readouterr().out
        assert "Skipping Ana Ruiz (already exists)" in out

        with RecordsApp(cli_env) as app:
            assert len(app.patient_service.get_all_patients()) == len(MOCK_PATIENTS)
            assert len(app.note_service.get_all_notes()) == len(MOCK_NOTES)
            lucia = app.patient_service.search_patients("lucia")[0]
            assert len(app.legal_tutor_service.get_legal_tutors_by_patient_id(lucia.id)) == 1
