"""Tests for application start-up and configuration."""

import json
import logging

import pytest

from patient_records.app import RecordsApp
from patient_records.config import Settings, load_settings
from patient_records.exceptions import MigrationError
from patient_records.migrations import MIGRATIONS, MemoryLedger, Migration, MigrationRunner


class TestRecordsApp:
    """Tests for RecordsApp.initialize."""

    def test_services_unavailable_before_initialize(self, settings):
        app = RecordsApp(settings)
        with pytest.raises(RuntimeError, match="Database not initialized"):
            app.patient_service

    def test_initialize_migrates_and_records_ledger(self, settings):
        with RecordsApp(settings) as app:
            assert app.initialized
            assert app.store.table_exists("legal_tutors")

        assert json.loads(settings.migrations_path.read_text()) == [m.name for m in MIGRATIONS]

    def test_initialize_twice_is_noop(self, app):
        store = app.store
        app.initialize()
        assert app.store is store

    def test_data_survives_restart(self, settings, patient_data):
        with RecordsApp(settings) as app:
            app.patient_service.create_patient(patient_data())

        with RecordsApp(settings) as app:
            assert [p.name for p in app.patient_service.get_all_patients()] == ["Ana Ruiz"]

    def test_migration_failure_leaves_app_uninitialized(self, settings):
        def broken(store):
            raise RuntimeError("boom")

        def factory(store, _settings):
            migrations = MIGRATIONS + [Migration("007-broken", broken, lambda s: None)]
            return MigrationRunner(store, MemoryLedger(), migrations)

        app = RecordsApp(settings, runner_factory=factory)
        with pytest.raises(MigrationError):
            app.initialize()

        assert not app.initialized
        assert app.store is None
        with pytest.raises(RuntimeError):
            app.note_service

    def test_memory_ledger_setting(self, tmp_path):
        settings = Settings(
            db_path=tmp_path / "records.db",
            migrations_path=tmp_path / "ledger.json",
            memory_ledger=True,
        )
        with RecordsApp(settings):
            pass
        assert not settings.migrations_path.exists()


class TestSettings:
    """Tests for environment-driven settings."""

    def test_load_from_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PATIENT_RECORDS_DB_PATH", str(tmp_path / "db.sqlite"))
        monkeypatch.setenv("PATIENT_RECORDS_MIGRATIONS_PATH", str(tmp_path / "ledger.json"))
        monkeypatch.setenv("PATIENT_RECORDS_MEMORY_LEDGER", "true")
        monkeypatch.setenv("PATIENT_RECORDS_LOG_LEVEL", "warning")
        monkeypatch.delenv("DEBUG", raising=False)

        settings = load_settings()

        assert settings.db_path == tmp_path / "db.sqlite"
        assert settings.migrations_path == tmp_path / "ledger.json"
        assert settings.memory_ledger is True
        assert settings.effective_log_level == logging.WARNING

    def test_debug_forces_debug_level(self):
        assert Settings(log_level="ERROR", debug=True).effective_log_level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self):
        assert Settings(log_level="chatty").effective_log_level == logging.INFO
