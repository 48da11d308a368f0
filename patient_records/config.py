"""Application settings loaded from the environment and an optional .env file."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

DEFAULT_DB_PATH = Path.home() / "pacientes_app.db"
DEFAULT_MIGRATIONS_PATH = Path.home() / ".pacientes_migrations.json"

TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Settings:
    db_path: Path = DEFAULT_DB_PATH
    migrations_path: Path = DEFAULT_MIGRATIONS_PATH
    memory_ledger: bool = False
    log_level: str = "INFO"
    debug: bool = False

    @property
    def effective_log_level(self) -> int:
        """Numeric log level, forced to DEBUG when the debug flag is on."""
        if self.debug:
            return logging.DEBUG
        level = getattr(logging, self.log_level.upper(), None)
        return level if isinstance(level, int) else logging.INFO


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in TRUTHY


def load_settings() -> Settings:
    """Build settings from environment variables, reading .env first."""
    load_dotenv(override=True)

    db_path = os.environ.get("PATIENT_RECORDS_DB_PATH")
    migrations_path = os.environ.get("PATIENT_RECORDS_MIGRATIONS_PATH")

    return Settings(
        db_path=Path(db_path).expanduser() if db_path else DEFAULT_DB_PATH,
        migrations_path=Path(migrations_path).expanduser() if migrations_path else DEFAULT_MIGRATIONS_PATH,
        memory_ledger=_env_flag("PATIENT_RECORDS_MEMORY_LEDGER"),
        log_level=os.environ.get("PATIENT_RECORDS_LOG_LEVEL", "INFO"),
        debug=_env_flag("DEBUG"),
    )
