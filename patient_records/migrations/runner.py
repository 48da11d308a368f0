"""Migration runner with a ledger of applied migrations.

Migrations are an explicit ordered list of ``Migration`` units. The ledger
recording which have run lives outside the application database, either as a
JSON file or in memory for tests.
"""

import json
import logging
import os
import re
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ..database.connection import RecordStore
from ..exceptions import MigrationError

logger = logging.getLogger(__name__)

MIGRATION_NAME_RE = re.compile(r"^(\d{3})-[a-z0-9-]+$")


@dataclass(frozen=True)
class Migration:
    name: str
    up: Callable[[RecordStore], None]
    down: Callable[[RecordStore], None]

    @property
    def number(self) -> int:
        return int(self.name[:3])


def validate_migrations(migrations: list[Migration]) -> None:
    """Check names are well formed, unique and listed in ascending order."""
    seen = set()
    previous = 0
    for migration in migrations:
        if not MIGRATION_NAME_RE.match(migration.name):
            raise ValueError(f"Invalid migration name: {migration.name}")
        if migration.name in seen:
            raise ValueError(f"Duplicate migration name: {migration.name}")
        if migration.number <= previous:
            raise ValueError(f"Migration {migration.name} is out of order")
        seen.add(migration.name)
        previous = migration.number


class MemoryLedger:
    """In-memory ledger, used to isolate tests."""

    def __init__(self, applied: list[str] | None = None):
        self._applied = list(applied or [])

    def executed(self) -> list[str]:
        return list(self._applied)

    def log_migration(self, name: str) -> None:
        if name not in self._applied:
            self._applied.append(name)

    def unlog_migration(self, name: str) -> None:
        self._applied = [n for n in self._applied if n != name]


class JSONLedger:
    """Ledger stored as a JSON array of migration names."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def executed(self) -> list[str]:
        if not self.path.exists():
            return []
        text = self.path.read_text(encoding="utf-8").strip()
        if not text:
            return []
        data = json.loads(text)
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise ValueError(f"Migration ledger {self.path} is not a list of names")
        return data

    def log_migration(self, name: str) -> None:
        applied = self.executed()
        if name not in applied:
            applied.append(name)
            self._write(applied)

    def unlog_migration(self, name: str) -> None:
        self._write([n for n in self.executed() if n != name])

    def _write(self, names: list[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".ledger-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(names, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise


class MigrationRunner:
    """Applies pending migrations in order and reverts the latest one."""

    def __init__(self, store: RecordStore, ledger, migrations: list[Migration]):
        validate_migrations(migrations)
        self.store = store
        self.ledger = ledger
        self.migrations = list(migrations)

    def executed(self) -> list[str]:
        """Names of applied migrations, in the order they were applied."""
        return self.ledger.executed()

    def pending(self) -> list[Migration]:
        applied = set(self.executed())
        return [m for m in self.migrations if m.name not in applied]

    def up(self) -> list[str]:
        """Run every pending migration, stopping at the first failure.

        Migrations applied before the failure stay recorded; the failing one
        is not recorded.
        """
        pending = self.pending()
        logger.info("Found %d pending migration(s)", len(pending))
        for migration in pending:
            logger.info("  - %s", migration.name)

        if not pending:
            logger.info("No pending migrations")
            return []

        applied = []
        for migration in pending:
            logger.info("Running migration: %s (up)", migration.name)
            try:
                migration.up(self.store)
            except Exception as e:
                logger.error("Migration %s failed: %s", migration.name, e)
                raise MigrationError(migration.name, e) from e
            self.ledger.log_migration(migration.name)
            applied.append(migration.name)
            logger.info("Migration %s completed", migration.name)

        logger.info("All migrations completed successfully")
        return applied

    def down(self) -> str | None:
        """Revert the most recently applied migration. Returns its name."""
        executed = self.executed()
        if not executed:
            logger.info("No migrations to revert")
            return None

        name = executed[-1]
        migration = next((m for m in self.migrations if m.name == name), None)
        if migration is None:
            raise MigrationError(name, LookupError("migration is not registered"))

        logger.info("Running migration: %s (down)", name)
        try:
            migration.down(self.store)
        except Exception as e:
            logger.error("Reverting migration %s failed: %s", name, e)
            raise MigrationError(name, e) from e
        self.ledger.unlog_migration(name)
        logger.info("Successfully reverted migration %s", name)
        return name
