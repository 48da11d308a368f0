"""Error types raised by the services, repositories and backup layer."""


class PatientRecordsError(Exception):
    """Base class for all patient records errors."""
    pass


class ValidationError(PatientRecordsError):
    """Raised when input is malformed or out of range."""
    pass


class NotFoundError(PatientRecordsError):
    """Raised when an operation references an id that does not exist."""
    pass


class IntegrityError(PatientRecordsError):
    """Raised when a write succeeded but its row cannot be read back."""
    pass


class BackupError(PatientRecordsError):
    """Raised when a backup archive cannot be read or written."""
    pass


class MigrationError(PatientRecordsError):
    """Raised when a migration fails to apply or revert."""

    def __init__(self, migration_name: str, cause: Exception):
        self.migration_name = migration_name
        self.cause = cause
        super().__init__(f"Migration {migration_name} failed: {cause}")
