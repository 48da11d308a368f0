"""Patient record management core: records, notes, contacts, tutors and backups."""

__version__ = "1.0.0"
