"""Add the sexualOrientation column to patients, defaulting to prefer_not_to_say."""

from ..database.connection import RecordStore

NAME = "004-add-sexual-orientation"


def up(store: RecordStore) -> None:
    if "sexualOrientation" not in store.table_columns("patients"):
        store.exec_script(
            "ALTER TABLE patients "
            "ADD COLUMN sexualOrientation TEXT NOT NULL DEFAULT 'prefer_not_to_say'"
        )


def down(store: RecordStore) -> None:
    if "sexualOrientation" in store.table_columns("patients"):
        store.exec_script("ALTER TABLE patients DROP COLUMN sexualOrientation")
