"""Metadata repository for database operations."""

import sqlite3
from typing import List, Optional

from common.logging_config import get_logger
from catalog.database import get_db_connection
from catalog.exceptions import PersistenceError
from catalog.types import MetadataEntry

logger = get_logger(__name__)

_COLUMNS = "kb, name, original_file_name, description, tag, upload_time, file_path"


def _row_to_entry(row: sqlite3.Row) -> MetadataEntry:
    return MetadataEntry(
        kb=row["kb"],
        name=row["name"],
        original_file_name=row["original_file_name"],
        description=row["description"],
        tag=row["tag"],
        upload_time=row["upload_time"],
        file_path=row["file_path"],
    )


class MetadataRepository:
    @staticmethod
    def create_entry(entry: MetadataEntry) -> MetadataEntry:
        """
        Insert one metadata entry.

        Raises:
            PersistenceError: If the database rejects the insert (e.g. duplicate kb)
        """
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    f"INSERT INTO metadata ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?)",
                    (
                        entry.kb,
                        entry.name,
                        entry.original_file_name,
                        entry.description,
                        entry.tag,
                        entry.upload_time,
                        entry.file_path,
                    )
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to insert metadata entry {entry.kb}: {e}") from e

        logger.debug(f"Inserted metadata entry [kb={entry.kb}]")
        return entry

    @staticmethod
    def list_all() -> List[MetadataEntry]:
        """
        Return the full collection ordered by kb.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM metadata ORDER BY kb")
            return [_row_to_entry(row) for row in cursor.fetchall()]

    @staticmethod
    def get_by_kbs(kbs: List[int]) -> List[MetadataEntry]:
        if not kbs:
            return []

        with get_db_connection() as conn:
            cursor = conn.cursor()
            placeholders = ','.join('?' for _ in kbs)
            cursor.execute(
                f"SELECT {_COLUMNS} FROM metadata WHERE kb IN ({placeholders}) ORDER BY kb",
                list(kbs)
            )
            return [_row_to_entry(row) for row in cursor.fetchall()]

    @staticmethod
    def get_by_file_path(file_path: str) -> Optional[MetadataEntry]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM metadata WHERE file_path = ?", (file_path,))
            row = cursor.fetchone()
            if row is None:
                return None
            return _row_to_entry(row)

    @staticmethod
    def get_max_kb() -> Optional[int]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT MAX(kb) AS max_kb FROM metadata")
            return cursor.fetchone()["max_kb"]
