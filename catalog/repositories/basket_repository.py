"""Basket repository for database operations."""

import json
import sqlite3
from typing import Dict, Iterable, Optional, Set

from common.logging_config import get_logger
from catalog.database import get_db_connection
from catalog.exceptions import PersistenceError
from catalog.utils import get_current_timestamp

logger = get_logger(__name__)


def _decode_kbs(raw: str) -> Set[int]:
    return {int(kb) for kb in json.loads(raw)}


class BasketRepository:
    @staticmethod
    def upsert(session_id: str, kbs: Iterable[int]) -> None:
        """
        Insert or replace the persisted basket for a session.

        Args:
            session_id: Opaque session identifier
            kbs: Full basket contents (stored sorted, without duplicates)

        Raises:
            PersistenceError: If the database rejects the write
        """
        payload = json.dumps(sorted(set(kbs)))
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO baskets (session_id, kbs, updated_at)
                    VALUES (?, ?, ?)
                    ON CONFLICT(session_id) DO UPDATE SET
                        kbs = excluded.kbs,
                        updated_at = excluded.updated_at
                    """,
                    (session_id, payload, get_current_timestamp())
                )
                conn.commit()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to persist basket: {e}") from e

    @staticmethod
    def get(session_id: str) -> Optional[Set[int]]:
        """
        Return the persisted basket for a session, or None if it has no record.

        Raises:
            PersistenceError: If the baskets table cannot be read or the record is corrupt
        """
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT kbs FROM baskets WHERE session_id = ?", (session_id,))
                row = cursor.fetchone()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to read basket: {e}") from e

        if row is None:
            return None
        try:
            return _decode_kbs(row["kbs"])
        except (ValueError, TypeError) as e:
            raise PersistenceError(f"Unreadable basket record: {e}") from e

    @staticmethod
    def load_all() -> Dict[str, Set[int]]:
        """
        Load every persisted basket, keyed by session identifier.

        Raises:
            PersistenceError: If the baskets table cannot be read
        """
        try:
            with get_db_connection() as conn:
                cursor = conn.cursor()
                cursor.execute("SELECT session_id, kbs FROM baskets")
                rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to load baskets: {e}") from e

        baskets = {}
        for row in rows:
            try:
                baskets[row["session_id"]] = _decode_kbs(row["kbs"])
            except (ValueError, TypeError) as e:
                logger.warning(f"Skipping unreadable basket record: {e}")
        return baskets
