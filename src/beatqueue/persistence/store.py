import json
import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

import aiosqlite

from beatqueue.config import DEFAULT_STORAGE_KEY
from beatqueue.exceptions import SnapshotError
from beatqueue.persistence.snapshot import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Durable key/value storage for player snapshots."""

    def __init__(self, db_path: Union[Path, str], default_key: str = DEFAULT_STORAGE_KEY):
        """
        Initialize the snapshot store.

        Args:
            db_path: Path to the SQLite database file, created if missing
            default_key: Key used when callers don't pass one
        """
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.db_path = str(db_path)
        self.default_key = default_key
        self._init_db()

    def _init_db(self):
        """Initialize the SQLite database schema."""
        try:
            with sqlite3.connect(self.db_path) as conn:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS snapshots (
                        storage_key TEXT PRIMARY KEY,
                        payload TEXT NOT NULL,
                        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
                    )
                """)
        except sqlite3.Error as e:
            raise SnapshotError(f"Cannot initialize snapshot database {self.db_path}: {e}") from e

    async def load(self, key: Optional[str] = None) -> Optional[Snapshot]:
        """
        Read the snapshot stored under ``key``.

        Args:
            key: Storage key, ``default_key`` when omitted

        Returns:
            The decoded snapshot, or None if nothing was saved yet

        Raises:
            SnapshotError: If the database can't be read or holds invalid JSON
        """
        key = key or self.default_key
        try:
            async with aiosqlite.connect(self.db_path) as db:
                async with db.execute(
                    "SELECT payload FROM snapshots WHERE storage_key = ?",
                    (key,)
                ) as cursor:
                    row = await cursor.fetchone()
        except sqlite3.Error as e:
            raise SnapshotError(f"Error reading snapshot {key}: {e}") from e

        if row is None:
            return None

        try:
            data = json.loads(row[0])
        except json.JSONDecodeError as e:
            raise SnapshotError(f"Snapshot {key} is not valid JSON: {e}") from e

        return Snapshot.from_dict(data)

    async def save(self, snapshot: Snapshot, key: Optional[str] = None) -> None:
        """
        Store ``snapshot`` under ``key``, replacing what was there.

        Raises:
            SnapshotError: If the write fails
        """
        key = key or self.default_key
        try:
            payload = json.dumps(snapshot.to_dict())
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(
                    """
                    INSERT OR REPLACE INTO snapshots
                    (storage_key, payload, updated_at)
                    VALUES (?, ?, CURRENT_TIMESTAMP)
                    """,
                    (key, payload)
                )
                await db.commit()
        except (sqlite3.Error, TypeError, ValueError) as e:
            raise SnapshotError(f"Error writing snapshot {key}: {e}") from e
        logger.debug(f"Saved snapshot {key} to {self.db_path}")

    async def clear(self, key: Optional[str] = None) -> None:
        """Delete the snapshot stored under ``key``."""
        key = key or self.default_key
        try:
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute("DELETE FROM snapshots WHERE storage_key = ?", (key,))
                await db.commit()
        except sqlite3.Error as e:
            raise SnapshotError(f"Error clearing snapshot {key}: {e}") from e
        logger.info(f"Cleared snapshot {key}")
