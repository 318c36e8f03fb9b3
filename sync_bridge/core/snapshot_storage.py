"""
Snapshot Storage for Sync Bridge

SQLite persistence for session snapshots. Each collection (tasks, snippets,
messages) is written as one JSON value under a namespace named after the
session. Every saved version is kept until pruned.
"""

import sqlite3
import json
import threading
from typing import Any, Dict, List
from pathlib import Path
import logging

from .exceptions import StorageError

logger = logging.getLogger(__name__)

class SnapshotStorage:
    """
    Thread-safe versioned key/value store backed by SQLite.

    Supports:
    - JSON values stored verbatim (field names and ids untouched)
    - Per-session namespaces
    - Version history per key
    - Pruning of old versions
    """

    def __init__(self, db_path: str = "sync_bridge.db"):
        """Initialize snapshot storage with database path."""
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._lock = threading.RLock()
        self._init_database()

    def _init_database(self):
        """Initialize database schema."""
        with self._connect() as conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS snapshots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    key TEXT NOT NULL,
                    value TEXT NOT NULL,
                    namespace TEXT DEFAULT 'default',
                    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
                    version INTEGER DEFAULT 1
                )
            """)

            conn.execute("""
                CREATE INDEX IF NOT EXISTS idx_key_namespace ON snapshots(key, namespace)
            """)

    def _connect(self) -> sqlite3.Connection:
        try:
            return sqlite3.connect(self.db_path)
        except sqlite3.Error as e:
            logger.error(f"Failed to open snapshot database {self.db_path}: {e}")
            raise StorageError(f"Cannot open {self.db_path}: {e}") from e

    def put(self, key: str, value: Any, namespace: str = "default") -> int:
        """
        Store a new version of a value.

        Args:
            key: Collection name
            value: JSON-serializable value
            namespace: Session namespace

        Returns:
            The version number written
        """
        serialized_value = json.dumps(value)
        try:
            with self._lock:
                with self._connect() as conn:
                    cursor = conn.execute(
                        "SELECT MAX(version) FROM snapshots WHERE key = ? AND namespace = ?",
                        (key, namespace)
                    )
                    result = cursor.fetchone()
                    version = (result[0] or 0) + 1

                    conn.execute("""
                        INSERT INTO snapshots (key, value, namespace, version)
                        VALUES (?, ?, ?, ?)
                    """, (key, serialized_value, namespace, version))

            logger.debug(f"Saved {namespace}:{key} (v{version})")
            return version

        except sqlite3.Error as e:
            logger.error(f"Failed to save {namespace}:{key}: {e}")
            raise StorageError(f"Cannot save {namespace}:{key}: {e}") from e

    def put_many(self, values: Dict[str, Any], namespace: str = "default") -> Dict[str, int]:
        """
        Store a new version of several values in one transaction.

        Either every key gets its new version or none does.

        Returns:
            Mapping of key to the version number written
        """
        serialized = {key: json.dumps(value) for key, value in values.items()}
        versions = {}
        try:
            with self._lock:
                with self._connect() as conn:
                    for key, serialized_value in serialized.items():
                        cursor = conn.execute(
                            "SELECT MAX(version) FROM snapshots WHERE key = ? AND namespace = ?",
                            (key, namespace)
                        )
                        result = cursor.fetchone()
                        versions[key] = (result[0] or 0) + 1

                        conn.execute("""
                            INSERT INTO snapshots (key, value, namespace, version)
                            VALUES (?, ?, ?, ?)
                        """, (key, serialized_value, namespace, versions[key]))

            logger.debug(f"Saved {namespace}:{','.join(versions)} in one transaction")
            return versions

        except sqlite3.Error as e:
            logger.error(f"Failed to save {namespace}:{','.join(serialized)}: {e}")
            raise StorageError(f"Cannot save {namespace}: {e}") from e

    def get(self, key: str, namespace: str = "default", default: Any = None) -> Any:
        """
        Retrieve the latest version of a value.

        Returns:
            The stored value or ``default`` when the key was never saved
        """
        try:
            with self._lock:
                with self._connect() as conn:
                    cursor = conn.execute("""
                        SELECT value FROM snapshots
                        WHERE key = ? AND namespace = ?
                        ORDER BY version DESC LIMIT 1
                    """, (key, namespace))

                    result = cursor.fetchone()

        except sqlite3.Error as e:
            logger.error(f"Failed to load {namespace}:{key}: {e}")
            raise StorageError(f"Cannot load {namespace}:{key}: {e}") from e

        if result is None:
            return default
        return json.loads(result[0])

    def get_history(self, key: str, namespace: str = "default", limit: int = 10) -> List[Dict]:
        """
        Get version history for a key, newest first.

        Returns:
            List of version records with metadata
        """
        try:
            with self._lock:
                with self._connect() as conn:
                    cursor = conn.execute("""
                        SELECT value, timestamp, version
                        FROM snapshots
                        WHERE key = ? AND namespace = ?
                        ORDER BY version DESC LIMIT ?
                    """, (key, namespace, limit))
                    rows = cursor.fetchall()

        except sqlite3.Error as e:
            logger.error(f"Failed to get history for {namespace}:{key}: {e}")
            raise StorageError(f"Cannot read history for {namespace}:{key}: {e}") from e

        return [
            {
                "value": json.loads(row[0]),
                "timestamp": row[1],
                "version": row[2]
            }
            for row in rows
        ]

    def cleanup_old_versions(self, keep_versions: int = 5) -> int:
        """
        Remove old versions, keeping only the most recent N versions per key.

        Returns:
            Number of entries removed
        """
        try:
            with self._lock:
                with self._connect() as conn:
                    cursor = conn.execute("""
                        SELECT key, namespace, COUNT(*) as count
                        FROM snapshots
                        GROUP BY key, namespace
                        HAVING count > ?
                    """, (keep_versions,))

                    total_deleted = 0
                    for key, namespace, _ in cursor.fetchall():
                        delete_cursor = conn.execute("""
                            DELETE FROM snapshots
                            WHERE id IN (
                                SELECT id FROM snapshots
                                WHERE key = ? AND namespace = ?
                                ORDER BY version DESC
                                LIMIT -1 OFFSET ?
                            )
                        """, (key, namespace, keep_versions))
                        total_deleted += delete_cursor.rowcount

        except sqlite3.Error as e:
            logger.error(f"Failed to cleanup old versions: {e}")
            raise StorageError(f"Cannot prune snapshots: {e}") from e

        logger.debug(f"Cleaned up {total_deleted} old snapshot versions")
        return total_deleted
