"""
Collaboration session: the unit that owns one task store and one
collaboration store, and moves them in and out of snapshot storage at
session boundaries.
"""

import logging
from typing import Any, Dict, Optional

from .collaboration_store import CollaborationStore
from .snapshot_storage import SnapshotStorage
from .task_store import TaskStore

logger = logging.getLogger(__name__)

TASKS_KEY = "tasks"
SNIPPETS_KEY = "snippets"
MESSAGES_KEY = "messages"


class CollaborationSession:
    """
    One collaboration session.

    Construct once per session and hand it to the dispatcher and dashboard.
    Store operations stay synchronous and in memory; persistence happens
    only through :meth:`load` and :meth:`save`.
    """

    def __init__(self, session_id: str = "default", storage: Optional[SnapshotStorage] = None,
                 keep_versions: int = 5):
        self.session_id = session_id
        self.storage = storage
        self.keep_versions = keep_versions
        self.tasks = TaskStore()
        self.collaboration = CollaborationStore()

    def load(self) -> bool:
        """
        Restore both stores from the last saved snapshot.

        Returns:
            False when there is no storage or nothing was saved yet

        Raises:
            StorageError: if the database cannot be read
            ValidationError: if a saved record no longer validates
        """
        if self.storage is None:
            return False

        tasks = self.storage.get(TASKS_KEY, namespace=self.session_id)
        snippets = self.storage.get(SNIPPETS_KEY, namespace=self.session_id)
        messages = self.storage.get(MESSAGES_KEY, namespace=self.session_id)
        if tasks is None and snippets is None and messages is None:
            logger.info(f"No snapshot for session {self.session_id}")
            return False

        # Live stores are swapped only after every record validates
        task_store = TaskStore()
        task_store.restore(tasks or {})
        collaboration_store = CollaborationStore()
        collaboration_store.restore(snippets=snippets or {}, messages=messages or [])

        self.tasks = task_store
        self.collaboration = collaboration_store
        logger.info(f"Loaded session {self.session_id}: {self.stats()}")
        return True

    def save(self) -> bool:
        """
        Write both stores to snapshot storage.

        Returns:
            False when the session has no storage

        Raises:
            StorageError: if the database cannot be written
        """
        if self.storage is None:
            return False

        collaboration = self.collaboration.snapshot()
        self.storage.put_many({
            TASKS_KEY: self.tasks.snapshot(),
            SNIPPETS_KEY: collaboration["snippets"],
            MESSAGES_KEY: collaboration["messages"],
        }, namespace=self.session_id)
        if self.keep_versions > 0:
            self.storage.cleanup_old_versions(self.keep_versions)

        logger.info(f"Saved session {self.session_id}: {self.stats()}")
        return True

    def stats(self) -> Dict[str, Any]:
        return {
            "tasks": self.tasks.count(),
            "snippets": self.collaboration.snippet_count(),
            "messages": self.collaboration.message_count(),
        }
