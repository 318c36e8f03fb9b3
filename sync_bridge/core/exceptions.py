"""
Error taxonomy for Sync Bridge.

Stores raise these and never catch them; the dispatcher and the dashboard
translate them into failure payloads and HTTP status codes.
"""

from typing import Any, Dict, List, Optional


class SyncBridgeError(Exception):
    """Base class for all Sync Bridge errors."""


class ValidationError(SyncBridgeError):
    """Input failed shape or constraint checks. Raised before any state change."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class NotFoundError(SyncBridgeError):
    """A referenced task does not exist."""

    def __init__(self, task_id: str):
        super().__init__(f"Task with ID {task_id} not found")
        self.task_id = task_id


class StorageError(SyncBridgeError):
    """The snapshot adapter could not read or write its database."""
