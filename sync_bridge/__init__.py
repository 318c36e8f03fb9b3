"""
Sync Bridge

Shared state for collaborating AI coding agents: tasks with implementation
notes, code snippets, and directed or broadcast messages.
"""

__version__ = "1.0.0"

from .core.task_store import TaskStore
from .core.collaboration_store import CollaborationStore
from .core.session import CollaborationSession
from .core.exceptions import NotFoundError, ValidationError

__all__ = [
    "TaskStore",
    "CollaborationStore",
    "CollaborationSession",
    "NotFoundError",
    "ValidationError"
]
