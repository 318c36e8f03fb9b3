from .exceptions import NotFoundError, StorageError, SyncBridgeError, ValidationError
from .models import (
    Client,
    CodeSnippet,
    DetailNote,
    DetailStatus,
    Message,
    Task,
    TaskPriority,
    TaskStatus,
)
from .task_store import TaskStore
from .collaboration_store import CollaborationStore
from .snapshot_storage import SnapshotStorage
from .session import CollaborationSession

__all__ = [
    "Client",
    "CodeSnippet",
    "CollaborationSession",
    "CollaborationStore",
    "DetailNote",
    "DetailStatus",
    "Message",
    "NotFoundError",
    "SnapshotStorage",
    "StorageError",
    "SyncBridgeError",
    "Task",
    "TaskPriority",
    "TaskStatus",
    "TaskStore",
    "ValidationError",
]
