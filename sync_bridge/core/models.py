"""
Data model for Sync Bridge.

Entities and operation inputs are pydantic models. Python attributes are
snake_case; serialized dicts use the camelCase field names shared with
snapshots and tool payloads (createdBy, implementationDetails, toClient...).
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, StrictStr
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)


class TaskStatus(str, Enum):
    """Task status enumeration."""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskPriority(str, Enum):
    """Task priority levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class DetailStatus(str, Enum):
    """Progress state of an implementation detail note."""
    PLANNING = "planning"
    IMPLEMENTED = "implemented"
    NEEDS_REVIEW = "needs-review"


def utc_now() -> str:
    """Current UTC time as ISO-8601 with millisecond precision, e.g. 2025-01-01T12:00:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_id() -> str:
    return str(uuid.uuid4())


class SyncModel(BaseModel):
    """
    Base model: camelCase on the wire, snake_case in Python.

    String fields are strict (no bytes or numbers). Nested models passed in
    are revalidated into fresh instances, so a stored record never shares a
    Client object with its caller.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        revalidate_instances="always",
    )

    def to_dict(self) -> Dict[str, Any]:
        """Plain data copy with camelCase keys; unset optional fields are omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---- entities ----

class Client(SyncModel):
    """Identity of a caller. Not stored on its own, attached to writes as provenance."""
    id: StrictStr
    type: StrictStr


class DetailNote(SyncModel):
    details: StrictStr
    status: DetailStatus
    created_by: Client
    created_at: StrictStr


class Task(SyncModel):
    id: StrictStr
    title: StrictStr
    description: StrictStr
    status: TaskStatus
    priority: TaskPriority
    created_by: Client
    assigned_to: Optional[StrictStr] = None
    due_date: Optional[StrictStr] = None
    tags: Optional[List[StrictStr]] = None
    created_at: StrictStr
    updated_at: StrictStr
    implementation_details: List[DetailNote] = Field(default_factory=list)


class CodeSnippet(SyncModel):
    id: StrictStr
    code: StrictStr
    language: StrictStr
    file_name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    context: Optional[StrictStr] = None
    task_id: Optional[StrictStr] = None
    created_by: Client
    created_at: StrictStr
    updated_at: StrictStr


class Message(SyncModel):
    id: StrictStr
    message: StrictStr
    from_client: Client
    to_client: Optional[Client] = None
    task_id: Optional[StrictStr] = None
    timestamp: StrictStr

    @property
    def is_broadcast(self) -> bool:
        return self.to_client is None


# ---- operation inputs ----

class CreateTaskInput(SyncModel):
    title: StrictStr
    description: StrictStr
    status: TaskStatus
    priority: TaskPriority
    client: Client
    assigned_to: Optional[StrictStr] = None
    due_date: Optional[StrictStr] = None
    tags: Optional[List[StrictStr]] = None


class QueryTasksInput(SyncModel):
    client: Client
    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    assigned_to: Optional[StrictStr] = None
    tags: Optional[List[StrictStr]] = None


class UpdateTaskStatusInput(SyncModel):
    task_id: StrictStr
    status: TaskStatus
    client: Client


class AddImplementationDetailsInput(SyncModel):
    task_id: StrictStr
    details: StrictStr
    status: DetailStatus
    client: Client


class ShareCodeSnippetInput(SyncModel):
    code: StrictStr
    language: StrictStr
    client: Client
    file_name: Optional[StrictStr] = None
    description: Optional[StrictStr] = None
    context: Optional[StrictStr] = None
    task_id: Optional[StrictStr] = None


class BroadcastMessageInput(SyncModel):
    message: StrictStr
    client: Client
    target_client_id: Optional[StrictStr] = None
    target_client_type: Optional[StrictStr] = None
    task_id: Optional[StrictStr] = None


class TaskIdInput(SyncModel):
    task_id: StrictStr


class ClientLookupInput(SyncModel):
    client_id: StrictStr
    client_type: StrictStr


def _describe_errors(errors: List[Dict[str, Any]]) -> str:
    parts = []
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ())) or "input"
        parts.append(f"{location}: {error.get('msg', 'invalid value')}")
    return "; ".join(parts)


def validate_input(model_cls: Type[ModelT], data: Mapping[str, Any]) -> ModelT:
    """
    Validate raw input against a model.

    Raises:
        ValidationError: with pydantic's error list attached
    """
    try:
        return model_cls.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = e.errors(include_url=False, include_context=False)
        raise ValidationError(
            f"Invalid {model_cls.__name__}: {_describe_errors(errors)}", errors
        ) from e
