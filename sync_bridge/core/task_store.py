"""
Task Store for Sync Bridge

Authoritative in-memory owner of every task in a collaboration session:
creation, filtered queries, status updates and append-only implementation
notes.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

from .exceptions import NotFoundError
from .models import (
    AddImplementationDetailsInput,
    Client,
    CreateTaskInput,
    DetailNote,
    DetailStatus,
    QueryTasksInput,
    Task,
    TaskIdInput,
    TaskPriority,
    TaskStatus,
    UpdateTaskStatusInput,
    new_id,
    utc_now,
    validate_input,
)

logger = logging.getLogger(__name__)

ClientLike = Union[Client, Mapping[str, Any]]


class TaskStore:
    """
    In-memory task store for one collaboration session.

    Features:
    - Task creation with generated ids
    - Filtering by status, priority, assignee and tags
    - Unguarded status updates
    - Append-only implementation detail notes
    - Snapshot/restore for the persistence adapter

    Every public operation validates its input before touching state and
    returns freshly serialized dicts, so callers never hold references into
    the store. Requests to one instance must be serialized by the host.
    """

    def __init__(self):
        self._tasks: Dict[str, Task] = {}

    def create_task(self, title: str, description: str, status: Union[TaskStatus, str],
                    priority: Union[TaskPriority, str], client: ClientLike,
                    assigned_to: Optional[str] = None, due_date: Optional[str] = None,
                    tags: Optional[List[str]] = None) -> Dict[str, Any]:
        """
        Create a new task.

        Args:
            title: Task title
            description: Task description
            status: Initial status
            priority: Priority level
            client: Creating client, recorded as createdBy
            assigned_to: Optional assignee name
            due_date: Optional due date, free-form string
            tags: Optional list of tags

        Returns:
            The stored task

        Raises:
            ValidationError: if the input is malformed
        """
        data = validate_input(CreateTaskInput, {
            "title": title,
            "description": description,
            "status": status,
            "priority": priority,
            "client": client,
            "assigned_to": assigned_to,
            "due_date": due_date,
            "tags": tags,
        })

        now = utc_now()
        task = Task(
            id=new_id(),
            title=data.title,
            description=data.description,
            status=data.status,
            priority=data.priority,
            created_by=data.client,
            assigned_to=data.assigned_to,
            due_date=data.due_date,
            tags=list(data.tags) if data.tags is not None else None,
            created_at=now,
            updated_at=now,
            implementation_details=[],
        )
        self._tasks[task.id] = task

        logger.info(f"Created task: {task.id} ({task.title}) by {data.client.type}:{data.client.id}")
        return task.to_dict()

    def query_tasks(self, client: ClientLike, status: Optional[Union[TaskStatus, str]] = None,
                    priority: Optional[Union[TaskPriority, str]] = None,
                    assigned_to: Optional[str] = None,
                    tags: Optional[List[str]] = None) -> List[Dict[str, Any]]:
        """
        Query tasks with optional filtering.

        Every task is visible to every client; ``client`` identifies the
        caller but does not scope the result. Unset filters match anything.
        A non-empty ``tags`` filter matches tasks sharing at least one tag.

        Returns:
            Matching tasks in insertion order
        """
        query = validate_input(QueryTasksInput, {
            "client": client,
            "status": status,
            "priority": priority,
            "assigned_to": assigned_to,
            "tags": tags,
        })

        wanted_tags = set(query.tags or [])
        results = []
        for task in self._tasks.values():
            if query.status is not None and task.status != query.status:
                continue
            if query.priority is not None and task.priority != query.priority:
                continue
            if query.assigned_to is not None and task.assigned_to != query.assigned_to:
                continue
            if wanted_tags and wanted_tags.isdisjoint(task.tags or []):
                continue
            results.append(task.to_dict())

        logger.debug(f"Task query by {query.client.id} matched {len(results)} of {len(self._tasks)}")
        return results

    def update_task_status(self, task_id: str, status: Union[TaskStatus, str],
                           client: ClientLike) -> Dict[str, Any]:
        """
        Overwrite a task's status.

        Any status may follow any other. The caller identity is validated but
        not recorded on the task.

        Raises:
            ValidationError: if the input is malformed
            NotFoundError: if no task has ``task_id``
        """
        data = validate_input(UpdateTaskStatusInput, {
            "task_id": task_id,
            "status": status,
            "client": client,
        })

        task = self._require(data.task_id)
        previous = task.status
        task.status = data.status
        task.updated_at = utc_now()

        logger.info(f"Task {task.id} status {previous} -> {task.status}")
        return task.to_dict()

    def add_implementation_details(self, task_id: str, details: str,
                                   status: Union[DetailStatus, str],
                                   client: ClientLike) -> Dict[str, Any]:
        """
        Append an implementation detail note to a task.

        Returns:
            The full updated task

        Raises:
            ValidationError: if the input is malformed
            NotFoundError: if no task has ``task_id``
        """
        data = validate_input(AddImplementationDetailsInput, {
            "task_id": task_id,
            "details": details,
            "status": status,
            "client": client,
        })

        task = self._require(data.task_id)
        now = utc_now()
        task.implementation_details.append(DetailNote(
            details=data.details,
            status=data.status,
            created_by=data.client,
            created_at=now,
        ))
        task.updated_at = now

        logger.info(f"Task {task.id} received {data.status} note from {data.client.id} "
                    f"({len(task.implementation_details)} total)")
        return task.to_dict()

    def get_task(self, task_id: str) -> Dict[str, Any]:
        """
        Get a task by id.

        Raises:
            ValidationError: if ``task_id`` is not a string
            NotFoundError: if no task has ``task_id``
        """
        data = validate_input(TaskIdInput, {"task_id": task_id})
        return self._require(data.task_id).to_dict()

    def count(self) -> int:
        return len(self._tasks)

    def snapshot(self) -> Dict[str, Dict[str, Any]]:
        """Serialize every task, keyed by id, in insertion order."""
        return {task_id: task.to_dict() for task_id, task in self._tasks.items()}

    def restore(self, tasks: Union[Mapping[str, Mapping[str, Any]], Iterable[Mapping[str, Any]]]) -> int:
        """
        Replace the store's contents with a snapshot.

        Accepts the mapping produced by :meth:`snapshot` or a plain list of
        task dicts. Nothing is replaced unless every task validates.

        Returns:
            Number of tasks restored
        """
        records = tasks.values() if isinstance(tasks, Mapping) else tasks
        restored: Dict[str, Task] = {}
        for record in records:
            task = validate_input(Task, record)
            restored[task.id] = task

        self._tasks = restored
        logger.info(f"Restored {len(restored)} tasks")
        return len(restored)

    def _require(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task
