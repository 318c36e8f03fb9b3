"""
Tool Dispatcher for Sync Bridge

Maps named tool calls with flat parameters (clientId, clientType, ...) onto
session store operations and wraps the outcome in a success or failure
payload. Transport is left to the host.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping

from ..core.exceptions import SyncBridgeError
from ..core.models import Client, validate_input
from ..core.session import CollaborationSession

logger = logging.getLogger(__name__)

ToolHandler = Callable[[Client, Mapping[str, Any]], Dict[str, Any]]


class ToolDispatcher:
    """
    Routes tool calls to the stores of one collaboration session.

    Every tool receives ``clientId`` and ``clientType`` which become the
    caller's :class:`Client`. Store errors become failure payloads of the
    form ``{"success": False, "message": "Error <action>: <reason>"}``.
    """

    def __init__(self, session: CollaborationSession):
        self.session = session
        self._tools: Dict[str, Dict[str, Any]] = {}
        self._register_tools()

    def _register_tools(self):
        """Register the built-in tools."""
        self.register("task_create", "creating task", self._task_create)
        self.register("task_query", "querying tasks", self._task_query)
        self.register("task_status_update", "updating task status", self._task_status_update)
        self.register("task_get", "getting task", self._task_get)
        self.register("implementation_details", "adding implementation details",
                      self._implementation_details)
        self.register("code_snippet", "sharing code snippet", self._code_snippet)
        self.register("snippets_for_task", "getting snippets", self._snippets_for_task)
        self.register("message_broadcast", "broadcasting message", self._message_broadcast)
        self.register("messages_for_task", "getting task messages", self._messages_for_task)
        self.register("messages_for_client", "getting client messages", self._messages_for_client)

    def register(self, name: str, action: str, handler: ToolHandler):
        """
        Register a tool.

        Args:
            name: Tool name
            action: Gerund phrase used in failure messages, e.g. "creating task"
            handler: Callable taking the caller and the raw parameters
        """
        self._tools[name] = {"action": action, "handler": handler}

    def tool_names(self) -> List[str]:
        return list(self._tools)

    def dispatch(self, tool_name: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Invoke a tool.

        Returns:
            Success or failure payload
        """
        tool = self._tools.get(tool_name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {tool_name}")
            return {"success": False, "message": f"Unknown tool: {tool_name}"}

        try:
            client = validate_input(Client, {
                "id": params.get("clientId"),
                "type": params.get("clientType"),
            })
            return tool["handler"](client, params)
        except SyncBridgeError as e:
            logger.warning(f"Tool {tool_name} failed: {e}")
            return {"success": False, "message": f"Error {tool['action']}: {e}"}

    # ---- task tools ----

    def _task_create(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        task = self.session.tasks.create_task(
            title=params.get("title"),
            description=params.get("description"),
            status=params.get("status"),
            priority=params.get("priority"),
            client=client,
            assigned_to=params.get("assignedTo"),
            due_date=params.get("dueDate"),
            tags=params.get("tags"),
        )
        return {"success": True, "message": "Task created successfully", "task": task}

    def _task_query(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        tasks = self.session.tasks.query_tasks(
            client=client,
            status=params.get("status"),
            priority=params.get("priority"),
            assigned_to=params.get("assignedTo"),
            tags=params.get("tags"),
        )
        return {"success": True, "tasks": tasks}

    def _task_status_update(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        task = self.session.tasks.update_task_status(
            task_id=params.get("taskId"),
            status=params.get("status"),
            client=client,
        )
        return {"success": True, "message": "Task status updated successfully", "task": task}

    def _task_get(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {"success": True, "task": self.session.tasks.get_task(params.get("taskId"))}

    def _implementation_details(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        task = self.session.tasks.add_implementation_details(
            task_id=params.get("taskId"),
            details=params.get("details"),
            status=params.get("status"),
            client=client,
        )
        return {"success": True, "message": "Implementation details added successfully",
                "details": task}

    # ---- collaboration tools ----

    def _code_snippet(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        snippet = self.session.collaboration.share_code_snippet(
            code=params.get("code"),
            language=params.get("language"),
            client=client,
            file_name=params.get("fileName"),
            description=params.get("description"),
            context=params.get("context"),
            task_id=params.get("taskId"),
        )
        return {"success": True, "message": "Code snippet shared successfully", "snippet": snippet}

    def _snippets_for_task(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        snippets = self.session.collaboration.get_snippets_for_task(params.get("taskId"))
        return {"success": True, "snippets": snippets}

    def _message_broadcast(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        message = self.session.collaboration.broadcast_message(
            message=params.get("message"),
            client=client,
            target_client_id=params.get("targetClientId"),
            target_client_type=params.get("targetClientType"),
            task_id=params.get("taskId"),
        )
        return {"success": True, "message": "Message broadcast successfully", "result": message}

    def _messages_for_task(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        messages = self.session.collaboration.get_messages_for_task(params.get("taskId"))
        return {"success": True, "messages": messages}

    def _messages_for_client(self, client: Client, params: Mapping[str, Any]) -> Dict[str, Any]:
        messages = self.session.collaboration.get_messages_for_client(client.id, client.type)
        return {"success": True, "messages": messages}
