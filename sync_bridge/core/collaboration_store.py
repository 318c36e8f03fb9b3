"""
Collaboration Store for Sync Bridge

Owns the code snippets and messages exchanged during a session and routes
messages to their readers: directed messages reach only their exact
(id, type) recipient, broadcasts reach everyone.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Union

from .models import (
    BroadcastMessageInput,
    Client,
    ClientLookupInput,
    CodeSnippet,
    Message,
    ShareCodeSnippetInput,
    TaskIdInput,
    new_id,
    utc_now,
    validate_input,
)

logger = logging.getLogger(__name__)

ClientLike = Union[Client, Mapping[str, Any]]


class CollaborationStore:
    """
    In-memory store for shared code snippets and messages.

    Snippets are keyed by id, messages kept in send order. Both are
    append-only. ``task_id`` on either is a loose reference that is never
    checked against the task store.
    """

    def __init__(self):
        self._snippets: Dict[str, CodeSnippet] = {}
        self._messages: List[Message] = []

    def share_code_snippet(self, code: str, language: str, client: ClientLike,
                           file_name: Optional[str] = None,
                           description: Optional[str] = None,
                           context: Optional[str] = None,
                           task_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Share a code snippet with other clients.

        Args:
            code: Snippet source text
            language: Language name, free-form
            client: Sharing client, recorded as createdBy
            file_name: Optional originating file
            description: Optional description
            context: Optional surrounding context
            task_id: Optional related task id

        Returns:
            The stored snippet
        """
        data = validate_input(ShareCodeSnippetInput, {
            "code": code,
            "language": language,
            "client": client,
            "file_name": file_name,
            "description": description,
            "context": context,
            "task_id": task_id,
        })

        now = utc_now()
        snippet = CodeSnippet(
            id=new_id(),
            code=data.code,
            language=data.language,
            file_name=data.file_name,
            description=data.description,
            context=data.context,
            task_id=data.task_id,
            created_by=data.client,
            created_at=now,
            updated_at=now,
        )
        self._snippets[snippet.id] = snippet

        logger.info(f"Shared {snippet.language} snippet {snippet.id} from {data.client.id}"
                    + (f" for task {snippet.task_id}" if snippet.task_id else ""))
        return snippet.to_dict()

    def broadcast_message(self, message: str, client: ClientLike,
                          target_client_id: Optional[str] = None,
                          target_client_type: Optional[str] = None,
                          task_id: Optional[str] = None) -> Dict[str, Any]:
        """
        Send a message.

        The message is directed only when both ``target_client_id`` and
        ``target_client_type`` are given; otherwise it is a broadcast.

        Returns:
            The stored message
        """
        data = validate_input(BroadcastMessageInput, {
            "message": message,
            "client": client,
            "target_client_id": target_client_id,
            "target_client_type": target_client_type,
            "task_id": task_id,
        })

        to_client = None
        if data.target_client_id and data.target_client_type:
            to_client = Client(id=data.target_client_id, type=data.target_client_type)

        stored = Message(
            id=new_id(),
            message=data.message,
            from_client=data.client,
            to_client=to_client,
            task_id=data.task_id,
            timestamp=utc_now(),
        )
        self._messages.append(stored)

        recipient = f"{to_client.type}:{to_client.id}" if to_client else "all clients"
        logger.info(f"Message {stored.id} from {data.client.id} to {recipient}")
        return stored.to_dict()

    def list_snippets(self) -> List[Dict[str, Any]]:
        """Every shared snippet, in share order, including those with no task."""
        return [snippet.to_dict() for snippet in self._snippets.values()]

    def get_snippets_for_task(self, task_id: str) -> List[Dict[str, Any]]:
        """All snippets attached to ``task_id``; empty when there are none."""
        data = validate_input(TaskIdInput, {"task_id": task_id})
        return [
            snippet.to_dict() for snippet in self._snippets.values()
            if snippet.task_id == data.task_id
        ]

    def get_messages_for_task(self, task_id: str) -> List[Dict[str, Any]]:
        """All messages attached to ``task_id``, in send order."""
        data = validate_input(TaskIdInput, {"task_id": task_id})
        return [
            message.to_dict() for message in self._messages
            if message.task_id == data.task_id
        ]

    def get_messages_for_client(self, client_id: str, client_type: str) -> List[Dict[str, Any]]:
        """
        Messages visible to a client, in send order.

        A client sees messages addressed to exactly its (id, type) pair plus
        every broadcast, including broadcasts it sent itself.
        """
        data = validate_input(ClientLookupInput, {
            "client_id": client_id,
            "client_type": client_type,
        })
        return [
            message.to_dict() for message in self._messages
            if message.is_broadcast or (
                message.to_client.id == data.client_id
                and message.to_client.type == data.client_type
            )
        ]

    def snippet_count(self) -> int:
        return len(self._snippets)

    def message_count(self) -> int:
        return len(self._messages)

    def snapshot(self) -> Dict[str, Any]:
        return {
            "snippets": {snippet_id: snippet.to_dict() for snippet_id, snippet in self._snippets.items()},
            "messages": [message.to_dict() for message in self._messages],
        }

    def restore(self, snippets: Optional[Mapping[str, Mapping[str, Any]]] = None,
                messages: Optional[List[Mapping[str, Any]]] = None) -> None:
        """
        Replace both collections from a snapshot.

        Nothing is replaced unless every record validates.
        """
        restored_snippets: Dict[str, CodeSnippet] = {}
        for record in (snippets or {}).values():
            snippet = validate_input(CodeSnippet, record)
            restored_snippets[snippet.id] = snippet

        restored_messages = [validate_input(Message, record) for record in (messages or [])]

        self._snippets = restored_snippets
        self._messages = restored_messages
        logger.info(f"Restored {len(restored_snippets)} snippets and {len(restored_messages)} messages")
