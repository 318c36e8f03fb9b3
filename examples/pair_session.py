#!/usr/bin/env python3
"""
Pair Session Example for Sync Bridge

Two agents, a planner and an editor, coordinate one task through the tool
dispatcher: the planner files the task, the editor shares code and reports
progress, and both read their inboxes.
"""

import json
import sys
from pathlib import Path

# Add the parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sync_bridge.communication.tool_dispatcher import ToolDispatcher
from sync_bridge.core.session import CollaborationSession
from sync_bridge.core.snapshot_storage import SnapshotStorage

PLANNER = {"clientId": "claude", "clientType": "agent"}
EDITOR = {"clientId": "cursor", "clientType": "ide"}

def show(label, payload):
    print(f"\n{label}")
    print(json.dumps(payload, indent=2))

def main():
    """Run a short scripted pair session."""
    print("🤝 Starting Pair Session Example")
    print("=" * 50)

    session = CollaborationSession("example", SnapshotStorage("example_sync_bridge.db"))
    session.load()
    tools = ToolDispatcher(session)

    created = tools.dispatch("task_create", {
        **PLANNER,
        "title": "Add retry to HTTP client",
        "description": "Retry idempotent requests with backoff",
        "status": "pending",
        "priority": "high",
        "assignedTo": "cursor",
        "tags": ["http", "reliability"],
    })
    show("Planner created a task:", created)
    task_id = created["task"]["id"]

    tools.dispatch("task_status_update", {**EDITOR, "taskId": task_id, "status": "in-progress"})
    tools.dispatch("code_snippet", {
        **EDITOR,
        "code": "for attempt in range(3):\n    ...",
        "language": "python",
        "fileName": "client.py",
        "taskId": task_id,
    })
    tools.dispatch("implementation_details", {
        **EDITOR,
        "taskId": task_id,
        "details": "Retry loop in place, backoff pending review",
        "status": "needs-review",
    })
    tools.dispatch("message_broadcast", {
        **EDITOR,
        "message": "Retry loop ready for review",
        "targetClientId": "claude",
        "targetClientType": "agent",
        "taskId": task_id,
    })

    show("Planner inbox:", tools.dispatch("messages_for_client", PLANNER))
    show("Snippets for the task:", tools.dispatch("snippets_for_task", {**PLANNER, "taskId": task_id}))
    show("Missing task lookup:", tools.dispatch("task_get", {**PLANNER, "taskId": "missing"}))

    session.save()
    print(f"\n✓ Session saved: {session.stats()}")

if __name__ == "__main__":
    main()
