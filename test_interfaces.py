"""
Tests for the tool dispatcher and the monitoring dashboard.
"""

import pytest
from fastapi.testclient import TestClient

from sync_bridge.communication.tool_dispatcher import ToolDispatcher
from sync_bridge.core.session import CollaborationSession
from sync_bridge.monitoring.dashboard import MonitoringDashboard

CALLER = {"clientId": "claude", "clientType": "agent"}


@pytest.fixture()
def session():
    return CollaborationSession("test")


@pytest.fixture()
def dispatcher(session):
    return ToolDispatcher(session)


def call(dispatcher, tool, **params):
    return dispatcher.dispatch(tool, {**CALLER, **params})


def test_registered_tools(dispatcher):
    assert set(dispatcher.tool_names()) == {
        "task_create", "task_query", "task_status_update", "task_get",
        "implementation_details", "code_snippet", "snippets_for_task",
        "message_broadcast", "messages_for_task", "messages_for_client",
    }


def test_task_tools_flow(dispatcher):
    created = call(dispatcher, "task_create", title="T", description="D",
                   status="pending", priority="high", tags=["api"], assignedTo="cursor")
    assert created["success"] is True
    assert created["message"] == "Task created successfully"
    task = created["task"]
    assert task["createdBy"] == {"id": "claude", "type": "agent"}
    assert task["assignedTo"] == "cursor"

    queried = call(dispatcher, "task_query", tags=["api"])
    assert [t["id"] for t in queried["tasks"]] == [task["id"]]

    updated = call(dispatcher, "task_status_update", taskId=task["id"], status="completed")
    assert updated["task"]["status"] == "completed"

    noted = call(dispatcher, "implementation_details", taskId=task["id"],
                 details="wired up", status="implemented")
    assert noted["message"] == "Implementation details added successfully"
    assert noted["details"]["implementationDetails"][0]["details"] == "wired up"

    fetched = call(dispatcher, "task_get", taskId=task["id"])
    assert fetched["task"] == noted["details"]


def test_collaboration_tools_flow(dispatcher):
    shared = call(dispatcher, "code_snippet", code="x := 1", language="go", taskId="T1")
    assert shared["message"] == "Code snippet shared successfully"
    assert call(dispatcher, "snippets_for_task", taskId="T1")["snippets"] == [shared["snippet"]]

    sent = dispatcher.dispatch("message_broadcast", {
        "clientId": "cursor", "clientType": "ide", "message": "look at T1",
        "targetClientId": "claude", "targetClientType": "agent", "taskId": "T1",
    })
    assert sent["message"] == "Message broadcast successfully"
    assert sent["result"]["toClient"] == {"id": "claude", "type": "agent"}

    inbox = call(dispatcher, "messages_for_client")
    assert [m["id"] for m in inbox["messages"]] == [sent["result"]["id"]]

    stranger = dispatcher.dispatch("messages_for_client", {"clientId": "x", "clientType": "agent"})
    assert stranger["messages"] == []

    assert len(call(dispatcher, "messages_for_task", taskId="T1")["messages"]) == 1


def test_not_found_becomes_failure_payload(dispatcher, session):
    result = call(dispatcher, "task_status_update", taskId="missing", status="completed")
    assert result == {
        "success": False,
        "message": "Error updating task status: Task with ID missing not found",
    }
    assert session.tasks.count() == 0


def test_validation_failure_payload(dispatcher, session):
    result = call(dispatcher, "task_create", title="T", description="D",
                  status="open", priority="high")
    assert result["success"] is False
    assert result["message"].startswith("Error creating task: ")
    assert session.tasks.count() == 0


def test_missing_client_identity(dispatcher):
    result = dispatcher.dispatch("task_query", {"clientId": "claude"})
    assert result["success"] is False
    assert result["message"].startswith("Error querying tasks: ")


def test_unknown_tool(dispatcher):
    result = call(dispatcher, "task_delete", taskId="x")
    assert result == {"success": False, "message": "Unknown tool: task_delete"}


# ---- dashboard ----

@pytest.fixture()
def http(session):
    dashboard = MonitoringDashboard(session, name="Test Bridge")
    return TestClient(dashboard.app)


def test_health(http, session):
    session.tasks.create_task(title="T", description="D", status="pending",
                              priority="low", client={"id": "a", "type": "agent"})
    body = http.get("/health").json()
    assert body["status"] == "ok"
    assert body["name"] == "Test Bridge"
    assert body["session"] == "test"
    assert body["stats"] == {"tasks": 1, "snippets": 0, "messages": 0}


def test_dashboard_tasks(http, session):
    client = {"id": "a", "type": "agent"}
    first = session.tasks.create_task(title="A", description="", status="pending",
                                      priority="high", client=client, tags=["x"])
    session.tasks.create_task(title="B", description="", status="completed",
                              priority="high", client=client)

    assert len(http.get("/api/tasks").json()) == 2
    assert [t["id"] for t in http.get("/api/tasks", params={"status": "pending"}).json()] == [first["id"]]
    assert [t["id"] for t in http.get("/api/tasks", params={"tags": ["x"]}).json()] == [first["id"]]
    assert http.get("/api/tasks", params={"status": "bogus"}).status_code == 400

    assert http.get(f"/api/tasks/{first['id']}").json() == first
    assert http.get("/api/tasks/unknown").status_code == 404


def test_dashboard_snippets_and_messages(http, session):
    ide = {"id": "b", "type": "ide"}
    snippet = session.collaboration.share_code_snippet(code="x", language="go", client=ide, task_id="T1")
    directed = session.collaboration.broadcast_message(
        message="hi", client=ide, target_client_id="a", target_client_type="agent", task_id="T1"
    )

    assert http.get("/api/tasks/T1/snippets").json() == [snippet]
    assert http.get("/api/tasks/T2/snippets").json() == []
    assert http.get("/api/tasks/T1/messages").json() == [directed]

    inbox = http.get("/api/messages", params={"client_id": "a", "client_type": "agent"}).json()
    assert inbox == [directed]
    other = http.get("/api/messages", params={"client_id": "b", "client_type": "ide"}).json()
    assert other == []


def test_dashboard_lists_all_snippets(http, session):
    agent = {"id": "a", "type": "agent"}
    bound = session.collaboration.share_code_snippet(code="x", language="go", client=agent, task_id="T1")
    loose = session.collaboration.share_code_snippet(code="y", language="rust", client=agent)

    assert http.get("/api/snippets").json() == [bound, loose]
