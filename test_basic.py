#!/usr/bin/env python3
"""
Basic functionality test for Sync Bridge.

Walks the main collaboration flows end to end.
"""

import tempfile
import shutil
from pathlib import Path

AGENT = {"id": "a", "type": "agent"}
IDE = {"id": "b", "type": "ide"}

def test_task_store():
    """Test task lifecycle end to end."""
    print("📋 Testing Task Store...")

    from sync_bridge.core.task_store import TaskStore

    store = TaskStore()

    # Test task creation
    task = store.create_task(
        title="T",
        description="D",
        status="pending",
        priority="high",
        client=AGENT
    )
    assert task["id"], "Task id not generated"
    assert task["createdAt"] == task["updatedAt"], "Timestamps differ at creation"
    assert task["createdBy"] == AGENT, f"Creator mismatch: {task['createdBy']}"
    assert task["implementationDetails"] == [], "Notes not empty at creation"

    # Test unfiltered query
    tasks = store.query_tasks(client=AGENT)
    assert tasks == [task], f"Expected only the new task, got {tasks}"

    # Test status update
    updated = store.update_task_status(task_id=task["id"], status="completed", client=AGENT)
    assert updated["status"] == "completed", f"Status not updated: {updated['status']}"
    assert updated["updatedAt"] >= updated["createdAt"], "updatedAt went backwards"

    completed = store.query_tasks(client=AGENT, status="completed")
    assert [t["id"] for t in completed] == [task["id"]], f"Completed query mismatch: {completed}"

    pending = store.query_tasks(client=AGENT, status="pending")
    assert pending == [], f"Task still reported as pending: {pending}"

    print("  ✓ Task creation")
    print("  ✓ Task query")
    print("  ✓ Status update")

def test_collaboration_store():
    """Test snippet sharing and message routing."""
    print("💬 Testing Collaboration Store...")

    from sync_bridge.core.collaboration_store import CollaborationStore

    store = CollaborationStore()

    # Test snippet sharing
    snippet = store.share_code_snippet(code="x", language="go", client=IDE, task_id="T1")
    assert store.get_snippets_for_task("T1") == [snippet], "Snippet not found for T1"
    assert store.get_snippets_for_task("T2") == [], "Unexpected snippet for T2"

    # Test directed message
    directed = store.broadcast_message(
        message="review please",
        client=AGENT,
        target_client_id="b",
        target_client_type="ide"
    )
    assert directed["toClient"] == IDE, f"Recipient mismatch: {directed.get('toClient')}"

    # Test broadcast
    broadcast = store.broadcast_message(message="hello all", client=AGENT)
    assert "toClient" not in broadcast, "Broadcast should have no recipient"

    inbox = store.get_messages_for_client("b", "ide")
    assert [m["id"] for m in inbox] == [directed["id"], broadcast["id"]], f"Inbox mismatch: {inbox}"

    other = store.get_messages_for_client("c", "agent")
    assert [m["id"] for m in other] == [broadcast["id"]], f"Routing leak: {other}"

    print("  ✓ Snippet sharing")
    print("  ✓ Directed messages")
    print("  ✓ Broadcast messages")

def test_session_snapshot():
    """Test session save and load."""
    print("💾 Testing Session Snapshot...")

    temp_dir = Path(tempfile.mkdtemp())

    try:
        from sync_bridge.core.session import CollaborationSession
        from sync_bridge.core.snapshot_storage import SnapshotStorage

        storage = SnapshotStorage(str(temp_dir / "sync_bridge.db"))

        session = CollaborationSession("s1", storage)
        assert session.load() is False, "Fresh storage should have nothing to load"

        task = session.tasks.create_task(
            title="Persist me", description="", status="in-progress",
            priority="low", client=AGENT, tags=["db"]
        )
        session.tasks.add_implementation_details(
            task_id=task["id"], details="schema drafted", status="planning", client=AGENT
        )
        session.collaboration.share_code_snippet(code="SELECT 1", language="sql", client=IDE)
        session.collaboration.broadcast_message(message="saved", client=IDE, task_id=task["id"])
        assert session.save() is True, "Save failed"

        restored = CollaborationSession("s1", storage)
        assert restored.load() is True, "Nothing loaded"
        assert restored.stats() == {"tasks": 1, "snippets": 1, "messages": 1}, restored.stats()

        reloaded = restored.tasks.get_task(task["id"])
        assert reloaded["tags"] == ["db"], f"Tags lost: {reloaded}"
        assert reloaded["implementationDetails"][0]["details"] == "schema drafted"

        other = CollaborationSession("s2", storage)
        assert other.load() is False, "Sessions must not share snapshots"

        print("  ✓ Save")
        print("  ✓ Load")
        print("  ✓ Session isolation")

    finally:
        shutil.rmtree(temp_dir, ignore_errors=True)

def test_configuration():
    """Test configuration system."""
    print("⚙️ Testing Configuration...")

    from sync_bridge.utils.config import ConfigManager, SyncBridgeConfig

    config = SyncBridgeConfig()
    assert config.data_dir == "./data", f"Default data_dir mismatch: {config.data_dir}"
    assert config.dashboard.port == 8000, f"Default port mismatch: {config.dashboard.port}"
    assert config.session.session_id == "default", f"Session mismatch: {config.session.session_id}"

    manager = ConfigManager(env_file="does-not-exist.env")
    loaded_config = manager.load_config()
    assert isinstance(loaded_config, SyncBridgeConfig)

    print("  ✓ Default configuration")
    print("  ✓ Configuration loading")

def main():
    """Run all tests."""
    print("🧪 Sync Bridge - Basic Functionality Tests")
    print("=" * 60)

    try:
        test_task_store()
        test_collaboration_store()
        test_session_snapshot()
        test_configuration()

        print("\n" + "=" * 60)
        print("🎉 All tests passed! Sync Bridge is working correctly.")

    except Exception as e:
        print(f"\n❌ Test failed: {e}")
        import traceback
        traceback.print_exc()
        return False

    return True

if __name__ == "__main__":
    success = main()
    exit(0 if success else 1)
