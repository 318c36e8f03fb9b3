"""
Monitoring Dashboard for Sync Bridge

Read-only HTTP view of a collaboration session for human oversight:
health, tasks, snippets and message routing as each client sees it.
"""

from fastapi import FastAPI, HTTPException, Query
import logging
from typing import List, Optional

from .. import __version__
from ..core.exceptions import NotFoundError, ValidationError
from ..core.models import Client
from ..core.session import CollaborationSession

logger = logging.getLogger(__name__)

DASHBOARD_CLIENT = Client(id="dashboard", type="monitor")

class MonitoringDashboard:
    """
    Web-based monitoring dashboard.

    Features:
    - Health and collection counts
    - Task listing with the same filters as task queries
    - All snippets, plus snippets and messages per task
    - Per-client message view, honouring directed/broadcast routing
    """

    def __init__(self, session: CollaborationSession, name: str = "Sync Bridge",
                 port: int = 8000):
        """
        Initialize monitoring dashboard.

        Args:
            session: Collaboration session to observe
            name: Display name reported by /health
            port: Port to run dashboard on
        """
        self.session = session
        self.name = name
        self.port = port

        self.app = FastAPI(title=f"{name} Monitoring Dashboard", version=__version__)
        self._setup_routes()

    def _setup_routes(self):
        """Setup FastAPI routes."""

        @self.app.get("/health")
        async def health():
            """Liveness and collection counts."""
            return {
                "status": "ok",
                "name": self.name,
                "version": __version__,
                "session": self.session.session_id,
                "stats": self.session.stats()
            }

        @self.app.get("/api/tasks")
        async def get_tasks(status: Optional[str] = None, priority: Optional[str] = None,
                            assigned_to: Optional[str] = None,
                            tags: Optional[List[str]] = Query(None)):
            """Get tasks with optional filtering."""
            try:
                return self.session.tasks.query_tasks(
                    client=DASHBOARD_CLIENT,
                    status=status,
                    priority=priority,
                    assigned_to=assigned_to,
                    tags=tags
                )
            except ValidationError as e:
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/api/tasks/{task_id}")
        async def get_task(task_id: str):
            """Get specific task details."""
            try:
                return self.session.tasks.get_task(task_id)
            except NotFoundError as e:
                raise HTTPException(status_code=404, detail=str(e))

        @self.app.get("/api/tasks/{task_id}/snippets")
        async def get_task_snippets(task_id: str):
            """Snippets shared for a task. Unknown task ids simply have none."""
            return self.session.collaboration.get_snippets_for_task(task_id)

        @self.app.get("/api/tasks/{task_id}/messages")
        async def get_task_messages(task_id: str):
            """Messages attached to a task."""
            return self.session.collaboration.get_messages_for_task(task_id)

        @self.app.get("/api/snippets")
        async def get_snippets():
            """All shared snippets, task-bound or not."""
            return self.session.collaboration.list_snippets()

        @self.app.get("/api/messages")
        async def get_messages(client_id: str, client_type: str):
            """Messages as a given client would receive them."""
            return self.session.collaboration.get_messages_for_client(client_id, client_type)
