"""
Main Application Entry Point for Sync Bridge

Provides command-line interface and main application startup.
"""

import asyncio
import argparse
import sys
import logging
from pathlib import Path
from typing import Optional

import yaml

from .core.exceptions import SyncBridgeError
from .core.session import CollaborationSession
from .core.snapshot_storage import SnapshotStorage
from .communication.tool_dispatcher import ToolDispatcher
from .monitoring.dashboard import MonitoringDashboard
from .utils.config import load_config, setup_logging, SyncBridgeConfig

logger = logging.getLogger(__name__)

class SyncBridgeWorkspace:
    """
    Main application class for Sync Bridge.

    Owns the collaboration session for its lifetime: the snapshot is loaded
    on start and saved on stop. The tool dispatcher and dashboard receive
    the session by reference.
    """

    def __init__(self, config: SyncBridgeConfig):
        """Initialize the workspace with configuration."""
        self.config = config

        self.storage = SnapshotStorage(
            db_path=config.get_db_path(config.session.snapshot_db)
        )

        self.session = CollaborationSession(
            session_id=config.session.session_id,
            storage=self.storage,
            keep_versions=config.session.keep_versions
        )

        self.dispatcher = ToolDispatcher(self.session)

        self.monitoring_dashboard = None
        if config.dashboard.enable_dashboard:
            self.monitoring_dashboard = MonitoringDashboard(
                session=self.session,
                name=config.name,
                port=config.dashboard.port
            )

        self._running = False

    def start(self):
        """Load the session snapshot and mark the workspace running."""
        logger.info(f"Starting {self.config.name} session {self.session.session_id}")
        self.session.load()
        self._running = True
        self._display_startup_info()

    def stop(self):
        """Save the session snapshot if autosave is enabled."""
        if not self._running:
            return
        self._running = False

        if self.config.session.autosave:
            try:
                self.session.save()
            except SyncBridgeError as e:
                logger.error(f"Failed to save session {self.session.session_id}: {e}")
                raise

        logger.info(f"{self.config.name} stopped")

    async def serve(self):
        """Run the monitoring dashboard until the server exits."""
        if not self.monitoring_dashboard:
            while self._running:
                await asyncio.sleep(1)
            return

        import uvicorn
        config = uvicorn.Config(
            self.monitoring_dashboard.app,
            host=self.config.dashboard.host,
            port=self.config.dashboard.port,
            log_level=self.config.dashboard.log_level.lower()
        )
        server = uvicorn.Server(config)
        await server.serve()

    def _display_startup_info(self):
        """Display startup information to console."""
        stats = self.session.stats()
        print("\n" + "="*60)
        print(f"{self.config.name.upper()} STARTED")
        print("="*60)
        print(f"Environment: {self.config.environment}")
        print(f"Session: {self.session.session_id}")
        print(f"Data Directory: {self.config.data_dir}")

        if self.monitoring_dashboard:
            print(f"Dashboard: http://{self.config.dashboard.host}:{self.config.dashboard.port}")

        print(f"Tools: {', '.join(self.dispatcher.tool_names())}")
        print(f"\nTasks: {stats['tasks']}  Snippets: {stats['snippets']}  Messages: {stats['messages']}")
        print("="*60 + "\n")

    def get_status(self):
        """Get current workspace status."""
        return {
            "running": self._running,
            "config": self.config.model_dump(),
            "session": self.session.session_id,
            "stats": self.session.stats()
        }

def create_sample_config(path: str = "sync_bridge_config.yaml") -> Path:
    """Create a sample configuration file."""
    config = SyncBridgeConfig()
    config_path = Path(path)

    with open(config_path, 'w') as f:
        yaml.dump(config.model_dump(), f, default_flow_style=False, indent=2)

    print(f"Sample configuration created: {config_path}")
    return config_path

async def run_workspace(config_path: Optional[str] = None,
                        env_file: Optional[str] = None):
    """Run Sync Bridge until interrupted."""
    config = load_config(config_path, env_file)
    setup_logging(config)

    workspace = SyncBridgeWorkspace(config)
    workspace.start()
    try:
        await workspace.serve()
    finally:
        workspace.stop()

def show_status(config_path: Optional[str] = None, env_file: Optional[str] = None):
    """Print the contents of the last saved snapshot."""
    config = load_config(config_path, env_file)
    workspace = SyncBridgeWorkspace(config)
    found = workspace.session.load()

    if not found:
        print(f"No saved snapshot for session {config.session.session_id}")
        return

    stats = workspace.session.stats()
    print(f"Session {config.session.session_id}: "
          f"{stats['tasks']} tasks, {stats['snippets']} snippets, {stats['messages']} messages")

def main():
    """Main entry point with command-line interface."""
    parser = argparse.ArgumentParser(
        description="Sync Bridge - shared tasks, snippets and messages for collaborating agents"
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    start_parser = subparsers.add_parser('start', help='Start Sync Bridge')
    start_parser.add_argument('--config', '-c', help='Configuration file path')
    start_parser.add_argument('--env', '-e', help='Environment file path')

    config_parser = subparsers.add_parser('config', help='Configuration management')
    config_parser.add_argument('--create-sample', action='store_true',
                              help='Create sample configuration file')

    status_parser = subparsers.add_parser('status', help='Show the saved session snapshot')
    status_parser.add_argument('--config', '-c', help='Configuration file path')
    status_parser.add_argument('--env', '-e', help='Environment file path')

    args = parser.parse_args()

    if args.command == 'start':
        try:
            asyncio.run(run_workspace(args.config, args.env))
        except KeyboardInterrupt:
            print("\nShutdown complete.")
        except SyncBridgeError as e:
            print(f"Sync Bridge failed: {e}")
            sys.exit(1)

    elif args.command == 'config':
        if args.create_sample:
            create_sample_config()
        else:
            config_parser.print_help()

    elif args.command == 'status':
        try:
            show_status(args.config, args.env)
        except SyncBridgeError as e:
            print(f"Cannot read snapshot: {e}")
            sys.exit(1)

    else:
        parser.print_help()

if __name__ == "__main__":
    main()
