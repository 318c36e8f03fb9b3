"""
Configuration Management for Sync Bridge

Handles configuration loading, validation, and environment setup.
"""

import os
import json
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv
import logging

logger = logging.getLogger(__name__)

class SessionConfig(BaseModel):
    """Collaboration session configuration."""
    session_id: str = "default"
    snapshot_db: str = "sync_bridge.db"
    autosave: bool = True
    keep_versions: int = 5  # snapshot versions kept per collection

class DashboardConfig(BaseModel):
    """Monitoring dashboard configuration."""
    host: str = "127.0.0.1"
    port: int = 8000
    enable_dashboard: bool = True
    log_level: str = "INFO"

class SyncBridgeConfig(BaseModel):
    """Main configuration for Sync Bridge."""

    name: str = "Sync Bridge"

    # Data directory for the snapshot database and logs
    data_dir: str = "./data"

    session: SessionConfig = Field(default_factory=SessionConfig)
    dashboard: DashboardConfig = Field(default_factory=DashboardConfig)

    environment: str = "development"
    debug: bool = False

    @field_validator('data_dir')
    @classmethod
    def validate_data_dir(cls, v):
        """Ensure data directory exists."""
        Path(v).mkdir(parents=True, exist_ok=True)
        return v

    def get_db_path(self, db_name: str) -> str:
        """Get full path for a database file."""
        return str(Path(self.data_dir) / db_name)

class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_path: Optional[str] = None,
                 env_file: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Path to configuration file
            env_file: Path to .env file
        """
        self.config_path = config_path
        self.env_file = env_file or ".env"
        self.config: Optional[SyncBridgeConfig] = None

    def load_config(self) -> SyncBridgeConfig:
        """Load configuration from file and environment."""
        if Path(self.env_file).exists():
            load_dotenv(self.env_file)

        config_data = {}

        if self.config_path and Path(self.config_path).exists():
            config_data = self._load_config_file(self.config_path)

        config_data = self._apply_env_overrides(config_data)

        self.config = SyncBridgeConfig(**config_data)

        logger.info(f"Configuration loaded: {self.config.environment} environment")
        return self.config

    def _load_config_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from JSON or YAML file."""
        path = Path(config_path)

        with open(path, 'r') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                return yaml.safe_load(f) or {}
            elif path.suffix.lower() == '.json':
                return json.load(f)
            else:
                raise ValueError(f"Unsupported config file format: {path.suffix}")

    def _apply_env_overrides(self, config_data: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides."""

        env_mappings = {
            'SYNC_BRIDGE_DATA_DIR': 'data_dir',
            'SYNC_BRIDGE_ENVIRONMENT': 'environment',
            'SYNC_BRIDGE_DEBUG': 'debug',
            'SYNC_BRIDGE_SESSION_ID': 'session.session_id',
            'SYNC_BRIDGE_SNAPSHOT_DB': 'session.snapshot_db',
            'SYNC_BRIDGE_AUTOSAVE': 'session.autosave',
            'SYNC_BRIDGE_DASHBOARD_HOST': 'dashboard.host',
            'SYNC_BRIDGE_DASHBOARD_PORT': 'dashboard.port',
            'SYNC_BRIDGE_LOG_LEVEL': 'dashboard.log_level',
        }

        for env_var, config_path in env_mappings.items():
            env_value = os.getenv(env_var)
            if env_value is not None:
                self._set_nested_config(config_data, config_path, env_value)

        return config_data

    def _set_nested_config(self, config: Dict[str, Any],
                          path: str, value: str) -> None:
        """Set a nested configuration value."""
        keys = path.split('.')
        current = config

        for key in keys[:-1]:
            if key not in current:
                current[key] = {}
            current = current[key]

        # Raw string; the config model converts "8000" or "true" per field type
        current[keys[-1]] = value

    def save_config(self, output_path: str) -> None:
        """Save current configuration to file."""
        if not self.config:
            raise ValueError("No configuration loaded to save")

        path = Path(output_path)
        config_dict = self.config.model_dump()

        with open(path, 'w') as f:
            if path.suffix.lower() in ['.yaml', '.yml']:
                yaml.dump(config_dict, f, default_flow_style=False, indent=2)
            else:
                json.dump(config_dict, f, indent=2)

        logger.info(f"Configuration saved to {output_path}")

    def get_config(self) -> SyncBridgeConfig:
        """Get the current configuration."""
        if self.config is None:
            self.config = self.load_config()
        return self.config

# Global configuration instance
_config_manager = ConfigManager()

def get_config() -> SyncBridgeConfig:
    """Get the global configuration instance."""
    return _config_manager.get_config()

def load_config(config_path: Optional[str] = None,
                env_file: Optional[str] = None) -> SyncBridgeConfig:
    """Load configuration with custom paths."""
    global _config_manager
    _config_manager = ConfigManager(config_path, env_file)
    return _config_manager.load_config()

def setup_logging(config: SyncBridgeConfig) -> None:
    """Setup logging based on configuration."""
    level_name = "DEBUG" if config.debug else config.dashboard.log_level.upper()
    level = getattr(logging, level_name, logging.INFO)

    log_dir = Path(config.data_dir) / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_dir / "sync_bridge.log")
        ]
    )

    logger.info(f"Logging configured at {level_name} level")
