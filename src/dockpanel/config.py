"""
Configuration management for dockpanel.

This module provides configuration file support with YAML format and
default settings.

Features:
- YAML configuration file at ~/.config/dockpanel/config.yaml
  (DOCKPANEL_CONFIG overrides the location)
- Default values with user overrides
- Startup connection settings (host and TLS material)
- Selection tracking mode for the resource panels
- Log level and rotation

Architecture:
- ConfigManager: Main configuration interface
- Merges user config with defaults
- Provides typed access to settings
- Handles missing/invalid config gracefully
"""

import os
import yaml
import logging
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict
from pathlib import Path

from .model import ConnectionConfig, DEFAULT_DOCKER_HOST

logger = logging.getLogger(__name__)

TRACK_BY_ID = "id"
TRACK_BY_INDEX = "index"


@dataclass
class ConnectionSection:
    """Connection settings used to build the first engine client."""
    host: str = ""  # empty: DOCKER_HOST, then the local socket
    ca_cert: str = ""
    client_cert: str = ""
    client_key: str = ""
    timeout: int = 60


@dataclass
class SelectionConfig:
    """How a panel's selection is resolved when an action runs."""
    track_by: str = TRACK_BY_INDEX  # "index" or "id"


@dataclass
class UIConfig:
    logs_tail: int = 100
    confirm_remove: bool = False


@dataclass
class LogConfig:
    """Logging configuration."""
    level: str = "INFO"
    file_path: Optional[str] = None  # None for default
    max_size_mb: int = 10
    backup_count: int = 5


@dataclass
class AppConfig:
    """Main application configuration."""
    connection: ConnectionSection = field(default_factory=ConnectionSection)
    selection: SelectionConfig = field(default_factory=SelectionConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LogConfig = field(default_factory=LogConfig)


def default_config_file() -> Path:
    override = os.environ.get("DOCKPANEL_CONFIG")
    if override:
        return Path(override).expanduser()
    return Path.home() / ".config" / "dockpanel" / "config.yaml"


class ConfigManager:
    """Configuration manager with YAML file support."""

    def __init__(self, config_file: Optional[Path] = None):
        self.config_file = Path(config_file) if config_file else default_config_file()
        self._config: AppConfig = AppConfig()
        self.load_config()

    def load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            if self.config_file.exists():
                with open(self.config_file, 'r') as f:
                    user_config = yaml.safe_load(f) or {}

                self._config = self._merge_configs(AppConfig(), user_config)
                logger.debug(f"Loaded configuration from {self.config_file}")
            else:
                self.save_config()
                logger.info(f"Created default configuration at {self.config_file}")
        except Exception as e:
            logger.error(f"Failed to load config: {e}, using defaults")
            self._config = AppConfig()

    def save_config(self) -> None:
        """Save current configuration to YAML file."""
        try:
            self.config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_file, 'w') as f:
                yaml.safe_dump(asdict(self._config), f, default_flow_style=False, indent=2)
            logger.debug(f"Saved configuration to {self.config_file}")
        except Exception as e:
            logger.error(f"Failed to save config: {e}")

    def get_config(self) -> AppConfig:
        """Get current configuration."""
        return self._config

    def _merge_configs(self, default: AppConfig, user: Dict[str, Any]) -> AppConfig:
        """Merge user config with defaults."""
        for section in ('connection', 'selection', 'ui', 'logging'):
            if isinstance(user.get(section), dict):
                self._merge_dataclass(getattr(default, section), user[section])

        if default.selection.track_by not in (TRACK_BY_ID, TRACK_BY_INDEX):
            logger.warning(f"Unknown selection.track_by {default.selection.track_by!r}, using 'index'")
            default.selection.track_by = TRACK_BY_INDEX
        return default

    def _merge_dataclass(self, obj: Any, updates: Dict[str, Any]) -> None:
        """Merge updates into dataclass object."""
        for key, value in updates.items():
            if hasattr(obj, key):
                setattr(obj, key, value)

    def get_connection_config(self) -> ConnectionConfig:
        """Startup connection settings: config file, then DOCKER_HOST, then the local socket."""
        section = self._config.connection
        host = section.host or os.environ.get("DOCKER_HOST") or DEFAULT_DOCKER_HOST
        return ConnectionConfig(
            host=host,
            ca_cert=section.ca_cert or "",
            client_cert=section.client_cert or "",
            client_key=section.client_key or "",
            timeout=int(section.timeout),
        )

    def get_track_by(self) -> str:
        return self._config.selection.track_by

    def get_logs_tail(self) -> int:
        return int(self._config.ui.logs_tail)

    def get_log_level(self) -> str:
        """Get configured log level."""
        return self._config.logging.level.upper()

    def get_custom_log_path(self) -> Optional[str]:
        """Get custom log file path if configured."""
        return self._config.logging.file_path
