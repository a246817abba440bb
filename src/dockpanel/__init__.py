"""
dockpanel - A Textual front-end for the Docker Engine API.

Four resource panels (Containers, Images, Volumes, Networks) list what the
engine reports and dispatch one engine call per button press. A Settings
panel rebuilds the engine client, and modal viewers show one-shot stats,
logs and inspect output.

Main Components:
  - textual_app.py: Textual application, panels and modal screens
  - state.py: Per-panel snapshot and selection state
  - backend.py: Docker API wrapper
  - connection.py: Leased, generation-tagged engine client registry
  - parsing.py: Creation-dialog input syntax (env, ports, numbers)
  - stats.py: CPU/memory percentage computation
  - ui.py: Display line formatting
  - model.py: Data structures (ContainerInfo, ImageInfo, ...)

Usage:
  python -m dockpanel

Dependencies:
  - docker>=7.0.0
  - textual, rich
  - requests
  - PyYAML
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

__version__ = "0.1.0"

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def get_log_path() -> str:
    """
    Get the log file path following XDG Base Directory spec.

    Returns XDG_DATA_HOME/dockpanel/logs/dockpanel.log with fallback to /tmp.
    Creates directory if it doesn't exist.
    """
    xdg_data_home = os.environ.get('XDG_DATA_HOME')
    if not xdg_data_home:
        xdg_data_home = Path.home() / '.local' / 'share'
    else:
        xdg_data_home = Path(xdg_data_home)

    log_dir = xdg_data_home / 'dockpanel' / 'logs'

    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        return str(log_dir / 'dockpanel.log')
    except (PermissionError, OSError):
        return '/tmp/dockpanel.log'


def configure_logging(level: str = "INFO", file_path: Optional[str] = None,
                      max_size_mb: int = 10, backup_count: int = 5) -> logging.Handler:
    """
    Attach a rotating file handler to the root logger.

    The terminal belongs to Textual, so nothing is logged to stderr.
    """
    handler = RotatingFileHandler(
        file_path or get_log_path(),
        maxBytes=max_size_mb * 1024 * 1024,
        backupCount=backup_count,
        encoding='utf-8',
    )
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
