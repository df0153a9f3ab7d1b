"""Helpers for locating application directories."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "FlowTracker"
APP_AUTHOR = "FlowTracker"
DATA_DIR_ENV = "FLOW_TRACKER_DATA_DIR"


def get_data_dir() -> Path:
    """Return the base directory for persistent data.

    ``FLOW_TRACKER_DATA_DIR`` overrides the platform default.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        path = Path(override).expanduser()
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_state_path() -> Path:
    return get_data_dir() / "session.sqlite3"
