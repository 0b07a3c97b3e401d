"""Where the tracker keeps its database and log.

Everything lives in one per-user data directory. Setting ``WORKTIME_HOME``
moves it elsewhere, which keeps separate profiles (or a scratch profile
for trying out the accelerated clock) apart from the real history.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from platformdirs import PlatformDirs


APP_NAME = "WorkTime"
APP_AUTHOR = "WorkTime"
HOME_ENV_VAR = "WORKTIME_HOME"
DB_FILENAME = "worktime.sqlite3"
LOG_FILENAME = "worktime.log"


def get_data_dir() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        path = Path(override).expanduser()
    else:
        dirs = PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)
        path = Path(dirs.user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_db_path() -> Path:
    return get_data_dir() / DB_FILENAME


def get_log_path() -> Path:
    return get_data_dir() / LOG_FILENAME


def resolve_db_path(explicit: Optional[Path] = None) -> Path:
    """Use ``explicit`` when given, creating its parent directory."""
    if explicit is None:
        return get_db_path()
    path = Path(explicit).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def resolve_log_path(explicit: Optional[Path] = None) -> Path:
    if explicit is None:
        return get_log_path()
    path = Path(explicit).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path
