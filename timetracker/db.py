from __future__ import annotations
import sqlite3
from pathlib import Path
from typing import Optional, Union

DB_NAME = "timetracker.sqlite3"
APP_NAME = "ConsultantTimeTracker"

DEFAULT_SETTINGS = {
    "default_range_preset": "last30days",
    "workday_start_hour": "9",
    "workday_hours": "8",
    "export_date_format": "%m/%d/%Y",
}


def data_dir(app_name: str = APP_NAME) -> Path:
    # TIMETRACKER_DATA_DIR wins; otherwise the per-user app data dir
    # macOS: ~/Library/Application Support/<app>
    # Windows: %APPDATA%\<app>
    override = _get_env("TIMETRACKER_DATA_DIR", "")
    if override:
        d = Path(override)
    else:
        home = Path.home()
        if _is_macos():
            base = home / "Library" / "Application Support"
        elif _is_windows():
            base = Path(_get_env("APPDATA", str(home)))
        else:
            base = home / ".local" / "share"
        d = base / app_name
    d.mkdir(parents=True, exist_ok=True)
    return d


def db_path() -> Path:
    return data_dir() / DB_NAME


def connect(path: Optional[Union[str, Path]] = None) -> sqlite3.Connection:
    conn = sqlite3.connect(str(path) if path is not None else db_path())
    conn.row_factory = sqlite3.Row
    return conn


def migrate(conn: sqlite3.Connection) -> None:
    conn.executescript(
        """
        CREATE TABLE IF NOT EXISTS settings (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        -- one JSON document per key: tasks, categories, systems, taskTypes
        CREATE TABLE IF NOT EXISTS slots (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );
        """
    )

    # Defaults if missing
    for key, value in DEFAULT_SETTINGS.items():
        conn.execute("INSERT OR IGNORE INTO settings(key,value) VALUES(?,?)", (key, value))

    conn.commit()


def _is_windows() -> bool:
    import sys
    return sys.platform.startswith("win")


def _is_macos() -> bool:
    import sys
    return sys.platform == "darwin"


def _get_env(k: str, default: str) -> str:
    import os
    return os.environ.get(k, default)
