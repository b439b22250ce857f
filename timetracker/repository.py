from __future__ import annotations
import json
import logging
import sqlite3
from datetime import date
from typing import Any, Dict, List, Optional

from .errors import MalformedPersistedStateError
from .models import AppSettings, Task
from .options import Options
from .periods import coerce_date

LOGGER = logging.getLogger(__name__)

TASKS_SLOT = "tasks"
OPTION_SLOTS = ("categories", "systems", "taskTypes")

# python attribute -> stored key
_RECORD_KEYS = {
    "id": "id",
    "title": "title",
    "category": "category",
    "system": "system",
    "task_type": "taskType",
    "description": "description",
    "ticket_number": "ticketNumber",
    "project": "project",
    "date": "date",
    "start_time": "startTime",
    "end_time": "endTime",
    "time_spent": "timeSpent",
    "created": "created",
}


def task_to_record(task: Task) -> Dict[str, Any]:
    rec = {stored: getattr(task, attr) for attr, stored in _RECORD_KEYS.items()}
    if isinstance(task.date, date):
        rec["date"] = task.date.isoformat()
    return rec


def task_from_record(rec: Dict[str, Any]) -> Task:
    """Raises KeyError/TypeError/ValueError for records that cannot become a Task."""
    raw_date = rec.get("date")
    task_date: Any = None
    if raw_date not in (None, ""):
        try:
            task_date = coerce_date(raw_date)
        except (TypeError, ValueError):
            LOGGER.warning("task %s has unreadable date %r; keeping it as is", rec.get("id"), raw_date)
            task_date = str(raw_date)

    return Task(
        id=int(rec["id"]),
        title=str(rec["title"]),
        category=str(rec.get("category") or ""),
        system=str(rec.get("system") or ""),
        task_type=str(rec.get("taskType") or ""),
        created=str(rec.get("created") or ""),
        date=task_date,
        description=str(rec.get("description") or ""),
        ticket_number=str(rec.get("ticketNumber") or ""),
        project=str(rec.get("project") or ""),
        start_time=str(rec.get("startTime") or ""),
        end_time=str(rec.get("endTime") or ""),
        time_spent=max(0, int(rec.get("timeSpent") or 0)),
    )


class Repository:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ---------- Settings ----------
    def get_settings(self) -> AppSettings:
        return AppSettings(
            default_range_preset=self._get_setting("default_range_preset", "last30days"),
            workday_start_hour=self._get_int_setting("workday_start_hour", 9),
            workday_hours=self._get_int_setting("workday_hours", 8),
            export_date_format=self._get_setting("export_date_format", "%m/%d/%Y"),
        )

    def set_setting(self, key: str, value: str) -> None:
        self._set_setting(key, value)

    def _get_int_setting(self, key: str, default: int) -> int:
        try:
            return int(self._get_setting(key, str(default)))
        except ValueError:
            LOGGER.warning("setting %s is not a number; using %s", key, default)
            return default

    def _get_setting(self, key: str, default: str) -> str:
        row = self.conn.execute("SELECT value FROM settings WHERE key=?", (key,)).fetchone()
        return row["value"] if row else default

    def _set_setting(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT INTO settings(key,value) VALUES(?,?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value),
        )
        self.conn.commit()

    # ---------- Slots ----------
    def get_slot(self, key: str) -> Optional[str]:
        row = self.conn.execute("SELECT value FROM slots WHERE key=?", (key,)).fetchone()
        return row["value"] if row else None

    def set_slot(self, key: str, value: str) -> None:
        self.conn.execute(
            "INSERT INTO slots(key,value) VALUES(?,?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value",
            (key, value),
        )
        self.conn.commit()

    def _load_json(self, key: str) -> Any:
        raw = self.get_slot(key)
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError as e:
            raise MalformedPersistedStateError(key, str(e)) from e

    # ---------- Tasks ----------
    def load_tasks(self) -> List[Task]:
        data = self._load_json(TASKS_SLOT)
        if data is None:
            return []
        if not isinstance(data, list):
            raise MalformedPersistedStateError(TASKS_SLOT, f"expected a list, got {type(data).__name__}")
        out: List[Task] = []
        for i, rec in enumerate(data):
            if not isinstance(rec, dict):
                raise MalformedPersistedStateError(TASKS_SLOT, f"entry {i} is not an object")
            try:
                out.append(task_from_record(rec))
            except (KeyError, TypeError, ValueError) as e:
                raise MalformedPersistedStateError(TASKS_SLOT, f"entry {i}: {e!r}") from e
        return out

    def save_tasks(self, tasks: List[Task]) -> None:
        payload = [task_to_record(t) for t in tasks]
        self.set_slot(TASKS_SLOT, json.dumps(payload, sort_keys=True))

    # ---------- Option sets ----------
    def load_options(self) -> Options:
        """Missing slots take the built-in defaults."""
        found = {}
        for key in OPTION_SLOTS:
            data = self._load_json(key)
            if data is not None and not isinstance(data, dict):
                raise MalformedPersistedStateError(key, f"expected an object, got {type(data).__name__}")
            found[key] = data
        return Options(
            categories=found["categories"],
            systems=found["systems"],
            task_types=found["taskTypes"],
        )

    def save_options(self, options: Options) -> None:
        for option_set in options.all():
            self.set_slot(option_set.name, json.dumps(option_set.to_dict()))
