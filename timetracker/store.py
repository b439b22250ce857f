from __future__ import annotations
import logging
import time
from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, List

from .errors import MalformedPersistedStateError, NotFoundError, ValidationError
from .models import TASK_FIELDS, Task
from .periods import coerce_date, parse_hhmm, today_local
from .repository import Repository

LOGGER = logging.getLogger(__name__)

# time_spent starts at 0 and only changes through the stopwatch or an edit
CREATE_FIELDS = tuple(f for f in TASK_FIELDS if f not in ("title", "time_spent"))


class TaskStore:
    """
    In-memory task ledger. Each accepted mutation is written through to the
    repository before the call returns, so persisted snapshots stay in
    mutation order.
    """

    def __init__(self, repo: Repository):
        self.repo = repo
        self._tasks: Dict[int, Task] = {}
        self._last_id = 0
        self._delete_listeners: List[Callable[[int], None]] = []
        self._update_listeners: List[Callable[[Task], None]] = []
        self._load()

    def _load(self) -> None:
        try:
            tasks = self.repo.load_tasks()
        except MalformedPersistedStateError as e:
            LOGGER.warning("starting with an empty task list: %s", e)
            tasks = []
        self._last_id = max((t.id for t in tasks), default=0)
        for t in tasks:
            if t.id in self._tasks:
                # keep both records; the copy is saved under its new id on the next write
                new_id = self._new_id()
                LOGGER.warning("duplicate task id %s (%r), reassigned to %s", t.id, t.title, new_id)
                t = replace(t, id=new_id)
            self._tasks[t.id] = t
        LOGGER.debug("loaded %d tasks", len(self._tasks))

    def _persist(self) -> None:
        self.repo.save_tasks(self.list())

    def _new_id(self) -> int:
        candidate = int(time.time() * 1000)
        if candidate <= self._last_id:
            candidate = self._last_id + 1
        self._last_id = candidate
        return candidate

    # ---------- Queries ----------
    def list(self) -> List[Task]:
        return list(self._tasks.values())

    def get(self, task_id: int) -> Task:
        try:
            return self._tasks[task_id]
        except KeyError:
            raise NotFoundError(task_id) from None

    def __contains__(self, task_id) -> bool:
        return task_id in self._tasks

    def __len__(self) -> int:
        return len(self._tasks)

    # ---------- Mutations ----------
    def create(self, title: str, **fields) -> Task:
        unknown = set(fields) - set(CREATE_FIELDS)
        if unknown:
            raise ValidationError(f"unknown task fields: {', '.join(sorted(unknown))}")

        values = _clean(dict(fields, title=title))
        values.setdefault("date", today_local())
        task = Task(
            id=self._new_id(),
            created=datetime.now().isoformat(timespec="milliseconds"),
            category=values.pop("category", ""),
            system=values.pop("system", ""),
            task_type=values.pop("task_type", ""),
            time_spent=0,
            **values,
        )
        self._tasks[task.id] = task
        self._persist()
        LOGGER.debug("created task %s %r", task.id, task.title)
        return task

    def update(self, task_id: int, **fields) -> Task:
        current = self.get(task_id)
        unknown = set(fields) - set(TASK_FIELDS)
        if unknown:
            raise ValidationError(f"cannot update fields: {', '.join(sorted(unknown))}")
        if not fields:
            return current

        task = replace(current, **_clean(fields))
        self._tasks[task_id] = task
        self._persist()
        LOGGER.debug("updated task %s: %s", task_id, ", ".join(sorted(fields)))
        for listener in list(self._update_listeners):
            listener(task)
        return task

    def delete(self, task_id: int) -> None:
        self.get(task_id)
        for listener in list(self._delete_listeners):
            listener(task_id)
        del self._tasks[task_id]
        self._persist()
        LOGGER.debug("deleted task %s", task_id)

    def add_delete_listener(self, callback: Callable[[int], None]) -> None:
        """callback(task_id) runs before the task leaves the store."""
        self._delete_listeners.append(callback)

    def add_update_listener(self, callback: Callable[[Task], None]) -> None:
        """callback(task) runs with the new task after each persisted update."""
        self._update_listeners.append(callback)


def _clean(fields: dict) -> dict:
    out = dict(fields)

    if "title" in out:
        if out["title"] is not None and not isinstance(out["title"], str):
            raise ValidationError(f"title must be text, got {type(out['title']).__name__}")
        title = (out["title"] or "").strip()
        if not title:
            raise ValidationError("title must not be empty")
        out["title"] = title

    if "date" in out and out["date"] is not None:
        try:
            out["date"] = coerce_date(out["date"])
        except ValueError as e:
            raise ValidationError(str(e)) from e

    for key in ("start_time", "end_time"):
        if out.get(key):
            try:
                parse_hhmm(out[key])
            except ValueError as e:
                raise ValidationError(f"{key}: expected HH:MM, got {out[key]!r}") from e
        elif key in out:
            out[key] = ""

    if "time_spent" in out:
        try:
            spent = int(out["time_spent"])
        except (TypeError, ValueError) as e:
            raise ValidationError(f"time_spent must be whole seconds, got {out['time_spent']!r}") from e
        if spent < 0:
            raise ValidationError("time_spent must not be negative")
        out["time_spent"] = spent

    for key in ("category", "system", "task_type", "description", "ticket_number", "project"):
        if key in out and out[key] is None:
            out[key] = ""

    return out
