from __future__ import annotations
import logging
from typing import Optional
from PySide6.QtCore import QObject, QTimer, Signal

from .models import StopwatchState, Task
from .store import TaskStore

LOGGER = logging.getLogger(__name__)

TICK_INTERVAL_MS = 1_000


class Stopwatch(QObject):
    """
    Per-task elapsed time. Ticks go into a transient counter which is only
    written to the task's time_spent on commit(); pausing, switching to
    another task or stopping without a commit drops the unsaved ticks.
    Editing the active task's time_spent reseeds the counter from the edit.
    """

    ticked = Signal(int)            # elapsed seconds of the active task
    state_changed = Signal(object)  # StopwatchState

    def __init__(self, store: TaskStore, parent: Optional[QObject] = None):
        super().__init__(parent)
        self.store = store
        self.timer = QTimer(self)
        self.timer.setInterval(TICK_INTERVAL_MS)
        self.timer.timeout.connect(self.tick)

        self._active_task_id: Optional[int] = None
        self._elapsed = 0
        self._state = StopwatchState.IDLE

        store.add_delete_listener(self._on_task_deleted)
        store.add_update_listener(self._on_task_updated)

    # ---------- State ----------
    @property
    def state(self) -> StopwatchState:
        return self._state

    @property
    def active_task_id(self) -> Optional[int]:
        return self._active_task_id

    @property
    def elapsed(self) -> int:
        return self._elapsed

    @property
    def is_running(self) -> bool:
        return self._state == StopwatchState.RUNNING

    def display_seconds(self, task_id: int) -> int:
        if task_id == self._active_task_id:
            return self._elapsed
        return self.store.get(task_id).time_spent

    # ---------- Controls ----------
    def start(self, task_id: int) -> StopwatchState:
        if task_id == self._active_task_id:
            if self._state == StopwatchState.RUNNING:
                self._set_state(StopwatchState.PAUSED)
            else:
                self._set_state(StopwatchState.RUNNING)
            return self._state

        task = self.store.get(task_id)
        if self._active_task_id is not None:
            self._drop_active("switched to task %s" % task_id)

        self._active_task_id = task_id
        self._elapsed = task.time_spent
        LOGGER.debug("stopwatch on task %s, resuming from %ss", task_id, self._elapsed)
        self._set_state(StopwatchState.RUNNING)
        return self._state

    def tick(self) -> None:
        if self._state != StopwatchState.RUNNING:
            return
        self._elapsed += 1
        self.ticked.emit(self._elapsed)

    def commit(self) -> bool:
        if self._active_task_id is None:
            LOGGER.info("nothing to commit: no active task")
            return False
        self.store.update(self._active_task_id, time_spent=self._elapsed)
        LOGGER.debug("committed %ss to task %s", self._elapsed, self._active_task_id)
        return True

    def stop(self) -> None:
        if self._active_task_id is None:
            return
        self._drop_active("stopped")

    def close(self) -> None:
        self.timer.stop()

    # ---------- Internals ----------
    def _set_state(self, state: StopwatchState) -> None:
        if state == StopwatchState.RUNNING:
            if not self.timer.isActive():
                self.timer.start()
        else:
            self.timer.stop()
        if state != self._state:
            self._state = state
            self.state_changed.emit(state)

    def _drop_active(self, reason: str) -> None:
        task_id = self._active_task_id
        if task_id in self.store:
            unsaved = self._elapsed - self.store.get(task_id).time_spent
            if unsaved > 0:
                LOGGER.warning("task %s: %ss not committed, discarded (%s)", task_id, unsaved, reason)
        self._active_task_id = None
        self._elapsed = 0
        self._set_state(StopwatchState.IDLE)

    def _on_task_deleted(self, task_id: int) -> None:
        if task_id == self._active_task_id:
            self._drop_active("task deleted")

    def _on_task_updated(self, task: Task) -> None:
        # an edited time_spent replaces the counter, uncommitted ticks included
        if task.id != self._active_task_id or task.time_spent == self._elapsed:
            return
        LOGGER.info("task %s: time edited while active, counter %ss -> %ss",
                    task.id, self._elapsed, task.time_spent)
        self._elapsed = task.time_spent
        self.ticked.emit(self._elapsed)
