from __future__ import annotations
from typing import Optional


class ValidationError(ValueError):
    """Task or option input rejected before it reaches the store."""


class NotFoundError(KeyError):
    def __init__(self, key):
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"not found: {self.key!r}"


class MalformedPersistedStateError(ValueError):
    def __init__(self, slot: str, detail: str):
        super().__init__(f"slot {slot!r} holds unreadable data: {detail}")
        self.slot = slot
        self.detail = detail


class SkippedRecordWarning(UserWarning):
    """
    A task left out of an analytics result. Collected and returned next to
    the result, never raised.
    """

    def __init__(self, task_id: Optional[int], reason: str):
        super().__init__(f"task {task_id} skipped: {reason}")
        self.task_id = task_id
        self.reason = reason

    def __eq__(self, other) -> bool:
        if not isinstance(other, SkippedRecordWarning):
            return NotImplemented
        return (self.task_id, self.reason) == (other.task_id, other.reason)

    def __hash__(self) -> int:
        return hash((self.task_id, self.reason))
