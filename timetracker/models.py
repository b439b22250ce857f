from __future__ import annotations
import datetime as dt
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Union


# Editable task fields, as accepted by TaskStore.update.
TASK_FIELDS = (
    "title",
    "category",
    "system",
    "task_type",
    "description",
    "ticket_number",
    "project",
    "date",
    "start_time",
    "end_time",
    "time_spent",
)


class GroupBy(str, Enum):
    CATEGORY = "category"
    TASK_TYPE = "task_type"
    SYSTEM = "system"
    PROJECT = "project"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class StopwatchState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


@dataclass(frozen=True)
class Task:
    id: int
    title: str
    category: str
    system: str
    task_type: str
    created: str  # ISO timestamp

    # A loaded value that does not parse stays a str so it survives the next save.
    date: Union[dt.date, str, None] = None
    description: str = ""
    ticket_number: str = ""
    project: str = ""
    start_time: str = ""  # HH:MM
    end_time: str = ""    # HH:MM

    time_spent: int = 0  # seconds


@dataclass(frozen=True)
class AggregateRecord:
    group_key: str
    label: str
    total_hours: float
    task_count: int


@dataclass(frozen=True)
class Summary:
    total_tasks: int
    total_hours: float
    avg_hours_per_task: float


@dataclass
class HeatmapCell:
    day_of_week: int  # 0=Sun ... 6=Sat
    hour_of_day: int
    accumulated_seconds: float = 0.0
    contributing_tasks: List[Task] = field(default_factory=list)


@dataclass(frozen=True)
class AppSettings:
    default_range_preset: str
    workday_start_hour: int
    workday_hours: int
    export_date_format: str
