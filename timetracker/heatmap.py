from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Iterable, List

from .errors import SkippedRecordWarning
from .models import HeatmapCell, Task
from .periods import coerce_date, parse_hhmm

LOGGER = logging.getLogger(__name__)

DAYS_OF_WEEK = ("Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday")
DAY_ABBREVIATIONS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")

# upper bounds of value/max for display levels 1..4; anything above is level 5
INTENSITY_STEPS = (0.2, 0.4, 0.6, 0.8)


def day_of_week(task_date) -> int:
    """0=Sunday ... 6=Saturday."""
    return (coerce_date(task_date).weekday() + 1) % 7


def hour_span(start_hour: int, end_hour: int) -> int:
    span = end_hour - start_hour if end_hour >= start_hour else (24 - start_hour) + end_hour
    return max(span, 1)


@dataclass
class Heatmap:
    # cells[day_of_week][hour_of_day]
    cells: List[List[HeatmapCell]]
    max_value: float = 0.0
    skipped: List[SkippedRecordWarning] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "Heatmap":
        return cls(cells=[[HeatmapCell(day, hour) for hour in range(24)] for day in range(7)])

    def cell(self, day: int, hour: int) -> HeatmapCell:
        return self.cells[day][hour]

    def iter_cells(self):
        for row in self.cells:
            yield from row

    def total_seconds(self) -> float:
        return sum(c.accumulated_seconds for c in self.iter_cells())

    def intensity(self, value: float) -> int:
        """Display level 0 (nothing) .. 5 (at or near the busiest cell)."""
        if self.max_value <= 0 or value <= 0:
            return 0
        ratio = value / self.max_value
        for level, bound in enumerate(INTENSITY_STEPS, start=1):
            if ratio < bound:
                return level
        return len(INTENSITY_STEPS) + 1

    def _add(self, day: int, hour: int, seconds: float, task: Task) -> None:
        c = self.cells[day][hour]
        c.accumulated_seconds += seconds
        c.contributing_tasks.append(task)
        if c.accumulated_seconds > self.max_value:
            self.max_value = c.accumulated_seconds


def build_heatmap(tasks: Iterable[Task], workday_start: int = 9, workday_hours: int = 8) -> Heatmap:
    """
    Spread each task's tracked time over the 7x24 weekday/hour grid.

    With both start and end times the time is split evenly over the hour
    slots from the start hour up to (not including) the end hour, wrapping
    past midnight on the same weekday row; a span under one hour counts as
    one slot. Without them it is split evenly over the standard workday,
    09:00-17:00 by default. Tasks with unreadable dates or clock times are
    skipped and reported in Heatmap.skipped.
    """
    heatmap = Heatmap.empty()

    for task in tasks:
        if task.time_spent <= 0:
            continue
        try:
            if task.date is None:
                raise ValueError("task has no date")
            day = day_of_week(task.date)
        except ValueError as e:
            heatmap.skipped.append(skip_record(task, f"unreadable date: {e}"))
            continue

        if task.start_time and task.end_time:
            try:
                start_hour, _ = parse_hhmm(task.start_time)
                end_hour, _ = parse_hhmm(task.end_time)
            except ValueError as e:
                heatmap.skipped.append(skip_record(task, f"unreadable start/end time: {e}"))
                continue
            hours = [(start_hour + i) % 24 for i in range(hour_span(start_hour, end_hour))]
        else:
            hours = [(workday_start + i) % 24 for i in range(max(workday_hours, 1))]

        per_hour = task.time_spent / len(hours)
        for hour in hours:
            heatmap._add(day, hour, per_hour, task)

    return heatmap


def skip_record(task: Task, reason: str) -> SkippedRecordWarning:
    LOGGER.warning("skipping task %s: %s", task.id, reason)
    return SkippedRecordWarning(task.id, reason)
