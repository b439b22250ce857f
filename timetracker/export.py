from __future__ import annotations
import json
import logging
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Union

from .models import Task
from .options import Options
from .periods import duration_between, format_elapsed

LOGGER = logging.getLogger(__name__)

CSV_HEADER = "Title,Date,Start Time,End Time,Duration,Category,System,Task Type,Project,Ticket Number,Description"

# export key -> CSV column, in column order
_CSV_COLUMNS = (
    "title",
    "date",
    "startTime",
    "endTime",
    "duration",
    "category",
    "system",
    "taskType",
    "project",
    "ticketNumber",
    "description",
)


def task_duration(task: Task) -> str:
    if task.start_time and task.end_time:
        try:
            return duration_between(task.start_time, task.end_time)
        except ValueError:
            LOGGER.warning("task %s: bad start/end time, exporting tracked time instead", task.id)
    return format_elapsed(task.time_spent)


def _format_date(value, date_format: str) -> str:
    if isinstance(value, date):
        return value.strftime(date_format)
    return "" if value is None else str(value)


def export_rows(
    tasks: Iterable[Task],
    options: Optional[Options] = None,
    date_format: str = "%m/%d/%Y",
) -> List[Dict[str, Union[str, int]]]:
    options = options or Options()
    rows = []
    for t in tasks:
        rows.append({
            "id": t.id,
            "title": t.title,
            "date": _format_date(t.date, date_format),
            "startTime": t.start_time,
            "endTime": t.end_time,
            "duration": task_duration(t),
            "category": options.categories.label_for(t.category),
            "system": options.systems.label_for(t.system),
            "taskType": options.task_types.label_for(t.task_type),
            "project": t.project,
            "ticketNumber": t.ticket_number,
            "description": t.description,
            "timeSpent": t.time_spent,
        })
    return rows


def to_json(tasks: Iterable[Task], options: Optional[Options] = None, date_format: str = "%m/%d/%Y") -> str:
    return json.dumps(export_rows(tasks, options, date_format), indent=2)


def to_csv(tasks: Iterable[Task], options: Optional[Options] = None, date_format: str = "%m/%d/%Y") -> str:
    """
    Plain comma-joined rows. Commas in the description become semicolons;
    no other field is quoted or escaped.
    """
    lines = [CSV_HEADER]
    for row in export_rows(tasks, options, date_format):
        row["description"] = str(row["description"]).replace(",", ";")
        lines.append(",".join(str(row[col]) for col in _CSV_COLUMNS))
    return "\n".join(lines) + "\n"


def write_export(path: Union[str, Path], text: str) -> Path:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(text, encoding="utf-8")
    LOGGER.info("wrote export %s", p)
    return p
