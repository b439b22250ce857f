from __future__ import annotations
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .errors import SkippedRecordWarning
from .heatmap import Heatmap, build_heatmap, skip_record
from .models import AggregateRecord, GroupBy, Summary, Task
from .options import Options
from .periods import coerce_date, date_in_range, day_key, iso_week_key, month_key, month_label

TIME_BUCKETS = (GroupBy.DAY, GroupBy.WEEK, GroupBy.MONTH)

_TWO_PLACES = Decimal("0.01")


def round_hours(seconds) -> float:
    """seconds -> hours, 2 decimals, halves rounded away from zero."""
    hours = Decimal(seconds) / Decimal(3600)
    return float(hours.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP))


def _date_of(task: Task) -> date:
    if task.date is None:
        raise ValueError("task has no date")
    return coerce_date(task.date)


def filter_by_range(
    tasks: Iterable[Task],
    date_from: Optional[date],
    date_to: Optional[date] = None,
) -> Tuple[List[Task], List[SkippedRecordWarning]]:
    """Tasks whose date lies in [date_from, date_to]; no date_from keeps everything."""
    tasks = list(tasks)
    if date_from is None:
        return tasks, []

    kept: List[Task] = []
    skipped: List[SkippedRecordWarning] = []
    for t in tasks:
        try:
            d = _date_of(t)
        except ValueError as e:
            skipped.append(skip_record(t, f"unreadable date: {e}"))
            continue
        if date_in_range(d, date_from, date_to):
            kept.append(t)
    return kept, skipped


def summarize(tasks: Iterable[Task]) -> Summary:
    tasks = list(tasks)
    total_seconds = sum(t.time_spent for t in tasks)
    count = len(tasks)
    avg = round_hours(Decimal(total_seconds) / count) if count else 0.0
    return Summary(
        total_tasks=count,
        total_hours=round_hours(total_seconds),
        avg_hours_per_task=avg,
    )


_KEY_FUNCS: Dict[GroupBy, Callable[[Task], str]] = {
    GroupBy.CATEGORY: lambda t: t.category,
    GroupBy.TASK_TYPE: lambda t: t.task_type,
    GroupBy.SYSTEM: lambda t: t.system,
    GroupBy.PROJECT: lambda t: t.project,
    GroupBy.DAY: lambda t: day_key(_date_of(t)),
    GroupBy.WEEK: lambda t: iso_week_key(_date_of(t)),
    GroupBy.MONTH: lambda t: month_key(_date_of(t)),
}


def _bucket_label(group_by: GroupBy, key: str, labels: Optional[Mapping[str, str]]) -> str:
    if group_by == GroupBy.WEEK:
        return f"Week {int(key.split('-W')[1])}"
    if group_by == GroupBy.MONTH:
        return month_label(key)
    if group_by == GroupBy.DAY or labels is None:
        return key
    return labels.get(key, key)


def aggregate(
    tasks: Iterable[Task],
    group_by: GroupBy,
    labels: Optional[Mapping[str, str]] = None,
) -> Tuple[List[AggregateRecord], List[SkippedRecordWarning]]:
    """
    One AggregateRecord per distinct key. Category-like groupings keep the
    order in which keys first appear; day/week/month buckets are sorted
    ascending by key, which is chronological since the keys are zero padded.
    """
    key_of = _KEY_FUNCS[group_by]
    seconds: Dict[str, int] = {}
    counts: Dict[str, int] = {}
    skipped: List[SkippedRecordWarning] = []

    for t in tasks:
        try:
            key = key_of(t)
        except ValueError as e:
            skipped.append(skip_record(t, f"unreadable date: {e}"))
            continue
        seconds[key] = seconds.get(key, 0) + t.time_spent
        counts[key] = counts.get(key, 0) + 1

    keys = list(seconds)
    if group_by in TIME_BUCKETS:
        keys.sort()

    records = [
        AggregateRecord(
            group_key=k,
            label=_bucket_label(group_by, k, labels),
            total_hours=round_hours(seconds[k]),
            task_count=counts[k],
        )
        for k in keys
    ]
    return records, skipped


@dataclass
class Report:
    summary: Summary
    by_category: List[AggregateRecord]
    by_task_type: List[AggregateRecord]
    daily: List[AggregateRecord]
    weekly: List[AggregateRecord]
    monthly: List[AggregateRecord]
    heatmap: Heatmap
    skipped: List[SkippedRecordWarning] = field(default_factory=list)


def build_report(
    tasks: Iterable[Task],
    options: Optional[Options] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    workday_start: int = 9,
    workday_hours: int = 8,
) -> Report:
    """Everything the analytics view shows, computed from one filtered snapshot."""
    selected, skipped = filter_by_range(tasks, date_from, date_to)

    category_labels = options.categories.to_dict() if options else None
    type_labels = options.task_types.to_dict() if options else None

    by_category, s1 = aggregate(selected, GroupBy.CATEGORY, category_labels)
    by_task_type, s2 = aggregate(selected, GroupBy.TASK_TYPE, type_labels)
    daily, s3 = aggregate(selected, GroupBy.DAY)
    weekly, s4 = aggregate(selected, GroupBy.WEEK)
    monthly, s5 = aggregate(selected, GroupBy.MONTH)
    heatmap = build_heatmap(selected, workday_start=workday_start, workday_hours=workday_hours)

    # one warning per task and reason, first occurrence wins
    all_skipped = list(dict.fromkeys(skipped + s1 + s2 + s3 + s4 + s5 + heatmap.skipped))

    return Report(
        summary=summarize(selected),
        by_category=by_category,
        by_task_type=by_task_type,
        daily=daily,
        weekly=weekly,
        monthly=monthly,
        heatmap=heatmap,
        skipped=all_skipped,
    )
