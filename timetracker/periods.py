from __future__ import annotations
from datetime import date, datetime, time, timedelta
from typing import Optional, Tuple, Union

DateLike = Union[date, datetime]

MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun",
              "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

PRESET_RANGES = {
    "today": "Today",
    "yesterday": "Yesterday",
    "last7days": "Last 7 Days",
    "last14days": "Last 14 Days",
    "last30days": "Last 30 Days",
    "thisWeek": "This Week",
    "lastWeek": "Last Week",
    "thisMonth": "This Month",
    "lastMonth": "Last Month",
    "thisYear": "This Year",
}


def today_local() -> date:
    return date.today()


# ---------- Durations ----------

def format_elapsed(seconds: int) -> str:
    """HH:MM:SS; hours keep growing past 99 instead of wrapping."""
    seconds = max(0, int(seconds))
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def parse_elapsed(s: str) -> int:
    parts = s.strip().split(":")
    if len(parts) != 3:
        raise ValueError(f"expected HH:MM:SS, got {s!r}")
    hh, mm, ss = (int(p) for p in parts)
    if hh < 0 or not (0 <= mm < 60) or not (0 <= ss < 60):
        raise ValueError(f"expected HH:MM:SS, got {s!r}")
    return hh * 3600 + mm * 60 + ss


def parse_hhmm(s: str) -> Tuple[int, int]:
    hh, mm = s.strip().split(":")
    hour, minute = int(hh), int(mm)
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"time of day out of range: {s!r}")
    return hour, minute


def duration_between(start_hhmm: str, end_hhmm: str) -> str:
    """
    Length of the interval start -> end as HH:MM. An end earlier than the
    start means the interval runs past midnight into the next day.
    """
    sh, sm = parse_hhmm(start_hhmm)
    eh, em = parse_hhmm(end_hhmm)
    minutes = ((eh * 60 + em) - (sh * 60 + sm)) % 1440
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def format_hours_minutes(seconds: float) -> str:
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    if hours == 0:
        return f"{minutes}m"
    if minutes == 0:
        return f"{hours}h"
    return f"{hours}h {minutes}m"


def hour_label(hour: int) -> str:
    h12 = 12 if hour % 12 == 0 else hour % 12
    return f"{h12}{'am' if hour < 12 else 'pm'}"


# ---------- Calendar ----------

def coerce_date(value) -> date:
    """
    Calendar date of a stored task date. Accepts date, datetime or an ISO
    string (timezone-aware strings are moved to the local clock first).
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        s = value.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        if len(s) == 10:
            return date.fromisoformat(s)
        return coerce_date(datetime.fromisoformat(s))
    raise ValueError(f"not a date: {value!r}")


def day_key(d: DateLike) -> str:
    return coerce_date(d).isoformat()


def iso_week_number(d: DateLike) -> int:
    # ISO-8601: week 1 is the week holding the year's first Thursday
    return coerce_date(d).isocalendar()[1]


def iso_week_key(d: DateLike) -> str:
    iso_year, week, _ = coerce_date(d).isocalendar()
    return f"{iso_year}-W{week:02d}"


def month_key(d: DateLike) -> str:
    d = coerce_date(d)
    return f"{d.year}-{d.month:02d}"


def month_label(key: str) -> str:
    year, month = key.split("-")
    return f"{MONTH_ABBR[int(month) - 1]} {year}"


def _start_of_day(d: DateLike) -> datetime:
    return datetime.combine(coerce_date(d), time.min)


def _end_of_day(d: DateLike) -> datetime:
    return datetime.combine(coerce_date(d), time.max)


def date_in_range(d: DateLike, date_from: Optional[DateLike], date_to: Optional[DateLike]) -> bool:
    """
    Inclusive on both ends: date_from counts from 00:00:00, date_to up to
    23:59:59.999999. No date_from means no filter; no date_to means the
    single day date_from.
    """
    if date_from is None:
        return True
    if date_to is None:
        date_to = date_from
    if isinstance(d, datetime):
        when = d.astimezone().replace(tzinfo=None) if d.tzinfo else d
    else:
        when = _start_of_day(d)
    return _start_of_day(date_from) <= when <= _end_of_day(date_to)


def preset_range(name: str, today: Optional[date] = None) -> Tuple[date, date]:
    """(from, to) for one of PRESET_RANGES; weeks start on Sunday."""
    today = today or today_local()
    sunday_offset = (today.weekday() + 1) % 7  # days since Sunday

    if name == "today":
        return today, today
    if name == "yesterday":
        y = today - timedelta(days=1)
        return y, y
    if name == "last7days":
        return today - timedelta(days=6), today
    if name == "last14days":
        return today - timedelta(days=13), today
    if name == "last30days":
        return today - timedelta(days=29), today
    if name == "thisWeek":
        return today - timedelta(days=sunday_offset), today
    if name == "lastWeek":
        last_saturday = today - timedelta(days=sunday_offset + 1)
        return last_saturday - timedelta(days=6), last_saturday
    if name == "thisMonth":
        return today.replace(day=1), today
    if name == "lastMonth":
        last_day = today.replace(day=1) - timedelta(days=1)
        return last_day.replace(day=1), last_day
    if name == "thisYear":
        return date(today.year, 1, 1), today
    raise ValueError(f"unknown range preset: {name!r}")
