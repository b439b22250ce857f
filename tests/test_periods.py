from datetime import date, datetime, timezone

import pytest

import timetracker.periods as periods


def test_format_elapsed_pads_and_does_not_wrap_hours():
    assert periods.format_elapsed(0) == "00:00:00"
    assert periods.format_elapsed(3661) == "01:01:01"
    assert periods.format_elapsed(100 * 3600 + 5) == "100:00:05"


def test_format_elapsed_round_trips_through_parse():
    for seconds in (0, 59, 60, 3599, 3600, 86399, 86400, 360005):
        assert periods.parse_elapsed(periods.format_elapsed(seconds)) == seconds


def test_parse_elapsed_rejects_garbage():
    with pytest.raises(ValueError):
        periods.parse_elapsed("12:34")
    with pytest.raises(ValueError):
        periods.parse_elapsed("01:75:00")


def test_duration_between_same_day():
    assert periods.duration_between("09:00", "17:30") == "08:30"


def test_duration_between_wraps_past_midnight():
    assert periods.duration_between("23:00", "01:00") == "02:00"
    assert periods.duration_between("22:45", "00:15") == "01:30"


def test_duration_between_equal_times_is_zero():
    assert periods.duration_between("10:00", "10:00") == "00:00"


def test_parse_hhmm_rejects_out_of_range():
    assert periods.parse_hhmm("07:05") == (7, 5)
    with pytest.raises(ValueError):
        periods.parse_hhmm("24:00")
    with pytest.raises(ValueError):
        periods.parse_hhmm("noon")


def test_iso_week_number_around_new_year():
    assert periods.iso_week_number(date(2024, 1, 1)) == 1    # Monday
    assert periods.iso_week_number(date(2023, 12, 31)) == 52  # Sunday
    assert periods.iso_week_number(date(2021, 1, 1)) == 53   # Friday, still 2020's last week


def test_iso_week_key_uses_iso_year_and_pads_week():
    assert periods.iso_week_key(date(2024, 3, 4)) == "2024-W10"
    assert periods.iso_week_key(date(2024, 1, 3)) == "2024-W01"
    # Tue 31 Dec 2024 belongs to week 1 of 2025
    assert periods.iso_week_key(date(2024, 12, 31)) == "2025-W01"


def test_month_key_and_label():
    assert periods.month_key(date(2024, 2, 29)) == "2024-02"
    assert periods.month_label("2024-02") == "Feb 2024"


def test_coerce_date_accepts_iso_strings():
    assert periods.coerce_date("2024-05-06") == date(2024, 5, 6)
    assert periods.coerce_date(datetime(2024, 5, 6, 23, 59)) == date(2024, 5, 6)
    with pytest.raises(ValueError):
        periods.coerce_date("not a date")
    with pytest.raises(ValueError):
        periods.coerce_date(None)


def test_coerce_date_moves_utc_strings_to_local_clock(monkeypatch):
    aware = datetime(2024, 5, 6, 12, 0, tzinfo=timezone.utc)
    assert periods.coerce_date("2024-05-06T12:00:00.000Z") == aware.astimezone().date()


def test_date_in_range_is_inclusive_on_both_days():
    start, end = date(2024, 1, 10), date(2024, 1, 12)
    assert periods.date_in_range(date(2024, 1, 10), start, end) is True
    assert periods.date_in_range(date(2024, 1, 12), start, end) is True
    assert periods.date_in_range(datetime(2024, 1, 12, 23, 59, 59), start, end) is True
    assert periods.date_in_range(date(2024, 1, 13), start, end) is False
    assert periods.date_in_range(datetime(2024, 1, 9, 23, 59), start, end) is False


def test_date_in_range_open_ends():
    assert periods.date_in_range(date(1999, 1, 1), None, None) is True
    # only a start day: that single day
    assert periods.date_in_range(datetime(2024, 1, 10, 18, 0), date(2024, 1, 10), None) is True
    assert periods.date_in_range(date(2024, 1, 11), date(2024, 1, 10), None) is False


def test_preset_ranges_relative_to_a_wednesday():
    wed = date(2024, 5, 15)
    assert periods.preset_range("today", wed) == (wed, wed)
    assert periods.preset_range("yesterday", wed) == (date(2024, 5, 14), date(2024, 5, 14))
    assert periods.preset_range("last7days", wed) == (date(2024, 5, 9), wed)
    assert periods.preset_range("last30days", wed) == (date(2024, 4, 16), wed)
    assert periods.preset_range("thisWeek", wed) == (date(2024, 5, 12), wed)  # Sunday start
    assert periods.preset_range("lastWeek", wed) == (date(2024, 5, 5), date(2024, 5, 11))
    assert periods.preset_range("thisMonth", wed) == (date(2024, 5, 1), wed)
    assert periods.preset_range("lastMonth", wed) == (date(2024, 4, 1), date(2024, 4, 30))
    assert periods.preset_range("thisYear", wed) == (date(2024, 1, 1), wed)


def test_preset_this_week_on_a_sunday_starts_today():
    sun = date(2024, 5, 12)
    assert periods.preset_range("thisWeek", sun) == (sun, sun)
    assert periods.preset_range("lastWeek", sun) == (date(2024, 5, 5), date(2024, 5, 11))


def test_preset_uses_local_today(monkeypatch):
    monkeypatch.setattr(periods, "today_local", lambda: date(2024, 3, 1))
    assert periods.preset_range("lastMonth") == (date(2024, 2, 1), date(2024, 2, 29))


def test_preset_unknown_name():
    with pytest.raises(ValueError):
        periods.preset_range("fortnight", date(2024, 1, 1))


def test_display_helpers():
    assert periods.format_hours_minutes(45 * 60) == "45m"
    assert periods.format_hours_minutes(2 * 3600) == "2h"
    assert periods.format_hours_minutes(5400) == "1h 30m"
    assert periods.hour_label(0) == "12am"
    assert periods.hour_label(9) == "9am"
    assert periods.hour_label(12) == "12pm"
    assert periods.hour_label(23) == "11pm"
