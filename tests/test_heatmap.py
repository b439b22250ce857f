from datetime import date

from timetracker.errors import SkippedRecordWarning
from timetracker.heatmap import Heatmap, build_heatmap, day_of_week, hour_span

from conftest import make_task

MONDAY = date(2024, 1, 1)
SUNDAY = date(2023, 12, 31)


def _filled(hm):
    return {(c.day_of_week, c.hour_of_day): c.accumulated_seconds
            for c in hm.iter_cells() if c.accumulated_seconds}


def test_day_of_week_starts_on_sunday():
    assert day_of_week(SUNDAY) == 0
    assert day_of_week(MONDAY) == 1
    assert day_of_week(date(2024, 1, 6)) == 6


def test_hour_span():
    assert hour_span(9, 11) == 2
    assert hour_span(22, 2) == 4
    assert hour_span(9, 9) == 1


def test_grid_shape_when_empty():
    hm = build_heatmap([])
    assert len(hm.cells) == 7
    assert all(len(row) == 24 for row in hm.cells)
    assert hm.max_value == 0
    assert hm.total_seconds() == 0
    assert hm.skipped == []


def test_start_end_split_evenly():
    t = make_task(1, date=MONDAY, start_time="09:00", end_time="11:00", time_spent=3600)
    hm = build_heatmap([t])
    assert _filled(hm) == {(1, 9): 1800, (1, 10): 1800}
    assert hm.cell(1, 9).contributing_tasks == [t]
    assert hm.max_value == 1800


def test_minutes_are_ignored_for_slot_count():
    t = make_task(1, date=MONDAY, start_time="09:30", end_time="11:45", time_spent=7200)
    assert _filled(build_heatmap([t])) == {(1, 9): 3600, (1, 10): 3600}


def test_sub_hour_interval_counts_as_one_slot():
    t = make_task(1, date=MONDAY, start_time="14:10", end_time="14:50", time_spent=1500)
    assert _filled(build_heatmap([t])) == {(1, 14): 1500}


def test_interval_past_midnight_stays_on_task_weekday():
    t = make_task(1, date=SUNDAY, start_time="22:00", end_time="02:00", time_spent=4000)
    assert _filled(build_heatmap([t])) == {(0, 22): 1000, (0, 23): 1000, (0, 0): 1000, (0, 1): 1000}


def test_no_clock_times_use_standard_workday():
    t = make_task(1, date=MONDAY, time_spent=8 * 900)
    filled = _filled(build_heatmap([t]))
    assert sorted(h for _, h in filled) == list(range(9, 17))
    assert set(filled.values()) == {900}


def test_only_start_time_counts_as_no_clock_times():
    t = make_task(1, date=MONDAY, start_time="07:00", time_spent=800)
    assert sorted(h for _, h in _filled(build_heatmap([t]))) == list(range(9, 17))


def test_workday_is_configurable():
    t = make_task(1, date=MONDAY, time_spent=600)
    filled = _filled(build_heatmap([t], workday_start=8, workday_hours=6))
    assert sorted(h for _, h in filled) == list(range(8, 14))


def test_tasks_without_time_are_ignored():
    t = make_task(1, date=MONDAY, start_time="09:00", end_time="10:00", time_spent=0)
    hm = build_heatmap([t])
    assert _filled(hm) == {}
    assert hm.cell(1, 9).contributing_tasks == []


def test_cells_accumulate_and_track_maximum():
    a = make_task(1, date=MONDAY, start_time="09:00", end_time="10:00", time_spent=1200)
    b = make_task(2, date=date(2024, 1, 8), start_time="09:00", end_time="11:00", time_spent=1200)
    hm = build_heatmap([a, b])
    assert hm.cell(1, 9).accumulated_seconds == 1800
    assert hm.cell(1, 10).accumulated_seconds == 600
    assert [t.id for t in hm.cell(1, 9).contributing_tasks] == [1, 2]
    assert hm.max_value == 1800


def test_unreadable_records_are_skipped_not_fatal():
    good = make_task(1, date=MONDAY, time_spent=800)
    bad_date = make_task(2, date="31/31/2024", time_spent=800)
    bad_clock = make_task(3, date=MONDAY, start_time="late", end_time="10:00", time_spent=800)
    no_date = make_task(4, date=None, time_spent=800)

    hm = build_heatmap([bad_date, good, bad_clock, no_date])

    assert hm.total_seconds() == 800
    assert [w.task_id for w in hm.skipped] == [2, 3, 4]
    assert all(isinstance(w, SkippedRecordWarning) for w in hm.skipped)


def test_intensity_levels():
    hm = Heatmap.empty()
    assert hm.intensity(100) == 0  # no data yet
    hm.max_value = 1000
    assert hm.intensity(0) == 0
    assert hm.intensity(100) == 1
    assert hm.intensity(300) == 2
    assert hm.intensity(500) == 3
    assert hm.intensity(700) == 4
    assert hm.intensity(800) == 5
    assert hm.intensity(1000) == 5
