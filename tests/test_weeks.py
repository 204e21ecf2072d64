import datetime as dt

from journal.models import Location, Photo
from journal.weeks import (
    first_of_month,
    goals_met,
    new_location,
    progress_frame,
    record_visit,
    week_bounds_for,
    week_start,
    weekly_progress,
)
from conftest import NEW_YORK_SUMMER, PARIS_SUMMER


def _location(**kw):
    base = dict(
        id="loc1",
        name="Café de Flore",
        latitude=48.854,
        longitude=2.333,
        visit_goal=3,
        current_visits=2,
        week_start_date=dt.date(2024, 6, 3),
    )
    base.update(kw)
    return Location(**base)


def _photo(pid, when):
    return Photo(id=pid, uri=f"file:///{pid}.jpg", latitude=48.854, longitude=2.333, timestamp=when)


def test_week_start_weekdays_map_to_monday():
    monday = dt.date(2024, 6, 3)
    for offset in range(7):
        d = monday + dt.timedelta(days=offset)
        assert week_start(d) == monday


def test_week_start_sunday_belongs_to_previous_monday():
    assert week_start(dt.datetime(2024, 6, 9, 23, 59)) == dt.date(2024, 6, 3)
    assert week_start(dt.datetime(2024, 6, 10, 0, 0)) == dt.date(2024, 6, 10)


def test_week_start_crosses_month_and_year():
    assert week_start(dt.date(2024, 3, 2)) == dt.date(2024, 2, 26)
    assert week_start(dt.date(2025, 1, 1)) == dt.date(2024, 12, 30)


def test_week_start_is_always_monday():
    d = dt.date(2023, 12, 20)
    for i in range(60):
        assert week_start(d + dt.timedelta(days=i)).weekday() == 0


def test_week_start_uses_zone_local_date():
    # 22:30 UTC on Sunday is 00:30 Monday in Paris, still Sunday in New York
    instant = dt.datetime(2024, 6, 9, 22, 30, tzinfo=dt.timezone.utc)
    assert week_start(instant, PARIS_SUMMER) == dt.date(2024, 6, 10)
    assert week_start(instant, NEW_YORK_SUMMER) == dt.date(2024, 6, 3)


def test_week_bounds_and_first_of_month():
    start, end = week_bounds_for(dt.date(2024, 6, 5))
    assert start == dt.date(2024, 6, 3)
    assert end == dt.date(2024, 6, 9)
    assert first_of_month(dt.datetime(2024, 6, 17, 8, 0)) == dt.date(2024, 6, 1)


def test_record_visit_same_week_increments():
    loc = _location()
    out = record_visit(loc, dt.datetime(2024, 6, 5, 12, 0))
    assert out.current_visits == 3
    assert out.week_start_date == dt.date(2024, 6, 3)
    assert weekly_progress(out).completion_percentage == 100


def test_record_visit_twice_same_week_adds_two():
    loc = _location(current_visits=0)
    out = record_visit(loc, dt.datetime(2024, 6, 4, 9, 0))
    out = record_visit(out, dt.datetime(2024, 6, 9, 22, 0))
    assert out.current_visits == 2
    assert out.week_start_date == loc.week_start_date


def test_record_visit_next_week_rolls_over():
    loc = _location()
    out = record_visit(loc, dt.datetime(2024, 6, 10, 8, 0))
    assert out.current_visits == 1
    assert out.week_start_date == dt.date(2024, 6, 10)


def test_record_visit_rollover_ignores_prior_count():
    loc = _location(current_visits=17)
    out = record_visit(loc, dt.datetime(2024, 5, 20, 8, 0))
    assert out.current_visits == 1
    assert out.week_start_date == dt.date(2024, 5, 20)


def test_record_visit_appends_photo_and_leaves_input_alone():
    first = _photo("p1", dt.datetime(2024, 6, 3, 10, 0))
    loc = _location(photos=(first,))
    second = _photo("p2", dt.datetime(2024, 6, 4, 10, 0))
    out = record_visit(loc, second.timestamp, second)
    assert [p.id for p in out.photos] == ["p1", "p2"]
    assert [p.id for p in loc.photos] == ["p1"]
    assert loc.current_visits == 2


def test_weekly_progress_without_goal_is_zero():
    for visits in (0, 1, 12):
        prog = weekly_progress(_location(visit_goal=0, current_visits=visits))
        assert prog.completion_percentage == 0
        assert prog.target_visits == 0
        assert prog.actual_visits == visits


def test_weekly_progress_is_not_clamped():
    prog = weekly_progress(_location(visit_goal=2, current_visits=5))
    assert prog.completion_percentage == 250
    assert prog.location_id == "loc1"
    assert prog.week_start_date == dt.date(2024, 6, 3)


def test_new_location_starts_with_one_visit():
    photo = _photo("p1", dt.datetime(2024, 6, 6, 18, 0))
    loc = new_location("Louvre", photo, visit_goal=2)
    assert loc.current_visits == 1
    assert loc.week_start_date == dt.date(2024, 6, 3)
    assert loc.photos == (photo,)
    assert (loc.latitude, loc.longitude) == (photo.latitude, photo.longitude)
    assert loc.id


def test_goals_met_counts_only_locations_with_goals():
    locs = [
        _location(id="a", visit_goal=3, current_visits=3),
        _location(id="b", visit_goal=3, current_visits=2),
        _location(id="c", visit_goal=0, current_visits=5),
        _location(id="d", visit_goal=1, current_visits=4),
    ]
    assert goals_met(locs) == 2


def test_progress_frame_columns():
    empty = progress_frame([])
    assert empty.empty
    assert "completion_percentage" in empty.columns
    df = progress_frame([weekly_progress(_location())])
    assert df.shape[0] == 1
    assert round(float(df.iloc[0]["completion_percentage"]), 2) == 66.67
