from __future__ import annotations

import dataclasses
import datetime as dt
import uuid
from typing import Iterable, Optional

import pandas as pd

from journal.models import Location, Photo, WeeklyProgress


def to_local(when: dt.datetime, zone: Optional[dt.tzinfo] = None) -> dt.datetime:
    """Naive wall-clock time of `when` in `zone` (system zone when None).
    Naive datetimes are taken to be local wall time already.
    """
    if when.tzinfo is None:
        return when
    if zone is None:
        return when.astimezone().replace(tzinfo=None)
    return when.astimezone(zone).replace(tzinfo=None)


def local_date(when: dt.date, zone: Optional[dt.tzinfo] = None) -> dt.date:
    if isinstance(when, dt.datetime):
        return to_local(when, zone).date()
    return when


def week_start(when: dt.date, zone: Optional[dt.tzinfo] = None) -> dt.date:
    """Monday of the week containing `when`, as a local calendar date.
    Example: 2024-06-05 (Wed) -> 2024-06-03, 2024-06-09 (Sun) -> 2024-06-03.
    """
    local = local_date(when, zone)
    day = (local.weekday() + 1) % 7  # Sunday=0 .. Saturday=6
    offset = day - (-6 if day == 0 else 1)
    return local - dt.timedelta(days=offset)


def week_bounds_for(when: dt.date, zone: Optional[dt.tzinfo] = None) -> tuple[dt.date, dt.date]:
    start = week_start(when, zone)
    end = start + dt.timedelta(days=6)
    return start, end


def first_of_month(when: dt.date, zone: Optional[dt.tzinfo] = None) -> dt.date:
    return local_date(when, zone).replace(day=1)


def new_location(
    name: str,
    photo: Photo,
    *,
    visit_goal: int = 0,
    location_id: Optional[str] = None,
    description: Optional[str] = None,
    zone: Optional[dt.tzinfo] = None,
) -> Location:
    """First visit to a place: the location starts at one visit this week."""
    return Location(
        id=location_id or uuid.uuid4().hex,
        name=name,
        latitude=photo.latitude,
        longitude=photo.longitude,
        description=description,
        visit_goal=max(0, int(visit_goal)),
        current_visits=1,
        week_start_date=week_start(photo.timestamp, zone),
        photos=(photo,),
    )


def record_visit(
    location: Location,
    when: dt.datetime,
    photo: Optional[Photo] = None,
    zone: Optional[dt.tzinfo] = None,
) -> Location:
    """Return `location` with one more visit, rolling the week over first
    when `when` falls in a different week than the one being counted.
    """
    new_start = week_start(when, zone)
    visits = location.current_visits
    start = location.week_start_date
    if new_start != start:
        visits = 0
        start = new_start
    photos = location.photos + (photo,) if photo is not None else location.photos
    return dataclasses.replace(
        location,
        current_visits=visits + 1,
        week_start_date=start,
        photos=photos,
    )


def completion_percentage(current_visits: int, visit_goal: int) -> float:
    if visit_goal <= 0:
        return 0.0
    return current_visits / visit_goal * 100


def weekly_progress(location: Location) -> WeeklyProgress:
    return WeeklyProgress(
        location_id=location.id,
        week_start_date=location.week_start_date,
        target_visits=location.visit_goal,
        actual_visits=location.current_visits,
        completion_percentage=completion_percentage(location.current_visits, location.visit_goal),
    )


def goals_met(locations: Iterable[Location]) -> int:
    return sum(1 for loc in locations if loc.visit_goal > 0 and loc.current_visits >= loc.visit_goal)


def progress_frame(progresses: Iterable[WeeklyProgress]) -> pd.DataFrame:
    rows = [dataclasses.asdict(p) for p in progresses]
    if not rows:
        return pd.DataFrame(columns=[
            "location_id",
            "week_start_date",
            "target_visits",
            "actual_visits",
            "completion_percentage",
        ])
    return pd.DataFrame(rows)
