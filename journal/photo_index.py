"""Day-granular queries over photo collections for the calendar view.

Photos are bucketed by the local calendar date of their capture instant,
never by the instant itself, so a photo taken at 23:00 and one taken at 00:01
the next morning land on different days.
"""

from __future__ import annotations

import datetime as dt
from typing import Iterable, Optional, Sequence

import pandas as pd

from journal.models import Photo
from journal.weeks import first_of_month, local_date, to_local, week_start


PHOTO_COLUMNS = [
    "id",
    "uri",
    "latitude",
    "longitude",
    "timestamp",
    "location_name",
    "description",
]


def date_key(photo: Photo, zone: Optional[dt.tzinfo] = None) -> dt.date:
    return local_date(photo.timestamp, zone)


def index_by_date(photos: Iterable[Photo], zone: Optional[dt.tzinfo] = None) -> set[dt.date]:
    """Dates that have at least one photo (calendar highlighting)."""
    return {date_key(p, zone) for p in photos}


def photos_on_date(
    photos: Iterable[Photo], date: dt.date, zone: Optional[dt.tzinfo] = None
) -> list[Photo]:
    # Keeps the caller's order; no re-sorting here.
    return [p for p in photos if date_key(p, zone) == date]


def stats_for(
    photos: Iterable[Photo], now: dt.datetime, zone: Optional[dt.tzinfo] = None
) -> dict[str, int]:
    """Counts for today, this week and this month. A photo is counted in
    every bucket it qualifies for.
    """
    today = local_date(now, zone)
    week_floor = dt.datetime.combine(week_start(now, zone), dt.time())
    month_floor = dt.datetime.combine(first_of_month(now, zone), dt.time())
    stats = {"today": 0, "this_week": 0, "this_month": 0}
    for p in photos:
        local = to_local(p.timestamp, zone)
        if local.date() == today:
            stats["today"] += 1
        if local >= week_floor:
            stats["this_week"] += 1
        if local >= month_floor:
            stats["this_month"] += 1
    return stats


def photos_frame(photos: Sequence[Photo], zone: Optional[dt.tzinfo] = None) -> pd.DataFrame:
    if not photos:
        return pd.DataFrame(columns=PHOTO_COLUMNS + ["date"])
    df = pd.DataFrame(
        [
            {
                "id": p.id,
                "uri": p.uri,
                "latitude": p.latitude,
                "longitude": p.longitude,
                "timestamp": p.timestamp.isoformat(),
                "location_name": p.location_name,
                "description": p.description,
                "date": date_key(p, zone),
            }
            for p in photos
        ]
    )
    return df


def photos_per_day(photos: Sequence[Photo], zone: Optional[dt.tzinfo] = None) -> pd.Series:
    """Number of photos per calendar day, oldest day first."""
    df = photos_frame(photos, zone)
    if df.empty:
        return pd.Series(dtype="int64")
    return df.groupby("date").size().sort_index()
