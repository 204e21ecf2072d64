"""Domain records for photos, locations and derived weekly progress."""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field


@dataclass(frozen=True)
class CaptureEvent:
    """What the camera or gallery hands over when a photo is taken."""

    uri: str
    latitude: float
    longitude: float
    timestamp: dt.datetime


@dataclass(frozen=True)
class Photo:
    id: str
    uri: str
    latitude: float
    longitude: float
    timestamp: dt.datetime
    location_name: str | None = None
    description: str | None = None

    @property
    def has_fix(self) -> bool:
        # (0, 0) means no geolocation fix was obtained
        return not (self.latitude == 0 and self.longitude == 0)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "uri": self.uri,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "timestamp": self.timestamp.isoformat(),
            "location_name": self.location_name,
            "description": self.description,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Photo":
        ts = data["timestamp"]
        if not isinstance(ts, dt.datetime):
            ts = dt.datetime.fromisoformat(str(ts))
        return cls(
            id=str(data["id"]),
            uri=str(data.get("uri") or ""),
            latitude=float(data.get("latitude") or 0),
            longitude=float(data.get("longitude") or 0),
            timestamp=ts,
            location_name=data.get("location_name"),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class Location:
    """A named place with a weekly visit goal.

    ``visit_goal == 0`` means the place has no goal. ``week_start_date`` is
    always the Monday of the week ``current_visits`` counts, and ``photos``
    keeps visit order.
    """

    id: str
    name: str
    latitude: float
    longitude: float
    week_start_date: dt.date
    visit_goal: int = 0
    current_visits: int = 0
    photos: tuple[Photo, ...] = field(default_factory=tuple)
    description: str | None = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "description": self.description,
            "visit_goal": self.visit_goal,
            "current_visits": self.current_visits,
            "week_start_date": self.week_start_date.isoformat(),
            "photos": [p.to_dict() for p in self.photos],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Location":
        week = data["week_start_date"]
        if isinstance(week, dt.datetime):
            week = week.date()
        elif not isinstance(week, dt.date):
            week = dt.date.fromisoformat(str(week)[:10])
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            latitude=float(data.get("latitude") or 0),
            longitude=float(data.get("longitude") or 0),
            week_start_date=week,
            visit_goal=int(data.get("visit_goal") or 0),
            current_visits=int(data.get("current_visits") or 0),
            photos=tuple(Photo.from_dict(p) for p in data.get("photos") or []),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class WeeklyProgress:
    location_id: str
    week_start_date: dt.date
    target_visits: int
    actual_visits: int
    completion_percentage: float
