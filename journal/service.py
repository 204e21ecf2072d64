"""Orchestration of the capture-save flow and the presentation aggregates.

`JournalService` is handed its store explicitly; nothing here keeps a
module-level storage handle.
"""

from __future__ import annotations

import datetime as dt
import uuid
from dataclasses import dataclass, field
from typing import Callable, Optional

from loguru import logger

from journal.errors import JournalError, LocationNotFound
from journal.geo import calculate_distance
from journal.models import CaptureEvent, Location, Photo, WeeklyProgress
from journal.photo_index import index_by_date, photos_on_date, stats_for
from journal.validation import parse_visit_goal, validate_location_fields
from journal.weeks import goals_met, new_location, weekly_progress

UNNAMED_PHOTO = "Unnamed photo"
DEFAULT_GOAL_SETTING = "default_visit_goal"

DEFAULT_REGION = {
    "latitude": 48.8566,
    "longitude": 2.3522,
    "latitude_delta": 0.0922,
    "longitude_delta": 0.0421,
}
MIN_REGION_DELTA = 0.01
REGION_PADDING = 1.2


@dataclass
class SaveResult:
    photo: Photo
    location: Optional[Location] = None
    created: bool = False
    warnings: list[str] = field(default_factory=list)


class JournalService:
    def __init__(
        self,
        store,
        zone: Optional[dt.tzinfo] = None,
        clock: Optional[Callable[[], dt.datetime]] = None,
    ) -> None:
        self.store = store
        self.zone = zone if zone is not None else getattr(store, "zone", None)
        self._clock = clock or dt.datetime.now

    def now(self) -> dt.datetime:
        return self._clock()

    def _default_goal(self) -> int:
        getter = getattr(self.store, "get_setting", None)
        if getter is None:
            return 0
        return max(0, parse_visit_goal(getter(DEFAULT_GOAL_SETTING, "0")))

    def save_capture(
        self,
        capture: CaptureEvent,
        location_name: str = "",
        visit_goal=None,
        location_id: Optional[str] = None,
        description: Optional[str] = None,
    ) -> SaveResult:
        """Save a captured photo and attach it to a location when one applies.

        An explicit `location_id` wins; otherwise a name matching an existing
        location (case-insensitively) records a visit there, and a new name
        creates a location as long as the capture has a position fix.
        """
        name = (location_name or "").strip()
        warnings: list[str] = []
        existing: Optional[Location] = None
        if location_id:
            existing = self.store.get_location(location_id)
            if existing is None:
                # Nothing is stored when the target location is unknown
                logger.error("Saving photo failed: unknown location {}", location_id)
                raise LocationNotFound(location_id)
        elif name:
            existing = self.store.find_location_by_name(name)

        label = existing.name if existing else (name or UNNAMED_PHOTO)
        photo = Photo(
            id=uuid.uuid4().hex,
            uri=capture.uri,
            latitude=capture.latitude or 0,
            longitude=capture.longitude or 0,
            timestamp=capture.timestamp,
            location_name=label,
            description=description,
        )

        try:
            self.store.save_photo(photo)
            if existing is not None:
                location = self.store.update_location_visit(existing.id, photo, photo.timestamp)
                logger.info("Visit added to {} ({} this week)", location.name, location.current_visits)
                return SaveResult(photo=photo, location=location, warnings=warnings)

            if name and photo.has_fix:
                goal = visit_goal if visit_goal is not None else self._default_goal()
                sanitized, msgs = validate_location_fields(name=name, visit_goal=goal, description=description or "")
                warnings.extend(msgs)
                location = new_location(
                    sanitized["name"],
                    photo,
                    visit_goal=sanitized["visit_goal"],
                    description=sanitized["description"] or None,
                    zone=self.zone,
                )
                self.store.save_location(location)
                logger.info("New location created: {}", location.name)
                return SaveResult(photo=photo, location=location, created=True, warnings=warnings)
        except JournalError as ex:
            logger.error("Saving photo {} failed: {}", photo.id, ex)
            raise

        if name and not photo.has_fix:
            warnings.append("No position fix; photo saved without a location")
        logger.info("Photo saved: {}", photo.id)
        return SaveResult(photo=photo, warnings=warnings)

    def weekly_progress(self) -> list[WeeklyProgress]:
        progress = [weekly_progress(loc) for loc in self.store.get_locations()]
        logger.debug("Weekly progress computed for {} locations", len(progress))
        return progress

    def goals_met(self) -> int:
        return goals_met(self.store.get_locations())

    def marked_dates(self) -> set[dt.date]:
        return index_by_date(self.store.get_photos(), self.zone)

    def photos_on_date(self, date: dt.date) -> list[Photo]:
        return photos_on_date(self.store.get_photos(), date, self.zone)

    def stats(self, now: Optional[dt.datetime] = None) -> dict[str, int]:
        return stats_for(self.store.get_photos(), now or self.now(), self.zone)

    def nearby_locations(self, latitude: float, longitude: float, radius_m: float) -> list[tuple[Location, int]]:
        found = []
        for loc in self.store.get_locations():
            distance = calculate_distance(latitude, longitude, loc.latitude, loc.longitude)
            if distance <= radius_m:
                found.append((loc, distance))
        return sorted(found, key=lambda pair: pair[1])

    def map_region(self) -> dict[str, float]:
        """Center and span covering every photo and location with a fix,
        padded by 20%. Falls back to central Paris when there is nothing
        to show.
        """
        points = [(p.latitude, p.longitude) for p in self.store.get_photos() if p.has_fix]
        points += [
            (loc.latitude, loc.longitude)
            for loc in self.store.get_locations()
            if not (loc.latitude == 0 and loc.longitude == 0)
        ]
        if not points:
            return dict(DEFAULT_REGION)
        lats = [lat for lat, _ in points]
        lons = [lon for _, lon in points]
        return {
            "latitude": (min(lats) + max(lats)) / 2,
            "longitude": (min(lons) + max(lons)) / 2,
            "latitude_delta": max(max(lats) - min(lats), MIN_REGION_DELTA) * REGION_PADDING,
            "longitude_delta": max(max(lons) - min(lons), MIN_REGION_DELTA) * REGION_PADDING,
        }

    def export_data(self) -> dict:
        photos = self.store.get_photos()
        locations = self.store.get_locations()
        logger.info("Exported {} photos, {} locations", len(photos), len(locations))
        return {
            "photos": [p.to_dict() for p in photos],
            "locations": [loc.to_dict() for loc in locations],
        }
