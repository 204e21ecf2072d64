"""Store interfaces the journal service depends on, plus an in-memory store.

Both stores own the read-modify-write of a visit so that two photo saves
against the same location can not lose an increment.
"""

from __future__ import annotations

import dataclasses
import datetime as dt
import threading
from typing import Optional, Protocol

from loguru import logger

from journal.errors import LocationNotFound
from journal.models import Location, Photo
from journal.photo_index import photos_on_date
from journal.validation import normalize_name
from journal.weeks import record_visit, to_local


class PhotoStore(Protocol):
    zone: Optional[dt.tzinfo]

    def save_photo(self, photo: Photo) -> None: ...

    def get_photos(self) -> list[Photo]: ...

    def get_photos_by_date(self, date: dt.date) -> list[Photo]: ...

    def delete_photo(self, photo_id: str) -> None: ...


class LocationStore(Protocol):
    zone: Optional[dt.tzinfo]

    def save_location(self, location: Location) -> None: ...

    def get_locations(self) -> list[Location]: ...

    def get_location(self, location_id: str) -> Optional[Location]: ...

    def find_location_by_name(self, name: str) -> Optional[Location]: ...

    def update_location_visit(self, location_id: str, photo: Photo, when: dt.datetime) -> Location: ...

    def clear_all_data(self) -> None: ...


class MemoryStore:
    """Dict-backed store implementing both PhotoStore and LocationStore."""

    def __init__(self, zone: Optional[dt.tzinfo] = None) -> None:
        self.zone = zone
        self._photos: dict[str, Photo] = {}
        self._locations: dict[str, Location] = {}
        self._settings: dict[str, str] = {}
        self._lock = threading.Lock()

    # Photos
    def save_photo(self, photo: Photo) -> None:
        with self._lock:
            self._photos[photo.id] = photo

    def get_photos(self) -> list[Photo]:
        with self._lock:
            photos = list(self._photos.values())
        return sorted(photos, key=lambda p: to_local(p.timestamp, self.zone), reverse=True)

    def get_photos_by_date(self, date: dt.date) -> list[Photo]:
        return photos_on_date(self.get_photos(), date, self.zone)

    def delete_photo(self, photo_id: str) -> None:
        with self._lock:
            self._photos.pop(photo_id, None)
            for loc_id, loc in list(self._locations.items()):
                kept = tuple(p for p in loc.photos if p.id != photo_id)
                if len(kept) != len(loc.photos):
                    self._locations[loc_id] = dataclasses.replace(loc, photos=kept)

    # Locations
    def save_location(self, location: Location) -> None:
        with self._lock:
            self._locations[location.id] = location
            for photo in location.photos:
                self._photos[photo.id] = photo

    def get_locations(self) -> list[Location]:
        with self._lock:
            locations = list(self._locations.values())
        return sorted(locations, key=lambda loc: loc.name)

    def get_location(self, location_id: str) -> Optional[Location]:
        with self._lock:
            return self._locations.get(location_id)

    def find_location_by_name(self, name: str) -> Optional[Location]:
        key = normalize_name(name)
        if not key:
            return None
        for loc in self.get_locations():
            if normalize_name(loc.name) == key:
                return loc
        return None

    def update_location_visit(self, location_id: str, photo: Photo, when: dt.datetime) -> Location:
        with self._lock:
            location = self._locations.get(location_id)
            if location is None:
                raise LocationNotFound(location_id)
            updated = record_visit(location, when, photo, self.zone)
            self._locations[location_id] = updated
        logger.debug("Visit recorded for {} ({} this week)", updated.name, updated.current_visits)
        return updated

    def clear_all_data(self) -> None:
        with self._lock:
            self._photos.clear()
            self._locations.clear()

    # Settings
    def set_setting(self, key: str, value: str) -> None:
        with self._lock:
            self._settings[key] = value

    def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self._lock:
            return self._settings.get(key, default)
