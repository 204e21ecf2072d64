import atexit
import dataclasses
import json
import os
from typing import Optional

from loguru import logger

from journal.config import get_csv_path, get_json_path
from journal.models import Location, Photo
from journal.storage import export_csv_bytes, export_excel_bytes
from journal.photo_index import photos_frame
from journal.weeks import week_start


def _normalize_location(location: Location) -> tuple[Location, list[str]]:
    """Snap the week to its Monday and clamp negative counts, noting each fix."""
    msgs: list[str] = []
    monday = week_start(location.week_start_date)
    if monday != location.week_start_date:
        msgs.append(f"week_start_date {location.week_start_date} moved to Monday {monday}")
    goal = location.visit_goal
    if goal < 0:
        msgs.append(f"visit_goal {goal} reset to 0")
        goal = 0
    visits = location.current_visits
    if visits < 0:
        msgs.append(f"current_visits {visits} reset to 0")
        visits = 0
    if not msgs:
        return location, msgs
    return dataclasses.replace(location, week_start_date=monday, visit_goal=goal, current_visits=visits), msgs


def export_to_json(service, path: Optional[str] = None) -> str:
    path = path or get_json_path()
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    data = service.export_data()
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
    return path


def import_json(store, path: Optional[str] = None) -> tuple[int, int, list[str]]:
    """Merge photos and locations from an export file into `store`.
    Returns (inserted_count, updated_count, errors); bad records are skipped.
    """
    path = path or get_json_path()
    if not os.path.exists(path):
        return 0, 0, []
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as ex:
        return 0, 0, [f"Failed to read JSON at {path}: {ex}"]
    if not isinstance(data, dict):
        return 0, 0, ["Invalid JSON format: expected an object with photos and locations"]

    errors: list[str] = []
    inserted = 0
    updated = 0
    known_photos = {p.id for p in store.get_photos()}

    for idx, raw in enumerate(data.get("photos") or []):
        try:
            photo = Photo.from_dict(raw)
        except (KeyError, TypeError, ValueError) as ex:
            errors.append(f"Photo {idx}: {ex}")
            continue
        store.save_photo(photo)
        if photo.id in known_photos:
            updated += 1
        else:
            known_photos.add(photo.id)
            inserted += 1

    for idx, raw in enumerate(data.get("locations") or []):
        try:
            location = Location.from_dict(raw)
        except (KeyError, TypeError, ValueError) as ex:
            errors.append(f"Location {idx}: {ex}")
            continue
        location, msgs = _normalize_location(location)
        errors.extend(f"Location {idx}: {m}" for m in msgs)
        existed = store.get_location(location.id) is not None
        store.save_location(location)
        if existed:
            updated += 1
        else:
            inserted += 1

    logger.info("Imported {}: {} inserted, {} updated, {} errors", path, inserted, updated, len(errors))
    return inserted, updated, errors


def export_photos_csv(store, path: Optional[str] = None) -> str:
    path = path or get_csv_path()
    folder = os.path.dirname(path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    df = photos_frame(store.get_photos(), store.zone)
    with open(path, "wb") as f:
        f.write(export_csv_bytes(df))
    return path


def export_photos_excel_bytes(store) -> bytes:
    return export_excel_bytes(photos_frame(store.get_photos(), store.zone))


def sync_on_launch(service, path: Optional[str] = None) -> tuple[str, list[str]]:
    """Merge the JSON export into the store if present, then rewrite it.
    Returns (path_used, messages) where messages are any non-fatal import notes.
    """
    path = path or get_json_path()
    msgs: list[str] = []
    if os.path.exists(path):
        _, _, m = import_json(service.store, path)
        msgs.extend(m)
    return export_to_json(service, path), msgs


_registered = False


def register_atexit_export(service, path: Optional[str] = None) -> bool:
    global _registered
    if _registered:
        return False

    def _export():
        try:
            export_to_json(service, path)
        except Exception as ex:
            # Best-effort on interpreter shutdown
            logger.warning("Export at exit failed: {}", ex)

    atexit.register(_export)
    _registered = True
    return True
