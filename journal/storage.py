import datetime as dt
import io
import os
import sqlite3
from contextlib import contextmanager
from typing import Iterator, Optional

import pandas as pd
from loguru import logger

from journal.errors import LocationNotFound, StoreNotInitialized
from journal.models import Location, Photo
from journal.photo_index import photos_frame, photos_on_date
from journal.validation import normalize_name
from journal.weeks import record_visit, to_local


class SqliteStore:
    """SQLite-backed photo and location store.

    Nothing is created on construction; call `init_db()` once before use.
    """

    def __init__(self, db_path: str, zone: Optional[dt.tzinfo] = None, timeout: float = 5.0) -> None:
        self.db_path = db_path
        self.zone = zone
        self.timeout = timeout

    @contextmanager
    def conn_ctx(self, *, immediate: bool = False, create: bool = False) -> Iterator[sqlite3.Connection]:
        if not create and not os.path.exists(self.db_path):
            raise StoreNotInitialized(self.db_path)
        conn = sqlite3.connect(self.db_path, timeout=self.timeout)
        conn.row_factory = sqlite3.Row
        if immediate:
            # Take the write lock up front so concurrent visits serialize
            conn.isolation_level = None
            conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    def init_db(self) -> None:
        folder = os.path.dirname(self.db_path)
        if folder:
            os.makedirs(folder, exist_ok=True)
        with self.conn_ctx(create=True) as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS photos (
                    id TEXT PRIMARY KEY,
                    uri TEXT NOT NULL,
                    latitude REAL NOT NULL,
                    longitude REAL NOT NULL,
                    timestamp TEXT NOT NULL,
                    location_name TEXT,
                    description TEXT
                )
                """
            )
            conn.execute("CREATE INDEX IF NOT EXISTS idx_photos_timestamp ON photos(timestamp)")
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS locations (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    latitude REAL NOT NULL,
                    longitude REAL NOT NULL,
                    description TEXT,
                    visit_goal INTEGER DEFAULT 0,
                    current_visits INTEGER DEFAULT 0,
                    week_start_date TEXT NOT NULL
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS location_photos (
                    location_id TEXT NOT NULL,
                    photo_id TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0,
                    PRIMARY KEY (location_id, photo_id),
                    FOREIGN KEY (location_id) REFERENCES locations (id),
                    FOREIGN KEY (photo_id) REFERENCES photos (id)
                )
                """
            )
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS settings (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
                """
            )
            # Migration: older DBs lack the description columns
            for table in ("photos", "locations"):
                cols = [r[1] for r in conn.execute(f"PRAGMA table_info({table})").fetchall()]
                if "description" not in cols:
                    conn.execute(f"ALTER TABLE {table} ADD COLUMN description TEXT")
        logger.info("Database ready at {}", self.db_path)
        try:
            self.backup_db_daily()
        except OSError as ex:
            # Backups are best-effort; avoid blocking app
            logger.warning("Daily backup failed: {}", ex)

    def backup_db_daily(self) -> Optional[str]:
        """Create a once-per-day backup copy of the SQLite DB under
        <db dir>/backups/journal-YYYYMMDD.db. Returns the backup path.
        """
        if not os.path.exists(self.db_path):
            return None
        backups_dir = os.path.join(os.path.dirname(self.db_path), "backups")
        os.makedirs(backups_dir, exist_ok=True)
        today_tag = dt.date.today().strftime("%Y%m%d")
        backup_path = os.path.join(backups_dir, f"journal-{today_tag}.db")
        if not os.path.exists(backup_path):
            with open(self.db_path, "rb") as src, open(backup_path, "wb") as dst:
                dst.write(src.read())
            logger.info("Backup written to {}", backup_path)
        return backup_path

    # Photos
    def save_photo(self, photo: Photo) -> None:
        with self.conn_ctx() as conn:
            _write_photo(conn, photo)

    def get_photos(self) -> list[Photo]:
        """All photos, newest first."""
        with self.conn_ctx() as conn:
            rows = conn.execute("SELECT * FROM photos").fetchall()
        return sorted((_row_to_photo(r) for r in rows), key=lambda p: to_local(p.timestamp, self.zone), reverse=True)

    def get_photos_by_date(self, date: dt.date) -> list[Photo]:
        # Offsets span -12:00..+14:00, so a stored text date can be up to two
        # days off the local date; narrow by +-2 days then filter.
        lo = (date - dt.timedelta(days=2)).isoformat()
        hi = (date + dt.timedelta(days=2)).isoformat()
        with self.conn_ctx() as conn:
            rows = conn.execute(
                "SELECT * FROM photos WHERE substr(timestamp, 1, 10) BETWEEN ? AND ?",
                (lo, hi),
            ).fetchall()
        photos = sorted((_row_to_photo(r) for r in rows), key=lambda p: to_local(p.timestamp, self.zone), reverse=True)
        return photos_on_date(photos, date, self.zone)

    def delete_photo(self, photo_id: str) -> None:
        with self.conn_ctx() as conn:
            conn.execute("DELETE FROM location_photos WHERE photo_id=?", (photo_id,))
            conn.execute("DELETE FROM photos WHERE id=?", (photo_id,))

    def get_photos_df(self) -> pd.DataFrame:
        return photos_frame(self.get_photos(), self.zone)

    # Locations
    def save_location(self, location: Location) -> None:
        with self.conn_ctx() as conn:
            _write_location(conn, location)

    def get_locations(self) -> list[Location]:
        with self.conn_ctx() as conn:
            rows = conn.execute("SELECT * FROM locations ORDER BY name").fetchall()
            return [_row_to_location(conn, r) for r in rows]

    def get_location(self, location_id: str) -> Optional[Location]:
        with self.conn_ctx() as conn:
            return _read_location(conn, location_id)

    def find_location_by_name(self, name: str) -> Optional[Location]:
        key = normalize_name(name)
        if not key:
            return None
        with self.conn_ctx() as conn:
            rows = conn.execute("SELECT id, name FROM locations ORDER BY name").fetchall()
            for r in rows:
                if normalize_name(r["name"]) == key:
                    return _read_location(conn, r["id"])
        return None

    def update_location_visit(self, location_id: str, photo: Photo, when: dt.datetime) -> Location:
        with self.conn_ctx(immediate=True) as conn:
            location = _read_location(conn, location_id)
            if location is None:
                raise LocationNotFound(location_id)
            updated = record_visit(location, when, photo, self.zone)
            _write_location(conn, updated)
        logger.debug("Visit recorded for {} ({} this week)", updated.name, updated.current_visits)
        return updated

    def clear_all_data(self) -> None:
        with self.conn_ctx() as conn:
            conn.execute("DELETE FROM location_photos")
            conn.execute("DELETE FROM photos")
            conn.execute("DELETE FROM locations")

    # Simple settings helpers
    def set_setting(self, key: str, value: str) -> None:
        with self.conn_ctx() as conn:
            conn.execute(
                "INSERT INTO settings(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                (key, value),
            )

    def get_setting(self, key: str, default: Optional[str] = None) -> Optional[str]:
        with self.conn_ctx() as conn:
            row = conn.execute("SELECT value FROM settings WHERE key=?", (key,)).fetchone()
            if not row:
                return default
            return row[0]


def _write_photo(conn: sqlite3.Connection, photo: Photo) -> None:
    conn.execute(
        """
        INSERT INTO photos (id, uri, latitude, longitude, timestamp, location_name, description)
        VALUES (?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            uri=excluded.uri, latitude=excluded.latitude, longitude=excluded.longitude,
            timestamp=excluded.timestamp, location_name=excluded.location_name,
            description=excluded.description
        """,
        (
            photo.id,
            photo.uri,
            photo.latitude,
            photo.longitude,
            photo.timestamp.isoformat(),
            photo.location_name,
            photo.description,
        ),
    )


def _write_location(conn: sqlite3.Connection, location: Location) -> None:
    conn.execute(
        """
        INSERT INTO locations (id, name, latitude, longitude, description, visit_goal, current_visits, week_start_date)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            name=excluded.name, description=excluded.description,
            visit_goal=excluded.visit_goal, current_visits=excluded.current_visits,
            week_start_date=excluded.week_start_date
        """,
        (
            location.id,
            location.name,
            location.latitude,
            location.longitude,
            location.description,
            location.visit_goal,
            location.current_visits,
            location.week_start_date.isoformat(),
        ),
    )
    conn.execute("DELETE FROM location_photos WHERE location_id=?", (location.id,))
    for position, photo in enumerate(location.photos):
        _write_photo(conn, photo)
        conn.execute(
            "INSERT INTO location_photos (location_id, photo_id, position) VALUES (?, ?, ?)",
            (location.id, photo.id, position),
        )


def _read_location(conn: sqlite3.Connection, location_id: str) -> Optional[Location]:
    row = conn.execute("SELECT * FROM locations WHERE id=?", (location_id,)).fetchone()
    if row is None:
        return None
    return _row_to_location(conn, row)


def _row_to_location(conn: sqlite3.Connection, row: sqlite3.Row) -> Location:
    photo_rows = conn.execute(
        """
        SELECT p.* FROM photos p
        INNER JOIN location_photos lp ON p.id = lp.photo_id
        WHERE lp.location_id = ? ORDER BY lp.position ASC
        """,
        (row["id"],),
    ).fetchall()
    return Location(
        id=row["id"],
        name=row["name"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        description=row["description"],
        visit_goal=int(row["visit_goal"] or 0),
        current_visits=int(row["current_visits"] or 0),
        week_start_date=dt.date.fromisoformat(row["week_start_date"][:10]),
        photos=tuple(_row_to_photo(r) for r in photo_rows),
    )


def _row_to_photo(row: sqlite3.Row) -> Photo:
    return Photo(
        id=row["id"],
        uri=row["uri"],
        latitude=row["latitude"],
        longitude=row["longitude"],
        timestamp=dt.datetime.fromisoformat(row["timestamp"]),
        location_name=row["location_name"],
        description=row["description"],
    )


def export_csv_bytes(df: pd.DataFrame) -> bytes:
    return df.to_csv(index=False).encode("utf-8")


def export_excel_bytes(df: pd.DataFrame) -> bytes:
    bio = io.BytesIO()
    with pd.ExcelWriter(bio, engine="openpyxl") as writer:
        df.to_excel(writer, index=False, sheet_name="Photos")
    bio.seek(0)
    return bio.read()
