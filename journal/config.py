import datetime as dt
import os
from typing import Optional
from zoneinfo import ZoneInfo


APP_DIR_NAME = "Travel Journal"
ENV_DATA_DIR = "TJ_DATA_DIR"
ENV_DB_PATH = "TJ_DB_PATH"
ENV_LOG_DIR = "TJ_LOG_DIR"
ENV_LOG_LEVEL = "TJ_LOG_LEVEL"
ENV_JSON_PATH = "TJ_JSON_PATH"
ENV_CSV_PATH = "TJ_CSV_PATH"
ENV_TIMEZONE = "TJ_TIMEZONE"


def get_data_dir() -> str:
    return os.path.abspath(os.getenv(ENV_DATA_DIR) or "data")


def get_db_path() -> str:
    override = os.getenv(ENV_DB_PATH)
    if override:
        return os.path.abspath(override)
    return os.path.join(get_data_dir(), "journal.db")


def get_log_dir() -> str:
    override = os.getenv(ENV_LOG_DIR)
    if override:
        return os.path.abspath(override)
    return os.path.join(get_data_dir(), "logs")


def get_log_level() -> str:
    return (os.getenv(ENV_LOG_LEVEL) or "INFO").upper()


def _documents_dir() -> str:
    home = os.path.expanduser("~")
    # Prefer Documents if it exists
    docs = os.path.join(home, "Documents")
    if os.path.isdir(docs):
        return docs
    return home


def _export_path(env_name: str, filename: str) -> str:
    override = os.getenv(env_name)
    if override:
        return os.path.abspath(override)
    folder = os.path.join(_documents_dir(), APP_DIR_NAME)
    os.makedirs(folder, exist_ok=True)
    return os.path.join(folder, filename)


def get_json_path() -> str:
    return _export_path(ENV_JSON_PATH, "journal.json")


def get_csv_path() -> str:
    return _export_path(ENV_CSV_PATH, "photos.csv")


def get_zone() -> Optional[dt.tzinfo]:
    """Zone used for calendar-day bucketing; None means the system zone."""
    name = os.getenv(ENV_TIMEZONE)
    if not name:
        return None
    return ZoneInfo(name)
