import datetime as dt
import os
import shutil
import sys
import tempfile

import pytest

# Ensure project root is importable
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from journal.repository import MemoryStore  # noqa: E402
from journal.storage import SqliteStore  # noqa: E402

# Fixed offsets keep tests independent of the host's zone database
PARIS_SUMMER = dt.timezone(dt.timedelta(hours=2))
NEW_YORK_SUMMER = dt.timezone(dt.timedelta(hours=-4))


@pytest.fixture
def tmp_data_dir(monkeypatch):
    tmpdir = tempfile.mkdtemp()
    data_dir = os.path.join(tmpdir, "data")
    os.makedirs(data_dir, exist_ok=True)
    monkeypatch.setenv("TJ_DATA_DIR", data_dir)
    monkeypatch.delenv("TJ_DB_PATH", raising=False)
    yield data_dir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def sqlite_store(tmp_data_dir):
    store = SqliteStore(os.path.join(tmp_data_dir, "journal.db"))
    store.init_db()
    return store


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture(params=["memory", "sqlite"])
def store(request, tmp_data_dir):
    if request.param == "memory":
        return MemoryStore()
    s = SqliteStore(os.path.join(tmp_data_dir, "journal.db"))
    s.init_db()
    return s
