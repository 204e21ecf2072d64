import datetime as dt

from journal.charts import photos_per_day_png, weekly_progress_png
from journal.models import Photo, WeeklyProgress

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


def test_weekly_progress_png():
    progresses = [
        WeeklyProgress("a", dt.date(2024, 6, 3), 3, 2, 200 / 3),
        WeeklyProgress("b", dt.date(2024, 6, 3), 1, 4, 400.0),
        WeeklyProgress("c", dt.date(2024, 6, 3), 0, 2, 0.0),
    ]
    png = weekly_progress_png(progresses, names={"a": "Louvre", "b": "Orsay"})
    assert png.startswith(PNG_MAGIC)


def test_empty_charts_render_placeholder():
    assert weekly_progress_png([]).startswith(PNG_MAGIC)
    assert photos_per_day_png([]).startswith(PNG_MAGIC)


def test_photos_per_day_png():
    photos = [
        Photo(id=str(i), uri="u", latitude=1, longitude=2, timestamp=dt.datetime(2024, 6, 1 + i % 3, 9, 0))
        for i in range(7)
    ]
    assert photos_per_day_png(photos).startswith(PNG_MAGIC)
