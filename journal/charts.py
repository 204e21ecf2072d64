"""PNG charts for the progress and calendar views."""

from __future__ import annotations

import datetime as dt
import io
from typing import Optional, Sequence

import matplotlib

matplotlib.use("Agg")
from matplotlib.figure import Figure

from journal.models import Photo, WeeklyProgress
from journal.photo_index import photos_per_day


def _png(fig: Figure) -> bytes:
    bio = io.BytesIO()
    fig.savefig(bio, format="png")
    return bio.getvalue()


def _empty(fig: Figure) -> bytes:
    ax = fig.add_subplot(111)
    ax.text(0.5, 0.5, "No data yet", ha="center", va="center")
    ax.axis("off")
    return _png(fig)


def weekly_progress_png(
    progresses: Sequence[WeeklyProgress], names: Optional[dict[str, str]] = None
) -> bytes:
    """Horizontal bars per location with a goal; bars stop at 100%."""
    fig = Figure(figsize=(6, 3), tight_layout=True)
    with_goal = [p for p in progresses if p.target_visits > 0]
    if not with_goal:
        return _empty(fig)
    names = names or {}
    labels = [names.get(p.location_id, p.location_id) for p in with_goal]
    values = [min(p.completion_percentage, 100) for p in with_goal]
    ax = fig.add_subplot(111)
    ax.barh(labels, values, color="#4C78A8")
    ax.set_xlim(0, 100)
    ax.set_xlabel("% of weekly goal")
    for i, p in enumerate(with_goal):
        ax.text(values[i], i, f" {p.actual_visits}/{p.target_visits}", va="center")
    return _png(fig)


def photos_per_day_png(photos: Sequence[Photo], zone: Optional[dt.tzinfo] = None) -> bytes:
    fig = Figure(figsize=(6, 3), tight_layout=True)
    counts = photos_per_day(photos, zone)
    if counts.empty:
        return _empty(fig)
    ax = fig.add_subplot(111)
    labels = [d.isoformat() for d in counts.index]
    ax.bar(labels, counts.values, color="#F58518")
    ax.set_xticks(range(0, len(labels), max(1, len(labels) // 10)))
    ax.set_ylabel("Photos")
    ax.tick_params(axis="x", rotation=45)
    return _png(fig)
