"""Logging initialization using loguru."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from journal.config import get_log_dir, get_log_level


def init_logging(log_dir: str | None = None, level: str | None = None) -> Path:
    """Route logs to a rotating file under `log_dir` and return that directory."""
    log_path = Path(log_dir or get_log_dir())
    log_path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(
        str(log_path / "journal_{time:YYYYMMDD}.log"),
        rotation="10 MB",
        retention="10 days",
        compression="zip",
        enqueue=True,
        backtrace=False,
        diagnose=False,
        level=level or get_log_level(),
    )
    return log_path


def find_latest_log_file(log_dir: str | None = None) -> Path | None:
    log_path = Path(log_dir or get_log_dir())
    try:
        if not log_path.exists():
            return None
        log_files = list(log_path.glob("journal_*.log"))
        if not log_files:
            return None
        return max(log_files, key=lambda p: p.stat().st_mtime)
    except (OSError, ValueError):
        return None
