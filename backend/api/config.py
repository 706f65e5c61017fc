from __future__ import annotations

import logging
import os


def subtrahend_sources() -> list[str]:
    # Same separator as PATH: ":" on POSIX, ";" on Windows.
    raw = os.getenv("GEOJSON_DIFFERENCE_SOURCES") or ""
    return [p.strip() for p in raw.split(os.pathsep) if p.strip()]


def respect_bbox_filenames() -> bool:
    v = (os.getenv("GEOJSON_DIFFERENCE_RESPECT_BBOX") or "0").strip().lower()
    return v in {"1", "true", "yes", "on"}


def log_level() -> int:
    name = (os.getenv("GEOJSON_DIFFERENCE_LOG_LEVEL") or "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
