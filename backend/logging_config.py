"""
Logging configuration.

stdout carries the output document, so everything is logged to stderr.
"""
from __future__ import annotations

import logging
import sys


def setup_logging(level: int = logging.INFO, log_file: str | None = None) -> None:
    """
    Configure the root logger.

    Args:
        level: logging level (e.g. logging.DEBUG, logging.WARNING)
        log_file: optional path to also write logs to.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate handlers when called more than once (tests, reloads).
    for handler in list(root.handlers):
        if getattr(handler, "_geojson_difference", False):
            root.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(level)
    console.setFormatter(formatter)
    console._geojson_difference = True  # type: ignore[attr-defined]
    root.addHandler(console)

    if log_file:
        file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        file_handler._geojson_difference = True  # type: ignore[attr-defined]
        root.addHandler(file_handler)
