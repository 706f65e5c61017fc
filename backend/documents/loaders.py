from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from documents.schema import validate_geojson
from documents.types import Diagnostic, DiagnosticKind, DiagnosticSink
from engine.errors import MalformedJsonError, SourceUnreadableError

logger = logging.getLogger(__name__)


def parse_document(
    text: str, source: str, *, warn: DiagnosticSink | None = None
) -> Any:
    """
    Parse one GeoJSON document.

    Invalid JSON is fatal. Valid JSON that is not valid GeoJSON only produces
    schema warnings; the raw structure is returned either way.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MalformedJsonError(source, str(e)) from e

    if warn is not None:
        for problem in validate_geojson(data):
            warn(
                Diagnostic(
                    kind=DiagnosticKind.schema_warning,
                    message=f"JSON from {source} is not valid GeoJSON: {problem}",
                )
            )
    return data


def read_source(path: str, *, warn: DiagnosticSink | None = None) -> Any:
    try:
        text = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise SourceUnreadableError(path, str(e)) from e
    logger.debug("Read subtrahend source %s (%d chars)", path, len(text))
    return parse_document(text, path, warn=warn)


def flatten_paths(paths: Iterable[str]) -> list[str]:
    """
    Expand directory arguments to their entries; files are kept as given.

    Directory entries are sorted so repeated runs subtract in the same order.
    """
    out: list[str] = []
    for raw in paths:
        p = Path(raw)
        try:
            if p.is_dir():
                for child in sorted(p.iterdir()):
                    if child.is_file():
                        out.append(str(child))
                    else:
                        logger.debug("Skipping %s: not a regular file", child)
            elif p.exists():
                out.append(raw)
            else:
                raise FileNotFoundError(f"No such file or directory: '{raw}'")
        except OSError as e:
            raise SourceUnreadableError(raw, str(e)) from e
    return out
