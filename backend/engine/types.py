from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from documents.types import Diagnostic, DiagnosticSink

logger = logging.getLogger(__name__)


def log_diagnostic(diagnostic: Diagnostic) -> None:
    logger.warning("%s", diagnostic.message)


@dataclass(frozen=True)
class DifferenceOptions:
    """
    Per-invocation configuration of the difference driver.

    - subtrahend_sources: paths subtracted in list order
    - respect_bbox_filenames: skip sources whose filename declares a bbox
      (e.g. `lakes-[10,45,12,47].geojson`) that misses the minuend
    - diagnostic_sink: receives non-fatal findings; None logs them at WARNING
    """

    subtrahend_sources: list[str] = field(default_factory=list)
    respect_bbox_filenames: bool = False
    diagnostic_sink: DiagnosticSink | None = None

    def sink(self) -> DiagnosticSink:
        return self.diagnostic_sink if self.diagnostic_sink is not None else log_diagnostic


@dataclass(frozen=True)
class DifferenceResult:
    """
    What the driver returns for one minuend document.
    """

    geojson: dict[str, Any]
    diagnostics: list[Diagnostic]
    # Sources actually loaded (after bbox pre-filtering and short-circuiting).
    sources_read: list[str]
