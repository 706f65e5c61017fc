from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from shapely.geometry import MultiPolygon, Polygon

from documents.loaders import read_source
from documents.types import (
    CHILDREN_FIELD,
    Diagnostic,
    DiagnosticKind,
    DiagnosticSink,
    NodeKind,
    classify,
    empty_feature_collection,
)
from engine.types import DifferenceOptions, DifferenceResult
from geo.bbox import geojson_bbox, sources_overlapping
from geo.ops import difference, rewind, to_node, to_polygonal

logger = logging.getLogger(__name__)

SourceLoader = Callable[..., Any]


def subtract(
    minuend: Any, subtrahends: Sequence[Any], *, warn: DiagnosticSink | None = None
) -> Any | None:
    """
    Subtract every subtrahend from `minuend`, walking both recursively.

    Returns a new node (the input is never mutated), or None when the minuend
    is annihilated. Containers are rebuilt with their annihilated children
    dropped; an emptied collection is still a collection, not None.
    """
    kind = classify(minuend, role="Minuend", warn=warn)

    if kind is NodeKind.polygonal:
        return _subtract_from_polygonal(minuend, subtrahends, warn=warn)

    if kind is NodeKind.feature:
        geometry = minuend.get("geometry")
        if geometry is None:
            # Unlocated Feature; nothing to cut.
            return minuend
        reduced = subtract(geometry, subtrahends, warn=warn)
        if reduced is None:
            return None
        return {**minuend, "geometry": reduced}

    if kind in (NodeKind.geometry_collection, NodeKind.feature_collection):
        field = CHILDREN_FIELD[kind]
        if field not in minuend:
            return minuend
        children = [subtract(child, subtrahends, warn=warn) for child in minuend[field] or []]
        return {**minuend, field: [c for c in children if c is not None]}

    if kind is NodeKind.other_geometry:
        _warn_unsupported(minuend, "Minuend", warn)
    return minuend


def _subtract_from_polygonal(
    minuend: dict[str, Any], subtrahends: Sequence[Any], *, warn: DiagnosticSink | None
) -> dict[str, Any] | None:
    if not subtrahends:
        return minuend
    current = to_polygonal(minuend)
    reduced, changed = _reduce(current, subtrahends, warn=warn)
    if reduced is None:
        return None
    if not changed:
        return minuend
    return to_node(reduced)


def _reduce(
    current: Polygon | MultiPolygon,
    subtrahends: Sequence[Any],
    *,
    warn: DiagnosticSink | None,
) -> tuple[Polygon | MultiPolygon | None, bool]:
    """
    Fold the subtrahends over one polygonal minuend, in order.

    Stops at the first subtrahend that leaves nothing. The flag tells whether
    any difference was actually computed.
    """
    changed = False
    for subtrahend in subtrahends:
        kind = classify(subtrahend, role="A subtrahend", warn=warn)

        if kind is NodeKind.polygonal:
            out = difference(current, to_polygonal(subtrahend))
            changed = True
            if out is None:
                return None, True
            # Once per primitive call, never deferred to the end of the fold.
            current = rewind(out)
            continue

        if kind is NodeKind.feature:
            geometry = subtrahend.get("geometry")
            nested = [] if geometry is None else [geometry]
        elif kind in (NodeKind.geometry_collection, NodeKind.feature_collection):
            nested = subtrahend.get(CHILDREN_FIELD[kind]) or []
        else:
            if kind is NodeKind.other_geometry:
                _warn_unsupported(subtrahend, "A subtrahend", warn)
            continue

        out, nested_changed = _reduce(current, nested, warn=warn)
        changed = changed or nested_changed
        if out is None:
            return None, True
        current = out

    return current, changed


def _warn_unsupported(node: dict[str, Any], role: str, warn: DiagnosticSink | None) -> None:
    if warn is None:
        return
    warn(
        Diagnostic(
            kind=DiagnosticKind.unsupported_geometry_kind,
            message=f"{role} includes simple GeoJSON object of type '{node.get('type')}'. Ignoring",
        )
    )


def run_difference(
    minuend: Any,
    options: DifferenceOptions | None = None,
    *,
    loader: SourceLoader = read_source,
) -> DifferenceResult:
    """
    Reduce one minuend document by every configured subtrahend source.

    Sources are loaded and subtracted strictly in list order, each one against
    the already-reduced minuend. Once nothing is left the remaining sources are
    not read and the result is an empty FeatureCollection.
    """
    options = options or DifferenceOptions()
    diagnostics: list[Diagnostic] = []
    sink = options.sink()

    def warn(diagnostic: Diagnostic) -> None:
        diagnostics.append(diagnostic)
        sink(diagnostic)

    sources = list(options.subtrahend_sources)
    if options.respect_bbox_filenames and sources:
        narrowed = sources_overlapping(sources, geojson_bbox(minuend))
        logger.info("Bbox filenames kept %d of %d sources", len(narrowed), len(sources))
        sources = narrowed

    if not sources:
        # Nothing to subtract, but still surface problems with the minuend itself.
        # An empty fold never annihilates; None here is a JSON null minuend.
        return DifferenceResult(
            geojson=subtract(minuend, [], warn=warn),
            diagnostics=diagnostics,
            sources_read=[],
        )

    read: list[str] = []
    geojson = minuend
    for source in sources:
        subtrahend = loader(source, warn=warn)
        read.append(source)
        reduced = subtract(geojson, [subtrahend], warn=warn)
        if reduced is None and geojson is not None:
            logger.info("Minuend annihilated by %s", source)
            geojson = empty_feature_collection()
            break
        geojson = reduced

    return DifferenceResult(geojson=geojson, diagnostics=diagnostics, sources_read=read)
