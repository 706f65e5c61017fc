from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, TypeAlias


class NodeKind(str, Enum):
    polygonal = "polygonal"
    other_geometry = "other_geometry"
    feature = "feature"
    feature_collection = "feature_collection"
    geometry_collection = "geometry_collection"
    invalid = "invalid"


class DiagnosticKind(str, Enum):
    schema_warning = "schema_warning"
    unsupported_geometry_kind = "unsupported_geometry_kind"
    unrecognized_type = "unrecognized_type"


@dataclass(frozen=True)
class Diagnostic:
    """
    A non-fatal finding about a document. Never interrupts processing.
    """

    kind: DiagnosticKind
    message: str

    def __str__(self) -> str:
        return self.message


DiagnosticSink: TypeAlias = Callable[[Diagnostic], None]


POLYGONAL_TYPES = frozenset({"Polygon", "MultiPolygon"})
OTHER_GEOMETRY_TYPES = frozenset({"Point", "MultiPoint", "LineString", "MultiLineString"})

_CONTAINER_KINDS: dict[str, NodeKind] = {
    "Feature": NodeKind.feature,
    "FeatureCollection": NodeKind.feature_collection,
    "GeometryCollection": NodeKind.geometry_collection,
}

# Which member holds the children of each container kind.
CHILDREN_FIELD: dict[NodeKind, str] = {
    NodeKind.feature: "geometry",
    NodeKind.geometry_collection: "geometries",
    NodeKind.feature_collection: "features",
}


def empty_feature_collection() -> dict[str, Any]:
    # Canonical "nothing left" result; a fresh dict per call.
    return {"type": "FeatureCollection", "features": []}


def classify(
    node: Any, *, role: str = "Object", warn: DiagnosticSink | None = None
) -> NodeKind:
    """
    Classify a parsed GeoJSON node.

    Only missing or unknown `type` members are reported here; Points and lines
    classify silently as `other_geometry` and the caller decides whether that
    deserves a diagnostic (it does wherever a polygonal operand is required).
    """
    gtype = node.get("type") if isinstance(node, dict) else None
    if not isinstance(gtype, str):
        _emit(
            warn,
            DiagnosticKind.unrecognized_type,
            f"{role} has no 'type' member. Ignoring",
        )
        return NodeKind.invalid

    if gtype in POLYGONAL_TYPES:
        return NodeKind.polygonal
    if gtype in OTHER_GEOMETRY_TYPES:
        return NodeKind.other_geometry
    kind = _CONTAINER_KINDS.get(gtype)
    if kind is not None:
        return kind

    _emit(
        warn,
        DiagnosticKind.unrecognized_type,
        f"{role} has unrecognized GeoJSON type '{gtype}'. Ignoring",
    )
    return NodeKind.invalid


def _emit(warn: DiagnosticSink | None, kind: DiagnosticKind, message: str) -> None:
    if warn is not None:
        warn(Diagnostic(kind=kind, message=message))
