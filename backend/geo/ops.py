from __future__ import annotations

from typing import Any

from shapely.errors import GEOSException
from shapely.geometry import GeometryCollection, MultiPolygon, Polygon, mapping, shape
from shapely.geometry.base import BaseGeometry
from shapely.geometry.polygon import orient

from engine.errors import GeometryError


def to_polygonal(node: dict[str, Any]) -> Polygon | MultiPolygon:
    """
    Build a shapely Polygon/MultiPolygon from a GeoJSON geometry dict.

    Invalid input (self-intersecting rings, bow-ties) is repaired with
    buffer(0) so GEOS overlay can run on it.
    """
    try:
        geom = shape(node)
    except (GEOSException, ValueError, TypeError, IndexError, AttributeError) as e:
        raise GeometryError(
            f"Unable to build {node.get('type')} from coordinates: {e}"
        ) from e
    if not isinstance(geom, (Polygon, MultiPolygon)):
        raise GeometryError(f"Expected Polygon or MultiPolygon, got {geom.geom_type}")
    if not geom.is_empty and not geom.is_valid:
        geom = _polygonal_part(geom.buffer(0)) or Polygon()
    return geom


def difference(
    minuend: Polygon | MultiPolygon, subtrahend: Polygon | MultiPolygon
) -> Polygon | MultiPolygon | None:
    """
    minuend - subtrahend, or None when nothing is left.
    """
    try:
        out = minuend.difference(subtrahend)
    except GEOSException as e:
        raise GeometryError(f"Polygon difference failed: {e}") from e
    return _polygonal_part(out)


def rewind(geom: Polygon | MultiPolygon) -> Polygon | MultiPolygon:
    """
    Force RFC 7946 winding: exterior rings counter-clockwise, holes clockwise.
    """
    if isinstance(geom, Polygon):
        return orient(geom, sign=1.0)
    return MultiPolygon([orient(p, sign=1.0) for p in geom.geoms])


def to_node(geom: Polygon | MultiPolygon) -> dict[str, Any]:
    return _as_lists(mapping(geom))


def _polygonal_part(geom: BaseGeometry) -> Polygon | MultiPolygon | None:
    # Polygon overlay is polygonal in practice; collapsed slivers can still
    # come back as lines inside a GeometryCollection.
    if geom.is_empty:
        return None
    if isinstance(geom, (Polygon, MultiPolygon)):
        return geom
    if isinstance(geom, GeometryCollection):
        polys: list[Polygon] = []
        for part in geom.geoms:
            if isinstance(part, Polygon) and not part.is_empty:
                polys.append(part)
            elif isinstance(part, MultiPolygon):
                polys.extend(p for p in part.geoms if not p.is_empty)
        if not polys:
            return None
        if len(polys) == 1:
            return polys[0]
        return MultiPolygon(polys)
    return None


def _as_lists(value: Any) -> Any:
    # shapely's mapping() emits tuples; GeoJSON documents carry lists.
    if isinstance(value, dict):
        return {k: _as_lists(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_as_lists(v) for v in value]
    return value
