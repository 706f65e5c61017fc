from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Iterable

logger = logging.getLogger(__name__)

# [minLon,minLat,maxLon,maxLat] anywhere in a source identifier, e.g.
# "water-[-10.5,35,5,44.25].geojson"
_NUM = r"[-+]?[0-9]+(?:\.[0-9]*)?"
BBOX_PATTERN = re.compile(rf"\[({_NUM}),({_NUM}),({_NUM}),({_NUM})\]")


@dataclass(frozen=True)
class BBox:
    """
    WGS84 bounding box in lon/lat degrees.

    Convention used throughout this repo:
    - minLon, minLat, maxLon, maxLat
    - min_lon > max_lon means the box crosses the antimeridian (RFC 7946 section 5.2)
    """

    min_lon: float
    min_lat: float
    max_lon: float
    max_lat: float

    @property
    def crosses_antimeridian(self) -> bool:
        return self.min_lon > self.max_lon

    def linearized(self) -> "BBox":
        if not self.crosses_antimeridian:
            return self
        return BBox(
            min_lon=self.min_lon - 360.0,
            min_lat=self.min_lat,
            max_lon=self.max_lon,
            max_lat=self.max_lat,
        )

    def overlaps(self, other: "BBox") -> bool:
        a = self.linearized()
        b = other.linearized()
        return not (
            b.min_lon > a.max_lon
            or a.min_lon > b.max_lon
            or b.min_lat > a.max_lat
            or a.min_lat > b.max_lat
        )

    def as_tuple(self) -> tuple[float, float, float, float]:
        return (self.min_lon, self.min_lat, self.max_lon, self.max_lat)


def bbox_overlap(
    bbox1: Iterable[float] | BBox, bbox2: Iterable[float] | BBox
) -> bool:
    return _as_bbox(bbox1).overlaps(_as_bbox(bbox2))


def bbox_from_name(name: str) -> BBox | None:
    """
    Extract a bbox literal embedded in a filename (or any identifier).
    """
    m = BBOX_PATTERN.search(name or "")
    if m is None:
        return None
    return BBox(*(float(g) for g in m.groups()))


def geojson_bbox(node: Any) -> BBox | None:
    """
    Extent of every position in a GeoJSON node, at any nesting depth.

    Returns None when the node holds no positions at all (e.g. an empty
    FeatureCollection).
    """
    xs: list[float] = []
    ys: list[float] = []
    for lon, lat in _iter_positions(node):
        xs.append(lon)
        ys.append(lat)
    if not xs:
        return None
    return BBox(min_lon=min(xs), min_lat=min(ys), max_lon=max(xs), max_lat=max(ys))


def sources_overlapping(sources: Iterable[str], minuend_bbox: BBox | None) -> list[str]:
    """
    Keep the sources whose filename-declared bbox overlaps `minuend_bbox`.

    A source without a bbox literal is always kept, so is every source when
    the minuend has no extent to compare against.
    """
    out: list[str] = []
    for source in sources:
        declared = bbox_from_name(source)
        if declared is None or minuend_bbox is None:
            out.append(source)
            continue
        if declared.overlaps(minuend_bbox):
            out.append(source)
        else:
            logger.debug("Skipping %s: bbox %s misses minuend", source, declared.as_tuple())
    return out


def _as_bbox(value: Iterable[float] | BBox) -> BBox:
    if isinstance(value, BBox):
        return value
    min_lon, min_lat, max_lon, max_lat = (float(v) for v in value)
    return BBox(min_lon=min_lon, min_lat=min_lat, max_lon=max_lon, max_lat=max_lat)


def _iter_positions(node: Any) -> Iterable[tuple[float, float]]:
    if isinstance(node, list):
        for child in node:
            yield from _iter_positions(child)
        return
    if not isinstance(node, dict):
        return
    if "coordinates" in node:
        yield from _iter_coordinates(node.get("coordinates"))
    for key in ("geometry", "geometries", "features"):
        child = node.get(key)
        if child is not None:
            yield from _iter_positions(child)


def _iter_coordinates(coords: Any) -> Iterable[tuple[float, float]]:
    if not isinstance(coords, (list, tuple)) or not coords:
        return
    # A position is a list of numbers; anything else is a nested array.
    if isinstance(coords[0], (int, float)) and not isinstance(coords[0], bool):
        if len(coords) >= 2 and isinstance(coords[1], (int, float)):
            yield float(coords[0]), float(coords[1])
        return
    for child in coords:
        yield from _iter_coordinates(child)
