from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

# Advisory GeoJSON (RFC 7946) models. Validation failures become warnings;
# processing always continues on the raw parsed structure.

Position = Annotated[list[float], Field(min_length=2)]
LinearRing = Annotated[list[Position], Field(min_length=4)]


class _GeoJSONObject(BaseModel):
    # Foreign members are allowed by RFC 7946.
    model_config = ConfigDict(extra="allow")

    bbox: Optional[list[float]] = None


class Point(_GeoJSONObject):
    type: Literal["Point"]
    coordinates: Position


class MultiPoint(_GeoJSONObject):
    type: Literal["MultiPoint"]
    coordinates: list[Position]


class LineString(_GeoJSONObject):
    type: Literal["LineString"]
    coordinates: Annotated[list[Position], Field(min_length=2)]


class MultiLineString(_GeoJSONObject):
    type: Literal["MultiLineString"]
    coordinates: list[Annotated[list[Position], Field(min_length=2)]]


class Polygon(_GeoJSONObject):
    type: Literal["Polygon"]
    coordinates: list[LinearRing]

    @field_validator("coordinates")
    @classmethod
    def rings_closed(cls, rings: list[list[list[float]]]) -> list[list[list[float]]]:
        for ring in rings:
            _check_closed(ring)
        return rings


class MultiPolygon(_GeoJSONObject):
    type: Literal["MultiPolygon"]
    coordinates: list[list[LinearRing]]

    @field_validator("coordinates")
    @classmethod
    def rings_closed(
        cls, polygons: list[list[list[list[float]]]]
    ) -> list[list[list[list[float]]]]:
        for rings in polygons:
            for ring in rings:
                _check_closed(ring)
        return polygons


class GeometryCollection(_GeoJSONObject):
    type: Literal["GeometryCollection"]
    geometries: list[Geometry]


Geometry = Annotated[
    Union[Point, MultiPoint, LineString, MultiLineString, Polygon, MultiPolygon, GeometryCollection],
    Field(discriminator="type"),
]


class Feature(_GeoJSONObject):
    type: Literal["Feature"]
    geometry: Optional[Geometry]
    properties: Optional[dict[str, Any]]
    id: Optional[Union[str, int, float]] = None


class FeatureCollection(_GeoJSONObject):
    type: Literal["FeatureCollection"]
    features: list[Feature]


GeometryCollection.model_rebuild()
Feature.model_rebuild()

GeoJSON = Annotated[
    Union[
        Point,
        MultiPoint,
        LineString,
        MultiLineString,
        Polygon,
        MultiPolygon,
        GeometryCollection,
        Feature,
        FeatureCollection,
    ],
    Field(discriminator="type"),
]

_ADAPTER: TypeAdapter[Any] = TypeAdapter(GeoJSON)


def validate_geojson(data: Any) -> list[str]:
    """
    Return human-readable problems with `data` as GeoJSON (empty when valid).
    """
    try:
        _ADAPTER.validate_python(data)
    except ValidationError as e:
        return [_format_error(err) for err in e.errors()]
    return []


def _check_closed(ring: list[list[float]]) -> None:
    if ring[0] != ring[-1]:
        raise ValueError("first and last positions of a linear ring must be equivalent")


def _format_error(err: dict[str, Any]) -> str:
    loc = ".".join(str(p) for p in err.get("loc", ()))
    msg = str(err.get("msg") or "invalid")
    return f"{loc}: {msg}" if loc else msg
