from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Union

from esodm.core import DataModel


class GeoPoint(DataModel):
    """Geo point.

    Attributes:
        lat: Latitude.
        lon: Longitude.
    """

    lat: float
    lon: float

    @staticmethod
    def from_point(point: Point) -> GeoPoint:
        return GeoPoint(lat=point.y, lon=point.x)

    def to_point(self) -> Point:
        return Point(x=self.lon, y=self.lat)

    def __str__(self) -> str:
        return f"POINT({self.lon} {self.lat})"


class Point(DataModel):
    """Cartesian point, x is the longitude and y the latitude."""

    x: float
    y: float


class Box(DataModel):
    """Box spanned by two points."""

    first: Point
    second: Point


class GeoBox(DataModel):
    """Geo bounding box.

    Attributes:
        top_left: Top left corner.
        bottom_right: Bottom right corner.
    """

    top_left: GeoPoint
    bottom_right: GeoPoint

    @staticmethod
    def from_box(box: Box) -> GeoBox:
        return GeoBox(
            top_left=GeoPoint.from_point(box.first),
            bottom_right=GeoPoint.from_point(box.second),
        )


class Metrics(str, Enum):
    KILOMETERS = "km"
    MILES = "mi"
    NEUTRAL = ""


class Distance(DataModel):
    """Distance with a metric."""

    value: float
    metric: Metrics = Metrics.NEUTRAL

    def __str__(self) -> str:
        return f"{int(self.value)}{self.metric.value}"


class GeoJsonPoint(DataModel):
    type: Literal["Point"] = "Point"
    coordinates: list[float]

    @staticmethod
    def of(x: float, y: float) -> GeoJsonPoint:
        return GeoJsonPoint(coordinates=[x, y])


class GeoJsonMultiPoint(DataModel):
    type: Literal["MultiPoint"] = "MultiPoint"
    coordinates: list[list[float]]


class GeoJsonLineString(DataModel):
    type: Literal["LineString"] = "LineString"
    coordinates: list[list[float]]


class GeoJsonMultiLineString(DataModel):
    type: Literal["MultiLineString"] = "MultiLineString"
    coordinates: list[list[list[float]]]


class GeoJsonPolygon(DataModel):
    """Polygon. The first ring is the outline, further rings are holes."""

    type: Literal["Polygon"] = "Polygon"
    coordinates: list[list[list[float]]]

    @staticmethod
    def of(*points: Point) -> GeoJsonPolygon:
        ring = [[p.x, p.y] for p in points]
        if ring and ring[0] != ring[-1]:
            ring.append(ring[0])
        return GeoJsonPolygon(coordinates=[ring])


class GeoJsonMultiPolygon(DataModel):
    type: Literal["MultiPolygon"] = "MultiPolygon"
    coordinates: list[list[list[list[float]]]]


class GeoJsonGeometryCollection(DataModel):
    type: Literal["GeometryCollection"] = "GeometryCollection"
    geometries: list[GeoJson]


GeoJson = Union[
    GeoJsonPoint,
    GeoJsonMultiPoint,
    GeoJsonLineString,
    GeoJsonMultiLineString,
    GeoJsonPolygon,
    GeoJsonMultiPolygon,
    GeoJsonGeometryCollection,
]

GEOJSON_TYPES = (
    GeoJsonPoint,
    GeoJsonMultiPoint,
    GeoJsonLineString,
    GeoJsonMultiLineString,
    GeoJsonPolygon,
    GeoJsonMultiPolygon,
    GeoJsonGeometryCollection,
)


def to_geojson(shape: Any) -> dict[str, Any]:
    if isinstance(shape, GeoJsonGeometryCollection):
        return {
            "type": shape.type,
            "geometries": [to_geojson(g) for g in shape.geometries],
        }
    return {"type": shape.type, "coordinates": shape.coordinates}


GeoJsonGeometryCollection.model_rebuild()
