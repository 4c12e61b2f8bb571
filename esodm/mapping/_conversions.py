"""
Conversion registry and built-in property converters.

The registry is created once and handed to every converter that needs it,
there is no shared global instance.
"""

from __future__ import annotations

import uuid
from collections.abc import Mapping
from datetime import date, datetime, time, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable

from esodm.core.exceptions import MappingError
from esodm.query import (
    GeoJsonGeometryCollection,
    GeoJsonLineString,
    GeoJsonMultiLineString,
    GeoJsonMultiPoint,
    GeoJsonMultiPolygon,
    GeoJsonPoint,
    GeoJsonPolygon,
    GeoPoint,
    Point,
    to_geojson,
)

from ._models import PropertyValueConverter

SIMPLE_TYPES: tuple[type, ...] = (str, int, float, bool, bytes)

_GEOJSON_BY_NAME = {
    "point": GeoJsonPoint,
    "multipoint": GeoJsonMultiPoint,
    "linestring": GeoJsonLineString,
    "multilinestring": GeoJsonMultiLineString,
    "polygon": GeoJsonPolygon,
    "multipolygon": GeoJsonMultiPolygon,
    "geometrycollection": GeoJsonGeometryCollection,
}


class DatetimeConverter(PropertyValueConverter):
    """Datetime written as ISO 8601 or with a ``strftime`` pattern.

    Epoch milliseconds are accepted on read and read as UTC.
    """

    pattern: str | None

    def __init__(self, pattern: str | None = None) -> None:
        self.pattern = pattern

    def write(self, value: Any) -> Any:
        if not isinstance(value, (datetime, date)):
            return value
        if self.pattern:
            return value.strftime(self.pattern)
        return value.isoformat()

    def read(self, value: Any) -> Any:
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, (int, float)):
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        try:
            if self.pattern:
                return datetime.strptime(str(value), self.pattern)
            return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError as e:
            raise MappingError(f"Cannot read datetime from {value!r}") from e


class DateConverter(PropertyValueConverter):
    pattern: str | None

    def __init__(self, pattern: str | None = None) -> None:
        self.pattern = pattern

    def write(self, value: Any) -> Any:
        if not isinstance(value, date):
            return value
        if self.pattern:
            return value.strftime(self.pattern)
        return value.isoformat()

    def read(self, value: Any) -> Any:
        if value is None or isinstance(value, date):
            return value
        try:
            if self.pattern:
                return datetime.strptime(str(value), self.pattern).date()
            return date.fromisoformat(str(value)[:10])
        except ValueError as e:
            raise MappingError(f"Cannot read date from {value!r}") from e


class ConversionRegistry:
    """Custom conversions between Python types and document values.

    Writers turn a value of a registered type into its stored form.
    Readers turn a stored value back into the registered type. Types
    with a writer are treated as simple values by the mapping engine.
    """

    _writers: dict[type, Callable[[Any], Any]]
    _readers: dict[type, Callable[[Any], Any]]

    def __init__(self, register_defaults: bool = True) -> None:
        self._writers = {}
        self._readers = {}
        if register_defaults:
            self._register_defaults()

    def register_writer(
        self, source_type: type, writer: Callable[[Any], Any]
    ) -> ConversionRegistry:
        self._writers[source_type] = writer
        return self

    def register_reader(
        self, target_type: type, reader: Callable[[Any], Any]
    ) -> ConversionRegistry:
        self._readers[target_type] = reader
        return self

    def register(
        self, tp: type, converter: PropertyValueConverter
    ) -> ConversionRegistry:
        self.register_writer(tp, converter.write)
        self.register_reader(tp, converter.read)
        return self

    def has_custom_write_target(self, tp: type) -> bool:
        return self._find(self._writers, tp) is not None

    def has_custom_read_target(self, tp: type) -> bool:
        return self._find(self._readers, tp) is not None

    def is_simple_type(self, tp: type) -> bool:
        if tp in SIMPLE_TYPES or tp is type(None):
            return True
        if isinstance(tp, type) and issubclass(tp, Enum):
            return True
        return self.has_custom_write_target(tp)

    def write(self, value: Any) -> Any:
        writer = self._find(self._writers, type(value))
        if writer is None:
            return value
        return writer(value)

    def read(self, value: Any, target_type: type) -> Any:
        reader = self._find(self._readers, target_type)
        if reader is None:
            return value
        return reader(value)

    @staticmethod
    def _find(
        registry: dict[type, Callable[[Any], Any]], tp: type
    ) -> Callable[[Any], Any] | None:
        if tp in registry:
            return registry[tp]
        if not isinstance(tp, type):
            return None
        for base in tp.__mro__[1:]:
            if base in registry:
                return registry[base]
        return None

    def _register_defaults(self) -> None:
        self.register(datetime, DatetimeConverter())
        self.register(date, DateConverter())
        self.register_writer(time, lambda v: v.isoformat())
        self.register_reader(time, lambda v: time.fromisoformat(str(v)))
        self.register_writer(Decimal, str)
        self.register_reader(Decimal, lambda v: Decimal(str(v)))
        self.register_writer(uuid.UUID, str)
        self.register_reader(uuid.UUID, lambda v: uuid.UUID(str(v)))
        self.register_writer(GeoPoint, lambda v: {"lat": v.lat, "lon": v.lon})
        self.register_reader(GeoPoint, _read_geo_point)
        self.register_writer(Point, lambda v: {"lat": v.y, "lon": v.x})
        self.register_reader(Point, lambda v: _read_geo_point(v).to_point())
        for geojson_type in _GEOJSON_BY_NAME.values():
            self.register_writer(geojson_type, to_geojson)
            self.register_reader(geojson_type, _read_geojson)


def _read_geo_point(value: Any) -> GeoPoint:
    if isinstance(value, GeoPoint):
        return value
    if isinstance(value, Mapping):
        return GeoPoint(lat=value["lat"], lon=value["lon"])
    if isinstance(value, str) and "," in value:
        lat, lon = value.split(",", 1)
        return GeoPoint(lat=float(lat), lon=float(lon))
    if isinstance(value, (list, tuple)) and len(value) == 2:
        # GeoJSON order, lon first
        return GeoPoint(lat=value[1], lon=value[0])
    raise MappingError(f"Cannot read geo point from {value!r}")


def _read_geojson(value: Any) -> Any:
    if not isinstance(value, Mapping) or "type" not in value:
        raise MappingError(f"Cannot read GeoJSON from {value!r}")
    geojson_type = _GEOJSON_BY_NAME.get(str(value["type"]).lower())
    if geojson_type is None:
        raise MappingError(f"Unknown GeoJSON type {value['type']!r}")
    if geojson_type is GeoJsonGeometryCollection:
        return GeoJsonGeometryCollection(
            geometries=[_read_geojson(g) for g in value["geometries"]]
        )
    return geojson_type(coordinates=value["coordinates"])
