"""
Compiles criteria filter entries (geo operations) into filter clauses.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from esodm.core.exceptions import ConfigurationError
from esodm.query import (
    GEOJSON_TYPES,
    Box,
    Criteria,
    CriteriaEntry,
    Distance,
    GeoBox,
    GeoPoint,
    Point,
    to_geojson,
)
from esodm.query import OperationKey as Op

_GEO_RELATIONS = {
    Op.GEO_INTERSECTS: "intersects",
    Op.GEO_IS_DISJOINT: "disjoint",
    Op.GEO_WITHIN: "within",
    Op.GEO_CONTAINS: "contains",
}


class CriteriaFilterProcessor:
    @staticmethod
    def create_filter(criteria: Criteria) -> dict[str, Any] | None:
        """Compile the filter entries of a criteria chain.

        Each filter entry of a negating node is negated on its own.
        """
        filters: list[dict[str, Any]] = []
        for node in criteria.criteria_chain:
            if node.is_or:
                should = CriteriaFilterProcessor._queries_for_entries(node)
                if should:
                    filters.append({"bool": {"should": should}})
            elif node.is_negating:
                filters.extend(
                    CriteriaFilterProcessor._negation_filters(criteria)
                )
            else:
                filters.extend(
                    CriteriaFilterProcessor._queries_for_entries(node)
                )

        if not filters:
            return None
        if len(filters) == 1:
            return filters[0]
        return {"bool": {"must": filters}}

    @staticmethod
    def _queries_for_entries(criteria: Criteria) -> list[dict[str, Any]]:
        if not criteria.filter_criteria_entries:
            return []
        name = CriteriaFilterProcessor._field_name(criteria)
        return [
            CriteriaFilterProcessor._query_for(entry, name)
            for entry in criteria.filter_criteria_entries
        ]

    @staticmethod
    def _negation_filters(criteria: Criteria) -> list[dict[str, Any]]:
        if not criteria.filter_criteria_entries:
            return []
        name = CriteriaFilterProcessor._field_name(criteria)
        return [
            {
                "bool": {
                    "must_not": [
                        CriteriaFilterProcessor._query_for(entry, name)
                    ]
                }
            }
            for entry in criteria.filter_criteria_entries
        ]

    @staticmethod
    def _field_name(criteria: Criteria) -> str:
        if criteria.field is None or not criteria.field.name:
            raise ConfigurationError("Filter criteria must have a field")
        return criteria.field.name

    @staticmethod
    def _query_for(entry: CriteriaEntry, name: str) -> dict[str, Any]:
        if entry.key == Op.WITHIN:
            location, distance = entry.value
            return CriteriaFilterProcessor._within(name, location, distance)
        if entry.key == Op.BBOX:
            return CriteriaFilterProcessor._bounding_box(name, entry.value)
        if entry.key in _GEO_RELATIONS:
            if not isinstance(entry.value, GEOJSON_TYPES):
                raise ConfigurationError(
                    f"Value of a {entry.key.name} filter must be GeoJSON"
                )
            return CriteriaFilterProcessor._geo_shape(
                name, entry.value, _GEO_RELATIONS[entry.key]
            )
        raise ConfigurationError(f"{entry.key.name} is not a filter operation")

    @staticmethod
    def _within(name: str, location: Any, distance: Any) -> dict[str, Any]:
        if isinstance(distance, Distance):
            distance_text = str(distance)
        elif isinstance(distance, str):
            distance_text = distance
        else:
            raise ConfigurationError(
                "Distance of a geo distance filter must be text or a Distance"
            )

        point: Any
        if isinstance(location, GeoPoint):
            point = _point(location)
        elif isinstance(location, Point):
            point = _point(GeoPoint.from_point(location))
        elif isinstance(location, str):
            if "," in location:
                lat, lon = location.split(",", 1)
                point = {"lat": float(lat), "lon": float(lon)}
            else:
                # geohash
                point = location
        else:
            raise ConfigurationError(
                "Location of a geo distance filter must be a GeoPoint, "
                "a Point or text"
            )
        return {
            "geo_distance": {
                "distance": distance_text,
                "distance_type": "plane",
                name: point,
            }
        }

    @staticmethod
    def _bounding_box(name: str, corners: tuple) -> dict[str, Any]:
        if len(corners) == 1:
            box = corners[0]
            if isinstance(box, Box):
                box = GeoBox.from_box(box)
            if not isinstance(box, GeoBox):
                raise ConfigurationError(
                    "Single corner of a bounding box must be a GeoBox or Box"
                )
            top_left: Any = _point(box.top_left)
            bottom_right: Any = _point(box.bottom_right)
        elif len(corners) == 2:
            top_left, bottom_right = corners
            if isinstance(top_left, GeoPoint) and isinstance(
                bottom_right, GeoPoint
            ):
                top_left = _point(top_left)
                bottom_right = _point(bottom_right)
            elif not (
                isinstance(top_left, str) and isinstance(bottom_right, str)
            ):
                raise ConfigurationError(
                    "Both corners of a bounding box must be GeoPoint or text"
                )
        else:
            raise ConfigurationError(
                "A bounding box takes a GeoBox, a Box or two corners"
            )
        return {
            "geo_bounding_box": {
                name: {"top_left": top_left, "bottom_right": bottom_right}
            }
        }

    @staticmethod
    def _geo_shape(name: str, shape: Any, relation: str) -> dict[str, Any]:
        query = json.dumps(
            {
                "geo_shape": {
                    name: {"shape": to_geojson(shape), "relation": relation}
                }
            }
        )
        encoded = base64.b64encode(query.encode("utf-8")).decode("ascii")
        return {"wrapper": {"query": encoded}}


def _point(point: GeoPoint) -> dict[str, float]:
    return {"lat": point.lat, "lon": point.lon}
