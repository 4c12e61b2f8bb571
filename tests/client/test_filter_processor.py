# type: ignore

import base64
import json

import pytest

from esodm.client import CriteriaFilterProcessor
from esodm.core.exceptions import ConfigurationError
from esodm.query import (
    Box,
    Criteria,
    Distance,
    GeoBox,
    GeoJsonPoint,
    GeoJsonPolygon,
    GeoPoint,
    Metrics,
    Point,
)


def decode_wrapper(clause: dict) -> dict:
    return json.loads(base64.b64decode(clause["wrapper"]["query"]))


@pytest.mark.parametrize(
    "location,expected",
    [
        (GeoPoint(lat=1.5, lon=2.5), {"lat": 1.5, "lon": 2.5}),
        (Point(x=2.5, y=1.5), {"lat": 1.5, "lon": 2.5}),
        ("1.5,2.5", {"lat": 1.5, "lon": 2.5}),
        ("u4pruydqqvj", "u4pruydqqvj"),
    ],
)
def test_within_location_forms(location, expected):
    criteria = Criteria.where("location").within(location, "10km")
    assert CriteriaFilterProcessor.create_filter(criteria) == {
        "geo_distance": {
            "distance": "10km",
            "distance_type": "plane",
            "location": expected,
        }
    }


def test_within_distance_object():
    criteria = Criteria.where("location").within(
        GeoPoint(lat=1.0, lon=2.0), Distance(value=5, metric=Metrics.MILES)
    )
    clause = CriteriaFilterProcessor.create_filter(criteria)
    assert clause["geo_distance"]["distance"] == "5mi"


def test_bounding_box_from_geo_box():
    box = GeoBox(
        top_left=GeoPoint(lat=10.0, lon=1.0),
        bottom_right=GeoPoint(lat=1.0, lon=10.0),
    )
    criteria = Criteria.where("location").bounded_by(box)
    assert CriteriaFilterProcessor.create_filter(criteria) == {
        "geo_bounding_box": {
            "location": {
                "top_left": {"lat": 10.0, "lon": 1.0},
                "bottom_right": {"lat": 1.0, "lon": 10.0},
            }
        }
    }


def test_bounding_box_from_box():
    box = Box(first=Point(x=1.0, y=10.0), second=Point(x=10.0, y=1.0))
    criteria = Criteria.where("location").bounded_by(box)
    clause = CriteriaFilterProcessor.create_filter(criteria)
    assert clause["geo_bounding_box"]["location"]["top_left"] == {
        "lat": 10.0,
        "lon": 1.0,
    }


def test_bounding_box_from_text_corners():
    criteria = Criteria.where("location").bounded_by("dr5r9", "dr5r1")
    assert CriteriaFilterProcessor.create_filter(criteria) == {
        "geo_bounding_box": {
            "location": {"top_left": "dr5r9", "bottom_right": "dr5r1"}
        }
    }


@pytest.mark.parametrize(
    "build,relation",
    [
        (lambda c, s: c.intersects(s), "intersects"),
        (lambda c, s: c.is_disjoint(s), "disjoint"),
        (lambda c, s: c.within(s), "within"),
        (lambda c, s: c.contains(s), "contains"),
    ],
)
def test_geo_shape_relations(build, relation):
    shape = GeoJsonPolygon.of(
        Point(x=0, y=0), Point(x=1, y=0), Point(x=1, y=1), Point(x=0, y=0)
    )
    criteria = build(Criteria.where("area"), shape)
    clause = CriteriaFilterProcessor.create_filter(criteria)
    decoded = decode_wrapper(clause)
    assert decoded["geo_shape"]["area"]["relation"] == relation
    assert decoded["geo_shape"]["area"]["shape"]["type"] == "Polygon"


def test_geo_shape_point():
    criteria = Criteria.where("area").intersects(GeoJsonPoint.of(1.0, 2.0))
    decoded = decode_wrapper(CriteriaFilterProcessor.create_filter(criteria))
    assert decoded == {
        "geo_shape": {
            "area": {
                "shape": {"type": "Point", "coordinates": [1.0, 2.0]},
                "relation": "intersects",
            }
        }
    }


def test_negation_wraps_each_entry():
    criteria = (
        Criteria.where("location")
        .within(GeoPoint(lat=1.0, lon=2.0), "10km")
        .bounded_by("dr5r9", "dr5r1")
        .not_()
    )
    clause = CriteriaFilterProcessor.create_filter(criteria)
    must = clause["bool"]["must"]
    assert len(must) == 2
    assert "geo_distance" in must[0]["bool"]["must_not"][0]
    assert "geo_bounding_box" in must[1]["bool"]["must_not"][0]


def test_or_node_is_should():
    criteria = (
        Criteria.where("a")
        .within("1.0,2.0", "1km")
        .or_("b")
        .within("3.0,4.0", "2km")
    )
    clause = CriteriaFilterProcessor.create_filter(criteria)
    must = clause["bool"]["must"]
    assert must[0]["geo_distance"]["a"] == {"lat": 1.0, "lon": 2.0}
    assert must[1]["bool"]["should"][0]["geo_distance"]["b"] == {
        "lat": 3.0,
        "lon": 4.0,
    }


def test_query_entries_have_no_filter():
    criteria = Criteria.where("name").is_("x")
    assert CriteriaFilterProcessor.create_filter(criteria) is None


@pytest.mark.parametrize(
    "build",
    [
        lambda: Criteria.where("l").within(GeoPoint(lat=1, lon=2), " "),
        lambda: Criteria.where("l").within(None, "1km"),
        lambda: Criteria.where("l").bounded_by("a"),
        lambda: Criteria.where("l").bounded_by("a", GeoPoint(lat=1, lon=2)),
        lambda: Criteria.where("l").bounded_by("a", "b", "c"),
        lambda: Criteria.where("l").intersects(None),
    ],
)
def test_invalid_filter_criteria_fails(build):
    with pytest.raises(ConfigurationError):
        build()


def test_geo_relation_needs_geojson():
    criteria = Criteria.where("area").intersects("not a shape")
    with pytest.raises(ConfigurationError):
        CriteriaFilterProcessor.create_filter(criteria)
