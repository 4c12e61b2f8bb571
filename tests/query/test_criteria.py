# type: ignore

import math

import pytest

from esodm.core.exceptions import ConfigurationError
from esodm.query import (
    Criteria,
    CriteriaEntry,
    Distance,
    Field,
    GeoJsonGeometryCollection,
    GeoJsonPoint,
    GeoJsonPolygon,
    GeoPoint,
    IndexCoordinates,
    Metrics,
    OperationKey,
    Pageable,
    Point,
    to_geojson,
)


def test_chain_is_shared():
    first = Criteria.where("a").is_(1)
    second = first.and_("b").is_(2)
    third = second.or_("c").is_(3)
    assert first.criteria_chain is third.criteria_chain
    assert [n.field.name for n in third.criteria_chain] == ["a", "b", "c"]
    assert [n.is_or for n in third.criteria_chain] == [False, False, True]


def test_and_with_criteria_copies_node():
    other = Criteria.where("b").greater_than(1).not_().boost(2.0)
    chained = Criteria.where("a").exists().and_(other)
    assert chained is not other
    assert chained.field.name == "b"
    assert chained.is_negating
    assert chained.boost_value == 2.0
    assert chained.query_criteria_entries == [
        CriteriaEntry(OperationKey.GREATER, 1)
    ]
    assert len(chained.criteria_chain) == 2
    assert len(other.criteria_chain) == 1


def test_groups_have_no_chain_entry():
    group = Criteria.or_group()
    assert group.is_or
    assert group.criteria_chain == []
    assert group.is_empty()
    group.add_sub_criteria(Criteria.where("a").exists())
    assert not group.is_empty()


def test_entries_are_split_by_kind():
    criteria = (
        Criteria.where("location")
        .exists()
        .within(GeoPoint(lat=1.0, lon=2.0), "1km")
    )
    assert [e.key for e in criteria.query_criteria_entries] == [
        OperationKey.EXISTS
    ]
    assert [e.key for e in criteria.filter_criteria_entries] == [
        OperationKey.WITHIN
    ]


@pytest.mark.parametrize(
    "build,key",
    [
        (lambda c, s: c.within(s), OperationKey.GEO_WITHIN),
        (lambda c, s: c.contains(s), OperationKey.GEO_CONTAINS),
        (lambda c, s: c.intersects(s), OperationKey.GEO_INTERSECTS),
        (lambda c, s: c.is_disjoint(s), OperationKey.GEO_IS_DISJOINT),
    ],
)
def test_geo_shape_operators(build, key):
    criteria = build(Criteria.where("area"), GeoJsonPoint.of(1.0, 2.0))
    assert criteria.filter_criteria_entries[0].key == key
    assert criteria.query_criteria_entries == []


@pytest.mark.parametrize(
    "values,expected",
    [
        ((["x", "y"],), ["x", "y"]),
        (("x", "y"), ["x", "y"]),
        (({"k"},), ["k"]),
        (("xy",), ["xy"]),
    ],
)
def test_in_accepts_iterables_and_varargs(values, expected):
    criteria = Criteria.where("a").in_(*values)
    assert criteria.query_criteria_entries[0].value == expected


def test_negative_boost_fails():
    with pytest.raises(ConfigurationError):
        Criteria.where("a").boost(-1)


def test_unset_boost_is_nan():
    assert math.isnan(Criteria.where("a").boost_value)


def test_field_object_is_kept():
    field = Field(name="authors.name", path="authors")
    assert Criteria.where(field).field is field


def test_repr():
    criteria = Criteria.where("a").is_(1).or_("b").exists().not_()
    assert repr(criteria) == (
        "Criteria(a[CriteriaEntry(EQUALS, 1)] "
        "OR NOT b[CriteriaEntry(EXISTS)])"
    )


@pytest.mark.parametrize(
    "distance,expected",
    [
        (Distance(value=5, metric=Metrics.KILOMETERS), "5km"),
        (Distance(value=2.7, metric=Metrics.MILES), "2mi"),
        (Distance(value=10), "10"),
    ],
)
def test_distance_str(distance, expected):
    assert str(distance) == expected


def test_polygon_ring_is_closed():
    polygon = GeoJsonPolygon.of(
        Point(x=0, y=0), Point(x=1, y=0), Point(x=1, y=1)
    )
    ring = polygon.coordinates[0]
    assert ring[0] == ring[-1]
    assert len(ring) == 4


def test_geometry_collection_to_geojson():
    collection = GeoJsonGeometryCollection(
        geometries=[GeoJsonPoint.of(1.0, 2.0)]
    )
    assert to_geojson(collection) == {
        "type": "GeometryCollection",
        "geometries": [{"type": "Point", "coordinates": [1.0, 2.0]}],
    }


def test_geo_point_conversions():
    point = GeoPoint(lat=1.5, lon=2.5)
    assert point.to_point() == Point(x=2.5, y=1.5)
    assert GeoPoint.from_point(Point(x=2.5, y=1.5)) == point


def test_pageable():
    page = Pageable.of(2, 20)
    assert page.offset == 40
    assert page.next().offset == 60


def test_index_coordinates():
    index = IndexCoordinates.of("books", "notes")
    assert index.to_path() == "books,notes"
    assert index.index_name == "books"
