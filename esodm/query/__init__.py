from ._criteria import Criteria, CriteriaEntry, OperationKey
from ._field import Field, FieldType
from ._geo import (
    Box,
    Distance,
    GEOJSON_TYPES,
    GeoBox,
    GeoJson,
    GeoJsonGeometryCollection,
    GeoJsonLineString,
    GeoJsonMultiLineString,
    GeoJsonMultiPoint,
    GeoJsonMultiPolygon,
    GeoJsonPoint,
    GeoJsonPolygon,
    GeoPoint,
    Metrics,
    Point,
    to_geojson,
)
from ._highlight import (
    Highlight,
    HighlightField,
    HighlightFieldParameters,
    HighlightParameters,
    HighlightQuery,
    HighlightTopLevelParameters,
)
from ._models import (
    CriteriaQuery,
    Direction,
    DistanceType,
    GeoDistanceOrder,
    IndexBoost,
    IndexCoordinates,
    NativeSearchQuery,
    NullHandling,
    Order,
    Pageable,
    PointInTime,
    Query,
    RescorerQuery,
    RuntimeField,
    ScoreMode,
    ScriptField,
    SearchType,
    SortMode,
    SourceFilter,
    StringQuery,
)
from ._write import (
    BulkOptions,
    IndexQuery,
    OpType,
    RefreshPolicy,
    ReindexRequest,
    Remote,
    UpdateQuery,
)

__all__ = [
    "Box",
    "BulkOptions",
    "Criteria",
    "CriteriaEntry",
    "CriteriaQuery",
    "Direction",
    "Distance",
    "DistanceType",
    "Field",
    "FieldType",
    "GEOJSON_TYPES",
    "GeoBox",
    "GeoDistanceOrder",
    "GeoJson",
    "GeoJsonGeometryCollection",
    "GeoJsonLineString",
    "GeoJsonMultiLineString",
    "GeoJsonMultiPoint",
    "GeoJsonMultiPolygon",
    "GeoJsonPoint",
    "GeoJsonPolygon",
    "GeoPoint",
    "Highlight",
    "HighlightField",
    "HighlightFieldParameters",
    "HighlightParameters",
    "HighlightQuery",
    "HighlightTopLevelParameters",
    "IndexBoost",
    "IndexCoordinates",
    "IndexQuery",
    "Metrics",
    "NativeSearchQuery",
    "NullHandling",
    "OpType",
    "OperationKey",
    "Order",
    "Pageable",
    "Point",
    "PointInTime",
    "Query",
    "RefreshPolicy",
    "ReindexRequest",
    "Remote",
    "RescorerQuery",
    "RuntimeField",
    "ScoreMode",
    "ScriptField",
    "SearchType",
    "SortMode",
    "SourceFilter",
    "StringQuery",
    "UpdateQuery",
    "to_geojson",
]
