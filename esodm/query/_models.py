from __future__ import annotations

from enum import Enum
from typing import Any

from esodm.core import DataModel

from ._criteria import Criteria
from ._geo import GeoPoint
from ._highlight import HighlightQuery


class IndexCoordinates(DataModel):
    """Names of the indices an operation targets.

    Attributes:
        index_names: Index names, at least one.
    """

    index_names: list[str]

    @staticmethod
    def of(*index_names: str) -> IndexCoordinates:
        return IndexCoordinates(index_names=list(index_names))

    @property
    def index_name(self) -> str:
        return self.index_names[0]

    def to_path(self) -> str:
        return ",".join(self.index_names)

    def __str__(self) -> str:
        return self.to_path()


class Pageable(DataModel):
    """Page request.

    Attributes:
        page: Zero based page number.
        size: Page size.
    """

    page: int = 0
    size: int = 10

    @staticmethod
    def of(page: int, size: int) -> Pageable:
        return Pageable(page=page, size=size)

    @property
    def offset(self) -> int:
        return self.page * self.size

    def next(self) -> Pageable:
        return Pageable(page=self.page + 1, size=self.size)


class Direction(str, Enum):
    ASC = "asc"
    DESC = "desc"


class SortMode(str, Enum):
    MIN = "min"
    MAX = "max"
    SUM = "sum"
    AVG = "avg"
    MEDIAN = "median"


class NullHandling(str, Enum):
    NATIVE = "native"
    NULLS_FIRST = "nulls_first"
    NULLS_LAST = "nulls_last"


class Order(DataModel):
    """Sort order on a property.

    Attributes:
        property: Property or field name, "_score" sorts by relevance.
        direction: Sort direction.
        mode: Aggregation used for multi valued fields.
        unmapped_type: Type assumed when the field is not mapped.
        missing: Explicit value or placement for missing values.
        null_handling: Placement of documents without a value.
    """

    property: str
    direction: Direction = Direction.ASC
    mode: SortMode | None = None
    unmapped_type: str | None = None
    missing: str | None = None
    null_handling: NullHandling = NullHandling.NATIVE

    @staticmethod
    def asc(property: str) -> Order:
        return Order(property=property, direction=Direction.ASC)

    @staticmethod
    def desc(property: str) -> Order:
        return Order(property=property, direction=Direction.DESC)


class DistanceType(str, Enum):
    ARC = "arc"
    PLANE = "plane"


class GeoDistanceOrder(Order):
    """Sort by distance to a point.

    Attributes:
        geo_point: Origin of the distance.
        distance_type: Distance calculation.
        unit: Distance unit.
        ignore_unmapped: Treat unmapped fields as missing.
    """

    geo_point: GeoPoint
    distance_type: DistanceType = DistanceType.ARC
    mode: SortMode | None = SortMode.MIN
    unit: str = "m"
    ignore_unmapped: bool = False


class SourceFilter(DataModel):
    includes: list[str] | None = None
    excludes: list[str] | None = None


class SearchType(str, Enum):
    QUERY_THEN_FETCH = "query_then_fetch"
    DFS_QUERY_THEN_FETCH = "dfs_query_then_fetch"


class IndexBoost(DataModel):
    index_name: str
    boost: float


class RuntimeField(DataModel):
    """Field computed at query time.

    Attributes:
        name: Field name.
        type: Field type, for example keyword or double.
        script: Painless script emitting the value.
    """

    name: str
    type: str
    script: str | None = None

    def to_mapping(self) -> dict[str, Any]:
        mapping: dict[str, Any] = {"type": self.type}
        if self.script:
            mapping["script"] = {"source": self.script}
        return mapping


class ScriptField(DataModel):
    name: str
    script: str
    lang: str | None = None
    params: dict[str, Any] | None = None


class ScoreMode(str, Enum):
    DEFAULT = "default"
    AVG = "avg"
    MAX = "max"
    MIN = "min"
    TOTAL = "total"
    MULTIPLY = "multiply"


class RescorerQuery(DataModel):
    """Secondary scoring pass on the top results.

    Attributes:
        query: Rescore query, compiled like any other query.
        score_mode: How the scores are combined.
        window_size: Number of top documents rescored per shard.
        query_weight: Weight of the original query.
        rescore_query_weight: Weight of the rescore query.
    """

    query: Query
    score_mode: ScoreMode = ScoreMode.DEFAULT
    window_size: int | None = None
    query_weight: float | None = None
    rescore_query_weight: float | None = None


class PointInTime(DataModel):
    """Point in time a search runs against.

    Attributes:
        id: Point in time id returned when it was opened.
        keep_alive: How long to keep it open, for example "1m".
    """

    id: str
    keep_alive: str = "1m"


class Query(DataModel):
    """Search query settings shared by all query kinds.

    Attributes:
        pageable: Page request, None means unpaged.
        sort: Sort orders.
        fields: Fields returned through the fields option.
        stored_fields: Stored fields to return.
        source_filter: Source includes and excludes.
        track_total_hits: Track the exact total.
        track_total_hits_up_to: Track the total up to a bound.
        track_scores: Compute scores even when sorting.
        min_score: Minimum score, ignored unless positive.
        preference: Shard preference.
        route: Routing value.
        search_type: Search type.
        timeout: Search timeout, for example "5s".
        explain: Return score explanations.
        search_after: Sort values of the last hit of the previous page.
        indices_boost: Per index boosts.
        rescorer_queries: Rescore passes.
        runtime_fields: Runtime field mappings.
        highlight_query: Highlighting.
        request_cache: Use the shard request cache.
        max_results: Cap on returned documents, overrides the page size.
        scroll_time: Keep alive of a scroll, for example "1m".
        point_in_time: Point in time to search, replaces the indices.
    """

    pageable: Pageable | None = None
    sort: list[Order] = []
    fields: list[str] = []
    stored_fields: list[str] | None = None
    source_filter: SourceFilter | None = None
    track_total_hits: bool | None = None
    track_total_hits_up_to: int | None = None
    track_scores: bool = False
    min_score: float = 0.0
    preference: str | None = None
    route: str | None = None
    search_type: SearchType | None = SearchType.QUERY_THEN_FETCH
    timeout: str | None = None
    explain: bool = False
    search_after: list[Any] | None = None
    indices_boost: list[IndexBoost] = []
    rescorer_queries: list[RescorerQuery] = []
    runtime_fields: list[RuntimeField] = []
    highlight_query: HighlightQuery | None = None
    request_cache: bool | None = None
    max_results: int | None = None
    scroll_time: str | None = None
    point_in_time: PointInTime | None = None

    @property
    def is_paged(self) -> bool:
        return self.pageable is not None

    @property
    def is_limiting(self) -> bool:
        return self.max_results is not None

    def add_sort(self, *orders: Order) -> Query:
        self.sort = [*self.sort, *orders]
        return self

    def set_page(self, pageable: Pageable) -> Query:
        self.pageable = pageable
        return self

    def add_rescorer_query(self, rescorer_query: RescorerQuery) -> Query:
        self.rescorer_queries = [*self.rescorer_queries, rescorer_query]
        return self

    def add_runtime_field(self, runtime_field: RuntimeField) -> Query:
        self.runtime_fields = [*self.runtime_fields, runtime_field]
        return self


class CriteriaQuery(Query):
    criteria: Criteria

    def add_criteria(self, criteria: Criteria) -> CriteriaQuery:
        """Join another criteria with AND."""
        self.criteria = self.criteria.and_(criteria)
        return self


class StringQuery(Query):
    """Query given as a raw JSON query string."""

    source: str


class NativeSearchQuery(Query):
    """Query built from raw query DSL.

    Attributes:
        query: Query clause.
        filter: Post filter clause.
        sorts: Sort clauses appended after the typed sort orders.
        aggregations: Aggregations by name.
        suggest: Suggest section.
        highlight: Highlight section, used when no highlight query is set.
        collapse: Field collapsing.
        script_fields: Script fields.
        ext: Search extensions.
    """

    query: dict[str, Any] | None = None
    filter: dict[str, Any] | None = None
    sorts: list[dict[str, Any]] = []
    aggregations: dict[str, Any] = {}
    suggest: dict[str, Any] | None = None
    highlight: dict[str, Any] | None = None
    collapse: dict[str, Any] | None = None
    script_fields: list[ScriptField] = []
    ext: dict[str, Any] | None = None


RescorerQuery.model_rebuild()
