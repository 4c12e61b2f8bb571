from __future__ import annotations

import math
from typing import Any, Generic, TypeVar

from esodm.core import DataModel
from esodm.document import (
    Explanation,
    NestedMetaData,
    SearchDocument,
    SearchDocumentResponse,
    Suggest,
    TotalHitsRelation,
)
from esodm.mapping import EntityConverter

T = TypeVar("T")


class SearchHit(DataModel, Generic[T]):
    """One search hit with its mapped entity.

    Attributes:
        index: Index of the hit.
        id: Document id.
        score: Relevance score, NaN when not computed.
        sort_values: Sort values of the hit.
        content: Mapped entity.
        highlight_fields: Highlight fragments by property name.
        inner_hits: Inner hit responses by name.
        nested_metadata: Position of a nested hit.
        explanation: Score explanation.
        matched_queries: Names of the matching named queries.
        routing: Routing value.
    """

    index: str | None = None
    id: str | None = None
    score: float = math.nan
    sort_values: list[Any] = []
    content: T
    highlight_fields: dict[str, list[str]] = {}
    inner_hits: dict[str, SearchDocumentResponse] = {}
    nested_metadata: NestedMetaData | None = None
    explanation: Explanation | None = None
    matched_queries: list[str] = []
    routing: str | None = None

    def get_highlight_field(self, name: str) -> list[str]:
        return self.highlight_fields.get(name, [])


class SearchHits(DataModel, Generic[T]):
    """Mapped search result.

    Attributes:
        total_hits: Total number of hits.
        total_hits_relation: Whether the total is exact or a lower bound.
        max_score: Highest score, NaN when not computed.
        scroll_id: Scroll id to fetch the next page.
        point_in_time_id: Point in time id.
        search_hits: Hits in response order.
        aggregations: Aggregation results as returned by the engine.
        suggest: Suggestions.
    """

    total_hits: int = 0
    total_hits_relation: TotalHitsRelation = TotalHitsRelation.OFF
    max_score: float = math.nan
    scroll_id: str | None = None
    point_in_time_id: str | None = None
    search_hits: list[SearchHit[T]] = []
    aggregations: dict[str, Any] | None = None
    suggest: Suggest | None = None

    def has_search_hits(self) -> bool:
        return len(self.search_hits) > 0

    def get_content(self) -> list[T]:
        return [hit.content for hit in self.search_hits]


class SearchHitMapping(Generic[T]):
    """Maps search documents to search hits of an entity type."""

    def __init__(
        self, entity_type: type[T], converter: EntityConverter
    ) -> None:
        self.entity_type = entity_type
        self.converter = converter

    def map_hits(self, response: SearchDocumentResponse) -> SearchHits[T]:
        return SearchHits[T](
            total_hits=response.total_hits,
            total_hits_relation=response.total_hits_relation,
            max_score=response.max_score,
            scroll_id=response.scroll_id,
            point_in_time_id=response.point_in_time_id,
            search_hits=[
                self.map_hit(document)
                for document in response.search_documents
            ],
            aggregations=response.aggregations,
            suggest=response.suggest,
        )

    def map_hit(self, document: SearchDocument) -> SearchHit[T]:
        return SearchHit[T](
            index=document.index,
            id=document.get_id() if document.has_id() else None,
            score=document.score,
            sort_values=document.sort_values,
            content=self.converter.read(self.entity_type, document),
            highlight_fields=self._highlight_fields(document),
            inner_hits=document.inner_hits,
            nested_metadata=document.nested_metadata,
            explanation=document.explanation,
            matched_queries=document.matched_queries,
            routing=document.routing,
        )

    def _highlight_fields(
        self, document: SearchDocument
    ) -> dict[str, list[str]]:
        entity = self.converter.mapping_context.get_required_entity(
            self.entity_type
        )
        if entity is None:
            return dict(document.highlight_fields)
        fields = {}
        for field_name, fragments in document.highlight_fields.items():
            property = entity.get_property_by_field_name(field_name)
            fields[property.name if property else field_name] = fragments
        return fields
