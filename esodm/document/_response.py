from __future__ import annotations

import math
from enum import Enum
from typing import Any

from esodm.core import DataModel, FrozenDataModel

from ._document import SearchDocument


class TotalHitsRelation(str, Enum):
    EQUAL_TO = "eq"
    GREATER_THAN_OR_EQUAL_TO = "gte"
    OFF = "off"


class SuggestionKind(str, Enum):
    TERM = "term"
    PHRASE = "phrase"
    COMPLETION = "completion"


class TermOption(DataModel):
    text: str
    highlighted: str | None = None
    score: float | None = None
    freq: int | None = None
    collate_match: bool | None = None


class PhraseOption(DataModel):
    text: str
    highlighted: str | None = None
    score: float | None = None
    collate_match: bool | None = None


class CompletionOption(DataModel):
    """Completion option.

    Attributes:
        text: Suggested text.
        highlighted: Highlighted text.
        score: Option score.
        collate_match: Collate result.
        contexts: Matching contexts.
        search_document: Document the option was suggested from.
        hit_entity: Entity read from the document, None when the
            entity could not be created.
    """

    text: str
    highlighted: str | None = None
    score: float | None = None
    collate_match: bool | None = None
    contexts: dict[str, list[str]] = {}
    search_document: SearchDocument | None = None
    hit_entity: Any = None


class SuggestEntry(DataModel):
    """Suggestions for one token of the suggest text."""

    text: str
    offset: int
    length: int
    options: list[Any] = []
    cutoff_score: float | None = None


class Suggestion(DataModel):
    """Named suggestion result.

    Attributes:
        name: Suggester name.
        kind: Suggester kind.
        entries: One entry per token.
    """

    name: str
    kind: SuggestionKind
    entries: list[SuggestEntry] = []


class Suggest(DataModel):
    suggestions: list[Suggestion] = []

    def get_suggestion(self, name: str) -> Suggestion | None:
        for suggestion in self.suggestions:
            if suggestion.name == name:
                return suggestion
        return None

    @property
    def has_scored_docs(self) -> bool:
        for suggestion in self.suggestions:
            if suggestion.kind != SuggestionKind.COMPLETION:
                continue
            for entry in suggestion.entries:
                for option in entry.options:
                    if option.search_document is not None:
                        return True
        return False


class SearchDocumentResponse(FrozenDataModel):
    """Engine independent search response.

    Attributes:
        total_hits: Total hit count.
        total_hits_relation: Whether the total is exact or a lower bound.
        max_score: Maximum score, NaN when not computed.
        scroll_id: Scroll continuation token.
        point_in_time_id: Point in time continuation token.
        search_documents: Returned documents in order.
        aggregations: Raw aggregations.
        suggest: Suggestions.
    """

    total_hits: int = 0
    total_hits_relation: TotalHitsRelation = TotalHitsRelation.OFF
    max_score: float = math.nan
    scroll_id: str | None = None
    point_in_time_id: str | None = None
    search_documents: list[SearchDocument] = []
    aggregations: dict[str, Any] | None = None
    suggest: Suggest | None = None
