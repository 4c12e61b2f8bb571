from __future__ import annotations

import math
from collections.abc import Mapping
from typing import Any, Callable

from esodm.core import warn

from ._adapters import DocumentAdapters
from ._document import SearchDocument
from ._response import (
    CompletionOption,
    PhraseOption,
    SearchDocumentResponse,
    Suggest,
    SuggestEntry,
    Suggestion,
    SuggestionKind,
    TermOption,
    TotalHitsRelation,
)

EntityCreator = Callable[[SearchDocument], Any]


class SearchDocumentResponseBuilder:
    @staticmethod
    def from_search_response(
        response: Mapping[str, Any],
        entity_creator: EntityCreator | None = None,
    ) -> SearchDocumentResponse:
        return SearchDocumentResponseBuilder.from_search_hits(
            hits=response.get("hits") or {},
            scroll_id=response.get("_scroll_id"),
            point_in_time_id=response.get("pit_id"),
            aggregations=response.get("aggregations"),
            suggest=response.get("suggest"),
            entity_creator=entity_creator,
        )

    @staticmethod
    def from_search_hits(
        hits: Mapping[str, Any],
        scroll_id: str | None,
        point_in_time_id: str | None,
        aggregations: dict[str, Any] | None,
        suggest: Mapping[str, Any] | None,
        entity_creator: EntityCreator | None,
    ) -> SearchDocumentResponse:
        """Build the response envelope from the ``hits`` section.

        Without a reported total the page size is used as total with
        an OFF relation, it is never reported as an exact count.
        """
        hit_list = hits.get("hits") or []
        total = hits.get("total")
        if isinstance(total, Mapping):
            total_hits = int(total.get("value", 0))
            total_hits_relation = SearchDocumentResponseBuilder._relation(
                total.get("relation")
            )
        elif isinstance(total, int):
            total_hits = total
            total_hits_relation = TotalHitsRelation.EQUAL_TO
        else:
            total_hits = len(hit_list)
            total_hits_relation = TotalHitsRelation.OFF

        max_score = hits.get("max_score")
        search_documents = [
            DocumentAdapters.from_search_hit(hit) for hit in hit_list
        ]
        return SearchDocumentResponse(
            total_hits=total_hits,
            total_hits_relation=total_hits_relation,
            max_score=math.nan if max_score is None else float(max_score),
            scroll_id=scroll_id,
            point_in_time_id=point_in_time_id,
            search_documents=search_documents,
            aggregations=aggregations,
            suggest=SearchDocumentResponseBuilder.suggest_from(
                suggest, entity_creator
            ),
        )

    @staticmethod
    def _relation(relation: str | None) -> TotalHitsRelation:
        if relation == "eq":
            return TotalHitsRelation.EQUAL_TO
        if relation == "gte":
            return TotalHitsRelation.GREATER_THAN_OR_EQUAL_TO
        return TotalHitsRelation.OFF

    @staticmethod
    def suggest_from(
        suggest: Mapping[str, Any] | None,
        entity_creator: EntityCreator | None,
    ) -> Suggest | None:
        if not suggest:
            return None
        suggestions: list[Suggestion] = []
        for key, entries in suggest.items():
            kind, name = SearchDocumentResponseBuilder._suggestion_kind(
                key, entries
            )
            suggestions.append(
                Suggestion(
                    name=name,
                    kind=kind,
                    entries=[
                        SearchDocumentResponseBuilder._suggest_entry(
                            kind, entry, entity_creator
                        )
                        for entry in entries
                    ],
                )
            )
        return Suggest(suggestions=suggestions)

    @staticmethod
    def _suggestion_kind(
        key: str, entries: list[Mapping[str, Any]]
    ) -> tuple[SuggestionKind, str]:
        # typed_keys responses prefix the name with the suggester kind
        if "#" in key:
            prefix, name = key.split("#", 1)
            try:
                return SuggestionKind(prefix), name
            except ValueError:
                pass
        for entry in entries:
            for option in entry.get("options") or []:
                if "_source" in option or "_id" in option:
                    return SuggestionKind.COMPLETION, key
                if "freq" in option:
                    return SuggestionKind.TERM, key
                return SuggestionKind.PHRASE, key
        return SuggestionKind.TERM, key

    @staticmethod
    def _suggest_entry(
        kind: SuggestionKind,
        entry: Mapping[str, Any],
        entity_creator: EntityCreator | None,
    ) -> SuggestEntry:
        options: list[Any] = []
        for option in entry.get("options") or []:
            if kind == SuggestionKind.TERM:
                options.append(
                    TermOption(
                        text=option["text"],
                        highlighted=option.get("highlighted"),
                        score=option.get("score"),
                        freq=option.get("freq"),
                        collate_match=option.get("collate_match"),
                    )
                )
            elif kind == SuggestionKind.PHRASE:
                options.append(
                    PhraseOption(
                        text=option["text"],
                        highlighted=option.get("highlighted"),
                        score=option.get("score"),
                        collate_match=option.get("collate_match"),
                    )
                )
            else:
                options.append(
                    SearchDocumentResponseBuilder._completion_option(
                        option, entity_creator
                    )
                )
        return SuggestEntry(
            text=entry.get("text", ""),
            offset=entry.get("offset", 0),
            length=entry.get("length", 0),
            options=options,
            cutoff_score=entry.get("cutoff_score"),
        )

    @staticmethod
    def _completion_option(
        option: Mapping[str, Any],
        entity_creator: EntityCreator | None,
    ) -> CompletionOption:
        search_document = None
        hit_entity = None
        if "_source" in option or "_id" in option:
            search_document = DocumentAdapters.from_search_hit(option)
            if entity_creator is not None:
                try:
                    hit_entity = entity_creator(search_document)
                except Exception as e:
                    warn("Error creating entity from SearchDocument: %s", e)
        score = option.get("score", option.get("_score"))
        return CompletionOption(
            text=option["text"],
            highlighted=option.get("highlighted"),
            score=score,
            collate_match=option.get("collate_match"),
            contexts=option.get("contexts") or {},
            search_document=search_document,
            hit_entity=hit_entity,
        )
