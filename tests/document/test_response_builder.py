# type: ignore

import math

import pytest

from esodm.document import (
    CompletionOption,
    PhraseOption,
    SearchDocumentResponseBuilder,
    SuggestionKind,
    TermOption,
    TotalHitsRelation,
)


def hits(total=None, count=2, max_score=2.0):
    section = {
        "max_score": max_score,
        "hits": [
            {"_id": str(i), "_score": 1.0, "_source": {"n": i}}
            for i in range(count)
        ],
    }
    if total is not None:
        section["total"] = total
    return section


@pytest.mark.parametrize(
    "total,expected_total,expected_relation",
    [
        ({"value": 10, "relation": "eq"}, 10, TotalHitsRelation.EQUAL_TO),
        (
            {"value": 10000, "relation": "gte"},
            10000,
            TotalHitsRelation.GREATER_THAN_OR_EQUAL_TO,
        ),
        (7, 7, TotalHitsRelation.EQUAL_TO),
        (None, 2, TotalHitsRelation.OFF),
    ],
)
def test_total_hits(total, expected_total, expected_relation):
    response = SearchDocumentResponseBuilder.from_search_response(
        {"hits": hits(total)}
    )
    assert response.total_hits == expected_total
    assert response.total_hits_relation == expected_relation
    assert len(response.search_documents) == 2
    assert response.search_documents[1]["n"] == 1


def test_envelope():
    response = SearchDocumentResponseBuilder.from_search_response(
        {
            "_scroll_id": "s1",
            "pit_id": "p1",
            "hits": hits({"value": 2, "relation": "eq"}, max_score=None),
            "aggregations": {"by_n": {"buckets": []}},
        }
    )
    assert response.scroll_id == "s1"
    assert response.point_in_time_id == "p1"
    assert math.isnan(response.max_score)
    assert response.aggregations == {"by_n": {"buckets": []}}
    assert response.suggest is None


def test_empty_response():
    response = SearchDocumentResponseBuilder.from_search_response({})
    assert response.total_hits == 0
    assert response.search_documents == []


def test_typed_key_suggestions():
    suggest = {
        "term#spelling": [
            {
                "text": "dnue",
                "offset": 0,
                "length": 4,
                "options": [{"text": "dune", "score": 0.75, "freq": 3}],
            }
        ],
        "phrase#phrases": [
            {
                "text": "dnue book",
                "offset": 0,
                "length": 9,
                "options": [{"text": "dune book", "score": 0.5}],
            }
        ],
    }
    response = SearchDocumentResponseBuilder.from_search_response(
        {"hits": hits(), "suggest": suggest}
    )
    spelling = response.suggest.get_suggestion("spelling")
    assert spelling.kind == SuggestionKind.TERM
    option = spelling.entries[0].options[0]
    assert isinstance(option, TermOption)
    assert option.freq == 3
    phrases = response.suggest.get_suggestion("phrases")
    assert phrases.kind == SuggestionKind.PHRASE
    assert isinstance(phrases.entries[0].options[0], PhraseOption)
    assert not response.suggest.has_scored_docs


def test_completion_suggestion_creates_entities():
    suggest = {
        "completion#titles": [
            {
                "text": "du",
                "offset": 0,
                "length": 2,
                "options": [
                    {
                        "text": "Dune",
                        "_index": "books",
                        "_id": "1",
                        "_score": 2.0,
                        "_source": {"title": "Dune"},
                    }
                ],
            }
        ]
    }
    response = SearchDocumentResponseBuilder.from_search_response(
        {"hits": hits(), "suggest": suggest},
        entity_creator=lambda document: {"created": document["title"]},
    )
    suggestion = response.suggest.get_suggestion("titles")
    assert suggestion.kind == SuggestionKind.COMPLETION
    option = suggestion.entries[0].options[0]
    assert isinstance(option, CompletionOption)
    assert option.score == 2.0
    assert option.search_document.get_id() == "1"
    assert option.hit_entity == {"created": "Dune"}
    assert response.suggest.has_scored_docs


def test_completion_entity_failure_is_tolerated():
    def fail(document):
        raise ValueError("cannot create")

    suggest = {
        "completion#titles": [
            {
                "text": "du",
                "offset": 0,
                "length": 2,
                "options": [
                    {"text": "Dune", "_id": "1", "_source": {"a": 1}}
                ],
            }
        ]
    }
    response = SearchDocumentResponseBuilder.from_search_response(
        {"hits": hits(), "suggest": suggest}, entity_creator=fail
    )
    option = response.suggest.suggestions[0].entries[0].options[0]
    assert option.hit_entity is None
    assert option.search_document is not None


def test_untyped_suggestion_kind_from_options():
    suggest = {
        "spelling": [
            {
                "text": "dnue",
                "offset": 0,
                "length": 4,
                "options": [{"text": "dune", "score": 0.8, "freq": 1}],
            }
        ]
    }
    response = SearchDocumentResponseBuilder.from_search_response(
        {"hits": hits(), "suggest": suggest}
    )
    suggestion = response.suggest.get_suggestion("spelling")
    assert suggestion.kind == SuggestionKind.TERM
