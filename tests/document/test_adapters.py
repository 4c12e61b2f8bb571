# type: ignore

import math

import pytest

from esodm.core.exceptions import MappingError, NotSupportedError
from esodm.document import (
    Document,
    DocumentAdapters,
    DocumentFieldAdapter,
    SearchDocument,
    TotalHitsRelation,
)


def test_get_response_with_source():
    document = DocumentAdapters.from_get_response(
        {
            "_index": "books",
            "_id": "1",
            "_version": 2,
            "_seq_no": 7,
            "_primary_term": 1,
            "found": True,
            "_source": {"title": "Dune", "pages": 412},
        }
    )
    assert isinstance(document, Document)
    assert dict(document) == {"title": "Dune", "pages": 412}
    assert document.index == "books"
    assert document.get_id() == "1"
    assert document.get_version() == 2
    assert document.get_seq_no() == 7
    assert document.get_primary_term() == 1


def test_get_response_without_version():
    document = DocumentAdapters.from_get_response(
        {"_index": "books", "_id": "1", "_source": {"a": 1}}
    )
    assert not document.has_version()
    assert not document.has_seq_no()
    with pytest.raises(MappingError):
        document.get_version()


def test_get_response_not_found():
    response = {"_index": "books", "_id": "1", "found": False}
    assert DocumentAdapters.from_get_response(response) is None


def test_get_response_with_fields_only():
    document = DocumentAdapters.from_get_response(
        {
            "_index": "books",
            "_id": "1",
            "_seq_no": 3,
            "_primary_term": 1,
            "found": True,
            "fields": {"title": ["Dune"], "tags": ["a", "b"], "none": []},
        }
    )
    assert isinstance(document, DocumentFieldAdapter)
    assert document["title"] == "Dune"
    assert document["tags"] == ["a", "b"]
    assert document["none"] is None
    assert document.get("missing") is None
    assert set(document) == {"title", "tags", "none"}
    assert document.has_seq_no()
    assert document.has_primary_term()
    assert not document.has_version()
    assert document.get_id() == "1"


def test_field_adapter_is_read_only():
    document = DocumentAdapters.from_document_fields(
        fields={"a": [1]},
        index="i",
        id="1",
        version=1,
        seq_no=0,
        primary_term=1,
    )
    assert document.has_version()
    with pytest.raises(NotSupportedError):
        document["a"] = 2
    with pytest.raises(NotSupportedError):
        document.set_id("2")


def test_multi_get_keeps_order_with_failures():
    items = DocumentAdapters.from_multi_get_response(
        {
            "docs": [
                {
                    "_index": "books",
                    "_id": "1",
                    "found": True,
                    "_source": {"n": 1},
                },
                {
                    "_index": "books",
                    "_id": "2",
                    "error": {
                        "type": "shard_not_available_exception",
                        "reason": "shard down",
                    },
                },
                {
                    "_index": "books",
                    "_id": "3",
                    "found": True,
                    "_source": {"n": 3},
                },
            ]
        }
    )
    assert len(items) == 3
    assert items[0].has_item() and items[0].item["n"] == 1
    assert items[1].item is None
    assert items[1].is_failed()
    assert items[1].failure.id == "2"
    assert items[1].failure.exception == (
        "shard_not_available_exception: shard down"
    )
    assert items[2].item["n"] == 3


def test_multi_get_missing_document_is_empty_item():
    items = DocumentAdapters.from_multi_get_response(
        {"docs": [{"_index": "books", "_id": "9", "found": False}]}
    )
    assert len(items) == 1
    assert not items[0].has_item()
    assert not items[0].is_failed()


def test_search_hit():
    hit = {
        "_index": "books",
        "_id": "1",
        "_score": 1.5,
        "_version": 4,
        "_seq_no": 2,
        "_primary_term": 1,
        "_routing": "r",
        "_source": {"title": "Dune"},
        "sort": [1.5, "dune"],
        "fields": {"script": [10]},
        "highlight": {"title": ["<em>Dune</em>"]},
        "matched_queries": ["q1"],
        "_nested": {
            "field": "authors",
            "offset": 0,
            "_nested": {"field": "books", "offset": 2},
        },
        "_explanation": {
            "value": 1.5,
            "description": "sum of",
            "details": [{"value": 1.0, "description": "weight"}],
        },
        "inner_hits": {
            "authors": {
                "hits": {
                    "total": {"value": 1, "relation": "eq"},
                    "max_score": 1.0,
                    "hits": [
                        {"_id": "1", "_score": 1.0, "_source": {"n": "a"}}
                    ],
                }
            }
        },
    }
    document = DocumentAdapters.from_search_hit(hit)
    assert isinstance(document, SearchDocument)
    assert document["title"] == "Dune"
    assert document.score == 1.5
    assert document.get_version() == 4
    assert document.get_seq_no() == 2
    assert document.routing == "r"
    assert document.sort_values == [1.5, "dune"]
    assert document.get_field_value("script") == 10
    assert document.highlight_fields == {"title": ["<em>Dune</em>"]}
    assert document.matched_queries == ["q1"]
    assert document.nested_metadata.field == "authors"
    assert document.nested_metadata.child.offset == 2
    assert document.explanation.details[0].description == "weight"
    inner = document.inner_hits["authors"]
    assert inner.total_hits == 1
    assert inner.total_hits_relation == TotalHitsRelation.EQUAL_TO
    assert inner.search_documents[0]["n"] == "a"


def test_search_hit_without_score_or_version():
    document = DocumentAdapters.from_search_hit(
        {"_index": "books", "_id": "1", "_version": -1, "_source": {"a": 1}}
    )
    assert math.isnan(document.score)
    assert not document.has_version()


def test_named_queries_with_scores():
    document = DocumentAdapters.from_search_hit(
        {"_id": "1", "_source": {"a": 1}, "matched_queries": {"q1": 1.0}}
    )
    assert document.matched_queries == ["q1"]
