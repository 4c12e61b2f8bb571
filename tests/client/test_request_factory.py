# type: ignore

import base64
import json
from typing import Annotated

import pytest
from pydantic import BaseModel

from esodm.client import INDEX_MAX_RESULT_WINDOW, RequestFactory
from esodm.core.exceptions import ConfigurationError
from esodm.document import SeqNoPrimaryTerm
from esodm.mapping import EntityConverter, Mapped, entity
from esodm.query import (
    BulkOptions,
    Criteria,
    CriteriaQuery,
    FieldType,
    GeoDistanceOrder,
    GeoPoint,
    Highlight,
    HighlightField,
    HighlightFieldParameters,
    HighlightQuery,
    IndexCoordinates,
    IndexQuery,
    NativeSearchQuery,
    NullHandling,
    Order,
    Pageable,
    PointInTime,
    Query,
    RefreshPolicy,
    ReindexRequest,
    Remote,
    RescorerQuery,
    SourceFilter,
    StringQuery,
    UpdateQuery,
)

INDEX = IndexCoordinates.of("books")


class Author(BaseModel):
    name: Annotated[str, Mapped("author_name")]


@entity(index="books")
class Book(BaseModel):
    id: str | None = None
    title: Annotated[str | None, Mapped("book_title")] = None
    tags: Annotated[list[str], Mapped(type=FieldType.KEYWORD)] = []
    authors: Annotated[list[Author], Mapped(type=FieldType.NESTED)] = []
    seq_no: SeqNoPrimaryTerm | None = None


class Note(BaseModel):
    text: str | None = None


@pytest.fixture
def factory() -> RequestFactory:
    return RequestFactory(EntityConverter())


def criteria_query(criteria: Criteria, **kwargs) -> CriteriaQuery:
    return CriteriaQuery(criteria=criteria, **kwargs)


def test_unpaged_search_uses_max_result_window(factory):
    query = criteria_query(Criteria.and_group())
    request = factory.search_request(query, Note, INDEX)
    assert request.api == "search"
    assert request.method == "POST"
    assert request.path == "/books/_search"
    assert request.body["from"] == 0
    assert request.body["size"] == INDEX_MAX_RESULT_WINDOW == 10_000
    assert request.body["query"] == {"match_all": {}}
    assert request.body["version"] is True
    assert request.body["track_scores"] is True
    assert "seq_no_primary_term" not in request.body


def test_paged_search(factory):
    query = criteria_query(
        Criteria.where("title").exists(), pageable=Pageable.of(2, 20)
    )
    request = factory.search_request(query, Book, INDEX)
    assert request.body["from"] == 40
    assert request.body["size"] == 20


def test_max_results_overrides_size(factory):
    query = criteria_query(
        Criteria.and_group(), pageable=Pageable.of(0, 20), max_results=3
    )
    request = factory.search_request(query, Book, INDEX)
    assert request.body["size"] == 3


def test_property_names_resolved_to_field_names(factory):
    query = criteria_query(Criteria.where("title").is_("dune"))
    request = factory.search_request(query, Book, INDEX)
    assert request.body["query"]["query_string"]["fields"] == ["book_title"]
    assert request.body["seq_no_primary_term"] is True


def test_in_on_keyword_property(factory):
    query = criteria_query(Criteria.where("tags").in_(["a", "b"]))
    request = factory.search_request(query, Book, INDEX)
    assert request.body["query"] == {
        "bool": {"must": [{"terms": {"tags": ["a", "b"]}}]}
    }


def test_in_on_dynamic_field_is_query_string(factory):
    query = criteria_query(Criteria.where("labels").in_(["a", "b"]))
    request = factory.search_request(query, Book, INDEX)
    assert request.body["query"] == {
        "query_string": {"query": '"a" "b"', "fields": ["labels"]}
    }


def test_nested_property_is_wrapped(factory):
    query = criteria_query(Criteria.where("authors.name").is_("herbert"))
    request = factory.search_request(query, Book, INDEX)
    nested = request.body["query"]["nested"]
    assert nested["path"] == "authors"
    assert nested["score_mode"] == "avg"
    assert nested["query"]["query_string"]["fields"] == [
        "authors.author_name"
    ]


def test_filter_goes_to_post_filter(factory):
    criteria = Criteria.where("location").within("1.0,2.0", "5km")
    request = factory.search_request(criteria_query(criteria), Book, INDEX)
    assert request.body["query"] == {"match_all": {}}
    assert "geo_distance" in request.body["post_filter"]


def test_sort_orders(factory):
    query = criteria_query(Criteria.and_group())
    query.add_sort(
        Order.desc("title"),
        Order.asc("_score"),
        Order(property="rank", null_handling=NullHandling.NULLS_LAST),
        GeoDistanceOrder(
            property="location", geo_point=GeoPoint(lat=1.0, lon=2.0)
        ),
    )
    request = factory.search_request(query, Book, INDEX)
    assert request.body["sort"] == [
        {"book_title": {"order": "desc"}},
        {"_score": {"order": "asc"}},
        {"rank": {"order": "asc", "missing": "_last"}},
        {
            "_geo_distance": {
                "location": {"lat": 1.0, "lon": 2.0},
                "order": "asc",
                "unit": "m",
                "distance_type": "arc",
                "mode": "min",
            }
        },
    ]


def test_highlight_resolves_field_names(factory):
    highlight = Highlight(
        fields=[
            HighlightField(
                name="title",
                parameters=HighlightFieldParameters(
                    fragment_size=10, matched_fields=["title", "summary"]
                ),
            )
        ]
    )
    query = criteria_query(
        Criteria.and_group(),
        highlight_query=HighlightQuery(highlight=highlight, entity_type=Book),
    )
    request = factory.search_request(query, Book, INDEX)
    assert request.body["highlight"] == {
        "fields": {
            "book_title": {
                "fragment_size": 10,
                "matched_fields": ["book_title", "summary"],
            }
        }
    }


def test_highlight_top_level_parameters(factory):
    highlight = Highlight.of("title", pre_tags=["<em>"], encoder="html")
    request = factory.search_request(
        criteria_query(
            Criteria.and_group(),
            highlight_query=HighlightQuery(highlight=highlight),
        ),
        Book,
        INDEX,
    )
    assert request.body["highlight"] == {
        "pre_tags": ["<em>"],
        "encoder": "html",
        "fields": {"title": {}},
    }


def test_search_settings(factory):
    query = criteria_query(
        Criteria.and_group(),
        source_filter=SourceFilter(includes=["title"]),
        fields=["title"],
        track_total_hits=True,
        track_total_hits_up_to=500,
        min_score=0.5,
        preference="_local",
        route="r1",
        explain=True,
        search_after=[1, "a"],
        request_cache=True,
        scroll_time="1m",
    )
    request = factory.search_request(query, Book, INDEX)
    body = request.body
    assert body["_source"] == {"includes": ["book_title"]}
    assert body["fields"] == ["book_title"]
    assert body["track_total_hits"] is True
    assert body["min_score"] == 0.5
    assert body["explain"] is True
    assert body["search_after"] == [1, "a"]
    assert request.params["preference"] == "_local"
    assert request.params["routing"] == "r1"
    assert request.params["scroll"] == "1m"
    assert request.to_query_params()["request_cache"] == "true"


def test_zero_min_score_is_left_out(factory):
    request = factory.search_request(
        criteria_query(Criteria.and_group()), Book, INDEX
    )
    assert "min_score" not in request.body


def test_rescorer_query_uses_field_names(factory):
    query = criteria_query(Criteria.and_group())
    query.add_rescorer_query(
        RescorerQuery(
            query=criteria_query(Criteria.where("title").exists()),
            window_size=50,
        )
    )
    request = factory.search_request(query, Book, INDEX)
    assert request.body["rescore"] == [
        {
            "query": {
                "rescore_query": {"exists": {"field": "book_title"}}
            },
            "window_size": 50,
        }
    ]


def test_native_query(factory):
    query = NativeSearchQuery(
        query={"term": {"a": 1}},
        filter={"term": {"b": 2}},
        aggregations={"by_a": {"terms": {"field": "a"}}},
        suggest={"s": {"text": "x", "term": {"field": "a"}}},
        sorts=[{"c": "desc"}],
    )
    request = factory.search_request(query, Note, INDEX)
    assert request.body["query"] == {"term": {"a": 1}}
    assert request.body["post_filter"] == {"term": {"b": 2}}
    assert request.body["aggregations"] == {
        "by_a": {"terms": {"field": "a"}}
    }
    assert request.body["sort"] == [{"c": "desc"}]
    assert request.params["typed_keys"] is True


def test_string_query_is_wrapped(factory):
    source = '{"match": {"title": "dune"}}'
    request = factory.search_request(
        StringQuery(source=source), Book, INDEX
    )
    encoded = request.body["query"]["wrapper"]["query"]
    assert base64.b64decode(encoded).decode("utf-8") == source


def test_unknown_query_type_fails(factory):
    with pytest.raises(ConfigurationError):
        factory.search_request(Query(), Book, INDEX)


def test_count_combines_query_and_filter(factory):
    criteria = (
        Criteria.where("title")
        .exists()
        .and_("location")
        .within("1.0,2.0", "5km")
    )
    request = factory.count_request(criteria_query(criteria), Book, INDEX)
    assert request.api == "count"
    query = request.body["query"]["bool"]
    assert query["must"] == [{"exists": {"field": "book_title"}}]
    assert "geo_distance" in query["filter"][0]


def test_index_request_with_id(factory):
    book = Book(id="1", title="Dune", tags=["sf"])
    request = factory.index_request(
        IndexQuery(id="1", object=book, version=3),
        INDEX,
        RefreshPolicy.WAIT_UNTIL,
    )
    assert request.method == "PUT"
    assert request.path == "/books/_doc/1"
    assert request.params == {
        "version": 3,
        "version_type": "external",
        "refresh": "wait_for",
    }
    assert request.body["book_title"] == "Dune"
    assert request.body["tags"] == ["sf"]
    assert request.body["_class"].endswith("Book")


def test_index_request_seq_no_takes_precedence(factory):
    request = factory.index_request(
        IndexQuery(source={"a": 1}, version=3, seq_no=5, primary_term=1),
        INDEX,
    )
    assert request.method == "POST"
    assert request.path == "/books/_doc"
    assert request.params == {"if_seq_no": 5, "if_primary_term": 1}


def test_index_request_needs_object_or_source(factory):
    with pytest.raises(ConfigurationError):
        factory.index_request(IndexQuery(id="1"), INDEX)


def test_bulk_request_lines(factory):
    request = factory.bulk_request(
        [
            IndexQuery(id="1", source={"a": 1}),
            IndexQuery(source={"a": 2}, seq_no=1, primary_term=2),
            UpdateQuery(id="3", document={"a": 3}),
        ],
        INDEX,
        BulkOptions(refresh_policy=RefreshPolicy.IMMEDIATE),
    )
    assert request.path == "/_bulk"
    assert request.body == [
        {"index": {"_index": "books", "_id": "1"}},
        {"a": 1},
        {
            "index": {
                "_index": "books",
                "if_seq_no": 1,
                "if_primary_term": 2,
            }
        },
        {"a": 2},
        {"update": {"_index": "books", "_id": "3"}},
        {"doc": {"a": 3}},
    ]
    assert request.params == {"refresh": "true"}


def test_update_request(factory):
    request = factory.update_request(
        UpdateQuery(
            id="1",
            script="ctx._source.n += params.n",
            params={"n": 1},
            retry_on_conflict=2,
        ),
        INDEX,
    )
    assert request.path == "/books/_update/1"
    assert request.body == {
        "script": {
            "source": "ctx._source.n += params.n",
            "params": {"n": 1},
        }
    }
    assert request.params == {"retry_on_conflict": 2}


def test_multi_get_ids(factory):
    request = factory.multi_get_request(["1", "2"], INDEX)
    assert request.body == {"ids": ["1", "2"]}


def test_multi_get_with_source_filter(factory):
    query = criteria_query(
        Criteria.and_group(), source_filter=SourceFilter(includes=["title"])
    )
    request = factory.multi_get_request(["1"], INDEX, query, Book)
    assert request.body == {
        "docs": [{"_id": "1", "_source": {"includes": ["book_title"]}}]
    }


def test_delete_by_query(factory):
    query = criteria_query(Criteria.where("title").exists(), max_results=5)
    request = factory.delete_by_query_request(query, Book, INDEX)
    assert request.path == "/books/_delete_by_query"
    assert request.body == {"query": {"exists": {"field": "book_title"}}}
    assert request.params == {"max_docs": 5}


def test_reindex_with_remote_serializes_query(factory):
    request = factory.reindex_request(
        ReindexRequest(
            source=IndexCoordinates.of("old"),
            dest=IndexCoordinates.of("new"),
            query=criteria_query(Criteria.where("title").exists()),
            remote=Remote(host="remote", port=9201),
        ),
        Book,
    )
    source = request.body["source"]
    assert source["remote"] == {"host": "http://remote:9201"}
    assert json.loads(source["query"]) == {
        "exists": {"field": "book_title"}
    }
    assert request.body["dest"] == {"index": "new"}


def test_reindex_with_remote_without_query(factory):
    request = factory.reindex_request(
        ReindexRequest(
            source=IndexCoordinates.of("old"),
            dest=IndexCoordinates.of("new"),
            remote=Remote(host="remote"),
        )
    )
    assert json.loads(request.body["source"]["query"]) == {"match_all": {}}


def test_local_reindex_keeps_query_clause(factory):
    request = factory.reindex_request(
        ReindexRequest(
            source=IndexCoordinates.of("a", "b"),
            dest=IndexCoordinates.of("c"),
            query=criteria_query(Criteria.where("x").exists()),
        )
    )
    assert request.body["source"] == {
        "index": ["a", "b"],
        "query": {"exists": {"field": "x"}},
    }


def test_scroll_and_clear_scroll(factory):
    scroll = factory.scroll_request("s1", "1m")
    assert scroll.body == {"scroll_id": "s1", "scroll": "1m"}
    clear = factory.clear_scroll_request(["s1", "s2"])
    assert clear.method == "DELETE"
    assert clear.body == {"scroll_id": ["s1", "s2"]}


def test_point_in_time_search_has_no_index(factory):
    query = criteria_query(
        Criteria.where("title").exists(),
        route="r1",
        preference="_local",
        point_in_time=PointInTime(id="pit-1", keep_alive="2m"),
    )
    request = factory.search_request(query, Book, INDEX)
    assert request.path == "/_search"
    assert request.index is None
    assert request.body["pit"] == {"id": "pit-1", "keep_alive": "2m"}
    assert "routing" not in request.params
    assert "preference" not in request.params
    assert "index" not in request.to_client_args()


def test_multi_search_lines(factory):
    request = factory.multi_search_request(
        [
            (
                criteria_query(Criteria.where("title").exists(), route="r"),
                Book,
                INDEX,
            ),
            (
                NativeSearchQuery(
                    query={"match_all": {}},
                    suggest={"s": {"text": "x", "term": {"field": "a"}}},
                ),
                Note,
                IndexCoordinates.of("notes", "archive"),
            ),
        ]
    )
    assert request.api == "msearch"
    assert request.path == "/_msearch"
    assert request.params == {"typed_keys": True}
    header, body, second_header, second_body = request.body
    assert header == {
        "index": "books",
        "routing": "r",
        "search_type": "query_then_fetch",
    }
    assert body["query"] == {"exists": {"field": "book_title"}}
    assert body["seq_no_primary_term"] is True
    assert second_header["index"] == "notes,archive"
    assert second_body["suggest"] == {
        "s": {"text": "x", "term": {"field": "a"}}
    }


def test_update_by_query(factory):
    query = criteria_query(
        Criteria.where("title").is_("dune"), scroll_time="2m"
    )
    request = factory.update_by_query_request(
        UpdateQuery(
            query=query,
            script="ctx._source.count++",
            max_docs=100,
            batch_size=50,
            abort_on_version_conflict=False,
            slices=2,
        ),
        INDEX,
        Book,
        RefreshPolicy.IMMEDIATE,
    )
    assert request.api == "update_by_query"
    assert request.path == "/books/_update_by_query"
    assert request.body["query"]["query_string"]["fields"] == ["book_title"]
    assert request.body["script"] == {"source": "ctx._source.count++"}
    assert request.body["max_docs"] == 100
    assert request.body["conflicts"] == "proceed"
    assert request.params == {
        "scroll": "2m",
        "refresh": True,
        "scroll_size": 50,
        "slices": 2,
    }


@pytest.mark.parametrize(
    "query_policy,default_policy,expected",
    [
        (None, None, None),
        (None, RefreshPolicy.WAIT_UNTIL, False),
        (RefreshPolicy.IMMEDIATE, RefreshPolicy.NONE, True),
    ],
)
def test_update_by_query_refresh(
    factory, query_policy, default_policy, expected
):
    request = factory.update_by_query_request(
        UpdateQuery(script="x", refresh_policy=query_policy),
        INDEX,
        refresh_policy=default_policy,
    )
    assert request.params.get("refresh") == expected
    assert "query" not in request.body


def test_single_update_needs_id(factory):
    with pytest.raises(ConfigurationError):
        factory.update_request(UpdateQuery(script="x"), INDEX)


def test_point_in_time_requests(factory):
    opened = factory.open_point_in_time_request(
        IndexCoordinates.of("books", "notes"), "5m", True
    )
    assert opened.path == "/books,notes/_pit"
    assert opened.to_query_params() == {
        "keep_alive": "5m",
        "ignore_unavailable": "true",
    }
    closed = factory.close_point_in_time_request("pit-1")
    assert closed.method == "DELETE"
    assert closed.to_client_args() == {"body": {"id": "pit-1"}}
