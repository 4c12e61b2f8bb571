# type: ignore

import pytest

from esodm.client import ResponseConverter
from esodm.core.exceptions import BulkFailureError, UncategorizedError


def item(op, id, seq_no=0, error=None):
    result = {"_index": "books", "_id": id}
    if error is not None:
        result["error"] = error
        result["status"] = 409
    else:
        result.update(_seq_no=seq_no, _primary_term=1, _version=1)
    return {op: result}


def test_bulk_response_in_request_order():
    results = ResponseConverter.bulk_response(
        {
            "errors": False,
            "items": [item("index", "1", 4), item("update", "2", 5)],
        }
    )
    assert [r.id for r in results] == ["1", "2"]
    assert results[1].seq_no == 5
    assert results[1].primary_term == 1
    assert results[1].index == "books"


def test_bulk_failures_raise_after_all_items():
    response = {
        "errors": True,
        "items": [
            item("index", "1", 4),
            item(
                "index",
                "2",
                error={
                    "type": "version_conflict_engine_exception",
                    "reason": "[2]: version conflict",
                },
            ),
            item("index", "3", 6),
            item("delete", "4", error={"reason": "gone"}),
        ],
    }
    with pytest.raises(BulkFailureError) as e:
        ResponseConverter.bulk_response(response)
    assert e.value.failed_documents == {
        "2": "version_conflict_engine_exception: [2]: version conflict",
        "4": "gone",
    }
    assert [r.id for r in e.value.results] == ["1", "3"]
    assert "failed_documents" in str(e.value)


def test_by_query_response():
    response = ResponseConverter.by_query_response(
        {
            "took": 12,
            "timed_out": False,
            "total": 3,
            "deleted": 3,
            "batches": 1,
            "version_conflicts": 0,
            "noops": 0,
            "failures": [],
            "throttled_millis": 0,
        }
    )
    assert response.deleted == 3
    assert response.total == 3
    assert response.failures == []


def test_indexed_object_information():
    info = ResponseConverter.indexed_object_information(
        {"_index": "books", "_id": "1", "_version": 2, "result": "updated"}
    )
    assert info.id == "1"
    assert info.version == 2
    assert info.seq_no is None


def test_multi_search_responses_keep_order():
    ok = {"hits": {"hits": []}, "status": 200}
    responses = ResponseConverter.multi_search_responses(
        {
            "responses": [
                ok,
                {
                    "error": {
                        "type": "index_not_found_exception",
                        "reason": "no such index [gone]",
                    },
                    "status": 404,
                },
                ok,
            ]
        },
        3,
    )
    assert responses == [ok, None, ok]


def test_multi_search_response_count_must_match():
    with pytest.raises(UncategorizedError):
        ResponseConverter.multi_search_responses({"responses": []}, 1)


def test_point_in_time_responses():
    assert ResponseConverter.point_in_time_id({"id": "pit-1"}) == "pit-1"
    with pytest.raises(UncategorizedError):
        ResponseConverter.point_in_time_id({})
    assert ResponseConverter.point_in_time_closed(
        {"succeeded": True, "num_freed": 1}
    )
    assert not ResponseConverter.point_in_time_closed({})
