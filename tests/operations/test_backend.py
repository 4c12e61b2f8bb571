# type: ignore

import json

import httpx
import pytest
from common.sync_and_async_client import SyncAndAsyncClient
from elastic_transport import (
    ApiResponseMeta,
    BaseAsyncNode,
    BaseNode,
    HttpHeaders,
)
from elastic_transport._node import NodeApiResponse
from pydantic import BaseModel

from esodm.core.exceptions import OptimisticLockingError
from esodm.document import SeqNoPrimaryTerm
from esodm.mapping import entity
from esodm.operations import (
    ElasticsearchBackend,
    ElasticsearchTemplate,
    RestBackend,
)

URL = "http://localhost:9200"

CONFLICT = {
    "error": {
        "root_cause": [
            {
                "type": "version_conflict_engine_exception",
                "reason": "[1]: version conflict, required seqNo [3]",
            }
        ],
        "type": "version_conflict_engine_exception",
        "reason": "[1]: version conflict, required seqNo [3]",
    },
    "status": 409,
}


@entity(index="books")
class Book(BaseModel):
    id: str | None = None
    title: str | None = None
    seq_no: SeqNoPrimaryTerm | None = None


class Cluster:
    """Answers requests by method and path, recording them."""

    def __init__(self, **routes):
        self.routes = routes
        self.calls = []

    def answer(self, method, target, body):
        path = target.split("?")[0]
        self.calls.append((method, path, body))
        return self.routes[f"{method} {path}"]

    def node_response(self, config, method, target, body):
        status, data = self.answer(method, target, body)
        meta = ApiResponseMeta(
            status=status,
            http_version="1.1",
            headers=HttpHeaders(
                {
                    "content-type": "application/json",
                    "x-elastic-product": "Elasticsearch",
                }
            ),
            duration=0.0,
            node=config,
        )
        return NodeApiResponse(meta, json.dumps(data).encode("utf-8"))

    def node_class(self):
        cluster = self

        class Node(BaseNode):
            def perform_request(
                self, method, target, body=None, headers=None, **kwargs
            ):
                return cluster.node_response(
                    self.config, method, target, body
                )

            def close(self):
                pass

        return Node

    def async_node_class(self):
        cluster = self

        class AsyncNode(BaseAsyncNode):
            async def perform_request(
                self, method, target, body=None, headers=None, **kwargs
            ):
                return cluster.node_response(
                    self.config, method, target, body
                )

            async def close(self):
                pass

        return AsyncNode

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.method == "HEAD":
            return httpx.Response(200)
        status, data = self.answer(
            request.method, request.url.path, request.content
        )
        return httpx.Response(status, json=data)


def create_backend(kind, async_call, cluster):
    if kind == "rest":
        return RestBackend(URL, transport=httpx.MockTransport(cluster.handler))
    node_class = (
        cluster.async_node_class() if async_call else cluster.node_class()
    )
    return ElasticsearchBackend(URL, nparams={"node_class": node_class})


class BackendSyncAndAsyncClient(SyncAndAsyncClient):
    def __init__(self, kind, async_call, **routes):
        self.cluster = Cluster(**routes)
        self.client = ElasticsearchTemplate(
            create_backend(kind, async_call, self.cluster)
        )
        self.async_call = async_call

    async def get(self, *args, **kwargs):
        return await self._execute_method(*args, **kwargs)

    async def save(self, *args, **kwargs):
        return await self._execute_method(*args, **kwargs)

    async def delete(self, *args, **kwargs):
        return await self._execute_method(*args, **kwargs)

    async def close(self, *args, **kwargs):
        return await self._execute_method(*args, **kwargs)


def not_found(id):
    return 404, {"_index": "books", "_id": id, "found": False}


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["elasticsearch", "rest"])
@pytest.mark.parametrize("async_call", [False, True])
async def test_get(kind: str, async_call: bool):
    client = BackendSyncAndAsyncClient(
        kind,
        async_call,
        **{
            "GET /books/_doc/1": (
                200,
                {
                    "_index": "books",
                    "_id": "1",
                    "_version": 2,
                    "_seq_no": 4,
                    "_primary_term": 1,
                    "found": True,
                    "_source": {"title": "Dune"},
                },
            )
        },
    )
    book = (await client.get("1", Book)).result
    assert book.id == "1"
    assert book.title == "Dune"
    assert book.seq_no == SeqNoPrimaryTerm(seq_no=4, primary_term=1)
    assert client.cluster.calls[0][:2] == ("GET", "/books/_doc/1")
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["elasticsearch", "rest"])
@pytest.mark.parametrize("async_call", [False, True])
async def test_get_missing_document(kind: str, async_call: bool):
    client = BackendSyncAndAsyncClient(
        kind, async_call, **{"GET /books/_doc/2": not_found("2")}
    )
    response = await client.get("2", Book)
    assert response.result is None
    assert response.native["result"]["found"] is False
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["elasticsearch", "rest"])
@pytest.mark.parametrize("async_call", [False, True])
async def test_delete_missing_document(kind: str, async_call: bool):
    _, body = not_found("2")
    client = BackendSyncAndAsyncClient(
        kind,
        async_call,
        **{"DELETE /books/_doc/2": (404, {**body, "result": "not_found"})},
    )
    assert (await client.delete("2", Book)).result == "not_found"
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["elasticsearch", "rest"])
@pytest.mark.parametrize("async_call", [False, True])
async def test_save_conflict(kind: str, async_call: bool):
    client = BackendSyncAndAsyncClient(
        kind, async_call, **{"PUT /books/_doc/1": (409, CONFLICT)}
    )
    book = Book(
        id="1",
        title="Dune",
        seq_no=SeqNoPrimaryTerm(seq_no=3, primary_term=1),
    )
    with pytest.raises(OptimisticLockingError):
        await client.save(book)
    await client.close()


@pytest.mark.asyncio
@pytest.mark.parametrize("kind", ["elasticsearch", "rest"])
@pytest.mark.parametrize("async_call", [False, True])
async def test_save_sends_document(kind: str, async_call: bool):
    client = BackendSyncAndAsyncClient(
        kind,
        async_call,
        **{
            "POST /books/_doc": (
                201,
                {
                    "_index": "books",
                    "_id": "generated",
                    "_version": 1,
                    "_seq_no": 0,
                    "_primary_term": 1,
                    "result": "created",
                },
            )
        },
    )
    book = (await client.save(Book(title="Dune"))).result
    assert book.id == "generated"
    method, path, body = client.cluster.calls[0]
    assert (method, path) == ("POST", "/books/_doc")
    assert json.loads(body)["title"] == "Dune"
    await client.close()


def test_elasticsearch_client_params():
    backend = ElasticsearchBackend(
        URL,
        api_key=("id", "key"),
        nparams={"request_timeout": 5},
    )
    assert backend._get_client_params() == {
        "hosts": URL,
        "api_key": ("id", "key"),
        "request_timeout": 5,
    }
