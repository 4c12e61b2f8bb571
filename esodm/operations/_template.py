"""
Document operations on entities.

Every operation has a synchronous and an async form. Requests are built
by the request factory, executed by a backend and the responses are
mapped back to entities. Engine and transport errors are translated
before they reach the caller.
"""

from __future__ import annotations

from typing import Any, AsyncIterator, Iterator, TypeVar

from pydantic import BaseModel

from esodm.client import (
    ByQueryResponse,
    EngineRequest,
    ExceptionTranslator,
    RequestFactory,
    ResponseConverter,
)
from esodm.core import Response, debug, warn
from esodm.core.exceptions import ConfigurationError
from esodm.document import (
    DocumentAdapters,
    IndexedObjectInformation,
    MultiGetItem,
    SearchDocument,
    SearchDocumentResponse,
    SearchDocumentResponseBuilder,
    SeqNoPrimaryTerm,
)
from esodm.mapping import EntityConverter, PersistentEntity
from esodm.query import (
    BulkOptions,
    IndexCoordinates,
    IndexQuery,
    Query,
    RefreshPolicy,
    ReindexRequest,
    UpdateQuery,
)

from ._backend import Backend
from ._search_hits import SearchHit, SearchHitMapping, SearchHits

T = TypeVar("T")

DEFAULT_SCROLL_TIME = "1m"


class ElasticsearchTemplate:
    """Entity operations against an engine.

    Args:
        backend: Backend executing the requests.
        converter: Entity converter, a default one when not given.
        refresh_policy: Refresh policy for single document writes.
    """

    backend: Backend
    converter: EntityConverter
    request_factory: RequestFactory
    refresh_policy: RefreshPolicy | None

    def __init__(
        self,
        backend: Backend,
        converter: EntityConverter | None = None,
        refresh_policy: RefreshPolicy | None = None,
    ) -> None:
        self.backend = backend
        self.converter = converter or EntityConverter()
        self.request_factory = RequestFactory(self.converter)
        self.refresh_policy = refresh_policy

    def index_coordinates_for(self, entity_type: type) -> IndexCoordinates:
        entity = self.converter.mapping_context.get_required_entity(
            entity_type
        )
        if entity is None or not entity.index:
            raise ConfigurationError(
                f"No index configured for {entity_type.__name__}"
            )
        return IndexCoordinates.of(entity.index)

    def _index(
        self,
        index: str | IndexCoordinates | None,
        entity_type: type | None,
    ) -> IndexCoordinates:
        if isinstance(index, IndexCoordinates):
            return index
        if index is not None:
            return IndexCoordinates.of(index)
        if entity_type is None:
            raise ConfigurationError("Index name must be specified")
        return self.index_coordinates_for(entity_type)

    def _perform(self, request: EngineRequest) -> dict[str, Any]:
        try:
            return self.backend.perform(request)
        except Exception as e:
            ExceptionTranslator.raise_translated(e)

    async def _aperform(self, request: EngineRequest) -> dict[str, Any]:
        try:
            return await self.backend.aperform(request)
        except Exception as e:
            ExceptionTranslator.raise_translated(e)

    # ----------------------------------------
    # Get
    # ----------------------------------------

    def get(
        self,
        id: str,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
        routing: str | None = None,
    ) -> Response[T | None]:
        request = self.request_factory.get_request(
            id, self._index(index, entity_type), routing
        )
        resp = self._perform(request)
        return Response(
            result=self._read_get(entity_type, resp),
            native=dict(result=resp),
        )

    async def aget(
        self,
        id: str,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
        routing: str | None = None,
    ) -> Response[T | None]:
        request = self.request_factory.get_request(
            id, self._index(index, entity_type), routing
        )
        resp = await self._aperform(request)
        return Response(
            result=self._read_get(entity_type, resp),
            native=dict(result=resp),
        )

    def _read_get(self, entity_type: type[T], resp: dict) -> T | None:
        document = DocumentAdapters.from_get_response(resp)
        if document is None:
            return None
        return self.converter.read(entity_type, document)

    def multi_get(
        self,
        ids: list[str],
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
        query: Query | None = None,
    ) -> Response[list[MultiGetItem[T]]]:
        """Get several documents, in the order of the ids.

        Missing documents are items without content, failed ones carry
        the failure.
        """
        request = self.request_factory.multi_get_request(
            ids, self._index(index, entity_type), query, entity_type
        )
        resp = self._perform(request)
        return Response(
            result=self._read_multi_get(entity_type, resp),
            native=dict(result=resp),
        )

    async def amulti_get(
        self,
        ids: list[str],
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
        query: Query | None = None,
    ) -> Response[list[MultiGetItem[T]]]:
        request = self.request_factory.multi_get_request(
            ids, self._index(index, entity_type), query, entity_type
        )
        resp = await self._aperform(request)
        return Response(
            result=self._read_multi_get(entity_type, resp),
            native=dict(result=resp),
        )

    def _read_multi_get(
        self, entity_type: type[T], resp: dict
    ) -> list[MultiGetItem[T]]:
        items: list[MultiGetItem[T]] = []
        for item in DocumentAdapters.from_multi_get_response(resp):
            items.append(
                MultiGetItem(
                    item=self.converter.read(entity_type, item.item),
                    failure=item.failure,
                )
            )
        return items

    # ----------------------------------------
    # Index
    # ----------------------------------------

    def save(
        self, entity: T, index: str | IndexCoordinates | None = None
    ) -> Response[T]:
        """Index an entity.

        Returns:
            The entity with the id, version and sequence number assigned
            by the engine. Frozen models are returned as updated copies.
        """
        index_query = self._index_query(entity)
        request = self.request_factory.index_request(
            index_query,
            self._index(index, type(entity)),
            self.refresh_policy,
        )
        resp = self._perform(request)
        info = ResponseConverter.indexed_object_information(resp)
        return Response(
            result=self._update_indexed_object(entity, info),
            native=dict(result=resp),
        )

    async def asave(
        self, entity: T, index: str | IndexCoordinates | None = None
    ) -> Response[T]:
        index_query = self._index_query(entity)
        request = self.request_factory.index_request(
            index_query,
            self._index(index, type(entity)),
            self.refresh_policy,
        )
        resp = await self._aperform(request)
        info = ResponseConverter.indexed_object_information(resp)
        return Response(
            result=self._update_indexed_object(entity, info),
            native=dict(result=resp),
        )

    def index(
        self,
        index_query: IndexQuery,
        index: str | IndexCoordinates | None = None,
    ) -> Response[IndexedObjectInformation]:
        request = self.request_factory.index_request(
            index_query,
            self._index(index, self._object_type(index_query)),
            self.refresh_policy,
        )
        resp = self._perform(request)
        info = ResponseConverter.indexed_object_information(resp)
        self._update_index_query(index_query, info)
        return Response(result=info, native=dict(result=resp))

    async def aindex(
        self,
        index_query: IndexQuery,
        index: str | IndexCoordinates | None = None,
    ) -> Response[IndexedObjectInformation]:
        request = self.request_factory.index_request(
            index_query,
            self._index(index, self._object_type(index_query)),
            self.refresh_policy,
        )
        resp = await self._aperform(request)
        info = ResponseConverter.indexed_object_information(resp)
        self._update_index_query(index_query, info)
        return Response(result=info, native=dict(result=resp))

    def save_all(
        self,
        entities: list[T],
        index: str | IndexCoordinates | None = None,
        options: BulkOptions | None = None,
    ) -> Response[list[T]]:
        queries = [self._index_query(entity) for entity in entities]
        resp = self.bulk_index(queries, index, options)
        return Response(
            result=[query.object for query in queries], native=resp.native
        )

    async def asave_all(
        self,
        entities: list[T],
        index: str | IndexCoordinates | None = None,
        options: BulkOptions | None = None,
    ) -> Response[list[T]]:
        queries = [self._index_query(entity) for entity in entities]
        resp = await self.abulk_index(queries, index, options)
        return Response(
            result=[query.object for query in queries], native=resp.native
        )

    def bulk_index(
        self,
        queries: list[IndexQuery],
        index: str | IndexCoordinates | None = None,
        options: BulkOptions | None = None,
    ) -> Response[list[IndexedObjectInformation]]:
        """Index documents in one bulk request.

        Raises:
            BulkFailureError:
                Some documents failed, the others are indexed.
        """
        if not queries:
            return Response(result=[])
        request = self.request_factory.bulk_request(
            list(queries),
            self._index(index, self._object_type(queries[0])),
            options,
        )
        resp = self._perform(request)
        infos = ResponseConverter.bulk_response(resp)
        self._update_index_queries(queries, infos)
        return Response(result=infos, native=dict(result=resp))

    async def abulk_index(
        self,
        queries: list[IndexQuery],
        index: str | IndexCoordinates | None = None,
        options: BulkOptions | None = None,
    ) -> Response[list[IndexedObjectInformation]]:
        if not queries:
            return Response(result=[])
        request = self.request_factory.bulk_request(
            list(queries),
            self._index(index, self._object_type(queries[0])),
            options,
        )
        resp = await self._aperform(request)
        infos = ResponseConverter.bulk_response(resp)
        self._update_index_queries(queries, infos)
        return Response(result=infos, native=dict(result=resp))

    def bulk_update(
        self,
        queries: list[UpdateQuery],
        index: str | IndexCoordinates,
        options: BulkOptions | None = None,
    ) -> Response[list[IndexedObjectInformation]]:
        if not queries:
            return Response(result=[])
        request = self.request_factory.bulk_request(
            list(queries), self._index(index, None), options
        )
        resp = self._perform(request)
        infos = ResponseConverter.bulk_response(resp)
        return Response(result=infos, native=dict(result=resp))

    async def abulk_update(
        self,
        queries: list[UpdateQuery],
        index: str | IndexCoordinates,
        options: BulkOptions | None = None,
    ) -> Response[list[IndexedObjectInformation]]:
        if not queries:
            return Response(result=[])
        request = self.request_factory.bulk_request(
            list(queries), self._index(index, None), options
        )
        resp = await self._aperform(request)
        infos = ResponseConverter.bulk_response(resp)
        return Response(result=infos, native=dict(result=resp))

    def _entity_of(self, tp: type) -> PersistentEntity | None:
        return self.converter.mapping_context.get_required_entity(tp)

    @staticmethod
    def _object_type(index_query: IndexQuery) -> type | None:
        if index_query.object is None:
            return None
        return type(index_query.object)

    def _index_query(self, entity: Any) -> IndexQuery:
        metadata = self._entity_of(type(entity))
        if metadata is None:
            raise ConfigurationError(
                f"{type(entity).__name__} is not an entity type"
            )
        index_query = IndexQuery(object=entity)
        if metadata.id_property is not None:
            id = getattr(entity, metadata.id_property.name, None)
            if id is not None:
                index_query.id = str(id)
        if metadata.version_property is not None:
            index_query.version = getattr(
                entity, metadata.version_property.name, None
            )
        if metadata.seq_no_primary_term_property is not None:
            seq_no: SeqNoPrimaryTerm | None = getattr(
                entity, metadata.seq_no_primary_term_property.name, None
            )
            if seq_no is not None:
                index_query.seq_no = seq_no.seq_no
                index_query.primary_term = seq_no.primary_term
        return index_query

    def _update_index_queries(
        self,
        queries: list[IndexQuery],
        infos: list[IndexedObjectInformation],
    ) -> None:
        for query, info in zip(queries, infos):
            self._update_index_query(query, info)

    def _update_index_query(
        self, index_query: IndexQuery, info: IndexedObjectInformation
    ) -> None:
        if index_query.object is not None:
            index_query.object = self._update_indexed_object(
                index_query.object, info
            )

    def _update_indexed_object(
        self, entity: T, info: IndexedObjectInformation
    ) -> T:
        if not isinstance(entity, BaseModel):
            return entity
        metadata = self._entity_of(type(entity))
        if metadata is None:
            return entity

        updates: dict[str, Any] = {}
        id_property = metadata.id_property
        if (
            id_property is not None
            and info.id is not None
            and id_property.actual_type in (str, object)
            and getattr(entity, id_property.name, None) is None
        ):
            updates[id_property.name] = info.id
        seq_no_property = metadata.seq_no_primary_term_property
        if (
            seq_no_property is not None
            and info.seq_no is not None
            and info.primary_term is not None
            and info.seq_no >= 0
            and info.primary_term > 0
        ):
            updates[seq_no_property.name] = SeqNoPrimaryTerm(
                seq_no=info.seq_no, primary_term=info.primary_term
            )
        version_property = metadata.version_property
        if version_property is not None and info.version is not None:
            updates[version_property.name] = info.version

        if not updates:
            return entity
        if entity.model_config.get("frozen"):
            return entity.model_copy(update=updates)
        for name, value in updates.items():
            setattr(entity, name, value)
        return entity

    # ----------------------------------------
    # Update and delete
    # ----------------------------------------

    def update(
        self,
        update_query: UpdateQuery,
        index: str | IndexCoordinates,
    ) -> Response[str]:
        """Update a document, returning the engine result name."""
        request = self.request_factory.update_request(
            update_query, self._index(index, None)
        )
        resp = self._perform(request)
        return Response(
            result=str(resp.get("result")), native=dict(result=resp)
        )

    async def aupdate(
        self,
        update_query: UpdateQuery,
        index: str | IndexCoordinates,
    ) -> Response[str]:
        request = self.request_factory.update_request(
            update_query, self._index(index, None)
        )
        resp = await self._aperform(request)
        return Response(
            result=str(resp.get("result")), native=dict(result=resp)
        )

    def delete(
        self,
        id: str,
        entity_type: type | None = None,
        index: str | IndexCoordinates | None = None,
        routing: str | None = None,
    ) -> Response[str]:
        """Delete a document by id, returning the engine result name."""
        request = self.request_factory.delete_request(
            id,
            self._index(index, entity_type),
            routing,
            self.refresh_policy,
        )
        resp = self._perform(request)
        return Response(
            result=str(resp.get("result")), native=dict(result=resp)
        )

    async def adelete(
        self,
        id: str,
        entity_type: type | None = None,
        index: str | IndexCoordinates | None = None,
        routing: str | None = None,
    ) -> Response[str]:
        request = self.request_factory.delete_request(
            id,
            self._index(index, entity_type),
            routing,
            self.refresh_policy,
        )
        resp = await self._aperform(request)
        return Response(
            result=str(resp.get("result")), native=dict(result=resp)
        )

    def delete_by_query(
        self,
        query: Query,
        entity_type: type | None = None,
        index: str | IndexCoordinates | None = None,
    ) -> Response[ByQueryResponse]:
        request = self.request_factory.delete_by_query_request(
            query, entity_type, self._index(index, entity_type)
        )
        resp = self._perform(request)
        return Response(
            result=ResponseConverter.by_query_response(resp),
            native=dict(result=resp),
        )

    async def adelete_by_query(
        self,
        query: Query,
        entity_type: type | None = None,
        index: str | IndexCoordinates | None = None,
    ) -> Response[ByQueryResponse]:
        request = self.request_factory.delete_by_query_request(
            query, entity_type, self._index(index, entity_type)
        )
        resp = await self._aperform(request)
        return Response(
            result=ResponseConverter.by_query_response(resp),
            native=dict(result=resp),
        )

    def reindex(
        self, request: ReindexRequest, entity_type: type | None = None
    ) -> Response[ByQueryResponse]:
        resp = self._perform(
            self.request_factory.reindex_request(request, entity_type)
        )
        return Response(
            result=ResponseConverter.by_query_response(resp),
            native=dict(result=resp),
        )

    async def areindex(
        self, request: ReindexRequest, entity_type: type | None = None
    ) -> Response[ByQueryResponse]:
        resp = await self._aperform(
            self.request_factory.reindex_request(request, entity_type)
        )
        return Response(
            result=ResponseConverter.by_query_response(resp),
            native=dict(result=resp),
        )

    def update_by_query(
        self,
        update_query: UpdateQuery,
        index: str | IndexCoordinates | None = None,
        entity_type: type | None = None,
    ) -> Response[ByQueryResponse]:
        """Update every document matching ``update_query.query``."""
        request = self.request_factory.update_by_query_request(
            update_query,
            self._index(index, entity_type),
            entity_type,
            self.refresh_policy,
        )
        resp = self._perform(request)
        return Response(
            result=ResponseConverter.by_query_response(resp),
            native=dict(result=resp),
        )

    async def aupdate_by_query(
        self,
        update_query: UpdateQuery,
        index: str | IndexCoordinates | None = None,
        entity_type: type | None = None,
    ) -> Response[ByQueryResponse]:
        request = self.request_factory.update_by_query_request(
            update_query,
            self._index(index, entity_type),
            entity_type,
            self.refresh_policy,
        )
        resp = await self._aperform(request)
        return Response(
            result=ResponseConverter.by_query_response(resp),
            native=dict(result=resp),
        )

    # ----------------------------------------
    # Search
    # ----------------------------------------

    def search(
        self,
        query: Query,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
    ) -> Response[SearchHits[T]]:
        request = self.request_factory.search_request(
            query, entity_type, self._index(index, entity_type)
        )
        resp = self._perform(request)
        return Response(
            result=self._map_hits(entity_type, resp),
            native=dict(result=resp),
        )

    async def asearch(
        self,
        query: Query,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
    ) -> Response[SearchHits[T]]:
        request = self.request_factory.search_request(
            query, entity_type, self._index(index, entity_type)
        )
        resp = await self._aperform(request)
        return Response(
            result=self._map_hits(entity_type, resp),
            native=dict(result=resp),
        )

    def search_one(
        self,
        query: Query,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
    ) -> Response[SearchHit[T] | None]:
        """First hit of a query, the query itself is left unchanged."""
        resp = self.search(
            query.model_copy(update={"max_results": 1}), entity_type, index
        )
        hits = resp.result.search_hits
        return Response(
            result=hits[0] if hits else None, native=resp.native
        )

    async def asearch_one(
        self,
        query: Query,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
    ) -> Response[SearchHit[T] | None]:
        resp = await self.asearch(
            query.model_copy(update={"max_results": 1}), entity_type, index
        )
        hits = resp.result.search_hits
        return Response(
            result=hits[0] if hits else None, native=resp.native
        )

    def count(
        self,
        query: Query,
        entity_type: type | None = None,
        index: str | IndexCoordinates | None = None,
    ) -> Response[int]:
        request = self.request_factory.count_request(
            query, entity_type, self._index(index, entity_type)
        )
        resp = self._perform(request)
        return Response(
            result=int(resp.get("count", 0)), native=dict(result=resp)
        )

    async def acount(
        self,
        query: Query,
        entity_type: type | None = None,
        index: str | IndexCoordinates | None = None,
    ) -> Response[int]:
        request = self.request_factory.count_request(
            query, entity_type, self._index(index, entity_type)
        )
        resp = await self._aperform(request)
        return Response(
            result=int(resp.get("count", 0)), native=dict(result=resp)
        )

    def multi_search(
        self,
        queries: list[Query],
        entity_types: type | list[type],
        index: str | IndexCoordinates | None = None,
    ) -> Response[list[SearchHits | None]]:
        """Run several searches in one request.

        Args:
            queries: Queries to run.
            entity_types: One entity type for all queries, or one per
                query.
            index: Index for all queries. Each query uses the index of
                its entity type when not given.

        Returns:
            Search hits per query, in order. A failed search is None.
        """
        searches = self._multi_search_params(queries, entity_types, index)
        resp = self._perform(
            self.request_factory.multi_search_request(searches)
        )
        return Response(
            result=self._read_multi_search(searches, resp),
            native=dict(result=resp),
        )

    async def amulti_search(
        self,
        queries: list[Query],
        entity_types: type | list[type],
        index: str | IndexCoordinates | None = None,
    ) -> Response[list[SearchHits | None]]:
        searches = self._multi_search_params(queries, entity_types, index)
        resp = await self._aperform(
            self.request_factory.multi_search_request(searches)
        )
        return Response(
            result=self._read_multi_search(searches, resp),
            native=dict(result=resp),
        )

    def _multi_search_params(
        self,
        queries: list[Query],
        entity_types: type | list[type],
        index: str | IndexCoordinates | None,
    ) -> list[tuple[Query, type, IndexCoordinates]]:
        if isinstance(entity_types, type):
            entity_types = [entity_types] * len(queries)
        if len(entity_types) != len(queries):
            raise ConfigurationError(
                "queries and entity types must have the same size"
            )
        return [
            (query, entity_type, self._index(index, entity_type))
            for query, entity_type in zip(queries, entity_types)
        ]

    def _read_multi_search(
        self,
        searches: list[tuple[Query, type, IndexCoordinates]],
        resp: dict[str, Any],
    ) -> list[SearchHits | None]:
        items = ResponseConverter.multi_search_responses(resp, len(searches))
        results: list[SearchHits | None] = []
        for (_, entity_type, _), item in zip(searches, items):
            if item is None:
                results.append(None)
            else:
                results.append(self._map_hits(entity_type, dict(item)))
        return results

    def open_point_in_time(
        self,
        index: str | IndexCoordinates,
        keep_alive: str = "1m",
        ignore_unavailable: bool = False,
    ) -> Response[str]:
        """Open a point in time, returning its id.

        Set the id on ``Query.point_in_time`` to search it.
        """
        request = self.request_factory.open_point_in_time_request(
            self._index(index, None), keep_alive, ignore_unavailable
        )
        resp = self._perform(request)
        return Response(
            result=ResponseConverter.point_in_time_id(resp),
            native=dict(result=resp),
        )

    async def aopen_point_in_time(
        self,
        index: str | IndexCoordinates,
        keep_alive: str = "1m",
        ignore_unavailable: bool = False,
    ) -> Response[str]:
        request = self.request_factory.open_point_in_time_request(
            self._index(index, None), keep_alive, ignore_unavailable
        )
        resp = await self._aperform(request)
        return Response(
            result=ResponseConverter.point_in_time_id(resp),
            native=dict(result=resp),
        )

    def close_point_in_time(self, id: str) -> Response[bool]:
        resp = self._perform(
            self.request_factory.close_point_in_time_request(id)
        )
        return Response(
            result=ResponseConverter.point_in_time_closed(resp),
            native=dict(result=resp),
        )

    async def aclose_point_in_time(self, id: str) -> Response[bool]:
        resp = await self._aperform(
            self.request_factory.close_point_in_time_request(id)
        )
        return Response(
            result=ResponseConverter.point_in_time_closed(resp),
            native=dict(result=resp),
        )

    def search_scroll(
        self,
        query: Query,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
    ) -> Iterator[SearchHit[T]]:
        """Iterate over all hits of a query using scroll requests.

        Every scroll id the engine returns is cleared once when the
        iteration ends or stops early. A failure to clear is raised after
        a complete iteration and only logged when the iteration stopped
        with an exception of its own.
        """
        index_coordinates = self._index(index, entity_type)
        scroll_time = query.scroll_time or DEFAULT_SCROLL_TIME
        query.scroll_time = scroll_time
        mapping = SearchHitMapping(entity_type, self.converter)
        scroll_ids: list[str] = []
        completed = False
        try:
            resp = self._perform(
                self.request_factory.search_request(
                    query, entity_type, index_coordinates
                )
            )
            while True:
                response = self._document_response(entity_type, resp)
                scroll_id = response.scroll_id
                if scroll_id is not None and scroll_id not in scroll_ids:
                    scroll_ids.append(scroll_id)
                if not response.search_documents:
                    break
                for document in response.search_documents:
                    yield mapping.map_hit(document)
                if scroll_id is None:
                    break
                resp = self._perform(
                    self.request_factory.scroll_request(
                        scroll_id, scroll_time
                    )
                )
            completed = True
        finally:
            if scroll_ids:
                self._clear_scroll(scroll_ids, raise_errors=completed)

    async def asearch_scroll(
        self,
        query: Query,
        entity_type: type[T],
        index: str | IndexCoordinates | None = None,
    ) -> AsyncIterator[SearchHit[T]]:
        index_coordinates = self._index(index, entity_type)
        scroll_time = query.scroll_time or DEFAULT_SCROLL_TIME
        query.scroll_time = scroll_time
        mapping = SearchHitMapping(entity_type, self.converter)
        scroll_ids: list[str] = []
        completed = False
        try:
            resp = await self._aperform(
                self.request_factory.search_request(
                    query, entity_type, index_coordinates
                )
            )
            while True:
                response = self._document_response(entity_type, resp)
                scroll_id = response.scroll_id
                if scroll_id is not None and scroll_id not in scroll_ids:
                    scroll_ids.append(scroll_id)
                if not response.search_documents:
                    break
                for document in response.search_documents:
                    yield mapping.map_hit(document)
                if scroll_id is None:
                    break
                resp = await self._aperform(
                    self.request_factory.scroll_request(
                        scroll_id, scroll_time
                    )
                )
            completed = True
        finally:
            if scroll_ids:
                await self._aclear_scroll(scroll_ids, raise_errors=completed)

    def _clear_scroll(self, scroll_ids: list[str], raise_errors: bool) -> None:
        debug("Clearing %d scroll ids", len(scroll_ids))
        request = self.request_factory.clear_scroll_request(scroll_ids)
        if raise_errors:
            self._perform(request)
            return
        # keep the exception that ended the iteration
        try:
            self._perform(request)
        except Exception as e:
            warn("Could not clear scroll ids %s: %s", scroll_ids, e)

    async def _aclear_scroll(
        self, scroll_ids: list[str], raise_errors: bool
    ) -> None:
        debug("Clearing %d scroll ids", len(scroll_ids))
        request = self.request_factory.clear_scroll_request(scroll_ids)
        if raise_errors:
            await self._aperform(request)
            return
        try:
            await self._aperform(request)
        except Exception as e:
            warn("Could not clear scroll ids %s: %s", scroll_ids, e)

    def _document_response(
        self, entity_type: type[T], resp: dict[str, Any]
    ) -> SearchDocumentResponse:
        def entity_creator(document: SearchDocument) -> T:
            return self.converter.read(entity_type, document)

        return SearchDocumentResponseBuilder.from_search_response(
            resp, entity_creator
        )

    def _map_hits(
        self, entity_type: type[T], resp: dict[str, Any]
    ) -> SearchHits[T]:
        mapping = SearchHitMapping(entity_type, self.converter)
        return mapping.map_hits(self._document_response(entity_type, resp))

    # ----------------------------------------
    # Lifecycle
    # ----------------------------------------

    def close(self) -> None:
        self.backend.close()

    async def aclose(self) -> None:
        await self.backend.aclose()
