"""
Builds engine requests from queries and write operations.

A request is described once as an ``EngineRequest`` and executed either
through the elasticsearch-py client (``api`` and keyword arguments) or
over plain HTTP (``method``, ``path``, query ``params`` and ``body``).
"""

from __future__ import annotations

import base64
import json
from typing import Any

from esodm.core import DataModel, debug
from esodm.core.exceptions import ConfigurationError
from esodm.document import Document
from esodm.mapping import EntityConverter
from esodm.query import (
    BulkOptions,
    CriteriaQuery,
    GeoDistanceOrder,
    Highlight,
    HighlightQuery,
    IndexCoordinates,
    IndexQuery,
    NativeSearchQuery,
    NullHandling,
    Order,
    Query,
    RefreshPolicy,
    ReindexRequest,
    RescorerQuery,
    ScoreMode,
    StringQuery,
    UpdateQuery,
)

from ._filter_processor import CriteriaFilterProcessor
from ._query_processor import CriteriaQueryProcessor

INDEX_MAX_RESULT_WINDOW = 10_000

SCORE_SORT = "_score"


class EngineRequest(DataModel):
    """Request to the engine.

    Attributes:
        api: Method name on the elasticsearch-py client.
        method: HTTP method.
        path: HTTP path, including the index.
        index: Target index names, comma separated.
        id: Document id.
        params: Query string parameters.
        body: Request body, a list of lines for ndjson bodies.
    """

    api: str
    method: str
    path: str
    index: str | None = None
    id: str | None = None
    params: dict[str, Any] = {}
    body: Any = None

    def to_client_args(self) -> dict[str, Any]:
        args: dict[str, Any] = {}
        if self.index is not None:
            args["index"] = self.index
        if self.id is not None:
            args["id"] = self.id
        if self.body is not None:
            args["body"] = self.body
        args.update(self.params)
        return args

    def to_query_params(self) -> dict[str, str]:
        params = {}
        for key, value in self.params.items():
            if isinstance(value, bool):
                params[key] = "true" if value else "false"
            else:
                params[key] = str(value)
        return params


class RequestFactory:
    """Creates engine requests.

    Args:
        converter: Resolves property names to field names.
    """

    converter: EntityConverter

    def __init__(self, converter: EntityConverter) -> None:
        self.converter = converter

    # ----------------------------------------
    # Search
    # ----------------------------------------

    def search_request(
        self,
        query: Query,
        entity_type: type | None,
        index: IndexCoordinates,
    ) -> EngineRequest:
        self.converter.update_query(query, entity_type)

        body: dict[str, Any] = {
            "version": True,
            "track_scores": True,
        }
        params: dict[str, Any] = {}

        self._apply_query(body, query)
        self._apply_paging(body, query)
        self._apply_settings(body, params, query, entity_type)

        if query.sort:
            body["sort"] = [
                self._sort(order, entity_type) for order in query.sort
            ]
        if isinstance(query, NativeSearchQuery) and query.sorts:
            body.setdefault("sort", []).extend(query.sorts)

        highlight = self._highlight(query)
        if highlight is not None:
            body["highlight"] = highlight

        if query.scroll_time is not None:
            params["scroll"] = query.scroll_time

        target: str | None = index.to_path()
        if query.point_in_time is not None:
            # the point in time fixes indices, routing and preference
            body["pit"] = {
                "id": query.point_in_time.id,
                "keep_alive": query.point_in_time.keep_alive,
            }
            params.pop("routing", None)
            params.pop("preference", None)
            target = None

        debug("Search request on %s: %s", target, body)
        return EngineRequest(
            api="search",
            method="POST",
            path=f"/{target}/_search" if target else "/_search",
            index=target,
            params=params,
            body=body,
        )

    def multi_search_request(
        self, searches: list[tuple[Query, type | None, IndexCoordinates]]
    ) -> EngineRequest:
        """Run several searches in one request.

        Each search is a header line with its indices and routing
        options followed by the body of the equivalent search request.
        """
        lines: list[dict[str, Any]] = []
        params: dict[str, Any] = {}
        for query, entity_type, index in searches:
            search = self.search_request(query, entity_type, index)
            header: dict[str, Any] = {}
            if search.index is not None:
                header["index"] = search.index
            for key in (
                "routing",
                "preference",
                "search_type",
                "request_cache",
            ):
                if key in search.params:
                    header[key] = search.params[key]
            if search.params.get("typed_keys"):
                params["typed_keys"] = True
            lines.append(header)
            lines.append(search.body)
        return EngineRequest(
            api="msearch",
            method="POST",
            path="/_msearch",
            params=params,
            body=lines,
        )

    def open_point_in_time_request(
        self,
        index: IndexCoordinates,
        keep_alive: str,
        ignore_unavailable: bool = False,
    ) -> EngineRequest:
        return EngineRequest(
            api="open_point_in_time",
            method="POST",
            path=f"/{index.to_path()}/_pit",
            index=index.to_path(),
            params={
                "keep_alive": keep_alive,
                "ignore_unavailable": ignore_unavailable,
            },
        )

    def close_point_in_time_request(self, id: str) -> EngineRequest:
        return EngineRequest(
            api="close_point_in_time",
            method="DELETE",
            path="/_pit",
            body={"id": id},
        )

    def count_request(
        self,
        query: Query,
        entity_type: type | None,
        index: IndexCoordinates,
    ) -> EngineRequest:
        self.converter.update_query(query, entity_type)
        body = {"query": self.filtered_query_clause(query)}
        params: dict[str, Any] = {}
        if query.route is not None:
            params["routing"] = query.route
        return EngineRequest(
            api="count",
            method="POST",
            path=f"/{index.to_path()}/_count",
            index=index.to_path(),
            params=params,
            body=body,
        )

    def scroll_request(
        self, scroll_id: str, scroll_time: str
    ) -> EngineRequest:
        return EngineRequest(
            api="scroll",
            method="POST",
            path="/_search/scroll",
            body={"scroll_id": scroll_id, "scroll": scroll_time},
        )

    def clear_scroll_request(self, scroll_ids: list[str]) -> EngineRequest:
        return EngineRequest(
            api="clear_scroll",
            method="DELETE",
            path="/_search/scroll",
            body={"scroll_id": list(scroll_ids)},
        )

    def query_clause(self, query: Query) -> dict[str, Any]:
        """Query clause of a query, ``match_all`` when it has none."""
        if isinstance(query, CriteriaQuery):
            clause = CriteriaQueryProcessor.create_query(query.criteria)
        elif isinstance(query, NativeSearchQuery):
            clause = query.query
        elif isinstance(query, StringQuery):
            encoded = base64.b64encode(query.source.encode("utf-8"))
            clause = {"wrapper": {"query": encoded.decode("ascii")}}
        else:
            raise ConfigurationError(
                f"Unsupported query type {type(query).__name__}"
            )
        return clause or {"match_all": {}}

    def filter_clause(self, query: Query) -> dict[str, Any] | None:
        if isinstance(query, CriteriaQuery):
            return CriteriaFilterProcessor.create_filter(query.criteria)
        if isinstance(query, NativeSearchQuery):
            return query.filter
        return None

    def filtered_query_clause(self, query: Query) -> dict[str, Any]:
        """Query clause with the filter clause, if any, as a bool filter.

        Used by requests that have no post filter.
        """
        query_clause = self.query_clause(query)
        filter_clause = self.filter_clause(query)
        if filter_clause is None:
            return query_clause
        return {"bool": {"must": [query_clause], "filter": [filter_clause]}}

    def _apply_query(self, body: dict[str, Any], query: Query) -> None:
        body["query"] = self.query_clause(query)
        filter_clause = self.filter_clause(query)
        if filter_clause is not None:
            body["post_filter"] = filter_clause

    @staticmethod
    def _apply_paging(body: dict[str, Any], query: Query) -> None:
        if query.pageable is not None:
            body["from"] = query.pageable.offset
            body["size"] = query.pageable.size
        else:
            body["from"] = 0
            body["size"] = INDEX_MAX_RESULT_WINDOW
        if query.max_results is not None:
            body["size"] = query.max_results

    def _apply_settings(
        self,
        body: dict[str, Any],
        params: dict[str, Any],
        query: Query,
        entity_type: type | None,
    ) -> None:
        if query.source_filter is not None:
            source: dict[str, Any] = {}
            if query.source_filter.includes:
                source["includes"] = query.source_filter.includes
            if query.source_filter.excludes:
                source["excludes"] = query.source_filter.excludes
            body["_source"] = source
        if query.fields:
            body["fields"] = list(query.fields)
        if query.stored_fields is not None:
            body["stored_fields"] = list(query.stored_fields)

        if query.track_total_hits is not None:
            body["track_total_hits"] = query.track_total_hits
        elif query.track_total_hits_up_to is not None:
            body["track_total_hits"] = query.track_total_hits_up_to

        if query.min_score > 0:
            body["min_score"] = query.min_score
        if query.preference is not None:
            params["preference"] = query.preference
        if query.route is not None:
            params["routing"] = query.route
        if query.search_type is not None:
            params["search_type"] = query.search_type.value
        if query.timeout is not None:
            body["timeout"] = query.timeout
        if query.explain:
            body["explain"] = True
        if query.search_after is not None:
            body["search_after"] = list(query.search_after)
        if query.indices_boost:
            body["indices_boost"] = [
                {b.index_name: b.boost} for b in query.indices_boost
            ]
        if query.rescorer_queries:
            body["rescore"] = [
                self._rescore(r, entity_type) for r in query.rescorer_queries
            ]
        if query.runtime_fields:
            body["runtime_mappings"] = {
                f.name: f.to_mapping() for f in query.runtime_fields
            }
        if query.request_cache is not None:
            params["request_cache"] = query.request_cache

        if entity_type is not None:
            entity = self.converter.mapping_context.get_required_entity(
                entity_type
            )
            if entity and entity.has_seq_no_primary_term_property():
                body["seq_no_primary_term"] = True

        if isinstance(query, NativeSearchQuery):
            if query.script_fields:
                body["script_fields"] = {
                    f.name: {
                        "script": self._script(f.script, f.lang, f.params)
                    }
                    for f in query.script_fields
                }
            if query.collapse is not None:
                body["collapse"] = query.collapse
            if query.aggregations:
                body["aggregations"] = query.aggregations
            if query.suggest is not None:
                body["suggest"] = query.suggest
                params["typed_keys"] = True
            if query.ext is not None:
                body["ext"] = query.ext

    def _rescore(
        self, rescorer: RescorerQuery, entity_type: type | None
    ) -> dict[str, Any]:
        self.converter.update_query(rescorer.query, entity_type)
        rescore_query: dict[str, Any] = {
            "rescore_query": self.query_clause(rescorer.query)
        }
        if rescorer.score_mode != ScoreMode.DEFAULT:
            rescore_query["score_mode"] = rescorer.score_mode.value
        if rescorer.query_weight is not None:
            rescore_query["query_weight"] = rescorer.query_weight
        if rescorer.rescore_query_weight is not None:
            rescore_query["rescore_query_weight"] = (
                rescorer.rescore_query_weight
            )
        rescore: dict[str, Any] = {"query": rescore_query}
        if rescorer.window_size is not None:
            rescore["window_size"] = rescorer.window_size
        return rescore

    def _sort(self, order: Order, entity_type: type | None) -> dict[str, Any]:
        direction = order.direction.value
        if order.property == SCORE_SORT:
            return {SCORE_SORT: {"order": direction}}

        field_name = self.converter.get_field_name(entity_type, order.property)
        if isinstance(order, GeoDistanceOrder):
            sort: dict[str, Any] = {
                field_name: {
                    "lat": order.geo_point.lat,
                    "lon": order.geo_point.lon,
                },
                "order": direction,
                "unit": order.unit,
                "distance_type": order.distance_type.value,
            }
            if order.mode is not None:
                sort["mode"] = order.mode.value
            if order.ignore_unmapped:
                sort["ignore_unmapped"] = True
            return {"_geo_distance": sort}

        options: dict[str, Any] = {"order": direction}
        if order.mode is not None:
            options["mode"] = order.mode.value
        if order.unmapped_type is not None:
            options["unmapped_type"] = order.unmapped_type
        if order.null_handling == NullHandling.NULLS_FIRST:
            options["missing"] = "_first"
        elif order.null_handling == NullHandling.NULLS_LAST:
            options["missing"] = "_last"
        elif order.missing is not None:
            options["missing"] = order.missing
        return {field_name: options}

    def _highlight(self, query: Query) -> dict[str, Any] | None:
        highlight_query = query.highlight_query
        if highlight_query is not None:
            return self.highlight(highlight_query)
        if isinstance(query, NativeSearchQuery):
            return query.highlight
        return None

    def highlight(self, highlight_query: HighlightQuery) -> dict[str, Any]:
        highlight: Highlight = highlight_query.highlight
        entity_type = highlight_query.entity_type
        result: dict[str, Any] = {}
        if highlight.parameters is not None:
            result.update(highlight.parameters.to_dict(exclude_none=True))

        fields: dict[str, Any] = {}
        for field in highlight.fields:
            options: dict[str, Any] = {}
            if field.parameters is not None:
                options = field.parameters.to_dict(exclude_none=True)
                if field.parameters.matched_fields:
                    options["matched_fields"] = [
                        self.converter.get_field_name(entity_type, name)
                        for name in field.parameters.matched_fields
                    ]
            name = self.converter.get_field_name(entity_type, field.name)
            fields[name] = options
        result["fields"] = fields
        return result

    @staticmethod
    def _script(
        source: str, lang: str | None, params: dict[str, Any] | None
    ) -> dict[str, Any]:
        script: dict[str, Any] = {"source": source}
        if lang is not None:
            script["lang"] = lang
        if params:
            script["params"] = params
        return script

    # ----------------------------------------
    # Documents
    # ----------------------------------------

    def get_request(
        self, id: str, index: IndexCoordinates, routing: str | None = None
    ) -> EngineRequest:
        params = {"routing": routing} if routing is not None else {}
        return EngineRequest(
            api="get",
            method="GET",
            path=f"/{index.index_name}/_doc/{id}",
            index=index.index_name,
            id=id,
            params=params,
        )

    def multi_get_request(
        self,
        ids: list[str],
        index: IndexCoordinates,
        query: Query | None = None,
        entity_type: type | None = None,
    ) -> EngineRequest:
        """Get several documents by id, keeping the order of the ids."""
        doc_options: dict[str, Any] = {}
        if query is not None:
            self.converter.update_query(query, entity_type)
            source_filter = query.source_filter
            if source_filter is not None:
                source: dict[str, Any] = {}
                if source_filter.includes:
                    source["includes"] = source_filter.includes
                if source_filter.excludes:
                    source["excludes"] = source_filter.excludes
                doc_options["_source"] = source
            if query.stored_fields:
                doc_options["stored_fields"] = list(query.stored_fields)
            if query.route is not None:
                doc_options["routing"] = query.route
        body: dict[str, Any]
        if doc_options:
            body = {"docs": [{"_id": id, **doc_options} for id in ids]}
        else:
            body = {"ids": list(ids)}
        return EngineRequest(
            api="mget",
            method="POST",
            path=f"/{index.index_name}/_mget",
            index=index.index_name,
            body=body,
        )

    def document_source(self, index_query: IndexQuery) -> dict[str, Any]:
        if index_query.source is not None:
            return dict(index_query.source)
        if index_query.object is None:
            raise ConfigurationError("Index query needs an object or source")
        return self.converter.write(index_query.object, Document()).to_dict()

    def index_request(
        self,
        index_query: IndexQuery,
        index: IndexCoordinates,
        refresh_policy: RefreshPolicy | None = None,
    ) -> EngineRequest:
        """Index one document.

        Sequence number and primary term take precedence over an external
        version for optimistic locking.
        """
        params: dict[str, Any] = {}
        if index_query.routing is not None:
            params["routing"] = index_query.routing
        if index_query.op_type is not None:
            params["op_type"] = index_query.op_type.value
        if (
            index_query.seq_no is not None
            and index_query.primary_term is not None
        ):
            params["if_seq_no"] = index_query.seq_no
            params["if_primary_term"] = index_query.primary_term
        elif index_query.version is not None:
            params["version"] = index_query.version
            params["version_type"] = "external"
        if refresh_policy is not None:
            params["refresh"] = refresh_policy.value

        index_name = index.index_name
        if index_query.id is not None:
            method = "PUT"
            path = f"/{index_name}/_doc/{index_query.id}"
        else:
            method = "POST"
            path = f"/{index_name}/_doc"
        return EngineRequest(
            api="index",
            method=method,
            path=path,
            index=index_name,
            id=index_query.id,
            params=params,
            body=self.document_source(index_query),
        )

    def bulk_request(
        self,
        queries: list[IndexQuery | UpdateQuery],
        index: IndexCoordinates,
        options: BulkOptions | None = None,
    ) -> EngineRequest:
        lines: list[dict[str, Any]] = []
        for query in queries:
            if isinstance(query, UpdateQuery):
                if query.id is None:
                    raise ConfigurationError(
                        "Update query needs a document id"
                    )
                action: dict[str, Any] = {
                    "_index": index.index_name,
                    "_id": query.id,
                }
                if query.routing is not None:
                    action["routing"] = query.routing
                if query.retry_on_conflict is not None:
                    action["retry_on_conflict"] = query.retry_on_conflict
                if query.if_seq_no is not None:
                    action["if_seq_no"] = query.if_seq_no
                    action["if_primary_term"] = query.if_primary_term
                lines.append({"update": action})
                lines.append(self._update_body(query))
                continue

            op_type = query.op_type.value if query.op_type else "index"
            action = {"_index": index.index_name}
            if query.id is not None:
                action["_id"] = query.id
            if query.routing is not None:
                action["routing"] = query.routing
            if query.seq_no is not None and query.primary_term is not None:
                action["if_seq_no"] = query.seq_no
                action["if_primary_term"] = query.primary_term
            elif query.version is not None:
                action["version"] = query.version
                action["version_type"] = "external"
            lines.append({op_type: action})
            lines.append(self.document_source(query))

        params: dict[str, Any] = {}
        if options is not None:
            if options.timeout is not None:
                params["timeout"] = options.timeout
            if options.refresh_policy is not None:
                params["refresh"] = options.refresh_policy.value
            if options.pipeline is not None:
                params["pipeline"] = options.pipeline
            if options.routing is not None:
                params["routing"] = options.routing
            if options.wait_for_active_shards is not None:
                params["wait_for_active_shards"] = (
                    options.wait_for_active_shards
                )
        return EngineRequest(
            api="bulk",
            method="POST",
            path="/_bulk",
            params=params,
            body=lines,
        )

    def update_request(
        self, update_query: UpdateQuery, index: IndexCoordinates
    ) -> EngineRequest:
        if update_query.id is None:
            raise ConfigurationError("Update query needs a document id")
        params: dict[str, Any] = {}
        if update_query.routing is not None:
            params["routing"] = update_query.routing
        if update_query.retry_on_conflict is not None:
            params["retry_on_conflict"] = update_query.retry_on_conflict
        if update_query.if_seq_no is not None:
            params["if_seq_no"] = update_query.if_seq_no
        if update_query.if_primary_term is not None:
            params["if_primary_term"] = update_query.if_primary_term
        if update_query.timeout is not None:
            params["timeout"] = update_query.timeout
        if update_query.refresh_policy is not None:
            params["refresh"] = update_query.refresh_policy.value
        return EngineRequest(
            api="update",
            method="POST",
            path=f"/{index.index_name}/_update/{update_query.id}",
            index=index.index_name,
            id=update_query.id,
            params=params,
            body=self._update_body(update_query),
        )

    def _update_body(self, update_query: UpdateQuery) -> dict[str, Any]:
        body: dict[str, Any] = {}
        if update_query.script is not None:
            body["script"] = self._script(
                update_query.script, update_query.lang, update_query.params
            )
        if update_query.document is not None:
            body["doc"] = update_query.document
        if update_query.upsert is not None:
            body["upsert"] = update_query.upsert
        if update_query.doc_as_upsert is not None:
            body["doc_as_upsert"] = update_query.doc_as_upsert
        if update_query.scripted_upsert is not None:
            body["scripted_upsert"] = update_query.scripted_upsert
        if update_query.fetch_source is not None:
            body["_source"] = update_query.fetch_source
        return body

    def delete_request(
        self,
        id: str,
        index: IndexCoordinates,
        routing: str | None = None,
        refresh_policy: RefreshPolicy | None = None,
    ) -> EngineRequest:
        params: dict[str, Any] = {}
        if routing is not None:
            params["routing"] = routing
        if refresh_policy is not None:
            params["refresh"] = refresh_policy.value
        return EngineRequest(
            api="delete",
            method="DELETE",
            path=f"/{index.index_name}/_doc/{id}",
            index=index.index_name,
            id=id,
            params=params,
        )

    def delete_by_query_request(
        self,
        query: Query,
        entity_type: type | None,
        index: IndexCoordinates,
    ) -> EngineRequest:
        self.converter.update_query(query, entity_type)
        params: dict[str, Any] = {}
        if query.route is not None:
            params["routing"] = query.route
        if query.max_results is not None:
            params["max_docs"] = query.max_results
        return EngineRequest(
            api="delete_by_query",
            method="POST",
            path=f"/{index.to_path()}/_delete_by_query",
            index=index.to_path(),
            params=params,
            body={"query": self.filtered_query_clause(query)},
        )

    def update_by_query_request(
        self,
        update_query: UpdateQuery,
        index: IndexCoordinates,
        entity_type: type | None = None,
        refresh_policy: RefreshPolicy | None = None,
    ) -> EngineRequest:
        """Update all documents matching the query of ``update_query``.

        The engine only accepts an immediate refresh here, any other
        refresh policy is sent as no refresh.
        """
        body: dict[str, Any] = {}
        params: dict[str, Any] = {}
        query = update_query.query
        if query is not None:
            self.converter.update_query(query, entity_type)
            body["query"] = self.filtered_query_clause(query)
            if query.scroll_time is not None:
                params["scroll"] = query.scroll_time
        if update_query.script is not None:
            body["script"] = self._script(
                update_query.script, update_query.lang, update_query.params
            )
        if update_query.max_docs is not None:
            body["max_docs"] = update_query.max_docs
        if update_query.abort_on_version_conflict is not None:
            abort = update_query.abort_on_version_conflict
            body["conflicts"] = "abort" if abort else "proceed"

        refresh = update_query.refresh_policy or refresh_policy
        if refresh is not None:
            params["refresh"] = refresh == RefreshPolicy.IMMEDIATE
        if update_query.routing is not None:
            params["routing"] = update_query.routing
        if update_query.batch_size is not None:
            params["scroll_size"] = update_query.batch_size
        if update_query.pipeline is not None:
            params["pipeline"] = update_query.pipeline
        if update_query.requests_per_second is not None:
            params["requests_per_second"] = update_query.requests_per_second
        if update_query.slices is not None:
            params["slices"] = update_query.slices
        if update_query.timeout is not None:
            params["timeout"] = update_query.timeout
        if update_query.wait_for_active_shards is not None:
            params["wait_for_active_shards"] = (
                update_query.wait_for_active_shards
            )
        return EngineRequest(
            api="update_by_query",
            method="POST",
            path=f"/{index.to_path()}/_update_by_query",
            index=index.to_path(),
            params=params,
            body=body,
        )

    def reindex_request(
        self, request: ReindexRequest, entity_type: type | None = None
    ) -> EngineRequest:
        """Reindex documents.

        With a remote source the compiled query is sent serialized, the
        way the remote cluster expects it.
        """
        source: dict[str, Any] = {"index": request.source.index_names}
        if request.source_fields is not None:
            source["_source"] = list(request.source_fields)
        if request.size is not None:
            source["size"] = request.size

        query_clause = None
        if request.query is not None:
            self.converter.update_query(request.query, entity_type)
            query_clause = self.query_clause(request.query)

        if request.remote is not None:
            source["remote"] = request.remote.to_remote_info()
            source["query"] = json.dumps(query_clause or {"match_all": {}})
        elif query_clause is not None:
            source["query"] = query_clause

        dest: dict[str, Any] = {"index": request.dest.index_name}
        if request.dest_op_type is not None:
            dest["op_type"] = request.dest_op_type.value
        if request.dest_pipeline is not None:
            dest["pipeline"] = request.dest_pipeline

        body: dict[str, Any] = {"source": source, "dest": dest}
        if request.max_docs is not None:
            body["max_docs"] = request.max_docs
        if request.conflicts is not None:
            body["conflicts"] = request.conflicts
        if request.script is not None:
            body["script"] = {"source": request.script}

        params: dict[str, Any] = {}
        if request.slices is not None:
            params["slices"] = request.slices
        if request.refresh is not None:
            params["refresh"] = request.refresh
        if request.wait_for_completion is not None:
            params["wait_for_completion"] = request.wait_for_completion
        if request.requests_per_second is not None:
            params["requests_per_second"] = request.requests_per_second
        return EngineRequest(
            api="reindex",
            method="POST",
            path="/_reindex",
            params=params,
            body=body,
        )
