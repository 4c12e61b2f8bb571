"""
Adapters from engine response shapes to the uniform document model.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from ._document import (
    Document,
    DocumentFieldAdapter,
    Explanation,
    Failure,
    MultiGetItem,
    NestedMetaData,
    SearchDocument,
)


class DocumentAdapters:
    @staticmethod
    def from_get_response(response: Mapping[str, Any]) -> Document | None:
        """Adapt a get response, None when the document was not found."""
        if not response.get("found", True):
            return None

        source = response.get("_source")
        if not source:
            return DocumentAdapters.from_document_fields(
                fields=response.get("fields") or {},
                index=response.get("_index"),
                id=response.get("_id"),
                version=response.get("_version", -1),
                seq_no=response.get("_seq_no", -2),
                primary_term=response.get("_primary_term", 0),
            )

        document = Document(source)
        DocumentAdapters._set_metadata(document, response)
        if response.get("_version") is not None:
            document.set_version(response["_version"])
        return document

    @staticmethod
    def from_document_fields(
        fields: Mapping[str, list[Any]],
        index: str | None,
        id: str | None,
        version: int,
        seq_no: int,
        primary_term: int,
    ) -> DocumentFieldAdapter:
        return DocumentFieldAdapter(
            fields=fields,
            index=index,
            id=id,
            version=version,
            seq_no=seq_no,
            primary_term=primary_term,
        )

    @staticmethod
    def from_multi_get_response(
        response: Mapping[str, Any],
    ) -> list[MultiGetItem[Document]]:
        """Adapt a multi-get response, keeping the request order.

        Failed items carry a failure instead of a document.
        """
        items: list[MultiGetItem[Document]] = []
        for doc in response.get("docs", []):
            error = doc.get("error")
            if error is not None:
                items.append(
                    MultiGetItem[Document](
                        failure=Failure(
                            index=doc.get("_index"),
                            type=doc.get("_type"),
                            id=doc.get("_id"),
                            exception=DocumentAdapters._error_reason(error),
                            status=doc.get("status"),
                        )
                    )
                )
            else:
                items.append(
                    MultiGetItem[Document](
                        item=DocumentAdapters.from_get_response(doc)
                    )
                )
        return items

    @staticmethod
    def from_search_hit(hit: Mapping[str, Any]) -> SearchDocument:
        from ._builder import SearchDocumentResponseBuilder

        highlight_fields = {
            name: [str(fragment) for fragment in fragments]
            for name, fragments in (hit.get("highlight") or {}).items()
        }

        inner_hits = {}
        for name, inner in (hit.get("inner_hits") or {}).items():
            inner_hits[name] = SearchDocumentResponseBuilder.from_search_hits(
                hits=inner.get("hits") or {},
                scroll_id=None,
                point_in_time_id=None,
                aggregations=None,
                suggest=None,
                entity_creator=None,
            )

        fields = hit.get("fields") or {}
        source = hit.get("_source")
        if not source:
            document: Document = DocumentAdapters.from_document_fields(
                fields=fields,
                index=hit.get("_index"),
                id=hit.get("_id"),
                version=hit.get("_version", -1),
                seq_no=hit.get("_seq_no", -2),
                primary_term=hit.get("_primary_term", 0),
            )
        else:
            document = Document(source)
            DocumentAdapters._set_metadata(document, hit)
            version = hit.get("_version")
            if version is not None and version >= 0:
                document.set_version(version)

        score = hit.get("_score")
        return SearchDocument(
            delegate=document,
            score=float("nan") if score is None else float(score),
            sort_values=list(hit.get("sort") or []),
            fields=dict(fields),
            highlight_fields=highlight_fields,
            inner_hits=inner_hits,
            nested_metadata=DocumentAdapters._nested_metadata(
                hit.get("_nested")
            ),
            explanation=DocumentAdapters._explanation(
                hit.get("_explanation")
            ),
            matched_queries=DocumentAdapters._matched_queries(
                hit.get("matched_queries")
            ),
            routing=hit.get("_routing"),
        )

    @staticmethod
    def _set_metadata(document: Document, response: Mapping[str, Any]):
        document.index = response.get("_index")
        document.set_id(response.get("_id"))
        document.set_seq_no(response.get("_seq_no"))
        document.set_primary_term(response.get("_primary_term"))

    @staticmethod
    def _nested_metadata(
        nested: Mapping[str, Any] | None,
    ) -> NestedMetaData | None:
        if not nested:
            return None
        return NestedMetaData(
            field=nested["field"],
            offset=nested["offset"],
            child=DocumentAdapters._nested_metadata(nested.get("_nested")),
        )

    @staticmethod
    def _explanation(
        explanation: Mapping[str, Any] | None,
    ) -> Explanation | None:
        if not explanation:
            return None
        return Explanation(
            match=explanation.get("match"),
            value=explanation.get("value", 0.0),
            description=explanation.get("description"),
            details=[
                DocumentAdapters._explanation(detail)
                for detail in explanation.get("details") or []
            ],
        )

    @staticmethod
    def _matched_queries(matched: Any) -> list[str]:
        if not matched:
            return []
        # named queries with scores come back as a name to score map
        if isinstance(matched, Mapping):
            return list(matched.keys())
        return list(matched)

    @staticmethod
    def _error_reason(error: Any) -> str:
        if isinstance(error, Mapping):
            reason = error.get("reason")
            type = error.get("type")
            if type and reason:
                return f"{type}: {reason}"
            return str(reason or type or error)
        return str(error)
