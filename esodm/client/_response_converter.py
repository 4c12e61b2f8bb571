from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from esodm.core import DataModel, warn
from esodm.core.exceptions import BulkFailureError, UncategorizedError
from esodm.document import IndexedObjectInformation


class ByQueryResponse(DataModel):
    """Result of an operation by query or of a reindex.

    Attributes:
        took: Time taken in milliseconds.
        timed_out: Whether the operation timed out.
        total: Documents processed.
        updated: Documents updated.
        created: Documents created.
        deleted: Documents deleted.
        batches: Scroll batches pulled.
        version_conflicts: Version conflicts hit.
        noops: Documents left unchanged.
        failures: Failures as returned by the engine.
    """

    took: int = 0
    timed_out: bool = False
    total: int = 0
    updated: int = 0
    created: int = 0
    deleted: int = 0
    batches: int = 0
    version_conflicts: int = 0
    noops: int = 0
    failures: list[dict[str, Any]] = []


class ResponseConverter:
    @staticmethod
    def indexed_object_information(
        response: Mapping[str, Any],
    ) -> IndexedObjectInformation:
        return IndexedObjectInformation(
            id=response.get("_id"),
            index=response.get("_index"),
            seq_no=response.get("_seq_no"),
            primary_term=response.get("_primary_term"),
            version=response.get("_version"),
        )

    @staticmethod
    def bulk_response(
        response: Mapping[str, Any],
    ) -> list[IndexedObjectInformation]:
        """Information for each bulk item, in request order.

        Raises:
            BulkFailureError:
                After all items are read, when any item failed.
        """
        results: list[IndexedObjectInformation] = []
        failed_documents: dict[str, str] = {}
        for item in response.get("items") or []:
            for result in item.values():
                error = result.get("error")
                if error is not None:
                    failed_documents[str(result.get("_id"))] = (
                        ResponseConverter._error_message(error)
                    )
                    continue
                results.append(
                    ResponseConverter.indexed_object_information(result)
                )

        if failed_documents:
            warn(
                "Bulk request failed for %d documents", len(failed_documents)
            )
            raise BulkFailureError(
                "Bulk operation has failures. Use "
                "BulkFailureError.failed_documents for details "
                f"[{failed_documents}]",
                failed_documents=failed_documents,
                results=results,
            )
        return results

    @staticmethod
    def by_query_response(response: Mapping[str, Any]) -> ByQueryResponse:
        return ByQueryResponse.from_dict(dict(response))

    @staticmethod
    def _error_message(error: Any) -> str:
        if isinstance(error, Mapping):
            reason = error.get("reason")
            error_type = error.get("type")
            if error_type and reason:
                return f"{error_type}: {reason}"
            return str(reason or error_type or error)
        return str(error)

    @staticmethod
    def multi_search_responses(
        response: Mapping[str, Any], expected: int
    ) -> list[Mapping[str, Any] | None]:
        """Search responses of a multi search, in request order.

        Failed searches are logged and read as ``None``.

        Raises:
            UncategorizedError:
                The number of responses does not match the request.
        """
        items = response.get("responses") or []
        if len(items) != expected:
            raise UncategorizedError(
                f"Multi search returned {len(items)} responses "
                f"for {expected} searches"
            )
        results: list[Mapping[str, Any] | None] = []
        for item in items:
            if "error" in item:
                warn(
                    "Multi search response contains failure: %s",
                    ResponseConverter._error_message(item["error"]),
                )
                results.append(None)
            else:
                results.append(item)
        return results

    @staticmethod
    def point_in_time_id(response: Mapping[str, Any]) -> str:
        id = response.get("id")
        if not id:
            raise UncategorizedError("No point in time id in response")
        return str(id)

    @staticmethod
    def point_in_time_closed(response: Mapping[str, Any]) -> bool:
        return bool(response.get("succeeded", False))
