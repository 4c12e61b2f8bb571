from __future__ import annotations

from enum import Enum
from typing import Any

from esodm.core import DataModel

from ._models import IndexCoordinates, Query


class RefreshPolicy(str, Enum):
    NONE = "false"
    IMMEDIATE = "true"
    WAIT_UNTIL = "wait_for"


class OpType(str, Enum):
    INDEX = "index"
    CREATE = "create"


class IndexQuery(DataModel):
    """Document to index.

    Either ``object`` (an entity, converted on write) or ``source`` (an
    already serialized document) is set.

    Attributes:
        id: Document id, generated by the engine when absent.
        object: Entity to write.
        source: Serialized document.
        version: External version.
        seq_no: Expected sequence number.
        primary_term: Expected primary term.
        routing: Routing value.
        op_type: Index or create.
    """

    id: str | None = None
    object: Any = None
    source: dict[str, Any] | None = None
    version: int | None = None
    seq_no: int | None = None
    primary_term: int | None = None
    routing: str | None = None
    op_type: OpType | None = None


class UpdateQuery(DataModel):
    """Partial or scripted update of one document, or of all documents
    matching ``query`` when used for an update by query.

    Attributes:
        id: Document id, required for single document updates.
        query: Documents to update in an update by query.
        max_docs: Maximum number of documents updated by query.
        batch_size: Scroll batch size of an update by query.
        slices: Number of slices an update by query is split into.
        requests_per_second: Throttle of an update by query.
        pipeline: Ingest pipeline run on updated documents.
        abort_on_version_conflict: Abort or proceed on conflicts.
        wait_for_active_shards: Active shard count to wait for.
    """

    id: str | None = None
    query: Query | None = None
    max_docs: int | None = None
    batch_size: int | None = None
    slices: int | None = None
    requests_per_second: float | None = None
    pipeline: str | None = None
    abort_on_version_conflict: bool | None = None
    wait_for_active_shards: str | None = None
    document: dict[str, Any] | None = None
    upsert: dict[str, Any] | None = None
    script: str | None = None
    lang: str | None = None
    params: dict[str, Any] | None = None
    doc_as_upsert: bool | None = None
    scripted_upsert: bool | None = None
    retry_on_conflict: int | None = None
    if_seq_no: int | None = None
    if_primary_term: int | None = None
    routing: str | None = None
    fetch_source: bool | None = None
    timeout: str | None = None
    refresh_policy: RefreshPolicy | None = None


class BulkOptions(DataModel):
    timeout: str | None = None
    refresh_policy: RefreshPolicy | None = None
    pipeline: str | None = None
    routing: str | None = None
    wait_for_active_shards: str | None = None


class Remote(DataModel):
    """Remote cluster used as a reindex source."""

    scheme: str = "http"
    host: str
    port: int = 9200
    path_prefix: str | None = None
    username: str | None = None
    password: str | None = None
    socket_timeout: str | None = None
    connect_timeout: str | None = None

    def to_remote_info(self) -> dict[str, Any]:
        prefix = self.path_prefix or ""
        remote: dict[str, Any] = {
            "host": f"{self.scheme}://{self.host}:{self.port}{prefix}"
        }
        if self.username is not None:
            remote["username"] = self.username
        if self.password is not None:
            remote["password"] = self.password
        if self.socket_timeout is not None:
            remote["socket_timeout"] = self.socket_timeout
        if self.connect_timeout is not None:
            remote["connect_timeout"] = self.connect_timeout
        return remote


class ReindexRequest(DataModel):
    """Copy documents from one or more indices into another.

    Attributes:
        source: Source indices.
        dest: Destination index.
        query: Query selecting the documents to copy.
        remote: Remote cluster holding the source indices.
        source_fields: Source fields to copy.
        max_docs: Maximum number of documents.
        size: Batch size.
        slices: Number of slices.
        conflicts: "abort" or "proceed".
        script: Painless script applied to each document.
        dest_op_type: Op type on the destination.
        dest_pipeline: Ingest pipeline on the destination.
        refresh: Refresh affected indices.
        wait_for_completion: Wait for the reindex to finish.
        requests_per_second: Throttle.
    """

    source: IndexCoordinates
    dest: IndexCoordinates
    query: Query | None = None
    remote: Remote | None = None
    source_fields: list[str] | None = None
    max_docs: int | None = None
    size: int | None = None
    slices: int | None = None
    conflicts: str | None = None
    script: str | None = None
    dest_op_type: OpType | None = None
    dest_pipeline: str | None = None
    refresh: bool | None = None
    wait_for_completion: bool | None = None
    requests_per_second: float | None = None
