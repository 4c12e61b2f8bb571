"""
Uniform in-memory document model.

Documents hold the payload as an ordered mapping and keep the engine
metadata (index, id, version, seq_no, primary_term) beside it, never
inside it.
"""

from __future__ import annotations

import json
import math
from collections.abc import Iterator, Mapping, MutableMapping
from typing import Any, Generic, TypeVar

from esodm.core import DataModel
from esodm.core.exceptions import MappingError, NotSupportedError

T = TypeVar("T")


class Document(MutableMapping[str, Any]):
    """Document payload with engine metadata."""

    _data: dict[str, Any]
    _index: str | None
    _id: str | None
    _version: int | None
    _seq_no: int | None
    _primary_term: int | None

    def __init__(self, source: Mapping[str, Any] | None = None) -> None:
        self._data = dict(source) if source is not None else {}
        self._index = None
        self._id = None
        self._version = None
        self._seq_no = None
        self._primary_term = None

    @staticmethod
    def create() -> Document:
        return Document()

    @staticmethod
    def from_dict(source: Mapping[str, Any]) -> Document:
        return Document(source)

    @staticmethod
    def from_json(json_str: str) -> Document:
        try:
            return Document(json.loads(json_str))
        except ValueError as e:
            raise MappingError(f"Cannot parse JSON: {e}") from e

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        id = self.get_id() if self.has_id() else None
        return f"{type(self).__name__}(index={self.index!r}, id={id!r})"

    def to_dict(self) -> dict[str, Any]:
        return dict(self)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), default=str)

    @property
    def index(self) -> str | None:
        return self._index

    @index.setter
    def index(self, index: str | None) -> None:
        self._index = index

    def has_id(self) -> bool:
        return self._id is not None

    def get_id(self) -> str:
        if self._id is None:
            raise MappingError(f"No id associated with {self!r}")
        return self._id

    def set_id(self, id: str | None) -> None:
        self._id = id

    def has_version(self) -> bool:
        return self._version is not None

    def get_version(self) -> int:
        if self._version is None:
            raise MappingError(f"No version associated with {self!r}")
        return self._version

    def set_version(self, version: int | None) -> None:
        self._version = version

    def has_seq_no(self) -> bool:
        return self._seq_no is not None

    def get_seq_no(self) -> int:
        if self._seq_no is None:
            raise MappingError(f"No seq_no associated with {self!r}")
        return self._seq_no

    def set_seq_no(self, seq_no: int | None) -> None:
        self._seq_no = seq_no

    def has_primary_term(self) -> bool:
        return self._primary_term is not None

    def get_primary_term(self) -> int:
        if self._primary_term is None:
            raise MappingError(f"No primary_term associated with {self!r}")
        return self._primary_term

    def set_primary_term(self, primary_term: int | None) -> None:
        self._primary_term = primary_term


class DocumentFieldAdapter(Document):
    """Read-only document built from the ``fields`` of a response.

    A field whose value list holds a single element reads as that element,
    an empty list reads as None.
    """

    _fields: dict[str, list[Any]]

    def __init__(
        self,
        fields: Mapping[str, list[Any]],
        index: str | None,
        id: str | None,
        version: int,
        seq_no: int,
        primary_term: int,
    ) -> None:
        super().__init__()
        self._fields = dict(fields)
        self._index = index
        self._id = id
        self._version = version
        self._seq_no = seq_no
        self._primary_term = primary_term

    def __getitem__(self, key: str) -> Any:
        values = self._fields[key]
        if values is None or len(values) == 0:
            return None
        if len(values) == 1:
            return values[0]
        return list(values)

    def __setitem__(self, key: str, value: Any) -> None:
        raise NotSupportedError("Document fields are read-only")

    def __delitem__(self, key: str) -> None:
        raise NotSupportedError("Document fields are read-only")

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def set_id(self, id: str | None) -> None:
        raise NotSupportedError("Document fields are read-only")

    def set_version(self, version: int | None) -> None:
        raise NotSupportedError("Document fields are read-only")

    def set_seq_no(self, seq_no: int | None) -> None:
        raise NotSupportedError("Document fields are read-only")

    def set_primary_term(self, primary_term: int | None) -> None:
        raise NotSupportedError("Document fields are read-only")

    def has_version(self) -> bool:
        return self._version is not None and self._version >= 0

    def has_seq_no(self) -> bool:
        return True

    def has_primary_term(self) -> bool:
        return True


class NestedMetaData(DataModel):
    """Position of a nested hit inside its parent document.

    Attributes:
        field: Nested field name.
        offset: Offset in the nested array.
        child: Identity of a deeper nested level.
    """

    field: str
    offset: int
    child: NestedMetaData | None = None


class Explanation(DataModel):
    """Score explanation tree.

    Attributes:
        match: Whether the document matched.
        value: Score contribution.
        description: Human readable description.
        details: Child explanations.
    """

    match: bool | None = None
    value: float
    description: str | None = None
    details: list[Explanation] = []


class SearchDocument(Document):
    """Document returned by a search, with the hit metadata.

    The payload and the document metadata come from the wrapped document,
    which may be a parsed source or a ``DocumentFieldAdapter``.
    """

    _delegate: Document
    score: float
    sort_values: list[Any]
    fields: dict[str, list[Any]]
    highlight_fields: dict[str, list[str]]
    inner_hits: dict[str, Any]
    nested_metadata: NestedMetaData | None
    explanation: Explanation | None
    matched_queries: list[str]
    routing: str | None

    def __init__(
        self,
        delegate: Document,
        score: float = math.nan,
        sort_values: list[Any] | None = None,
        fields: dict[str, list[Any]] | None = None,
        highlight_fields: dict[str, list[str]] | None = None,
        inner_hits: dict[str, Any] | None = None,
        nested_metadata: NestedMetaData | None = None,
        explanation: Explanation | None = None,
        matched_queries: list[str] | None = None,
        routing: str | None = None,
    ) -> None:
        self._delegate = delegate
        self.score = score
        self.sort_values = sort_values or []
        self.fields = fields or {}
        self.highlight_fields = highlight_fields or {}
        self.inner_hits = inner_hits or {}
        self.nested_metadata = nested_metadata
        self.explanation = explanation
        self.matched_queries = matched_queries or []
        self.routing = routing

    def get_field_value(self, name: str) -> Any:
        values = self.fields.get(name)
        if not values:
            return None
        return values[0]

    def __getitem__(self, key: str) -> Any:
        return self._delegate[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._delegate[key] = value

    def __delitem__(self, key: str) -> None:
        del self._delegate[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._delegate)

    def __len__(self) -> int:
        return len(self._delegate)

    @property
    def index(self) -> str | None:
        return self._delegate.index

    @index.setter
    def index(self, index: str | None) -> None:
        self._delegate.index = index

    def has_id(self) -> bool:
        return self._delegate.has_id()

    def get_id(self) -> str:
        return self._delegate.get_id()

    def set_id(self, id: str | None) -> None:
        self._delegate.set_id(id)

    def has_version(self) -> bool:
        return self._delegate.has_version()

    def get_version(self) -> int:
        return self._delegate.get_version()

    def set_version(self, version: int | None) -> None:
        self._delegate.set_version(version)

    def has_seq_no(self) -> bool:
        return self._delegate.has_seq_no()

    def get_seq_no(self) -> int:
        return self._delegate.get_seq_no()

    def set_seq_no(self, seq_no: int | None) -> None:
        self._delegate.set_seq_no(seq_no)

    def has_primary_term(self) -> bool:
        return self._delegate.has_primary_term()

    def get_primary_term(self) -> int:
        return self._delegate.get_primary_term()

    def set_primary_term(self, primary_term: int | None) -> None:
        self._delegate.set_primary_term(primary_term)


class SeqNoPrimaryTerm(DataModel):
    """Sequence number and primary term of a document.

    Attributes:
        seq_no: Sequence number, never negative.
        primary_term: Primary term, always positive.
    """

    seq_no: int
    primary_term: int


class IndexedObjectInformation(DataModel):
    """Metadata assigned by the engine to a written document."""

    id: str | None = None
    index: str | None = None
    seq_no: int | None = None
    primary_term: int | None = None
    version: int | None = None


class Failure(DataModel):
    """Failed item of a multi-get.

    Attributes:
        index: Index of the item.
        type: Document type reported by older engines.
        id: Document id.
        exception: Cause of the failure.
        status: Status code when reported.
    """

    index: str | None = None
    type: str | None = None
    id: str | None = None
    exception: str | None = None
    status: int | None = None


class MultiGetItem(DataModel, Generic[T]):
    item: T | None = None
    failure: Failure | None = None

    def has_item(self) -> bool:
        return self.item is not None

    def is_failed(self) -> bool:
        return self.failure is not None
