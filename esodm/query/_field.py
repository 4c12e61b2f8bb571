from __future__ import annotations

from enum import Enum

from esodm.core import DataModel


class FieldType(str, Enum):
    AUTO = "auto"

    # String
    TEXT = "text"  # analyzed full-text
    KEYWORD = "keyword"  # exact match
    WILDCARD = "wildcard"
    SEARCH_AS_YOU_TYPE = "search_as_you_type"

    # Numeric
    LONG = "long"
    INTEGER = "integer"
    SHORT = "short"
    BYTE = "byte"
    DOUBLE = "double"
    FLOAT = "float"
    HALF_FLOAT = "half_float"
    SCALED_FLOAT = "scaled_float"

    # Other primitives
    DATE = "date"
    DATE_NANOS = "date_nanos"
    BOOLEAN = "boolean"
    BINARY = "binary"
    IP = "ip"

    # Structures
    OBJECT = "object"
    NESTED = "nested"
    FLATTENED = "flattened"

    # Spatial
    GEO_POINT = "geo_point"
    GEO_SHAPE = "geo_shape"

    # Vectors
    DENSE_VECTOR = "dense_vector"


class Field(DataModel):
    """Field a criteria is bound to.

    Attributes:
        name: Field name as stored in the index.
        path: Nested path, set when the field lives inside a nested object.
        field_type: Declared mapping type of the field.
    """

    name: str | None = None
    path: str | None = None
    field_type: FieldType | None = None

    def __str__(self) -> str:
        return self.name or ""
