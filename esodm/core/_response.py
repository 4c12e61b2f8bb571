from typing import Any, Generic, TypeVar

from .data_model import DataModel

T = TypeVar("T")


class Response(DataModel, Generic[T]):
    result: T
    """Result of the operation."""

    native: dict[str, Any] | None = None
    """Raw engine response."""
