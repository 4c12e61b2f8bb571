__all__ = [
    "BaseError",
    "BadRequestError",
    "BulkFailureError",
    "ConfigurationError",
    "ConflictError",
    "InternalError",
    "MappingError",
    "NoReachableHostError",
    "NoSuchIndexError",
    "NotFoundError",
    "NotSupportedError",
    "OptimisticLockingError",
    "RestStatusError",
    "UncategorizedError",
]

from typing import Any


class BaseError(Exception):
    status_code: int = 500


class BadRequestError(BaseError):
    status_code = 400


class NotFoundError(BaseError):
    status_code = 404


class ConflictError(BaseError):
    status_code = 409


class NotSupportedError(BaseError):
    status_code = 415


class InternalError(BaseError):
    status_code = 500


class ConfigurationError(BadRequestError):
    """Malformed query or criteria. Never retryable."""


class MappingError(BadRequestError):
    """A value could not be mapped between an entity and a document."""


class OptimisticLockingError(ConflictError):
    """Version or seq_no/primary_term conflict on write."""


class NoSuchIndexError(NotFoundError):
    index: str | None

    def __init__(self, message: str, index: str | None = None) -> None:
        super().__init__(message)
        self.index = index


class RestStatusError(BaseError):
    """Status-coded engine failure.

    Attributes:
        status_code: HTTP status returned by the engine.
        body: Raw response body, kept as returned.
        error: Parsed ``error`` structure of the body, if any.
    """

    body: str | None
    error: dict[str, Any] | None

    def __init__(
        self,
        status_code: int,
        message: str,
        body: str | None = None,
        error: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
        self.error = error

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class BulkFailureError(BaseError):
    """Bulk request with failed items.

    Attributes:
        failed_documents: Id of each failed document mapped to its message.
        results: Information for the items that were written.
    """

    status_code = 500
    failed_documents: dict[str, str]
    results: list[Any]

    def __init__(
        self,
        message: str,
        failed_documents: dict[str, str],
        results: list[Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.failed_documents = failed_documents
        self.results = results or []


class UncategorizedError(InternalError):
    pass


class NoReachableHostError(BaseError):
    status_code = 503
    hosts: list[Any]

    def __init__(self, hosts: list[Any]) -> None:
        super().__init__(
            f"Host not reachable. Cluster state is offline. {hosts}"
        )
        self.hosts = hosts
