"""
Translation of engine and transport errors into esodm errors.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, NoReturn

from elasticsearch import ApiError
from elasticsearch import ConflictError as ESConflictError

from esodm.core.exceptions import (
    BaseError,
    NoSuchIndexError,
    OptimisticLockingError,
    RestStatusError,
    UncategorizedError,
)

VERSION_CONFLICT_TYPE = "version_conflict_engine_exception"
SEQ_NO_CONFLICT_MESSAGE = "version conflict, required seqNo"
INDEX_NOT_FOUND_TYPE = "index_not_found_exception"


class ExceptionTranslator:
    @staticmethod
    def translate(error: BaseException) -> BaseException:
        """Most specific esodm error for an error.

        The result is the error itself when it is already specific.
        """
        if isinstance(error, (OptimisticLockingError, NoSuchIndexError)):
            return error

        status, message, body = ExceptionTranslator._status_of(error)
        if ExceptionTranslator._is_conflict(error, status, message, body):
            return OptimisticLockingError(
                "Cannot index a document due to seq_no+primary_term "
                f"conflict: {message}"
            )

        missing = ExceptionTranslator._missing_index(error)
        if missing is not None:
            index, reason = missing
            return NoSuchIndexError(reason or f"No such index {index}", index)

        if isinstance(error, BaseError):
            return error
        if isinstance(error, ApiError):
            return RestStatusError(
                status_code=status or 500,
                message=message,
                body=None if body is None else str(body),
                error=ExceptionTranslator._error_of(body),
            )
        return UncategorizedError(str(error) or type(error).__name__)

    @staticmethod
    def raise_translated(error: BaseException) -> NoReturn:
        translated = ExceptionTranslator.translate(error)
        if translated is error:
            raise error
        raise translated from error

    @staticmethod
    def _status_of(
        error: BaseException,
    ) -> tuple[int | None, str, Any]:
        if isinstance(error, RestStatusError):
            return error.status_code, error.message, error.error or error.body
        if isinstance(error, ApiError):
            return error.meta.status, str(error), error.body
        return None, str(error), None

    @staticmethod
    def _is_conflict(
        error: BaseException, status: int | None, message: str, body: Any
    ) -> bool:
        error_type = ExceptionTranslator._error_type(body)
        if isinstance(error, ESConflictError):
            return error_type in (None, VERSION_CONFLICT_TYPE)
        if status != 409:
            return False
        return (
            error_type == VERSION_CONFLICT_TYPE
            or VERSION_CONFLICT_TYPE in message
            or SEQ_NO_CONFLICT_MESSAGE in message
        )

    @staticmethod
    def _missing_index(
        error: BaseException | None,
    ) -> tuple[str | None, str | None] | None:
        seen: set[int] = set()
        while error is not None and id(error) not in seen:
            seen.add(id(error))
            body = None
            if isinstance(error, RestStatusError):
                body = error.error or error.body
            elif isinstance(error, ApiError):
                body = error.body
            found = ExceptionTranslator._missing_index_in(
                ExceptionTranslator._error_of(body)
            )
            if found is not None:
                return found
            error = error.__cause__ or error.__context__
        return None

    @staticmethod
    def _missing_index_in(
        error: Mapping[str, Any] | None,
    ) -> tuple[str | None, str | None] | None:
        while error:
            if (
                error.get("type") == INDEX_NOT_FOUND_TYPE
                or error.get("index_uuid") == "_na_"
            ):
                return error.get("index"), error.get("reason")
            error = error.get("caused_by")
        return None

    @staticmethod
    def _error_of(body: Any) -> dict[str, Any] | None:
        if not isinstance(body, Mapping):
            return None
        error = body.get("error", body)
        return dict(error) if isinstance(error, Mapping) else None

    @staticmethod
    def _error_type(body: Any) -> str | None:
        error = ExceptionTranslator._error_of(body)
        if error is None:
            return None
        return error.get("type")
