"""
Async REST client over httpx.
"""

from __future__ import annotations

import json
from typing import Any, Awaitable, Callable, TypeVar

import httpx

from esodm.core import debug
from esodm.core.exceptions import RestStatusError

from ._host_provider import HostProvider, Verification
from ._request_factory import EngineRequest

T = TypeVar("T")


class RestClient:
    """Executes engine requests on the active node.

    Args:
        host_provider: Provider of the active node.
    """

    host_provider: HostProvider

    def __init__(self, host_provider: HostProvider) -> None:
        self.host_provider = host_provider

    async def execute(
        self, callback: Callable[[httpx.AsyncClient], Awaitable[T]]
    ) -> T:
        """Run a call against the active node.

        The node is looked up lazily first. When the call fails because
        the connection was refused, it is retried once on a node found
        with a forced health check. Other failures propagate.
        """
        client = await self.host_provider.get_active(Verification.LAZY)
        try:
            return await callback(client)
        except Exception as e:
            if not is_connection_refused(e):
                raise
            debug("Connection refused, retrying on a verified host: %s", e)
        client = await self.host_provider.get_active(Verification.FORCE)
        return await callback(client)

    async def perform(self, request: EngineRequest) -> dict[str, Any]:
        async def call(client: httpx.AsyncClient) -> httpx.Response:
            return await client.request(
                request.method,
                request.path,
                params=request.to_query_params(),
                content=content,
                headers=headers,
            )

        content, headers = encode_body(request.body)
        response = await self.execute(call)
        return decode_response(response)

    async def aclose(self) -> None:
        await self.host_provider.aclose()


def encode_body(body: Any) -> tuple[bytes | None, dict[str, str]]:
    if body is None:
        return None, {}
    if isinstance(body, list):
        lines = "".join(json.dumps(line, default=str) + "\n" for line in body)
        return lines.encode("utf-8"), {"Content-Type": "application/x-ndjson"}
    return (
        json.dumps(body, default=str).encode("utf-8"),
        {"Content-Type": "application/json"},
    )


def decode_response(response: httpx.Response) -> dict[str, Any]:
    """Decode a response body, raising on error statuses.

    Error bodies are parsed for the engine ``error`` structure. The raw
    body is always kept on the raised error.
    """
    status = response.status_code
    text = response.text

    if status >= 500:
        error = _parse_error(text)
        raise RestStatusError(
            status,
            _error_message(status, error, text),
            body=text,
            error=error,
        )

    if status >= 400:
        error = _parse_error(text)
        if error is not None:
            raise RestStatusError(
                status,
                _error_message(status, error, text),
                body=text,
                error=error,
            )

    if not text.strip():
        if status >= 400:
            raise RestStatusError(status, f"Status {status}", body=text)
        return {}

    try:
        decoded = json.loads(text)
    except ValueError as e:
        error = _parse_error(text)
        raise RestStatusError(
            status,
            _error_message(status, error, f"Unable to parse body: {e}"),
            body=text,
            error=error,
        ) from e
    if not isinstance(decoded, dict):
        return {"result": decoded}
    return decoded


def is_connection_refused(error: BaseException) -> bool:
    seen: set[int] = set()
    current: BaseException | None = error
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        if isinstance(current, (httpx.ConnectError, ConnectionRefusedError)):
            return True
        current = current.__cause__ or current.__context__
    return False


def _parse_error(text: str) -> dict[str, Any] | None:
    try:
        decoded = json.loads(text)
    except ValueError:
        return None
    if not isinstance(decoded, dict) or "error" not in decoded:
        return None
    error = decoded["error"]
    if isinstance(error, dict):
        return error
    return {"reason": str(error)}


def _error_message(
    status: int, error: dict[str, Any] | None, default: str
) -> str:
    if error is None:
        return f"Status {status}: {default}"
    error_type = error.get("type")
    reason = error.get("reason")
    return f"Status {status}: type={error_type}, reason={reason}"
