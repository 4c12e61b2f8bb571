"""
Backends executing engine requests.

``ElasticsearchBackend`` runs requests through the elasticsearch-py
clients. ``RestBackend`` sends them over httpx with node selection and
connection retry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx
from elasticsearch import AsyncElasticsearch
from elasticsearch import Elasticsearch as SyncElasticsearch
from elasticsearch.exceptions import NotFoundError as ESNotFoundError

from esodm.client import (
    EngineRequest,
    ErrorListener,
    HostProvider,
    RestClient,
)
from esodm.core import debug, run_sync


class Backend(ABC):
    """Executes engine requests and returns the decoded response body."""

    @abstractmethod
    def perform(self, request: EngineRequest) -> dict[str, Any]:
        raise NotImplementedError

    @abstractmethod
    async def aperform(self, request: EngineRequest) -> dict[str, Any]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    async def aclose(self) -> None:
        pass


class ElasticsearchBackend(Backend):
    """Backend over the elasticsearch-py clients.

    Clients are created on first use unless given. A 404 on a get or
    delete is a regular not found result, other error statuses raise
    the elasticsearch-py error.

    Args:
        hosts: Node urls.
        api_key: Api key, or an id and key pair.
        basic_auth: User name and password.
        client: Existing sync client.
        aclient: Existing async client.
        nparams: Native parameters passed to both clients.
    """

    hosts: str | list[str] | None
    api_key: str | tuple[str, str] | None
    basic_auth: tuple[str, str] | None
    nparams: dict[str, Any]

    _client: SyncElasticsearch | None
    _aclient: AsyncElasticsearch | None

    def __init__(
        self,
        hosts: str | list[str] | None = None,
        api_key: str | tuple[str, str] | None = None,
        basic_auth: tuple[str, str] | None = None,
        client: SyncElasticsearch | None = None,
        aclient: AsyncElasticsearch | None = None,
        nparams: dict[str, Any] = dict(),
    ) -> None:
        self.hosts = hosts
        self.api_key = api_key
        self.basic_auth = basic_auth
        self.nparams = nparams
        self._client = client
        self._aclient = aclient

    @property
    def client(self) -> SyncElasticsearch:
        if self._client is None:
            self._client = SyncElasticsearch(**self._get_client_params())
        return self._client

    @property
    def aclient(self) -> AsyncElasticsearch:
        if self._aclient is None:
            self._aclient = AsyncElasticsearch(**self._get_client_params())
        return self._aclient

    def _get_client_params(self) -> dict[str, Any]:
        def _add_if_not_none(key, value):
            return {key: value} if value is not None else {}

        return {
            **_add_if_not_none("hosts", self.hosts),
            **_add_if_not_none("api_key", self.api_key),
            **_add_if_not_none("basic_auth", self.basic_auth),
            **self.nparams,
        }

    def perform(self, request: EngineRequest) -> dict[str, Any]:
        debug("%s %s", request.method, request.path)
        try:
            resp = getattr(self.client, request.api)(
                **request.to_client_args()
            )
        except ESNotFoundError as e:
            return self._not_found_body(request, e)
        return dict(resp.body)

    async def aperform(self, request: EngineRequest) -> dict[str, Any]:
        debug("%s %s", request.method, request.path)
        try:
            resp = await getattr(self.aclient, request.api)(
                **request.to_client_args()
            )
        except ESNotFoundError as e:
            return self._not_found_body(request, e)
        return dict(resp.body)

    @staticmethod
    def _not_found_body(
        request: EngineRequest, error: ESNotFoundError
    ) -> dict[str, Any]:
        body = error.body
        if (
            request.api in ("get", "delete")
            and isinstance(body, dict)
            and "error" not in body
        ):
            return dict(body)
        raise error

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        if self._aclient is not None:
            await self._aclient.close()
            self._aclient = None


class RestBackend(Backend):
    """Backend over httpx.

    Synchronous calls run on a background loop with their own clients,
    async calls use clients bound to the caller's loop.

    Args:
        endpoints: Node endpoints.
        headers: Default headers sent with every request.
        timeout: Request timeout in seconds.
        error_listener: Called with each failed node health check.
        transport: httpx transport, for example a mock transport.
        nparams: Native parameters passed to ``httpx.AsyncClient``.
    """

    rest_client: RestClient
    arest_client: RestClient

    def __init__(
        self,
        endpoints: str | list[str],
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        error_listener: ErrorListener | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        nparams: dict[str, Any] = dict(),
    ) -> None:
        def _provider() -> HostProvider:
            return HostProvider.provider(
                endpoints,
                headers=headers,
                timeout=timeout,
                error_listener=error_listener,
                transport=transport,
                nparams=nparams,
            )

        self.rest_client = RestClient(_provider())
        self.arest_client = RestClient(_provider())

    def perform(self, request: EngineRequest) -> dict[str, Any]:
        return run_sync(self.rest_client.perform, request)

    async def aperform(self, request: EngineRequest) -> dict[str, Any]:
        return await self.arest_client.perform(request)

    def close(self) -> None:
        run_sync(self.rest_client.aclose)

    async def aclose(self) -> None:
        await self.arest_client.aclose()
