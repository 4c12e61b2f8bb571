"""
Node selection for the async REST client.

Each provider owns the state of its nodes. States start UNKNOWN and are
only changed by a HEAD request to the node root. Entries of the state map
are replaced as a whole, never changed in place.
"""

from __future__ import annotations

import random
import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Callable

import httpx

from esodm.core import FrozenDataModel, debug
from esodm.core.exceptions import ConfigurationError, NoReachableHostError

CHECK_TIMEOUT = 1.0

ErrorListener = Callable[[BaseException], None]


class HostState(str, Enum):
    ONLINE = "online"
    OFFLINE = "offline"
    UNKNOWN = "unknown"


class Verification(str, Enum):
    """How much checking a host lookup does.

    LAZY returns a host already known to be online without a check.
    FORCE checks the node before returning.
    """

    LAZY = "lazy"
    FORCE = "force"


class ElasticsearchHost(FrozenDataModel):
    """Last known state of a node.

    Attributes:
        endpoint: Base URL of the node.
        state: Node state.
        timestamp: Time the state was observed, in epoch seconds.
    """

    endpoint: str
    state: HostState = HostState.UNKNOWN
    timestamp: float

    @staticmethod
    def of(endpoint: str, state: HostState) -> ElasticsearchHost:
        return ElasticsearchHost(
            endpoint=endpoint, state=state, timestamp=time.time()
        )

    @property
    def is_online(self) -> bool:
        return self.state == HostState.ONLINE


class ClusterInformation(FrozenDataModel):
    nodes: list[ElasticsearchHost]


class HostProvider(ABC):
    """Selects an active node and hands out HTTP clients for it.

    Args:
        endpoints: Node endpoints.
        headers: Default headers sent with every request.
        timeout: Request timeout in seconds. Health checks use one second.
        error_listener: Called with each failed health check.
        transport: httpx transport, for example a mock transport.
        nparams: Native parameters passed to ``httpx.AsyncClient``.
    """

    headers: dict[str, str]
    timeout: float | None
    error_listener: ErrorListener | None
    transport: httpx.AsyncBaseTransport | None
    nparams: dict[str, Any]

    _hosts: dict[str, ElasticsearchHost]
    _clients: dict[str, httpx.AsyncClient]

    def __init__(
        self,
        endpoints: list[str],
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        error_listener: ErrorListener | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        nparams: dict[str, Any] = dict(),
    ) -> None:
        if not endpoints:
            raise ConfigurationError("At least one endpoint is required")
        self.headers = headers or {}
        self.timeout = timeout
        self.error_listener = error_listener
        self.transport = transport
        self.nparams = nparams
        self._hosts = {}
        for endpoint in endpoints:
            endpoint = normalize_endpoint(endpoint)
            self._hosts[endpoint] = ElasticsearchHost.of(
                endpoint, HostState.UNKNOWN
            )
        self._clients = {}

    @staticmethod
    def provider(
        endpoints: str | list[str],
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        error_listener: ErrorListener | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        nparams: dict[str, Any] = dict(),
    ) -> HostProvider:
        if isinstance(endpoints, str):
            endpoints = [endpoints]
        cls: type[HostProvider] = (
            SingleNodeHostProvider
            if len(endpoints) == 1
            else MultiNodeHostProvider
        )
        return cls(
            endpoints,
            headers=headers,
            timeout=timeout,
            error_listener=error_listener,
            transport=transport,
            nparams=nparams,
        )

    @abstractmethod
    async def lookup_active_host(
        self, verification: Verification = Verification.FORCE
    ) -> str:
        """Endpoint of an active node.

        Raises:
            NoReachableHostError:
                No node answered the health check.
        """
        raise NotImplementedError

    async def get_active(
        self, verification: Verification = Verification.FORCE
    ) -> httpx.AsyncClient:
        endpoint = await self.lookup_active_host(verification)
        return self.create_client(endpoint)

    def get_cached_host_state(self) -> list[ElasticsearchHost]:
        return list(self._hosts.values())

    async def cluster_info(self) -> ClusterInformation:
        """Check every node and return the resulting states."""
        for endpoint in list(self._hosts):
            await self._check(endpoint)
        return ClusterInformation(nodes=self.get_cached_host_state())

    def create_client(self, endpoint: str) -> httpx.AsyncClient:
        client = self._clients.get(endpoint)
        if client is None:
            args: dict[str, Any] = {
                "base_url": endpoint,
                "headers": self.headers,
            }
            if self.timeout is not None:
                args["timeout"] = self.timeout
            if self.transport is not None:
                args["transport"] = self.transport
            args.update(self.nparams)
            client = httpx.AsyncClient(**args)
            self._clients[endpoint] = client
        return client

    async def aclose(self) -> None:
        clients = list(self._clients.values())
        self._clients = {}
        for client in clients:
            await client.aclose()

    async def _check(self, endpoint: str) -> ElasticsearchHost:
        client = self.create_client(endpoint)
        try:
            response = await client.head("/", timeout=CHECK_TIMEOUT)
            state = (
                HostState.OFFLINE
                if response.is_error
                else HostState.ONLINE
            )
        except (httpx.HTTPError, OSError) as e:
            debug("Health check of %s failed: %s", endpoint, e)
            state = HostState.OFFLINE
            if self.error_listener is not None:
                self.error_listener(e)
        host = ElasticsearchHost.of(endpoint, state)
        self._hosts[endpoint] = host
        return host


class SingleNodeHostProvider(HostProvider):
    @property
    def endpoint(self) -> str:
        return next(iter(self._hosts))

    async def lookup_active_host(
        self, verification: Verification = Verification.FORCE
    ) -> str:
        endpoint = self.endpoint
        if (
            verification == Verification.LAZY
            and self._hosts[endpoint].is_online
        ):
            return endpoint
        host = await self._check(endpoint)
        if host.is_online:
            return endpoint
        raise NoReachableHostError(self.get_cached_host_state())


class MultiNodeHostProvider(HostProvider):
    async def lookup_active_host(
        self, verification: Verification = Verification.FORCE
    ) -> str:
        if verification == Verification.LAZY:
            for host in self._shuffled():
                if host.is_online:
                    return host.endpoint

        for state in (HostState.ONLINE, HostState.UNKNOWN, HostState.OFFLINE):
            # snapshot the group before health checks change states
            group = [h for h in self._shuffled() if h.state == state]
            for host in group:
                checked = await self._check(host.endpoint)
                if checked.is_online:
                    return checked.endpoint
        raise NoReachableHostError(self.get_cached_host_state())

    def _shuffled(self) -> list[ElasticsearchHost]:
        hosts = list(self._hosts.values())
        random.shuffle(hosts)
        return hosts


def normalize_endpoint(endpoint: str) -> str:
    endpoint = endpoint.strip().rstrip("/")
    if "://" not in endpoint:
        endpoint = f"http://{endpoint}"
    return endpoint
