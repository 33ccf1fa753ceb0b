"""
Async variant of the Consul client, backed by ``httpx.AsyncClient``.

Shares request building and response interpretation with ``ConsulClient``;
only the send step is awaited.
"""

from typing import Any, Dict, List, Optional, Union

import httpx

from .client import (
    SEND_ERRORS,
    BaseConsulClient,
    PreparedCall,
    RegistrationPayload,
)
from .config import ConsulSettings, get_settings
from .endpoints import Endpoint
from .logging_config import get_logger
from .models import CatalogService, HealthCheck, HealthState, Value
from .result import Err, Result

logger = get_logger(__name__)


class AsyncConsulClient(BaseConsulClient):
    """
    Non-blocking Consul client.

    The underlying ``httpx.AsyncClient`` is created lazily on first use, so
    the client can be built outside a running event loop.
    """

    def __init__(
        self,
        base_uri: str,
        acl_token: str = "",
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_uri: Consul agent address, e.g. ``http://127.0.0.1:8500``
            acl_token: ACL token sent as ``X-Consul-Token``, empty for none
            timeout: Transport timeout in seconds (httpx default if None)
            transport: Custom async transport for the owned client
            http_client: Preconfigured client to use instead of creating one
        """
        super().__init__(base_uri, acl_token)
        self._timeout = timeout
        self._transport = transport
        self._owns_client = http_client is None
        self._client: Optional[httpx.AsyncClient] = http_client

        logger.info(f"Initialized AsyncConsulClient: base_uri={self._base_uri}")

    @classmethod
    def from_settings(
        cls, settings: Optional[ConsulSettings] = None, **kwargs: Any
    ) -> "AsyncConsulClient":
        """Build a client from environment settings."""
        settings = settings or get_settings()
        kwargs.setdefault("timeout", settings.CONSUL_TIMEOUT)
        return cls(settings.CONSUL_HTTP_ADDR, settings.CONSUL_HTTP_TOKEN, **kwargs)

    def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the HTTP client.

        Returns:
            Configured httpx.AsyncClient instance
        """
        if self._client is None or (self._owns_client and self._client.is_closed):
            client_kwargs: Dict[str, Any] = {}
            if self._timeout is not None:
                client_kwargs["timeout"] = self._timeout
            if self._transport is not None:
                client_kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**client_kwargs)
            logger.debug("Created new async HTTP client")
        return self._client

    async def aclose(self) -> None:
        """
        Close the HTTP client and release connections.

        Only a client created by this instance is closed.
        """
        client = self._client
        if self._owns_client and client is not None and not client.is_closed:
            await client.aclose()
            self._client = None
            logger.debug("Closed async HTTP client")

    async def __aenter__(self) -> "AsyncConsulClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _execute(self, call: PreparedCall) -> Result:
        self._log_request(call)
        client = self._get_client()
        request = self._build_request(client, call)
        if isinstance(request, Err):
            return request

        try:
            response = await client.send(request)
        except SEND_ERRORS as exc:
            return self._transport_failure(call, exc)

        return self._interpret(call, response)

    async def get_service(self, name: str) -> Result[List[CatalogService]]:
        """List the catalog instances of a service."""
        return await self._execute(self._get_service_call(name))

    async def get_checks_by_state(
        self, state: Union[HealthState, str]
    ) -> Result[List[HealthCheck]]:
        """List health checks in a given state."""
        return await self._execute(self._get_checks_by_state_call(state))

    async def read_key(self, key: str) -> Result[List[Value]]:
        """Read a key from the KV store."""
        return await self._execute(self._read_key_call(key))

    async def register_service(self, payload: RegistrationPayload) -> Result[bool]:
        return await self._execute(
            self._register_call(Endpoint.REGISTER_SERVICE, payload)
        )

    async def register_check(self, payload: RegistrationPayload) -> Result[bool]:
        return await self._execute(
            self._register_call(Endpoint.REGISTER_CHECK, payload)
        )

    async def create_key(
        self, key: str, value: Union[str, bytes], flags: Optional[int] = None
    ) -> Result[bool]:
        return await self._execute(self._create_key_call(key, value, flags))

    async def deregister_service(self, service_id: str) -> Result[bool]:
        return await self._execute(
            self._identifier_call(Endpoint.DEREGISTER_SERVICE, service_id)
        )

    async def deregister_check(self, check_id: str) -> Result[bool]:
        return await self._execute(
            self._identifier_call(Endpoint.DEREGISTER_CHECK, check_id)
        )

    async def delete_key(self, key: str) -> Result[bool]:
        return await self._execute(self._identifier_call(Endpoint.DELETE_KEY, key))
