"""
HTTP client for the Consul agent API.

Maps catalog, health and key/value endpoints to typed calls. Every call runs
the same pipeline (build, send, decode, interpret status, convert) and
returns ``Ok`` or ``Err``; encode, transport, decode and application failures are
all normalized into ``ConsulError`` and never raised to the caller.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

import httpx

from . import __version__
from .config import ConsulSettings, get_settings
from .conversions import (
    convert_to_catalog_services,
    convert_to_health_checks,
    convert_to_values,
)
from .endpoints import Endpoint, ErrorShape
from .logging_config import get_logger, get_request_id
from .models import (
    CatalogService,
    CheckRegistration,
    HealthCheck,
    HealthState,
    ServiceRegistration,
    Value,
)
from .result import ConsulError, Err, ErrorKind, Ok, Result

logger = get_logger(__name__)

TOKEN_HEADER = "X-Consul-Token"
REQUEST_ID_HEADER = "X-Request-ID"

# Failures raised while building a request (unserializable body, non-ASCII
# header) that are reported as encode errors
ENCODE_ERRORS = (TypeError, ValueError)

# Failures raised while sending that are reported as transport errors.
# RuntimeError is what httpx raises when the client has been closed.
TRANSPORT_ERRORS = (httpx.HTTPError, httpx.InvalidURL)
SEND_ERRORS = TRANSPORT_ERRORS + (RuntimeError,)

# Failures raised while decoding a body that are reported as decode errors
DECODE_ERRORS = (ValueError, RecursionError)

# Failures raised while converting a 200 payload that are reported as decode errors
CONVERSION_ERRORS = (
    KeyError,
    TypeError,
    ValueError,
    AttributeError,
    OverflowError,
    RecursionError,
)

RegistrationPayload = Union[Mapping[str, Any], ServiceRegistration, CheckRegistration]


@dataclass(frozen=True)
class PreparedCall:
    """Everything needed to send one request and interpret its response."""

    endpoint: Endpoint
    path: str
    content: Optional[bytes] = None
    json: Any = None
    params: Optional[Dict[str, Any]] = None
    converter: Optional[Callable[[Any], Any]] = None


def extract_error_message(payload: Any, shape: ErrorShape) -> Optional[str]:
    """
    Pull Consul's error message out of a decoded error payload.

    Args:
        payload: Decoded JSON body of a failed read
        shape: Error shape used by the endpoint

    Returns:
        The message, or None if the payload does not have the expected shape
    """
    try:
        if shape is ErrorShape.ERRORS_LIST:
            message = payload["errors"][0]["message"]
        elif shape is ErrorShape.ERROR_OBJECT:
            message = payload["error"]["message"]
        else:
            return None
    except (KeyError, IndexError, TypeError):
        return None

    return message if isinstance(message, str) else str(message)


def _registration_body(payload: RegistrationPayload) -> Any:
    if isinstance(payload, (ServiceRegistration, CheckRegistration)):
        return payload.to_payload()
    if isinstance(payload, Mapping):
        return dict(payload)
    # Anything else is left for the JSON encoder to accept or reject
    return payload


def _state_value(state: Union[HealthState, str]) -> str:
    if isinstance(state, HealthState):
        return state.value
    return state


class BaseConsulClient:
    """
    Request building and response interpretation shared by both clients.

    Subclasses only provide the send step.

    Attributes:
        base_uri: Consul agent address without trailing slash
        acl_token: ACL token, empty for unauthenticated calls
    """

    def __init__(self, base_uri: str, acl_token: str = "") -> None:
        self._base_uri = base_uri.rstrip("/")
        self._acl_token = acl_token or ""

    @property
    def base_uri(self) -> str:
        return self._base_uri

    @property
    def acl_token(self) -> str:
        return self._acl_token

    def __repr__(self) -> str:
        auth = "token" if self._acl_token else "anonymous"
        return f"{type(self).__name__}(base_uri={self._base_uri!r}, auth={auth})"

    def _url(self, path: str) -> str:
        return f"{self._base_uri}{path}"

    def _headers(self) -> Dict[str, str]:
        headers = {
            "User-Agent": f"consul-client/{__version__}",
            "Accept": "application/json",
        }

        if self._acl_token:
            headers[TOKEN_HEADER] = self._acl_token

        request_id = get_request_id()
        if request_id:
            headers[REQUEST_ID_HEADER] = request_id

        return headers

    # Call builders

    def _get_service_call(self, name: str) -> PreparedCall:
        endpoint = Endpoint.GET_SERVICE
        return PreparedCall(
            endpoint, endpoint.path(name), converter=convert_to_catalog_services
        )

    def _get_checks_by_state_call(self, state: Union[HealthState, str]) -> PreparedCall:
        endpoint = Endpoint.GET_CHECKS_BY_STATE
        return PreparedCall(
            endpoint,
            endpoint.path(_state_value(state)),
            converter=convert_to_health_checks,
        )

    def _read_key_call(self, key: str) -> PreparedCall:
        endpoint = Endpoint.READ_KEY
        return PreparedCall(endpoint, endpoint.path(key), converter=convert_to_values)

    def _register_call(
        self, endpoint: Endpoint, payload: RegistrationPayload
    ) -> PreparedCall:
        return PreparedCall(endpoint, endpoint.path(), json=_registration_body(payload))

    def _create_key_call(
        self, key: str, value: Union[str, bytes], flags: Optional[int]
    ) -> PreparedCall:
        endpoint = Endpoint.CREATE_KEY
        content = value.encode("utf-8") if isinstance(value, str) else value
        params = {"flags": flags} if flags is not None else None
        return PreparedCall(
            endpoint, endpoint.path(key), content=content, params=params
        )

    def _identifier_call(self, endpoint: Endpoint, identifier: str) -> PreparedCall:
        return PreparedCall(endpoint, endpoint.path(identifier))

    # Pipeline stages

    def _request_kwargs(self, call: PreparedCall) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {"headers": self._headers()}
        if call.content is not None:
            kwargs["content"] = call.content
        if call.json is not None:
            kwargs["json"] = call.json
        if call.params is not None:
            kwargs["params"] = call.params
        return kwargs

    def _log_request(self, call: PreparedCall) -> None:
        logger.debug(
            "Sending Consul request",
            extra={
                "extra_fields": {
                    "operation": call.endpoint.operation,
                    "method": call.endpoint.method,
                    "path": call.path,
                    "authenticated": bool(self._acl_token),
                }
            },
        )

    def _fail(
        self, call: PreparedCall, error: ConsulError, exc_info: bool = False
    ) -> Err:
        fields = {
            "operation": call.endpoint.operation,
            "method": call.endpoint.method,
            "path": call.path,
            "kind": error.kind.value,
            "status_code": error.status_code,
            "error": error.message,
        }
        if error.kind is ErrorKind.APPLICATION:
            logger.warning("Consul returned an error", extra={"extra_fields": fields})
        else:
            logger.error(
                f"Consul {error.kind.value} error",
                extra={"extra_fields": fields},
                exc_info=exc_info,
            )
        return Err(error)

    def _encode_failure(self, call: PreparedCall, exc: Exception) -> Err:
        return self._fail(call, ConsulError.encode(exc))

    def _transport_failure(self, call: PreparedCall, exc: Exception) -> Err:
        return self._fail(call, ConsulError.transport(exc))

    def _build_request(
        self, client: Union[httpx.Client, httpx.AsyncClient], call: PreparedCall
    ) -> Union[httpx.Request, Err]:
        """Build the request, or return an Err if it cannot be encoded."""
        try:
            return client.build_request(
                call.endpoint.method, self._url(call.path), **self._request_kwargs(call)
            )
        except TRANSPORT_ERRORS as exc:
            return self._transport_failure(call, exc)
        except ENCODE_ERRORS as exc:
            return self._encode_failure(call, exc)

    def _interpret(self, call: PreparedCall, response: httpx.Response) -> Result:
        """
        Decode the body and map the status code to a result.

        Reads decode JSON whatever the status; mutations only look at the
        body text when the status is not 200.
        """
        status = response.status_code

        if call.endpoint.is_read:
            try:
                payload = response.json()
            except DECODE_ERRORS as exc:
                error = ConsulError(
                    message=str(exc),
                    cause=exc,
                    kind=ErrorKind.DECODE,
                    status_code=None if status == 200 else status,
                )
                return self._fail(call, error)

            if status == 200:
                try:
                    converted = call.converter(payload)
                except CONVERSION_ERRORS as exc:
                    return self._fail(call, ConsulError.decode(exc), exc_info=True)

                logger.debug(
                    f"Consul {call.endpoint.operation} returned "
                    f"{len(converted)} entries"
                )
                return Ok(converted)

            message = extract_error_message(payload, call.endpoint.error_shape)
            if message is None:
                message = response.text
            return self._fail(call, ConsulError.application(message, status))

        if status == 200:
            logger.debug(f"Consul {call.endpoint.operation} succeeded: {call.path}")
            return Ok(True)

        try:
            text = response.text
        except ValueError as exc:
            return self._fail(call, ConsulError.decode(exc))

        return self._fail(call, ConsulError.application(text, status))


class ConsulClient(BaseConsulClient):
    """
    Blocking Consul client backed by ``httpx.Client``.

    Holds no per-call state, so one instance can be shared between threads
    as far as the underlying ``httpx.Client`` allows.
    """

    def __init__(
        self,
        base_uri: str,
        acl_token: str = "",
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """
        Initialize the client. No request is made until the first call.

        Args:
            base_uri: Consul agent address, e.g. ``http://127.0.0.1:8500``
            acl_token: ACL token sent as ``X-Consul-Token``, empty for none
            timeout: Transport timeout in seconds (httpx default if None)
            transport: Custom httpx transport for the owned client
            http_client: Preconfigured client to use instead of creating one
        """
        super().__init__(base_uri, acl_token)

        self._timeout = timeout
        self._transport = transport
        self._owns_client = http_client is None
        self._http = self._create_client() if http_client is None else http_client

        logger.info(f"Initialized ConsulClient: base_uri={self._base_uri}")

    def _create_client(self) -> httpx.Client:
        client_kwargs: Dict[str, Any] = {}
        if self._timeout is not None:
            client_kwargs["timeout"] = self._timeout
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        return httpx.Client(**client_kwargs)

    def _get_client(self) -> httpx.Client:
        """Return the HTTP client, reopening an owned client after close()."""
        if self._owns_client and self._http.is_closed:
            self._http = self._create_client()
        return self._http

    @classmethod
    def from_settings(
        cls, settings: Optional[ConsulSettings] = None, **kwargs: Any
    ) -> "ConsulClient":
        """Build a client from environment settings."""
        settings = settings or get_settings()
        kwargs.setdefault("timeout", settings.CONSUL_TIMEOUT)
        return cls(settings.CONSUL_HTTP_ADDR, settings.CONSUL_HTTP_TOKEN, **kwargs)

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "ConsulClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def _execute(self, call: PreparedCall) -> Result:
        self._log_request(call)
        client = self._get_client()
        request = self._build_request(client, call)
        if isinstance(request, Err):
            return request

        try:
            response = client.send(request)
        except SEND_ERRORS as exc:
            return self._transport_failure(call, exc)

        return self._interpret(call, response)

    def get_service(self, name: str) -> Result[List[CatalogService]]:
        """
        List the catalog instances of a service.

        Args:
            name: Service name

        Returns:
            Ok with the instances, or Err
        """
        return self._execute(self._get_service_call(name))

    def get_checks_by_state(
        self, state: Union[HealthState, str]
    ) -> Result[List[HealthCheck]]:
        """
        List health checks in a given state.

        Args:
            state: One of any, passing, warning, critical

        Returns:
            Ok with the checks, or Err
        """
        return self._execute(self._get_checks_by_state_call(state))

    def read_key(self, key: str) -> Result[List[Value]]:
        """
        Read a key from the KV store.

        Args:
            key: Key path, e.g. ``config/app/db``

        Returns:
            Ok with the matching entries, or Err
        """
        return self._execute(self._read_key_call(key))

    def register_service(self, payload: RegistrationPayload) -> Result[bool]:
        """Register a service through the catalog."""
        return self._execute(self._register_call(Endpoint.REGISTER_SERVICE, payload))

    def register_check(self, payload: RegistrationPayload) -> Result[bool]:
        """Register a check through the catalog."""
        return self._execute(self._register_call(Endpoint.REGISTER_CHECK, payload))

    def create_key(
        self, key: str, value: Union[str, bytes], flags: Optional[int] = None
    ) -> Result[bool]:
        """
        Create or update a key.

        Args:
            key: Key path
            value: Value stored verbatim
            flags: Opaque integer stored alongside the value

        Returns:
            Ok(True), or Err
        """
        return self._execute(self._create_key_call(key, value, flags))

    def deregister_service(self, service_id: str) -> Result[bool]:
        return self._execute(
            self._identifier_call(Endpoint.DEREGISTER_SERVICE, service_id)
        )

    def deregister_check(self, check_id: str) -> Result[bool]:
        return self._execute(self._identifier_call(Endpoint.DEREGISTER_CHECK, check_id))

    def delete_key(self, key: str) -> Result[bool]:
        return self._execute(self._identifier_call(Endpoint.DELETE_KEY, key))
