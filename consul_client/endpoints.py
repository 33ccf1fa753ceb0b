"""
Endpoint table for the Consul HTTP API v1.

Each operation the client exposes maps to exactly one ``Endpoint`` member,
which fixes its HTTP method, route prefix and the shape Consul uses for
error responses on that route.
"""

from dataclasses import dataclass
from enum import Enum

API_PREFIX = "/v1"


class ErrorShape(str, Enum):
    """Where the error message lives in a failed response."""

    # {"errors": [{"message": "..."}]}
    ERRORS_LIST = "errors_list"
    # {"error": {"message": "..."}}
    ERROR_OBJECT = "error_object"
    # plain text body
    TEXT = "text"


@dataclass(frozen=True)
class Route:
    operation: str
    method: str
    prefix: str
    error_shape: ErrorShape

    @property
    def is_read(self) -> bool:
        return self.method == "GET"


class Endpoint(Enum):
    """The nine routes the client talks to."""

    GET_SERVICE = Route(
        "get_service", "GET", "/catalog/service/", ErrorShape.ERRORS_LIST
    )
    GET_CHECKS_BY_STATE = Route(
        "get_checks_by_state", "GET", "/health/state/", ErrorShape.ERROR_OBJECT
    )
    READ_KEY = Route("read_key", "GET", "/kv/", ErrorShape.ERROR_OBJECT)
    REGISTER_SERVICE = Route(
        "register_service", "PUT", "/catalog/register", ErrorShape.TEXT
    )
    REGISTER_CHECK = Route(
        "register_check", "PUT", "/catalog/register", ErrorShape.TEXT
    )
    CREATE_KEY = Route("create_key", "PUT", "/kv/", ErrorShape.TEXT)
    DEREGISTER_SERVICE = Route(
        "deregister_service", "PUT", "/catalog/deregister/", ErrorShape.TEXT
    )
    DEREGISTER_CHECK = Route(
        "deregister_check", "PUT", "/catalog/deregister/", ErrorShape.TEXT
    )
    DELETE_KEY = Route("delete_key", "DELETE", "/kv/", ErrorShape.TEXT)

    @property
    def method(self) -> str:
        return self.value.method

    @property
    def operation(self) -> str:
        return self.value.operation

    @property
    def error_shape(self) -> ErrorShape:
        return self.value.error_shape

    @property
    def is_read(self) -> bool:
        return self.value.is_read

    def path(self, identifier: str = "") -> str:
        """
        Build the request path for this endpoint.

        The identifier is appended as given; callers are responsible for
        characters that need escaping.
        """
        return f"{API_PREFIX}{self.value.prefix}{identifier}"
