"""
Exception classes for the Consul client.

Client operations never raise these: every operation returns a result value.
``ConsulException`` is only raised when a caller explicitly unwraps a failed
result.
"""

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from .result import ConsulError


class ConsulClientException(Exception):
    """
    Base exception for all Consul client errors.

    All custom exceptions should inherit from this class
    for consistent error handling.
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Initialize Consul client exception.

        Args:
            message: Human-readable error message
            details: Additional context about the error
        """
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConsulException(ConsulClientException):
    """
    Raised by ``Err.unwrap()`` to turn a failed result into an exception.

    Carries the ``ConsulError`` that produced it.
    """

    def __init__(self, error: "ConsulError") -> None:
        self.error = error
        details: Dict[str, Any] = {"kind": error.kind.value}
        if error.status_code is not None:
            details["status_code"] = error.status_code
        super().__init__(error.message, details)
        self.__cause__ = error.cause
