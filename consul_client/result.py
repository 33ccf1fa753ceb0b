"""
Result types returned by every Consul client operation.

An operation returns ``Ok`` with its value or ``Err`` with a ``ConsulError``,
never both and never an exception. Callers branch on ``result.is_ok``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar, Union

from .exceptions import ConsulException

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Where in the request pipeline a failure happened."""

    ENCODE = "encode"
    TRANSPORT = "transport"
    DECODE = "decode"
    APPLICATION = "application"


@dataclass(frozen=True)
class ConsulError:
    """
    The single error shape produced by the client.

    Attributes:
        message: Human-readable error text (Consul's own message for
            application errors)
        cause: Underlying exception for encode, transport and decode errors
        kind: Pipeline stage that failed
        status_code: HTTP status for application errors
    """

    message: str
    cause: Optional[BaseException] = None
    kind: ErrorKind = ErrorKind.APPLICATION
    status_code: Optional[int] = None

    @classmethod
    def encode(cls, exc: BaseException) -> "ConsulError":
        return cls(message=str(exc), cause=exc, kind=ErrorKind.ENCODE)

    @classmethod
    def transport(cls, exc: BaseException) -> "ConsulError":
        return cls(message=str(exc), cause=exc, kind=ErrorKind.TRANSPORT)

    @classmethod
    def decode(cls, exc: BaseException) -> "ConsulError":
        return cls(message=str(exc), cause=exc, kind=ErrorKind.DECODE)

    @classmethod
    def application(cls, message: str, status_code: int) -> "ConsulError":
        return cls(message=message, kind=ErrorKind.APPLICATION, status_code=status_code)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome holding the converted value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed outcome holding the normalized error."""

    error: ConsulError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self):
        """
        Raise the error as an exception.

        Raises:
            ConsulException: Always, wrapping ``self.error``
        """
        raise ConsulException(self.error)


Result = Union[Ok[T], Err]
