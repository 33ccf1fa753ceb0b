"""
Logging configuration for applications embedding the Consul client.

The client itself only emits records through ``get_logger``; structured
context travels in the ``extra_fields`` attribute. The formatters here
render those fields, and the request ID set by the caller is logged and
forwarded to Consul as ``X-Request-ID``.
"""

import json
import logging
import sys
from contextvars import ContextVar
from typing import Any, Dict, Optional
from uuid import uuid4

from .config import ConsulSettings, get_settings

request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

DEFAULT_LOGGER_NAME = "consul-client"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: core fields, request ID and ``extra_fields``."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(getattr(record, "extra_fields", None) or {})

        request_id = request_id_context.get()
        if request_id:
            log_data["request_id"] = request_id
        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class HumanReadableFormatter(logging.Formatter):
    """
    Human-readable log formatter for local development.

    Colors the level name and appends structured fields as ``key=value``
    pairs after the message.
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
        "RESET": "\033[0m",
    }

    def format(self, record: logging.LogRecord) -> str:
        request_id = request_id_context.get()
        color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
        reset = self.COLORS["RESET"]

        log_parts = [
            f"{color}{record.levelname:8}{reset}",
            f"[{record.name}]",
        ]

        if request_id:
            log_parts.append(f"[req:{request_id[:8]}]")

        log_parts.append(record.getMessage())

        extra_fields = getattr(record, "extra_fields", None)
        if extra_fields:
            log_parts.extend(f"{key}={value}" for key, value in extra_fields.items())

        message = " ".join(log_parts)

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def setup_logging(
    log_level: str = "INFO",
    service_name: str = DEFAULT_LOGGER_NAME,
    use_json: bool = False,
) -> logging.Logger:
    """
    Configure root logging for an application using the Consul client.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        service_name: Name of the logger returned to the caller
        use_json: Use JSON structured logging instead of human-readable format

    Returns:
        Configured logger instance
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    formatter: logging.Formatter
    if use_json:
        formatter = StructuredFormatter(datefmt=DATE_FORMAT)
    else:
        formatter = HumanReadableFormatter(datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # Reduce noise from the transport
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    logger = logging.getLogger(service_name)
    logger.setLevel(numeric_level)

    return logger


def setup_logging_from_settings(
    settings: Optional[ConsulSettings] = None,
    service_name: str = DEFAULT_LOGGER_NAME,
) -> logging.Logger:
    """Configure logging from ``LOG_LEVEL`` and ``LOG_JSON``."""
    settings = settings or get_settings()
    return setup_logging(
        log_level=settings.LOG_LEVEL,
        service_name=service_name,
        use_json=settings.LOG_JSON,
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(name or DEFAULT_LOGGER_NAME)


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set the request ID for this context, generating a UUID if None."""
    request_id = request_id or str(uuid4())
    request_id_context.set(request_id)
    return request_id


def get_request_id() -> Optional[str]:
    return request_id_context.get()


def clear_request_id() -> None:
    request_id_context.set(None)
