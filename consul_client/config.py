"""
Configuration module for the Consul client.

Provides environment-driven configuration using Pydantic settings. The
variable names follow the ones the Consul CLI itself reads, so an
application can share its agent address and token with the ``consul``
binary.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConsulSettings(BaseSettings):
    """
    Settings used to build a Consul client.

    Attributes:
        CONSUL_HTTP_ADDR: Address of the Consul agent (scheme, host, port)
        CONSUL_HTTP_TOKEN: ACL token sent with every request, empty for none
        CONSUL_TIMEOUT: Transport timeout in seconds
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_JSON: Emit JSON structured logs instead of human-readable lines
    """

    CONSUL_HTTP_ADDR: str = Field(
        default="http://127.0.0.1:8500",
        description="Address of the Consul agent HTTP API",
    )
    CONSUL_HTTP_TOKEN: str = Field(
        default="",
        description="Consul ACL token, empty for unauthenticated calls",
    )
    CONSUL_TIMEOUT: float = Field(
        default=10.0,
        gt=0,
        le=300.0,
        description="Transport timeout in seconds",
    )

    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    LOG_JSON: bool = Field(
        default=False,
        description="Use JSON structured logging",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("CONSUL_HTTP_ADDR")
    @classmethod
    def validate_address(cls, value: str) -> str:
        """
        Validate that the agent address is an http(s) URL.

        Args:
            value: The address to validate

        Returns:
            The address without trailing slash

        Raises:
            ValueError: If the address is empty or has no http(s) scheme
        """
        if not value:
            raise ValueError("Consul address cannot be empty")

        value = value.rstrip("/")

        if not (value.startswith("http://") or value.startswith("https://")):
            raise ValueError(
                f"Consul address must start with http:// or https://, got: {value}"
            )

        return value


@lru_cache
def get_settings() -> ConsulSettings:
    """Return the process-wide settings, read once from the environment."""
    return ConsulSettings()
