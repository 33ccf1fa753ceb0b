"""
Consul HTTP Client Package.

Typed access to the Consul agent HTTP API: catalog and health queries,
key/value operations, and catalog registration. Every operation returns
``Ok`` or ``Err`` instead of raising.
"""

__version__ = "1.0.0"

from .async_client import AsyncConsulClient
from .client import ConsulClient
from .config import ConsulSettings, get_settings
from .conversions import (
    convert_to_catalog_services,
    convert_to_health_checks,
    convert_to_health_clients,
    convert_to_values,
)
from .endpoints import Endpoint
from .exceptions import ConsulClientException, ConsulException
from .logging_config import setup_logging, setup_logging_from_settings
from .models import (
    CatalogService,
    CheckRegistration,
    HealthCheck,
    HealthState,
    HealthStatus,
    ServiceRegistration,
    Value,
)
from .result import ConsulError, Err, ErrorKind, Ok, Result

__all__ = [
    "AsyncConsulClient",
    "CatalogService",
    "CheckRegistration",
    "ConsulClient",
    "ConsulClientException",
    "ConsulError",
    "ConsulException",
    "ConsulSettings",
    "Endpoint",
    "Err",
    "ErrorKind",
    "HealthCheck",
    "HealthState",
    "HealthStatus",
    "Ok",
    "Result",
    "ServiceRegistration",
    "Value",
    "convert_to_catalog_services",
    "convert_to_health_checks",
    "convert_to_health_clients",
    "convert_to_values",
    "get_settings",
    "setup_logging",
    "setup_logging_from_settings",
    "__version__",
]
