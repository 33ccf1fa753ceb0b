"""
Conversions from Consul JSON arrays to typed entities.

These functions assume the payload follows Consul's documented schema and
raise on anything else; the client turns such failures into decode errors.
"""

from typing import Any, List

from .models import CatalogService, HealthCheck, Value


def _require_list(payload: Any) -> List[Any]:
    if not isinstance(payload, list):
        raise TypeError(f"Expected a JSON array, got {type(payload).__name__}")
    return payload


def convert_to_catalog_services(payload: Any) -> List[CatalogService]:
    """Convert a catalog service listing."""
    return [CatalogService.from_json(item) for item in _require_list(payload)]


def convert_to_health_checks(payload: Any) -> List[HealthCheck]:
    """Convert a health state listing."""
    return [HealthCheck.from_json(item) for item in _require_list(payload)]


def convert_to_values(payload: Any) -> List[Value]:
    """Convert a KV read, decoding each base64 ``Value``."""
    return [Value.from_json(item) for item in _require_list(payload)]


# Historical name of the health conversion
convert_to_health_clients = convert_to_health_checks
