"""
Value objects for Consul catalog, health and key/value data.

Read models are built from the JSON Consul returns and are immutable.
Registration models render the PascalCase payloads the catalog register
endpoint expects.
"""

import base64
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple


class HealthStatus(str, Enum):
    """Status of a single health check."""

    PASSING = "passing"
    WARNING = "warning"
    CRITICAL = "critical"


class HealthState(str, Enum):
    """States accepted by the health state query."""

    ANY = "any"
    PASSING = "passing"
    WARNING = "warning"
    CRITICAL = "critical"


@dataclass(frozen=True)
class CatalogService:
    """
    One service instance as listed by the catalog.

    Node-level fields (``node``, ``address``, ``datacenter``) describe the
    agent the service is registered on; ``service_*`` fields describe the
    instance itself.
    """

    node: str
    address: str
    service_id: str
    service_name: str
    service_port: int
    datacenter: Optional[str] = None
    service_address: str = ""
    service_tags: Tuple[str, ...] = ()
    service_meta: Mapping[str, str] = field(default_factory=dict)
    node_meta: Mapping[str, str] = field(default_factory=dict)
    tagged_addresses: Mapping[str, str] = field(default_factory=dict)
    create_index: int = 0
    modify_index: int = 0

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "CatalogService":
        """
        Build from one element of ``GET /v1/catalog/service/<name>``.

        Raises:
            KeyError: If a required field is missing
            TypeError: If ``item`` is not an object
        """
        return cls(
            node=item["Node"],
            address=item["Address"],
            service_id=item["ServiceID"],
            service_name=item["ServiceName"],
            service_port=int(item["ServicePort"]),
            datacenter=item.get("Datacenter"),
            service_address=item.get("ServiceAddress") or "",
            service_tags=tuple(item.get("ServiceTags") or ()),
            service_meta=dict(item.get("ServiceMeta") or {}),
            node_meta=dict(item.get("NodeMeta") or {}),
            tagged_addresses=dict(item.get("TaggedAddresses") or {}),
            create_index=int(item.get("CreateIndex", 0)),
            modify_index=int(item.get("ModifyIndex", 0)),
        )

    @property
    def id(self) -> str:
        return self.service_id

    @property
    def name(self) -> str:
        return self.service_name

    @property
    def port(self) -> int:
        return self.service_port

    @property
    def tags(self) -> Tuple[str, ...]:
        return self.service_tags

    @property
    def effective_address(self) -> str:
        """Service address, falling back to the node address when unset."""
        return self.service_address or self.address


@dataclass(frozen=True)
class HealthCheck:
    """A health check as returned by ``GET /v1/health/state/<state>``."""

    node: str
    check_id: str
    name: str
    status: HealthStatus
    notes: str = ""
    output: str = ""
    service_id: str = ""
    service_name: str = ""
    service_tags: Tuple[str, ...] = ()
    create_index: int = 0
    modify_index: int = 0

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "HealthCheck":
        """
        Build from one element of the health state listing.

        Raises:
            KeyError: If a required field is missing
            ValueError: If ``Status`` is not a known check status
        """
        return cls(
            node=item["Node"],
            check_id=item["CheckID"],
            name=item["Name"],
            status=HealthStatus(item["Status"]),
            notes=item.get("Notes") or "",
            output=item.get("Output") or "",
            service_id=item.get("ServiceID") or "",
            service_name=item.get("ServiceName") or "",
            service_tags=tuple(item.get("ServiceTags") or ()),
            create_index=int(item.get("CreateIndex", 0)),
            modify_index=int(item.get("ModifyIndex", 0)),
        )

    @property
    def is_passing(self) -> bool:
        return self.status is HealthStatus.PASSING


@dataclass(frozen=True)
class Value:
    """
    A key/value entry.

    ``value`` holds the decoded text; it is ``None`` when the key exists
    without a value.
    """

    key: str
    value: Optional[str]
    flags: int = 0
    create_index: int = 0
    modify_index: int = 0
    lock_index: int = 0
    session: Optional[str] = None

    @classmethod
    def from_json(cls, item: Dict[str, Any]) -> "Value":
        """
        Build from one element of ``GET /v1/kv/<key>``.

        Raises:
            KeyError: If ``Key`` is missing
            binascii.Error: If ``Value`` is not valid base64
            UnicodeDecodeError: If the decoded bytes are not UTF-8
        """
        raw = item.get("Value")
        decoded = None
        if raw is not None:
            decoded = base64.b64decode(raw, validate=True).decode("utf-8")

        return cls(
            key=item["Key"],
            value=decoded,
            flags=int(item.get("Flags", 0)),
            create_index=int(item.get("CreateIndex", 0)),
            modify_index=int(item.get("ModifyIndex", 0)),
            lock_index=int(item.get("LockIndex", 0)),
            session=item.get("Session"),
        )


@dataclass(frozen=True)
class ServiceRegistration:
    """
    Catalog registration of a service on a node.

    Rendered by ``to_payload`` into the body of ``PUT /v1/catalog/register``.
    """

    node: str
    address: str
    service_name: str
    service_id: Optional[str] = None
    service_address: Optional[str] = None
    port: Optional[int] = None
    tags: Tuple[str, ...] = ()
    meta: Mapping[str, str] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        service: Dict[str, Any] = {"Service": self.service_name}
        if self.service_id:
            service["ID"] = self.service_id
        if self.service_address:
            service["Address"] = self.service_address
        if self.port is not None:
            service["Port"] = self.port
        if self.tags:
            service["Tags"] = list(self.tags)
        if self.meta:
            service["Meta"] = dict(self.meta)

        return {"Node": self.node, "Address": self.address, "Service": service}


@dataclass(frozen=True)
class CheckRegistration:
    """
    Catalog registration of a check on a node.

    The check may be bound to a service through ``service_id``.
    """

    node: str
    address: str
    name: str
    check_id: Optional[str] = None
    status: HealthStatus = HealthStatus.CRITICAL
    notes: str = ""
    service_id: Optional[str] = None
    definition: Mapping[str, Any] = field(default_factory=dict)

    def to_payload(self) -> Dict[str, Any]:
        check: Dict[str, Any] = {
            "Node": self.node,
            "Name": self.name,
            "Status": self.status.value,
        }
        if self.check_id:
            check["CheckID"] = self.check_id
        if self.notes:
            check["Notes"] = self.notes
        if self.service_id:
            check["ServiceID"] = self.service_id
        if self.definition:
            check["Definition"] = dict(self.definition)

        return {"Node": self.node, "Address": self.address, "Check": check}
