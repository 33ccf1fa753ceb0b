"""
Consul Client Tests - Test Configuration.

Provides pytest fixtures with sample Consul payloads and a recording mock
transport so client tests never touch the network.
"""

import base64
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest


class RecordingHandler:
    """
    Mock transport handler that records requests and replays a response.

    Attributes:
        requests: Every request received, in order
    """

    def __init__(self, response: Callable[[httpx.Request], httpx.Response]) -> None:
        self._response = response
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self._response(request)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]


@pytest.fixture
def make_handler() -> Callable[..., RecordingHandler]:
    """
    Build a recording handler.

    Pass ``json=``, ``text=`` or ``content=`` for the body, ``status=`` for
    the status code, or ``error=`` to raise a transport exception instead.
    """

    def factory(
        status: int = 200, error: Optional[Exception] = None, **body: Any
    ) -> RecordingHandler:
        def respond(request: httpx.Request) -> httpx.Response:
            if error is not None:
                raise error
            return httpx.Response(status, **body)

        return RecordingHandler(respond)

    return factory


@pytest.fixture
def catalog_services() -> List[Dict[str, Any]]:
    """Two instances of the ``web`` service as the catalog lists them."""
    return [
        {
            "ID": "40e4a748-2192-161a-0510-9bf59fe950b5",
            "Node": "node-1",
            "Address": "10.0.0.1",
            "Datacenter": "dc1",
            "TaggedAddresses": {"lan": "10.0.0.1", "wan": "198.18.0.1"},
            "NodeMeta": {"rack": "a1"},
            "ServiceID": "web-1",
            "ServiceName": "web",
            "ServiceTags": ["primary", "v1"],
            "ServiceAddress": "172.17.0.3",
            "ServicePort": 8080,
            "ServiceMeta": {"version": "1.0"},
            "ServiceEnableTagOverride": False,
            "CreateIndex": 10,
            "ModifyIndex": 12,
        },
        {
            "ID": "b6b3a2c1-0000-4a8e-9f2e-111111111111",
            "Node": "node-2",
            "Address": "10.0.0.2",
            "Datacenter": "dc1",
            "ServiceID": "web-2",
            "ServiceName": "web",
            "ServiceTags": [],
            "ServiceAddress": "",
            "ServicePort": 8081,
            "CreateIndex": 11,
            "ModifyIndex": 11,
        },
    ]


@pytest.fixture
def health_checks() -> List[Dict[str, Any]]:
    """A node check and a service check."""
    return [
        {
            "Node": "node-1",
            "CheckID": "serfHealth",
            "Name": "Serf Health Status",
            "Status": "passing",
            "Notes": "",
            "Output": "Agent alive and reachable",
            "ServiceID": "",
            "ServiceName": "",
            "ServiceTags": [],
            "CreateIndex": 3,
            "ModifyIndex": 3,
        },
        {
            "Node": "node-1",
            "CheckID": "service:web-1",
            "Name": "Service 'web' check",
            "Status": "critical",
            "Notes": "",
            "Output": "dial tcp 172.17.0.3:8080: connection refused",
            "ServiceID": "web-1",
            "ServiceName": "web",
            "ServiceTags": ["primary"],
            "CreateIndex": 14,
            "ModifyIndex": 20,
        },
    ]


@pytest.fixture
def kv_entries() -> List[Dict[str, Any]]:
    """A KV read response for ``foo/bar``."""
    return [
        {
            "Key": "foo/bar",
            "Value": base64.b64encode(b"baz").decode("ascii"),
            "Flags": 42,
            "CreateIndex": 100,
            "ModifyIndex": 200,
            "LockIndex": 0,
        }
    ]
