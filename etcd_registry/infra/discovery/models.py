"""Data model for the etcd registry adapter.

- ServiceRecord: one running service instance, supplied per call
- Endpoint: where etcd lives and under which prefix keys are written
- StoreNode / StoreResponse: decoded etcd v2 keys responses
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, Field

from etcd_registry.core.settings.etcd import DEFAULT_ENDPOINT_HOST


def join_host_port(host: str, port: int | str) -> str:
    """Combine host and port into ``host:port``.

    IPv6 literals are wrapped in brackets: ``[::1]:8080``.
    """
    if ":" in host:
        return f"[{host}]:{port}"
    return f"{host}:{port}"


def store_key(prefix: str, name: str, instance_id: str) -> str:
    """Key under which one service instance's address is published.

    Args:
        prefix: Key prefix taken from the adapter URI path (may be empty).
        name: Service name.
        instance_id: Unique service instance ID.

    Returns:
        ``prefix + "/" + name + "/" + instance_id``
    """
    return f"{prefix}/{name}/{instance_id}"


@dataclass(frozen=True, slots=True)
class ServiceRecord:
    """A service instance to publish.

    Attributes:
        name: Logical service name.
        id: Unique instance ID.
        ip: Address to advertise.
        port: Port to advertise.
        ttl: Seconds until the record expires unless refreshed.
    """

    name: str
    id: str
    ip: str = ""
    port: int = 0
    ttl: int = 0

    @property
    def address(self) -> str:
        """Value written to etcd for this record."""
        return join_host_port(self.ip, self.port)


@dataclass(frozen=True, slots=True)
class Endpoint:
    """etcd endpoint and key prefix, fixed at adapter construction."""

    url: str
    prefix: str = ""

    @classmethod
    def from_uri(cls, uri: str, scheme: str = "http") -> Endpoint:
        """Build an endpoint from an adapter URI such as ``etcd://host:port/prefix``.

        The URI scheme only selects the adapter; the endpoint scheme is
        decided by the TLS configuration. A URI without a host points at
        the local default member.

        Args:
            uri: Adapter URI.
            scheme: ``http`` or ``https``.

        Returns:
            Endpoint for the URI.
        """
        parts = urlsplit(uri)
        host = parts.netloc or DEFAULT_ENDPOINT_HOST
        return cls(url=f"{scheme}://{host}", prefix=parts.path)


class StoreNode(BaseModel):
    """A node in an etcd v2 keys response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    key: str = ""
    value: str | None = None
    dir: bool = False
    ttl: int | None = None
    expiration: str | None = None
    modified_index: int = Field(default=0, alias="modifiedIndex")
    created_index: int = Field(default=0, alias="createdIndex")
    nodes: list[StoreNode] = Field(default_factory=list)


class StoreResponse(BaseModel):
    """Decoded etcd v2 keys response body."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    action: str = ""
    node: StoreNode | None = None
    prev_node: StoreNode | None = Field(default=None, alias="prevNode")
    index: int = 0
