"""Protocol definitions for the registry adapter and its store clients.

This module defines:
- LegacyClientProtocol / KeysClientProtocol: the two store client shapes,
  implemented by the real clients and the in-memory mocks
- RegistryAdapterProtocol: what the host framework calls
- AdapterFactoryProtocol: how the host framework builds an adapter from a URI
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.client import DeleteOptions, GetOptions, SetOptions
    from etcd_registry.infra.discovery.legacy_client import RawResponse
    from etcd_registry.infra.discovery.models import ServiceRecord, StoreResponse


@runtime_checkable
class LegacyClientProtocol(Protocol):
    """Operations of an etcd 0.4.x client."""

    async def send_raw_request(self, method: str, relative_path: str) -> RawResponse:
        """Send a request without decoding the body."""
        ...

    async def set(self, key: str, value: str, ttl: int) -> StoreResponse:
        """Write a key with a TTL in seconds (0 for none)."""
        ...

    async def delete(self, key: str, recursive: bool) -> StoreResponse:
        """Delete a key."""
        ...

    async def sync_cluster(self) -> bool:
        """Refresh the member list; True on success."""
        ...

    async def close(self) -> None:
        """Release HTTP resources."""
        ...


@runtime_checkable
class KeysClientProtocol(Protocol):
    """Operations of an etcd 2.x keys API client."""

    async def get(self, key: str, options: GetOptions | None = None) -> StoreResponse:
        """Read a key."""
        ...

    async def set(
        self, key: str, value: str, options: SetOptions | None = None
    ) -> StoreResponse:
        """Write a key."""
        ...

    async def delete(
        self, key: str, options: DeleteOptions | None = None
    ) -> StoreResponse:
        """Delete a key."""
        ...

    async def sync(self) -> None:
        """Refresh the member list; raises on failure."""
        ...

    async def close(self) -> None:
        """Release HTTP resources."""
        ...


@runtime_checkable
class RegistryAdapterProtocol(Protocol):
    """Contract between the host framework and a registry backend.

    Store failures are raised to the caller, who owns any retry policy.
    """

    async def ping(self) -> None:
        """Check that the backend answers."""
        ...

    async def register(self, service: ServiceRecord) -> None:
        """Publish a service instance."""
        ...

    async def deregister(self, service: ServiceRecord) -> None:
        """Withdraw a service instance."""
        ...

    async def refresh(self, service: ServiceRecord) -> None:
        """Extend the lifetime of a published service instance."""
        ...

    async def services(self) -> list[ServiceRecord]:
        """List published service instances."""
        ...

    async def close(self) -> None:
        """Release backend resources."""
        ...


@runtime_checkable
class AdapterFactoryProtocol(Protocol):
    """Builds a registry adapter for a URI."""

    async def new(self, uri: str) -> RegistryAdapterProtocol:
        """Create an adapter for ``uri``."""
        ...
