"""The adapter's choice of store client.

An AdapterBinding is either a LegacyBinding or a CurrentBinding, never
both and never neither. Callers dispatch on it with ``match``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, assert_never

from etcd_registry.infra.discovery.client import DEFAULT_HEADER_TIMEOUT, EtcdKeysClient
from etcd_registry.infra.discovery.legacy_client import LegacyEtcdClient
from etcd_registry.infra.discovery.version import StoreGeneration

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.protocols import KeysClientProtocol, LegacyClientProtocol
    from etcd_registry.infra.discovery.transport import Transport


@dataclass(frozen=True, slots=True)
class LegacyBinding:
    """Adapter bound to an etcd 0.4.x client."""

    client: LegacyClientProtocol
    generation: ClassVar[StoreGeneration] = StoreGeneration.LEGACY


@dataclass(frozen=True, slots=True)
class CurrentBinding:
    """Adapter bound to an etcd 2.x keys API client."""

    client: KeysClientProtocol
    generation: ClassVar[StoreGeneration] = StoreGeneration.CURRENT


AdapterBinding = LegacyBinding | CurrentBinding


def bind(
    generation: StoreGeneration,
    endpoints: list[str],
    transport: Transport,
    header_timeout: float = DEFAULT_HEADER_TIMEOUT,
) -> AdapterBinding:
    """Create the client for a detected generation.

    Args:
        generation: Result of the version probe.
        endpoints: Member URLs.
        transport: Transport shared with the version probe.
        header_timeout: Per-request timeout for the 2.x client.

    Returns:
        The binding holding exactly one client.
    """
    match generation:
        case StoreGeneration.LEGACY:
            return LegacyBinding(client=LegacyEtcdClient(endpoints, transport))
        case StoreGeneration.CURRENT:
            return CurrentBinding(
                client=EtcdKeysClient(endpoints, transport, header_timeout=header_timeout)
            )
        case _:
            assert_never(generation)


async def close_binding(binding: AdapterBinding) -> None:
    """Close whichever client the binding holds."""
    match binding:
        case LegacyBinding(client=client) | CurrentBinding(client=client):
            await client.close()
        case _:
            assert_never(binding)
