"""etcd service registry adapter.

This package publishes service liveness records into etcd with:
- Version negotiation between etcd 0.4.x and the etcd 2.x keys API
- Optional TLS and mutual TLS to the cluster
- Best-effort cluster membership sync before every store operation
- OpenTelemetry tracing and Prometheus metrics
- Mock clients for testing

Key characteristics:
- The protocol generation is detected once, when the adapter is built
- Store errors are logged and raised to the caller unchanged
- No retries; the caller owns retry policy

Usage:
    from etcd_registry.infra.discovery import ServiceRecord, create_adapter

    adapter = await create_adapter("etcd://127.0.0.1:2379/services")
    service = ServiceRecord(name="web", id="1", ip="10.0.0.5", port=8080, ttl=30)

    await adapter.register(service)
    await adapter.refresh(service)
    await adapter.deregister(service)
    await adapter.close()

Configuration:
    # Environment variables
    ETCD_URL=etcd://10.0.0.1:2379/services
    ETCD_CA_FILE=/etc/ssl/etcd-ca.pem
    ETCD_CERT_FILE=/etc/ssl/client.pem
    ETCD_KEY_FILE=/etc/ssl/client-key.pem

Testing:
    from etcd_registry.infra.discovery import CurrentBinding, EtcdAdapter, MockKeysClient

    mock_client = MockKeysClient()
    adapter = EtcdAdapter(CurrentBinding(mock_client), prefix="/services")
    await adapter.register(service)

    # Verify behavior
    assert mock_client.keys
"""

from etcd_registry.infra.discovery.adapter import EtcdAdapter
from etcd_registry.infra.discovery.binding import (
    AdapterBinding,
    CurrentBinding,
    LegacyBinding,
    bind,
)
from etcd_registry.infra.discovery.client import (
    DeleteOptions,
    EtcdKeysClient,
    GetOptions,
    SetOptions,
)
from etcd_registry.infra.discovery.factory import EtcdAdapterFactory
from etcd_registry.infra.discovery.legacy_client import LegacyEtcdClient, RawResponse
from etcd_registry.infra.discovery.mock_client import MockKeysClient, MockLegacyEtcdClient
from etcd_registry.infra.discovery.models import Endpoint, ServiceRecord, store_key
from etcd_registry.infra.discovery.protocols import (
    AdapterFactoryProtocol,
    KeysClientProtocol,
    LegacyClientProtocol,
    RegistryAdapterProtocol,
)
from etcd_registry.infra.discovery.registry import (
    available_factories,
    create_adapter,
    get_factory,
    register_factory,
)
from etcd_registry.infra.discovery.sync import ClusterSyncGuard
from etcd_registry.infra.discovery.transport import Transport, TransportConfig, build_transport
from etcd_registry.infra.discovery.version import StoreGeneration, classify_version, probe_version

__all__ = [
    # Protocols
    "AdapterFactoryProtocol",
    "KeysClientProtocol",
    "LegacyClientProtocol",
    "RegistryAdapterProtocol",
    # Models
    "Endpoint",
    "ServiceRecord",
    "store_key",
    # Transport and version probing
    "Transport",
    "TransportConfig",
    "build_transport",
    "StoreGeneration",
    "classify_version",
    "probe_version",
    # Clients
    "LegacyEtcdClient",
    "RawResponse",
    "EtcdKeysClient",
    "GetOptions",
    "SetOptions",
    "DeleteOptions",
    "MockLegacyEtcdClient",
    "MockKeysClient",
    # Adapter
    "AdapterBinding",
    "LegacyBinding",
    "CurrentBinding",
    "bind",
    "ClusterSyncGuard",
    "EtcdAdapter",
    "EtcdAdapterFactory",
    # Factory registry
    "register_factory",
    "get_factory",
    "available_factories",
    "create_adapter",
]
