"""etcd registry adapter.

EtcdAdapter publishes and withdraws service records in etcd through
whichever client its binding holds. Callers see the same behaviour for
both protocol generations:

- every store operation is preceded by a best-effort cluster sync
- store errors are logged with an ``etcd:`` prefix and re-raised unchanged
- nothing is retried; retry policy belongs to the caller
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import timedelta
from typing import TYPE_CHECKING, assert_never

from opentelemetry import trace

from etcd_registry.core.exceptions import OperationError
from etcd_registry.infra.discovery.binding import (
    AdapterBinding,
    CurrentBinding,
    LegacyBinding,
    close_binding,
)
from etcd_registry.infra.discovery.client import DeleteOptions, GetOptions, SetOptions
from etcd_registry.infra.discovery.metrics import (
    etcd_registry_operation_duration_seconds,
    etcd_registry_operations_total,
)
from etcd_registry.infra.discovery.models import ServiceRecord, store_key
from etcd_registry.infra.discovery.sync import ClusterSyncGuard

if TYPE_CHECKING:
    from opentelemetry.trace import Span

    from etcd_registry.infra.discovery.version import StoreGeneration

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


class EtcdAdapter:
    """Registry adapter backed by etcd.

    Example:
        adapter = await EtcdAdapterFactory().new("etcd://127.0.0.1:2379/services")
        service = ServiceRecord(name="web", id="1", ip="10.0.0.5", port=8080, ttl=30)

        await adapter.register(service)   # /services/web/1 = "10.0.0.5:8080"
        await adapter.refresh(service)    # same write, renews the TTL
        await adapter.deregister(service)
        await adapter.close()
    """

    def __init__(
        self,
        binding: AdapterBinding,
        prefix: str = "",
        sync_guard: ClusterSyncGuard | None = None,
    ) -> None:
        """Initialize the adapter.

        Args:
            binding: The client chosen by the version probe.
            prefix: Key prefix under which services are written.
            sync_guard: Membership sync policy. Defaults to warn-and-continue.
        """
        self._binding = binding
        self._prefix = prefix
        self._sync_guard = sync_guard or ClusterSyncGuard()

    @property
    def binding(self) -> AdapterBinding:
        return self._binding

    @property
    def generation(self) -> StoreGeneration:
        """Protocol generation of the bound client."""
        return self._binding.generation

    @property
    def prefix(self) -> str:
        return self._prefix

    def key_for(self, service: ServiceRecord) -> str:
        """Key under which ``service`` is published."""
        return store_key(self._prefix, service.name, service.id)

    @contextmanager
    def _instrument(self, operation: str, key: str | None = None) -> Iterator[Span]:
        start_time = time.perf_counter()
        status = "failure"

        with tracer.start_as_current_span(f"etcd.{operation}") as span:
            span.set_attribute("etcd.generation", self.generation.value)
            if key is not None:
                span.set_attribute("etcd.key", key)
            try:
                yield span
                status = "success"
            finally:
                span.set_attribute("etcd.success", status == "success")
                etcd_registry_operation_duration_seconds.labels(
                    operation=operation
                ).observe(time.perf_counter() - start_time)
                etcd_registry_operations_total.labels(
                    operation=operation,
                    generation=self.generation.value,
                    status=status,
                ).inc()

    async def ping(self) -> None:
        """Check that etcd answers a minimal read.

        Raises:
            OperationError: The bound client's error, unchanged.
        """
        await self._sync_guard.sync(self._binding)

        with self._instrument("ping"):
            try:
                match self._binding:
                    case LegacyBinding(client=client):
                        await client.send_raw_request("GET", "version")
                    case CurrentBinding(client=client):
                        await client.get("/", GetOptions())
                    case _:
                        assert_never(self._binding)
            except OperationError as e:
                logger.warning(
                    "etcd: ping failed: %s",
                    e,
                    extra={"generation": self.generation.value},
                )
                raise

    async def register(self, service: ServiceRecord) -> None:
        """Write ``host:port`` under the service key with the record's TTL.

        Args:
            service: Service instance to publish.

        Raises:
            OperationError: The bound client's error, unchanged.
        """
        await self._sync_guard.sync(self._binding)

        key = self.key_for(service)
        value = service.address
        ttl = max(service.ttl, 0)

        with self._instrument("register", key):
            try:
                match self._binding:
                    case LegacyBinding(client=client):
                        await client.set(key, value, ttl)
                    case CurrentBinding(client=client):
                        await client.set(
                            key,
                            value,
                            SetOptions(ttl=timedelta(seconds=ttl) if ttl else None),
                        )
                    case _:
                        assert_never(self._binding)
            except OperationError as e:
                logger.warning(
                    "etcd: failed to register service: %s",
                    e,
                    extra={"key": key, "service_id": service.id},
                )
                raise

        logger.debug(
            "Service registered in etcd",
            extra={"key": key, "value": value, "ttl": ttl},
        )

    async def deregister(self, service: ServiceRecord) -> None:
        """Delete the service key (non-recursive).

        Args:
            service: Service instance to withdraw.

        Raises:
            OperationError: The bound client's error, unchanged.
        """
        await self._sync_guard.sync(self._binding)

        key = self.key_for(service)

        with self._instrument("deregister", key):
            try:
                match self._binding:
                    case LegacyBinding(client=client):
                        await client.delete(key, False)
                    case CurrentBinding(client=client):
                        await client.delete(key, DeleteOptions())
                    case _:
                        assert_never(self._binding)
            except OperationError as e:
                logger.warning(
                    "etcd: failed to deregister service: %s",
                    e,
                    extra={"key": key, "service_id": service.id},
                )
                raise

        logger.debug("Service deregistered from etcd", extra={"key": key})

    async def refresh(self, service: ServiceRecord) -> None:
        """Renew the TTL by rewriting the record."""
        await self.register(service)

    async def services(self) -> list[ServiceRecord]:
        """Listing registered services is not supported; always empty."""
        return []

    async def close(self) -> None:
        """Close the bound client."""
        await close_binding(self._binding)

    async def __aenter__(self) -> EtcdAdapter:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
