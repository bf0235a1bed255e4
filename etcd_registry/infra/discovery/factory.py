"""etcd adapter factory.

Construction runs in a fixed order: transport (TLS material) -> endpoint
-> version probe -> client binding -> adapter. Any failure along the way
is a ConfigurationError; TLS problems surface before the network is touched.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import TYPE_CHECKING

from etcd_registry.infra.discovery.adapter import EtcdAdapter
from etcd_registry.infra.discovery.binding import bind
from etcd_registry.infra.discovery.models import Endpoint
from etcd_registry.infra.discovery.registry import register_factory
from etcd_registry.infra.discovery.sync import ClusterSyncGuard
from etcd_registry.infra.discovery.transport import build_transport
from etcd_registry.infra.discovery.version import probe_version

if TYPE_CHECKING:
    import httpx

    from etcd_registry.core.settings.etcd import EtcdSettings

logger = logging.getLogger(__name__)


class EtcdAdapterFactory:
    """Builds EtcdAdapter instances.

    Example:
        factory = EtcdAdapterFactory(settings=EtcdSettings(ca_file="/etc/ssl/ca.pem"))
        adapter = await factory.new("etcd://10.0.0.1:2379/services")
    """

    def __init__(
        self,
        settings: EtcdSettings | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the factory.

        Args:
            settings: EtcdSettings instance. If None, loads from environment
                      when the first adapter is built.
            http_transport: Optional httpx transport replacing the network
                            stack (e.g. ``httpx.MockTransport`` in tests).
        """
        self._settings = settings
        self._http_transport = http_transport

    @property
    def settings(self) -> EtcdSettings:
        if self._settings is None:
            from etcd_registry.core.settings import get_etcd_settings

            self._settings = get_etcd_settings()
        return self._settings

    async def new(self, uri: str | None = None) -> EtcdAdapter:
        """Probe the endpoint and build an adapter bound to the matching client.

        Args:
            uri: Adapter URI (``etcd://host:port/prefix``). Defaults to the
                 configured ``url``.

        Returns:
            EtcdAdapter ready for use.

        Raises:
            ConfigurationError: On unusable TLS material or an unreachable endpoint.
        """
        settings = self.settings
        config = settings.to_transport_config()

        transport = build_transport(config)
        if self._http_transport is not None:
            transport = dataclasses.replace(transport, http_transport=self._http_transport)

        endpoint = Endpoint.from_uri(uri or settings.url, scheme=config.scheme)
        generation = await probe_version(endpoint.url, transport)
        binding = bind(
            generation,
            [endpoint.url],
            transport,
            header_timeout=settings.header_timeout,
        )

        logger.info(
            "etcd registry adapter created",
            extra={
                "endpoint": endpoint.url,
                "prefix": endpoint.prefix,
                "generation": generation.value,
                "sync_policy": settings.sync_policy.value,
            },
        )
        return EtcdAdapter(
            binding,
            prefix=endpoint.prefix,
            sync_guard=ClusterSyncGuard(settings.sync_policy),
        )


register_factory("etcd", EtcdAdapterFactory())
