"""Cluster membership sync before store operations.

Stale membership only degrades later requests, so a failed sync is
reported and the calling operation proceeds.
"""

from __future__ import annotations

import logging
from typing import assert_never

from etcd_registry.core.exceptions import OperationError
from etcd_registry.core.settings.etcd import SyncPolicy
from etcd_registry.infra.discovery.binding import AdapterBinding, CurrentBinding, LegacyBinding
from etcd_registry.infra.discovery.metrics import etcd_registry_cluster_syncs_total

logger = logging.getLogger(__name__)


class ClusterSyncGuard:
    """Refreshes the bound client's member list according to a SyncPolicy.

    Example:
        guard = ClusterSyncGuard(SyncPolicy.WARN_AND_CONTINUE)
        await guard.sync(binding)  # never raises for sync failures
    """

    def __init__(self, policy: SyncPolicy = SyncPolicy.WARN_AND_CONTINUE) -> None:
        self._policy = policy

    @property
    def policy(self) -> SyncPolicy:
        return self._policy

    async def sync(self, binding: AdapterBinding) -> bool:
        """Attempt a membership sync.

        Args:
            binding: The adapter's bound client.

        Returns:
            True if the sync succeeded, False if it failed or was skipped.
        """
        if self._policy is SyncPolicy.SKIP:
            return False

        match binding:
            case LegacyBinding(client=client):
                result = await client.sync_cluster()
            case CurrentBinding(client=client):
                try:
                    await client.sync()
                    result = True
                except OperationError as e:
                    logger.debug("etcd: member sync error", extra={"error": str(e)})
                    result = False
            case _:
                assert_never(binding)

        etcd_registry_cluster_syncs_total.labels(
            generation=binding.generation.value,
            status="success" if result else "failure",
        ).inc()

        if not result:
            logger.warning(
                "etcd: sync cluster was unsuccessful",
                extra={"generation": binding.generation.value},
            )
        return result
