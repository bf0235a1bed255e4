"""Tests for the cluster sync guard."""

from __future__ import annotations

import logging

import pytest

from etcd_registry.core.settings.etcd import SyncPolicy
from etcd_registry.infra.discovery.binding import CurrentBinding, LegacyBinding
from etcd_registry.infra.discovery.metrics import etcd_registry_cluster_syncs_total
from etcd_registry.infra.discovery.sync import ClusterSyncGuard


def _sync_count(generation: str, status: str) -> float:
    return etcd_registry_cluster_syncs_total.labels(
        generation=generation, status=status
    )._value.get()


@pytest.mark.unit
class TestClusterSyncGuard:
    def test_default_policy(self):
        assert ClusterSyncGuard().policy is SyncPolicy.WARN_AND_CONTINUE

    @pytest.mark.asyncio
    async def test_legacy_success(self, mock_legacy_client):
        before = _sync_count("legacy", "success")

        result = await ClusterSyncGuard().sync(LegacyBinding(mock_legacy_client))

        assert result is True
        assert len(mock_legacy_client.get_calls("sync_cluster")) == 1
        assert _sync_count("legacy", "success") == before + 1

    @pytest.mark.asyncio
    async def test_legacy_failure_warns(self, mock_legacy_client, caplog):
        mock_legacy_client.fail_sync = True

        with caplog.at_level(logging.WARNING):
            result = await ClusterSyncGuard().sync(LegacyBinding(mock_legacy_client))

        assert result is False
        assert "etcd: sync cluster was unsuccessful" in caplog.text

    @pytest.mark.asyncio
    async def test_current_failure_is_not_raised(self, mock_keys_client, caplog):
        mock_keys_client.fail_sync = True

        with caplog.at_level(logging.WARNING):
            result = await ClusterSyncGuard().sync(CurrentBinding(mock_keys_client))

        assert result is False
        assert "etcd: sync cluster was unsuccessful" in caplog.text

    @pytest.mark.asyncio
    async def test_current_success(self, mock_keys_client):
        assert await ClusterSyncGuard().sync(CurrentBinding(mock_keys_client)) is True

    @pytest.mark.asyncio
    async def test_skip_policy_never_syncs(self, mock_keys_client):
        guard = ClusterSyncGuard(SyncPolicy.SKIP)

        assert await guard.sync(CurrentBinding(mock_keys_client)) is False
        assert mock_keys_client.get_calls("sync") == []
