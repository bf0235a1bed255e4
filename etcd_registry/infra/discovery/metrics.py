"""Prometheus metrics for the etcd registry adapter.

These metrics provide observability into registry operations, helping
monitor registration health, cluster sync reliability and which protocol
generation each adapter bound to.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

from etcd_registry.infra.metrics.prometheus import DEFAULT_LATENCY_BUCKETS, REGISTRY

# ──────────────────────────────────────────────────────────────
# Operation metrics
# ──────────────────────────────────────────────────────────────

etcd_registry_operations_total = Counter(
    "etcd_registry_operations_total",
    "Total registry operations against etcd. "
    "Tracks successful and failed ping/register/deregister calls per protocol generation. "
    "Usage: Increment after each operation attempt.",
    ["operation", "generation", "status"],  # status: success, failure
    registry=REGISTRY,
)

etcd_registry_operation_duration_seconds = Histogram(
    "etcd_registry_operation_duration_seconds",
    "Duration of etcd registry operations in seconds. "
    "Helps identify performance issues with etcd connectivity. "
    "Usage: Observe duration of each store call.",
    ["operation"],  # ping, register, deregister
    buckets=DEFAULT_LATENCY_BUCKETS,
    registry=REGISTRY,
)

# ──────────────────────────────────────────────────────────────
# Cluster sync metrics
# ──────────────────────────────────────────────────────────────

etcd_registry_cluster_syncs_total = Counter(
    "etcd_registry_cluster_syncs_total",
    "Total cluster membership sync attempts. "
    "Failures are logged and never fail the calling operation. "
    "Usage: Increment after each sync attempt.",
    ["generation", "status"],  # status: success, failure
    registry=REGISTRY,
)

# ──────────────────────────────────────────────────────────────
# Version probe metrics
# ──────────────────────────────────────────────────────────────

etcd_registry_version_probes_total = Counter(
    "etcd_registry_version_probes_total",
    "Total etcd version probes, labelled by the detected protocol generation. "
    "Usage: Increment once per successful probe.",
    ["generation"],  # legacy, current
    registry=REGISTRY,
)
