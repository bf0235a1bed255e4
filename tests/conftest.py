"""Pytest configuration and shared fixtures.

Organization:
    - Environment: keep settings independent of the developer machine
    - Settings Fixtures: fresh settings caches per test
    - Service Fixtures: common service records
    - Store Fixtures: in-memory etcd clients
"""

from __future__ import annotations

import os
from collections.abc import Iterator

import pytest

# Ensure tests run without a real etcd cluster or local config
os.environ.setdefault("ETCD_CONFIG_DIR", "/nonexistent-etcd-config")
os.environ.setdefault("LOGGING_CONFIG_DIR", "/nonexistent-logging-config")


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _clear_settings_caches() -> Iterator[None]:
    """Reset cached settings around every test."""
    from etcd_registry.core.settings import clear_all_caches

    clear_all_caches()
    yield
    clear_all_caches()


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def web_service():
    """Service instance web/1 at 10.0.0.5:8080 with a 30s TTL."""
    from etcd_registry.infra.discovery.models import ServiceRecord

    return ServiceRecord(name="web", id="1", ip="10.0.0.5", port=8080, ttl=30)


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def mock_legacy_client():
    """In-memory etcd 0.4.x client."""
    from etcd_registry.infra.discovery.mock_client import MockLegacyEtcdClient

    return MockLegacyEtcdClient()


@pytest.fixture
def mock_keys_client():
    """In-memory etcd 2.x keys client."""
    from etcd_registry.infra.discovery.mock_client import MockKeysClient

    return MockKeysClient()
