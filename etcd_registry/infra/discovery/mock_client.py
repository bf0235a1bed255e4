"""Mock etcd clients for testing without a real etcd cluster.

This module provides MockLegacyEtcdClient and MockKeysClient, which implement
LegacyClientProtocol and KeysClientProtocol and keep all state in memory.
Wrap them in a binding to drive an EtcdAdapter from unit tests.

Usage in tests:
    from etcd_registry.infra.discovery.binding import CurrentBinding
    from etcd_registry.infra.discovery.mock_client import MockKeysClient

    @pytest.fixture
    def mock_etcd():
        return MockKeysClient()

    async def test_service_registration(mock_etcd):
        adapter = EtcdAdapter(CurrentBinding(mock_etcd), prefix="/services")
        await adapter.register(ServiceRecord(name="web", id="1", ip="10.0.0.5", port=8080))
        assert mock_etcd.keys["/services/web/1"] == "10.0.0.5:8080"
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from etcd_registry.core.exceptions import EtcdError
from etcd_registry.infra.discovery.legacy_client import RawResponse
from etcd_registry.infra.discovery.models import StoreNode, StoreResponse

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.client import DeleteOptions, GetOptions, SetOptions

logger = logging.getLogger(__name__)

ERROR_CODE_KEY_NOT_FOUND = 100
ERROR_CODE_SIMULATED = 300


@dataclass
class CallRecord:
    """Record of a method call for assertion in tests."""

    method: str
    args: dict[str, Any]
    success: bool


class _MockStore:
    """Shared in-memory state and failure injection."""

    def __init__(self) -> None:
        self.keys: dict[str, str] = {}
        self.ttls: dict[str, int] = {}
        self.call_history: list[CallRecord] = []
        self.fail_next_call: bool = False
        self.fail_sync: bool = False
        self.closed: bool = False
        self._index = 0

    def _should_fail(self) -> bool:
        if self.fail_next_call:
            self.fail_next_call = False
            return True
        return False

    def _fail(self, method: str, args: dict[str, Any]) -> EtcdError:
        self.call_history.append(CallRecord(method, args, False))
        logger.debug("%s: %s failed (simulated)", type(self).__name__, method)
        return EtcdError(
            error_code=ERROR_CODE_SIMULATED,
            message="simulated failure",
            cause=method,
        )

    def _next_index(self) -> int:
        self._index += 1
        return self._index

    def _write(self, key: str, value: str, ttl: int) -> StoreResponse:
        self.keys[key] = value
        if ttl > 0:
            self.ttls[key] = ttl
        else:
            self.ttls.pop(key, None)
        index = self._next_index()
        return StoreResponse(
            action="set",
            node=StoreNode(
                key=key,
                value=value,
                ttl=ttl or None,
                modifiedIndex=index,
                createdIndex=index,
            ),
            index=index,
        )

    def _remove(self, method: str, key: str, args: dict[str, Any]) -> StoreResponse:
        if key not in self.keys:
            self.call_history.append(CallRecord(method, args, False))
            raise EtcdError(
                error_code=ERROR_CODE_KEY_NOT_FOUND,
                message="Key not found",
                cause=key,
                index=self._index,
            )
        self.keys.pop(key)
        self.ttls.pop(key, None)
        index = self._next_index()
        return StoreResponse(
            action="delete",
            node=StoreNode(key=key, modifiedIndex=index),
            index=index,
        )

    # Test helper methods

    def get_calls(self, method: str | None = None) -> list[CallRecord]:
        """Get call history, optionally filtered by method name."""
        if method is None:
            return list(self.call_history)
        return [c for c in self.call_history if c.method == method]

    def reset(self) -> None:
        """Reset all state to initial values."""
        self.keys.clear()
        self.ttls.clear()
        self.call_history.clear()
        self.fail_next_call = False
        self.fail_sync = False
        self.closed = False
        self._index = 0


class MockLegacyEtcdClient(_MockStore):
    """In-memory stand-in for LegacyEtcdClient.

    Attributes:
        keys: Stored values by key.
        ttls: TTL in seconds by key, for keys written with a TTL.
        call_history: List of all method calls for assertion.
        fail_next_call: Set to True to raise EtcdError on the next store call.
        fail_sync: Set to True to make sync_cluster report failure.
        version_body: Body returned for ``GET version``.
        closed: Whether close() has been called.
    """

    def __init__(self, version_body: bytes = b"etcd 0.4.6") -> None:
        super().__init__()
        self.version_body = version_body

    async def send_raw_request(self, method: str, relative_path: str) -> RawResponse:
        call_args = {"method": method, "relative_path": relative_path}
        if self._should_fail():
            raise self._fail("send_raw_request", call_args)

        self.call_history.append(CallRecord("send_raw_request", call_args, True))
        if relative_path.strip("/") == "version":
            return RawResponse(status_code=200, body=self.version_body)
        return RawResponse(status_code=200, body=b"")

    async def set(self, key: str, value: str, ttl: int) -> StoreResponse:
        call_args = {"key": key, "value": value, "ttl": ttl}
        if self._should_fail():
            raise self._fail("set", call_args)

        response = self._write(key, value, ttl)
        self.call_history.append(CallRecord("set", call_args, True))
        return response

    async def delete(self, key: str, recursive: bool) -> StoreResponse:
        call_args = {"key": key, "recursive": recursive}
        if self._should_fail():
            raise self._fail("delete", call_args)

        response = self._remove("delete", key, call_args)
        self.call_history.append(CallRecord("delete", call_args, True))
        return response

    async def sync_cluster(self) -> bool:
        success = not self.fail_sync
        self.call_history.append(CallRecord("sync_cluster", {}, success))
        return success

    async def close(self) -> None:
        self.closed = True
        self.call_history.append(CallRecord("close", {}, True))


class MockKeysClient(_MockStore):
    """In-memory stand-in for EtcdKeysClient.

    Attributes:
        keys: Stored values by key.
        ttls: TTL in seconds by key, for keys written with a TTL.
        call_history: List of all method calls for assertion.
        fail_next_call: Set to True to raise EtcdError on the next store call.
        fail_sync: Set to True to make sync raise EtcdError.
        closed: Whether close() has been called.
    """

    async def get(self, key: str, options: GetOptions | None = None) -> StoreResponse:
        call_args = {"key": key, "options": options}
        if self._should_fail():
            raise self._fail("get", call_args)

        if key.strip("/") == "":
            nodes = [StoreNode(key=k, value=v) for k, v in sorted(self.keys.items())]
            node = StoreNode(key="/", dir=True, nodes=nodes)
        elif key in self.keys:
            node = StoreNode(key=key, value=self.keys[key], ttl=self.ttls.get(key))
        else:
            self.call_history.append(CallRecord("get", call_args, False))
            raise EtcdError(
                error_code=ERROR_CODE_KEY_NOT_FOUND,
                message="Key not found",
                cause=key,
                index=self._index,
            )

        self.call_history.append(CallRecord("get", call_args, True))
        return StoreResponse(action="get", node=node, index=self._index)

    async def set(
        self, key: str, value: str, options: SetOptions | None = None
    ) -> StoreResponse:
        call_args = {"key": key, "value": value, "options": options}
        if self._should_fail():
            raise self._fail("set", call_args)

        ttl = 0
        if options is not None and options.ttl is not None:
            ttl = int(options.ttl.total_seconds())
        response = self._write(key, value, ttl)
        self.call_history.append(CallRecord("set", call_args, True))
        return response

    async def delete(
        self, key: str, options: DeleteOptions | None = None
    ) -> StoreResponse:
        call_args = {"key": key, "options": options}
        if self._should_fail():
            raise self._fail("delete", call_args)

        response = self._remove("delete", key, call_args)
        self.call_history.append(CallRecord("delete", call_args, True))
        return response

    async def sync(self) -> None:
        if self.fail_sync:
            self.call_history.append(CallRecord("sync", {}, False))
            raise EtcdError(
                error_code=ERROR_CODE_SIMULATED,
                message="simulated sync failure",
            )
        self.call_history.append(CallRecord("sync", {}, True))

    async def close(self) -> None:
        self.closed = True
        self.call_history.append(CallRecord("close", {}, True))
