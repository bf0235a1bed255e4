"""Wire-level tests for the etcd 0.4.x client."""

from __future__ import annotations

from urllib.parse import parse_qs

import httpx
import pytest

from etcd_registry.core.exceptions import EtcdError
from etcd_registry.infra.discovery.legacy_client import (
    ERROR_CODE_CLUSTER_UNREACHABLE,
    LegacyEtcdClient,
)
from etcd_registry.infra.discovery.transport import Transport

MEMBER = "http://10.0.0.1:4001"


def _client(handler, machines: list[str] | None = None) -> LegacyEtcdClient:
    transport = Transport(http_transport=httpx.MockTransport(handler))
    return LegacyEtcdClient(machines or [MEMBER], transport)


def _set_response(request: httpx.Request) -> httpx.Response:
    form = parse_qs(request.content.decode())
    return httpx.Response(
        201,
        json={
            "action": "set",
            "node": {
                "key": request.url.path.removeprefix("/v2/keys"),
                "value": form["value"][0],
                "modifiedIndex": 5,
                "createdIndex": 5,
            },
        },
    )


@pytest.mark.unit
class TestLegacySet:
    @pytest.mark.asyncio
    async def test_set_puts_form_with_ttl(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _set_response(request)

        client = _client(handler)
        response = await client.set("/services/web/1", "10.0.0.5:8080", 30)
        await client.close()

        request = requests[0]
        assert request.method == "PUT"
        assert str(request.url) == f"{MEMBER}/v2/keys/services/web/1"
        assert parse_qs(request.content.decode()) == {
            "value": ["10.0.0.5:8080"],
            "ttl": ["30"],
        }
        assert response.node.value == "10.0.0.5:8080"

    @pytest.mark.asyncio
    async def test_set_without_ttl_omits_field(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return _set_response(request)

        client = _client(handler)
        await client.set("/web/1", "10.0.0.5:8080", 0)
        await client.close()

        assert "ttl" not in parse_qs(requests[0].content.decode())

    @pytest.mark.asyncio
    async def test_error_payload_raises_etcd_error(self):
        client = _client(
            lambda request: httpx.Response(
                403,
                json={"errorCode": 102, "message": "Not a file", "cause": "/web", "index": 9},
            )
        )

        with pytest.raises(EtcdError) as exc_info:
            await client.set("/web", "x", 0)
        await client.close()

        assert exc_info.value.error_code == 102
        assert exc_info.value.index == 9


@pytest.mark.unit
class TestLegacyDelete:
    @pytest.mark.asyncio
    async def test_delete_is_non_recursive(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"action": "delete", "node": {"key": "/web/1"}})

        client = _client(handler)
        response = await client.delete("/web/1", False)
        await client.close()

        assert requests[0].method == "DELETE"
        assert requests[0].url.path == "/v2/keys/web/1"
        assert requests[0].url.params["recursive"] == "false"
        assert response.action == "delete"


@pytest.mark.unit
class TestLegacyMembers:
    @pytest.mark.asyncio
    async def test_failover_pins_answering_member(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.host == "10.0.0.1":
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, text="etcd 0.4.6")

        client = _client(handler, ["http://10.0.0.1:4001", "http://10.0.0.2:4001"])
        raw = await client.send_raw_request("GET", "version")

        assert raw.status_code == 200
        assert raw.body == b"etcd 0.4.6"
        assert client.machines[0] == "http://10.0.0.2:4001"
        await client.close()

    @pytest.mark.asyncio
    async def test_unreachable_cluster_raises_501(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _client(handler)

        with pytest.raises(EtcdError) as exc_info:
            await client.set("/web/1", "10.0.0.5:8080", 30)
        await client.close()

        assert exc_info.value.error_code == ERROR_CODE_CLUSTER_UNREACHABLE
        assert exc_info.value.message == "All the given peers are not reachable"

    @pytest.mark.asyncio
    async def test_sync_cluster_replaces_machines(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v2/machines"
            return httpx.Response(200, text=f"{MEMBER}, http://10.0.0.2:4001")

        client = _client(handler)

        assert await client.sync_cluster() is True
        assert client.machines == [MEMBER, "http://10.0.0.2:4001"]
        await client.close()

    @pytest.mark.asyncio
    async def test_sync_cluster_failure_returns_false(self):
        client = _client(lambda request: httpx.Response(500, text="boom"))

        assert await client.sync_cluster() is False
        assert client.machines == [MEMBER]
        await client.close()

    @pytest.mark.asyncio
    async def test_sync_cluster_unreachable_never_raises(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectTimeout("timed out", request=request)

        client = _client(handler)

        assert await client.sync_cluster() is False
        await client.close()


@pytest.mark.unit
class TestLegacyLeaderRedirect:
    @pytest.mark.asyncio
    async def test_follower_redirect_is_followed_and_leader_pinned(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.host == "follower":
                return httpx.Response(
                    307,
                    headers={"Location": f"http://leader:4001{request.url.path}"},
                )
            return _set_response(request)

        client = _client(handler, ["http://follower:4001"])
        response = await client.set("/services/web/1", "10.0.0.5:8080", 30)

        assert [(r.method, r.url.host) for r in requests] == [
            ("PUT", "follower"),
            ("PUT", "leader"),
        ]
        assert parse_qs(requests[1].content.decode()) == {
            "value": ["10.0.0.5:8080"],
            "ttl": ["30"],
        }
        assert response.node.value == "10.0.0.5:8080"
        assert client.machines[0] == "http://leader:4001"

        await client.delete("/services/web/1", False)
        assert requests[-1].url.host == "leader"
        await client.close()

    @pytest.mark.asyncio
    async def test_redirect_keeps_query_string(self):
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.host == "follower":
                return httpx.Response(
                    307,
                    headers={"Location": f"http://leader:4001{request.url.raw_path.decode()}"},
                )
            return httpx.Response(200, json={"action": "delete", "node": {"key": "/web/1"}})

        client = _client(handler, ["http://follower:4001"])
        await client.delete("/web/1", False)
        await client.close()

        assert requests[-1].url.host == "leader"
        assert requests[-1].url.params["recursive"] == "false"
