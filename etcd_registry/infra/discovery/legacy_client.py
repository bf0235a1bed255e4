"""Client for etcd 0.4.x members.

Speaks the etcd 0.4.x API the way the go-etcd v0 client does:
- keys are written with form-encoded PUTs carrying an integer TTL
- a follower's redirect to the leader is followed and the leader pinned
- unreachable clusters surface as an etcd error with code 501
- ``sync_cluster`` reports success as a boolean and never raises
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from etcd_registry.core.exceptions import ClusterUnavailableError, EtcdError, OperationError
from etcd_registry.infra.discovery.members import MemberPool, decode_response, keys_path
from etcd_registry.infra.discovery.models import StoreResponse

if TYPE_CHECKING:
    import httpx

    from etcd_registry.infra.discovery.transport import Transport

logger = logging.getLogger(__name__)

ERROR_CODE_CLUSTER_UNREACHABLE = 501


@dataclass(frozen=True, slots=True)
class RawResponse:
    """Undecoded response to a raw request."""

    status_code: int
    body: bytes


class LegacyEtcdClient:
    """etcd 0.4.x client.

    Example:
        client = LegacyEtcdClient(["http://127.0.0.1:4001"], transport)
        await client.set("/services/web/1", "10.0.0.5:8080", 30)
        await client.close()
    """

    def __init__(self, machines: list[str], transport: Transport) -> None:
        """Initialize the client.

        Args:
            machines: Member URLs to try, in order.
            transport: Transport shared with the version probe.
        """
        self._pool = MemberPool(machines, transport, follow_redirects=True)

    @property
    def machines(self) -> list[str]:
        """Known cluster members."""
        return self._pool.endpoints

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            return await self._pool.request(method, path, params=params, data=data)
        except ClusterUnavailableError as e:
            raise EtcdError(
                error_code=ERROR_CODE_CLUSTER_UNREACHABLE,
                message="All the given peers are not reachable",
                cause=f"Tried to connect to each peer and failed: {e.errors}",
            ) from e

    async def send_raw_request(self, method: str, relative_path: str) -> RawResponse:
        """Send a request without interpreting the response body.

        Args:
            method: HTTP method.
            relative_path: Path relative to the member root, e.g. ``version``.

        Returns:
            RawResponse with status and body.

        Raises:
            EtcdError: If no member answers or the member reports an error status.
        """
        response = await self._request(method, "/" + relative_path.lstrip("/"))
        if response.status_code >= 400:
            decode_response(response)
        return RawResponse(status_code=response.status_code, body=response.content)

    async def set(self, key: str, value: str, ttl: int) -> StoreResponse:
        """Set a key, creating it if needed.

        Args:
            key: Key path.
            value: Value to store.
            ttl: Seconds until expiry; 0 means no expiry.

        Returns:
            Decoded etcd response.
        """
        form = {"value": value}
        if ttl > 0:
            form["ttl"] = str(ttl)
        response = await self._request("PUT", keys_path(key), data=form)
        return StoreResponse.model_validate(decode_response(response))

    async def delete(self, key: str, recursive: bool) -> StoreResponse:
        """Delete a key.

        Args:
            key: Key path.
            recursive: Also delete children of a directory key.

        Returns:
            Decoded etcd response.
        """
        params = {"recursive": "true" if recursive else "false"}
        response = await self._request("DELETE", keys_path(key), params=params)
        return StoreResponse.model_validate(decode_response(response))

    async def sync_cluster(self) -> bool:
        """Refresh the member list from ``/v2/machines``.

        Returns:
            True if the member list was refreshed, False otherwise.
        """
        try:
            response = await self._request("GET", "/v2/machines")
        except OperationError as e:
            logger.debug("etcd: machine list unavailable", extra={"error": str(e)})
            return False

        if response.status_code >= 400:
            return False

        machines = [m.strip() for m in response.text.split(",") if m.strip()]
        if not machines:
            return False

        self._pool.replace(machines)
        logger.debug("etcd: cluster machines synced", extra={"machines": machines})
        return True

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._pool.aclose()
        logger.debug("LegacyEtcdClient closed")
