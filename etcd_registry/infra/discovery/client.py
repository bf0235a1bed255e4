"""Client for the etcd 2.x keys API.

Speaks the etcd v2 keys API the way the official v2 client does:
- options objects per call (GetOptions, SetOptions, DeleteOptions)
- TTLs expressed as durations and sent in whole seconds
- every request bounded by a response header timeout
- ``sync`` raises when the member list cannot be refreshed
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import timedelta
from typing import TYPE_CHECKING

from etcd_registry.core.exceptions import ClusterUnavailableError, EtcdError
from etcd_registry.infra.discovery.members import MemberPool, decode_response, keys_path
from etcd_registry.infra.discovery.models import StoreResponse

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.transport import Transport

logger = logging.getLogger(__name__)

DEFAULT_HEADER_TIMEOUT = 3.0


def _flag(value: bool) -> str:
    return "true" if value else "false"


@dataclass(frozen=True, slots=True)
class GetOptions:
    """Options for EtcdKeysClient.get."""

    recursive: bool = False
    sorted: bool = False
    quorum: bool = False

    def to_params(self) -> dict[str, str]:
        return {
            "recursive": _flag(self.recursive),
            "sorted": _flag(self.sorted),
            "quorum": _flag(self.quorum),
        }


@dataclass(frozen=True, slots=True)
class SetOptions:
    """Options for EtcdKeysClient.set."""

    ttl: timedelta | None = None
    dir: bool = False

    def to_form(self, value: str) -> dict[str, str]:
        form = {"value": value}
        if self.ttl is not None:
            form["ttl"] = str(int(self.ttl.total_seconds()))
        if self.dir:
            form["dir"] = "true"
        return form


@dataclass(frozen=True, slots=True)
class DeleteOptions:
    """Options for EtcdKeysClient.delete. Flags are only sent when set."""

    recursive: bool = False
    dir: bool = False

    def to_params(self) -> dict[str, str]:
        params: dict[str, str] = {}
        if self.recursive:
            params["recursive"] = "true"
        if self.dir:
            params["dir"] = "true"
        return params


class EtcdKeysClient:
    """etcd 2.x keys API client.

    Example:
        client = EtcdKeysClient(["http://127.0.0.1:2379"], transport)
        await client.set(
            "/services/web/1",
            "10.0.0.5:8080",
            SetOptions(ttl=timedelta(seconds=30)),
        )
        await client.close()
    """

    def __init__(
        self,
        endpoints: list[str],
        transport: Transport,
        header_timeout: float = DEFAULT_HEADER_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            endpoints: Member URLs to try, in order.
            transport: Transport shared with the version probe.
            header_timeout: Per-request response timeout in seconds.
        """
        self._pool = MemberPool(
            endpoints,
            transport,
            timeout=transport.with_response_timeout(header_timeout),
        )

    @property
    def endpoints(self) -> list[str]:
        """Known cluster members."""
        return self._pool.endpoints

    async def get(self, key: str, options: GetOptions | None = None) -> StoreResponse:
        """Read a key.

        Raises:
            EtcdError: If etcd reports an error (e.g. 100 key not found).
            ClusterUnavailableError: If no member could be reached.
        """
        options = options or GetOptions()
        response = await self._pool.request("GET", keys_path(key), params=options.to_params())
        return StoreResponse.model_validate(decode_response(response))

    async def set(
        self, key: str, value: str, options: SetOptions | None = None
    ) -> StoreResponse:
        """Write a key.

        Raises:
            EtcdError: If etcd reports an error.
            ClusterUnavailableError: If no member could be reached.
        """
        options = options or SetOptions()
        response = await self._pool.request("PUT", keys_path(key), data=options.to_form(value))
        return StoreResponse.model_validate(decode_response(response))

    async def delete(
        self, key: str, options: DeleteOptions | None = None
    ) -> StoreResponse:
        """Delete a key.

        Raises:
            EtcdError: If etcd reports an error.
            ClusterUnavailableError: If no member could be reached.
        """
        options = options or DeleteOptions()
        response = await self._pool.request(
            "DELETE", keys_path(key), params=options.to_params() or None
        )
        return StoreResponse.model_validate(decode_response(response))

    async def sync(self) -> None:
        """Refresh the member list from ``/v2/members``.

        Raises:
            ClusterUnavailableError: If no member answers or none advertises a client URL.
            EtcdError: If the members payload cannot be decoded.
        """
        response = await self._pool.request("GET", "/v2/members")
        payload = decode_response(response)

        try:
            urls = [
                url
                for member in payload.get("members", [])
                for url in member.get("clientURLs", [])
                if url
            ]
        except (AttributeError, TypeError) as e:
            raise EtcdError(
                error_code=0,
                message="invalid members payload",
                cause=str(e),
            ) from e

        if not urls:
            raise ClusterUnavailableError(
                endpoints=self._pool.endpoints,
                detail="etcd: no endpoints available",
            )

        self._pool.replace(list(dict.fromkeys(urls)))
        logger.debug("etcd: cluster members synced", extra={"endpoints": urls})

    async def close(self) -> None:
        """Close the HTTP client and release resources."""
        await self._pool.aclose()
        logger.debug("EtcdKeysClient closed")
