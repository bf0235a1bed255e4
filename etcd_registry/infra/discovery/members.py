"""HTTP plumbing shared by the etcd store clients.

MemberPool sends each request to the known cluster members in order,
moves on when a member cannot be reached, and pins the member that
answered to the front of the list. Pools for etcd 0.4.x also follow the
redirect a follower sends for writes and pin the leader it points at.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from etcd_registry.core.exceptions import ClusterUnavailableError, ConfigurationError, EtcdError

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.transport import Transport

logger = logging.getLogger(__name__)


class MemberPool:
    """Ordered list of etcd member URLs sharing one httpx client."""

    def __init__(
        self,
        endpoints: list[str],
        transport: Transport,
        timeout: httpx.Timeout | None = None,
        follow_redirects: bool = False,
    ) -> None:
        if not endpoints:
            raise ConfigurationError(
                detail="etcd: no valid etcd client could be created: no endpoints",
                type="client-construction",
            )
        self._endpoints = [e.rstrip("/") for e in endpoints]
        self._follow_redirects = follow_redirects
        self._client = transport.create_client(timeout=timeout)

    @property
    def endpoints(self) -> list[str]:
        """Current member URLs, most recently successful first."""
        return list(self._endpoints)

    def replace(self, endpoints: list[str]) -> bool:
        """Swap in a new member list, keeping the pinned member first if still present.

        Returns:
            False if ``endpoints`` holds no usable URL; the current list is kept.
        """
        fresh = [e.rstrip("/") for e in endpoints if e]
        if not fresh:
            return False
        pinned = self._endpoints[0]
        if pinned in fresh:
            fresh.remove(pinned)
            fresh.insert(0, pinned)
        self._endpoints = fresh
        return True

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send a request to the first member that answers.

        Raises:
            ClusterUnavailableError: If no member could be reached.
        """
        endpoints = list(self._endpoints)
        errors: list[str] = []

        for endpoint in endpoints:
            try:
                response = await self._client.request(
                    method,
                    f"{endpoint}{path}",
                    params=params,
                    data=data,
                )
                if self._follow_redirects and response.is_redirect:
                    response, endpoint = await self._follow_redirect(method, response, data)
            except httpx.TransportError as e:
                errors.append(f"{endpoint}: {e!r}")
                logger.debug(
                    "etcd member unreachable, trying next",
                    extra={"endpoint": endpoint, "error": str(e)},
                )
                continue
            self._pin(endpoint)
            return response

        raise ClusterUnavailableError(endpoints=endpoints, errors=errors)

    async def _follow_redirect(
        self,
        method: str,
        response: httpx.Response,
        data: dict[str, str] | None,
    ) -> tuple[httpx.Response, str]:
        """Reissue a request once at the redirect target.

        Returns:
            The target's response and the target member's base URL.
        """
        target = response.url.join(response.headers["Location"])
        member = f"{target.scheme}://{target.netloc.decode('ascii')}"
        logger.debug(
            "etcd member redirected request",
            extra={"from": str(response.url), "to": str(target)},
        )
        # Location already carries the query string
        return await self._client.request(method, target, data=data), member

    def _pin(self, endpoint: str) -> None:
        if self._endpoints and self._endpoints[0] == endpoint:
            return
        self._endpoints = [endpoint, *(e for e in self._endpoints if e != endpoint)]

    async def aclose(self) -> None:
        await self._client.aclose()


def decode_response(response: httpx.Response) -> dict[str, Any]:
    """Decode an etcd keys response, raising etcd error payloads.

    Raises:
        EtcdError: On an error status or an undecodable body.
    """
    if response.status_code >= 400:
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict) and "errorCode" in payload:
            raise EtcdError.from_payload(payload)
        raise EtcdError(
            error_code=0,
            message=f"unexpected response status {response.status_code}",
            cause=response.text[:200],
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise EtcdError(
            error_code=0,
            message="invalid JSON in etcd response",
            cause=response.text[:200],
        ) from e
    if not isinstance(payload, dict):
        raise EtcdError(error_code=0, message="unexpected etcd response shape")
    return payload


def keys_path(key: str) -> str:
    """URL path of a key in the v2 keys API."""
    if not key.startswith("/"):
        key = "/" + key
    return "/v2/keys" + quote(key)
