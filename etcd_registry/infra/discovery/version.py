"""etcd version probing.

etcd 0.4.x and etcd 2.x expose incompatible client APIs. The adapter asks
the endpoint for ``/version`` once, at construction, and binds the matching
client for the rest of its life.
"""

from __future__ import annotations

import logging
import re
from enum import Enum

import httpx

from etcd_registry.core.exceptions import ConfigurationError
from etcd_registry.infra.discovery.metrics import etcd_registry_version_probes_total
from etcd_registry.infra.discovery.transport import Transport

logger = logging.getLogger(__name__)

# etcd 0.4 answers with plain text such as "etcd 0.4.6"
LEGACY_VERSION_SIGNATURE = re.compile(rb"0\.4\.")


class StoreGeneration(str, Enum):
    """Protocol generation spoken by an etcd endpoint."""

    LEGACY = "legacy"  # etcd 0.4.x
    CURRENT = "current"  # etcd 2.x keys API


def classify_version(body: bytes | str) -> StoreGeneration:
    """Classify a ``/version`` response body.

    Any body containing ``0.4.`` is legacy; everything else, including
    empty or malformed bodies, is current.

    Args:
        body: Raw response body.

    Returns:
        The detected generation.
    """
    if isinstance(body, str):
        body = body.encode("utf-8", errors="replace")
    if LEGACY_VERSION_SIGNATURE.search(body):
        return StoreGeneration.LEGACY
    return StoreGeneration.CURRENT


async def probe_version(endpoint_url: str, transport: Transport) -> StoreGeneration:
    """Issue a single ``GET <endpoint>/version`` and classify the answer.

    The status code is not inspected; only the body is.

    Args:
        endpoint_url: Base URL of the etcd member (``http://host:port``).
        transport: Transport to send the request through.

    Returns:
        The detected generation.

    Raises:
        ConfigurationError: If the endpoint URL is invalid or cannot be reached.
    """
    url = f"{endpoint_url.rstrip('/')}/version"

    async with transport.create_client() as client:
        try:
            response = await client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL, ValueError) as e:
            raise ConfigurationError(
                detail=f"etcd: error retrieving version: {e}",
                type="version-probe",
                extra={"url": url},
            ) from e

    generation = classify_version(response.content)
    etcd_registry_version_probes_total.labels(generation=generation.value).inc()

    if generation is StoreGeneration.LEGACY:
        logger.info("etcd: using v0 client", extra={"url": url})
    else:
        logger.debug("etcd: using v2 client", extra={"url": url})
    return generation
