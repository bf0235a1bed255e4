"""Adapter-factory registry.

Registry backends register a factory under a name; the host framework
picks the factory from the scheme of the configured registry URI:

    adapter = await create_adapter("etcd://10.0.0.1:2379/services")
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlsplit

from etcd_registry.core.exceptions import ConfigurationError

if TYPE_CHECKING:
    from etcd_registry.infra.discovery.protocols import (
        AdapterFactoryProtocol,
        RegistryAdapterProtocol,
    )

logger = logging.getLogger(__name__)

_factories: dict[str, AdapterFactoryProtocol] = {}


def register_factory(name: str, factory: AdapterFactoryProtocol) -> None:
    """Register a factory under a URI scheme. Re-registering replaces it."""
    if name in _factories:
        logger.debug("Replacing registry adapter factory", extra={"factory": name})
    _factories[name] = factory


def unregister_factory(name: str) -> None:
    """Remove a factory if present."""
    _factories.pop(name, None)


def get_factory(name: str) -> AdapterFactoryProtocol:
    """Look up a factory by name.

    Raises:
        ConfigurationError: If no factory is registered under ``name``.
    """
    try:
        return _factories[name]
    except KeyError:
        raise ConfigurationError(
            detail=f"unrecognized registry backend: {name!r}",
            type="unknown-backend",
            extra={"available": available_factories()},
        ) from None


def available_factories() -> list[str]:
    """Names of all registered factories, sorted."""
    return sorted(_factories)


async def create_adapter(uri: str) -> RegistryAdapterProtocol:
    """Build an adapter for ``uri`` using the factory named by its scheme.

    Raises:
        ConfigurationError: If the scheme is unknown or the factory fails.
    """
    scheme = urlsplit(uri).scheme
    factory = get_factory(scheme)
    logger.info("Creating registry adapter", extra={"backend": scheme, "uri": uri})
    return await factory.new(uri)
