"""Logging infrastructure.

Basic usage:
    from etcd_registry.infra.logging import setup_logging
    import logging

    setup_logging()
    logger = logging.getLogger(__name__)
    logger.info("Registered service", extra={"key": "/services/web/1"})
"""

from etcd_registry.infra.logging.config import configure_logging, setup_logging
from etcd_registry.infra.logging.formatters import JSONFormatter

__all__ = [
    "JSONFormatter",
    "configure_logging",
    "setup_logging",
]
