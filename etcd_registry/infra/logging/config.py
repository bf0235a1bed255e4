"""Logging configuration setup.

Uses logging.config.dictConfig with a single stderr handler on the root
logger; module loggers propagate up. JSONL output is the default.
"""

from __future__ import annotations

import logging
import logging.config
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from etcd_registry.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)
_LOGGING_INITIALIZED = False


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **configure_kwargs: Any,
) -> None:
    """Ensure logging is configured once across entrypoints.

    Args:
        log_settings: Optional logging settings instance. If omitted, settings
            are loaded via get_logging_settings().
        force: Reconfigure logging even if it was already initialized.
        **configure_kwargs: Explicit overrides for configure_logging().
    """
    global _LOGGING_INITIALIZED

    if _LOGGING_INITIALIZED and not force:
        return

    settings_obj = log_settings
    if settings_obj is None:
        from etcd_registry.core.settings import get_logging_settings

        settings_obj = get_logging_settings()

    log_config = settings_obj.to_logging_kwargs()
    if configure_kwargs:
        log_config = {**log_config, **configure_kwargs}

    configure_logging(**log_config)
    _LOGGING_INITIALIZED = True


def configure_logging(
    log_level: str = "INFO",
    json_logs: bool = True,
    service_name: str = "etcd-registry",
    capture_warnings: bool = True,
    **kwargs: Any,
) -> None:
    """Configure the root logger with dictConfig.

    Args:
        log_level: Root logger level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_logs: Enable JSONL (JSON Lines) structured logging.
        service_name: Static ``service`` field added to JSON records.
        capture_warnings: Forward Python warnings to logging system.
        **kwargs: Unused settings, reported at DEBUG.

    Example:
        from etcd_registry.core.settings import get_logging_settings
        configure_logging(**get_logging_settings().to_logging_kwargs())
    """
    if capture_warnings:
        logging.captureWarnings(True)

    formatter = "json" if json_logs else "text"
    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": _build_formatters_config(service_name),
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "stream": "ext://sys.stderr",
                "formatter": formatter,
                "level": log_level.upper(),
            },
        },
        "root": {
            "level": log_level.upper(),
            "handlers": ["console"],
        },
        # httpx logs every request at INFO
        "loggers": {
            "httpx": {"level": "WARNING"},
            "httpcore": {"level": "WARNING"},
        },
    }

    logging.config.dictConfig(logging_config)

    if kwargs:
        logger.debug("Unused logging kwargs supplied: %s", ", ".join(sorted(kwargs.keys())))


def _build_formatters_config(service_name: str) -> dict[str, Any]:
    """Build formatters configuration for dictConfig.

    Args:
        service_name: Static service field for JSON records.

    Returns:
        Formatters configuration dict.
    """
    return {
        "json": {
            "()": "etcd_registry.infra.logging.formatters.JSONFormatter",
            "fmt_keys": {
                "level": "levelname",
                "logger": "name",
                "message": "message",
            },
            "static": {"service": service_name},
        },
        "text": {
            "format": "%(asctime)s - %(levelname)s - %(name)s - %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    }
