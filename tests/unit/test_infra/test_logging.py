"""Tests for logging configuration and the JSONL formatter."""

from __future__ import annotations

import json
import logging

import pytest

from etcd_registry.core.settings.logs import LoggingSettings
from etcd_registry.infra.logging import config as log_config
from etcd_registry.infra.logging.formatters import JSONFormatter


def _record(msg: str = "etcd: sync cluster was unsuccessful", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="etcd_registry.infra.discovery.sync",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJSONFormatter:
    def test_formats_single_json_line(self):
        formatter = JSONFormatter(static={"service": "etcd-registry"})

        line = formatter.format(_record(generation="legacy"))
        data = json.loads(line)

        assert "\n" not in line
        assert data["level"] == "WARNING"
        assert data["logger"] == "etcd_registry.infra.discovery.sync"
        assert data["message"] == "etcd: sync cluster was unsuccessful"
        assert data["service"] == "etcd-registry"
        assert data["generation"] == "legacy"
        assert data["timestamp"].endswith("Z")

    def test_skips_builtin_record_attributes(self):
        data = json.loads(JSONFormatter().format(_record()))

        assert "pathname" not in data
        assert "lineno" not in data
        assert "trace_id" not in data  # no active span

    def test_includes_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            import sys

            record = _record()
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in data["exception"]

    def test_non_serializable_extra_is_stringified(self):
        data = json.loads(JSONFormatter().format(_record(path=object())))
        assert isinstance(data["path"], str)


@pytest.mark.unit
class TestConfigureLogging:
    @pytest.fixture(autouse=True)
    def _restore_root(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        root.handlers = handlers
        root.setLevel(level)
        log_config._LOGGING_INITIALIZED = False

    def test_configure_logging_json(self):
        log_config.configure_logging(log_level="debug", json_logs=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_configure_logging_text(self):
        log_config.configure_logging(log_level="INFO", json_logs=False)

        formatter = logging.getLogger().handlers[0].formatter
        assert not isinstance(formatter, JSONFormatter)

    def test_setup_logging_is_idempotent(self, monkeypatch):
        calls = []
        monkeypatch.setattr(log_config, "configure_logging", lambda **kw: calls.append(kw))
        log_config._LOGGING_INITIALIZED = False

        settings = LoggingSettings(level="ERROR", json_logs=False)
        log_config.setup_logging(settings)
        log_config.setup_logging(settings)

        assert len(calls) == 1
        assert calls[0]["log_level"] == "ERROR"
        assert calls[0]["json_logs"] is False

    def test_setup_logging_force_and_overrides(self, monkeypatch):
        calls = []
        monkeypatch.setattr(log_config, "configure_logging", lambda **kw: calls.append(kw))
        log_config._LOGGING_INITIALIZED = True

        log_config.setup_logging(LoggingSettings(), force=True, log_level="DEBUG")

        assert calls[0]["log_level"] == "DEBUG"
