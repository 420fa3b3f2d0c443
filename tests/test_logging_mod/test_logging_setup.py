"""Tests for the letsgo.logging module."""

from __future__ import annotations

import json
import logging
import sys

from letsgo.config import LoggingSettings
from letsgo.logging import configure_logging
from letsgo.logging.setup import (
    CertificateContextFilter,
    StructuredFormatter,
    TextFormatter,
)


def _record(msg: str = "hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="letsgo.acme.lifecycle",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=args,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_basic_fields(self):
        data = json.loads(StructuredFormatter().format(_record(certificate="example.com")))
        assert data["level"] == "INFO"
        assert data["logger"] == "letsgo.acme.lifecycle"
        assert data["message"] == "hello world"
        assert data["certificate"] == "example.com"
        assert "timestamp" in data

    def test_fixed_field_set(self):
        line = StructuredFormatter().format(_record(days_remaining=12))
        data = json.loads(line)
        assert set(data) == {"timestamp", "level", "logger", "certificate", "message"}
        assert data["certificate"] == "-"
        assert data["timestamp"].endswith("Z")

    def test_exception(self):
        try:
            raise ValueError("broken")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        data = json.loads(StructuredFormatter().format(record))
        assert "ValueError: broken" in data["exception"]


class TestTextFormatter:
    def test_includes_certificate(self):
        record = _record()
        CertificateContextFilter("example.com").filter(record)
        line = TextFormatter().format(record)
        assert "[example.com]" in line
        assert "letsgo.acme.lifecycle: hello world" in line


class TestCertificateContextFilter:
    def test_default_placeholder(self):
        record = _record()
        assert CertificateContextFilter().filter(record) is True
        assert record.certificate == "-"

    def test_keeps_explicit_value(self):
        record = _record(certificate="other")
        CertificateContextFilter("example.com").filter(record)
        assert record.certificate == "other"


class TestConfigureLogging:
    def test_text(self):
        root = configure_logging(LoggingSettings(level="DEBUG", format="text"), "example.com")
        assert root.name == "letsgo"
        assert root.level == logging.DEBUG
        assert root.propagate is False
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, TextFormatter)
        assert logging.getLogger("azure").level == logging.WARNING

    def test_json_replaces_handlers(self):
        configure_logging(LoggingSettings(level="INFO", format="text"))
        root = configure_logging(LoggingSettings(level="INFO", format="json"))
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)

    def test_unknown_level_defaults_to_info(self):
        root = configure_logging(LoggingSettings(level="LOUD", format="text"))
        assert root.level == logging.INFO

    def test_writes_to_stderr(self, capsys):
        configure_logging(LoggingSettings(level="INFO", format="json"), "example.com")
        logging.getLogger("letsgo.test").info("renewed")
        line = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert line["message"] == "renewed"
        assert line["certificate"] == "example.com"
