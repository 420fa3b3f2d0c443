"""Logging configuration for letsgo.

Every record is tagged with the certificate artifact it concerns and is
written to stderr either as one JSON object per line or as plain text.
"""

from __future__ import annotations

import json
import logging
import sys
import time
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from letsgo.config.settings import LoggingSettings

_NOISY_LOGGERS = ("azure", "azure.identity", "azure.core.pipeline.policies.http_logging_policy")


class CertificateContextFilter(logging.Filter):
    """Tag records with the artifact name of the managed certificate."""

    def __init__(self, certificate: str | None = None) -> None:
        super().__init__()
        self.certificate = certificate

    def filter(self, record: logging.LogRecord) -> bool:  # type: ignore[override]
        if not hasattr(record, "certificate"):
            record.certificate = self.certificate or "-"  # type: ignore[attr-defined]
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, timestamps in UTC."""

    converter = time.gmtime

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%SZ"),
            "level": record.levelname,
            "logger": record.name,
            "certificate": getattr(record, "certificate", "-"),
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class TextFormatter(logging.Formatter):
    """Human-readable formatter for console use."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-8s [%(certificate)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


def configure_logging(
    settings: LoggingSettings,
    certificate: str | None = None,
) -> logging.Logger:
    """Point the ``letsgo`` logger at stderr using *settings*.

    Calling it again replaces the previous handler, so the CLI can log
    before the certificate name is known and re-tag once it is.
    """
    logger = logging.getLogger("letsgo")
    logger.setLevel(getattr(logging, settings.level.upper(), logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(StructuredFormatter() if settings.format == "json" else TextFormatter())
    handler.addFilter(CertificateContextFilter(certificate))
    logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    return logger
