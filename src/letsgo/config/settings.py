"""Typed, frozen dataclasses for the resolved configuration.

A :class:`ResolvedConfiguration` is only ever built by
:func:`letsgo.config.resolver.resolve` once every field has been
validated; it is never handed out partially filled.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from enum import StrEnum
from pathlib import Path
from typing import TYPE_CHECKING

from letsgo.config import constants as c

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

# ---------------------------------------------------------------------------
# Certificate key algorithm
# ---------------------------------------------------------------------------


class KeyType(StrEnum):
    RSA2048 = "RSA2048"
    RSA4096 = "RSA4096"
    RSA8192 = "RSA8192"

    @property
    def key_size(self) -> int:
        return int(self.value.removeprefix("RSA"))


# ---------------------------------------------------------------------------
# Resolved configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class WebSettings:
    """Static file server options, passed through uninterpreted."""

    root: str
    enabled: bool


@dataclass(frozen=True)
class ResolvedConfiguration:
    """Fully validated configuration for certificate provisioning."""

    email: str
    account_key: PrivateKeyTypes
    terms_of_service_agreed: bool
    ca_dir_url: str
    key_type: KeyType
    domains: tuple[str, ...]
    filename: str
    output_directory: Path
    auth_token: str
    dns_resolvers: tuple[str, ...]
    dns_timeout: timedelta
    disable_cp: bool
    web: WebSettings

    @property
    def certificate_path(self) -> Path:
        return self.output_directory / f"{self.filename}.crt"

    @property
    def key_path(self) -> Path:
        return self.output_directory / f"{self.filename}.key"

    @property
    def issuer_path(self) -> Path:
        return self.output_directory / f"{self.filename}.issuer.crt"

    def __repr__(self) -> str:
        # Keep the credential and key material out of logs and tracebacks.
        return (
            f"ResolvedConfiguration(email={self.email!r}, "
            f"ca_dir_url={self.ca_dir_url!r}, key_type={self.key_type.value!r}, "
            f"domains={self.domains!r}, filename={self.filename!r}, "
            f"output_directory={str(self.output_directory)!r})"
        )


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class LoggingSettings:
    """Log level and output format (``text`` or ``json``)."""

    level: str
    format: str


def build_logging_settings(environ: Mapping[str, str]) -> LoggingSettings:
    fmt = environ.get(c.LOG_FORMAT, c.DEFAULT_LOG_FORMAT).lower()
    return LoggingSettings(
        level=environ.get(c.LOG_LEVEL, c.DEFAULT_LOG_LEVEL).upper(),
        format=fmt if fmt in ("text", "json") else c.DEFAULT_LOG_FORMAT,
    )
