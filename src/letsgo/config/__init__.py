"""Configuration subsystem for letsgo.

Public API::

    from letsgo.config import RawConfiguration, resolve

    config = resolve(RawConfiguration.from_env(), stores)
    config.domains          # ("example.com", "*.example.com")
    config.certificate_path # Path(".../example.com.crt")
"""

from letsgo.config.errors import (
    ConfigError,
    ConfigIOError,
    InvalidBooleanError,
    InvalidCADirectoryError,
    InvalidDomainError,
    InvalidKeyTypeError,
    InvalidTimeoutError,
    MissingCredentialError,
    MissingDomainsError,
    MissingEmailError,
    TermsNotAcceptedError,
    UnknownKeyFormatError,
)
from letsgo.config.raw import RawConfiguration
from letsgo.config.resolver import resolve
from letsgo.config.settings import (
    KeyType,
    LoggingSettings,
    ResolvedConfiguration,
    WebSettings,
    build_logging_settings,
)

__all__ = [
    "ConfigError",
    "ConfigIOError",
    "InvalidBooleanError",
    "InvalidCADirectoryError",
    "InvalidDomainError",
    "InvalidKeyTypeError",
    "InvalidTimeoutError",
    "KeyType",
    "LoggingSettings",
    "MissingCredentialError",
    "MissingDomainsError",
    "MissingEmailError",
    "RawConfiguration",
    "ResolvedConfiguration",
    "TermsNotAcceptedError",
    "UnknownKeyFormatError",
    "WebSettings",
    "build_logging_settings",
    "resolve",
]
