"""Configuration errors.

Every error names the environment variable that caused it in
:pyattr:`ConfigError.option` so that the operator can fix the input
without reading a traceback.  All configuration errors are fatal.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Raised when the operator configuration cannot be resolved.

    Parameters
    ----------
    detail:
        Human-readable description, surfaced verbatim to the operator.
    option:
        Name of the offending environment variable, when known.

    """

    def __init__(self, detail: str, *, option: str | None = None) -> None:
        self.detail = detail
        self.option = option
        super().__init__(detail)


class MissingDomainsError(ConfigError):
    pass


class InvalidDomainError(ConfigError):
    pass


class MissingEmailError(ConfigError):
    pass


class TermsNotAcceptedError(ConfigError):
    pass


class UnknownKeyFormatError(ConfigError):
    pass


class InvalidCADirectoryError(ConfigError):
    pass


class InvalidKeyTypeError(ConfigError):
    pass


class InvalidTimeoutError(ConfigError):
    pass


class InvalidBooleanError(ConfigError):
    pass


class MissingCredentialError(ConfigError):
    pass


class ConfigIOError(ConfigError):
    """A file or directory required by the configuration is not usable."""
