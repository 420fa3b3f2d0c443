"""Small parsing helpers shared by the configuration resolver."""

from __future__ import annotations

from letsgo.config import constants as c
from letsgo.config.errors import InvalidBooleanError, InvalidDomainError

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def parse_bool(value: str, option: str) -> bool:
    """Parse *value*, accepting 1/t/true and 0/f/false in their usual spellings."""
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    msg = f"Invalid boolean value for {option}: {value!r}"
    raise InvalidBooleanError(msg, option=option)


def split_list(value: str) -> list[str]:
    """Split a comma-separated option, dropping blank entries."""
    return [item.strip() for item in value.split(",") if item.strip()]


def sanitize_domain(domain: str) -> str:
    """Turn a domain name into a string that is safe to use as a filename.

    Wildcard markers become ``_`` and internationalised labels are
    converted to their ASCII (punycode) form.

    >>> sanitize_domain("*.example.com")
    '_.example.com'
    """
    replaced = domain.replace("*", "_")
    try:
        return replaced.encode("idna").decode("ascii")
    except UnicodeError as exc:
        msg = f"Invalid domain name: {domain}"
        raise InvalidDomainError(msg, option=c.DOMAINS) from exc
