"""Resolve raw operator input into a :class:`ResolvedConfiguration`.

Resolution is fail-fast: fields are resolved in a fixed order and the
first invalid one raises a :class:`ConfigError` subclass naming the
environment variable at fault.  No partially filled configuration is
ever returned.

Usage::

    from letsgo.config import RawConfiguration, resolve
    from letsgo.stores import default_stores

    config = resolve(RawConfiguration.from_env(), default_stores())
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import TYPE_CHECKING

from letsgo.config import constants as c
from letsgo.config.account_key import load_or_create_account_key
from letsgo.config.errors import (
    ConfigError,
    ConfigIOError,
    InvalidCADirectoryError,
    InvalidKeyTypeError,
    InvalidTimeoutError,
    MissingCredentialError,
    MissingDomainsError,
    MissingEmailError,
    TermsNotAcceptedError,
)
from letsgo.config.settings import KeyType, ResolvedConfiguration, WebSettings
from letsgo.config.utils import parse_bool, sanitize_domain, split_list
from letsgo.stores.base import SecretIOError, SecretStoreError

if TYPE_CHECKING:
    from letsgo.config.raw import RawConfiguration
    from letsgo.stores.registry import Stores

log = logging.getLogger(__name__)

_VAULT_URI_TEMPLATE = "https://{name}.vault.azure.net/"

# ---------------------------------------------------------------------------
# DNS credential sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class InlineCredential:
    value: str


@dataclass(frozen=True)
class FileCredential:
    path: str


@dataclass(frozen=True)
class VaultCredential:
    vault_uri: str
    secret_name: str


CredentialSource = InlineCredential | FileCredential | VaultCredential


def vault_uri(locator: str) -> str:
    """Expand a bare vault name to its URI; explicit URIs are kept as-is."""
    if locator.startswith("https://"):
        return locator
    return _VAULT_URI_TEMPLATE.format(name=locator)


def select_credential_source(raw: RawConfiguration) -> CredentialSource:
    """Pick the single DNS credential source, in priority order.

    An inline token wins over a token file, which wins over a vault.
    """
    if raw.dns_auth_token:
        return InlineCredential(raw.dns_auth_token)
    if raw.dns_auth_token_file:
        return FileCredential(raw.dns_auth_token_file)
    if raw.dns_auth_token_vault:
        if not raw.dns_auth_token_secret:
            msg = f"Invalid DNS auth token secret name: {raw.dns_auth_token_secret!r}"
            raise MissingCredentialError(msg, option=c.DNS_AUTH_TOKEN_SECRET)
        return VaultCredential(
            vault_uri=vault_uri(raw.dns_auth_token_vault),
            secret_name=raw.dns_auth_token_secret,
        )
    msg = (
        f"Invalid DNS auth token. Use one of '{c.DNS_AUTH_TOKEN_VAULT}', "
        f"'{c.DNS_AUTH_TOKEN_FILE}' or '{c.DNS_AUTH_TOKEN}' env variable"
    )
    raise MissingCredentialError(msg, option=c.DNS_AUTH_TOKEN)


def resolve_credential(source: CredentialSource, stores: Stores) -> str:
    """Fetch the credential from the store matching *source*."""
    try:
        match source:
            case InlineCredential(value=value):
                return value
            case FileCredential(path=path):
                return stores.get_file_store().get_token(path)
            case VaultCredential(vault_uri=uri, secret_name=secret):
                return stores.get_keyvault_store().get_token(uri, secret)
    except SecretStoreError as exc:
        option = (
            c.DNS_AUTH_TOKEN_FILE
            if isinstance(source, FileCredential)
            else c.DNS_AUTH_TOKEN_VAULT
        )
        error_cls = ConfigIOError if isinstance(exc, SecretIOError) else ConfigError
        raise error_cls(exc.detail, option=option) from exc
    msg = f"Unsupported credential source: {source!r}"
    raise TypeError(msg)


# ---------------------------------------------------------------------------
# Individual fields
# ---------------------------------------------------------------------------


def resolve_domains(raw: RawConfiguration) -> tuple[str, ...]:
    domains = split_list(raw.domains)
    if not domains:
        msg = (
            "A comma-separated list of domain names must be provided "
            f"through {c.DOMAINS} environment variable"
        )
        raise MissingDomainsError(msg, option=c.DOMAINS)
    return tuple(domains)


def resolve_filename(raw: RawConfiguration, domains: tuple[str, ...]) -> str:
    if raw.filename:
        return raw.filename
    return sanitize_domain(domains[0])


def resolve_email(raw: RawConfiguration) -> str:
    email = raw.account_email.strip()
    if not email:
        msg = f"An email must be provided through {c.ACCOUNT_EMAIL} environment variable"
        raise MissingEmailError(msg, option=c.ACCOUNT_EMAIL)
    return email


def resolve_tos_agreement(raw: RawConfiguration) -> bool:
    msg = (
        "It is mandatory to agree to Let's Encrypt Term of Usage "
        f"through {c.LE_TOS_AGREED} environment variable"
    )
    try:
        agreed = parse_bool(raw.tos_agreed, c.LE_TOS_AGREED)
    except ConfigError as exc:
        raise TermsNotAcceptedError(msg, option=c.LE_TOS_AGREED) from exc
    if not agreed:
        raise TermsNotAcceptedError(msg, option=c.LE_TOS_AGREED)
    return True


def resolve_ca_dir(raw: RawConfiguration) -> str:
    known = c.KNOWN_CA_DIRS.get(raw.ca_dir.upper())
    if known is not None:
        return known
    if not raw.ca_dir.startswith(("http://", "https://")):
        msg = f"Invalid CA directory: {raw.ca_dir}"
        raise InvalidCADirectoryError(msg, option=c.CA_DIR)
    return raw.ca_dir


def resolve_key_type(raw: RawConfiguration) -> KeyType:
    try:
        return KeyType(raw.key_type)
    except ValueError:
        allowed = [f"'{k.value}'" for k in KeyType]
        msg = (
            f"Invalid key type. Allowed values are {', '.join(allowed[:-1])} "
            f"and {allowed[-1]}."
        )
        raise InvalidKeyTypeError(msg, option=c.LE_CRT_KEY_TYPE) from None


def resolve_dns_timeout(raw: RawConfiguration) -> timedelta:
    try:
        seconds = float(raw.dns_timeout)
    except ValueError:
        msg = f"Invalid DNS timeout (seconds) in {c.DNS_TIMEOUT}: {raw.dns_timeout!r}"
        raise InvalidTimeoutError(msg, option=c.DNS_TIMEOUT) from None
    if seconds < 0 or not math.isfinite(seconds):
        msg = (
            f"DNS timeout in {c.DNS_TIMEOUT} must be a finite, "
            f"non-negative number: {raw.dns_timeout!r}"
        )
        raise InvalidTimeoutError(msg, option=c.DNS_TIMEOUT)
    return timedelta(seconds=seconds)


def resolve_output_directory(raw: RawConfiguration) -> Path:
    directory = Path(raw.output_directory).expanduser().resolve()
    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        msg = f"Failed to create output directory '{directory}': {exc}"
        raise ConfigIOError(msg, option=c.OUTPUT_DIRECTORY) from exc
    return directory


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def resolve(raw: RawConfiguration, stores: Stores) -> ResolvedConfiguration:
    """Validate *raw* and build the resolved configuration.

    Side effects: the account key file is created when missing, and the
    output directory is created when missing.

    Raises
    ------
    ConfigError
        For the first invalid field, in resolution order.

    """
    domains = resolve_domains(raw)
    filename = resolve_filename(raw, domains)
    email = resolve_email(raw)
    tos_agreed = resolve_tos_agreement(raw)
    account_key = load_or_create_account_key(raw.account_key_file)
    ca_dir_url = resolve_ca_dir(raw)
    key_type = resolve_key_type(raw)
    dns_resolvers = tuple(split_list(raw.dns_resolvers))
    dns_timeout = resolve_dns_timeout(raw)
    disable_cp = parse_bool(raw.disable_cp, c.DISABLE_CP)
    output_directory = resolve_output_directory(raw)
    auth_token = resolve_credential(select_credential_source(raw), stores)
    web = WebSettings(
        root=raw.web_root,
        enabled=parse_bool(raw.web_enabled, c.WEB_ENABLED),
    )

    config = ResolvedConfiguration(
        email=email,
        account_key=account_key,
        terms_of_service_agreed=tos_agreed,
        ca_dir_url=ca_dir_url,
        key_type=key_type,
        domains=domains,
        filename=filename,
        output_directory=output_directory,
        auth_token=auth_token,
        dns_resolvers=dns_resolvers,
        dns_timeout=dns_timeout,
        disable_cp=disable_cp,
        web=web,
    )
    log.info(
        "Resolved configuration for %s (CA %s, key type %s)",
        ", ".join(domains),
        ca_dir_url,
        key_type.value,
    )
    return config
