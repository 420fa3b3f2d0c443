"""Untyped operator input, one string per recognised option."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from letsgo.config import constants as c


@dataclass(frozen=True)
class RawConfiguration:
    """Snapshot of the environment, with defaults applied.

    Every field is always present.  Values are not validated here; see
    :func:`letsgo.config.resolver.resolve`.
    """

    account_email: str = ""
    account_key_file: str = c.DEFAULT_ACCOUNT_KEY_FILE
    tos_agreed: str = c.DEFAULT_LE_TOS_AGREED
    ca_dir: str = c.DEFAULT_CA_DIR
    key_type: str = c.DEFAULT_LE_CRT_KEY_TYPE
    domains: str = ""
    filename: str = ""
    output_directory: str = c.DEFAULT_OUTPUT_DIRECTORY
    disable_cp: str = c.DEFAULT_DISABLE_CP
    dns_timeout: str = c.DEFAULT_DNS_TIMEOUT
    dns_resolvers: str = ""
    dns_auth_token: str = ""
    dns_auth_token_file: str = ""
    dns_auth_token_vault: str = ""
    dns_auth_token_secret: str = c.DEFAULT_DNS_AUTH_TOKEN_SECRET
    web_root: str = c.DEFAULT_WEB_ROOT
    web_enabled: str = c.DEFAULT_WEB_ENABLED

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RawConfiguration:
        """Read every option from *environ* (defaults to :data:`os.environ`)."""
        env = os.environ if environ is None else environ
        defaults = cls()

        def get(name: str, fallback: str) -> str:
            return env.get(name, fallback)

        return cls(
            account_email=get(c.ACCOUNT_EMAIL, defaults.account_email),
            account_key_file=get(c.ACCOUNT_KEY_FILE, defaults.account_key_file),
            tos_agreed=get(c.LE_TOS_AGREED, defaults.tos_agreed),
            ca_dir=get(c.CA_DIR, defaults.ca_dir),
            key_type=get(c.LE_CRT_KEY_TYPE, defaults.key_type),
            domains=get(c.DOMAINS, defaults.domains),
            filename=get(c.FILENAME, defaults.filename),
            output_directory=get(c.OUTPUT_DIRECTORY, defaults.output_directory),
            disable_cp=get(c.DISABLE_CP, defaults.disable_cp),
            dns_timeout=get(c.DNS_TIMEOUT, defaults.dns_timeout),
            dns_resolvers=get(c.DNS_RESOLVERS, defaults.dns_resolvers),
            dns_auth_token=get(c.DNS_AUTH_TOKEN, defaults.dns_auth_token),
            dns_auth_token_file=get(c.DNS_AUTH_TOKEN_FILE, defaults.dns_auth_token_file),
            dns_auth_token_vault=get(c.DNS_AUTH_TOKEN_VAULT, defaults.dns_auth_token_vault),
            dns_auth_token_secret=get(
                c.DNS_AUTH_TOKEN_SECRET,
                defaults.dns_auth_token_secret,
            ),
            web_root=get(c.WEB_ROOT, defaults.web_root),
            web_enabled=get(c.WEB_ENABLED, defaults.web_enabled),
        )
