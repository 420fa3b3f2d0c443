"""Secret store contracts.

A secret store retrieves exactly one opaque string secret from a backing
medium.  Two media are supported: a local file and an Azure Key Vault.
Each medium has its own abstract base so that the configuration resolver
can be handed test doubles instead of the real stores.
"""

from __future__ import annotations

import abc


class SecretStoreError(Exception):
    """Raised when a secret cannot be retrieved.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class EmptySecretError(SecretStoreError):
    """The secret exists but is empty once the trailing newline is stripped."""


class SecretIOError(SecretStoreError):
    """The backing file could not be read."""


class SecretAuthError(SecretStoreError):
    """Authentication against the remote secret store failed."""


class SecretNotFoundError(SecretStoreError):
    """The named secret does not exist in the remote secret store."""


class FileStoreProtocol(abc.ABC):
    """Retrieve a secret stored in a local file."""

    @abc.abstractmethod
    def get_token(self, path: str) -> str:
        """Return the secret stored at *path*.

        Raises
        ------
        SecretStoreError
            If the file cannot be read or holds an empty secret.

        """


class KeyVaultStoreProtocol(abc.ABC):
    """Retrieve a secret stored in a remote key vault."""

    @abc.abstractmethod
    def get_token(self, vault_uri: str, secret_name: str) -> str:
        """Return the current value of *secret_name* in *vault_uri*.

        Raises
        ------
        SecretStoreError
            On authentication failure, missing secret, or transport error.

        """


def strip_newline(value: str) -> str:
    """Remove a single trailing line feed, as written by ``echo``."""
    return value.removesuffix("\n")
