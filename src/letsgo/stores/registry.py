"""Registry of the secret stores used to resolve the DNS provider token.

Usage::

    from letsgo.stores import default_stores

    stores = default_stores()
    token = stores.get_file_store().get_token("/run/secrets/do-token")
"""

from __future__ import annotations

from dataclasses import dataclass

from letsgo.stores.base import FileStoreProtocol, KeyVaultStoreProtocol


@dataclass(frozen=True)
class Stores:
    """One store per backing medium."""

    files: FileStoreProtocol
    keyvault: KeyVaultStoreProtocol

    def get_file_store(self) -> FileStoreProtocol:
        return self.files

    def get_keyvault_store(self) -> KeyVaultStoreProtocol:
        return self.keyvault


def default_stores() -> Stores:
    """Return the production stores (local files and Azure Key Vault)."""
    from letsgo.stores.file_store import FileStore
    from letsgo.stores.keyvault import KeyVaultStore

    return Stores(files=FileStore(), keyvault=KeyVaultStore())
