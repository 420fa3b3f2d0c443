"""Secret stores used to look up the DNS provider credential.

Public API::

    from letsgo.stores import Stores, default_stores
"""

from letsgo.stores.base import (
    EmptySecretError,
    FileStoreProtocol,
    KeyVaultStoreProtocol,
    SecretAuthError,
    SecretIOError,
    SecretNotFoundError,
    SecretStoreError,
)
from letsgo.stores.registry import Stores, default_stores

__all__ = [
    "EmptySecretError",
    "FileStoreProtocol",
    "KeyVaultStoreProtocol",
    "SecretAuthError",
    "SecretIOError",
    "SecretNotFoundError",
    "SecretStoreError",
    "Stores",
    "default_stores",
]
