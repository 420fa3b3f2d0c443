"""Secret store backed by Azure Key Vault.

Authentication uses :class:`azure.identity.DefaultAzureCredential`, which
picks up credentials from the environment (service principal variables,
workload identity, managed identity, Azure CLI login, ...).  Nothing is
cached between calls: each lookup builds a fresh client so that rotated
credentials and secrets are honoured on every configuration resolution.
"""

from __future__ import annotations

import logging

from azure.core.exceptions import (
    AzureError,
    ClientAuthenticationError,
    ResourceNotFoundError,
)
from azure.identity import DefaultAzureCredential
from azure.keyvault.secrets import SecretClient

from letsgo.stores.base import (
    EmptySecretError,
    KeyVaultStoreProtocol,
    SecretAuthError,
    SecretNotFoundError,
    SecretStoreError,
    strip_newline,
)

log = logging.getLogger(__name__)


class KeyVaultStore(KeyVaultStoreProtocol):
    """Fetch secrets from an Azure Key Vault."""

    def get_token(self, vault_uri: str, secret_name: str) -> str:
        log.debug("Fetching secret %s from %s", secret_name, vault_uri)
        try:
            credential = DefaultAzureCredential()
            client = SecretClient(vault_url=vault_uri, credential=credential)
            secret = client.get_secret(secret_name)
        except ClientAuthenticationError as exc:
            msg = f"Failed to authenticate against key vault {vault_uri}: {exc}"
            raise SecretAuthError(msg) from exc
        except ResourceNotFoundError as exc:
            msg = f"Secret '{secret_name}' not found in key vault {vault_uri}"
            raise SecretNotFoundError(msg) from exc
        except (AzureError, ValueError) as exc:
            msg = f"Failed to fetch secret '{secret_name}' from key vault {vault_uri}: {exc}"
            raise SecretStoreError(msg) from exc

        token = strip_newline(secret.value or "")
        if not token:
            msg = f"Secret '{secret_name}' in key vault {vault_uri} is empty"
            raise EmptySecretError(msg)
        return token
