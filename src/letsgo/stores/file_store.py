"""Secret store backed by a local file."""

from __future__ import annotations

import logging
from pathlib import Path

from letsgo.stores.base import (
    EmptySecretError,
    FileStoreProtocol,
    SecretIOError,
    strip_newline,
)

log = logging.getLogger(__name__)


class FileStore(FileStoreProtocol):
    """Read a secret from a file (e.g. a mounted Docker or Kubernetes secret)."""

    def get_token(self, path: str) -> str:
        try:
            raw = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Failed to read token from {path}: {exc}"
            raise SecretIOError(msg) from exc

        token = strip_newline(raw)
        if not token:
            msg = f"Invalid token found in {path}"
            raise EmptySecretError(msg)

        log.debug("Loaded token from file %s", path)
        return token
