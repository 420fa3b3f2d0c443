"""ACME account key loading and creation.

The account key is loaded and created in two explicit steps so that the
file-creating side effect is visible to the caller::

    key = load_account_key(path)
    if key is None:
        key = generate_account_key(path)

:func:`load_or_create_account_key` composes both.  Once a key has been
written, every later resolution loads the same key; a key is only
generated again if the file is deleted.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from letsgo.config import constants as c
from letsgo.config.errors import ConfigIOError, UnknownKeyFormatError

if TYPE_CHECKING:
    from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

log = logging.getLogger(__name__)

_PEM_BEGIN = b"-----BEGIN "
_SUPPORTED_BLOCKS = frozenset({"RSA PRIVATE KEY", "EC PRIVATE KEY", "PRIVATE KEY"})


def _pem_block_type(data: bytes) -> str | None:
    """Return the label of the first PEM block in *data*."""
    start = data.find(_PEM_BEGIN)
    if start < 0:
        return None
    end = data.find(b"-----", start + len(_PEM_BEGIN))
    if end < 0:
        return None
    return data[start + len(_PEM_BEGIN) : end].decode("ascii", errors="replace")


def load_account_key(path: str | Path) -> PrivateKeyTypes | None:
    """Load the account key stored at *path*.

    Returns ``None`` when the file does not exist.

    Raises
    ------
    UnknownKeyFormatError
        If the file is not an RSA or EC private key in PEM form.
    ConfigIOError
        If the file exists but cannot be read.

    """
    key_path = Path(path)
    if not key_path.exists():
        return None

    try:
        data = key_path.read_bytes()
    except OSError as exc:
        msg = f"Failed to read account key {key_path}: {exc}"
        raise ConfigIOError(msg, option=c.ACCOUNT_KEY_FILE) from exc

    block = _pem_block_type(data)
    if block not in _SUPPORTED_BLOCKS:
        msg = f"Unknown private key type in {key_path}: {block or 'no PEM block'}"
        raise UnknownKeyFormatError(msg, option=c.ACCOUNT_KEY_FILE)

    try:
        key = serialization.load_pem_private_key(data, password=None)
    except (ValueError, TypeError) as exc:
        msg = f"Failed to parse account key {key_path}: {exc}"
        raise UnknownKeyFormatError(msg, option=c.ACCOUNT_KEY_FILE) from exc

    if not isinstance(key, rsa.RSAPrivateKey | ec.EllipticCurvePrivateKey):
        msg = f"Unsupported account key algorithm in {key_path}: {type(key).__name__}"
        raise UnknownKeyFormatError(msg, option=c.ACCOUNT_KEY_FILE)

    log.debug("Loaded account key from %s", key_path)
    return key


def generate_account_key(path: str | Path) -> ec.EllipticCurvePrivateKey:
    """Create a P-256 account key and write it to *path* (mode 0600).

    Raises
    ------
    ConfigIOError
        If the key file cannot be written.

    """
    key_path = Path(path)
    key = ec.generate_private_key(ec.SECP256R1())
    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )

    try:
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(pem)
    except OSError as exc:
        msg = f"Failed to write account key {key_path}: {exc}"
        raise ConfigIOError(msg, option=c.ACCOUNT_KEY_FILE) from exc

    log.info("Generated new ACME account key at %s", key_path)
    return key


def load_or_create_account_key(path: str | Path) -> PrivateKeyTypes:
    key = load_account_key(path)
    if key is None:
        key = generate_account_key(path)
    return key
