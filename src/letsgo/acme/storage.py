"""Reading and writing the on-disk certificate bundle.

The bundle for a configuration is three PEM files in the output
directory: ``<name>.crt`` (leaf plus chain), ``<name>.key`` and
``<name>.issuer.crt``.  Writes go to temporary files first and are
renamed into place only once all three have been written, so readers
never see a mix of old and new artifacts.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from cryptography import x509

from letsgo.acme.base import PersistenceError

if TYPE_CHECKING:
    from letsgo.acme.base import CertificateResource
    from letsgo.config.settings import ResolvedConfiguration

log = logging.getLogger(__name__)

_FILE_MODE = 0o600


def read_certificates(path: str | Path) -> list[x509.Certificate] | None:
    """Parse the PEM bundle at *path*.

    Returns ``None`` when the file is missing, unreadable, or holds no
    parseable certificate.
    """
    try:
        data = Path(path).read_bytes()
    except FileNotFoundError:
        return None
    except OSError as exc:
        log.warning("Cannot read certificate bundle %s: %s", path, exc)
        return None

    try:
        certs = x509.load_pem_x509_certificates(data)
    except ValueError as exc:
        log.warning("Cannot parse certificate bundle %s: %s", path, exc)
        return None
    return certs or None


def _write_temp(directory: Path, target: Path, content: bytes) -> Path:
    fd, tmp = tempfile.mkstemp(dir=directory, prefix=f".{target.name}.", suffix=".tmp")
    try:
        os.fchmod(fd, _FILE_MODE)
        with os.fdopen(fd, "wb") as fh:
            fh.write(content)
            fh.flush()
            os.fsync(fh.fileno())
    except BaseException:
        with contextlib.suppress(OSError):
            os.unlink(tmp)
        raise
    return Path(tmp)


def save_resource(resource: CertificateResource, config: ResolvedConfiguration) -> None:
    """Write the certificate, key and issuer files for *config*.

    Raises
    ------
    PersistenceError
        If any of the three files cannot be written.  Files already in
        place are left untouched in that case.

    """
    targets = (
        (config.certificate_path, resource.certificate),
        (config.key_path, resource.private_key),
        (config.issuer_path, resource.issuer_certificate),
    )
    staged: list[tuple[Path, Path]] = []
    try:
        for target, content in targets:
            staged.append((_write_temp(config.output_directory, target, content), target))
        for tmp, target in staged:
            os.replace(tmp, target)
    except OSError as exc:
        for tmp, _ in staged:
            with contextlib.suppress(OSError):
                tmp.unlink()
        msg = f"Failed to write certificate bundle to {config.output_directory}: {exc}"
        raise PersistenceError(msg) from exc

    log.info(
        "Saved certificate bundle %s (%s, %s, %s)",
        config.filename,
        config.certificate_path.name,
        config.key_path.name,
        config.issuer_path.name,
    )
