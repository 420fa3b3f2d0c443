"""Decide when the certificate must be (re)issued, and issue it.

Usage::

    manager = CertificateManager(config)
    changed = manager.ensure_valid(21)
    if changed:
        server.reload()

The state of the stored certificate is derived afresh on every call from
the leaf certificate's ``notAfter`` and CA flag; nothing is cached.
Calls are serialised with a lock so that the startup check and the
periodic check never write the bundle concurrently.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from cryptography import x509

from letsgo.acme.base import (
    CertificateState,
    CertificateStatus,
    InvalidChainError,
)
from letsgo.acme.storage import read_certificates, save_resource

if TYPE_CHECKING:
    from letsgo.acme.base import CertificateIssuer
    from letsgo.config.settings import ResolvedConfiguration

log = logging.getLogger(__name__)

_SECONDS_PER_DAY = 24 * 60 * 60


def is_ca_certificate(cert: x509.Certificate) -> bool:
    try:
        constraints = cert.extensions.get_extension_for_class(x509.BasicConstraints)
    except x509.ExtensionNotFound:
        return False
    return constraints.value.ca


def days_until_expiry(cert: x509.Certificate, now: datetime) -> int:
    """Whole days left before *cert* expires (negative once expired)."""
    remaining = cert.not_valid_after_utc - now
    return math.floor(remaining.total_seconds() / _SECONDS_PER_DAY)


class CertificateManager:
    """Keep the certificate bundle of one configuration fresh.

    Parameters
    ----------
    config:
        The resolved configuration; read-only.
    issuer:
        Certificate issuer.  Defaults to an ACMEOW-backed issuer built
        from *config*.
    clock:
        Returns the current time as an aware UTC datetime.

    """

    def __init__(
        self,
        config: ResolvedConfiguration,
        issuer: CertificateIssuer | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if issuer is None:
            from letsgo.acme.client import AcmeowIssuer

            issuer = AcmeowIssuer(config)
        self._config = config
        self._issuer = issuer
        self._clock = clock or (lambda: datetime.now(UTC))
        self._lock = threading.Lock()

    @property
    def config(self) -> ResolvedConfiguration:
        return self._config

    def inspect(self, days: int) -> CertificateStatus:
        """Classify the stored certificate against a *days* threshold.

        A negative threshold never reports ``NEEDS_RENEWAL``.
        """
        certs = read_certificates(self._config.certificate_path)
        if certs is None:
            return CertificateStatus(CertificateState.ABSENT)

        leaf = certs[0]
        if is_ca_certificate(leaf):
            return CertificateStatus(CertificateState.INVALID_CHAIN)

        remaining = days_until_expiry(leaf, self._clock())
        if days < 0 or remaining > days:
            return CertificateStatus(CertificateState.VALID, remaining)
        return CertificateStatus(CertificateState.NEEDS_RENEWAL, remaining)

    def ensure_valid(self, days: int) -> bool:
        """Make sure a certificate valid for more than *days* days exists.

        A missing or unreadable certificate is always requested.  With a
        negative *days* an existing certificate is never renewed.

        Returns
        -------
        bool
            ``True`` when a new certificate was written.

        Raises
        ------
        InvalidChainError
            If the stored bundle starts with a CA certificate.
        CertificateRequestError
            If the CA did not deliver a certificate.
        PersistenceError
            If the new bundle could not be written.

        """
        with self._lock:
            status = self.inspect(days)

            if status.state is CertificateState.INVALID_CHAIN:
                msg = (
                    f"Certificate bundle {self._config.certificate_path} "
                    "starts with a CA certificate"
                )
                raise InvalidChainError(msg)

            if status.state is CertificateState.VALID:
                if days >= 0:
                    log.info(
                        "Certificate %s is valid for %d more days (threshold %d), skipping renewal",
                        self._config.filename,
                        status.days_remaining,
                        days,
                    )
                return False

            if status.state is CertificateState.ABSENT:
                log.info(
                    "No usable certificate at %s, requesting a new one",
                    self._config.certificate_path,
                )
            else:
                log.info(
                    "Certificate %s expires in %d days (threshold %d), renewing",
                    self._config.filename,
                    status.days_remaining,
                    days,
                )

            resource = self._issuer.obtain(self._config.domains)
            save_resource(resource, self._config)
            return True
