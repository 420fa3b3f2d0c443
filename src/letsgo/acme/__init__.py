"""Certificate lifecycle management.

Public API::

    from letsgo.acme import CertificateManager

    changed = CertificateManager(config).ensure_valid(21)
"""

from letsgo.acme.base import (
    AccountRegistrationError,
    CertificateError,
    CertificateIssuer,
    CertificateRequestError,
    CertificateResource,
    CertificateState,
    CertificateStatus,
    InvalidChainError,
    PersistenceError,
)
from letsgo.acme.lifecycle import CertificateManager

__all__ = [
    "AccountRegistrationError",
    "CertificateError",
    "CertificateIssuer",
    "CertificateManager",
    "CertificateRequestError",
    "CertificateResource",
    "CertificateState",
    "CertificateStatus",
    "InvalidChainError",
    "PersistenceError",
]
