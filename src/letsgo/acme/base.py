"""Certificate lifecycle types and the issuer contract.

A :class:`CertificateIssuer` obtains a new certificate for a list of
domains from an ACME CA.  The built-in implementation is
:class:`letsgo.acme.client.AcmeowIssuer`; tests substitute their own.
"""

from __future__ import annotations

import abc
from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum


class CertificateError(Exception):
    """Raised when the certificate bundle cannot be checked or renewed.

    Parameters
    ----------
    detail:
        Human-readable description of the failure.

    """

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class InvalidChainError(CertificateError):
    """The stored bundle starts with a CA certificate instead of a leaf."""


class CertificateRequestError(CertificateError):
    """The ACME CA did not deliver a certificate."""


class AccountRegistrationError(CertificateRequestError):
    """The ACME account could not be registered.

    Always fatal: no certificate can ever be obtained without an account.
    """


class PersistenceError(CertificateError):
    """The certificate bundle could not be written to disk."""


@dataclass(frozen=True)
class CertificateResource:
    """PEM artifacts returned by a successful issuance.

    Attributes
    ----------
    certificate:
        Leaf certificate followed by the issuer chain.
    private_key:
        Private key of the leaf certificate.
    issuer_certificate:
        Issuer chain only.

    """

    domains: tuple[str, ...]
    certificate: bytes
    private_key: bytes
    issuer_certificate: bytes


class CertificateState(StrEnum):
    ABSENT = "absent"
    VALID = "valid"
    NEEDS_RENEWAL = "needs_renewal"
    INVALID_CHAIN = "invalid_chain"


@dataclass(frozen=True)
class CertificateStatus:
    """Current state of the stored certificate, computed on every check."""

    state: CertificateState
    days_remaining: int | None = None


class CertificateIssuer(abc.ABC):
    """Obtain certificates from an ACME certificate authority."""

    @abc.abstractmethod
    def obtain(self, domains: Sequence[str]) -> CertificateResource:
        """Request a certificate covering every name in *domains*.

        Raises
        ------
        AccountRegistrationError
            If the ACME account cannot be registered.
        CertificateRequestError
            On any other issuance failure.

        """
