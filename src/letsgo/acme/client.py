"""ACME certificate issuer backed by ACMEOW.

Each issuance builds a fresh ACMEOW client bound to the configured CA
directory, registers the account with the resolved account key
(idempotent on the CA side), solves DNS-01 challenges with the
DigitalOcean provider, and finalises the order with a CSR signed by a
locally generated RSA key of the configured size.

ACMEOW keeps its account under ``storage_path`` and only signs with
ES256, so the account key must be an EC P-256 key.  It is written into
ACMEOW's account layout before registration so that ACMEOW signs with it
instead of generating its own.
"""

from __future__ import annotations

import hashlib
import json
import logging
import os
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any
from urllib.parse import urlparse

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa
from cryptography.x509.oid import NameOID

from letsgo.acme.base import (
    AccountRegistrationError,
    CertificateIssuer,
    CertificateRequestError,
    CertificateResource,
)
from letsgo.acme.dns_provider import build_dns_handler

if TYPE_CHECKING:
    from letsgo.config.settings import ResolvedConfiguration

log = logging.getLogger(__name__)

_MAX_COMMON_NAME_LENGTH = 64
_RSA_PUBLIC_EXPONENT = 65537


def account_thumbprint(config: ResolvedConfiguration) -> str:
    """SHA-256 of the account public key, identifying the ACME account."""
    public = config.account_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return hashlib.sha256(public).hexdigest()


def account_storage_path(config: ResolvedConfiguration) -> Path:
    return config.output_directory / ".acme" / account_thumbprint(config)[:32]


def account_key_path(config: ResolvedConfiguration, storage: Path) -> Path:
    """Where ACMEOW looks for the key of the account of *config*."""
    host = urlparse(config.ca_dir_url).hostname or "unknown"
    return storage / "accounts" / host / config.email / "keys" / f"{config.email}.key"


def seed_account_key(config: ResolvedConfiguration, storage: Path) -> Path:
    """Install the resolved account key in ACMEOW's storage.

    ACMEOW only loads a stored key when ``account.json`` exists next to
    it; a record without an account URI makes it register that key.  A
    stored key that differs from the resolved one is replaced and its
    account record dropped.

    Raises
    ------
    AccountRegistrationError
        If the account key is not an EC P-256 key.
    OSError
        If the storage cannot be written.

    """
    key = config.account_key
    if not isinstance(key, ec.EllipticCurvePrivateKey) or not isinstance(
        key.curve,
        ec.SECP256R1,
    ):
        msg = (
            f"ACME account key must be an EC P-256 key, got {type(key).__name__}; "
            "remove the account key file to generate one"
        )
        raise AccountRegistrationError(msg)

    pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    key_path = account_key_path(config, storage)
    record_path = key_path.parent.parent / "account.json"

    if not key_path.exists() or key_path.read_bytes() != pem:
        key_path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        fd = os.open(key_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "wb") as fh:
            fh.write(pem)
        record_path.unlink(missing_ok=True)
        log.debug("Installed account key at %s", key_path)

    if not record_path.exists():
        record_path.write_text(json.dumps({"email": config.email}), encoding="utf-8")
    return key_path


def to_ascii(domain: str) -> str:
    return domain.encode("idna").decode("ascii")


def build_csr(
    domains: Sequence[str],
    key: rsa.RSAPrivateKey,
) -> x509.CertificateSigningRequest:
    """Build a CSR with every domain as a SAN; the first one is the CN."""
    names = [to_ascii(d) for d in domains]
    # CN is limited to 64 characters; longer names are carried by the SAN only.
    attributes = []
    if len(names[0]) <= _MAX_COMMON_NAME_LENGTH:
        attributes.append(x509.NameAttribute(NameOID.COMMON_NAME, names[0]))
    builder = x509.CertificateSigningRequestBuilder().subject_name(x509.Name(attributes))
    builder = builder.add_extension(
        x509.SubjectAlternativeName([x509.DNSName(n) for n in names]),
        critical=False,
    )
    return builder.sign(key, hashes.SHA256())


def split_chain(chain_pem: bytes) -> tuple[bytes, bytes]:
    """Split a PEM chain into the leaf and the issuer certificates."""
    try:
        certs = x509.load_pem_x509_certificates(chain_pem)
    except ValueError as exc:
        msg = f"CA returned an unparseable certificate chain: {exc}"
        raise CertificateRequestError(msg) from exc
    if len(certs) < 2:  # noqa: PLR2004
        msg = "CA returned a certificate without its issuer chain"
        raise CertificateRequestError(msg)
    leaf = certs[0].public_bytes(serialization.Encoding.PEM)
    issuer = b"".join(c.public_bytes(serialization.Encoding.PEM) for c in certs[1:])
    return leaf, issuer


class AcmeowIssuer(CertificateIssuer):
    """Obtain certificates from an ACME CA using ACMEOW."""

    def __init__(self, config: ResolvedConfiguration) -> None:
        self._config = config

    def _new_client(self) -> Any:
        """Create the ACMEOW client and register the account.

        Raises
        ------
        AccountRegistrationError
            If the client cannot be created or the account registered.

        """
        try:
            from acmeow import AcmeClient
        except ImportError as exc:
            msg = "ACMEOW is not installed. Install with: pip install acmeow"
            raise AccountRegistrationError(msg) from exc

        storage = account_storage_path(self._config)
        try:
            storage.mkdir(parents=True, exist_ok=True, mode=0o700)
            seed_account_key(self._config, storage)
            client = AcmeClient(
                server_url=self._config.ca_dir_url,
                email=self._config.email,
                storage_path=storage,
            )
        except AccountRegistrationError:
            raise
        except Exception as exc:  # noqa: BLE001
            msg = f"Failed to create ACME client for {self._config.ca_dir_url}: {exc}"
            raise AccountRegistrationError(msg) from exc

        try:
            client.create_account(terms_agreed=self._config.terms_of_service_agreed)
        except Exception as exc:  # noqa: BLE001
            client.close()
            msg = (
                f"Failed to register ACME account {self._config.email} "
                f"with {self._config.ca_dir_url}: {exc}"
            )
            raise AccountRegistrationError(msg) from exc

        log.info("Registered ACME account %s with %s", self._config.email, self._config.ca_dir_url)
        return client

    def obtain(self, domains: Sequence[str]) -> CertificateResource:
        client = self._new_client()
        from acmeow import ChallengeType, Identifier

        key = rsa.generate_private_key(
            public_exponent=_RSA_PUBLIC_EXPONENT,
            key_size=self._config.key_type.key_size,
        )
        try:
            csr = build_csr(domains, key)
            handler = build_dns_handler(self._config)

            log.info("Creating order for %s", ", ".join(domains))
            client.create_order([Identifier.dns(to_ascii(d)) for d in domains])
            log.info("Completing %s challenges", ChallengeType.DNS.value)
            client.complete_challenges(handler, challenge_type=ChallengeType.DNS)
            client.finalize_order(csr=csr.public_bytes(serialization.Encoding.DER))
            chain, _ = client.get_certificate()
        except CertificateRequestError:
            raise
        except Exception as exc:  # noqa: BLE001
            msg = (
                f"Certificate request for {', '.join(domains)} failed "
                f"({type(exc).__name__}): {exc}"
            )
            raise CertificateRequestError(msg) from exc
        finally:
            client.close()

        chain_pem = chain.encode("ascii") if isinstance(chain, str) else bytes(chain)
        leaf, issuer = split_chain(chain_pem)
        log.info("Certificate issued for %s", ", ".join(domains))
        return CertificateResource(
            domains=tuple(domains),
            certificate=leaf + issuer,
            private_key=key.private_bytes(
                encoding=serialization.Encoding.PEM,
                format=serialization.PrivateFormat.TraditionalOpenSSL,
                encryption_algorithm=serialization.NoEncryption(),
            ),
            issuer_certificate=issuer,
        )
