"""Shared test doubles and certificate builders."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID

from letsgo.acme.base import CertificateIssuer, CertificateResource
from letsgo.stores.base import FileStoreProtocol, KeyVaultStoreProtocol
from letsgo.stores.registry import Stores

# ---------------------------------------------------------------------------
# Secret store doubles
# ---------------------------------------------------------------------------


class StaticFileStore(FileStoreProtocol):
    """File store double returning a fixed token and recording lookups."""

    def __init__(self, token: str) -> None:
        self.token = token
        self.calls: list[str] = []

    def get_token(self, path: str) -> str:
        self.calls.append(path)
        return self.token


class StaticKeyVaultStore(KeyVaultStoreProtocol):
    """Key vault double returning a fixed token and recording lookups."""

    def __init__(self, token: str) -> None:
        self.token = token
        self.calls: list[tuple[str, str]] = []

    def get_token(self, vault_uri: str, secret_name: str) -> str:
        self.calls.append((vault_uri, secret_name))
        return self.token


def make_stores(token: str = "") -> Stores:
    return Stores(files=StaticFileStore(token), keyvault=StaticKeyVaultStore(token))


# ---------------------------------------------------------------------------
# Certificates
# ---------------------------------------------------------------------------


def make_certificate(
    common_name: str = "example.com",
    *,
    not_after: datetime | None = None,
    is_ca: bool = False,
    issuer_key: ec.EllipticCurvePrivateKey | None = None,
    issuer_name: str | None = None,
) -> x509.Certificate:
    """Build a certificate with the given expiry and CA flag."""
    key = ec.generate_private_key(ec.SECP256R1())
    now = datetime.now(UTC)
    not_after = not_after or now + timedelta(days=90)
    subject = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    issuer = x509.Name(
        [x509.NameAttribute(NameOID.COMMON_NAME, issuer_name or common_name)],
    )
    builder = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(min(now, not_after) - timedelta(days=1))
        .not_valid_after(not_after)
    )
    if is_ca:
        builder = builder.add_extension(
            x509.BasicConstraints(ca=True, path_length=None),
            critical=True,
        )
    else:
        builder = builder.add_extension(
            x509.SubjectAlternativeName([x509.DNSName(common_name)]),
            critical=False,
        )
    return builder.sign(issuer_key or key, hashes.SHA256())


def to_pem(*certs: x509.Certificate) -> bytes:
    return b"".join(c.public_bytes(serialization.Encoding.PEM) for c in certs)


def make_chain_pem(
    common_name: str = "example.com",
    *,
    not_after: datetime | None = None,
) -> bytes:
    """Return ``leaf + issuer`` PEM for a leaf signed by a throwaway CA."""
    ca_key = ec.generate_private_key(ec.SECP256R1())
    ca = make_certificate("Test Issuer", is_ca=True, issuer_key=ca_key)
    leaf = make_certificate(
        common_name,
        not_after=not_after,
        issuer_key=ca_key,
        issuer_name="Test Issuer",
    )
    return to_pem(leaf, ca)


# ---------------------------------------------------------------------------
# Issuer double
# ---------------------------------------------------------------------------


class FakeIssuer(CertificateIssuer):
    """Issuer that returns freshly minted certificates and counts requests."""

    def __init__(self, days: int = 90, error: Exception | None = None) -> None:
        self.days = days
        self.error = error
        self.requests: list[tuple[str, ...]] = []

    def obtain(self, domains) -> CertificateResource:
        self.requests.append(tuple(domains))
        if self.error is not None:
            raise self.error
        chain = make_chain_pem(
            domains[0],
            not_after=datetime.now(UTC) + timedelta(days=self.days),
        )
        leaf_end = chain.index(b"-----END CERTIFICATE-----") + len(b"-----END CERTIFICATE-----\n")
        key = ec.generate_private_key(ec.SECP256R1()).private_bytes(
            serialization.Encoding.PEM,
            serialization.PrivateFormat.TraditionalOpenSSL,
            serialization.NoEncryption(),
        )
        return CertificateResource(
            domains=tuple(domains),
            certificate=chain,
            private_key=key,
            issuer_certificate=chain[leaf_end:],
        )
