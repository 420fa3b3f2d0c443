"""DigitalOcean DNS provider for DNS-01 challenges.

Publishes and removes ``_acme-challenge`` TXT records through the
DigitalOcean v2 API, authenticated with the resolved DNS credential.

API contract
------------
**Create** -- ``POST /v2/domains/{zone}/records``::

    {"type": "TXT", "name": "_acme-challenge.www", "data": "...", "ttl": 30}

Response ``201`` with ``{"domain_record": {"id": 123, ...}}``.

**Delete** -- ``DELETE /v2/domains/{zone}/records/{id}``, response ``204``.
"""

from __future__ import annotations

import contextlib
import json
import logging
import threading
import urllib.error
import urllib.request
from typing import TYPE_CHECKING, Any

import dns.exception
import dns.resolver

from letsgo.acme.propagation import PropagationChecker

if TYPE_CHECKING:
    from letsgo.config.settings import ResolvedConfiguration

log = logging.getLogger(__name__)

DIGITALOCEAN_API_URL = "https://api.digitalocean.com/v2"
DEFAULT_TTL = 30
DEFAULT_HTTP_TIMEOUT = 30


class DnsProviderError(Exception):
    """Raised when the DNS provider rejects or fails a request."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


def challenge_fqdn(domain: str, record_name: str) -> str:
    """Return the fully qualified TXT record name, without trailing dot."""
    base = domain.removeprefix("*.").rstrip(".")
    name = record_name.rstrip(".")
    if name == base or name.endswith("." + base):
        return name
    return f"{name}.{base}"


class DigitalOceanDns:
    """Minimal DigitalOcean domain-records client.

    Parameters
    ----------
    token:
        DigitalOcean API token.
    checker:
        Propagation checker run after each record creation; ``None``
        disables the self-check.

    """

    def __init__(
        self,
        token: str,
        checker: PropagationChecker | None = None,
        *,
        api_url: str = DIGITALOCEAN_API_URL,
        ttl: int = DEFAULT_TTL,
        http_timeout: int = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._token = token
        self._checker = checker
        self._api_url = api_url.rstrip("/")
        self._ttl = ttl
        self._http_timeout = http_timeout
        self._records: dict[str, list[tuple[str, int]]] = {}
        self._lock = threading.Lock()

    # -- HTTP ---------------------------------------------------------------

    def _request(self, method: str, path: str, payload: dict | None = None) -> Any:
        data = json.dumps(payload).encode("utf-8") if payload is not None else None
        req = urllib.request.Request(
            f"{self._api_url}{path}",
            data=data,
            method=method,
            headers={
                "Authorization": f"Bearer {self._token}",
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
        )
        try:
            with urllib.request.urlopen(req, timeout=self._http_timeout) as resp:  # noqa: S310
                body = resp.read()
        except urllib.error.HTTPError as exc:
            detail = ""
            with contextlib.suppress(Exception):
                detail = exc.read().decode("utf-8", errors="replace")[:500]
            msg = f"DigitalOcean API returned HTTP {exc.code} for {method} {path}: {detail}"
            raise DnsProviderError(msg) from exc
        except (urllib.error.URLError, OSError) as exc:
            msg = f"Failed to reach DigitalOcean API: {exc}"
            raise DnsProviderError(msg) from exc

        if not body:
            return None
        try:
            return json.loads(body)
        except json.JSONDecodeError as exc:
            msg = f"DigitalOcean API returned invalid JSON: {exc}"
            raise DnsProviderError(msg) from exc

    # -- Zones --------------------------------------------------------------

    def find_zone(self, fqdn: str) -> str:
        """Return the DNS zone (apex) that contains *fqdn*."""
        resolver = self._checker.resolver() if self._checker else None
        try:
            zone = dns.resolver.zone_for_name(fqdn, resolver=resolver)
        except dns.exception.DNSException as exc:
            msg = f"Could not determine the DNS zone of {fqdn}: {exc}"
            raise DnsProviderError(msg) from exc
        return zone.to_text(omit_final_dot=True)

    # -- Records ------------------------------------------------------------

    def create_record(self, domain: str, record_name: str, record_value: str) -> None:
        fqdn = challenge_fqdn(domain, record_name)
        zone = self.find_zone(fqdn)
        relative = fqdn.removesuffix(zone).rstrip(".") or "@"
        log.info("Creating TXT record %s in zone %s", fqdn, zone)
        result = self._request(
            "POST",
            f"/domains/{zone}/records",
            {"type": "TXT", "name": relative, "data": record_value, "ttl": self._ttl},
        )
        try:
            record_id = int(result["domain_record"]["id"])
        except (KeyError, TypeError, ValueError) as exc:
            msg = f"Unexpected DigitalOcean response when creating {fqdn}: {result!r}"
            raise DnsProviderError(msg) from exc

        with self._lock:
            self._records.setdefault(fqdn, []).append((zone, record_id))

        if self._checker is not None:
            self._checker.wait(fqdn, record_value)

    def delete_record(self, domain: str, record_name: str) -> None:
        fqdn = challenge_fqdn(domain, record_name)
        with self._lock:
            records = self._records.pop(fqdn, [])
        for zone, record_id in records:
            log.info("Deleting TXT record %s (id %d)", fqdn, record_id)
            try:
                self._request("DELETE", f"/domains/{zone}/records/{record_id}")
            except DnsProviderError as exc:
                log.warning("Failed to clean up TXT record %s: %s", fqdn, exc.detail)


def build_dns_handler(config: ResolvedConfiguration) -> Any:
    """Build the ACMEOW DNS-01 handler for *config*."""
    from acmeow.handlers import CallbackDnsHandler

    timeout = config.dns_timeout.total_seconds()
    checker = PropagationChecker(
        config.dns_resolvers,
        query_timeout=timeout or None,
        require_authoritative=not config.disable_cp,
    )
    provider = DigitalOceanDns(config.auth_token, checker)
    return CallbackDnsHandler(
        create_record=provider.create_record,
        delete_record=provider.delete_record,
        propagation_delay=0,
    )
