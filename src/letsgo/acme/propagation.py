"""DNS-01 propagation self-check.

After the challenge TXT record has been published, poll DNS until the
expected value is visible before asking the CA to validate it.  By
default the configured (or system) recursive resolvers are queried.
When complete propagation is required, every authoritative nameserver
of the zone must serve the value.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Sequence

import dns.exception
import dns.nameserver
import dns.resolver

log = logging.getLogger(__name__)

DEFAULT_PROPAGATION_TIMEOUT = 90.0
DEFAULT_POLLING_INTERVAL = 2.0
DEFAULT_DNS_PORT = 53


class PropagationError(Exception):
    """The TXT record did not become visible in time."""


def parse_nameserver(value: str) -> tuple[str, int]:
    """Split ``host[:port]`` (``[v6]:port`` for IPv6) into host and port."""
    value = value.strip()
    if value.startswith("["):
        host, _, rest = value[1:].partition("]")
        port = rest.removeprefix(":")
        return host, int(port) if port else DEFAULT_DNS_PORT
    if value.count(":") == 1:
        host, port = value.split(":")
        return host, int(port)
    return value, DEFAULT_DNS_PORT


def build_resolver(
    nameservers: Sequence[str] = (),
    query_timeout: float | None = None,
) -> dns.resolver.Resolver:
    """Build a resolver using *nameservers* (``host:port``) or the system ones."""
    resolver = dns.resolver.Resolver(configure=not nameservers)
    if nameservers:
        resolver.nameservers = [
            dns.nameserver.Do53Nameserver(host, port)
            for host, port in map(parse_nameserver, nameservers)
        ]
    if query_timeout:
        resolver.timeout = query_timeout
        resolver.lifetime = query_timeout
    return resolver


def _txt_values(resolver: dns.resolver.Resolver, fqdn: str) -> set[str]:
    try:
        answer = resolver.resolve(fqdn, "TXT")
    except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
        return set()
    return {b"".join(rdata.strings).decode("ascii", errors="replace") for rdata in answer}


class PropagationChecker:
    """Wait until a TXT record is visible.

    Parameters
    ----------
    nameservers:
        Recursive nameservers as ``host[:port]``; empty for system resolvers.
    query_timeout:
        Per-query timeout in seconds; ``None`` keeps dnspython's default.
    require_authoritative:
        Also require every authoritative nameserver of the zone to serve
        the record.
    timeout:
        Overall time budget in seconds.

    """

    def __init__(
        self,
        nameservers: Sequence[str] = (),
        query_timeout: float | None = None,
        *,
        require_authoritative: bool = False,
        timeout: float = DEFAULT_PROPAGATION_TIMEOUT,
        interval: float = DEFAULT_POLLING_INTERVAL,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._nameservers = tuple(nameservers)
        self._query_timeout = query_timeout
        self._require_authoritative = require_authoritative
        self._timeout = timeout
        self._interval = interval
        self._sleep = sleep
        self._clock = clock

    def resolver(self) -> dns.resolver.Resolver:
        return build_resolver(self._nameservers, self._query_timeout)

    def _authoritative_resolvers(self, fqdn: str) -> list[dns.resolver.Resolver]:
        recursive = self.resolver()
        zone = dns.resolver.zone_for_name(fqdn, resolver=recursive)
        addresses: list[str] = []
        for ns in recursive.resolve(zone, "NS"):
            for rdtype in ("A", "AAAA"):
                try:
                    addresses.extend(r.address for r in recursive.resolve(ns.target, rdtype))
                except dns.exception.DNSException:
                    continue
        resolvers = []
        for address in addresses:
            resolver = build_resolver(query_timeout=self._query_timeout)
            resolver.nameservers = [address]
            resolvers.append(resolver)
        return resolvers

    def _is_visible(self, fqdn: str, value: str) -> bool:
        try:
            if self._require_authoritative:
                resolvers = self._authoritative_resolvers(fqdn)
                if not resolvers:
                    return False
            else:
                resolvers = [self.resolver()]
            return all(value in _txt_values(r, fqdn) for r in resolvers)
        except dns.exception.DNSException as exc:
            log.debug("DNS lookup for %s failed: %s", fqdn, exc)
            return False

    def wait(self, fqdn: str, value: str) -> None:
        """Block until *fqdn* serves *value*.

        Raises
        ------
        PropagationError
            If the record is still not visible after the time budget.

        """
        deadline = self._clock() + self._timeout
        while True:
            if self._is_visible(fqdn, value):
                log.info("TXT record %s is visible", fqdn)
                return
            if self._clock() >= deadline:
                msg = f"TXT record {fqdn} not visible after {self._timeout:.0f}s"
                raise PropagationError(msg)
            log.debug("TXT record %s not visible yet, retrying", fqdn)
            self._sleep(self._interval)
