"""Periodic certificate renewal worker.

Daemon thread that calls :meth:`CertificateManager.ensure_valid` on a
fixed delay and notifies the server when the certificate changed.
Request failures are logged and retried on the next check; the server
keeps running on its current certificate.  Account registration
failures and invalid bundles are reported through ``on_fatal``.

Usage::

    worker = RenewalWorker(manager, on_change=server.reload, on_fatal=stop)
    worker.start()
    ...
    worker.stop()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from typing import TYPE_CHECKING

from letsgo.acme.base import (
    AccountRegistrationError,
    CertificateError,
    InvalidChainError,
)
from letsgo.config.constants import (
    MINIMUM_REMAINING_DAYS,
    RENEWAL_CHECK_INTERVAL_SECONDS,
)

if TYPE_CHECKING:
    from letsgo.acme.lifecycle import CertificateManager

log = logging.getLogger(__name__)


class RenewalWorker:
    """Daemon thread that keeps the certificate fresh.

    Parameters
    ----------
    manager:
        Certificate manager shared with the startup check.
    on_change:
        Called with no arguments after a new certificate was written.
    on_fatal:
        Called with the exception when renewal can never succeed
        without operator intervention.
    days:
        Renewal threshold in days before expiry.
    interval_seconds:
        Delay between two checks.

    """

    def __init__(
        self,
        manager: CertificateManager,
        on_change: Callable[[], None] | None = None,
        on_fatal: Callable[[CertificateError], None] | None = None,
        days: int = MINIMUM_REMAINING_DAYS,
        interval_seconds: float = RENEWAL_CHECK_INTERVAL_SECONDS,
    ) -> None:
        self._manager = manager
        self._on_change = on_change
        self._on_fatal = on_fatal
        self._days = days
        self._interval = interval_seconds
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        """Start the background worker thread."""
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run,
            name="renewal-worker",
            daemon=True,
        )
        self._thread.start()
        log.info(
            "Renewal worker started (threshold=%d days, interval=%ds)",
            self._days,
            self._interval,
        )

    def stop(self) -> None:
        """Signal the worker to stop and wait for it."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5)
            log.info("Renewal worker stopped")

    def _run(self) -> None:
        """Main worker loop: wait first, the startup check already ran."""
        while not self._stop_event.wait(timeout=self._interval):
            if not self.check():
                return

    def check(self) -> bool:
        """Run one renewal check.

        Returns ``False`` when the worker must stop because of a fatal
        error.
        """
        log.debug("Checking certificate expiration")
        try:
            changed = self._manager.ensure_valid(self._days)
        except (AccountRegistrationError, InvalidChainError) as exc:
            log.critical("Certificate renewal cannot proceed: %s", exc.detail)
            if self._on_fatal is not None:
                self._on_fatal(exc)
            return False
        except CertificateError as exc:
            log.error(
                "Failed to renew TLS certificate, keeping the current one: %s",
                exc.detail,
            )
            return True

        if changed:
            log.info("Certificate changed, notifying server")
            if self._on_change is not None:
                try:
                    self._on_change()
                except Exception:
                    log.exception("Server reload notification failed")
        return True
