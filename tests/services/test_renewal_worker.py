"""Tests for the periodic renewal worker."""

from __future__ import annotations

import threading
import time
from unittest.mock import MagicMock

from letsgo.acme import (
    AccountRegistrationError,
    CertificateRequestError,
    InvalidChainError,
    PersistenceError,
)
from letsgo.services.renewal_worker import RenewalWorker


def _manager(*results):
    manager = MagicMock()
    manager.ensure_valid.side_effect = list(results)
    return manager


class TestCheck:
    def test_unchanged(self):
        on_change = MagicMock()
        worker = RenewalWorker(_manager(False), on_change=on_change, days=21)

        assert worker.check() is True
        on_change.assert_not_called()

    def test_changed_notifies(self):
        manager = _manager(True)
        on_change = MagicMock()
        worker = RenewalWorker(manager, on_change=on_change, days=30)

        assert worker.check() is True
        manager.ensure_valid.assert_called_once_with(30)
        on_change.assert_called_once_with()

    def test_request_error_keeps_running(self, caplog):
        on_change = MagicMock()
        on_fatal = MagicMock()
        worker = RenewalWorker(
            _manager(CertificateRequestError("rate limited")),
            on_change=on_change,
            on_fatal=on_fatal,
        )

        assert worker.check() is True
        on_change.assert_not_called()
        on_fatal.assert_not_called()
        assert "rate limited" in caplog.text

    def test_persistence_error_keeps_running(self):
        worker = RenewalWorker(_manager(PersistenceError("disk full")))
        assert worker.check() is True

    def test_registration_error_is_fatal(self):
        error = AccountRegistrationError("account rejected")
        on_fatal = MagicMock()
        worker = RenewalWorker(_manager(error), on_fatal=on_fatal)

        assert worker.check() is False
        on_fatal.assert_called_once_with(error)

    def test_invalid_chain_is_fatal(self):
        on_fatal = MagicMock()
        worker = RenewalWorker(_manager(InvalidChainError("bad bundle")), on_fatal=on_fatal)
        assert worker.check() is False
        on_fatal.assert_called_once()

    def test_reload_failure_is_logged(self, caplog):
        on_change = MagicMock(side_effect=RuntimeError("no such process"))
        worker = RenewalWorker(_manager(True), on_change=on_change)

        assert worker.check() is True
        assert "Server reload notification failed" in caplog.text


class TestThread:
    def test_runs_periodically(self):
        calls = threading.Event()
        manager = MagicMock()
        counter = {"n": 0}

        def ensure_valid(days):
            counter["n"] += 1
            if counter["n"] >= 3:
                calls.set()
            return False

        manager.ensure_valid.side_effect = ensure_valid
        worker = RenewalWorker(manager, interval_seconds=0.01)
        worker.start()
        try:
            assert calls.wait(timeout=5)
        finally:
            worker.stop()

    def test_waits_before_first_check(self):
        manager = MagicMock()
        worker = RenewalWorker(manager, interval_seconds=60)
        worker.start()
        time.sleep(0.05)
        worker.stop()
        manager.ensure_valid.assert_not_called()

    def test_stops_after_fatal_error(self):
        manager = _manager(InvalidChainError("bad bundle"))
        fatal = threading.Event()
        worker = RenewalWorker(manager, on_fatal=lambda exc: fatal.set(), interval_seconds=0.01)
        worker.start()
        try:
            assert fatal.wait(timeout=5)
            worker._thread.join(timeout=5)
            assert not worker._thread.is_alive()
        finally:
            worker.stop()
        assert manager.ensure_valid.call_count == 1
