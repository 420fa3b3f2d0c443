"""Run the external server as a child process.

The server command (for example ``nats-server -c nats.conf``) is started
once the certificate is in place; on certificate change it is sent
``SIGHUP``, which NATS and most daemons treat as "reload configuration
and certificates".
"""

from __future__ import annotations

import logging
import signal
import subprocess
import threading
from collections.abc import Sequence

log = logging.getLogger(__name__)


class ServerError(Exception):
    """Raised when the server process cannot be started or signalled."""


class ManagedServer:
    """A child process that can be told to reload."""

    def __init__(
        self,
        command: Sequence[str],
        reload_signal: int = signal.SIGHUP,
    ) -> None:
        if not command:
            msg = "No server command given"
            raise ServerError(msg)
        self._command = list(command)
        self._reload_signal = reload_signal
        self._process: subprocess.Popen | None = None
        self._lock = threading.Lock()
        self._kill_timer: threading.Timer | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    def start(self) -> None:
        with self._lock:
            if self._process is not None and self._process.poll() is None:
                return
            try:
                self._process = subprocess.Popen(self._command)  # noqa: S603
            except OSError as exc:
                msg = f"Failed to start {self._command[0]}: {exc}"
                raise ServerError(msg) from exc
        log.info("Started %s (pid %d)", self._command[0], self._process.pid)

    def reload(self) -> None:
        with self._lock:
            if self._process is None or self._process.poll() is not None:
                log.warning("Server is not running, nothing to reload")
                return
            log.info(
                "Reloading %s (pid %d) due to TLS certificate changes",
                self._command[0],
                self._process.pid,
            )
            self._process.send_signal(self._reload_signal)

    def stop(self, timeout: float = 10) -> None:
        with self._lock:
            process = self._process
        if process is None or process.poll() is not None:
            return
        process.terminate()
        try:
            process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            log.warning("%s did not exit after %ss, killing it", self._command[0], timeout)
            process.kill()
            process.wait()

    def terminate(self, kill_after: float = 10) -> None:
        """Ask the server to exit without waiting for it.

        Safe to call from a signal handler while another frame of the
        main thread is blocked in :meth:`wait`.  The server is killed if
        it is still running *kill_after* seconds later.
        """
        process = self._process
        if process is None or process.returncode is not None:
            return
        process.terminate()
        if self._kill_timer is None:
            self._kill_timer = threading.Timer(kill_after, self._kill, args=(process, kill_after))
            self._kill_timer.daemon = True
            self._kill_timer.start()

    def _kill(self, process: subprocess.Popen, waited: float) -> None:
        if process.poll() is None:
            log.warning("%s did not exit after %ss, killing it", self._command[0], waited)
            process.kill()

    def wait(self) -> int:
        """Block until the server exits and return its exit status."""
        if self._process is None:
            msg = "Server was never started"
            raise ServerError(msg)
        status = self._process.wait()
        if self._kill_timer is not None:
            self._kill_timer.cancel()
            self._kill_timer = None
        return status
