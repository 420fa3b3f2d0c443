"""letsgo command-line entry point.

Configuration is read from environment variables (see ``DOMAINS``,
``ACCOUNT_EMAIL``, ``DNS_AUTH_TOKEN`` ...).

Usage::

    letsgo --once                       # obtain/renew the certificate and exit
    letsgo --check                      # print the certificate state and exit
    letsgo -- nats-server -c nats.conf  # supervise a server, reload on renewal
    python -m letsgo --once
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import signal
import sys
import threading

from letsgo.config.constants import (
    INITIAL_MINIMUM_REMAINING_DAYS,
    MINIMUM_REMAINING_DAYS,
    RENEWAL_CHECK_INTERVAL_SECONDS,
)

log = logging.getLogger(__name__)


def _get_version() -> str:
    from letsgo import __version__

    return __version__


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="letsgo",
        description="Obtain and renew ACME certificates for a long-running server.",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Enable debug output (full tracebacks, verbose logging).",
    )
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument(
        "--once",
        action="store_true",
        default=False,
        help="Obtain or renew the certificate, then exit.",
    )
    mode.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Print the state of the stored certificate and exit.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=MINIMUM_REMAINING_DAYS,
        metavar="N",
        help="Renew certificates expiring within N days (default: %(default)s).",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=RENEWAL_CHECK_INTERVAL_SECONDS,
        metavar="SECONDS",
        help="Delay between renewal checks (default: %(default)s).",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "command",
        nargs=argparse.REMAINDER,
        help="Server command to supervise, given after '--'.",
    )
    return parser


def _print_error(message: str) -> None:
    """Print a user-facing error to stderr."""
    print(f"letsgo: error: {message}", file=sys.stderr)  # noqa: T201


def main(argv: list[str] | None = None) -> None:
    """CLI entry point.  Resolves config, checks the certificate, supervises."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    command = list(args.command)
    if command and command[0] == "--":
        command = command[1:]

    # -- bootstrap logging early (basic stderr until config is loaded) ---
    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    from letsgo.config import (
        ConfigError,
        RawConfiguration,
        build_logging_settings,
        resolve,
    )
    from letsgo.logging import configure_logging
    from letsgo.stores import default_stores

    logging_settings = build_logging_settings(os.environ)
    if args.debug:
        logging_settings = dataclasses.replace(logging_settings, level="DEBUG")
    configure_logging(logging_settings)

    # -- resolve configuration ---
    try:
        config = resolve(RawConfiguration.from_env(), default_stores())
    except ConfigError as exc:
        _print_error(exc.detail)
        sys.exit(1)

    configure_logging(logging_settings, certificate=config.filename)

    from letsgo.acme import CertificateError, CertificateManager

    manager = CertificateManager(config)

    if args.check:
        _print_status(manager, args.days)
        sys.exit(0)

    # -- startup check: create if missing, renew if close to expiry ---
    try:
        manager.ensure_valid(INITIAL_MINIMUM_REMAINING_DAYS)
    except CertificateError as exc:
        if args.debug:
            raise
        _print_error(exc.detail)
        sys.exit(1)

    if args.once:
        sys.exit(0)

    sys.exit(_run_forever(manager, command, args))


def _print_status(manager, days: int) -> None:
    status = manager.inspect(days)
    remaining = "" if status.days_remaining is None else f" ({status.days_remaining} days left)"
    print(f"{manager.config.certificate_path}: {status.state.value}{remaining}")  # noqa: T201


def _run_forever(manager, command: list[str], args) -> int:
    """Run the renewal worker, supervising *command* when given."""
    from letsgo.server.process import ManagedServer, ServerError
    from letsgo.services.renewal_worker import RenewalWorker

    stop = threading.Event()
    exit_code = 0
    server = ManagedServer(command) if command else None

    def on_fatal(exc) -> None:
        nonlocal exit_code
        _print_error(exc.detail)
        exit_code = 1
        if server is not None:
            server.terminate()
        stop.set()

    worker = RenewalWorker(
        manager,
        on_change=server.reload if server is not None else None,
        on_fatal=on_fatal,
        days=args.days,
        interval_seconds=args.interval,
    )

    def on_signal(signum, _frame) -> None:
        log.info("Received signal %d, shutting down", signum)
        if server is not None:
            server.terminate()
        stop.set()

    signal.signal(signal.SIGTERM, on_signal)
    signal.signal(signal.SIGINT, on_signal)

    if server is not None:
        try:
            server.start()
        except ServerError as exc:
            _print_error(str(exc))
            return 1

    log.info("Certificates will be checked for renewal every %ds", args.interval)
    worker.start()
    try:
        if server is not None:
            status = server.wait()
            if not stop.is_set():
                exit_code = 128 - status if status < 0 else status
        else:
            stop.wait()
    finally:
        worker.stop()
        if server is not None:
            server.stop()
    return exit_code
