from __future__ import annotations

import argparse
import logging
import signal
import sys
import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from importlib.metadata import PackageNotFoundError, version as package_version

from relish_notifier.app.logging_setup import setup_logging
from relish_notifier.config.run_config import RunConfig, parse_duration
from relish_notifier.config.settings import PASSWORD_ENV, USERNAME_ENV, load_settings
from relish_notifier.scraping.relish_playwright import PlaywrightTrackerClient
from relish_notifier.services.credentials import (
    KEYRING_PASSWORD_ACCOUNT,
    KEYRING_SERVICE,
    KEYRING_USERNAME_ACCOUNT,
    CredentialResolver,
)
from relish_notifier.services.notifier import PollingOrchestrator
from relish_notifier.services.tracker_client import TrackerClient
from relish_notifier.utils.errors import RelishNotifierError

logger = logging.getLogger(__name__)

PROG = "relish-notifier"

DESCRIPTION = (
    "Monitor Relish orders and send notifications.\n\n"
    f"Credentials are retrieved from the system keychain (service: {KEYRING_SERVICE}, "
    f"accounts: {KEYRING_USERNAME_ACCOUNT}/{KEYRING_PASSWORD_ACCOUNT}).\n"
    f"If keychain is unavailable, environment variables {USERNAME_ENV} and "
    f"{PASSWORD_ENV} will be used as fallback."
)


def installed_version() -> str:
    try:
        return package_version(PROG)
    except PackageNotFoundError:
        return "dev"


class NotifierArgumentParser(argparse.ArgumentParser):
    """Reports usage errors as `Error: ...` on stderr with exit status 1."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(1, f"Error: {message}\n")


def _duration(value: str) -> float:
    try:
        seconds = parse_duration(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from e
    if seconds <= 0:
        # 0 would disable the page timeout in Playwright
        raise argparse.ArgumentTypeError(f"must be greater than 0: {value!r}")
    return seconds


def build_parser(version: str) -> argparse.ArgumentParser:
    parser = NotifierArgumentParser(
        prog=PROG,
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--headless",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Run Chrome in headless mode.",
    )
    parser.add_argument(
        "--extensions",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Enable browser extensions.",
    )
    parser.add_argument(
        "-i",
        "--check-interval",
        type=int,
        default=30,
        help="How often to check for delivery (seconds, greater than 0).",
    )
    parser.add_argument("--once", action="store_true", help="Check once and exit.")
    parser.add_argument(
        "-t",
        "--page-timeout",
        type=_duration,
        default=10.0,
        help="Page timeout, e.g. 10s, 1m30s, 500ms (default: 10s).",
    )
    parser.add_argument(
        "-c",
        "--command",
        default=None,
        help="Run this command when your order has arrived.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v: info, -vv: debug).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {version}")
    return parser


def parse_args(argv: Sequence[str] | None, version: str) -> argparse.Namespace:
    """
    Parses and validates the command line.

    Behavior:
    - Usage errors print `Error: ...` and exit with status 1.
    - --check-interval must be > 0 unless --once is given (no wait happens then).
    """
    parser = build_parser(version)
    args = parser.parse_args(argv)
    if not args.once and args.check_interval <= 0:
        parser.error("argument -i/--check-interval: must be greater than 0")
    return args


def config_from_args(args: argparse.Namespace, version: str) -> RunConfig:
    return RunConfig(
        headless=args.headless,
        extensions=args.extensions,
        check_interval=args.check_interval,
        once=args.once,
        page_timeout=args.page_timeout,
        command=args.command or None,
        verbose=args.verbose,
        version=version,
    )


def default_client_factory(config: RunConfig) -> TrackerClient:
    settings = load_settings()
    return PlaywrightTrackerClient(
        login_url=settings.login_url,
        headless=config.headless,
        extensions=config.extensions,
        user_agent=settings.user_agent,
        page_timeout_ms=config.page_timeout_ms,
        artifacts_dir=settings.artifacts_dir,
    )


@contextmanager
def cancel_on_signals(cancel: threading.Event) -> Iterator[None]:
    """
    Sets `cancel` on SIGINT/SIGTERM for the duration of the block.

    Previous handlers are restored on exit.
    """

    def _handler(signum, frame) -> None:
        logger.info("received interrupt signal (%s)", signal.Signals(signum).name)
        cancel.set()

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, _handler)
    try:
        yield
    finally:
        for sig, handler in previous.items():
            signal.signal(sig, handler)


def main(
    argv: Sequence[str] | None = None,
    *,
    version: str | None = None,
    client_factory: Callable[[RunConfig], TrackerClient] | None = None,
    resolver: CredentialResolver | None = None,
    cancel: threading.Event | None = None,
) -> int:
    """
    What it does:
    - Parses flags, resolves credentials, and runs the polling loop.

    Behavior:
    - Returns 0 when the order arrived or the run was cancelled by a signal.
    - Returns 1 on credential/session/auth failure (message on stderr) or when
      --once finds the order has not arrived.
    - Usage errors exit with status 1 from argument parsing.
    """
    version = version or installed_version()
    args = parse_args(argv, version)
    config = config_from_args(args, version)
    setup_logging(config.verbose)
    logger.debug("relish-notifier %s starting: %s", config.version, config)

    cancel = cancel or threading.Event()
    try:
        credentials = (resolver or CredentialResolver()).resolve()
        orchestrator = PollingOrchestrator(
            client=(client_factory or default_client_factory)(config),
            credentials=credentials,
            config=config,
            cancel=cancel,
        )
        with cancel_on_signals(cancel):
            outcome = orchestrator.run()
    except RelishNotifierError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return outcome.exit_code


def run() -> None:
    raise SystemExit(main())


if __name__ == "__main__":
    run()
