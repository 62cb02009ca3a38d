from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Callable
from enum import StrEnum

from relish_notifier.config.run_config import RunConfig
from relish_notifier.domain.enums import OrderStatus, classify_status
from relish_notifier.services.tracker_client import Credentials, TrackerClient
from relish_notifier.utils.errors import (
    AuthError,
    CommandError,
    ElementNotFoundError,
    RelishNotifierError,
    SessionError,
)

logger = logging.getLogger(__name__)

ARRIVED_MESSAGE = "order has arrived"
NOT_ARRIVED_MESSAGE = "order has not arrived"


class NotifierState(StrEnum):
    INIT = "init"
    AUTHENTICATING = "authenticating"
    POLLING = "polling"
    ACTING = "acting"
    DONE = "done"
    FAILED = "failed"


class RunOutcome(StrEnum):
    ARRIVED = "arrived"
    NOT_ARRIVED = "not_arrived"
    CANCELLED = "cancelled"

    @property
    def exit_code(self) -> int:
        return 1 if self is RunOutcome.NOT_ARRIVED else 0


def run_command(command: str) -> None:
    """
    Runs the post-arrival command through /bin/sh.

    Raises CommandError if the shell cannot be started or the command exits non-zero.
    """
    logger.info("running command: %s", command)
    try:
        completed = subprocess.run(["/bin/sh", "-c", command], check=False)
    except OSError as e:
        raise CommandError(command, None, f"failed to start command {command!r}: {e}") from e

    if completed.returncode != 0:
        raise CommandError(
            command,
            completed.returncode,
            f"command {command!r} exited with status {completed.returncode}",
        )


class PollingOrchestrator:
    """
    What it does:
    - Drives one run: open the browser, log in, poll the status label until the
      order arrives, then print a notice and run the configured command.

    Why it matters:
    - Keeps the run lifecycle independent from Playwright so it can be tested
      with a fake client.

    Behavior:
    - open/login failures are fatal (SessionError / AuthError) and never retried.
    - A missing status label or failed read is logged; the tick counts as "check again".
    - UNKNOWN is logged as a warning; polling continues.
    - In single-shot mode, one non-arrived check returns NOT_ARRIVED.
    - `cancel` is checked at the top of every iteration and during the wait;
      a set event ends the run with CANCELLED without another read.
    - The client is always closed on the way out.
    """

    def __init__(
        self,
        *,
        client: TrackerClient,
        credentials: Credentials,
        config: RunConfig,
        cancel: threading.Event | None = None,
        command_runner: Callable[[str], None] = run_command,
        out: Callable[[str], None] = print,
    ) -> None:
        self.client = client
        self.credentials = credentials
        self.config = config
        self.cancel = cancel or threading.Event()
        self._run_command = command_runner
        self._out = out

        self.state = NotifierState.INIT
        self.history: list[NotifierState] = [NotifierState.INIT]
        self.checks = 0

    def _transition(self, new: NotifierState) -> None:
        logger.debug("state %s -> %s", self.state, new)
        self.state = new
        self.history.append(new)

    def run(self) -> RunOutcome:
        try:
            self._open()
            self._authenticate()
            outcome = self._poll()
            if outcome is RunOutcome.ARRIVED:
                self._act()
            self._transition(NotifierState.DONE)
            return outcome
        except Exception:
            self._transition(NotifierState.FAILED)
            raise
        finally:
            self.client.close()

    def _open(self) -> None:
        try:
            self.client.open()
        except SessionError:
            raise
        except Exception as e:
            raise SessionError(f"failed to open browser session: {e}") from e
        self._transition(NotifierState.AUTHENTICATING)

    def _authenticate(self) -> None:
        logger.info("logging in")
        try:
            self.client.login(self.credentials)
        except AuthError:
            raise
        except Exception as e:
            raise AuthError(f"failed to login: {e}") from e
        self._transition(NotifierState.POLLING)

    def check_once(self) -> OrderStatus | None:
        """
        Reads and classifies the status label once.

        Returns None when the tick is inconclusive (label missing or unreadable).
        """
        self.checks += 1
        try:
            text = self.client.read_status_text()
        except ElementNotFoundError as e:
            logger.warning("timeout waiting for order status: %s", e)
            return None
        except RelishNotifierError as e:
            logger.error("failed to check order status: %s", e)
            return None

        status = classify_status(text)
        if status is OrderStatus.UNKNOWN:
            logger.warning("unknown order status: %r", text)
        logger.info("notifier reports status: %s", status)
        return status

    def _poll(self) -> RunOutcome:
        while True:
            if self.cancel.is_set():
                logger.info("cancelled, stopping")
                return RunOutcome.CANCELLED

            status = self.check_once()
            if status is OrderStatus.ARRIVED:
                self._transition(NotifierState.ACTING)
                return RunOutcome.ARRIVED

            if self.config.once:
                self._out(NOT_ARRIVED_MESSAGE)
                return RunOutcome.NOT_ARRIVED

            logger.info("checking again in %s seconds", self.config.check_interval)
            if self.cancel.wait(self.config.check_interval):
                logger.info("cancelled while waiting, stopping")
                return RunOutcome.CANCELLED

            logger.debug("reloading page")
            try:
                self.client.reload()
            except RelishNotifierError as e:
                logger.error("failed to refresh page: %s", e)

    def _act(self) -> None:
        self._out(ARRIVED_MESSAGE)
        if not self.config.command:
            return
        try:
            self._run_command(self.config.command)
        except CommandError as e:
            logger.error("failed to run command: %s", e)
