"""
relish_playwright.py

What this module does
- Implements a Playwright-based client for the Relish schedule page that satisfies
  the `TrackerClient` interface.

Why it matters
- Keeps browser automation isolated from the polling loop (PollingOrchestrator).
- All selectors for the site live in one place; the site markup is the part most
  likely to change.

Behavior summary
- `open()`: launches Chromium with stealth options and a desktop user agent.
- `login(creds)`: two-step form (email, then password), waiting for navigation after each submit.
- `read_status_text()`: waits for the schedule card label and returns its stripped text.
- `reload()`: reloads the schedule page.
- On failures during login: captures screenshots to ./artifacts for debugging.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from playwright.sync_api import Error as PWError
from playwright.sync_api import TimeoutError as PWTimeoutError
from playwright.sync_api import sync_playwright

from relish_notifier.config.settings import DEFAULT_LOGIN_URL, DEFAULT_USER_AGENT
from relish_notifier.services.tracker_client import Credentials, TrackerClient
from relish_notifier.utils.errors import AuthError, ElementNotFoundError, SessionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelishSelectors:
    """
    Centralized selectors for the Relish site.

    Behavior:
    - Used by Playwright locators throughout the client.
    """

    # Auth flow
    email: str = "#identity_email"
    email_submit: str = "[name='commit']"
    password: str = "#password"
    password_submit: str = "[name='action']"

    # Schedule page
    status_label: str = ".schedule-card-label"


class PlaywrightTrackerClient(TrackerClient):
    """
    Playwright implementation of TrackerClient.

    Behavior:
    - Uses Playwright-managed Chromium.
    - Every page action is bounded by `page_timeout_ms`; the orchestrator adds no
      timeouts of its own.
    - Raises SessionError / AuthError / ElementNotFoundError, never raw Playwright errors.
    """

    def __init__(
        self,
        *,
        login_url: str = DEFAULT_LOGIN_URL,
        headless: bool = True,
        extensions: bool = True,
        user_agent: str = DEFAULT_USER_AGENT,
        page_timeout_ms: float = 10_000,
        artifacts_dir: str = "artifacts",
    ) -> None:
        self.login_url = login_url
        self.headless = headless
        self.extensions = extensions
        self.user_agent = user_agent

        self.sel = RelishSelectors()
        self._page_timeout_ms = page_timeout_ms
        self._artifacts_dir = Path(artifacts_dir)

        self._pw = None
        self._browser = None
        self._context = None
        self._page = None

    # -------------------- Lifecycle --------------------

    def _launch_options(self) -> dict:
        # Playwright passes --enable-automation and --disable-extensions by default.
        ignore_default_args = ["--enable-automation"]
        if self.extensions:
            ignore_default_args.append("--disable-extensions")

        return {
            "headless": self.headless,
            "args": ["--disable-blink-features=AutomationControlled"],
            "ignore_default_args": ignore_default_args,
        }

    def open(self) -> None:
        """
        What it does:
        - Starts Playwright, launches Chromium and creates a page.

        Behavior:
        - No-op if a page is already open.
        - If Chromium isn't installed, Playwright raises; we surface it as SessionError
          with the install hint.
        """
        if self._page is not None:
            return

        logger.debug("initializing browser (headless=%s, extensions=%s)", self.headless, self.extensions)
        try:
            self._pw = sync_playwright().start()
            self._browser = self._pw.chromium.launch(**self._launch_options())
            self._context = self._browser.new_context(user_agent=self.user_agent)
            self._page = self._context.new_page()
        except PWError as e:
            self.close()
            raise SessionError(
                "Failed to launch Playwright Chromium.\n"
                "If this is the first time on this machine, run:\n\n"
                "  playwright install chromium\n"
            ) from e

        self._page.set_default_timeout(self._page_timeout_ms)
        self._page.set_default_navigation_timeout(self._page_timeout_ms)

    def close(self) -> None:
        """
        What it does:
        - Closes context/browser and stops Playwright.

        Behavior:
        - Safe to call multiple times.
        """
        try:
            if self._context:
                self._context.close()
        finally:
            self._context = None

        try:
            if self._browser:
                self._browser.close()
        finally:
            self._browser = None

        try:
            if self._pw:
                self._pw.stop()
        finally:
            self._pw = None
            self._page = None

    # -------------------- TrackerClient interface --------------------

    def login(self, creds: Credentials) -> None:
        """
        What it does:
        - Navigates to the login URL and submits the two-step login form.

        Behavior:
        - Waits for navigation after each submit.
        - On failure, saves a screenshot and raises AuthError. Not retried.
        """
        page = self._require_page()
        logger.info("logging in at %s", self.login_url)

        try:
            page.goto(self.login_url, wait_until="domcontentloaded")
        except PWError as e:
            self._debug_dump("login_navigate_error")
            raise AuthError(f"failed to navigate to login page: {e}") from e

        try:
            self._wait_and_submit(page, self.sel.email, self.sel.email_submit, creds.username)
        except PWError as e:
            self._debug_dump("login_email_error")
            raise AuthError(f"failed to submit email: {e}") from e

        try:
            self._wait_and_submit(page, self.sel.password, self.sel.password_submit, creds.password)
        except PWError as e:
            self._debug_dump("login_password_error")
            raise AuthError(f"failed to submit password: {e}") from e

    def read_status_text(self) -> str:
        page = self._require_page()
        logger.debug("checking order status")

        label = page.locator(self.sel.status_label).first
        try:
            label.wait_for(state="attached")
            text = label.inner_text()
        except PWTimeoutError as e:
            raise ElementNotFoundError(self.sel.status_label) from e
        except PWError as e:
            raise ElementNotFoundError(
                self.sel.status_label, f"failed to get element text: {e}"
            ) from e

        return text.strip()

    def reload(self) -> None:
        page = self._require_page()
        logger.debug("reloading page")
        try:
            page.reload(wait_until="domcontentloaded")
        except PWError as e:
            raise SessionError(f"failed to reload page: {e}") from e

    # -------------------- Helpers --------------------

    def _wait_and_submit(self, page, field_selector: str, button_selector: str, data: str) -> None:
        """
        Fills a form field, clicks its submit button and waits for the next page.
        """
        logger.debug("waiting for element before clicking: field=%s button=%s", field_selector, button_selector)

        field = page.locator(field_selector)
        field.wait_for(state="visible")
        field.fill(data)

        with page.expect_navigation(wait_until="domcontentloaded"):
            page.locator(button_selector).first.click()

    def _require_page(self):
        if self._page is None:
            raise SessionError("Playwright page not initialized. Did open() run?")
        return self._page

    def _debug_dump(self, tag: str) -> None:
        """
        Writes ./artifacts/<tag>.png (best effort, failures are logged at debug).
        """
        page = self._page
        if not page:
            return
        out = self._artifacts_dir / f"{tag}.png"
        try:
            self._artifacts_dir.mkdir(parents=True, exist_ok=True)
            page.screenshot(path=str(out), full_page=True)
        except (OSError, PWError) as e:
            logger.debug("screenshot %s failed: %s", out, e)
        else:
            logger.info("saved screenshot %s", out)
