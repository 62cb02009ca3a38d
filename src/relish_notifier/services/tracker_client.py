from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = field(repr=False)


class TrackerClient(Protocol):
    """
    What it does:
    - Defines the API the polling loop expects from the order tracking page.

    Why it matters:
    - The orchestrator stays testable while the browser implementation can change
      (Fake for tests, Playwright for real use).

    Behavior:
    - open() starts the browser session (SessionError on failure).
    - login() authenticates (AuthError on failure).
    - read_status_text() returns the stripped status label text
      (ElementNotFoundError when the label is missing).
    - reload() refreshes the page.
    - close() releases the session; safe to call multiple times.
    """

    def open(self) -> None: ...

    def login(self, creds: Credentials) -> None: ...

    def read_status_text(self) -> str: ...

    def reload(self) -> None: ...

    def close(self) -> None: ...
