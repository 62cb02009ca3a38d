from __future__ import annotations


class RelishNotifierError(Exception):
    """Base class for failures that end a run with a non-zero exit."""


class CredentialError(RelishNotifierError):
    """Raised when neither the keyring nor the environment yields credentials."""

    def __init__(
        self,
        message: str,
        *,
        missing: tuple[str, ...] = (),
        causes: tuple[Exception, ...] = (),
    ) -> None:
        super().__init__(message)
        self.missing = missing
        self.causes = causes


class SessionError(RelishNotifierError):
    """Raised when the browser cannot be launched or a page cannot be opened."""


class AuthError(RelishNotifierError):
    """Raised when the login form interaction fails."""


class ElementNotFoundError(RelishNotifierError):
    """Raised when an expected page element does not show up within the page timeout."""

    def __init__(self, selector: str, message: str | None = None) -> None:
        super().__init__(message or f"element not found: {selector}")
        self.selector = selector


class CommandError(RelishNotifierError):
    """Raised when the post-arrival command cannot be run or exits non-zero."""

    def __init__(self, command: str, returncode: int | None, message: str) -> None:
        super().__init__(message)
        self.command = command
        self.returncode = returncode
