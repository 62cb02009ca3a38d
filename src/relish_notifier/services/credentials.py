from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Protocol

import keyring
from keyring.errors import KeyringError

from relish_notifier.config.settings import PASSWORD_ENV, USERNAME_ENV, Settings, load_settings
from relish_notifier.services.tracker_client import Credentials
from relish_notifier.utils.errors import CredentialError

logger = logging.getLogger(__name__)

KEYRING_SERVICE = "relish-notifier"
KEYRING_USERNAME_ACCOUNT = "EMAIL"
KEYRING_PASSWORD_ACCOUNT = "PASSWORD"


class SourceLookupError(Exception):
    """One credential source could not supply a value."""


class CredentialSource(Protocol):
    description: str

    def lookup(self) -> str: ...


@dataclass(frozen=True)
class KeyringSource:
    service: str
    account: str

    @property
    def description(self) -> str:
        return f"keyring {self.service}/{self.account}"

    def lookup(self) -> str:
        try:
            value = keyring.get_password(self.service, self.account)
        except KeyringError as e:
            raise SourceLookupError(f"{self.description}: {e}") from e
        if not value:
            raise SourceLookupError(f"{self.description}: no stored value")
        return value


class EnvironmentSource:
    """
    Reads one credential from the environment (or .env) through Settings.

    `field` is the Settings attribute, `env_var` the variable name reported to
    the operator.
    """

    def __init__(
        self,
        *,
        field: str,
        env_var: str,
        settings_factory: Callable[[], Settings] = load_settings,
    ) -> None:
        self.field = field
        self.env_var = env_var
        self._settings_factory = settings_factory

    @property
    def description(self) -> str:
        return f"environment {self.env_var}"

    def lookup(self) -> str:
        value = getattr(self._settings_factory(), self.field, None)
        if not value:
            raise SourceLookupError(f"{self.env_var} environment variable is not set")
        return value


@dataclass(frozen=True)
class CredentialField:
    name: str
    env_var: str
    sources: Sequence[CredentialSource]


class CredentialResolver:
    """
    What it does:
    - Resolves username and password from an ordered list of sources per field.

    Why it matters:
    - The keyring keeps secrets off disk; the environment is the fallback for
      hosts without a usable keyring backend.

    Behavior:
    - Each field tries its sources in order; first non-empty value wins.
    - A failing source is never retried.
    - If any field is unresolved, raises CredentialError naming the missing
      environment variable(s) and the aggregated source errors.
    """

    def __init__(self, fields: Sequence[CredentialField] | None = None) -> None:
        self.fields = list(fields) if fields is not None else default_fields()

    def resolve(self) -> Credentials:
        values: dict[str, str] = {}
        missing: list[str] = []
        causes: list[Exception] = []

        for f in self.fields:
            errors: list[Exception] = []
            for source in f.sources:
                try:
                    values[f.name] = source.lookup()
                except SourceLookupError as e:
                    logger.debug("credential source failed: %s", e)
                    errors.append(e)
                    continue
                logger.debug("resolved %s from %s", f.name, source.description)
                break
            else:
                missing.append(f.env_var)
                causes.extend(errors)

        if missing:
            detail = "; ".join(str(e) for e in causes)
            raise CredentialError(
                f"missing credentials: {', '.join(missing)} not available ({detail}). "
                f"Store them in the keyring (service {KEYRING_SERVICE!r}, accounts "
                f"{KEYRING_USERNAME_ACCOUNT}/{KEYRING_PASSWORD_ACCOUNT}) or set "
                f"{USERNAME_ENV} and {PASSWORD_ENV}.",
                missing=tuple(missing),
                causes=tuple(causes),
            )

        return Credentials(username=values["username"], password=values["password"])


def default_fields(
    settings_factory: Callable[[], Settings] = load_settings,
) -> list[CredentialField]:
    return [
        CredentialField(
            name="username",
            env_var=USERNAME_ENV,
            sources=(
                KeyringSource(KEYRING_SERVICE, KEYRING_USERNAME_ACCOUNT),
                EnvironmentSource(
                    field="relish_username",
                    env_var=USERNAME_ENV,
                    settings_factory=settings_factory,
                ),
            ),
        ),
        CredentialField(
            name="password",
            env_var=PASSWORD_ENV,
            sources=(
                KeyringSource(KEYRING_SERVICE, KEYRING_PASSWORD_ACCOUNT),
                EnvironmentSource(
                    field="relish_password",
                    env_var=PASSWORD_ENV,
                    settings_factory=settings_factory,
                ),
            ),
        ),
    ]
