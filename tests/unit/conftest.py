from __future__ import annotations

import logging
import threading

import pytest
from keyring.errors import NoKeyringError

import relish_notifier.services.credentials as credentials_mod
from relish_notifier.config.run_config import RunConfig
from relish_notifier.config.settings import Settings
from relish_notifier.services.tracker_client import Credentials


@pytest.fixture()
def keyring_store(monkeypatch):
    """
    In-memory replacement for keyring.get_password.

    Behavior:
    - Returns stored values by (service, account).
    - If the dict is given a "__error__" key, every lookup raises NoKeyringError.
    """
    store: dict = {}

    def _get_password(service: str, account: str):
        if "__error__" in store:
            raise NoKeyringError("no keyring backend available")
        return store.get((service, account))

    monkeypatch.setattr(credentials_mod.keyring, "get_password", _get_password, raising=True)
    return store


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ("RELISH_USERNAME", "RELISH_PASSWORD", "RELISH_LOGIN_URL"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture()
def settings_factory():
    # Ignore any developer .env file next to the repo
    return lambda: Settings(_env_file=None)


@pytest.fixture()
def creds() -> Credentials:
    return Credentials(username="diner@example.com", password="hunter2")


@pytest.fixture()
def cancel() -> threading.Event:
    return threading.Event()


@pytest.fixture()
def looping_config() -> RunConfig:
    return RunConfig(check_interval=1, once=False, verbose=2)


@pytest.fixture(autouse=True)
def _capture_package_logs(caplog):
    caplog.set_level(logging.DEBUG, logger="relish_notifier")
