import pytest

from relish_notifier.services.credentials import (
    KEYRING_PASSWORD_ACCOUNT,
    KEYRING_SERVICE,
    KEYRING_USERNAME_ACCOUNT,
    CredentialResolver,
    default_fields,
)
from relish_notifier.utils.errors import CredentialError


def _resolver(settings_factory) -> CredentialResolver:
    return CredentialResolver(default_fields(settings_factory))


def test_keyring_values_win_over_environment(keyring_store, clean_env, settings_factory):
    keyring_store[(KEYRING_SERVICE, KEYRING_USERNAME_ACCOUNT)] = "kr-user"
    keyring_store[(KEYRING_SERVICE, KEYRING_PASSWORD_ACCOUNT)] = "kr-pass"
    clean_env.setenv("RELISH_USERNAME", "env-user")
    clean_env.setenv("RELISH_PASSWORD", "env-pass")

    creds = _resolver(settings_factory).resolve()

    assert creds.username == "kr-user"
    assert creds.password == "kr-pass"


def test_falls_back_to_environment_when_keyring_fails(keyring_store, clean_env, settings_factory):
    keyring_store["__error__"] = True
    clean_env.setenv("RELISH_USERNAME", "env-user")
    clean_env.setenv("RELISH_PASSWORD", "env-pass")

    creds = _resolver(settings_factory).resolve()

    assert (creds.username, creds.password) == ("env-user", "env-pass")


def test_fields_resolve_independently(keyring_store, clean_env, settings_factory):
    # username from keyring, password only in the environment
    keyring_store[(KEYRING_SERVICE, KEYRING_USERNAME_ACCOUNT)] = "kr-user"
    clean_env.setenv("RELISH_PASSWORD", "env-pass")

    creds = _resolver(settings_factory).resolve()

    assert (creds.username, creds.password) == ("kr-user", "env-pass")


def test_missing_password_names_the_variable(keyring_store, clean_env, settings_factory):
    keyring_store["__error__"] = True
    clean_env.setenv("RELISH_USERNAME", "env-user")

    with pytest.raises(CredentialError) as exc:
        _resolver(settings_factory).resolve()

    assert exc.value.missing == ("RELISH_PASSWORD",)
    assert "RELISH_PASSWORD" in str(exc.value)
    assert "no keyring backend available" in str(exc.value)


def test_missing_both_names_both_variables(keyring_store, clean_env, settings_factory):
    with pytest.raises(CredentialError) as exc:
        _resolver(settings_factory).resolve()

    assert exc.value.missing == ("RELISH_USERNAME", "RELISH_PASSWORD")
    assert "RELISH_USERNAME" in str(exc.value)
    assert "RELISH_PASSWORD" in str(exc.value)
    # keyring miss + env miss, per field
    assert len(exc.value.causes) == 4


def test_empty_environment_value_counts_as_missing(keyring_store, clean_env, settings_factory):
    clean_env.setenv("RELISH_USERNAME", "")
    clean_env.setenv("RELISH_PASSWORD", "env-pass")

    with pytest.raises(CredentialError) as exc:
        _resolver(settings_factory).resolve()

    assert exc.value.missing == ("RELISH_USERNAME",)


def test_keyring_is_not_retried(monkeypatch, clean_env, settings_factory):
    import relish_notifier.services.credentials as credentials_mod

    calls = []

    def _get_password(service, account):
        calls.append((service, account))
        return None

    monkeypatch.setattr(credentials_mod.keyring, "get_password", _get_password)
    clean_env.setenv("RELISH_USERNAME", "env-user")
    clean_env.setenv("RELISH_PASSWORD", "env-pass")

    _resolver(settings_factory).resolve()

    assert calls == [
        (KEYRING_SERVICE, KEYRING_USERNAME_ACCOUNT),
        (KEYRING_SERVICE, KEYRING_PASSWORD_ACCOUNT),
    ]


def test_credentials_repr_hides_password(keyring_store, clean_env, settings_factory):
    clean_env.setenv("RELISH_USERNAME", "env-user")
    clean_env.setenv("RELISH_PASSWORD", "s3cret")

    creds = _resolver(settings_factory).resolve()

    assert "s3cret" not in repr(creds)
