from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from relish_notifier.config.paths import env_file_path

DEFAULT_LOGIN_URL = "https://relish.ezcater.com/schedule"
DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

USERNAME_ENV = "RELISH_USERNAME"
PASSWORD_ENV = "RELISH_PASSWORD"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(env_file_path()),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    relish_username: str | None = Field(default=None, alias=USERNAME_ENV)
    relish_password: str | None = Field(default=None, alias=PASSWORD_ENV)

    login_url: str = Field(default=DEFAULT_LOGIN_URL, alias="RELISH_LOGIN_URL")
    user_agent: str = Field(default=DEFAULT_USER_AGENT, alias="RELISH_USER_AGENT")
    artifacts_dir: str = Field(default="artifacts", alias="RELISH_ARTIFACTS_DIR")


def load_settings() -> Settings:
    """
    Reads settings fresh from the environment and .env file.

    Credential lookups call this at resolve time rather than using a module-level
    instance, so tests can monkeypatch the environment.
    """
    return Settings()
