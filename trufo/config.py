"""Trufo configuration — loaded from environment / .env file."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="TRUFO_", extra="ignore")

    env: str = "development"
    log_level: str = "INFO"
    database_url: str = "sqlite+aiosqlite:///./trufo.db"

    # Content encryption secret (padded / truncated to 32 bytes)
    encryption_key: str = "change-me"

    # Administrative endpoints are disabled while this is unset
    admin_token: str | None = None

    token_length: int = 24
    totp_issuer: str = "Trufo"

    cors_origins: list[str] = ["*"]

    @property
    def sql_echo(self) -> bool:
        return self.env == "development" and self.log_level.upper() == "DEBUG"
