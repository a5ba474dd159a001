"""Application settings loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration.

    All settings can be overridden via environment variables prefixed with CUPPA_.
    For example, CUPPA_CANCEL_ON_REPLACE=1 sets cancel_on_replace=True.
    """

    model_config = SettingsConfigDict(env_prefix="CUPPA_")

    config_dir: Path = Path.home() / ".config" / "cuppa"
    tick_interval_seconds: float = 1.0
    notify_command: str = ""
    cancel_on_replace: bool = False
    log_level: str = "WARNING"


settings = Settings()
