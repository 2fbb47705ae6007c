"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    app_title: str = "Component Editor"
    log_level: str = "info"

    # Edits are written to the store once a session has been quiet this long
    autosave_debounce_seconds: float = 2.0
    autosave_poll_seconds: float = 0.5

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_prefix="EDITOR_", env_file=".env", env_file_encoding="utf-8",
    )


settings = Settings()
