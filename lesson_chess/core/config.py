"""Centralized application configuration.

All settings are read from environment variables prefixed with LESSON_CHESS_ (or a .env file).
Nothing is required: the defaults give a local SQLite database and INFO level logging.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LESSON_CHESS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Persistence
    database_url: str = "sqlite:///lesson_chess.db"
    echo_sql: bool = False

    # Logging
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()
