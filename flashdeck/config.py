"""
Centralized configuration management for flashdeck.
"""
from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import STORAGE_KEY


def get_default_db_path() -> Path:
    """Returns the default path for the deck database file."""
    return Path.home() / ".flashdeck" / "flashdeck.db"


class Settings(BaseSettings):
    """
    Application settings, loaded from FLASHDECK_* environment variables or a .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="FLASHDECK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Overridden by FLASHDECK_DB_PATH.
    db_path: Path = get_default_db_path()

    # Overridden by FLASHDECK_STORAGE_KEY.
    storage_key: str = STORAGE_KEY


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()
