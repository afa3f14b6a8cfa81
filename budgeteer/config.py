"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env
file as a fallback. Pydantic Settings automatically:
  1. Reads from environment variables (highest priority)
  2. Falls back to .env file values
  3. Uses defaults defined here (lowest priority)

Usage:
    from budgeteer.config import settings
    print(settings.STORAGE_MODE)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from budgeteer.storage_mode import StorageMode


class Settings(BaseSettings):
    """
    Central configuration for Budgeteer.

    Nothing is required: the default storage mode is the in-memory demo
    store, which needs no connection details. Cloud mode needs
    SUPABASE_URL and SUPABASE_ANON_KEY.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Budgeteer"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Storage ---
    # Which backend validation reads from at startup
    STORAGE_MODE: StorageMode = StorageMode.DEMO

    # Embedded database used in local mode
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/budgeteer.db"

    # Hosted database used in cloud mode
    SUPABASE_URL: str = ""
    SUPABASE_ANON_KEY: str = ""
    SUPABASE_TIMEOUT_SECONDS: float = 10.0

    # --- Validation ---
    # Default recursion bound for cascade previews and plans
    CASCADE_MAX_DEPTH: int = 5

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:8081"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
