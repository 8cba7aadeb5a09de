"""
Config Maker
"""

# pyright: basic

__all__ = ("settings",)

from pydantic_settings import BaseSettings

from codeheal import __project__, __version__


class Settings(BaseSettings):
    PROJECT_NAME: str = __project__
    PROJECT_VERSION: str = __version__
    DEBUG: bool = False
    LOG_MESSAGE_MAX_LEN: int = 2000

    # AI fix suggestions (disabled when no key is configured)
    GOOGLE_API_KEY: str | None = None
    AI_MODEL: str = "gemini-3-flash-preview"
    AI_CONTEXT_LINES: int = 20

    # Timeouts & retries
    AI_API_TIMEOUT_SECONDS: int = 60
    AI_API_MAX_RETRIES: int = 3
    ORACLE_TIMEOUT_SECONDS: float = 30.0
    GENERATOR_TIMEOUT_SECONDS: float = 90.0

    # Healing loop
    MAX_HEALING_ITERATIONS: int = 5
    SIMILARITY_THRESHOLD: float = 0.5
    MAX_SCHEMA_SUGGESTIONS: int = 3
    REPEATED_PATTERN_THRESHOLD: int = 3
    BINDING_TEMPLATE: str = "import {name}"

    BATCH_WORKERS: int = 4
    REPORT_DIR: str = "./reports"

    class Config:
        env_file = ".env"
        env_prefix = "CHL_"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = True


settings = Settings()
