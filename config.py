"""
Application settings.

Values come from ``SCOUT_``-prefixed environment variables, then an optional
``.env`` file in the working directory, then the defaults below.
"""

from typing import List, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SCOUT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    APP_NAME: str = "Scout"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Session / accounts
    AUTO_REGISTER_ON_LOGIN: bool = True  # unknown emails become new accounts on login
    PLACEHOLDER_USER_NAME: str = "New User"
    MIN_PASSWORD_LENGTH: int = 6

    # Search
    SEARCH_HISTORY_LIMIT: int = 5

    # Bootstrap
    SEED_MOCK_DATA: bool = True

    CORS_ALLOW_ORIGINS: List[str] = ["*"]

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def _upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v


settings = Settings()
