from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration, read from ``COURTBOOK_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(env_prefix="COURTBOOK_", env_file=".env", extra="ignore")

    database_url: str = "sqlite:///./data/courtbook.db"

    # JWT configuration
    secret_key: str = "change-me-in-production"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 30

    log_level: str = "INFO"
    booking_list_limit: int = 100


@lru_cache
def get_settings() -> Settings:
    return Settings()
