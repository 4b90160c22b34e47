from functools import lru_cache
from typing import Optional

from pydantic import AnyHttpUrl, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = Field(..., alias="DATABASE_URL")
    redis_url: str = Field("redis://localhost:6379/0", alias="REDIS_URL")
    public_base_url: AnyHttpUrl = Field("http://localhost:8000", alias="PUBLIC_BASE_URL")

    backoffice_password: str = Field(..., alias="BACKOFFICE_PASSWORD")
    backoffice_cookie_name: str = Field("backoffice-auth", alias="BACKOFFICE_COOKIE_NAME")
    backoffice_session_ttl_seconds: int = Field(60 * 60 * 24 * 7, alias="BACKOFFICE_SESSION_TTL_SECONDS")
    session_cookie_domain: Optional[str] = Field(None, alias="SESSION_COOKIE_DOMAIN")
    session_cookie_secure: bool = Field(True, alias="SESSION_COOKIE_SECURE")
    session_cookie_samesite: str = Field("lax", alias="SESSION_COOKIE_SAMESITE")

    scraper_timeout_seconds: float = Field(10.0, alias="SCRAPER_TIMEOUT_SECONDS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    debug: bool = Field(False, alias="DEBUG")
    env: str = Field("prod", alias="ENV")

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()
