"""
Configuration and settings for the site API.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Environment-backed settings for the FastAPI service."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    api_prefix: str = Field(default="/api")
    service_name: str = Field(default="site-api")
    service_version: str = Field(default="1.0.0")
    log_level: str = Field(default="INFO")

    # Database (Postgres expected, any SQLAlchemy URL works)
    database_url: Optional[str] = Field(default=None)
    db_pool_size: int = Field(default=20)
    db_pool_timeout: float = Field(default=10.0)
    db_pool_recycle: int = Field(default=1800)
    create_tables: bool = Field(default=True)

    # Development toggles
    use_in_memory_backends: bool = Field(
        default=False, validation_alias="SITE_USE_IN_MEMORY_BACKENDS"
    )

    # CORS
    allowed_origins: str = Field(default="*")

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def allowed_origin_list(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
