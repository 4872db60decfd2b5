# backend/sipe/core/config.py

from functools import lru_cache
from typing import List

from pydantic import AliasChoices, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEV_SECRET = "dev-secret-change-me"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    database_url: str = "sqlite:///./sipe.db"
    auto_create_tables: bool = True
    seed_default_users: bool = True

    # same lookup order the old routes/deps used: JWT_SECRET_KEY, JWT_SECRET, SECRET_KEY
    jwt_secret_key: str = Field(
        default=DEV_SECRET,
        validation_alias=AliasChoices("JWT_SECRET_KEY", "JWT_SECRET", "SECRET_KEY"),
    )
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    # comma-separated allowlist, e.g. "https://sipe.example.com,http://localhost:3000"
    cors_origins: str = ""
    frontend_url: str = "http://localhost:3000"

    low_stock_threshold: int = 10

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() in ("prod", "production")

    @property
    def allow_origins(self) -> List[str]:
        if self.cors_origins.strip():
            return [o.strip() for o in self.cors_origins.split(",") if o.strip()]
        return sorted({self.frontend_url.strip(), "http://localhost:3000"})

    @model_validator(mode="after")
    def reject_dev_secret_in_prod(self) -> "Settings":
        if self.is_production and self.jwt_secret_key == DEV_SECRET:
            raise ValueError("JWT_SECRET_KEY must be set when APP_ENV=prod")
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()


def reset_settings_cache() -> None:
    """Drop the cached Settings so the next call re-reads the environment."""
    get_settings.cache_clear()
