"""Fuel ledger server configuration."""

import os
from functools import lru_cache
from typing import Annotated, Any, Literal

from dotenv import load_dotenv
from pydantic import AnyUrl, BeforeValidator, Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_env_file() -> str:
    """
    Pick the .env file for the current ENVIRONMENT and load it.
    Production reads ../.env, anything else reads ../.env.dev.
    """
    env_file = {
        "production": "../.env",
        "development": "../.env.dev",
    }
    load_dotenv(env_file.get(os.getenv("ENVIRONMENT", "development")), override=True)
    return env_file.get(os.getenv("ENVIRONMENT", "development"), "../.env.dev")


def parse_cors(v: Any) -> list[str] | str:
    if isinstance(v, str) and not v.startswith("["):
        return [i.strip() for i in v.split(",")]
    elif isinstance(v, list | str):
        return v
    raise ValueError(v)


class Settings(BaseSettings):
    """Server config settings."""

    model_config = SettingsConfigDict(
        env_file=get_env_file(),
        env_file_encoding="utf-8",
        case_sensitive=True,
        env_ignore_empty=True,
        extra="ignore",
    )
    ENVIRONMENT: Literal["development", "production"] = "development"
    PROJECT_NAME: str = "Fleet Fuel Ledger API"

    # API settings
    DOMAIN: str = "0.0.0.0"
    DEBUG_MODE: bool = False
    FASTAPI_API_KEY_HEADER: str = os.getenv("FASTAPI_API_KEY_HEADER", "X-API-Key")
    FASTAPI_API_KEY: str = os.getenv("FASTAPI_API_KEY", "default_key")
    FASTAPI_CORS_ORIGINS: Annotated[list[AnyUrl] | str, BeforeValidator(parse_cors)] = (
        []
    )

    @computed_field  # type: ignore[prop-decorator]
    @property
    def all_cors_origins(self) -> list[str]:
        return [str(origin).rstrip("/") for origin in self.FASTAPI_CORS_ORIGINS]

    # Redis settings
    REDIS_HOST: str = os.getenv("REDIS_HOST", "localhost")
    REDIS_PORT: int = int(os.getenv("REDIS_PORT", "6379"))

    # Database settings
    POSTGRES_USER: str = os.getenv("POSTGRES_USER", "default_user")
    POSTGRES_PASSWORD: str = os.getenv("POSTGRES_PASSWORD", "default_password")
    POSTGRES_HOST: str = os.getenv("POSTGRES_HOST", "localhost")
    POSTGRES_PORT: int = int(os.getenv("POSTGRES_PORT", "5432"))
    POSTGRES_DB: str = os.getenv("POSTGRES_DB", "default_db")

    # Ledger settings
    LEDGER_MAX_RETRIES: int = Field(3, ge=1)
    SUMMARY_CACHE_TTL: int = Field(300, ge=0)

    TIMEZONE: str = os.getenv("TIMEZONE", "America/Sao_Paulo")


# Global settings instance with caching.
@lru_cache()
def get_settings() -> Settings:
    settings = Settings()

    return settings
