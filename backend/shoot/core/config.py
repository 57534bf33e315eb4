"""
Shoot - Configuration Module
============================
All configuration is loaded from environment variables.
The LLM credential is optional; its absence switches AI features to
their static fallbacks.
"""

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

ENV_PREFIX = "SHOOT_"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env."""

    # App
    app_name: str = "Shoot"
    app_env: str = "development"
    app_debug: bool = True
    app_port: int = 8000

    # Database
    postgres_host: str = "localhost"
    postgres_port: int = 5432
    postgres_db: str = "shoot_db"
    postgres_user: str = "shoot"
    postgres_password: str = "shoot"
    database_url_override: str = ""

    @property
    def database_url(self) -> str:
        if self.database_url_override:
            return self.database_url_override
        return (
            f"postgresql+asyncpg://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    @property
    def database_url_sync(self) -> str:
        if self.database_url_override:
            return self.database_url_override.replace("+asyncpg", "").replace("+aiosqlite", "")
        return (
            f"postgresql://{self.postgres_user}:{self.postgres_password}"
            f"@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"
        )

    # LLM provider (OpenAI-compatible chat completions)
    openai_api_key: str = ""
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4"
    llm_timeout_seconds: float = Field(default=120.0, gt=0)

    # Outbound HTTP
    proxy_timeout_seconds: float = Field(default=30.0, gt=0)
    spec_fetch_timeout: int = Field(default=20, ge=1)

    # Chat
    chat_history_limit: int = Field(default=50, ge=1, le=500)

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:5173,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def llm_configured(self) -> bool:
        return bool(self.openai_api_key.strip())

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        env_prefix = ENV_PREFIX


# Un-prefixed names still honoured for the usual provider variables.
_LEGACY_ALIASES = {
    "DATABASE_URL": "DATABASE_URL_OVERRIDE",
}


def _load_dotenv_pairs(dotenv_path: str = ".env") -> dict[str, str]:
    path = Path(dotenv_path)
    if not path.exists():
        return {}

    values: dict[str, str] = {}
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if key.startswith("export "):
            key = key[len("export "):].strip()
        if key:
            values[key] = value.strip().strip('"').strip("'")
    return values


def _bootstrap_prefixed_env() -> None:
    """Copy OPENAI_API_KEY-style variables into their SHOOT_ names when unset."""
    dotenv_pairs = _load_dotenv_pairs(".env")
    candidates = {name.upper(): name.upper() for name in Settings.model_fields}
    candidates.update(_LEGACY_ALIASES)

    for legacy_key, field_key in candidates.items():
        prefixed_key = f"{ENV_PREFIX}{field_key}"
        if os.getenv(prefixed_key):
            continue

        legacy_value = os.getenv(legacy_key)
        if legacy_value is None:
            legacy_value = dotenv_pairs.get(legacy_key)
        if legacy_value is not None:
            os.environ[prefixed_key] = legacy_value


_bootstrap_prefixed_env()


@lru_cache()
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()
