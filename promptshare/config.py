"""Application configuration loaded from config.yaml and environment variables."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_YAML_PATH = PROJECT_ROOT / "config.yaml"

DEFAULT_CATEGORIES = [
    "Code",
    "Docs",
    "Project",
    "Communication",
    "Learning",
    "AI & Tools",
    "Design",
    "Career",
    "Fun",
    "Misc",
]


# --- YAML sub-models ---


class LikesConfig(BaseModel):
    """Like toggle behaviour."""

    refetch_count_on_success: bool = True


class PromptsConfig(BaseModel):
    """Prompt listing defaults."""

    default_sort: Literal["recent", "popular"] = "recent"
    fallback_category: str = "Misc"


class StoreConfig(BaseModel):
    """Supabase access used by the API handlers."""

    request_timeout: float = 10.0


class ClientConfig(BaseModel):
    """Settings for the API client used by the presentation layer."""

    api_base_url: str = "http://localhost:8000"
    request_timeout: float = 10.0


# --- Main settings ---


class Settings(BaseSettings):
    """Application settings combining .env secrets and config.yaml values."""

    # App config
    env: str = Field(default="dev")
    log_format: str = Field(default="text")
    cors_origins: str = Field(default="http://localhost:5173")

    # Secrets from .env
    supabase_url: str = Field(default="")
    supabase_publishable_key: str = Field(default="")
    supabase_anon_key: str = Field(default="")
    supabase_secret_key: str = Field(default="")
    supabase_service_role_key: str = Field(default="")
    supabase_jwt_secret: str = Field(default="")

    # YAML-sourced config (merged in __init__)
    categories: list[str] = Field(default_factory=lambda: list(DEFAULT_CATEGORIES))
    likes: LikesConfig = Field(default_factory=LikesConfig)
    prompts: PromptsConfig = Field(default_factory=PromptsConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    model_config = {
        "env_file": str(PROJECT_ROOT / ".env"),
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    def __init__(self, **kwargs: Any) -> None:
        yaml_data = _load_yaml_config()
        merged = {**yaml_data, **kwargs}
        super().__init__(**merged)

    @property
    def effective_supabase_publishable_key(self) -> str:
        """Publishable key, falling back to the legacy anon key."""
        return self.supabase_publishable_key or self.supabase_anon_key

    @property
    def effective_supabase_secret_key(self) -> str:
        """Secret key, falling back to the legacy service role key."""
        return self.supabase_secret_key or self.supabase_service_role_key

    @property
    def cors_origin_list(self) -> list[str]:
        """Split the comma-separated CORS origins into a list."""
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


def _load_yaml_config() -> dict[str, Any]:
    """Read and parse config.yaml, returning an empty dict on failure."""
    if not CONFIG_YAML_PATH.exists():
        return {}
    with CONFIG_YAML_PATH.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    return data if isinstance(data, dict) else {}


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings singleton."""
    return Settings()
