from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path("config.toml")
ENV_PREFIX = "FORMAT_TOOLS_"
TEMPLATE_KEY_ENV_VARS = (f"{ENV_PREFIX}TEMPLATE_KEY", "TEMPLATE_KEY")


class Settings(BaseSettings):
    """Application runtime settings sourced from environment variables."""

    model_config = SettingsConfigDict(env_prefix=ENV_PREFIX, env_file=".env", extra="ignore")

    config_path: Path = DEFAULT_CONFIG_PATH
    enable_local_api: bool | None = None
    cache_root: Path | None = None
    install_dir: Path | None = None
    template_key: str | None = Field(
        default=None,
        validation_alias=AliasChoices(*TEMPLATE_KEY_ENV_VARS),
    )


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["Settings", "get_settings", "DEFAULT_CONFIG_PATH", "ENV_PREFIX", "TEMPLATE_KEY_ENV_VARS"]
