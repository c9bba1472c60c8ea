"""Configuration loader for sitebridge using Pydantic settings.

Config precedence (highest wins):
  1. CLI flags (where applicable)
  2. Environment variables (SITEBRIDGE_* with __ for nesting)
  3. settings.local.toml
  4. settings.<env>.toml
  5. settings.default.toml
"""

from __future__ import annotations

import os
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from sitebridge import __version__

# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------

_THIS_DIR = Path(__file__).resolve().parent
PROJECT_ROOT = Path(os.getenv("SITEBRIDGE_PROJECT_ROOT", _THIS_DIR.parents[2]))
CONFIG_DIR = PROJECT_ROOT / "config"

ENV_VAR_NAME = "SITEBRIDGE_ENV"
DEFAULT_ENV = "local"


def _resolve_env() -> str:
    return (os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()


def _load_toml(path: Path) -> dict[str, Any]:
    if path.is_file():
        with open(path, "rb") as f:
            return tomllib.load(f)
    return {}


# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class HTTPSettings(BaseSettings):
    """Outbound HTTP client settings shared by every session."""

    model_config = SettingsConfigDict(env_prefix="SITEBRIDGE_HTTP__")

    timeout_seconds: float = 30.0
    follow_redirects: bool = True
    max_redirects: int = 20
    verify_tls: bool = True
    user_agent: str = f"sitebridge/{__version__}"


class SnapshotSettings(BaseSettings):
    """Page snapshot extraction limits."""

    model_config = SettingsConfigDict(env_prefix="SITEBRIDGE_SNAPSHOT__")

    max_links: int = Field(200, ge=0)


class APISettings(BaseSettings):
    """API server configuration."""

    model_config = SettingsConfigDict(env_prefix="SITEBRIDGE_API__")

    host: str = "0.0.0.0"
    port: int = 8200
    cors_origins: list[str] = ["http://localhost:3000"]


class LoggingSettings(BaseSettings):
    """Log level and output format."""

    model_config = SettingsConfigDict(env_prefix="SITEBRIDGE_LOGGING__")

    level: str = "INFO"
    json_format: bool = False


# ---------------------------------------------------------------------------
# Root settings
# ---------------------------------------------------------------------------


class Settings(BaseSettings):
    """Root sitebridge settings with nested sections."""

    model_config = SettingsConfigDict(
        env_prefix="SITEBRIDGE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    env: str = Field(default_factory=_resolve_env)
    project_root: Path = Field(default=PROJECT_ROOT)
    debug: bool = False

    http: HTTPSettings = Field(default_factory=HTTPSettings)
    snapshot: SnapshotSettings = Field(default_factory=SnapshotSettings)
    api: APISettings = Field(default_factory=APISettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @model_validator(mode="before")
    @classmethod
    def _merge_toml_files(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Layer TOML config files before env var overrides."""
        defaults = _load_toml(CONFIG_DIR / "settings.default.toml")
        env_name = (values.get("env") or os.getenv(ENV_VAR_NAME) or DEFAULT_ENV).strip()
        env_overrides = _load_toml(CONFIG_DIR / f"settings.{env_name}.toml")
        local_overrides = _load_toml(CONFIG_DIR / "settings.local.toml")

        # Merge: defaults < env-specific < local < explicit values
        merged: dict[str, Any] = {}
        for layer in (defaults, env_overrides, local_overrides, values):
            for key, val in layer.items():
                if isinstance(val, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **val}
                else:
                    merged[key] = val
        return merged


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton settings instance (cached)."""
    return Settings()
