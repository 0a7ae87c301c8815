"""Configuration for sclscore.

Settings are resolved in order of precedence:
    1. Keyword overrides (CLI options)
    2. Environment variables
    3. ~/.config/sclscore/config.yaml (or $SCLSCORE_HOME/config.yaml)
    4. Built-in defaults
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from sclscore.scoring.classifier import OverallRule

# Field name -> environment variables, first match wins. Other fields read
# SCLSCORE_<FIELD>.
ENV_VARS: dict[str, tuple[str, ...]] = {
    "redis_url": ("SCLSCORE_REDIS_URL", "REDIS_URL"),
    "host": ("SCLSCORE_HOST",),
    "port": ("SCLSCORE_PORT", "PORT"),
    "token_ttl_seconds": ("SCLSCORE_TOKEN_TTL",),
    "overall_rule": ("SCLSCORE_OVERALL_RULE",),
    "registry_path": ("SCLSCORE_REGISTRY",),
    "log_level": ("SCLSCORE_LOG_LEVEL",),
}


def _env(field_name: str) -> AliasChoices:
    return AliasChoices(*ENV_VARS[field_name])


class Settings(BaseSettings):
    """Runtime settings for the service and CLI."""

    model_config = SettingsConfigDict(
        env_prefix="SCLSCORE_",
        env_ignore_empty=True,
        populate_by_name=True,
        extra="ignore",
    )

    redis_url: str | None = Field(default=None, validation_alias=_env("redis_url"))
    host: str = Field(default="0.0.0.0", validation_alias=_env("host"))
    port: int = Field(default=3000, validation_alias=_env("port"))
    token_ttl_seconds: int = Field(default=3600, gt=0, validation_alias=_env("token_ttl_seconds"))
    overall_rule: OverallRule = Field(default="mean", validation_alias=_env("overall_rule"))
    inventory_id: str = "scl90"
    inventory_version: str = "1.0.0"
    registry_path: Path | None = Field(default=None, validation_alias=_env("registry_path"))
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    log_level: str = Field(default="INFO", validation_alias=_env("log_level"))
    log_json: bool = True


def get_sclscore_home() -> Path:
    """Get the sclscore config directory."""
    env_home = os.environ.get("SCLSCORE_HOME")
    if env_home:
        return Path(env_home)
    return Path.home() / ".config" / "sclscore"


def get_config_path() -> Path:
    return get_sclscore_home() / "config.yaml"


def load_global_config(path: Path | None = None) -> dict[str, Any]:
    """Load the YAML config file, or an empty dict if there isn't one."""
    config_path = path or get_config_path()
    if not config_path.exists():
        return {}
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return data


def load_settings(config_path: Path | None = None, **overrides: Any) -> Settings:
    """Resolve settings from defaults, the config file, and the environment.

    Keyword overrides (e.g. from CLI options) win over everything else;
    None values are ignored.
    """
    from_env = Settings()
    data = load_global_config(config_path)
    data.update(from_env.model_dump(include=from_env.model_fields_set))
    data.update({k: v for k, v in overrides.items() if v is not None})
    # model_validate does not consult the settings sources
    return Settings.model_validate(data)
