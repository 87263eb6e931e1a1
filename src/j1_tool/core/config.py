"""Configuration management for j1-tool.

Handles the TOML config file, environment variables, named profiles,
and configuration precedence resolution.

Precedence order (highest to lowest):
1. CLI flags (--account-id, --token, --api-base-url, --timeout)
2. Environment variables (JUPITERONE_ACCOUNT_ID, JUPITERONE_API_TOKEN,
   JUPITERONE_API_BASE_URL)
3. Named profile (--profile or J1_PROFILE env var or default_profile)
4. Config file defaults
5. Built-in defaults
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, SecretStr, field_validator

from j1_tool.core.exceptions import ConfigError
from j1_tool.core.normalizer import MAX_CAP

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "j1-tool" / "config.toml"
DEFAULT_API_BASE_URL = "https://api.us.jupiterone.io"
DEFAULT_POLL_INTERVAL = 0.1
DEFAULT_QUERY_TIMEOUT = 300.0
DEFAULT_HTTP_TIMEOUT = 30.0

PROFILE_ENV_VAR = "J1_PROFILE"

_J1_ENV_VARS: dict[str, str] = {
    "JUPITERONE_ACCOUNT_ID": "account_id",
    "JUPITERONE_API_TOKEN": "access_token",  # pragma: allowlist secret
    "JUPITERONE_API_BASE_URL": "api_base_url",
}

_PROFILE_DEFAULTS: dict[str, Any] = {
    "account_id": None,
    "access_token": None,
    "api_base_url": DEFAULT_API_BASE_URL,
}

_SETTING_DEFAULTS: dict[str, Any] = {
    "poll_interval": DEFAULT_POLL_INTERVAL,
    "query_timeout": DEFAULT_QUERY_TIMEOUT,
    "http_timeout": DEFAULT_HTTP_TIMEOUT,
    "max_cap": MAX_CAP,
    "default_format": "table",
}


def _validate_base_url(v: str) -> str:
    if not v.startswith(("http://", "https://")):
        msg = f"Invalid API base URL: '{v}'. Must start with http:// or https://"
        raise ValueError(msg)
    return v.rstrip("/")


class J1Profile(BaseModel):
    account_id: str | None = None
    access_token: SecretStr | None = None
    api_base_url: str = DEFAULT_API_BASE_URL

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        return _validate_base_url(v)


class AppConfig(BaseModel):
    poll_interval: float = DEFAULT_POLL_INTERVAL
    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    max_cap: int = MAX_CAP
    default_format: str = "table"
    default_profile: str | None = None
    profiles: dict[str, J1Profile] = {}

    @field_validator("poll_interval", "query_timeout", "http_timeout")
    @classmethod
    def validate_positive(cls, v: float) -> float:
        if v <= 0:
            msg = f"Invalid duration: {v}. Must be greater than 0"
            raise ValueError(msg)
        return v

    @field_validator("max_cap")
    @classmethod
    def validate_max_cap(cls, v: int) -> int:
        if v < 1:
            msg = f"Invalid max_cap: {v}. Must be at least 1"
            raise ValueError(msg)
        return v


class ResolvedConfig(BaseModel):
    account_id: str | None = None
    access_token: SecretStr | None = None
    api_base_url: str = DEFAULT_API_BASE_URL
    poll_interval: float = DEFAULT_POLL_INTERVAL
    query_timeout: float = DEFAULT_QUERY_TIMEOUT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    max_cap: int = MAX_CAP
    default_format: str = "table"
    active_profile: str | None = None
    sources: dict[str, str] = {}

    @field_validator("api_base_url")
    @classmethod
    def validate_api_base_url(cls, v: str) -> str:
        return _validate_base_url(v)

    @property
    def graphql_url(self) -> str:
        return f"{self.api_base_url}/graphql"

    @property
    def token(self) -> str | None:
        if self.access_token is None:
            return None
        return self.access_token.get_secret_value() or None


def load_config(config_path: Path | None = None) -> AppConfig:
    """Load configuration from TOML file.

    Returns default AppConfig if file doesn't exist.
    Raises ConfigError on malformed TOML or invalid config.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    if not config_path.exists():
        return AppConfig()

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        msg = f"Malformed TOML in {config_path}: {e}"
        raise ConfigError(msg) from e

    try:
        return AppConfig.model_validate(data)
    except Exception as e:
        msg = f"Invalid configuration in {config_path}: {e}"
        raise ConfigError(msg) from e


def resolve_config(
    config: AppConfig,
    profile_name: str | None = None,
    **cli_overrides: Any,
) -> ResolvedConfig:
    """Resolve configuration using precedence chain.

    CLI > env > profile > config defaults > built-in defaults.
    """
    sources: dict[str, str] = {}
    resolved: dict[str, Any] = {}

    # Layer 1: Built-in defaults
    resolved.update(_PROFILE_DEFAULTS)
    resolved.update(_SETTING_DEFAULTS)
    for key in resolved:
        sources[key] = "default"

    # Layer 2: Config file global settings
    for key in config.model_fields_set & _SETTING_DEFAULTS.keys():
        resolved[key] = getattr(config, key)
        sources[key] = "config"

    # Layer 3: Named profile
    effective_profile = profile_name
    if not effective_profile:
        effective_profile = os.environ.get(PROFILE_ENV_VAR)
    if not effective_profile:
        effective_profile = config.default_profile

    if effective_profile:
        if effective_profile not in config.profiles:
            available = (
                ", ".join(sorted(config.profiles.keys())) if config.profiles else "none"
            )
            msg = (
                f"Unknown profile: '{effective_profile}'. "
                f"Available profiles: {available}"
            )
            raise ConfigError(msg)
        profile = config.profiles[effective_profile]
        for key in profile.model_fields_set:
            resolved[key] = getattr(profile, key)
            sources[key] = f"profile: {effective_profile}"

    # Layer 4: Environment variables
    for env_var, field_name in _J1_ENV_VARS.items():
        value = os.environ.get(env_var)
        if value:
            resolved[field_name] = value
            sources[field_name] = f"env: {env_var}"

    # Layer 5: CLI flags (highest priority)
    cli_to_field = {
        "account_id": "account_id",
        "token": "access_token",
        "api_base_url": "api_base_url",
        "timeout": "query_timeout",
        "poll_interval": "poll_interval",
    }
    for cli_name, field_name in cli_to_field.items():
        value = cli_overrides.get(cli_name)
        if value is not None:
            resolved[field_name] = value
            sources[field_name] = f"cli: --{cli_name.replace('_', '-')}"

    resolved["active_profile"] = effective_profile
    resolved["sources"] = sources
    try:
        return ResolvedConfig(**resolved)
    except ValueError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
