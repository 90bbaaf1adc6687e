"""Client settings, loadable from a YAML file under ``conf/``."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from omegaconf import OmegaConf
from pydantic import BaseModel, Field, HttpUrl, model_validator

CONFIG_PATH_ENV = "PAGESEEDER_CONFIG_PATH"
DEFAULT_CONFIG_PATH = "conf/pageseeder.yml"

_REQUIRED_KEYS = ("PS_URL", "PS_CLIENT_ID", "PS_CLIENT_SECRET")


def _resolve_config_location(location: Path | str, *, source: str) -> Path:
    raw = Path(location).expanduser()
    candidate = raw if raw.is_absolute() else Path.cwd() / raw
    if not candidate.exists():
        raise FileNotFoundError(f"Config file not found for {source}: {candidate}")
    return candidate.resolve()


def _load_normalized_config(location: Path) -> dict[str, Any]:
    raw_config = OmegaConf.load(location)
    config = OmegaConf.to_container(raw_config, resolve=True)
    if not isinstance(config, dict):
        raise ValueError("Config file must contain a mapping of PageSeeder settings.")
    return {str(key).upper(): value for key, value in config.items()}


def _require_keys(normalized: dict[str, Any]) -> None:
    missing = [key for key in _REQUIRED_KEYS if not normalized.get(key)]
    if missing:
        joined = ", ".join(missing)
        raise ValueError(f"Missing PageSeeder settings: {joined}")


def _settings_kwargs(normalized: dict[str, Any]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {
        "base_url": str(normalized["PS_URL"]),
        "credentials": {
            "client_id": str(normalized["PS_CLIENT_ID"]),
            "client_secret": str(normalized["PS_CLIENT_SECRET"]),
        },
    }
    optional = {
        "PS_TIMEOUT": "timeout_seconds",
        "PS_MAX_ATTEMPTS": "max_attempts",
        "PS_PAGE_SIZE": "page_size",
    }
    for key, field in optional.items():
        if normalized.get(key) is not None:
            kwargs[field] = normalized[key]
    return kwargs


class ClientCredentials(BaseModel):
    """OAuth client registered on the PageSeeder server."""

    client_id: str = Field(min_length=1, description="OAuth client id")
    client_secret: str = Field(
        min_length=1, repr=False, description="OAuth client secret (never logged)"
    )


class ClientSettings(BaseModel):
    """Connection and retry settings for :class:`~pageseeder_api.client.PageSeederClient`."""

    base_url: HttpUrl = Field(
        description="Server root, without the /ps context path",
        examples=["https://ps.example.org"],
    )
    credentials: ClientCredentials
    timeout_seconds: float = Field(default=30.0, gt=0, description="Per round-trip timeout")
    max_attempts: int = Field(default=3, ge=1, description="Attempts per operation, first included")
    backoff_base_seconds: float = Field(default=0.5, ge=0)
    backoff_max_seconds: float = Field(default=8.0, ge=0)
    token_refresh_margin_seconds: float = Field(
        default=0.0,
        ge=0,
        description="Renew the access token this long before it expires",
    )
    page_size: int | None = Field(default=None, ge=1, description="Default page size for listings")

    @model_validator(mode="after")
    def _check_backoff(self) -> ClientSettings:
        if self.backoff_max_seconds < self.backoff_base_seconds:
            raise ValueError("backoff_max_seconds must not be smaller than backoff_base_seconds")
        return self

    @property
    def root_url(self) -> str:
        return str(self.base_url).rstrip("/")

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> ClientSettings:
        """Create settings from a YAML file, ``conf/pageseeder.yml`` by default.

        ``PAGESEEDER_CONFIG_PATH`` takes precedence over ``path`` when set. Keys are
        case-insensitive.
        """
        env_path = os.environ.get(CONFIG_PATH_ENV)
        if env_path:
            location = _resolve_config_location(env_path, source=CONFIG_PATH_ENV)
        elif path is not None:
            location = _resolve_config_location(path, source="path")
        else:
            location = _resolve_config_location(DEFAULT_CONFIG_PATH, source="default")

        normalized = _load_normalized_config(location)
        _require_keys(normalized)
        return cls.model_validate(_settings_kwargs(normalized))
