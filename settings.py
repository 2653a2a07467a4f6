from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Mapping, Optional, Tuple

from errors import ConfigError


_API_KEY_ENV = "API_KEY"
_SHEET_ID_ENV = "SHEET_ID"
_SHEET_NAME_ENV = "SHEET_NAME"
_DISPLAY_LIMIT_ENV = "DISPLAY_LIMIT"
_DISCOVERY_DOCS_ENV = "DISCOVERY_DOCS"
_REFRESH_INTERVAL_ENV = "REFRESH_INTERVAL_SECONDS"
_REQUEST_TIMEOUT_ENV = "REQUEST_TIMEOUT_SECONDS"
_LOG_LEVEL_ENV = "LOG_LEVEL"

DEFAULT_SHEET_NAME = "Sheet1"
DEFAULT_DISPLAY_LIMIT = 100
DEFAULT_DISCOVERY_DOCS = ("https://sheets.googleapis.com/$discovery/rest?version=v4",)
DEFAULT_REFRESH_INTERVAL = 300.0
DEFAULT_REQUEST_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    api_key: str
    sheet_id: str
    sheet_name: str = DEFAULT_SHEET_NAME
    display_limit: int = DEFAULT_DISPLAY_LIMIT
    discovery_docs: Tuple[str, ...] = DEFAULT_DISCOVERY_DOCS
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def __post_init__(self) -> None:
        if not self.api_key or not self.api_key.strip():
            raise ConfigError(f"{_API_KEY_ENV} is required but was not provided.")
        if not self.sheet_id or not self.sheet_id.strip():
            raise ConfigError(f"{_SHEET_ID_ENV} is required but was not provided.")
        if not self.sheet_name:
            raise ConfigError(f"{_SHEET_NAME_ENV} must not be empty.")
        if self.display_limit < 1:
            raise ConfigError(f"{_DISPLAY_LIMIT_ENV} must be a positive integer.")
        if not self.discovery_docs:
            raise ConfigError(f"{_DISCOVERY_DOCS_ENV} must list at least one URL.")
        if self.refresh_interval <= 0:
            raise ConfigError(f"{_REFRESH_INTERVAL_ENV} must be greater than zero.")
        if self.request_timeout <= 0:
            raise ConfigError(f"{_REQUEST_TIMEOUT_ENV} must be greater than zero.")


def _read_str_env(environ: Mapping[str, str], name: str, default: str) -> str:
    value = environ.get(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_required_env(environ: Mapping[str, str], name: str) -> str:
    value = environ.get(name)
    candidate = (value or "").strip()
    if not candidate:
        raise ConfigError(f"{name} is required but was not provided.")
    return candidate


def _read_int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}.") from exc


def _read_float_env(environ: Mapping[str, str], name: str, default: float) -> float:
    value = environ.get(name)
    if value is None or not value.strip():
        return default
    try:
        return float(value.strip())
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}.") from exc


def _read_discovery_docs(environ: Mapping[str, str]) -> Tuple[str, ...]:
    value = environ.get(_DISCOVERY_DOCS_ENV)
    if value is None:
        return DEFAULT_DISCOVERY_DOCS
    urls = tuple(part.strip() for part in value.split(",") if part.strip())
    return urls or DEFAULT_DISCOVERY_DOCS


def _read_log_level(environ: Mapping[str, str], default: str) -> str:
    return _read_str_env(environ, _LOG_LEVEL_ENV, default).upper()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build and validate settings from the environment, failing fast."""
    env = os.environ if environ is None else environ
    return Settings(
        api_key=_read_required_env(env, _API_KEY_ENV),
        sheet_id=_read_required_env(env, _SHEET_ID_ENV),
        sheet_name=_read_str_env(env, _SHEET_NAME_ENV, DEFAULT_SHEET_NAME),
        display_limit=_read_int_env(env, _DISPLAY_LIMIT_ENV, DEFAULT_DISPLAY_LIMIT),
        discovery_docs=_read_discovery_docs(env),
        refresh_interval=_read_float_env(env, _REFRESH_INTERVAL_ENV, DEFAULT_REFRESH_INTERVAL),
        request_timeout=_read_float_env(env, _REQUEST_TIMEOUT_ENV, DEFAULT_REQUEST_TIMEOUT),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()


def get_log_level() -> str:
    """Log level from the environment, usable before settings validate."""
    return _read_log_level(os.environ, "INFO")
