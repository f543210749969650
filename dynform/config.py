"""Environment-driven application settings."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Callable, TypeVar

from dotenv import find_dotenv, load_dotenv


class SettingsError(ValueError):
    """Raised when an environment variable holds an unusable value."""


@dataclass(slots=True, frozen=True)
class Settings:
    base_url: str = "https://jsonplaceholder.typicode.com"
    config_path: str = "/posts/1"
    submit_path: str = "/posts"
    autosave_path: str = "/posts"
    autosave_delay_ms: int = 2000
    http_timeout: float = 10.0
    log_level: str = "INFO"


def load_settings() -> Settings:
    # Load .env from the working directory
    load_dotenv(find_dotenv(usecwd=True))
    defaults = Settings()
    return Settings(
        base_url=os.getenv("DYNFORM_BASE_URL", defaults.base_url),
        config_path=os.getenv("DYNFORM_CONFIG_PATH", defaults.config_path),
        submit_path=os.getenv("DYNFORM_SUBMIT_PATH", defaults.submit_path),
        autosave_path=os.getenv("DYNFORM_AUTOSAVE_PATH", defaults.autosave_path),
        autosave_delay_ms=_env_number("DYNFORM_AUTOSAVE_DELAY_MS", defaults.autosave_delay_ms, int),
        http_timeout=_env_number("DYNFORM_HTTP_TIMEOUT", defaults.http_timeout, float),
        log_level=os.getenv("DYNFORM_LOG_LEVEL", defaults.log_level).upper(),
    )


_Number = TypeVar("_Number", int, float)


def _env_number(name: str, default: _Number, cast: Callable[[str], _Number]) -> _Number:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise SettingsError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise SettingsError(f"{name} must not be negative, got {raw!r}")
    return value
