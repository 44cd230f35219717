"""Environment-driven configuration objects for the storefront."""
from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from .constants import DISCOUNT_CACHE_SECONDS, LOCALE_TIMEOUT_MS
from .exceptions import ConfigurationException


def _int_from_env(name: str, default: int | None) -> int | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationException(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(slots=True)
class StorageConfig:
    redis_url: str | None
    session_id: str
    quota_bytes: int | None


@dataclass(slots=True)
class Settings:
    api_url: str
    locale_timeout_ms: int
    discount_cache_seconds: int
    storage: StorageConfig
    log_level: str
    sentry_dsn: str | None
    environment: str

    @property
    def locale_timeout(self) -> float:
        """Hydration timeout in seconds."""
        return self.locale_timeout_ms / 1000


def load_settings() -> Settings:
    """Load environment variables once and expose typed settings."""
    load_dotenv()

    storage = StorageConfig(
        redis_url=os.getenv("REDIS_URL") or None,
        session_id=os.getenv("STOREFRONT_SESSION_ID", "anonymous"),
        quota_bytes=_int_from_env("STORAGE_QUOTA_BYTES", None),
    )

    return Settings(
        api_url=os.getenv("STOREFRONT_API_URL", "").rstrip("/"),
        locale_timeout_ms=_int_from_env("LOCALE_TIMEOUT_MS", LOCALE_TIMEOUT_MS),
        discount_cache_seconds=_int_from_env("DISCOUNT_CACHE_SECONDS", DISCOUNT_CACHE_SECONDS),
        storage=storage,
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        sentry_dsn=os.getenv("SENTRY_DSN") or None,
        environment=os.getenv("ENVIRONMENT", "production"),
    )
