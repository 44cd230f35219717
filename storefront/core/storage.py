"""Persistent key-value store adapters (the browser ``localStorage`` analogue).

Both the cart store and the locale resolver read and write through the
``PersistentStore`` protocol. Values are plain strings; callers own the
encoding (JSON for the cart, bare strings for locale fields).
"""
from __future__ import annotations

from typing import Protocol

import redis

from logging_config import logger

from .config import StorageConfig
from .exceptions import StorageQuotaExceeded


class PersistentStore(Protocol):
    """Synchronous string key-value store."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class MemoryStore:
    """Process-local store with optional byte quota, like ``localStorage``."""

    def __init__(self, quota_bytes: int | None = None, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})
        self._quota = quota_bytes

    def _used_bytes(self, skip_key: str | None = None) -> int:
        return sum(
            len(key.encode("utf-8")) + len(value.encode("utf-8"))
            for key, value in self._data.items()
            if key != skip_key
        )

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        value = str(value)
        if self._quota is not None:
            size = len(key.encode("utf-8")) + len(value.encode("utf-8"))
            if self._used_bytes(skip_key=key) + size > self._quota:
                raise StorageQuotaExceeded(key, size, self._quota)
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return list(self._data)


class RedisStore:
    """Store persisted in Redis, namespaced per browser session.

    Falls back to an in-memory store for the rest of the process lifetime
    when Redis cannot be reached, so page state is never lost mid-session.
    """

    def __init__(self, redis_url: str, session_id: str = "anonymous"):
        self._redis_url = redis_url
        self._session_id = session_id
        self._fallback = MemoryStore()
        self._client = self._init_client()

    def _init_client(self):
        try:
            client = redis.from_url(
                self._redis_url,
                decode_responses=True,
                socket_connect_timeout=5,
                socket_timeout=5,
            )
            client.ping()
            logger.info("Redis persistent store enabled for session %s", self._session_id)
            return client
        except Exception as exc:
            logger.warning("Redis store init failed, fallback to in-memory: %s", exc)
            return None

    def _switch_to_memory_fallback(self, reason: Exception | str) -> None:
        logger.warning("Redis store fallback to memory mode: %s", reason)
        self._client = None

    def _key(self, key: str) -> str:
        return f"storefront:{self._session_id}:{key}"

    @property
    def is_redis(self) -> bool:
        return self._client is not None

    def get(self, key: str) -> str | None:
        if not self._client:
            return self._fallback.get(key)
        try:
            return self._client.get(self._key(key))
        except redis.RedisError as exc:
            self._switch_to_memory_fallback(exc)
            return self._fallback.get(key)

    def set(self, key: str, value: str) -> None:
        if self._client:
            try:
                self._client.set(self._key(key), str(value))
                return
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._fallback.set(key, value)

    def remove(self, key: str) -> None:
        if self._client:
            try:
                self._client.delete(self._key(key))
                return
            except redis.RedisError as exc:
                self._switch_to_memory_fallback(exc)
        self._fallback.remove(key)


def create_store(config: StorageConfig) -> PersistentStore:
    """Pick Redis when configured, otherwise a process-local store."""
    if config.redis_url:
        return RedisStore(config.redis_url, session_id=config.session_id)
    return MemoryStore(quota_bytes=config.quota_bytes)
