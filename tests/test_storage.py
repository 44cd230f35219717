from __future__ import annotations

from dataclasses import dataclass, field

import pytest
import redis

from storefront.core.config import StorageConfig
from storefront.core.exceptions import StorageException, StorageQuotaExceeded
from storefront.core.storage import MemoryStore, RedisStore, create_store


@dataclass
class FakeRedisClient:
    data: dict[str, str] = field(default_factory=dict)
    broken: bool = False

    def ping(self) -> bool:
        return True

    def _check(self) -> None:
        if self.broken:
            raise redis.ConnectionError("connection lost")

    def get(self, key: str):
        self._check()
        return self.data.get(key)

    def set(self, key: str, value: str):
        self._check()
        self.data[key] = value
        return True

    def delete(self, key: str) -> int:
        self._check()
        existed = 1 if key in self.data else 0
        self.data.pop(key, None)
        return existed


@pytest.fixture
def fake_redis(monkeypatch):
    import storefront.core.storage as storage_module

    client = FakeRedisClient()
    monkeypatch.setattr(storage_module.redis, "from_url", lambda *args, **kwargs: client)
    return client


class TestMemoryStore:
    def test_get_set_remove(self):
        store = MemoryStore()

        assert store.get("language") is None
        store.set("language", "heb")
        assert store.get("language") == "heb"
        store.remove("language")
        store.remove("language")
        assert store.get("language") is None

    def test_quota_exceeded_raises_storage_exception(self):
        store = MemoryStore(quota_bytes=20)
        store.set("currency", "usd")

        with pytest.raises(StorageException) as exc_info:
            store.set("cart", "x" * 50)

        assert isinstance(exc_info.value, StorageQuotaExceeded)
        assert exc_info.value.key == "cart"
        assert store.get("cart") is None
        assert store.get("currency") == "usd"

    def test_overwrite_is_measured_without_old_value(self):
        store = MemoryStore(quota_bytes=12)
        store.set("cart", "12345678")

        store.set("cart", "87654321")

        assert store.get("cart") == "87654321"


class TestRedisStore:
    def test_keys_are_namespaced_per_session(self, fake_redis):
        store_a = RedisStore("redis://fake", session_id="a")
        store_b = RedisStore("redis://fake", session_id="b")

        store_a.set("language", "heb")

        assert store_a.is_redis is True
        assert fake_redis.data == {"storefront:a:language": "heb"}
        assert store_b.get("language") is None

    def test_shared_between_instances_of_one_session(self, fake_redis):
        RedisStore("redis://fake", session_id="s1").set("cart", "[]")

        assert RedisStore("redis://fake", session_id="s1").get("cart") == "[]"

    def test_remove(self, fake_redis):
        store = RedisStore("redis://fake", session_id="s1")
        store.set("auth-token", "tok")

        store.remove("auth-token")

        assert store.get("auth-token") is None

    def test_falls_back_to_memory_on_redis_error(self, fake_redis):
        store = RedisStore("redis://fake", session_id="s1")
        fake_redis.broken = True

        store.set("currency", "ils")

        assert store.is_redis is False
        assert store.get("currency") == "ils"

    def test_unreachable_redis_starts_in_memory(self, monkeypatch):
        import storefront.core.storage as storage_module

        def _refuse(*args, **kwargs):
            raise redis.ConnectionError("refused")

        monkeypatch.setattr(storage_module.redis, "from_url", _refuse)

        store = RedisStore("redis://nowhere")
        store.set("language", "eng")

        assert store.is_redis is False
        assert store.get("language") == "eng"


class TestCreateStore:
    def test_memory_store_without_redis_url(self):
        store = create_store(StorageConfig(redis_url=None, session_id="x", quota_bytes=100))

        assert isinstance(store, MemoryStore)

    def test_redis_store_with_url(self, fake_redis):
        store = create_store(StorageConfig(redis_url="redis://fake", session_id="x", quota_bytes=None))

        assert isinstance(store, RedisStore)
        assert store.is_redis is True
