"""Global discount settings with a short in-process cache."""
from __future__ import annotations

import time
from collections.abc import Callable
from typing import Protocol

from logging_config import logger
from storefront.core.constants import DISCOUNT_CACHE_SECONDS
from storefront.core.exceptions import GatewayException
from storefront.domain.cart import DiscountSettings


class DiscountSource(Protocol):
    async def fetch(self) -> DiscountSettings: ...


class DiscountService:
    """Caches ``DiscountSettings`` for a fixed TTL.

    A miss blocks on a fresh fetch; a failed fetch yields the inactive
    default and leaves the cache empty so the next call retries.
    """

    def __init__(
        self,
        source: DiscountSource,
        ttl: float = DISCOUNT_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._source = source
        self._ttl = ttl
        self._clock = clock
        self._cached: DiscountSettings | None = None
        self._cached_at: float | None = None

    def invalidate(self) -> None:
        self._cached = None
        self._cached_at = None

    async def get(self) -> DiscountSettings:
        now = self._clock()
        if self._cached is not None and self._cached_at is not None:
            if now - self._cached_at < self._ttl:
                return self._cached

        try:
            settings = await self._source.fetch()
        except GatewayException as exc:
            logger.warning("Error fetching discount settings: %s", exc)
            return DiscountSettings()

        self._cached = settings
        self._cached_at = now
        return settings
