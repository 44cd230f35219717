"""In-process publish/subscribe for locale change notifications.

The hydration step and the currency selector publish ``currency-changed``;
the render controller, the cart view and any external listener subscribe.
"""
from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocaleEvent:
    """Notification payload."""

    type: str
    detail: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "detail": dict(self.detail)}


EventHandler = Callable[[LocaleEvent], Awaitable[None] | None]


class EventBus:
    """In-memory pub/sub keyed by event type."""

    def __init__(self) -> None:
        self._subscribers: dict[str, list[EventHandler]] = {}

    def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """Subscribe to an event type. Subscribing the same handler twice is a no-op."""
        handlers = self._subscribers.setdefault(event_type, [])
        if handler not in handlers:
            handlers.append(handler)
            logger.debug("Subscribed to %s, total: %d", event_type, len(handlers))

    def unsubscribe(self, event_type: str, handler: EventHandler) -> None:
        handlers = self._subscribers.get(event_type)
        if not handlers:
            return
        if handler in handlers:
            handlers.remove(handler)
        if not handlers:
            del self._subscribers[event_type]

    def subscriber_count(self, event_type: str) -> int:
        return len(self._subscribers.get(event_type, ()))

    async def publish(self, event: LocaleEvent) -> None:
        """Deliver to every subscriber; one failing handler does not stop the rest."""
        for handler in list(self._subscribers.get(event.type, ())):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                logger.error("Handler error for %s: %s", event.type, e)
