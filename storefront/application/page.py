"""Page entry point that wires the store, services and views together."""
from __future__ import annotations

import asyncio
import contextlib

import aiohttp

from logging_config import logger, setup_logging
from storefront.core.config import Settings, load_settings
from storefront.core.events import EventBus
from storefront.core.sentry_integration import init_sentry
from storefront.core.storage import PersistentStore, create_store
from storefront.domain.cart import ItemId, ProductRef
from storefront.domain.locale import BrowserSignals
from storefront.integrations import (
    DiscountSettingsClient,
    HttpProductCatalog,
    LocaleDetectionClient,
    RemoteCartGateway,
)
from storefront.services import CartStore, DiscountService, LocaleResolver
from storefront.view.cart_view import ITEMS_SELECTOR, CartView
from storefront.view.dom import Document, Event
from storefront.view.product_card import card_for_event_target, product_from_card
from storefront.view.render_controller import CurrencyPersistence, ViewRenderController


class StorefrontPage:
    """One page lifetime: bootstrap, first render, then background hydration."""

    def __init__(
        self,
        settings: Settings,
        document: Document,
        signals: BrowserSignals | None = None,
        store: PersistentStore | None = None,
        session: aiohttp.ClientSession | None = None,
        mobile: bool = False,
    ):
        self.settings = settings
        self.document = document
        self.events = EventBus()
        self.store = store if store is not None else create_store(settings.storage)

        self.cart_gateway = RemoteCartGateway(settings.api_url, session)
        self.locale_client = LocaleDetectionClient(
            settings.api_url, session, timeout_ms=settings.locale_timeout_ms
        )
        self.discount_client = DiscountSettingsClient(settings.api_url, session)
        self.catalog = HttpProductCatalog(settings.api_url, session)

        self.discounts = DiscountService(self.discount_client, ttl=settings.discount_cache_seconds)
        self.cart = CartStore(self.store, self.cart_gateway, self.discounts, self.catalog)
        self.resolver = LocaleResolver(self.store, self.locale_client, self.events, signals, document)

        self.currency_persistence = CurrencyPersistence(self.resolver)
        self.controller = ViewRenderController(
            document, self.resolver, self.events, self.currency_persistence, mobile=mobile
        )
        self.cart_view = CartView(document, self.cart, self.resolver, self.events, self.controller)

        self.hydration: asyncio.Task | None = None
        self._add_listener_installed = False

    async def open(self) -> asyncio.Task:
        """Run the page entry sequence and return the hydration task."""
        preference = self.resolver.bootstrap()
        await self.cart.load()
        count = await self.cart.count()
        self.controller.render(preference.language, count)

        if self.document.query(ITEMS_SELECTOR) is not None:
            self.cart_view.install()
            await self.cart_view.render()
        self._install_add_to_cart()

        self.hydration = asyncio.create_task(self.resolver.hydrate())
        return self.hydration

    def _install_add_to_cart(self) -> None:
        if self._add_listener_installed:
            return
        self.document.add_event_listener("click", self._on_add_click)
        self._add_listener_installed = True

    async def _on_add_click(self, event: Event) -> None:
        card = card_for_event_target(event.target)
        if card is None:
            return
        await self.add_to_cart(product_from_card(card))

    async def refresh_cart_badge(self) -> int:
        count = await self.cart.count()
        self.controller.persist_cart_number(count)
        return count

    async def add_to_cart(self, product: ProductRef) -> int:
        await self.cart.add(product)
        return await self.refresh_cart_badge()

    async def remove_from_cart(self, item_id: ItemId) -> int:
        await self.cart.remove(item_id)
        if self.cart_view.installed:
            await self.cart_view.render()
        return await self.refresh_cart_badge()

    async def clear_cart(self) -> int:
        await self.cart.clear()
        if self.cart_view.installed:
            await self.cart_view.render()
        return await self.refresh_cart_badge()

    async def login(self, token: str) -> int:
        merged = await self.cart.login(token)
        if self.cart_view.installed:
            await self.cart_view.render()
        await self.refresh_cart_badge()
        return merged

    async def logout(self) -> None:
        self.cart.logout()
        await self.cart.load()
        if self.cart_view.installed:
            await self.cart_view.render()
        await self.refresh_cart_badge()

    async def close(self) -> None:
        if self.hydration is not None and not self.hydration.done():
            self.hydration.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self.hydration
        for client in (self.cart_gateway, self.locale_client, self.discount_client, self.catalog):
            await client.close()
        logger.debug("Storefront page closed")


def build_storefront(
    document: Document,
    signals: BrowserSignals | None = None,
    settings: Settings | None = None,
    **kwargs,
) -> StorefrontPage:
    """Load settings, set up logging and error tracking, and create the page."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    init_sentry(settings.sentry_dsn, environment=settings.environment)
    return StorefrontPage(settings, document, signals, **kwargs)
