"""Cart page: item list, summary and delete buttons."""
from __future__ import annotations

from logging_config import logger
from storefront.core.constants import CURRENCY_CHANGED, LANGUAGE_CHANGED
from storefront.core.events import EventBus, LocaleEvent
from storefront.core.i18n import _
from storefront.domain.cart import display_price
from storefront.services.cart_store import CartStore
from storefront.services.locale_resolver import LocaleResolver
from storefront.templates.layout import render_cart_items, render_summary

from .dom import Document, Event, el
from .render_controller import ViewRenderController

ITEMS_SELECTOR = ".cart-items-container"
SUMMARY_SELECTOR = ".summary"
HEADER_SELECTOR = ".cart-header"


class CartView:
    def __init__(
        self,
        document: Document,
        cart: CartStore,
        resolver: LocaleResolver,
        events: EventBus,
        controller: ViewRenderController | None = None,
    ):
        self.document = document
        self._cart = cart
        self._resolver = resolver
        self._events = events
        self._controller = controller
        self.installed = False

    def install(self) -> bool:
        """Attach the delegated click listener and locale subscriptions once."""
        if self.installed:
            return False
        self.document.add_event_listener("click", self._on_click)
        self._events.subscribe(CURRENCY_CHANGED, self._on_locale_changed)
        self._events.subscribe(LANGUAGE_CHANGED, self._on_locale_changed)
        self.installed = True
        return True

    async def render(self) -> None:
        language = self._resolver.language
        currency = self._resolver.currency
        discount = await self._cart.discount()

        header = self.document.query(HEADER_SELECTOR)
        if header is not None:
            header.replace_children(
                el("h1", {"class": "cart-title"}, text=_("cart_title", language)),
                el("button", {"class": "delete-all"}, text=_("delete_all", language)),
            )

        container = self.document.query(ITEMS_SELECTOR)
        if container is not None:
            items = self._cart.items
            if not items:
                container.replace_children(el("p", {"class": "cart-empty"}, text=_("cart_empty", language)))
            else:
                rows = [
                    (item.key, item.title, item.image, display_price(item, currency, discount), item.amount)
                    for item in items
                ]
                container.replace_children(*render_cart_items(rows, currency, language))

        summary = self.document.query(SUMMARY_SELECTOR)
        if summary is not None:
            summary.replace_children(
                el("h2", {"class": "summary-title"}, text=_("summary_title", language)),
                *render_summary(self._cart.local_count(), self._cart.total(currency, discount), currency, language),
            )

    async def _on_locale_changed(self, event: LocaleEvent) -> None:
        await self.render()

    async def _on_click(self, event: Event) -> None:
        target = event.target
        if target is None:
            return

        if target.closest(".delete-all") is not None:
            await self._cart.clear()
        else:
            button = target.closest(".delete-item")
            if button is None:
                return
            row = button.closest(".cart-item")
            if row is None or not row.id:
                logger.warning("Delete clicked outside a cart row")
                return
            await self._cart.remove(row.id)

        await self.render()
        if self._controller is not None:
            self._controller.persist_cart_number(await self._cart.count())
