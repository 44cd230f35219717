"""Idempotent re-rendering of the language and currency dependent regions.

Every render replaces the whole inner content of the menu, footer and
currency-selector regions, so listeners attached to the previous nodes die
with them. Elements that outlive a render (the mobile menu toggle) are
swapped for listener-free clones before being wired again. The currency
``<select>`` is served by one delegated document listener owned by
``CurrencyPersistence``.
"""
from __future__ import annotations

import logging

from storefront.core.constants import CURRENCY_CHANGED, DEFAULT_OPTION, LANGUAGE_CHANGED
from storefront.core.events import EventBus, LocaleEvent
from storefront.core.exceptions import InvalidLocaleError
from storefront.core.i18n import resolve_language
from storefront.domain.locale import Language
from storefront.services.locale_resolver import LocaleResolver
from storefront.templates.layout import render_currency_selector, render_footer, render_menu

from .dom import Document, Element, Event

logger = logging.getLogger(__name__)

MENU_SELECTOR = ".menu"
FOOTER_SELECTOR = ".footer"
CURRENCY_REGION_SELECTOR = ".currency-sort-container"
CART_BADGE_SELECTOR = ".cart-number"


class CurrencyPersistence:
    """Installs the document-level currency ``change`` listener exactly once.

    Construct one per application and hand it to every controller; the
    ``installed`` flag is the only state that survives re-renders.
    """

    def __init__(self, resolver: LocaleResolver):
        self._resolver = resolver
        self.installed = False

    def install(self, document: Document) -> bool:
        if self.installed:
            return False
        document.add_event_listener("change", self._on_change)
        self.installed = True
        return True

    async def _on_change(self, event: Event) -> None:
        target = event.target
        if target is None or not target.matches("select#currency"):
            return
        value = target.value
        if value == DEFAULT_OPTION:
            return
        try:
            await self._resolver.set_currency(value)
        except InvalidLocaleError as exc:
            logger.info("Ignoring currency selection: %s", exc)


class ViewRenderController:
    def __init__(
        self,
        document: Document,
        resolver: LocaleResolver,
        events: EventBus,
        currency_persistence: CurrencyPersistence,
        mobile: bool = False,
    ):
        self.document = document
        self._resolver = resolver
        self._events = events
        self._currency_persistence = currency_persistence
        self._mobile = mobile
        self.cart_count = 0
        self.language: Language | None = None

        events.subscribe(LANGUAGE_CHANGED, self._on_language_changed)
        events.subscribe(CURRENCY_CHANGED, self._on_currency_changed)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, lang: Language | str | None = None, cart_count: int | None = None) -> None:
        language = resolve_language(lang or self._resolver.language)
        if cart_count is not None:
            self.cart_count = cart_count
        self.language = language

        menu = self.document.query(MENU_SELECTOR)
        if menu is not None:
            menu.replace_children(*render_menu(language, self.cart_count))
            self._wire_menu(menu)

        footer = self.document.query(FOOTER_SELECTOR)
        if footer is not None:
            footer.replace_children(*render_footer(language))

        self.render_currency_selector(language)
        self._wire_menu_toggle()
        self.persist_cart_number(self.cart_count)
        self._currency_persistence.install(self.document)

    def render_currency_selector(self, lang: Language | str | None = None) -> None:
        region = self.document.query(CURRENCY_REGION_SELECTOR)
        if region is None:
            return
        language = resolve_language(lang or self.language or self._resolver.language)
        region.set_attribute("style", "direction:rtl;" if language is Language.HEBREW else "direction:ltr;")
        region.replace_children(*render_currency_selector(language, self._resolver.currency))

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------

    def _wire_menu(self, menu: Element) -> None:
        for button in menu.query_all(".heb-lng") + menu.query_all(".eng-lng"):
            button.add_event_listener("click", self._on_language_click)

        tab = menu.query(".categories-tab")
        if tab is None:
            return
        tab = tab.replace_with(tab.clone())
        if self._mobile:
            tab.add_event_listener("click", self._toggle_categories)
        else:
            tab.add_event_listener("mouseover", self._reveal_categories)
            tab.add_event_listener("mouseleave", self._hide_categories)

    def _wire_menu_toggle(self) -> None:
        toggle = self.document.query(".menubars-svg")
        if toggle is None or toggle.parent is None:
            return
        toggle = toggle.replace_with(toggle.clone())
        toggle.add_event_listener("click", self._toggle_menu)

    def _categories_list(self) -> Element | None:
        return self.document.query(".categories-list")

    def _reveal_categories(self, event: Event) -> None:
        categories = self._categories_list()
        if categories is not None:
            categories.add_class("categories-list--active")

    def _hide_categories(self, event: Event) -> None:
        categories = self._categories_list()
        if categories is not None:
            categories.remove_class("categories-list--active")

    def _toggle_categories(self, event: Event) -> None:
        categories = self._categories_list()
        if categories is not None:
            categories.toggle_class("reveal")

    def _toggle_menu(self, event: Event) -> None:
        parent = self.document.query(".menubars-toggle")
        menu = self.document.query(MENU_SELECTOR)
        if parent is None or menu is None:
            return
        closing = parent.toggle_class("close")
        if closing:
            menu.add_class("menu--open")
        else:
            menu.remove_class("menu--open")
            categories = self._categories_list()
            if categories is not None:
                categories.remove_class("reveal")

    # ------------------------------------------------------------------
    # Language and currency changes
    # ------------------------------------------------------------------

    async def _on_language_click(self, event: Event) -> None:
        button = event.current_target
        if button is None:
            return
        await self.change_language(button.get_attribute("data-lang") or "")

    async def change_language(self, lang: Language | str) -> Language:
        """Persist an explicit language choice and notify every view."""
        language = self._resolver.set_language(lang)
        await self._events.publish(LocaleEvent(LANGUAGE_CHANGED, {"language": language.value}))
        return language

    def _on_language_changed(self, event: LocaleEvent) -> None:
        self.render(event.detail.get("language"))

    def _on_currency_changed(self, event: LocaleEvent) -> None:
        self.render_currency_selector()

    # ------------------------------------------------------------------
    # Cart badge
    # ------------------------------------------------------------------

    def persist_cart_number(self, count: int) -> None:
        self.cart_count = count
        for badge in self.document.query_all(CART_BADGE_SELECTOR):
            badge.text_content = str(count)

    def increase_cart_number(self) -> None:
        self.persist_cart_number(self.cart_count + 1)

    def decrease_cart_number(self) -> None:
        self.persist_cart_number(max(0, self.cart_count - 1))
