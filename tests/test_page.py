"""End-to-end page scenarios against the fake backend."""
from __future__ import annotations

import json

import pytest

from storefront.application.page import StorefrontPage, build_storefront
from storefront.core.config import Settings, StorageConfig
from storefront.core.constants import AUTH_TOKEN_KEY, CART_KEY, CURRENCY_CHANGED, CURRENCY_KEY, LANGUAGE_KEY
from storefront.domain.cart import ProductRef
from storefront.domain.locale import BrowserSignals, Currency
from storefront.view.dom import Element, Event, el
from storefront.view.product_card import product_from_card

ENGLISH_BROWSER = BrowserSignals(language_tag="en-US", timezone="America/New_York")
HOOPS = ProductRef(id=1, title="Gold Hoops", usd_price=30, ils_price=110)


def make_settings(api_url: str) -> Settings:
    return Settings(
        api_url=api_url,
        locale_timeout_ms=900,
        discount_cache_seconds=300,
        storage=StorageConfig(redis_url=None, session_id="test", quota_bytes=None),
        log_level="DEBUG",
        sentry_dsn=None,
        environment="test",
    )


def product_card(item_id: int, title: str, usd: int, ils: int, discounted: bool = False) -> Element:
    children = [
        el("img", {"class": "image-item front-image", "src": f"/imgs/{item_id}.jpg"}),
        el("button", {"class": "add-to-cart-btn"}, text="Add To Cart"),
        el("div", {"class": "item-title"}, text=title),
    ]
    if discounted:
        children.append(el("span", {"class": "item-price-discounted"}, text=f"${usd}"))
    return el(
        "div",
        {
            "class": "item-container",
            "data-id": item_id,
            "data-quant": 5,
            "data-currency": "$",
            "data-usd-price": usd,
            "data-ils-price": ils,
        },
        *children,
    )


@pytest.fixture()
async def open_page(api_url, store):
    pages: list[StorefrontPage] = []

    async def _open(document, signals=ENGLISH_BROWSER, wait_for_hydration=True) -> StorefrontPage:
        page = StorefrontPage(make_settings(api_url), document, signals, store=store)
        pages.append(page)
        task = await page.open()
        if wait_for_hydration:
            await task
        return page

    try:
        yield _open
    finally:
        for page in pages:
            await page.close()


class TestPageOpen:
    """Tests for the page entry sequence."""

    @pytest.mark.asyncio
    async def test_first_render_uses_bootstrap_guess(self, open_page, document, store):
        page = await open_page(document, wait_for_hydration=False)

        assert document.query(".menu__ul").has_class("ul-eng")
        assert document.dir == "ltr"
        assert store.get(LANGUAGE_KEY) == "eng"
        await page.hydration

    @pytest.mark.asyncio
    async def test_hydration_refines_first_visit(self, open_page, document, store, backend):
        await open_page(document)

        assert store.get(LANGUAGE_KEY) == "heb"
        assert store.get(CURRENCY_KEY) == "ils"
        assert document.dir == "rtl"
        assert document.query(".menu__ul").has_class("ul-heb")
        assert backend.calls["/api/locale"] == 1

    @pytest.mark.asyncio
    async def test_returning_visitor_skips_detection(self, open_page, document, store, backend):
        store.set(LANGUAGE_KEY, "eng")
        store.set(CURRENCY_KEY, "usd")

        await open_page(document)

        assert store.get(LANGUAGE_KEY) == "eng"
        assert backend.calls["/api/locale"] == 0

    @pytest.mark.asyncio
    async def test_badge_shows_stored_cart(self, open_page, document, store):
        store.set(CART_KEY, json.dumps([{"id": 1, "title": "Gold Hoops", "usdPrice": 30, "ilsPrice": 110, "amount": 2}]))

        page = await open_page(document)

        assert document.query(".cart-number").text_content == "2"
        assert page.controller.cart_count == await page.cart.count()

    @pytest.mark.asyncio
    async def test_signed_in_badge_counts_remote_cart(self, open_page, document, store, backend):
        store.set(AUTH_TOKEN_KEY, "tok-9")
        backend.carts["tok-9"] = {"1": 1, "2": 3}

        await open_page(document)

        assert document.query(".cart-number").text_content == "4"


class TestAddToCart:
    def test_product_read_from_discounted_card(self):
        product = product_from_card(product_card(3, "Bracelet", 20, 70, discounted=True))

        assert product.id == 3
        assert product.has_discount is True
        assert product.title == "Bracelet"
        assert (product.usd_price, product.ils_price, product.stock) == (20, 70, 5)
        assert product.original_usd_price == 20

    @pytest.mark.asyncio
    async def test_click_on_card_adds_once_per_click(self, open_page, document, store):
        page = await open_page(document)
        container = document.query(".inner-products-container")
        container.append(product_card(7, "Silver Dangle", 25, 90))
        page.controller.render()
        page.controller.render()

        button = document.query(".add-to-cart-btn")
        await button.dispatch_event(Event("click"))
        await button.dispatch_event(Event("click"))

        saved = json.loads(store.get(CART_KEY))
        assert [(entry["id"], entry["amount"]) for entry in saved] == [(7, 2)]
        assert saved[0]["title"] == "Silver Dangle"
        assert saved[0]["image"] == "/imgs/7.jpg"
        assert document.query(".cart-number").text_content == "2"

    @pytest.mark.asyncio
    async def test_clicks_outside_add_button_are_ignored(self, open_page, document, store):
        await open_page(document)
        document.query(".inner-products-container").append(product_card(7, "Silver Dangle", 25, 90))

        await document.query(".item-title").dispatch_event(Event("click"))

        assert store.get(CART_KEY) is None

    @pytest.mark.asyncio
    async def test_signed_in_add_updates_badge_from_server(self, open_page, document, store, backend):
        store.set(AUTH_TOKEN_KEY, "tok-1")
        page = await open_page(document)

        count = await page.add_to_cart(HOOPS)

        assert count == 1
        assert backend.carts["tok-1"] == {"1": 1}
        assert document.query(".cart-number").text_content == "1"


class TestCartPage:
    """Cart page scenarios."""

    @pytest.fixture()
    def seeded(self, store):
        store.set(LANGUAGE_KEY, "eng")
        store.set(CURRENCY_KEY, "usd")
        store.set(
            CART_KEY,
            json.dumps(
                [
                    {"id": 1, "title": "Gold Hoops", "usdPrice": 30, "ilsPrice": 110, "amount": 2},
                    {
                        "id": 2,
                        "title": "Crochet Necklace",
                        "usdPrice": 45,
                        "ilsPrice": 165,
                        "originalUsdPrice": 50,
                        "originalIlsPrice": 180,
                        "amount": 1,
                    },
                ]
            ),
        )
        return store

    @pytest.mark.asyncio
    async def test_renders_items_and_summary(self, open_page, cart_document, seeded):
        await open_page(cart_document)

        prices = [node.text_content for node in cart_document.query_all(".cart-price")]
        assert prices == ["$30", "$45"]
        assert cart_document.query(".summary-total").get_attribute("data-total") == "105"
        assert cart_document.query(".summary-count").text_content == "Items: 3"

    @pytest.mark.asyncio
    async def test_mid_session_currency_switch(self, open_page, cart_document, seeded, backend):
        items = [
            {"id": 1, "title": "Gold Hoops", "usdPrice": 30, "ilsPrice": 110, "amount": 1},
            {"id": 2, "title": "Crochet Necklace", "usdPrice": 45, "ilsPrice": 165, "amount": 1},
            {"id": "b-3", "title": "Bracelet", "usdPrice": 20, "ilsPrice": 72, "amount": 1},
        ]
        seeded.set(CART_KEY, json.dumps(items))
        page = await open_page(cart_document)
        changes = []
        page.events.subscribe(CURRENCY_CHANGED, changes.append)
        for _ in range(3):
            page.controller.render()
        assert [node.text_content for node in cart_document.query_all(".cart-price")] == ["$30", "$45", "$20"]

        select = cart_document.query("select#currency")
        select.value = "ils"
        await select.dispatch_event(Event("change"))

        assert page.resolver.currency is Currency.ILS
        assert len(changes) == 1
        rows = cart_document.query_all(".cart-item")
        assert [(row.id, row.get_attribute("data-amount")) for row in rows] == [("1", "1"), ("2", "1"), ("b-3", "1")]
        prices = [node.text_content for node in cart_document.query_all(".cart-price")]
        assert prices == ["₪110", "₪165", "₪72"]
        assert cart_document.query(".summary-total").get_attribute("data-total") == str(110 + 165 + 72)
        assert backend.calls["/discount-settings"] == 1

    @pytest.mark.asyncio
    async def test_active_discount_applies_to_cart(self, open_page, cart_document, seeded, backend):
        backend.discount.update({"global_discount_percentage": 20, "discount_active": True})

        await open_page(cart_document)

        prices = [node.text_content for node in cart_document.query_all(".cart-price")]
        assert prices == ["$24", "$40"]

    @pytest.mark.asyncio
    async def test_delete_item_button(self, open_page, cart_document, seeded):
        page = await open_page(cart_document)

        await cart_document.query(".delete-item").dispatch_event(Event("click"))

        assert [row.id for row in cart_document.query_all(".cart-item")] == ["2"]
        assert cart_document.query(".cart-number").text_content == "1"
        assert [entry["id"] for entry in json.loads(page.store.get(CART_KEY))] == [2]

    @pytest.mark.asyncio
    async def test_delete_all_button(self, open_page, cart_document, seeded):
        page = await open_page(cart_document)

        await cart_document.query(".delete-all").dispatch_event(Event("click"))

        assert cart_document.query_all(".cart-item") == []
        assert cart_document.query(".cart-empty").text_content == "Your Cart Is Empty"
        assert cart_document.query(".cart-number").text_content == "0"
        assert await page.cart.count() == 0

    @pytest.mark.asyncio
    async def test_cart_view_listeners_installed_once(self, open_page, cart_document, seeded):
        page = await open_page(cart_document)

        for _ in range(3):
            page.controller.render()
            await page.cart_view.render()

        assert page.cart_view.install() is False
        # cart view delete delegation plus add-to-cart delegation
        assert cart_document.listener_count("click") == 2

    @pytest.mark.asyncio
    async def test_login_merges_and_logout_returns_to_guest(self, open_page, cart_document, seeded, backend):
        page = await open_page(cart_document)

        merged = await page.login("tok-5")

        assert merged == 3
        assert backend.carts["tok-5"] == {"1": 2, "2": 1}
        assert cart_document.query(".cart-number").text_content == "3"

        await page.logout()

        assert cart_document.query(".cart-number").text_content == "0"
        assert cart_document.query(".cart-empty") is not None


@pytest.mark.asyncio
async def test_build_storefront_uses_given_settings(api_url, store, document):
    page = build_storefront(document, ENGLISH_BROWSER, settings=make_settings(api_url), store=store)
    try:
        await page.open()
        await page.hydration
    finally:
        await page.close()

    assert page.settings.environment == "test"
    assert store.get(LANGUAGE_KEY) == "heb"
