"""Shared pytest fixtures: a fake storefront backend and in-memory stores."""
from __future__ import annotations

import asyncio
import os
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from storefront.core.events import EventBus
from storefront.core.storage import MemoryStore
from storefront.view.dom import Document, el


@dataclass
class FakeBackend:
    """State behind the fake HTTP endpoints; tests tweak it directly."""

    carts: dict[str, dict[str, int]] = field(default_factory=dict)
    products: list[dict[str, Any]] = field(default_factory=list)
    discount: dict[str, Any] = field(
        default_factory=lambda: {
            "success": True,
            "global_discount_percentage": 0,
            "discount_active": False,
            "discount_label": "Discount",
        }
    )
    locale: dict[str, Any] | None = field(
        default_factory=lambda: {"ok": True, "lang": "he", "currency": "ILS"}
    )
    fallback_locale: dict[str, Any] | None = None
    locale_delay: float = 0
    failing: set[str] = field(default_factory=set)
    # path -> number of calls that succeed before the endpoint starts failing
    fail_after: dict[str, int] = field(default_factory=dict)
    calls: Counter = field(default_factory=Counter)
    tokens_seen: list[str] = field(default_factory=list)

    def cart_for(self, token: str) -> dict[str, int]:
        return self.carts.setdefault(token, {})


def _build_app(backend: FakeBackend) -> web.Application:
    async def guard(request: web.Request) -> web.Response | None:
        backend.calls[request.path] += 1
        limit = backend.fail_after.get(request.path)
        if request.path in backend.failing or (limit is not None and backend.calls[request.path] > limit):
            return web.json_response({"error": "boom"}, status=500)
        return None

    def token_of(request: web.Request) -> str | None:
        token = request.headers.get("auth-token")
        if token:
            backend.tokens_seen.append(token)
        return token

    async def add_to_cart(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        token = token_of(request)
        if not token:
            return web.json_response({"error": "unauthorized"}, status=401)
        body = await request.json()
        cart = backend.cart_for(token)
        key = str(body["itemId"])
        cart[key] = cart.get(key, 0) + 1
        return web.Response(text="Added!")

    async def remove_from_cart(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        token = token_of(request)
        if not token:
            return web.json_response({"error": "unauthorized"}, status=401)
        body = await request.json()
        cart = backend.cart_for(token)
        key = str(body["itemId"])
        if cart.get(key, 0) > 0:
            cart[key] -= 1
        return web.Response(text="Removed!")

    async def remove_all(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        token = token_of(request)
        if not token:
            return web.json_response({"error": "unauthorized"}, status=401)
        cart = backend.cart_for(token)
        for key in cart:
            cart[key] = 0
        return web.Response(text="Removed All!")

    async def get_cart(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        token = token_of(request)
        if not token:
            return web.json_response({"error": "unauthorized"}, status=401)
        return web.json_response(backend.cart_for(token))

    async def all_products(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        return web.json_response(backend.products)

    async def discount_settings(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        return web.json_response(backend.discount)

    async def primary_locale(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        if backend.locale_delay:
            await asyncio.sleep(backend.locale_delay)
        if backend.locale is None:
            return web.json_response({"error": "not found"}, status=404)
        return web.json_response(backend.locale)

    async def fallback_locale(request: web.Request) -> web.Response:
        failure = await guard(request)
        if failure is not None:
            return failure
        if backend.fallback_locale is None:
            return web.json_response({"error": "not found"}, status=404)
        return web.json_response(backend.fallback_locale)

    app = web.Application()
    app.router.add_post("/addtocart", add_to_cart)
    app.router.add_post("/removefromcart", remove_from_cart)
    app.router.add_post("/removeAll", remove_all)
    app.router.add_post("/getcart", get_cart)
    app.router.add_get("/allproducts", all_products)
    app.router.add_get("/discount-settings", discount_settings)
    app.router.add_get("/api/locale", primary_locale)
    app.router.add_get("/locale", fallback_locale)
    return app


@pytest.fixture()
def backend() -> FakeBackend:
    return FakeBackend(
        products=[
            {
                "id": 1,
                "name": "Gold Hoops",
                "image": "/imgs/hoops.jpg",
                "usd_price": 30,
                "ils_price": 110,
                "quantity": 4,
            },
            {
                "id": 2,
                "name": "Crochet Necklace",
                "image": "/imgs/crochet.jpg",
                "usd_price": 45,
                "ils_price": 165,
                "original_usd_price": 50,
                "original_ils_price": 180,
                "quantity": 2,
            },
        ]
    )


@pytest.fixture()
async def api_url(backend: FakeBackend):
    """Serve the fake backend and yield its base URL."""
    server = TestServer(_build_app(backend))
    await server.start_server()
    try:
        yield str(server.make_url("")).rstrip("/")
    finally:
        await server.close()


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def events() -> EventBus:
    return EventBus()


@pytest.fixture(scope="session", autouse=True)
def _test_env_vars() -> None:
    """Keep stray env from leaking into settings under test."""
    for name in ("REDIS_URL", "SENTRY_DSN"):
        os.environ.pop(name, None)


def build_page_document(cart_page: bool = False) -> Document:
    """Static page skeleton with the regions the views render into."""
    document = Document(body_id="cart" if cart_page else "home")
    body = document.body
    body.append(el("div", {"class": "menubars-toggle"}, el("img", {"class": "menubars-svg", "src": "/imgs/svgs/bars.svg"})))
    body.append(el("nav", {"class": "menu"}))
    body.append(el("div", {"class": "currency-sort-container"}))
    if cart_page:
        body.append(el("div", {"class": "cart-header"}))
        body.append(el("div", {"class": "cart-items-container"}))
        body.append(el("div", {"class": "summary"}))
    else:
        body.append(el("div", {"class": "inner-products-container"}))
    body.append(el("footer", {"class": "footer"}))
    return document


@pytest.fixture()
def document() -> Document:
    return build_page_document()


@pytest.fixture()
def cart_document() -> Document:
    return build_page_document(cart_page=True)
