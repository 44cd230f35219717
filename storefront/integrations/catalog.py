"""Product catalog lookup used to rebuild the signed-in cart."""
from __future__ import annotations

from typing import Any, Iterable, Protocol

from storefront.core.constants import ALL_PRODUCTS_PATH
from storefront.domain.cart import CartItem, item_key, js_round, normalize_item_id

from .http import ApiClient


class ProductCatalog(Protocol):
    async def get_products(self, ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        """Return product records keyed by ``item_key`` for the requested ids."""
        ...


def cart_item_from_product(product: dict[str, Any], amount: int) -> CartItem:
    """Build a cart entry from a catalog record."""

    def price(*keys: str) -> int:
        for key in keys:
            value = product.get(key)
            if value not in (None, ""):
                try:
                    return js_round(float(value))
                except (TypeError, ValueError, OverflowError):
                    continue
        return 0

    usd_price = price("usd_price", "usdPrice")
    ils_price = price("ils_price", "ilsPrice", "price")
    original_usd = price("original_usd_price", "originalUsdPrice") or usd_price
    original_ils = price("original_ils_price", "originalIlsPrice") or ils_price
    try:
        stock = int(product.get("quantity") or 0)
    except (TypeError, ValueError, OverflowError):
        stock = 0

    return CartItem(
        id=normalize_item_id(product.get("id", "")),
        title=str(product.get("name") or product.get("title") or ""),
        image=str(product.get("image") or ""),
        usd_price=usd_price,
        ils_price=ils_price,
        original_usd_price=original_usd or None,
        original_ils_price=original_ils or None,
        amount=max(1, int(amount)),
        quantity=stock,
    )


class HttpProductCatalog(ApiClient):
    """Catalog backed by ``GET /allproducts``."""

    async def get_products(self, ids: Iterable[str]) -> dict[str, dict[str, Any]]:
        wanted = {item_key(product_id) for product_id in ids}
        data = await self.request_json("GET", ALL_PRODUCTS_PATH)
        products: dict[str, dict[str, Any]] = {}
        if not isinstance(data, list):
            return products
        for product in data:
            if not isinstance(product, dict):
                continue
            key = item_key(product.get("id", ""))
            if key in wanted:
                products[key] = product
        return products
