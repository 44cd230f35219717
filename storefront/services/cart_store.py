"""Cart state owned by either the persistent store (guest) or the remote API.

The backend is picked per call from the presence of the ``auth-token``
credential in the persistent store. Guest carts are mirrored to the store
after every mutation; signed-in carts are a read-through projection of the
server's ``productId -> amount`` map.
"""
from __future__ import annotations

import json
from typing import Any, Iterable, Iterator

from logging_config import logger
from storefront.core.constants import AUTH_TOKEN_KEY, CART_KEY
from storefront.core.exceptions import GatewayException, StorageException
from storefront.core.sentry_integration import capture_exception
from storefront.core.storage import PersistentStore
from storefront.domain.cart import (
    CartItem,
    DiscountSettings,
    ItemId,
    ProductRef,
    display_price,
    item_key,
    price_after_discount,
)
from storefront.domain.locale import Currency
from storefront.integrations.cart_gateway import RemoteCartGateway
from storefront.integrations.catalog import ProductCatalog, cart_item_from_product

from .discount_service import DiscountService


class CartStore:
    """In-memory cart keyed by product id, insertion ordered."""

    def __init__(
        self,
        store: PersistentStore,
        gateway: RemoteCartGateway,
        discounts: DiscountService,
        catalog: ProductCatalog | None = None,
    ):
        self._store = store
        self._gateway = gateway
        self._discounts = discounts
        self._catalog = catalog
        self._items: dict[str, CartItem] = {}

    # ------------------------------------------------------------------
    # Backend selection
    # ------------------------------------------------------------------

    @property
    def credential(self) -> str | None:
        token = self._store.get(AUTH_TOKEN_KEY)
        if token is None:
            return None
        token = token.strip()
        return token or None

    @property
    def is_authenticated(self) -> bool:
        return self.credential is not None

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def items(self) -> list[CartItem]:
        return list(self._items.values())

    def __iter__(self) -> Iterator[CartItem]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)

    def get(self, item_id: ItemId) -> CartItem | None:
        return self._items.get(item_key(item_id))

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _save(self) -> None:
        self._write_guest_blob(self._items.values())

    def _write_guest_blob(self, items: Iterable[CartItem]) -> None:
        serialized = json.dumps([item.to_dict() for item in items], ensure_ascii=False)
        try:
            self._store.set(CART_KEY, serialized)
        except StorageException as exc:
            logger.error("Failed to save cart to persistent store, cart not saved: %s", exc)

    def _read_guest_blob(self) -> list[CartItem]:
        raw = self._store.get(CART_KEY)
        if not raw:
            return []
        try:
            data = json.loads(raw)
        except ValueError as exc:
            logger.warning("Stored cart is not valid JSON, starting empty: %s", exc)
            return []
        if not isinstance(data, list):
            logger.warning("Stored cart is %s, not a list; starting empty", type(data).__name__)
            return []

        items: list[CartItem] = []
        for raw_item in data:
            if not isinstance(raw_item, dict):
                logger.warning("Skipping malformed cart entry: %r", raw_item)
                continue
            items.append(CartItem.from_dict(raw_item))
        return items

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def add(self, product: ProductRef) -> CartItem | None:
        """Add one unit of ``product``.

        Guest carts upsert by product id and persist. Signed-in carts only
        send the remote add; the entry shows up on the next ``load()``.
        """
        token = self.credential
        if token is None:
            key = item_key(product.id)
            existing = self._items.get(key)
            if existing is not None:
                existing.amount += 1
                item = existing
            else:
                item = CartItem.from_product(product)
                self._items[key] = item
            self._save()
            return item

        try:
            await self._gateway.add(token, product.id)
        except GatewayException as exc:
            logger.error("Failed to add item %s to remote cart: %s", product.id, exc)
            capture_exception(exc, cart={"op": "add", "item_id": str(product.id)})
        return None

    async def remove(self, item_id: ItemId) -> bool:
        """Drop the entry for ``item_id``; unknown ids are a no-op.

        The remote endpoint takes one unit per call, so a signed-in entry is
        removed unit by unit. If a call fails the entry stays with the units
        the server still holds.
        """
        key = item_key(item_id)
        item = self._items.get(key)
        if item is None:
            logger.info("Remove ignored, %s is not in the cart", item_id)
            return False

        token = self.credential
        if token is None:
            del self._items[key]
            self._save()
            return True

        for _ in range(item.amount):
            try:
                await self._gateway.remove(token, item.id)
            except GatewayException as exc:
                logger.error("Failed to remove item %s from remote cart: %s", item.id, exc)
                capture_exception(exc, cart={"op": "remove", "item_id": str(item.id)})
                return True
            item.amount -= 1
        self._items.pop(key, None)
        return True

    async def clear(self) -> None:
        self._items.clear()
        token = self.credential
        if token is None:
            self._save()
            return

        try:
            await self._gateway.clear(token)
        except GatewayException as exc:
            logger.error("Failed to clear remote cart: %s", exc)
            capture_exception(exc, cart={"op": "clear"})

    # ------------------------------------------------------------------
    # Loading and counting
    # ------------------------------------------------------------------

    async def load(self) -> list[CartItem]:
        """Rebuild the in-memory cart from its owning backend."""
        self._items.clear()
        token = self.credential
        if token is None:
            for item in self._read_guest_blob():
                existing = self._items.get(item.key)
                if existing is not None:
                    existing.amount += item.amount
                else:
                    self._items[item.key] = item
            return self.items

        try:
            amounts = await self._gateway.fetch(token)
        except GatewayException as exc:
            logger.error("Failed to load remote cart: %s", exc)
            return self.items

        wanted = {product_id: amount for product_id, amount in amounts.items() if amount > 0}
        if not wanted:
            return self.items
        if self._catalog is None:
            logger.warning("No product catalog configured; remote cart has %d entries", len(wanted))
            return self.items

        try:
            products = await self._catalog.get_products(wanted.keys())
        except GatewayException as exc:
            logger.error("Failed to look up products for remote cart: %s", exc)
            return self.items

        for product_id, amount in wanted.items():
            product = products.get(item_key(product_id))
            if product is None:
                logger.warning("Product %s from remote cart is not in the catalog", product_id)
                continue
            item = cart_item_from_product(product, amount)
            self._items[item.key] = item
        return self.items

    def local_count(self) -> int:
        return sum(item.amount for item in self._items.values())

    async def count(self) -> int:
        """Number of units in the cart.

        Signed-in carts ask the server again instead of trusting the
        in-memory projection.
        """
        token = self.credential
        if token is None:
            return self.local_count()

        try:
            amounts = await self._gateway.fetch(token)
        except GatewayException as exc:
            logger.warning("Failed to count remote cart, using local projection: %s", exc)
            return self.local_count()
        return sum(amount for amount in amounts.values() if amount > 0)

    # ------------------------------------------------------------------
    # Prices
    # ------------------------------------------------------------------

    async def discount(self) -> DiscountSettings:
        return await self._discounts.get()

    price_after_discount = staticmethod(price_after_discount)

    def total(self, currency: Currency, discount: DiscountSettings | None = None) -> int:
        return sum(display_price(item, currency, discount) * item.amount for item in self._items.values())

    def checkout_items(self) -> list[dict[str, Any]]:
        """Cart entries priced in USD for the payment provider."""
        checkout: list[dict[str, Any]] = []
        for item in self._items.values():
            data = item.to_dict()
            is_usd = item.currency in ("$", Currency.USD.value)
            data.update(
                {
                    "price": item.usd_price,
                    "originalPrice": item.original_usd_price or item.usd_price,
                    "discountedPrice": item.discounted_price if is_usd else None,
                    "currency": "$",
                }
            )
            checkout.append(data)
        return checkout

    # ------------------------------------------------------------------
    # Credential transitions
    # ------------------------------------------------------------------

    async def login(self, token: str) -> int:
        """Store the credential and merge the guest cart into the remote one.

        The merge runs only on the guest to signed-in transition: each guest
        unit becomes one remote add, so amounts are summed per product id.
        Units the server did not accept stay in the guest blob.
        Returns the number of units merged.
        """
        token = token.strip()
        if not token:
            raise ValueError("token must not be empty")

        was_guest = not self.is_authenticated
        guest_items = self._read_guest_blob() if was_guest else []
        self._store.set(AUTH_TOKEN_KEY, token)
        if not was_guest:
            return 0

        merged = 0
        leftovers: list[CartItem] = []
        for item in guest_items:
            sent = 0
            try:
                while sent < item.amount:
                    await self._gateway.add(token, item.id)
                    sent += 1
            except GatewayException as exc:
                logger.error("Failed to merge guest item %s into remote cart: %s", item.id, exc)
                capture_exception(exc, cart={"op": "merge", "item_id": str(item.id)})
            merged += sent
            if sent < item.amount:
                item.amount -= sent
                leftovers.append(item)

        if leftovers:
            logger.warning("Keeping %d unmerged entries in the guest cart", len(leftovers))
            self._write_guest_blob(leftovers)
        else:
            self._store.remove(CART_KEY)
        logger.info("Merged %d guest cart units into remote cart", merged)
        await self.load()
        return merged

    def logout(self) -> None:
        """Drop the credential; the cart falls back to the guest store."""
        self._store.remove(AUTH_TOKEN_KEY)
        self._items.clear()
