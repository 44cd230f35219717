"""Cart domain types and price math."""
from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping

from storefront.core.constants import DEFAULT_DISCOUNT_LABEL

from .locale import Currency

ItemId = int | str


def js_round(value: float) -> int:
    """Round half up, matching the prices already stored by the web front end."""
    return int(math.floor(value + 0.5))


def _to_price(value: Any, default: int = 0) -> int:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number == 0:
        return default
    return js_round(number)


def _optional_price(value: Any) -> int | None:
    if value is None or value == "":
        return None
    price = _to_price(value, default=0)
    return price or None


def normalize_item_id(value: Any) -> ItemId:
    """Numeric ids become ints; anything else stays a string."""
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, int):
        return value
    text = str(value).strip()
    try:
        return int(text)
    except ValueError:
        try:
            number = float(text)
        except ValueError:
            return text
        return int(number) if number.is_integer() else text


def item_key(value: Any) -> str:
    """Comparison key so that ``5`` and ``"5"`` address the same product."""
    return str(normalize_item_id(value))


def price_after_discount(base: int | float, pct: int | float | None) -> int | float:
    """Apply a percentage discount; non-positive percentages leave ``base`` untouched."""
    if not pct or pct <= 0:
        return base
    return js_round(base * (1 - pct / 100))


@dataclass(frozen=True, slots=True)
class DiscountSettings:
    percentage: float = 0
    active: bool = False
    label: str = DEFAULT_DISCOUNT_LABEL

    @property
    def applies(self) -> bool:
        return self.active and self.percentage > 0


def display_price(item: CartItem, currency: Currency, discount: DiscountSettings | None = None) -> int:
    """Price shown for ``item`` in ``currency``.

    An active global discount is recomputed from the original price; without
    one the add-time price is shown.
    """
    if discount is not None and discount.applies:
        return int(price_after_discount(item.original_price_for(currency), discount.percentage))
    return item.price_for(currency)


@dataclass(frozen=True, slots=True)
class ProductRef:
    """What the cart reads from a product card when the user clicks add."""

    id: ItemId
    title: str = ""
    image: str = ""
    usd_price: int = 0
    ils_price: int = 0
    original_usd_price: int | None = None
    original_ils_price: int | None = None
    stock: int = 0
    currency: str = "ils"
    has_discount: bool = False

    @classmethod
    def from_dataset(
        cls,
        dataset: Mapping[str, Any],
        *,
        title: str = "",
        image: str = "",
        has_discount: bool = False,
    ) -> ProductRef:
        usd_price = _to_price(dataset.get("usd-price"))
        ils_price = _to_price(dataset.get("ils-price"))
        try:
            stock = int(float(dataset.get("quant") or 0))
        except (TypeError, ValueError, OverflowError):
            stock = 0
        return cls(
            id=normalize_item_id(dataset.get("id", "")),
            title=title,
            image=image,
            usd_price=usd_price,
            ils_price=ils_price,
            original_usd_price=_to_price(dataset.get("original-usd-price"), usd_price),
            original_ils_price=_to_price(dataset.get("original-ils-price"), ils_price),
            stock=stock,
            currency=str(dataset.get("currency") or "ils"),
            has_discount=has_discount,
        )


@dataclass
class CartItem:
    """Single entry in the cart."""

    id: ItemId
    title: str
    image: str
    usd_price: int
    ils_price: int
    original_usd_price: int | None = None
    original_ils_price: int | None = None
    discounted_price: int | None = None
    amount: int = 1
    quantity: int = 0
    currency: str = "ils"

    @property
    def key(self) -> str:
        return item_key(self.id)

    @classmethod
    def from_product(cls, product: ProductRef) -> CartItem:
        is_usd = product.currency in ("$", Currency.USD.value)
        current = product.usd_price if is_usd else product.ils_price
        return cls(
            id=normalize_item_id(product.id),
            title=product.title,
            image=product.image,
            usd_price=product.usd_price,
            ils_price=product.ils_price,
            original_usd_price=product.original_usd_price or product.usd_price or None,
            original_ils_price=product.original_ils_price or product.ils_price or None,
            discounted_price=current if product.has_discount else None,
            amount=1,
            quantity=product.stock,
            currency=product.currency,
        )

    def price_for(self, currency: Currency) -> int:
        if currency is Currency.USD:
            return self.usd_price
        return self.ils_price

    def original_price_for(self, currency: Currency) -> int:
        if currency is Currency.USD:
            return self.original_usd_price or self.usd_price
        return self.original_ils_price or self.ils_price

    def to_dict(self) -> dict[str, Any]:
        is_usd = self.currency in ("$", Currency.USD.value)
        return {
            "id": self.id,
            "title": self.title,
            "image": self.image,
            "price": self.usd_price if is_usd else self.ils_price,
            "usdPrice": int(self.usd_price),
            "ilsPrice": int(self.ils_price),
            "originalUsdPrice": self.original_usd_price,
            "originalIlsPrice": self.original_ils_price,
            "discountedPrice": self.discounted_price,
            "amount": int(self.amount),
            "quantity": int(self.quantity),
            "currency": self.currency,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> CartItem:
        legacy_price = data.get("price")
        try:
            amount = int(data.get("amount") or 1)
        except (TypeError, ValueError, OverflowError):
            amount = 1
        try:
            quantity = int(float(data.get("quantity") or 0))
        except (TypeError, ValueError, OverflowError):
            quantity = 0
        return cls(
            id=normalize_item_id(data.get("id", "")),
            title=str(data.get("title") or ""),
            image=str(data.get("image") or ""),
            usd_price=_to_price(data.get("usdPrice"), _to_price(legacy_price)),
            ils_price=_to_price(data.get("ilsPrice"), _to_price(legacy_price)),
            original_usd_price=_optional_price(data.get("originalUsdPrice")),
            original_ils_price=_optional_price(data.get("originalIlsPrice")),
            discounted_price=_optional_price(data.get("discountedPrice")),
            amount=max(1, amount),
            quantity=quantity,
            currency=str(data.get("currency") or "ils"),
        )
