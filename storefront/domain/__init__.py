"""Domain package."""

from .cart import CartItem, DiscountSettings, ProductRef, item_key, price_after_discount
from .locale import (
    AutoFillState,
    BrowserSignals,
    Currency,
    FieldState,
    Language,
    LocalePreference,
)

__all__ = [
    # Cart
    "CartItem",
    "DiscountSettings",
    "ProductRef",
    "item_key",
    "price_after_discount",
    # Locale
    "AutoFillState",
    "BrowserSignals",
    "Currency",
    "FieldState",
    "Language",
    "LocalePreference",
]
