"""Services package."""

from .cart_store import CartStore
from .discount_service import DiscountService
from .locale_resolver import LocaleResolver, guess_locale

__all__ = [
    "CartStore",
    "DiscountService",
    "LocaleResolver",
    "guess_locale",
]
