"""
Internationalization helpers for the storefront.

Supports English (eng) and Hebrew (heb) labels and USD/ILS price formatting.

Usage:
    from storefront.core.i18n import _, format_currency, document_attributes

    title = _("cart_title", "heb")
    price = format_currency(120, "ils")  # '₪120'
"""
from __future__ import annotations

from typing import Any

from storefront.domain.locale import Currency, Language

DEFAULT_LANGUAGE = Language.ENGLISH
DEFAULT_CURRENCY = Currency.USD

SUPPORTED_LANGUAGES = tuple(item.value for item in Language)
SUPPORTED_CURRENCIES = tuple(item.value for item in Currency)

CURRENCY_SYMBOLS = {
    Currency.USD: "$",
    Currency.ILS: "₪",
}

TEXTS: dict[str, dict[str, str]] = {
    "eng": {
        "home": "Home",
        "shop": "Shop ▾",
        "necklaces": "Necklaces",
        "crochet_necklaces": "Crochet Necklaces",
        "hoops": "Hoop Earrings",
        "dangle": "Dangle Earrings",
        "bracelets": "Bracelets",
        "unisex": "Unisex Jewelry",
        "workshop": "Jewelry Workshop",
        "about": "About",
        "contact": "Contact Me",
        "policies": "Shipping & Cancellation Policy",
        "rights": "© 2024 Tamar Kfir Jewelry. All Rights Reserved.",
        "cart_icon_alt": "shopping cart icon",
        "currency": "Currency",
        "usd": "USD",
        "ils": "ILS",
        "sort_by": "Sort by:",
        "low_to_high": "Price (Low to High)",
        "high_to_low": "Price (High to Low)",
        "cart_title": "Your Cart",
        "cart_empty": "Your Cart Is Empty",
        "delete_all": "Delete All",
        "summary_title": "Order Summary",
        "check_me_out": "Check Me Out With:",
        "total": "Total",
        "items_count": "Items: {count}",
        "remove": "Remove",
    },
    "heb": {
        "home": "בית",
        "shop": "חנות ▾",
        "necklaces": "שרשראות",
        "crochet_necklaces": "שרשראות סרוגות",
        "hoops": "עגילי חישוק",
        "dangle": "עגילים תלויים",
        "bracelets": "צמידים",
        "unisex": "תכשיטי יוניסקס",
        "workshop": "סדנאת תכשיטים",
        "about": "אודות",
        "contact": "צרו קשר",
        "policies": "מדיניות משלוחים וביטולים",
        "rights": "© 2024 Tamar Kfir Jewelry. כל הזכויות שמורות.",
        "cart_icon_alt": "",
        "currency": "מטבע",
        "usd": "דולר",
        "ils": "שקל",
        "sort_by": "מיין לפי:",
        "low_to_high": "מחיר (מנמוך לגבוה)",
        "high_to_low": "מחיר (מגבוה לנמוך)",
        "cart_title": "העגלה שלי",
        "cart_empty": "עגלת הקניות שלך ריקה",
        "delete_all": "מחק הכל",
        "summary_title": "סיכום הזמנה",
        "check_me_out": "שלם באמצעות:",
        "total": "סה״כ",
        "items_count": "פריטים: {count}",
        "remove": "הסר",
    },
}


def resolve_language(lang: Language | str | None) -> Language:
    """Parse a language value, falling back to English."""
    if isinstance(lang, Language):
        return lang
    return Language.normalize(lang) or DEFAULT_LANGUAGE


def resolve_currency(currency: Currency | str | None) -> Currency:
    if isinstance(currency, Currency):
        return currency
    return Currency.normalize(currency) or DEFAULT_CURRENCY


def translate(key: str, lang: Language | str | None = None, **kwargs: Any) -> str:
    """
    Translate a label key.

    Args:
        key: Label key
        lang: Language ('eng' or 'heb'); unknown values fall back to English
        **kwargs: Formatting arguments for the translated string

    Returns:
        Translated and formatted string, or the key itself when unknown
    """
    language = resolve_language(lang)
    translated = TEXTS[language.value].get(key) or TEXTS[DEFAULT_LANGUAGE.value].get(key)

    if kwargs and translated:
        try:
            translated = translated.format(**kwargs)
        except (KeyError, ValueError):
            pass

    return translated or key


# Shorthand alias
_ = translate


def document_attributes(lang: Language | str | None) -> tuple[str, str]:
    """Return the ``(lang, dir)`` pair for the document element."""
    if resolve_language(lang) is Language.HEBREW:
        return "he", "rtl"
    return "en", "ltr"


def currency_symbol(currency: Currency | str | None) -> str:
    return CURRENCY_SYMBOLS[resolve_currency(currency)]


def format_number(n: int | float) -> str:
    return f"{n:,}"


def format_currency(amount: int | float, currency: Currency | str | None) -> str:
    """Format a price with its currency symbol in front."""
    return f"{currency_symbol(currency)}{format_number(amount)}"


def get_available_languages() -> list[dict[str, str]]:
    """Get list of available languages with their button labels."""
    return [
        {"code": Language.HEBREW.value, "name": "עב", "class": "heb-lng"},
        {"code": Language.ENGLISH.value, "name": "EN", "class": "eng-lng"},
    ]
