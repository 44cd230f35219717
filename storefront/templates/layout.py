"""Element templates for the language-dependent page regions."""
from __future__ import annotations

from typing import Sequence

from storefront.core.i18n import _, format_currency, get_available_languages, resolve_language
from storefront.domain.locale import Currency, Language
from storefront.view.dom import Element, el

CART_ICON = "/imgs/svgs/cart-shopping-solid.svg"
DELETE_ICON = "/imgs/svgs/x-solid.svg"

CATEGORY_LINKS = (
    ("necklace", "necklaces", "/html/categories/necklaces.html"),
    ("crochet-necklace", "crochet_necklaces", "/html/categories/crochetNecklaces.html"),
    ("hoops", "hoops", "/html/categories/hoops.html"),
    ("dangle", "dangle", "/html/categories/dangle.html"),
    ("bracelets", "bracelets", "/html/categories/bracelets.html"),
    ("unisex", "unisex", "/html/categories/unisex.html"),
)

FOOTER_COLUMNS = (
    (
        "footer-left-column",
        (
            ("home", "/"),
            ("necklaces", "./html/categories/necklaces.html"),
            ("crochet_necklaces", "./html/categories/crochetNecklaces.html"),
            ("hoops", "./html/categories/hoops.html"),
            ("dangle", "./html/categories/dangle.html"),
            ("bracelets", "./html/categories/bracelets.html"),
        ),
    ),
    (
        "footer-middle-column",
        (
            ("policies", "./html/policies.html"),
            ("contact", "./html/contact-me.html"),
        ),
    ),
    (
        "footer-right-column",
        (
            ("workshop", "./html/jewelry-workshop.html"),
            ("about", "./html/about.html"),
        ),
    ),
)


def _nav_tab(label: str, href: str, extra_class: str = "") -> Element:
    classes = f"main-nav-tab {extra_class}".strip()
    return el("li", {"class": classes}, el("a", {"class": "attrib", "href": href}, text=label))


def render_menu(lang: Language | str, cart_count: int = 0) -> list[Element]:
    """Menu list, cart badge and language buttons."""
    language = resolve_language(lang)
    categories = el(
        "ul",
        {"class": "categories-list"},
        *(
            el(
                "li",
                {"class": f"category-item category-item--{slug}"},
                el("a", {"class": "attrib", "href": href}, text=_(key, language)),
            )
            for slug, key, href in CATEGORY_LINKS
        ),
    )
    shop_tab = el(
        "li",
        {"class": "main-nav-tab categories-tab"},
        el("a", {"class": "attrib", "href": "#"}, text=_("shop", language)),
        categories,
    )
    cart_link = el(
        "a",
        {"class": "attrib-cart", "href": "/html/cart.html"},
        el(
            "div",
            {"class": "cart-container"},
            el("img", {"src": CART_ICON, "alt": _("cart_icon_alt", language), "class": "shoppingcart-svg"}),
            el("span", {"class": "cart-number"}, text=str(cart_count)),
        ),
    )
    menu_list = el(
        "ul",
        {"class": f"menu__ul ul-{language.value}"},
        _nav_tab(_("home", language), "/index.html"),
        shop_tab,
        _nav_tab(_("workshop", language), "/html/jewelry-workshop.html"),
        _nav_tab(_("about", language), "/html/about.html"),
        _nav_tab(_("contact", language), "/html/contact-me.html", "contact"),
        cart_link,
    )
    buttons = el(
        "div",
        {"class": "languages-container"},
        *(
            el("button", {"class": option["class"], "data-lang": option["code"]}, text=option["name"])
            for option in get_available_languages()
        ),
    )
    return [menu_list, buttons]


def render_footer(lang: Language | str) -> list[Element]:
    language = resolve_language(lang)
    container_attrs = {"class": "columns-container"}
    if language is Language.HEBREW:
        container_attrs = {"class": "columns-container columns-container_heb", "style": "direction:rtl;"}

    columns = el(
        "div",
        container_attrs,
        *(
            el(
                "div",
                {"class": column_class},
                *(el("a", {"class": "attrib-footer", "href": href}, text=_(key, language)) for key, href in links),
            )
            for column_class, links in FOOTER_COLUMNS
        ),
    )
    rights = el("div", {"class": "rights-container"}, el("span", {"class": "rights-text"}, text=_("rights", language)))
    return [columns, rights]


def _option(value: str, label: str, css_class: str, selected: bool = False) -> Element:
    attrs = {"value": value, "class": css_class}
    if selected:
        attrs["selected"] = "selected"
    return el("option", attrs, text=label)


def render_currency_selector(lang: Language | str, current: Currency | None = None) -> list[Element]:
    """Currency and sort selects; both start with the ``default`` sentinel option."""
    language = resolve_language(lang)
    currency_select = el(
        "select",
        {"name": "currency", "id": "currency", "value": "default"},
        _option("default", _("currency", language), "currency-option"),
        *(
            _option(item.value, _(item.value, language), "currency-option", selected=item is current)
            for item in Currency
        ),
    )
    sort_select = el(
        "select",
        {"name": "sort", "id": "sort", "value": "default"},
        _option("default", _("sort_by", language), "sort-option"),
        _option("low-to-high", _("low_to_high", language), "sort-option"),
        _option("high-to-low", _("high_to_low", language), "sort-option"),
    )
    return [currency_select, sort_select]


def render_cart_items(rows: Sequence[tuple[str, str, str, int, int]], currency: Currency, lang: Language | str) -> list[Element]:
    """One ``.cart-item`` per row of ``(id, title, image, unit_price, amount)``."""
    language = resolve_language(lang)
    nodes = []
    for item_id, title, image, unit_price, amount in rows:
        nodes.append(
            el(
                "div",
                {"class": "cart-item", "id": item_id, "data-amount": amount},
                el("img", {"class": "cart-img", "src": image, "alt": title}),
                el("div", {"class": "cart-title"}, text=title),
                el("div", {"class": "cart-price", "data-price": unit_price}, text=format_currency(unit_price, currency)),
                el("div", {"class": "cart-amount"}, text=str(amount)),
                el(
                    "button",
                    {"class": "delete-item", "aria-label": _("remove", language)},
                    el("img", {"src": DELETE_ICON, "alt": ""}),
                ),
            )
        )
    return nodes


def render_summary(count: int, total: int, currency: Currency, lang: Language | str) -> list[Element]:
    language = resolve_language(lang)
    return [
        el("div", {"class": "summary-count"}, text=_("items_count", language, count=count)),
        el(
            "div",
            {"class": "summary-total", "data-total": total},
            text=f"{_('total', language)}: {format_currency(total, currency)}",
        ),
    ]
