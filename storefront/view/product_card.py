"""Reading products back out of rendered product cards."""
from __future__ import annotations

from storefront.domain.cart import ProductRef

from .dom import Element

CARD_SELECTOR = ".item-container"
ADD_BUTTON_SELECTOR = ".add-to-cart-btn"


def product_from_card(card: Element) -> ProductRef:
    """Build the add-to-cart payload from a ``.item-container`` element."""
    image = card.query(".front-image")
    title = card.query(".item-title")
    return ProductRef.from_dataset(
        card.dataset,
        title=title.text_content.strip() if title is not None else "",
        image=(image.get_attribute("src") or "") if image is not None else "",
        has_discount=card.query(".item-price-discounted") is not None,
    )


def card_for_event_target(target: Element | None) -> Element | None:
    """The product card whose add button was clicked, if any."""
    if target is None:
        return None
    button = target.closest(ADD_BUTTON_SELECTOR)
    if button is None:
        return None
    return button.closest(CARD_SELECTOR)
