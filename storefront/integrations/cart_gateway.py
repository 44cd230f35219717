"""Remote cart API used when the visitor is signed in."""
from __future__ import annotations

from typing import Any

from logging_config import logger
from storefront.core.constants import (
    ADD_TO_CART_PATH,
    AUTH_HEADER,
    GET_CART_PATH,
    REMOVE_ALL_PATH,
    REMOVE_FROM_CART_PATH,
)
from storefront.core.exceptions import GatewayException
from storefront.domain.cart import ItemId

from .http import ApiClient


class RemoteCartGateway(ApiClient):
    """Thin request layer over the cart endpoints.

    Every call needs the opaque credential; no client-side timeout is set,
    the transport defaults apply. The write endpoints answer with plain text
    acknowledgements, so only their status is checked.
    """

    async def _send(self, path: str, token: str, payload: Any = None) -> None:
        await self.request("POST", path, headers={AUTH_HEADER: token}, payload=payload)

    async def add(self, token: str, item_id: ItemId) -> None:
        await self._send(ADD_TO_CART_PATH, token, {"itemId": item_id})

    async def remove(self, token: str, item_id: ItemId) -> None:
        """Take one unit of ``item_id`` off the server cart."""
        await self._send(REMOVE_FROM_CART_PATH, token, {"itemId": item_id})

    async def clear(self, token: str) -> None:
        await self._send(REMOVE_ALL_PATH, token)

    async def fetch(self, token: str) -> dict[str, int]:
        """Return the server's ``productId -> amount`` map."""
        data = await self.request_json("POST", GET_CART_PATH, headers={AUTH_HEADER: token})
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise GatewayException(f"Unexpected cart payload type: {type(data).__name__}")

        amounts: dict[str, int] = {}
        for product_id, amount in data.items():
            try:
                amounts[str(product_id)] = int(amount)
            except (TypeError, ValueError, OverflowError):
                logger.warning("Skipping cart entry %s with amount %r", product_id, amount)
        return amounts
