"""Client for the global discount settings endpoint."""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, ValidationError

from storefront.core.constants import DEFAULT_DISCOUNT_LABEL, DISCOUNT_SETTINGS_PATH
from storefront.core.exceptions import GatewayException
from storefront.domain.cart import DiscountSettings

from .http import ApiClient


class DiscountSettingsPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", allow_inf_nan=False)

    success: bool = False
    global_discount_percentage: float | None = 0
    discount_active: bool | None = False
    discount_label: str | None = None

    def to_settings(self) -> DiscountSettings:
        return DiscountSettings(
            percentage=self.global_discount_percentage or 0,
            active=bool(self.discount_active),
            label=self.discount_label or DEFAULT_DISCOUNT_LABEL,
        )


class DiscountSettingsClient(ApiClient):
    async def fetch(self) -> DiscountSettings:
        """Raises GatewayException unless the endpoint reports success."""
        data = await self.request_json("GET", DISCOUNT_SETTINGS_PATH)
        try:
            payload = DiscountSettingsPayload.model_validate(data or {})
        except ValidationError as exc:
            raise GatewayException("Invalid discount settings payload") from exc
        if not payload.success:
            raise GatewayException("Discount settings endpoint reported failure")
        return payload.to_settings()
