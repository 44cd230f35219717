"""Backend geo-detection endpoint client."""
from __future__ import annotations

import asyncio

from pydantic import BaseModel, ConfigDict, Field, StrictBool, ValidationError

from logging_config import logger
from storefront.core.constants import LOCALE_FALLBACK_PATH, LOCALE_PRIMARY_PATH, LOCALE_TIMEOUT_MS
from storefront.core.exceptions import GatewayException
from storefront.domain.locale import Currency, Language, LocalePreference

from .http import ApiClient


class LocaleDetection(BaseModel):
    """Payload of ``GET /api/locale``."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    ok: StrictBool = False
    lang: str | None = None
    currency: str | None = None
    app_lang: str | None = Field(None, alias="appLang")
    app_currency: str | None = Field(None, alias="appCurrency")

    def to_preference(self) -> LocalePreference:
        """Map to the app enums, preferring explicit app-native keys."""
        language = Language.normalize(self.app_lang)
        if language is None:
            iso_lang = str(self.lang or "").lower()
            language = Language.HEBREW if iso_lang.startswith("he") else Language.ENGLISH

        currency = Currency.normalize(self.app_currency)
        if currency is None:
            currency = Currency.ILS if str(self.currency or "").upper() == "ILS" else Currency.USD

        return LocalePreference(language=language, currency=currency)


class LocaleDetectionClient(ApiClient):
    """Asks the backend which locale fits the visitor."""

    def __init__(self, base_url: str, session=None, timeout_ms: int = LOCALE_TIMEOUT_MS):
        super().__init__(base_url, session)
        self._timeout = timeout_ms / 1000

    async def _get_payload(self, path: str) -> dict:
        data = await self.request_json("GET", path)
        if not isinstance(data, dict):
            raise GatewayException(f"Unexpected locale payload from {path}")
        return data

    async def _primary_then_fallback(self) -> dict:
        try:
            return await self._get_payload(LOCALE_PRIMARY_PATH)
        except GatewayException as exc:
            logger.debug("Locale primary path failed, trying fallback: %s", exc)
            return await self._get_payload(LOCALE_FALLBACK_PATH)

    async def detect(self) -> LocaleDetection:
        """Fetch the detection result within one shared timeout.

        Raises:
            GatewayException: both paths failed, the deadline passed, or the
                payload could not be parsed.
        """
        try:
            data = await asyncio.wait_for(self._primary_then_fallback(), timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise GatewayException(f"Locale detection timed out after {self._timeout:.3f}s") from exc

        try:
            return LocaleDetection.model_validate(data)
        except ValidationError as exc:
            raise GatewayException(f"Invalid locale payload: {exc.error_count()} errors") from exc
