"""Language and currency resolution in two phases.

``bootstrap()`` runs synchronously before the first render so the page never
flashes the wrong language or direction. ``hydrate()`` runs once afterwards
in the background and lets the backend geo detection refine the values the
visitor never chose.
"""
from __future__ import annotations

from typing import Protocol

from logging_config import logger
from storefront.core.constants import (
    CURRENCY_CHANGED,
    CURRENCY_KEY,
    ISRAEL_TIMEZONE,
    LANGUAGE_CHANGED,
    LANGUAGE_KEY,
)
from storefront.core.events import EventBus, LocaleEvent
from storefront.core.exceptions import GatewayException, InvalidLocaleError, StorageException
from storefront.core.i18n import DEFAULT_CURRENCY, DEFAULT_LANGUAGE, document_attributes
from storefront.core.sentry_integration import capture_exception
from storefront.core.storage import PersistentStore
from storefront.domain.locale import (
    AutoFillState,
    BrowserSignals,
    Currency,
    FieldState,
    Language,
    LocalePreference,
)
from storefront.integrations.locale_api import LocaleDetection


class LocaleDetector(Protocol):
    async def detect(self) -> LocaleDetection: ...


class LanguageTarget(Protocol):
    def set_language_attributes(self, lang: str, direction: str) -> None: ...


def guess_locale(signals: BrowserSignals) -> LocalePreference:
    """Hebrew/ILS for Israeli browser signals, English/USD otherwise."""
    language_tag = str(signals.language_tag or "").lower()
    if language_tag.startswith("he") or signals.timezone == ISRAEL_TIMEZONE:
        return LocalePreference(Language.HEBREW, Currency.ILS)
    return LocalePreference(Language.ENGLISH, Currency.USD)


class LocaleResolver:
    def __init__(
        self,
        store: PersistentStore,
        detector: LocaleDetector,
        events: EventBus,
        signals: BrowserSignals | None = None,
        document: LanguageTarget | None = None,
    ):
        self._store = store
        self._detector = detector
        self._events = events
        self._signals = signals or BrowserSignals()
        self._document = document
        self.autofill = AutoFillState()
        self._hydrating = False

    def attach_document(self, document: LanguageTarget) -> None:
        self._document = document

    # ------------------------------------------------------------------
    # Current values
    # ------------------------------------------------------------------

    def _read(self) -> tuple[Language | None, Currency | None]:
        return (
            Language.normalize(self._store.get(LANGUAGE_KEY)),
            Currency.normalize(self._store.get(CURRENCY_KEY)),
        )

    def _write(self, key: str, value: str) -> bool:
        try:
            self._store.set(key, value)
        except StorageException as exc:
            logger.error("Failed to persist %s=%s: %s", key, value, exc)
            return False
        return True

    @property
    def language(self) -> Language:
        return self._read()[0] or DEFAULT_LANGUAGE

    @property
    def currency(self) -> Currency:
        return self._read()[1] or DEFAULT_CURRENCY

    def preference(self) -> LocalePreference:
        return LocalePreference(self.language, self.currency)

    def apply_document_language(self, language: Language | None = None) -> None:
        if self._document is None:
            return
        lang, direction = document_attributes(language or self.language)
        self._document.set_language_attributes(lang, direction)

    # ------------------------------------------------------------------
    # Phase 1
    # ------------------------------------------------------------------

    def bootstrap(self) -> LocalePreference:
        """Fill unset fields with a browser guess and apply the document language."""
        language, currency = self._read()
        language_missing = language is None
        currency_missing = currency is None

        if language_missing or currency_missing:
            guess = guess_locale(self._signals)
            if language_missing:
                self._write(LANGUAGE_KEY, guess.language.value)
            if currency_missing:
                self._write(CURRENCY_KEY, guess.currency.value)
            logger.debug(
                "Locale bootstrap filled language=%s currency=%s",
                language_missing,
                currency_missing,
            )

        self.autofill.reset(language_missing=language_missing, currency_missing=currency_missing)
        self.apply_document_language()
        return self.preference()

    # ------------------------------------------------------------------
    # Explicit user choices
    # ------------------------------------------------------------------

    def set_language(self, value: Language | str) -> Language:
        language = value if isinstance(value, Language) else Language.normalize(value)
        if language is None:
            raise InvalidLocaleError("language", value)
        self._write(LANGUAGE_KEY, language.value)
        self.autofill.mark_user_set("language")
        self.apply_document_language(language)
        return language

    async def set_currency(self, value: Currency | str) -> Currency:
        currency = value if isinstance(value, Currency) else Currency.normalize(value)
        if currency is None:
            raise InvalidLocaleError("currency", value)
        self._write(CURRENCY_KEY, currency.value)
        self.autofill.mark_user_set("currency")
        await self._events.publish(LocaleEvent(CURRENCY_CHANGED, {"currency": currency.value}))
        return currency

    # ------------------------------------------------------------------
    # Phase 2
    # ------------------------------------------------------------------

    def _apply_detection(self, detection: LocaleDetection) -> dict[str, str]:
        """Write mapped values to fields still pending. No awaits in here."""
        mapped = detection.to_preference()
        applied: dict[str, str] = {}

        if self.autofill.is_pending("language") and self._write(LANGUAGE_KEY, mapped.language.value):
            self.autofill.transition("language", FieldState.APPLIED)
            self.apply_document_language(mapped.language)
            applied["language"] = mapped.language.value

        if self.autofill.is_pending("currency") and self._write(CURRENCY_KEY, mapped.currency.value):
            self.autofill.transition("currency", FieldState.APPLIED)
            applied["currency"] = mapped.currency.value

        return applied

    async def hydrate(self) -> dict[str, str]:
        """Override still-unset fields from backend geo detection, at most once.

        Returns the fields that were applied.
        """
        if self._hydrating or not self.autofill.pending_fields():
            return {}

        self._hydrating = True
        applied: dict[str, str] = {}
        try:
            detection = await self._detector.detect()
            if detection.ok is not True:
                logger.info("Locale detection answered without ok marker; keeping defaults")
            else:
                applied = self._apply_detection(detection)
        except GatewayException as exc:
            logger.warning("Backend locale hydration failed: %s", exc)
        except Exception as exc:
            logger.error("Unexpected error during locale hydration: %s", exc)
            capture_exception(exc, locale={"phase": "hydrate"})
        finally:
            self.autofill.finish()
            self._hydrating = False

        if "language" in applied:
            await self._events.publish(LocaleEvent(LANGUAGE_CHANGED, {"language": applied["language"]}))
        if "currency" in applied:
            await self._events.publish(LocaleEvent(CURRENCY_CHANGED, {"currency": applied["currency"]}))
        return applied
