"""Locale preference types and the hydration auto-fill state machine."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping


class Language(str, Enum):
    """Supported interface languages (storage values)."""

    ENGLISH = "eng"
    HEBREW = "heb"

    @classmethod
    def normalize(cls, value: object) -> Language | None:
        """Case-insensitive parse; anything else is treated as unset."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for item in cls:
            if item.value == text:
                return item
        return None


class Currency(str, Enum):
    """Supported display currencies (storage values)."""

    USD = "usd"
    ILS = "ils"

    @classmethod
    def normalize(cls, value: object) -> Currency | None:
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().lower()
        for item in cls:
            if item.value == text:
                return item
        return None


@dataclass(frozen=True, slots=True)
class LocalePreference:
    language: Language
    currency: Currency


@dataclass(frozen=True, slots=True)
class BrowserSignals:
    """Runtime hints used for the first-visit guess."""

    language_tag: str = ""
    timezone: str = ""


class FieldState(str, Enum):
    """Lifecycle of one locale field with respect to hydration."""

    PENDING = "pending"  # unset at bootstrap, hydration may override
    APPLIED = "applied"  # hydration wrote it
    SKIPPED = "skipped"  # user-set, or hydration finished without applying


LOCALE_FIELDS = ("language", "currency")

ALLOWED_TRANSITIONS: Mapping[FieldState, frozenset[FieldState]] = {
    FieldState.PENDING: frozenset({FieldState.APPLIED, FieldState.SKIPPED}),
    FieldState.APPLIED: frozenset({FieldState.SKIPPED}),
    FieldState.SKIPPED: frozenset(),
}


class AutoFillState:
    """Per-field auto-fill markers, consumed once by hydration.

    Fields start ``SKIPPED`` so a resolver that never bootstrapped does not
    hydrate. An explicit user choice always moves a field to ``SKIPPED``.
    """

    def __init__(self) -> None:
        self._states: dict[str, FieldState] = {name: FieldState.SKIPPED for name in LOCALE_FIELDS}

    def reset(self, *, language_missing: bool, currency_missing: bool) -> None:
        """Start a new page lifetime from the bootstrap findings."""
        self._states["language"] = FieldState.PENDING if language_missing else FieldState.SKIPPED
        self._states["currency"] = FieldState.PENDING if currency_missing else FieldState.SKIPPED

    def state(self, field: str) -> FieldState:
        return self._states[field]

    def is_pending(self, field: str) -> bool:
        return self._states[field] is FieldState.PENDING

    def pending_fields(self) -> tuple[str, ...]:
        return tuple(name for name in LOCALE_FIELDS if self._states[name] is FieldState.PENDING)

    def transition(self, field: str, target: FieldState) -> bool:
        """Move ``field`` to ``target`` if the matrix allows it."""
        current = self._states[field]
        if current is target:
            return True
        if target not in ALLOWED_TRANSITIONS[current]:
            return False
        self._states[field] = target
        return True

    def mark_user_set(self, field: str) -> None:
        self.transition(field, FieldState.SKIPPED)

    def finish(self) -> None:
        """Nothing stays pending after hydration, whatever its outcome."""
        for name in self.pending_fields():
            self._states[name] = FieldState.SKIPPED

    # Legacy flag view, handy in logs and tests.
    @property
    def lang_was_missing(self) -> bool:
        return self.is_pending("language")

    @property
    def currency_was_missing(self) -> bool:
        return self.is_pending("currency")
