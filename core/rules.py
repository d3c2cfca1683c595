"""Validation rule descriptors evaluated against a field store snapshot.

Each rule is bound to one field (or a small set of fields) and evaluates to
``None`` or a single :class:`FormError`. Rules never mutate the snapshot they
inspect, which keeps them trivially composable into per-section catalogs.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import ClassVar, Mapping, Union

from core.derived import calculate_age, char_count, parse_iso_date, word_count

EMAIL_PATTERN = re.compile(r"\S+@\S+\.\S+")
ISO_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


@dataclass(frozen=True)
class FormError:
    """A single violation surfaced next to ``field``."""

    field: str
    message: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message}


def _text(fields: Mapping[str, object], name: str) -> str:
    value = fields.get(name)
    return value if isinstance(value, str) else ""


@dataclass(frozen=True)
class RequiredRule:
    """Text must be non-empty after trimming whitespace."""

    kind: ClassVar[str] = "required"

    field: str
    message: str

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        if _text(fields, self.field).strip():
            return None
        return FormError(self.field, self.message)


@dataclass(frozen=True)
class PatternRule:
    """Text must match ``pattern``; blank input may carry its own message."""

    kind: ClassVar[str] = "format"

    field: str
    pattern: re.Pattern[str]
    message: str
    required_message: str | None = None

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        value = _text(fields, self.field)
        if self.required_message is not None and not value.strip():
            return FormError(self.field, self.required_message)
        if self.pattern.search(value):
            return None
        return FormError(self.field, self.message)


@dataclass(frozen=True)
class AgeRangeRule:
    """Date of birth must be present and imply an age within the bounds."""

    kind: ClassVar[str] = "range"

    field: str
    minimum: int
    maximum: int
    message: str
    required_message: str
    invalid_message: str = "Please enter a valid date of birth (YYYY-MM-DD)."

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        raw = _text(fields, self.field)
        if not raw.strip():
            return FormError(self.field, self.required_message)
        dob = parse_iso_date(raw)
        if dob is None:
            return FormError(self.field, self.invalid_message)
        age = calculate_age(dob, today)
        if self.minimum <= age <= self.maximum:
            return None
        return FormError(self.field, self.message)


@dataclass(frozen=True)
class ConfirmRule:
    """Boolean affirmation must be exactly ``True``."""

    kind: ClassVar[str] = "boolean-confirm"

    field: str
    message: str

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        if fields.get(self.field) is True:
            return None
        return FormError(self.field, self.message)


@dataclass(frozen=True)
class WordCountRule:
    """Word count must fall within ``[minimum, maximum]`` inclusive."""

    kind: ClassVar[str] = "word-count"

    field: str
    minimum: int
    maximum: int
    message: str

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        count = word_count(_text(fields, self.field))
        if self.minimum <= count <= self.maximum:
            return None
        return FormError(self.field, self.message)


@dataclass(frozen=True)
class CharCountRule:
    """Text must be non-empty and respect the character bounds.

    ``minimum`` is checked against the trimmed text, ``maximum`` against the
    raw text as typed.
    """

    kind: ClassVar[str] = "char-count"

    field: str
    required_message: str
    maximum: int | None = None
    too_long_message: str = ""
    minimum: int = 1
    too_short_message: str = ""

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        value = _text(fields, self.field)
        trimmed = value.strip()
        if not trimmed:
            return FormError(self.field, self.required_message)
        if char_count(trimmed) < self.minimum:
            return FormError(self.field, self.too_short_message or self.required_message)
        if self.maximum is not None and char_count(value) > self.maximum:
            return FormError(self.field, self.too_long_message or self.required_message)
        return None


@dataclass(frozen=True)
class MediaRule:
    """Media slot must hold an encoded payload."""

    kind: ClassVar[str] = "media-presence"

    field: str
    message: str

    @property
    def fields(self) -> tuple[str, ...]:
        return (self.field,)

    def evaluate(self, fields: Mapping[str, object], *, today: date | None = None) -> FormError | None:
        if _text(fields, self.field):
            return None
        return FormError(self.field, self.message)


ValidationRule = Union[
    RequiredRule,
    PatternRule,
    AgeRangeRule,
    ConfirmRule,
    WordCountRule,
    CharCountRule,
    MediaRule,
]

RuleCatalog = Mapping[str, tuple[ValidationRule, ...]]


__all__ = [
    "AgeRangeRule",
    "CharCountRule",
    "ConfirmRule",
    "EMAIL_PATTERN",
    "FormError",
    "ISO_DATE_PATTERN",
    "MediaRule",
    "PatternRule",
    "RequiredRule",
    "RuleCatalog",
    "ValidationRule",
    "WordCountRule",
]
