"""Derived-field helpers: full name, age and text counters."""

from __future__ import annotations

from datetime import date
from typing import Final, MutableMapping

NAME_FIELDS: Final[tuple[str, str, str]] = ("firstName", "middleName", "lastName")
FULL_NAME_FIELD: Final[str] = "fullName"
DATE_OF_BIRTH_FIELD: Final[str] = "dateOfBirth"
AGE_FIELD: Final[str] = "age"


def full_name(first: str | None, middle: str | None, last: str | None) -> str:
    """Return the space-joined non-empty name parts in first/middle/last order."""

    return " ".join(part for part in (first, middle, last) if part)


def parse_iso_date(value: object | None) -> date | None:
    """Return a ``date`` for ``YYYY-MM-DD`` strings, ``None`` otherwise."""

    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None
    candidate = value.strip()
    if not candidate:
        return None
    try:
        return date.fromisoformat(candidate[:10])
    except ValueError:
        return None


def calculate_age(date_of_birth: date, today: date | None = None) -> int:
    """Return whole years elapsed since ``date_of_birth``.

    The subject is one year younger than the plain year difference until this
    year's birthday has been reached.
    """

    reference = today or date.today()
    age = reference.year - date_of_birth.year
    if (reference.month, reference.day) < (date_of_birth.month, date_of_birth.day):
        age -= 1
    return age


def word_count(text: str | None) -> int:
    """Return the number of whitespace-delimited tokens in ``text``."""

    if not text:
        return 0
    return len(text.split())


def char_count(text: str | None) -> int:
    """Return the number of characters in ``text``."""

    return len(text or "")


def recompute_derived_fields(
    fields: MutableMapping[str, object],
    changed: str,
    *,
    today: date | None = None,
) -> dict[str, object]:
    """Refresh fields that depend on ``changed`` and return the updates.

    Name parts only feed ``fullName`` when the store carries them; the director
    track enters its full name directly. An empty or unparseable date of birth
    leaves ``age`` at its previous value.
    """

    updates: dict[str, object] = {}
    if changed in NAME_FIELDS and all(name in fields for name in NAME_FIELDS):
        updates[FULL_NAME_FIELD] = full_name(*(_as_text(fields.get(name)) for name in NAME_FIELDS))
    elif changed == DATE_OF_BIRTH_FIELD and AGE_FIELD in fields:
        dob = parse_iso_date(fields.get(DATE_OF_BIRTH_FIELD))
        if dob is not None:
            updates[AGE_FIELD] = str(calculate_age(dob, today))
    fields.update(updates)
    return updates


def _as_text(value: object | None) -> str:
    return value if isinstance(value, str) else ""


__all__ = [
    "AGE_FIELD",
    "DATE_OF_BIRTH_FIELD",
    "FULL_NAME_FIELD",
    "NAME_FIELDS",
    "calculate_age",
    "char_count",
    "full_name",
    "parse_iso_date",
    "recompute_derived_fields",
    "word_count",
]
