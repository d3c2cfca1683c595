"""In-memory field store for one application session."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, MutableMapping
from copy import deepcopy
from datetime import date
from typing import Callable

from core.derived import recompute_derived_fields
from core.errors import UnknownFieldError

logger = logging.getLogger(__name__)

FieldValue = str | bool | None


class FieldStore(MutableMapping[str, FieldValue]):
    """Mapping of field name to value seeded from a track's default catalog.

    Unknown field names are rejected so every field referenced by a validation
    rule is guaranteed to exist with a defined value. Assigning a value
    refreshes the derived fields (full name, age) that depend on it.
    """

    def __init__(
        self,
        defaults: Mapping[str, FieldValue],
        *,
        today: Callable[[], date] | None = None,
    ) -> None:
        self._defaults: dict[str, FieldValue] = dict(defaults)
        self._values: dict[str, FieldValue] = deepcopy(self._defaults)
        self._today = today

    def __getitem__(self, key: str) -> FieldValue:
        try:
            return self._values[key]
        except KeyError:
            raise UnknownFieldError(key) from None

    def __setitem__(self, key: str, value: FieldValue) -> None:
        if key not in self._values:
            raise UnknownFieldError(key)
        if self._values[key] == value:
            return
        self._values[key] = value
        today = self._today() if self._today is not None else None
        recompute_derived_fields(self._values, key, today=today)

    def __delitem__(self, key: str) -> None:
        # Fields are never removed, only reset to their initial value.
        if key not in self._defaults:
            raise UnknownFieldError(key)
        self._values[key] = deepcopy(self._defaults[key])

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"FieldStore({len(self._values)} fields)"

    def snapshot(self) -> dict[str, FieldValue]:
        """Return a detached copy of all current values."""

        return dict(self._values)

    def reset(self) -> None:
        """Restore every field to its initial empty value."""

        self._values = deepcopy(self._defaults)
        logger.debug("Field store reset to %s default values", len(self._values))


__all__ = ["FieldStore", "FieldValue"]
