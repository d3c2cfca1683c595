"""Static metadata describing wizard sections and the fields they render."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Iterator


class WidgetKind(StrEnum):
    """Input widget used to capture a field."""

    TEXT = "text"
    TEXTAREA = "textarea"
    DATE = "date"
    CHECKBOX = "checkbox"
    IMAGE = "image"
    DERIVED = "derived"


class Counter(StrEnum):
    """Live counter shown below long free-text inputs."""

    WORDS = "words"
    CHARS = "chars"


@dataclass(frozen=True)
class FieldSpec:
    """Rendering contract for a single form field."""

    name: str
    label: str
    kind: WidgetKind = WidgetKind.TEXT
    required: bool = False
    placeholder: str = ""
    help: str | None = None
    counter: Counter | None = None
    counter_limit: int | None = None

    @property
    def default(self) -> str | bool | None:
        """Return the initial empty value for the field."""

        if self.kind is WidgetKind.CHECKBOX:
            return False
        if self.kind is WidgetKind.IMAGE:
            return None
        return ""

    @property
    def display_label(self) -> str:
        """Return the label with a trailing ``*`` for required fields."""

        return f"{self.label}*" if self.required else self.label


@dataclass(frozen=True)
class Section:
    """Ordered catalog entry for one wizard page.

    ``submit_excluded`` marks pure review or terms-only pages which are
    skipped when every section is re-validated before submission.
    """

    key: str
    title: str
    badge: str
    description: str = ""
    fields: tuple[FieldSpec, ...] = ()
    submit_excluded: bool = False

    def iter_fields(self, kind: WidgetKind | None = None) -> Iterator[FieldSpec]:
        """Yield field specs, optionally filtered by widget ``kind``."""

        for spec in self.fields:
            if kind is None or spec.kind is kind:
                yield spec


__all__ = ["Counter", "FieldSpec", "Section", "WidgetKind"]
