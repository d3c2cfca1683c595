"""Section navigation state machine for one application session."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from enum import StrEnum
from typing import Callable, Iterable, Mapping, MutableMapping, Sequence, cast

import streamlit as st

from core.errors import UnknownSectionError
from core.rules import FormError
from core.sections import Section
from core.tracks import WizardTrack
from core.validation import describe_errors, validate
from utils.logging_context import set_wizard_step
from utils.notifications import Notifier

logger = logging.getLogger(__name__)

NEXT_BLOCKED_TITLE = "Please fix the errors before proceeding to the next section."


@dataclass(frozen=True)
class WizardSessionKeys:
    """Namespaced session-state keys for navigator storage."""

    wizard_id: str

    @property
    def prefix(self) -> str:
        return f"wiz:{self.wizard_id}:"

    def namespace(self, key: str) -> str:
        return f"{self.prefix}{key}"

    @property
    def navigation_state(self) -> str:
        return self.namespace("navigation_state")


class SectionStatus(StrEnum):
    """Progress indicator classification of a section."""

    COMPLETED = "completed"
    CURRENT = "current"
    UPCOMING = "upcoming"


@dataclass(frozen=True)
class WizardState:
    """Snapshot of the navigator.

    ``frontier`` is the furthest index reached through :meth:`WizardNavigator.next`.
    """

    current_index: int = 0
    errors: tuple[FormError, ...] = ()
    frontier: int = 0
    submitting: bool = False


class WizardNavigator:
    """Move between the ordered sections of ``track``.

    Forward moves are gated on validation of the current section, backward
    moves are free and direct jumps may only target the current section or one
    before it.
    """

    def __init__(
        self,
        track: WizardTrack,
        fields: Mapping[str, object],
        notifier: Notifier,
        *,
        wizard_id: str | None = None,
        session_state: MutableMapping[str, object] | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        if not track.sections:
            raise ValueError(f"Track '{track.key}' has no sections")
        self._track = track
        self._fields = fields
        self._notifier = notifier
        self._today = today
        self._session_state = cast(
            MutableMapping[str, object],
            session_state if session_state is not None else st.session_state,
        )
        self._keys = WizardSessionKeys(wizard_id=wizard_id or str(track.key))
        if not isinstance(self._session_state.get(self._keys.navigation_state), WizardState):
            self._session_state[self._keys.navigation_state] = WizardState()

    @property
    def track(self) -> WizardTrack:
        return self._track

    @property
    def state(self) -> WizardState:
        raw = self._session_state.get(self._keys.navigation_state)
        if isinstance(raw, WizardState):
            return raw
        state = WizardState()
        self._session_state[self._keys.navigation_state] = state
        return state

    def _store(self, state: WizardState) -> None:
        self._session_state[self._keys.navigation_state] = state

    @property
    def sections(self) -> Sequence[Section]:
        return self._track.sections

    @property
    def current_index(self) -> int:
        return self.state.current_index

    @property
    def current_section(self) -> Section:
        return self._track.sections[self.current_index]

    @property
    def current_key(self) -> str:
        return self.current_section.key

    @property
    def errors(self) -> tuple[FormError, ...]:
        return self.state.errors

    @property
    def frontier(self) -> int:
        return self.state.frontier

    @property
    def is_first(self) -> bool:
        return self.current_index == 0

    @property
    def is_last(self) -> bool:
        return self.current_index == len(self._track.sections) - 1

    @property
    def progress(self) -> float:
        """Return the completion ratio shown by the progress bar."""

        total = len(self._track.sections)
        if total <= 1:
            return 1.0
        return self.current_index / (total - 1)

    @property
    def submitting(self) -> bool:
        return self.state.submitting

    def set_submitting(self, value: bool) -> None:
        self._store(replace(self.state, submitting=value))

    def status_for(self, key: str) -> SectionStatus:
        index = self._track.index_of(key)
        if index == self.current_index:
            return SectionStatus.CURRENT
        if index < self.current_index:
            return SectionStatus.COMPLETED
        return SectionStatus.UPCOMING

    def can_jump_to(self, key: str) -> bool:
        try:
            return self._track.index_of(key) <= self.current_index
        except UnknownSectionError:
            return False

    def _move_to(self, index: int, *, errors: Iterable[FormError] = ()) -> None:
        state = self.state
        previous = state.current_index
        self._store(replace(state, current_index=index, errors=tuple(errors)))
        key = self._track.sections[index].key
        set_wizard_step(key)
        if index != previous:
            logger.info("Moved from '%s' to '%s'", self._track.sections[previous].key, key)

    def validate_current(self) -> list[FormError]:
        today = self._today() if self._today is not None else None
        return validate(self._track, self.current_key, self._fields, today=today)

    def next(self) -> bool:
        """Advance when the current section validates; return whether it moved."""

        errors = self.validate_current()
        if errors:
            self.publish_errors(errors)
            self._notifier.error(NEXT_BLOCKED_TITLE, describe_errors(errors))
            logger.info("Blocked leaving '%s' with %s violation(s)", self.current_key, len(errors))
            return False
        if self.is_last:
            self.clear_errors()
            return False
        target = self.current_index + 1
        self._move_to(target)
        if target > self.state.frontier:
            self._store(replace(self.state, frontier=target))
        return True

    def previous(self) -> bool:
        """Step back one section without validation."""

        if self.is_first:
            return False
        self._move_to(self.current_index - 1)
        return True

    def jump_to(self, key: str) -> bool:
        """Jump to ``key`` when it is the current section or an earlier one."""

        if not self.can_jump_to(key):
            logger.debug("Refused jump to '%s' from '%s'", key, self.current_key)
            return False
        index = self._track.index_of(key)
        if index == self.current_index:
            return False
        self._move_to(index)
        return True

    def relocate(self, key: str, errors: Iterable[FormError]) -> None:
        """Show section ``key`` together with ``errors``.

        Used when final submission finds violations in an earlier section.
        """

        self._move_to(self._track.index_of(key), errors=errors)

    def publish_errors(self, errors: Iterable[FormError]) -> None:
        """Replace the published violation list."""

        self._store(replace(self.state, errors=tuple(errors)))

    def clear_errors(self) -> None:
        self.publish_errors(())

    def reset(self) -> None:
        """Return to the first section with no errors."""

        self._store(WizardState())
        set_wizard_step(self.current_key)
        logger.info("Navigator reset to '%s'", self.current_key)


__all__ = [
    "NEXT_BLOCKED_TITLE",
    "SectionStatus",
    "WizardNavigator",
    "WizardSessionKeys",
    "WizardState",
]
