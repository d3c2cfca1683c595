"""Top-level view flow: track selection -> form -> payment -> confirmation."""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Callable, MutableMapping, cast

import streamlit as st

from constants.keys import StateKeys
from core.tracks import TrackKey, WizardTrack, get_track
from state.session import ApplicationSession
from wizard.submission import SubmissionResult

logger = logging.getLogger(__name__)


class AppView(StrEnum):
    SELECTION = "selection"
    PARTICIPANT_APPLICATION = "participant_application"
    DIRECTOR_APPLICATION = "director_application"
    PAYMENT = "payment"
    FINAL_SUCCESS = "final_success"


FORM_VIEWS: dict[TrackKey, AppView] = {
    TrackKey.PARTICIPANT: AppView.PARTICIPANT_APPLICATION,
    TrackKey.DIRECTOR: AppView.DIRECTOR_APPLICATION,
}

SessionFactory = Callable[[WizardTrack], ApplicationSession]


class AppFlow:
    """Which screen is shown and which application session backs it."""

    def __init__(
        self,
        session_factory: SessionFactory,
        *,
        session_state: MutableMapping[str, object] | None = None,
    ) -> None:
        self._factory = session_factory
        self._state = cast(
            MutableMapping[str, object],
            session_state if session_state is not None else st.session_state,
        )

    @property
    def view(self) -> AppView:
        try:
            return AppView(self._state.get(StateKeys.VIEW) or AppView.SELECTION)
        except ValueError:
            logger.warning("Unknown view %r in session state; showing selection", self._state.get(StateKeys.VIEW))
            return AppView.SELECTION

    def _set_view(self, view: AppView) -> None:
        previous = self._state.get(StateKeys.VIEW)
        self._state[StateKeys.VIEW] = view.value
        if previous != view.value:
            logger.info("View changed from %s to %s", previous, view.value)

    @property
    def track(self) -> TrackKey | None:
        raw = self._state.get(StateKeys.TRACK)
        return TrackKey(raw) if raw else None

    @property
    def application(self) -> ApplicationSession | None:
        session = self._state.get(StateKeys.APPLICATION_SESSION)
        return session if isinstance(session, ApplicationSession) else None

    def _drop_application(self) -> None:
        session = self.application
        if session is not None:
            session.abandon()
        self._state[StateKeys.APPLICATION_SESSION] = None

    def select_track(self, key: TrackKey | str) -> ApplicationSession:
        """Start a fresh application for ``key`` and show its form."""

        track = get_track(key)
        self._drop_application()
        session = self._factory(track)
        self._state[StateKeys.APPLICATION_SESSION] = session
        self._state[StateKeys.TRACK] = track.key.value
        self._set_view(FORM_VIEWS[track.key])
        return session

    def back_to_selection(self) -> None:
        self._drop_application()
        self._state[StateKeys.TRACK] = None
        self._set_view(AppView.SELECTION)

    def submit(self) -> SubmissionResult | None:
        """Submit the active application; a success moves on to payment."""

        session = self.application
        if session is None:
            return None
        result = session.submit()
        if result.ok:
            self._set_view(AppView.PAYMENT)
        return result

    def back_from_payment(self) -> None:
        track = self.track
        if track is None:
            self._set_view(AppView.SELECTION)
            return
        if self.application is None:
            self._state[StateKeys.APPLICATION_SESSION] = self._factory(get_track(track))
        self._set_view(FORM_VIEWS[track])

    def payment_succeeded(self) -> None:
        self._set_view(AppView.FINAL_SUCCESS)

    def restart(self) -> None:
        """Forget the current application and go back to track selection."""

        self.back_to_selection()
        self._state[StateKeys.PAYMENT_REFERENCE] = None
        self._state[StateKeys.PAYMENT_ERRORS] = []


__all__ = ["AppFlow", "AppView", "FORM_VIEWS", "SessionFactory"]
