from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from conftest import FakeTransport, RecordingNotifier
from constants.keys import StateKeys
from core.tracks import WizardTrack
from integrations.submission_api import SubmissionResponse
from state.session import ApplicationSession
from wizard.app_flow import AppFlow, AppView


@pytest.fixture
def state() -> dict[str, object]:
    return {}


@pytest.fixture
def flow(
    state: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    executor: ThreadPoolExecutor,
) -> AppFlow:
    def _factory(track: WizardTrack) -> ApplicationSession:
        return ApplicationSession(track, notifier, transport=transport, session_state=state, executor=executor)

    return AppFlow(_factory, session_state=state)


def test_starts_on_selection(flow: AppFlow) -> None:
    assert flow.view is AppView.SELECTION
    assert flow.track is None
    assert flow.application is None
    assert flow.submit() is None


def test_select_track_shows_form(flow: AppFlow) -> None:
    session = flow.select_track("director")

    assert flow.view is AppView.DIRECTOR_APPLICATION
    assert flow.application is session
    assert session.navigator.current_key == "contact"


def test_switching_tracks_abandons_previous_session(flow: AppFlow) -> None:
    first = flow.select_track("participant")
    flow.back_to_selection()

    assert first.coordinator.generation == 1
    assert flow.application is None
    assert flow.view is AppView.SELECTION

    second = flow.select_track("participant")
    assert second is not first
    assert second.navigator.current_key == "eligibility"


def test_successful_submit_moves_to_payment(flow: AppFlow, director_values: dict[str, object]) -> None:
    session = flow.select_track("director")
    session.store.update(director_values)

    result = flow.submit()

    assert result is not None and result.ok
    assert flow.view is AppView.PAYMENT

    flow.back_from_payment()
    assert flow.view is AppView.DIRECTOR_APPLICATION
    assert flow.application is session
    assert session.store.snapshot() == session.track.defaults()


def test_failed_submit_stays_on_form(
    flow: AppFlow, director_values: dict[str, object], transport: FakeTransport
) -> None:
    transport.outcomes.append(SubmissionResponse(accepted=False, message="Closed"))
    session = flow.select_track("director")
    session.store.update(director_values)

    result = flow.submit()

    assert result is not None and not result.ok
    assert flow.view is AppView.DIRECTOR_APPLICATION


def test_back_from_payment_rebuilds_missing_session(flow: AppFlow, state: dict[str, object]) -> None:
    state[StateKeys.TRACK] = "participant"
    state[StateKeys.VIEW] = AppView.PAYMENT.value

    flow.back_from_payment()

    assert flow.view is AppView.PARTICIPANT_APPLICATION
    assert flow.application is not None


def test_back_from_payment_without_track(flow: AppFlow, state: dict[str, object]) -> None:
    state[StateKeys.VIEW] = AppView.PAYMENT.value

    flow.back_from_payment()

    assert flow.view is AppView.SELECTION


def test_payment_success_then_restart(flow: AppFlow, state: dict[str, object]) -> None:
    flow.select_track("participant")
    state[StateKeys.PAYMENT_REFERENCE] = "1700000000500"
    state[StateKeys.PAYMENT_ERRORS] = ["Payment amount is required."]

    flow.payment_succeeded()
    assert flow.view is AppView.FINAL_SUCCESS

    flow.restart()

    assert flow.view is AppView.SELECTION
    assert flow.track is None
    assert state[StateKeys.PAYMENT_REFERENCE] is None
    assert state[StateKeys.PAYMENT_ERRORS] == []


def test_unknown_view_falls_back_to_selection(flow: AppFlow, state: dict[str, object]) -> None:
    state[StateKeys.VIEW] = "checkout"

    assert flow.view is AppView.SELECTION
