from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from conftest import FakeTransport, RecordingNotifier
from core.errors import NETWORK_ERROR_MESSAGE, SubmissionError
from core.fields import FieldStore
from core.tracks import DIRECTOR_TRACK, PARTICIPANT_TRACK, WizardTrack
from integrations.submission_api import SubmissionResponse
from utils.notifications import NoticeLevel
from wizard.navigator import WizardNavigator
from wizard.submission import (
    INVALID_DESCRIPTION,
    INVALID_TITLE,
    SubmissionCoordinator,
    SubmissionStatus,
    submission_timestamp,
)

NOW = datetime(2026, 6, 15, 12, 30, 5, 123456, tzinfo=timezone.utc)


def _build(
    track: WizardTrack,
    values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
    submitted: list[bool] | None = None,
) -> tuple[FieldStore, WizardNavigator, SubmissionCoordinator]:
    store = FieldStore(track.defaults())
    store.update(values)
    navigator = WizardNavigator(track, store, notifier, session_state={}, today=lambda: today)
    navigator.relocate(track.sections[-1].key, ())
    coordinator = SubmissionCoordinator(
        store,
        navigator,
        notifier,
        transport,
        on_submitted=(lambda: submitted.append(True)) if submitted is not None else None,
        today=lambda: today,
        clock=lambda: NOW,
    )
    return store, navigator, coordinator


def test_timestamp_has_millisecond_precision() -> None:
    assert submission_timestamp(NOW) == "2026-06-15T12:30:05.123Z"


def test_successful_submission_resets_session(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    submitted: list[bool] = []
    store, navigator, coordinator = _build(
        PARTICIPANT_TRACK, participant_values, notifier, transport, today, submitted
    )

    result = coordinator.submit()

    assert result.status is SubmissionStatus.SUBMITTED
    assert result.ok
    payload = transport.payloads[0]
    assert payload["email"] == "ada@example.com"
    assert payload["fullName"] == "Ada Lovelace"
    assert payload["submittedAt"] == "2026-06-15T12:30:05.123Z"
    assert store.snapshot() == PARTICIPANT_TRACK.defaults()
    assert navigator.current_key == "eligibility"
    assert not navigator.submitting
    assert submitted == [True]
    assert notifier.last is not None
    assert notifier.last.level is NoticeLevel.SUCCESS
    assert notifier.last.title == "Application submitted successfully!"


def test_director_success_title(
    director_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    _store, _navigator, coordinator = _build(DIRECTOR_TRACK, director_values, notifier, transport, today)

    assert coordinator.submit().ok
    assert notifier.titles(NoticeLevel.SUCCESS) == ["Director application submitted successfully!"]


def test_violations_relocate_to_first_failing_section(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    participant_values.update(email="not-an-email", bio="")
    store, navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)

    result = coordinator.submit()

    assert result.status is SubmissionStatus.INVALID
    assert {error.field for error in result.errors} == {"email", "bio"}
    assert navigator.current_key == "contact"
    assert [error.field for error in navigator.errors] == ["email", "bio"]
    assert transport.payloads == []
    assert store["email"] == "not-an-email"
    assert notifier.last is not None
    assert (notifier.last.title, notifier.last.description) == (INVALID_TITLE, INVALID_DESCRIPTION)


def test_unchecked_terms_relocate_to_terms_section(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    participant_values["agreeTerms"] = False
    _store, navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)

    result = coordinator.submit()

    assert result.status is SubmissionStatus.INVALID
    assert navigator.current_key == "terms"


def test_rejected_submission_keeps_data(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    transport.outcomes.append(SubmissionResponse(accepted=False, success=False, message="Duplicate email"))
    store, navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)

    result = coordinator.submit()

    assert result.status is SubmissionStatus.REJECTED
    assert result.message == "Duplicate email"
    assert notifier.titles(NoticeLevel.ERROR) == ["Submission failed: Duplicate email."]
    assert store["email"] == "ada@example.com"
    assert navigator.current_key == "review"
    assert not navigator.submitting


def test_rejected_without_message(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    transport.outcomes.append(SubmissionResponse(accepted=False))
    _store, _navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)

    coordinator.submit()

    assert notifier.titles(NoticeLevel.ERROR) == ["Submission failed: Unknown error."]


def test_network_failure_notifies_and_keeps_data(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    transport.outcomes.append(SubmissionError())
    store, navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)

    result = coordinator.submit()

    assert result.status is SubmissionStatus.FAILED
    assert result.message == NETWORK_ERROR_MESSAGE
    assert notifier.titles(NoticeLevel.ERROR) == [NETWORK_ERROR_MESSAGE]
    assert store.snapshot() != PARTICIPANT_TRACK.defaults()
    assert not navigator.submitting


def test_submit_while_in_flight_is_ignored(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    _store, navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)
    navigator.set_submitting(True)

    assert coordinator.submit().status is SubmissionStatus.BUSY
    assert transport.payloads == []
    assert notifier.notices == []


def test_outcome_for_abandoned_session_is_discarded(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    transport: FakeTransport,
    today: date,
) -> None:
    store, navigator, coordinator = _build(PARTICIPANT_TRACK, participant_values, notifier, transport, today)
    transport.before_return = coordinator.invalidate

    result = coordinator.submit()

    assert result.status is SubmissionStatus.DISCARDED
    assert notifier.notices == []
    assert store["email"] == "ada@example.com"
    assert not navigator.submitting
    assert coordinator.generation == 1


def test_unexpected_transport_error_releases_guard(
    participant_values: dict[str, object],
    notifier: RecordingNotifier,
    today: date,
) -> None:
    class _Exploding:
        def submit(self, payload: object) -> SubmissionResponse:
            raise RuntimeError("boom")

    store = FieldStore(PARTICIPANT_TRACK.defaults())
    store.update(participant_values)
    navigator = WizardNavigator(PARTICIPANT_TRACK, store, notifier, session_state={}, today=lambda: today)
    coordinator = SubmissionCoordinator(store, navigator, notifier, _Exploding(), today=lambda: today)

    with pytest.raises(RuntimeError):
        coordinator.submit()
    assert not navigator.submitting
