"""Final submission: aggregate violations, then send or re-route."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Any, Callable, Mapping, Protocol

from opentelemetry import trace

from core.errors import SubmissionError
from core.fields import FieldStore
from core.rules import FormError
from core.validation import first_error_section, validate_all
from integrations.submission_api import SubmissionResponse
from utils.notifications import Notifier
from wizard.navigator import WizardNavigator

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

SUBMITTED_DESCRIPTION = "We'll review your application and contact you soon."
REJECTED_DESCRIPTION = "Please check your input and try again."
INVALID_TITLE = "Please fix the errors before submitting"
INVALID_DESCRIPTION = "There are errors in your application that need to be corrected."
TIMESTAMP_FIELD = "submittedAt"


class SubmissionStatus(StrEnum):
    SUBMITTED = "submitted"
    REJECTED = "rejected"
    FAILED = "failed"
    INVALID = "invalid"
    BUSY = "busy"
    DISCARDED = "discarded"


@dataclass(frozen=True)
class SubmissionResult:
    status: SubmissionStatus
    errors: tuple[FormError, ...] = ()
    message: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is SubmissionStatus.SUBMITTED


class SubmissionTransport(Protocol):
    def submit(self, payload: Mapping[str, Any]) -> SubmissionResponse: ...


def submission_timestamp(now: datetime | None = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and ``Z`` suffix."""

    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SubmissionCoordinator:
    """Validate every section and hand a clean snapshot to ``transport``.

    ``invalidate`` bumps a generation counter; a response that comes back for
    an older generation is dropped without touching the session.
    """

    def __init__(
        self,
        store: FieldStore,
        navigator: WizardNavigator,
        notifier: Notifier,
        transport: SubmissionTransport,
        *,
        on_submitted: Callable[[], None] | None = None,
        today: Callable[[], date] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._navigator = navigator
        self._notifier = notifier
        self._transport = transport
        self._on_submitted = on_submitted
        self._today = today
        self._clock = clock
        self._generation = 0

    @property
    def generation(self) -> int:
        return self._generation

    def invalidate(self) -> None:
        """Mark any in-flight submission as belonging to an abandoned session."""

        self._generation += 1
        self._navigator.set_submitting(False)

    def collect_errors(self) -> list[FormError]:
        today = self._today() if self._today is not None else None
        return validate_all(self._navigator.track, self._store, today=today)

    def build_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = self._store.snapshot()
        now = self._clock() if self._clock is not None else None
        payload[TIMESTAMP_FIELD] = submission_timestamp(now)
        return payload

    def submit(self) -> SubmissionResult:
        """Run the final submission for the session's field store."""

        if self._navigator.submitting:
            logger.info("Ignored submit while a submission is in flight")
            return SubmissionResult(SubmissionStatus.BUSY)

        errors = self.collect_errors()
        if errors:
            return self._reroute(errors)

        track = self._navigator.track
        generation = self._generation
        self._navigator.set_submitting(True)
        with tracer.start_as_current_span("application.submit") as span:
            span.set_attribute("application.track", str(track.key))
            failure: SubmissionError | None = None
            response: SubmissionResponse | None = None
            try:
                response = self._transport.submit(self.build_payload())
            except SubmissionError as exc:
                failure = exc
            finally:
                if generation == self._generation:
                    self._navigator.set_submitting(False)

            if generation != self._generation:
                logger.info("Discarded submission outcome for an abandoned session")
                return SubmissionResult(SubmissionStatus.DISCARDED)

            if response is None:
                message = str(failure or SubmissionError())
                span.set_attribute("application.status", SubmissionStatus.FAILED.value)
                self._notifier.error(message)
                return SubmissionResult(SubmissionStatus.FAILED, message=message)

            if not response.accepted:
                message = response.message or "Unknown error"
                span.set_attribute("application.status", SubmissionStatus.REJECTED.value)
                logger.warning("Submission rejected: %s", message)
                self._notifier.error(f"Submission failed: {message}.", REJECTED_DESCRIPTION)
                return SubmissionResult(SubmissionStatus.REJECTED, message=response.message)

            span.set_attribute("application.status", SubmissionStatus.SUBMITTED.value)

        self._store.reset()
        self._navigator.reset()
        if self._on_submitted is not None:
            self._on_submitted()
        logger.info("Application submitted for track '%s'", track.key)
        self._notifier.success(track.submitted_title, SUBMITTED_DESCRIPTION)
        return SubmissionResult(SubmissionStatus.SUBMITTED, message=response.message)

    def _reroute(self, errors: list[FormError]) -> SubmissionResult:
        target = first_error_section(self._navigator.track, errors)
        if target is None or target == self._navigator.current_key:
            self._navigator.publish_errors(errors)
        else:
            self._navigator.relocate(target, errors)
        logger.info("Submission blocked by %s violation(s); showing '%s'", len(errors), self._navigator.current_key)
        self._notifier.error(INVALID_TITLE, INVALID_DESCRIPTION)
        return SubmissionResult(SubmissionStatus.INVALID, errors=tuple(errors))


__all__ = [
    "INVALID_DESCRIPTION",
    "INVALID_TITLE",
    "SubmissionCoordinator",
    "SubmissionResult",
    "SubmissionStatus",
    "SubmissionTransport",
    "submission_timestamp",
]
