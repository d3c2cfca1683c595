"""Per-user application session wiring store, navigator, media and submission."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from typing import Callable, MutableMapping

from core.fields import FieldStore, FieldValue
from core.media import AttachStatus, MediaAttachmentPipeline, UploadedImage
from core.rules import FormError
from core.sections import WidgetKind
from core.tracks import WizardTrack
from core.validation import errors_by_field
from integrations.submission_api import SubmissionClient
from utils.logging_context import set_track, set_wizard_step
from utils.notifications import Notifier
from wizard.navigator import WizardNavigator
from wizard.submission import SubmissionCoordinator, SubmissionResult, SubmissionTransport

logger = logging.getLogger(__name__)

PENDING_MEDIA_TIMEOUT_SECONDS = 10.0


def media_slots_for(track: WizardTrack) -> tuple[str, ...]:
    """Return the image fields rendered anywhere on ``track``."""

    return tuple(spec.name for section in track.sections for spec in section.iter_fields(WidgetKind.IMAGE))


class ApplicationSession:
    """Everything one user needs to fill in one application.

    Owns the field store and the navigator state exclusively; the media
    pipeline and the submission coordinator write into them.
    """

    def __init__(
        self,
        track: WizardTrack,
        notifier: Notifier,
        *,
        transport: SubmissionTransport | None = None,
        session_state: MutableMapping[str, object] | None = None,
        executor: ThreadPoolExecutor | None = None,
        max_upload_bytes: int | None = None,
        today: Callable[[], date] | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.track = track
        self.notifier = notifier
        self.store = FieldStore(track.defaults(), today=today)
        self.navigator = WizardNavigator(
            track,
            self.store,
            notifier,
            session_state=session_state,
            today=today,
        )
        self.navigator.reset()
        self.media = MediaAttachmentPipeline(
            self.store,
            notifier,
            slots=media_slots_for(track),
            max_bytes=max_upload_bytes,
            executor=executor,
        )
        self.coordinator = SubmissionCoordinator(
            self.store,
            self.navigator,
            notifier,
            transport or SubmissionClient(),
            on_submitted=self.media.reset,
            today=today,
            clock=clock,
        )
        set_track(str(track.key))
        set_wizard_step(self.navigator.current_key)

    def __repr__(self) -> str:
        return f"ApplicationSession(track={self.track.key!s}, section={self.navigator.current_key!r})"

    def set_field(self, name: str, value: FieldValue) -> None:
        self.store[name] = value

    def attach(self, slot: str, upload: UploadedImage | None) -> AttachStatus:
        return self.media.attach(slot, upload)

    def refresh(self) -> list[str]:
        """Apply finished media reads; call once per rerun before rendering."""

        return self.media.drain()

    def next(self) -> bool:
        self.media.drain()
        return self.navigator.next()

    def previous(self) -> bool:
        return self.navigator.previous()

    def jump_to(self, key: str) -> bool:
        return self.navigator.jump_to(key)

    def submit(self) -> SubmissionResult:
        """Wait briefly for pending uploads, then run the final submission."""

        if self.media.pending_slots:
            self.media.drain(wait=True, timeout=PENDING_MEDIA_TIMEOUT_SECONDS)
        return self.coordinator.submit()

    def field_errors(self) -> dict[str, str]:
        """Return the published violations keyed by field for inline display."""

        return errors_by_field(self.navigator.errors)

    @property
    def errors(self) -> tuple[FormError, ...]:
        return self.navigator.errors

    def abandon(self) -> None:
        """Detach from outstanding media reads and submissions."""

        self.coordinator.invalidate()
        self.media.reset()
        logger.info("Abandoned %s application session", self.track.key)

    def reset(self) -> None:
        """Clear every field and return to the first section."""

        self.abandon()
        self.store.reset()
        self.navigator.reset()


__all__ = ["ApplicationSession", "media_slots_for"]
