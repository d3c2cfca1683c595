"""Media attachment pipeline: uploaded image -> size-checked data URI.

Uploads above the byte ceiling are rejected synchronously without being read.
Everything else is read and encoded on a worker thread; the outcome is queued
and only applied to the field store when :meth:`MediaAttachmentPipeline.drain`
runs on the session thread. Each slot carries a monotonically increasing
request token and a queued outcome is dropped unless its token is still the
slot's latest, so an older read can never overwrite a newer selection or a
cleared slot.
"""

from __future__ import annotations

import logging
import mimetypes
import queue
import threading
from base64 import b64decode, b64encode
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from enum import StrEnum
from functools import partial
from io import BytesIO
from typing import Iterable, MutableMapping, Protocol

from opentelemetry import trace
from PIL import Image, UnidentifiedImageError

import config
from core.errors import MediaReadError, UnknownFieldError
from core.tracks import MEDIA_SLOTS
from utils.notifications import Notifier

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)

READ_FAILURE_TITLE = "Failed to read image file."
READ_FAILURE_DESCRIPTION = "Please try another image or format."
DATA_URI_PREFIX = "data:"

_EXECUTOR: ThreadPoolExecutor | None = None
_EXECUTOR_LOCK = threading.Lock()


class UploadedImage(Protocol):
    """Subset of Streamlit's ``UploadedFile`` used by the pipeline."""

    name: str
    size: int

    def getvalue(self) -> bytes: ...


class AttachStatus(StrEnum):
    """Immediate state of a slot after :meth:`MediaAttachmentPipeline.attach`."""

    PENDING = "pending"
    REJECTED = "rejected"
    ABSENT = "absent"


@dataclass(frozen=True)
class _ReadOutcome:
    slot: str
    token: int
    payload: str | None
    error: str | None = None


def get_media_executor() -> ThreadPoolExecutor:
    """Return the process-wide executor shared by all sessions."""

    global _EXECUTOR
    with _EXECUTOR_LOCK:
        if _EXECUTOR is None:
            _EXECUTOR = ThreadPoolExecutor(
                max_workers=config.MEDIA_READ_WORKERS,
                thread_name_prefix="media-read",
            )
        return _EXECUTOR


def size_limit_title(max_bytes: int) -> str:
    megabytes = max(1, max_bytes // (1024 * 1024))
    return f"File size exceeds {megabytes}MB limit."


def _detect_mime(upload: UploadedImage, image_format: str | None) -> str:
    declared = getattr(upload, "type", None)
    if isinstance(declared, str) and declared.startswith("image/"):
        return declared
    guessed, _encoding = mimetypes.guess_type(getattr(upload, "name", "") or "")
    if guessed and guessed.startswith("image/"):
        return guessed
    if image_format and image_format in Image.MIME:
        return Image.MIME[image_format]
    return "application/octet-stream"


def encode_upload(upload: UploadedImage) -> str:
    """Read ``upload`` and return a ``data:<mime>;base64,...`` payload.

    Raises:
        MediaReadError: The bytes cannot be read or are not a supported image.
    """

    with tracer.start_as_current_span("media.encode") as span:
        try:
            data = upload.getvalue()
        except (OSError, ValueError) as exc:
            raise MediaReadError(f"Could not read '{upload.name}': {exc}") from exc
        if not data:
            raise MediaReadError(f"'{upload.name}' is empty")
        try:
            with Image.open(BytesIO(data)) as image:
                image_format = image.format
                image.verify()
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError, ValueError) as exc:
            raise MediaReadError(f"'{upload.name}' is not a readable image: {exc}") from exc
        mime = _detect_mime(upload, image_format)
        span.set_attribute("media.mime", mime)
        span.set_attribute("media.bytes", len(data))
        return f"{DATA_URI_PREFIX}{mime};base64,{b64encode(data).decode('ascii')}"


def decode_payload(payload: str) -> bytes:
    """Return the original bytes embedded in a data URI payload."""

    if not payload.startswith(DATA_URI_PREFIX):
        raise ValueError("Payload is not a data URI")
    header, sep, body = payload.partition(",")
    if not sep or not header.endswith(";base64"):
        raise ValueError("Payload is not base64 encoded")
    return b64decode(body, validate=True)


class MediaAttachmentPipeline:
    """Attach uploaded images to the media slots of one field store."""

    def __init__(
        self,
        store: MutableMapping[str, object],
        notifier: Notifier,
        *,
        slots: Iterable[str] = MEDIA_SLOTS,
        max_bytes: int | None = None,
        executor: ThreadPoolExecutor | None = None,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._slots = tuple(slots)
        self._max_bytes = max_bytes if max_bytes is not None else config.MAX_UPLOAD_BYTES
        self._executor = executor
        self._tokens: dict[str, int] = {slot: 0 for slot in self._slots}
        self._pending: dict[str, int] = {}
        self._results: queue.SimpleQueue[_ReadOutcome] = queue.SimpleQueue()

    @property
    def slots(self) -> tuple[str, ...]:
        return self._slots

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    @property
    def pending_slots(self) -> tuple[str, ...]:
        return tuple(self._pending)

    def is_pending(self, slot: str) -> bool:
        return slot in self._pending

    def _check_slot(self, slot: str) -> None:
        if slot not in self._tokens:
            raise UnknownFieldError(slot)

    def _next_token(self, slot: str) -> int:
        self._tokens[slot] += 1
        return self._tokens[slot]

    def attach(self, slot: str, upload: UploadedImage | None) -> AttachStatus:
        """Start attaching ``upload`` to ``slot``; ``None`` clears the slot."""

        self._check_slot(slot)
        if upload is None:
            self.clear(slot)
            return AttachStatus.ABSENT

        token = self._next_token(slot)
        if upload.size > self._max_bytes:
            self._pending.pop(slot, None)
            self._store[slot] = None
            logger.warning("Rejected %s byte upload for slot '%s'", upload.size, slot)
            self._notifier.error(
                size_limit_title(self._max_bytes),
                f"Please upload a smaller image for {slot}.",
            )
            return AttachStatus.REJECTED

        self._pending[slot] = token
        future = (self._executor or get_media_executor()).submit(encode_upload, upload)
        future.add_done_callback(partial(self._collect, slot, token))
        logger.debug("Queued read for slot '%s' (token %s)", slot, token)
        return AttachStatus.PENDING

    def clear(self, slot: str) -> None:
        """Set ``slot`` absent and invalidate any read still in flight."""

        self._check_slot(slot)
        self._next_token(slot)
        self._pending.pop(slot, None)
        self._store[slot] = None

    def reset(self) -> None:
        """Invalidate every in-flight read without touching the store."""

        for slot in self._slots:
            self._next_token(slot)
        self._pending.clear()

    def _collect(self, slot: str, token: int, future: Future[str]) -> None:
        try:
            payload = future.result()
        except MediaReadError as exc:
            self._results.put(_ReadOutcome(slot, token, None, str(exc)))
        except BaseException as exc:  # noqa: BLE001 - every read must reach drain()
            logger.exception("Unexpected failure reading image for slot '%s'", slot)
            self._results.put(_ReadOutcome(slot, token, None, f"{type(exc).__name__}: {exc}"))
        else:
            self._results.put(_ReadOutcome(slot, token, payload))

    def drain(self, *, wait: bool = False, timeout: float | None = None) -> list[str]:
        """Apply queued read outcomes and return the slots that changed.

        With ``wait=True`` the call blocks until no read is pending for the
        latest token of any slot (or until ``timeout`` elapses).
        """

        applied: list[str] = []
        while True:
            block = wait and bool(self._pending)
            try:
                outcome = self._results.get(block=block, timeout=timeout if block else None)
            except queue.Empty:
                break
            if self._apply(outcome):
                applied.append(outcome.slot)
        return applied

    def _apply(self, outcome: _ReadOutcome) -> bool:
        if self._tokens.get(outcome.slot) != outcome.token:
            logger.debug("Dropped superseded read for slot '%s' (token %s)", outcome.slot, outcome.token)
            return False
        self._pending.pop(outcome.slot, None)
        if outcome.payload is None:
            self._store[outcome.slot] = None
            logger.warning("Image read failed for slot '%s': %s", outcome.slot, outcome.error)
            self._notifier.error(READ_FAILURE_TITLE, READ_FAILURE_DESCRIPTION)
        else:
            self._store[outcome.slot] = outcome.payload
            logger.info("Attached image to slot '%s'", outcome.slot)
        return True


__all__ = [
    "AttachStatus",
    "MediaAttachmentPipeline",
    "READ_FAILURE_DESCRIPTION",
    "READ_FAILURE_TITLE",
    "UploadedImage",
    "decode_payload",
    "encode_upload",
    "get_media_executor",
    "size_limit_title",
]
