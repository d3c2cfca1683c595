"""Contextual log metadata for the application wizard.

Every log record carries the Streamlit session id, the application track and
the wizard section that was active when the record was emitted.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from typing import Iterator

_DEFAULT_LOG_FORMAT = (
    "%(asctime)s %(levelname)s [session=%(session_id)s track=%(track)s "
    "step=%(wizard_step)s] %(name)s: %(message)s"
)

_session_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("session_id", default="-")
_track_var: contextvars.ContextVar[str] = contextvars.ContextVar("track", default="-")
_wizard_step_var: contextvars.ContextVar[str] = contextvars.ContextVar("wizard_step", default="-")
_BASE_RECORD_FACTORY = logging.getLogRecordFactory()
_factory_installed = False


def _stamp(record: logging.LogRecord) -> None:
    record.session_id = _session_id_var.get()
    record.track = _track_var.get()
    record.wizard_step = _wizard_step_var.get()


class _ContextFilter(logging.Filter):
    """Copy the active context onto records created before the factory was installed."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            _stamp(record)
        return True


def _clean(value: str | None) -> str:
    if value is None:
        return "-"
    return value.strip() or "-"


def configure_logging(*, level: int | str = logging.INFO) -> None:
    """Install the context-aware format and record factory on the root logger."""

    global _factory_installed
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=_DEFAULT_LOG_FORMAT)
    else:
        root.setLevel(level)
    for handler in root.handlers:
        if handler.formatter is None:
            handler.setFormatter(logging.Formatter(_DEFAULT_LOG_FORMAT))
    if not any(isinstance(flt, _ContextFilter) for flt in root.filters):
        root.addFilter(_ContextFilter())
    if not _factory_installed:

        def _record_factory(*args: object, **kwargs: object) -> logging.LogRecord:
            record = _BASE_RECORD_FACTORY(*args, **kwargs)
            _stamp(record)
            return record

        logging.setLogRecordFactory(_record_factory)
        _factory_installed = True


def set_session_id(session_id: str | None) -> None:
    """Bind the Streamlit session identifier for subsequent records."""

    configure_logging()
    _session_id_var.set(_clean(session_id))


def set_track(track: str | None) -> None:
    """Bind the active application track."""

    _track_var.set(_clean(track))


def set_wizard_step(step: str | None) -> None:
    """Bind the wizard section currently shown to the user."""

    _wizard_step_var.set(_clean(step))


@contextmanager
def log_context(
    *,
    session_id: str | None = None,
    track: str | None = None,
    wizard_step: str | None = None,
) -> Iterator[None]:
    """Temporarily override the bound context values."""

    tokens: list[tuple[contextvars.ContextVar[str], contextvars.Token[str]]] = []
    for var, value in ((_session_id_var, session_id), (_track_var, track), (_wizard_step_var, wizard_step)):
        if value is not None:
            tokens.append((var, var.set(_clean(value))))
    try:
        yield
    finally:
        for var, token in reversed(tokens):
            var.reset(token)


__all__ = ["configure_logging", "log_context", "set_session_id", "set_track", "set_wizard_step"]
