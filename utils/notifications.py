"""User-facing notification channel.

The wizard engine only produces message text; presentation is delegated to a
:class:`Notifier`. :class:`StreamlitNotifier` renders through ``st.toast`` and
``st.error``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

import streamlit as st

logger = logging.getLogger(__name__)


class NoticeLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


class Notifier(Protocol):
    """Fire-and-forget sink for human-readable messages."""

    def success(self, title: str, description: str | None = None) -> None: ...

    def error(self, title: str, description: str | None = None) -> None: ...

    def info(self, title: str, description: str | None = None) -> None: ...


@dataclass(frozen=True)
class Notice:
    level: NoticeLevel
    title: str
    description: str | None = None

    @property
    def text(self) -> str:
        if self.description:
            return f"{self.title}\n\n{self.description}"
        return self.title


_ICONS: dict[NoticeLevel, str] = {
    NoticeLevel.SUCCESS: "✅",
    NoticeLevel.ERROR: "⚠️",
    NoticeLevel.INFO: "ℹ️",
}


class StreamlitNotifier:
    """Render notices as Streamlit toasts.

    Errors are additionally queued so the next rerun can show them inline with
    ``st.error``; toasts vanish after a few seconds while the inline box stays
    until the user acts.
    """

    def __init__(self, *, pending: list[Notice] | None = None) -> None:
        self._pending = pending if pending is not None else []

    def _emit(self, notice: Notice) -> None:
        logger.debug("Notice (%s): %s", notice.level, notice.title)
        st.toast(notice.text, icon=_ICONS[notice.level])
        if notice.level is NoticeLevel.ERROR:
            self._pending.append(notice)

    def success(self, title: str, description: str | None = None) -> None:
        self._emit(Notice(NoticeLevel.SUCCESS, title, description))

    def error(self, title: str, description: str | None = None) -> None:
        self._emit(Notice(NoticeLevel.ERROR, title, description))

    def info(self, title: str, description: str | None = None) -> None:
        self._emit(Notice(NoticeLevel.INFO, title, description))

    def render_pending(self) -> None:
        """Show queued error notices inline and clear the queue."""

        while self._pending:
            notice = self._pending.pop(0)
            st.error(notice.text)


__all__ = [
    "Notice",
    "NoticeLevel",
    "Notifier",
    "StreamlitNotifier",
]
