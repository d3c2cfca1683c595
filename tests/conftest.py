from pathlib import Path
import sys
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from io import BytesIO
from typing import Any, Callable, Iterator, Mapping

import pytest
import streamlit as st
from PIL import Image


ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.errors import SubmissionError  # noqa: E402
from integrations.submission_api import SubmissionResponse  # noqa: E402
from utils.notifications import Notice, NoticeLevel  # noqa: E402

TODAY = date(2026, 6, 15)
PNG_PAYLOAD = "data:image/png;base64,iVBORw0KGgo="


@dataclass
class _SessionDict(dict[str, object]):
    """Lightweight replacement for ``st.session_state`` during tests."""

    def clear(self) -> None:  # type: ignore[override]
        super().clear()


@pytest.fixture(autouse=True)
def _stub_streamlit_session_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[_SessionDict]:
    """Replace Streamlit's runtime-bound session state with a plain dictionary."""

    session_state = _SessionDict()
    monkeypatch.setattr(st, "session_state", session_state, raising=False)
    yield session_state


@dataclass
class FakeUpload:
    """Stand-in for Streamlit's ``UploadedFile``."""

    name: str
    data: bytes
    type: str | None = None
    file_id: str = ""

    @property
    def size(self) -> int:
        return len(self.data)

    def getvalue(self) -> bytes:
        return self.data


@dataclass
class RecordingNotifier:
    """Notifier collecting notices in memory."""

    notices: list[Notice] = field(default_factory=list)

    def success(self, title: str, description: str | None = None) -> None:
        self.notices.append(Notice(NoticeLevel.SUCCESS, title, description))

    def error(self, title: str, description: str | None = None) -> None:
        self.notices.append(Notice(NoticeLevel.ERROR, title, description))

    def info(self, title: str, description: str | None = None) -> None:
        self.notices.append(Notice(NoticeLevel.INFO, title, description))

    def titles(self, level: NoticeLevel | None = None) -> list[str]:
        return [notice.title for notice in self.notices if level is None or notice.level is level]

    @property
    def last(self) -> Notice | None:
        return self.notices[-1] if self.notices else None


@dataclass
class FakeTransport:
    """Submission transport returning queued responses or raising queued errors."""

    outcomes: list[SubmissionResponse | SubmissionError] = field(default_factory=list)
    payloads: list[dict[str, Any]] = field(default_factory=list)
    before_return: Callable[[], None] | None = None

    def submit(self, payload: Mapping[str, Any]) -> SubmissionResponse:
        self.payloads.append(dict(payload))
        if self.before_return is not None:
            self.before_return()
        outcome = self.outcomes.pop(0) if self.outcomes else SubmissionResponse(accepted=True, success=True)
        if isinstance(outcome, SubmissionError):
            raise outcome
        return outcome


def image_bytes(fmt: str = "PNG", size: tuple[int, int] = (4, 4)) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, color=(200, 30, 90)).save(buffer, format=fmt)
    return buffer.getvalue()


def words(count: int) -> str:
    return " ".join(f"word{index}" for index in range(count))


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def executor() -> Iterator[ThreadPoolExecutor]:
    pool = ThreadPoolExecutor(max_workers=2, thread_name_prefix="test-media")
    yield pool
    pool.shutdown(wait=True)


@pytest.fixture
def make_upload() -> Callable[..., FakeUpload]:
    def _make(name: str = "head.png", data: bytes | None = None, type: str | None = "image/png") -> FakeUpload:
        return FakeUpload(name=name, data=image_bytes() if data is None else data, type=type)

    return _make


@pytest.fixture
def participant_values() -> dict[str, object]:
    """Field values that satisfy every participant rule on ``TODAY``."""

    return {
        "dateOfBirth": "2000-01-01",
        "isEligible": True,
        "hasValidPassport": True,
        "canTravel": True,
        "isGoodHealth": True,
        "willFollowRules": True,
        "firstName": "Ada",
        "lastName": "Lovelace",
        "email": "ada@example.com",
        "phone": "+233 555 0100",
        "country": "Ghana",
        "city": "Accra",
        "ethnicity": "Akan",
        "representCountry": "Ghana",
        "experience": "Model and host",
        "education": "BSc Economics",
        "skills": "Public speaking",
        "motivation": words(25),
        "goals": words(30),
        "strategy": words(60),
        "headShot1": PNG_PAYLOAD,
        "bodyShot1": PNG_PAYLOAD,
        "bio": "Curious and driven.",
        "socialMedia": "@ada",
        "countryOverview": "Coastal country in West Africa.",
        "culturalInfo": "Kente weaving and highlife music.",
        "agreeTerms": True,
    }


@pytest.fixture
def director_values() -> dict[str, object]:
    """Field values that satisfy every director rule."""

    return {
        "fullName": "Kwame Mensah",
        "email": "kwame@example.com",
        "phone": "0244123456",
        "country": "Ghana",
        "city": "Kumasi",
        "motivation": words(22),
        "goals": words(22),
        "strategy": words(55),
        "agreeToTerms": True,
        "agreeToConfidentiality": True,
        "dateOfBirth": "1985-04-12",
        "bio": "Event producer for fifteen years.",
        "socialMedia": "@kwame",
        "countryOverview": "Growing creative industry.",
        "culturalInfo": "Ashanti heritage.",
    }
