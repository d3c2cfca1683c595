# app.py — Miss Bloom Global applications (Streamlit entrypoint)
from __future__ import annotations

from pathlib import Path
import sys

import streamlit as st

APP_ROOT = Path(__file__).resolve().parent
if str(APP_ROOT) not in sys.path:
    sys.path.insert(0, str(APP_ROOT))

import config  # noqa: E402
from constants.keys import StateKeys  # noqa: E402
from core.media import get_media_executor  # noqa: E402
from core.tracks import WizardTrack  # noqa: E402
from integrations.submission_api import SubmissionClient  # noqa: E402
from state import ensure_state  # noqa: E402
from state.session import ApplicationSession  # noqa: E402
from utils.logging_context import configure_logging, set_session_id  # noqa: E402
from utils.notifications import StreamlitNotifier  # noqa: E402
from utils.telemetry import setup_tracing  # noqa: E402
from wizard.app_flow import AppFlow  # noqa: E402
from wizard.ui import render_app  # noqa: E402

APP_VERSION = "1.0.0"

configure_logging(level=config.LOG_LEVEL)
setup_tracing()

st.set_page_config(
    page_title="Miss Bloom Global - Applications",
    page_icon="🌸",
    layout="centered",
)

ensure_state()
st.session_state.setdefault("app_version", APP_VERSION)
set_session_id(st.session_state[StateKeys.SESSION_ID])

notifier = StreamlitNotifier(pending=st.session_state[StateKeys.NOTICES])


def _new_session(track: WizardTrack) -> ApplicationSession:
    return ApplicationSession(
        track,
        notifier,
        transport=SubmissionClient(),
        executor=get_media_executor(),
    )


flow = AppFlow(_new_session)
notifier.render_pending()
render_app(flow, notifier)
