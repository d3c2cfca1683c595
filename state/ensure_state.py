"""Helpers for initializing Streamlit session state."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Callable

import streamlit as st

import config
from constants.keys import StateKeys, UIKeys

logger = logging.getLogger(__name__)


_DEFAULT_STATE_FACTORIES: Mapping[str, Callable[[], Any]] = MappingProxyType(
    {
        StateKeys.SESSION_ID: lambda: uuid.uuid4().hex,
        StateKeys.VIEW: lambda: "selection",
        StateKeys.TRACK: lambda: None,
        StateKeys.APPLICATION_SESSION: lambda: None,
        StateKeys.PAYMENT_ERRORS: list,
        StateKeys.PAYMENT_REFERENCE: lambda: None,
        StateKeys.NOTICES: list,
        UIKeys.PAYMENT_EMAIL: lambda: "",
        UIKeys.PAYMENT_AMOUNT: lambda: f"{config.APPLICATION_FEE_USD:g}",
        UIKeys.PAYMENT_COUNTRY: lambda: config.DEFAULT_PAYMENT_COUNTRY,
    }
)


def ensure_state() -> None:
    """Initialize ``st.session_state`` with required keys.

    Existing keys are preserved so widget values survive reruns.
    """

    for key, factory in _DEFAULT_STATE_FACTORIES.items():
        if key not in st.session_state:
            st.session_state[key] = factory()


def reset_state() -> None:
    """Drop the active application and all widget values, keeping the session id."""

    preserve = {StateKeys.SESSION_ID}
    active = st.session_state.get(StateKeys.APPLICATION_SESSION)
    abandon = getattr(active, "abandon", None)
    if callable(abandon):
        abandon()
    for key in list(st.session_state.keys()):
        if key not in preserve:
            del st.session_state[key]
    logger.info("Session state reset")
    ensure_state()


__all__ = ["ensure_state", "reset_state"]
