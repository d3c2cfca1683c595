"""Regression tests for :func:`state.ensure_state` and :func:`state.reset_state`."""

import streamlit as st

import config
from constants.keys import StateKeys, UIKeys
from state import ensure_state, reset_state


class _ActiveSession:
    def __init__(self) -> None:
        self.abandoned = False

    def abandon(self) -> None:
        self.abandoned = True


def test_ensure_state_seeds_defaults() -> None:
    ensure_state()

    assert st.session_state[StateKeys.VIEW] == "selection"
    assert st.session_state[StateKeys.TRACK] is None
    assert st.session_state[StateKeys.NOTICES] == []
    assert st.session_state[UIKeys.PAYMENT_AMOUNT] == f"{config.APPLICATION_FEE_USD:g}"
    assert st.session_state[UIKeys.PAYMENT_COUNTRY] == config.DEFAULT_PAYMENT_COUNTRY
    assert len(st.session_state[StateKeys.SESSION_ID]) == 32


def test_ensure_state_preserves_existing_values() -> None:
    st.session_state[StateKeys.VIEW] = "payment"
    st.session_state[UIKeys.PAYMENT_EMAIL] = "ada@example.com"

    ensure_state()

    assert st.session_state[StateKeys.VIEW] == "payment"
    assert st.session_state[UIKeys.PAYMENT_EMAIL] == "ada@example.com"


def test_reset_state_keeps_session_id_and_abandons_application() -> None:
    ensure_state()
    session_id = st.session_state[StateKeys.SESSION_ID]
    active = _ActiveSession()
    st.session_state[StateKeys.APPLICATION_SESSION] = active
    st.session_state[StateKeys.VIEW] = "participant_application"
    st.session_state["ui.field.participant.firstName"] = "Ada"

    reset_state()

    assert active.abandoned
    assert st.session_state[StateKeys.SESSION_ID] == session_id
    assert st.session_state[StateKeys.VIEW] == "selection"
    assert st.session_state[StateKeys.APPLICATION_SESSION] is None
    assert "ui.field.participant.firstName" not in st.session_state
