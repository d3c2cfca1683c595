"""Streamlit rendering for the application wizard and payment step."""

from __future__ import annotations

import json
import logging
from datetime import date
from typing import Callable

import streamlit as st
import streamlit.components.v1 as components

import config
from config.currencies import COUNTRY_CURRENCIES
from constants.keys import StateKeys, UIKeys
from core.derived import AGE_FIELD, char_count, parse_iso_date, word_count
from core.media import decode_payload
from core.sections import Counter, FieldSpec, Section, WidgetKind
from core.tracks import TrackKey, get_track
from integrations.payment import (
    PaymentForm,
    PaymentOutcome,
    PaymentRequest,
    build_payment_request,
    format_local_amount,
    handle_payment_outcome,
    parse_amount,
)
from state.session import ApplicationSession
from utils.logging_context import log_context
from utils.notifications import Notifier
from wizard.app_flow import AppFlow, AppView
from wizard.navigator import SectionStatus

logger = logging.getLogger(__name__)

IMAGE_TYPES = ["jpg", "jpeg", "png", "webp"]
MEDIA_RENDER_WAIT_SECONDS = 3.0
EARLIEST_BIRTH_DATE = date(1900, 1, 1)

_STATUS_ICONS = {
    SectionStatus.COMPLETED: "✓",
    SectionStatus.CURRENT: "●",
    SectionStatus.UPCOMING: "○",
}


def _widget_key(session: ApplicationSession, name: str) -> str:
    return UIKeys.field(str(session.track.key), name)


def _store_widget_value(session: ApplicationSession, name: str, convert: Callable[[object], object] | None = None) -> None:
    raw = st.session_state.get(_widget_key(session, name))
    session.set_field(name, convert(raw) if convert is not None else raw)


def _date_to_text(value: object) -> str:
    return value.isoformat() if isinstance(value, date) else ""


def clear_widget_state(track: TrackKey | str) -> None:
    """Forget widget values of ``track`` so the next render reads the store."""

    prefixes = (f"{UIKeys.FIELD_PREFIX}{track}.", f"{UIKeys.UPLOAD_PREFIX}{track}.")
    for key in [key for key in st.session_state.keys() if str(key).startswith(prefixes)]:
        del st.session_state[key]


def _render_counter(spec: FieldSpec, value: str) -> None:
    if spec.counter is Counter.WORDS:
        count = word_count(value)
        st.caption(f"{count} / {spec.counter_limit} words")
    elif spec.counter is Counter.CHARS:
        count = char_count(value)
        st.caption(f"{count} / {spec.counter_limit} characters")


def _render_field_error(errors: dict[str, str], name: str) -> None:
    message = errors.get(name)
    if message:
        st.markdown(f":red[{message}]")


def render_field(session: ApplicationSession, spec: FieldSpec, errors: dict[str, str]) -> None:
    """Render one input widget bound to the session's field store."""

    store = session.store
    key = _widget_key(session, spec.name)
    if spec.kind is WidgetKind.DERIVED:
        value = store[spec.name] or ""
        if spec.name == AGE_FIELD:
            if parse_iso_date(store["dateOfBirth"]) is not None and value:
                st.info(f"Your age: {value} years")
        else:
            st.text_input(spec.label, value=str(value), disabled=True)
        return

    if spec.kind is WidgetKind.CHECKBOX:
        st.checkbox(
            spec.label,
            value=bool(store[spec.name]),
            key=key,
            on_change=_store_widget_value,
            args=(session, spec.name),
        )
    elif spec.kind is WidgetKind.DATE:
        st.date_input(
            spec.display_label,
            value=parse_iso_date(store[spec.name]),
            min_value=EARLIEST_BIRTH_DATE,
            max_value=date.today(),
            format="YYYY-MM-DD",
            key=key,
            on_change=_store_widget_value,
            args=(session, spec.name, _date_to_text),
        )
    elif spec.kind is WidgetKind.TEXTAREA:
        st.text_area(
            spec.display_label,
            value=str(store[spec.name] or ""),
            placeholder=spec.placeholder,
            help=spec.help,
            key=key,
            on_change=_store_widget_value,
            args=(session, spec.name),
        )
        _render_counter(spec, str(store[spec.name] or ""))
    elif spec.kind is WidgetKind.IMAGE:
        render_image_slot(session, spec)
    else:
        st.text_input(
            spec.display_label,
            value=str(store[spec.name] or ""),
            placeholder=spec.placeholder,
            help=spec.help,
            key=key,
            on_change=_store_widget_value,
            args=(session, spec.name),
        )
    _render_field_error(errors, spec.name)


def _attach_upload(session: ApplicationSession, slot: str) -> None:
    upload = st.session_state.get(UIKeys.upload(str(session.track.key), slot))
    session.attach(slot, upload)


def render_image_slot(session: ApplicationSession, spec: FieldSpec) -> None:
    """Render a file uploader for ``spec`` and preview the attached image.

    Uploads are attached from the widget's change callback only: Streamlit
    recreates an empty uploader when the section is shown again, which must
    not clear an image that is already stored.
    """

    st.file_uploader(
        spec.display_label,
        type=IMAGE_TYPES,
        help=spec.help,
        key=UIKeys.upload(str(session.track.key), spec.name),
        on_change=_attach_upload,
        args=(session, spec.name),
    )
    if session.media.is_pending(spec.name):
        with st.spinner("Processing image..."):
            session.media.drain(wait=True, timeout=MEDIA_RENDER_WAIT_SECONDS)
    payload = session.store[spec.name]
    if isinstance(payload, str) and payload:
        st.image(decode_payload(payload), caption=spec.label, width=160)


def render_stepper(session: ApplicationSession) -> None:
    """Render the progress bar and the jump-to-section buttons."""

    navigator = session.navigator
    st.progress(navigator.progress)
    columns = st.columns(len(navigator.sections))
    for column, section in zip(columns, navigator.sections):
        status = navigator.status_for(section.key)
        with column:
            st.button(
                f"{_STATUS_ICONS[status]} {section.badge}",
                key=f"stepper.{session.track.key}.{section.key}",
                help=section.title,
                disabled=not navigator.can_jump_to(section.key),
                type="primary" if status is SectionStatus.CURRENT else "secondary",
                on_click=session.jump_to,
                args=(section.key,),
                use_container_width=True,
            )


def render_terms(session: ApplicationSession, section: Section, errors: dict[str, str]) -> None:
    with st.container(border=True, height=220):
        st.markdown(
            "By submitting this application you confirm that all information provided is "
            "accurate and complete. Applicants must be between 18 and 35 years old, hold a "
            "valid passport, be available to travel for the full duration of the event and "
            "agree to follow the rules and code of conduct set by the organisers. "
            "Photos submitted may be used for promotional purposes. Application fees are "
            "non-refundable once the application has been processed."
        )
    for spec in section.fields:
        render_field(session, spec, errors)


def render_review(session: ApplicationSession) -> None:
    """Show every submittable section with its current values and violations."""

    track = session.track
    errors = session.field_errors()
    store = session.store
    for section in track.sections:
        if section.submit_excluded:
            continue
        with st.expander(f"{section.badge}. {section.title}", expanded=False):
            for spec in track.review_fields(section.key):
                value = store[spec.name]
                if spec.kind is WidgetKind.IMAGE:
                    st.markdown(f"**{spec.label}:** {'Uploaded' if value else 'Not uploaded'}")
                elif spec.kind is WidgetKind.CHECKBOX:
                    st.markdown(f"**{spec.label}:** {'Yes' if value else 'No'}")
                else:
                    st.markdown(f"**{spec.label}:** {value or '—'}")
                _render_field_error(errors, spec.name)
            st.button(
                "Edit section",
                key=f"review.edit.{track.key}.{section.key}",
                on_click=session.jump_to,
                args=(section.key,),
            )
    _render_field_error(errors, track.terms_field or "")


def render_section(session: ApplicationSession) -> None:
    section = session.navigator.current_section
    errors = session.field_errors()
    st.subheader(f"{section.badge}. {section.title}")
    if section.description:
        st.caption(section.description)
    if section.key == session.track.terms_section:
        render_terms(session, section, errors)
    elif not section.fields:
        render_review(session)
    else:
        for spec in section.fields:
            render_field(session, spec, errors)


def _submit(flow: AppFlow) -> None:
    track = flow.track
    with st.spinner("Submitting application..."):
        result = flow.submit()
    if result is not None and result.ok and track is not None:
        clear_widget_state(track)


def _back_to_selection(flow: AppFlow) -> None:
    track = flow.track
    flow.back_to_selection()
    if track is not None:
        clear_widget_state(track)


def render_application(flow: AppFlow) -> None:
    """Render the form for the active application session."""

    session = flow.application
    if session is None:
        flow.back_to_selection()
        st.rerun()
        return
    with log_context(track=str(session.track.key), wizard_step=session.navigator.current_key):
        _render_form(flow, session)


def _render_form(flow: AppFlow, session: ApplicationSession) -> None:
    session.refresh()
    navigator = session.navigator

    st.title(session.track.title)
    render_stepper(session)
    render_section(session)

    st.divider()
    back_col, prev_col, next_col = st.columns([2, 1, 1])
    with back_col:
        st.button("Back to application type", on_click=_back_to_selection, args=(flow,))
    with prev_col:
        st.button("Previous", disabled=navigator.is_first, on_click=session.previous, use_container_width=True)
    with next_col:
        if navigator.is_last:
            st.button(
                "Submitting..." if navigator.submitting else "Submit Application",
                type="primary",
                disabled=navigator.submitting,
                on_click=_submit,
                args=(flow,),
                use_container_width=True,
            )
        else:
            st.button("Next", type="primary", on_click=session.next, use_container_width=True)


def render_selection(flow: AppFlow) -> None:
    st.title("Choose Your Application Type")
    st.write("Please select the type of application you wish to complete.")
    st.button(
        "Participant Application",
        type="primary",
        use_container_width=True,
        on_click=flow.select_track,
        args=(TrackKey.PARTICIPANT,),
    )
    st.button(
        "National Director Application",
        use_container_width=True,
        on_click=flow.select_track,
        args=(TrackKey.DIRECTOR,),
    )


def _checkout_html(request: PaymentRequest) -> str:
    options = {
        "key": request.public_key,
        "email": request.email,
        "amount": request.amount,
        "currency": request.currency,
        "ref": request.reference,
        "metadata": request.metadata.model_dump(),
    }
    return f"""
    <script src="https://js.paystack.co/v1/inline.js"></script>
    <button id="pay" style="padding:0.6rem 1.2rem;font-weight:600;">Pay now</button>
    <p id="status"></p>
    <script>
    const options = {json.dumps(options)};
    document.getElementById("pay").onclick = function () {{
        const handler = PaystackPop.setup(Object.assign({{}}, options, {{
            callback: function (response) {{
                document.getElementById("status").innerText =
                    "Payment reference " + response.reference + " completed. Confirm below.";
            }},
            onClose: function () {{
                document.getElementById("status").innerText = "Payment window closed.";
            }}
        }}));
        handler.openIframe();
    }};
    </script>
    """


def _prepare_payment(flow: AppFlow, notifier: Notifier) -> None:
    form = PaymentForm(
        amount_usd=str(st.session_state.get(UIKeys.PAYMENT_AMOUNT, "")),
        email=str(st.session_state.get(UIKeys.PAYMENT_EMAIL, "")),
        country=st.session_state.get(UIKeys.PAYMENT_COUNTRY),
    )
    errors = form.validate()
    st.session_state[StateKeys.PAYMENT_ERRORS] = [error.as_dict() for error in errors]
    if errors:
        st.session_state[StateKeys.PAYMENT_REFERENCE] = None
        notifier.error("Please fix the errors before proceeding.")
        return
    track = flow.track
    request = build_payment_request(
        parse_amount(form.amount_usd) or config.APPLICATION_FEE_USD,
        form.country,
        form.email,
        application_type=get_track(track).title if track is not None else "Application",
    )
    st.session_state[StateKeys.PAYMENT_REFERENCE] = request.model_dump()
    notifier.info("Proceeding to payment gateway...")


def _payment_outcome(flow: AppFlow, notifier: Notifier, outcome: PaymentOutcome) -> None:
    if handle_payment_outcome(outcome, notifier):
        flow.payment_succeeded()
    st.session_state[StateKeys.PAYMENT_REFERENCE] = None


def render_payment(flow: AppFlow, notifier: Notifier) -> None:
    """Render the payment form, the checkout widget and the outcome buttons."""

    st.title("Application Fee")
    st.write("Complete your payment to finalise your application.")
    errors = {item["field"]: item["message"] for item in st.session_state.get(StateKeys.PAYMENT_ERRORS, [])}

    countries = list(COUNTRY_CURRENCIES)
    st.selectbox("Country", countries, key=UIKeys.PAYMENT_COUNTRY)
    st.text_input("Amount (USD)", key=UIKeys.PAYMENT_AMOUNT)
    _render_field_error(errors, "amountUSD")
    st.text_input("Email Address", key=UIKeys.PAYMENT_EMAIL, placeholder="your.email@example.com")
    _render_field_error(errors, "emailAddress")

    amount = parse_amount(str(st.session_state.get(UIKeys.PAYMENT_AMOUNT, "")))
    if amount is not None:
        st.metric("Total in local currency", format_local_amount(amount, st.session_state.get(UIKeys.PAYMENT_COUNTRY)))

    back_col, pay_col = st.columns(2)
    with back_col:
        st.button("Back", on_click=flow.back_from_payment, use_container_width=True)
    with pay_col:
        st.button("Proceed to payment", type="primary", on_click=_prepare_payment, args=(flow, notifier), use_container_width=True)

    prepared = st.session_state.get(StateKeys.PAYMENT_REFERENCE)
    if not prepared:
        return
    request = PaymentRequest.model_validate(prepared)
    if not request.public_key:
        st.warning("The payment gateway is not configured. Please contact the organisers.")
    components.html(_checkout_html(request), height=120)
    done_col, close_col = st.columns(2)
    with done_col:
        st.button(
            "I have completed the payment",
            type="primary",
            on_click=_payment_outcome,
            args=(flow, notifier, PaymentOutcome.SUCCESS),
            use_container_width=True,
        )
    with close_col:
        st.button(
            "Cancel payment",
            on_click=_payment_outcome,
            args=(flow, notifier, PaymentOutcome.CLOSE),
            use_container_width=True,
        )


def render_final_success(flow: AppFlow) -> None:
    st.balloons()
    st.title("Application Complete!")
    st.success(
        "Thank you for your application and payment. We'll review your submission and "
        "contact you via email with next steps."
    )
    st.button("Start a new application", on_click=flow.restart)


def render_app(flow: AppFlow, notifier: Notifier) -> None:
    """Dispatch to the renderer of the active view."""

    view = flow.view
    if view is AppView.SELECTION:
        render_selection(flow)
    elif view is AppView.PAYMENT:
        render_payment(flow, notifier)
    elif view is AppView.FINAL_SUCCESS:
        render_final_success(flow)
    else:
        render_application(flow)


__all__ = [
    "clear_widget_state",
    "render_app",
    "render_application",
    "render_field",
    "render_final_success",
    "render_payment",
    "render_review",
    "render_selection",
    "render_stepper",
]
