from __future__ import annotations

import pytest

from config.currencies import COUNTRY_CURRENCIES
from integrations.payment import (
    AMOUNT_FIELD,
    EMAIL_FIELD,
    PaymentForm,
    PaymentOutcome,
    build_payment_request,
    format_local_amount,
    handle_payment_outcome,
    parse_amount,
    to_minor_units,
)
from conftest import RecordingNotifier
from utils.notifications import NoticeLevel


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("250", 250.0), (" 99.5 ", 99.5), ("0", None), ("-4", None), ("abc", None), ("nan", None), ("inf", None)],
)
def test_parse_amount(raw: str, expected: float | None) -> None:
    assert parse_amount(raw) == expected


def test_payment_form_messages() -> None:
    errors = PaymentForm(amount_usd="", email="").validate()

    assert [(error.field, error.message) for error in errors] == [
        (AMOUNT_FIELD, "Payment amount is required."),
        (EMAIL_FIELD, "Email address is required for payment."),
    ]

    errors = PaymentForm(amount_usd="0", email="nobody").validate()

    assert [error.message for error in errors] == [
        "Please enter a valid amount greater than 0.",
        "Please enter a valid email format.",
    ]
    assert PaymentForm(amount_usd="250", email="ada@example.com").validate() == []


def test_minor_units_use_country_rate() -> None:
    assert to_minor_units(250, COUNTRY_CURRENCIES["Ghana"]) == 250000
    assert to_minor_units(250, COUNTRY_CURRENCIES["Nigeria"]) == 37_500_000


def test_format_local_amount() -> None:
    assert format_local_amount(250, "Kenya") == "KSh32,500.00 KES"


def test_build_payment_request() -> None:
    request = build_payment_request(
        250,
        "nigeria",
        " ada@example.com ",
        application_type="Participant Application",
        public_key="pk_test_123",
        clock=lambda: 1_700_000_000.5,
    )

    assert request.email == "ada@example.com"
    assert request.amount == 37_500_000
    assert request.currency == "NGN"
    assert request.reference == "1700000000500"
    fields = {field.variable_name: field.value for field in request.metadata.custom_fields}
    assert fields == {
        "app_type": "Participant Application",
        "original_amount_usd": "250",
        "selected_country": "Nigeria",
        "processed_currency": "NGN",
    }


def test_unknown_country_falls_back_to_first_entry() -> None:
    request = build_payment_request(
        10,
        "Atlantis",
        "ada@example.com",
        application_type="Director",
        public_key="pk",
        clock=lambda: 1.0,
    )

    assert request.currency == "GHS"
    assert request.amount == 10_000


def test_payment_outcomes(notifier: RecordingNotifier) -> None:
    assert handle_payment_outcome(PaymentOutcome.SUCCESS, notifier) is True
    assert handle_payment_outcome("close", notifier) is False
    assert handle_payment_outcome(PaymentOutcome.FAILURE, notifier, message="Card declined") is False

    assert [(notice.level, notice.title) for notice in notifier.notices] == [
        (NoticeLevel.SUCCESS, "Payment successful! Verifying transaction..."),
        (NoticeLevel.INFO, "Payment cancelled or closed."),
        (NoticeLevel.ERROR, "Payment failed."),
    ]
    assert notifier.last is not None
    assert notifier.last.description == "Card declined"
