"""Payment step adapter: form checks, gateway request and outcome handling.

The hosted checkout widget itself is external. This module prepares the
request it expects (amount in minor units of the currency picked from the
country rate table) and maps its three terminal signals onto the wizard.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Callable

from pydantic import BaseModel, Field

import config
from config.currencies import CurrencyInfo, currency_for, normalise_country
from core.rules import EMAIL_PATTERN, FormError
from utils.notifications import Notifier

logger = logging.getLogger(__name__)

AMOUNT_FIELD = "amountUSD"
EMAIL_FIELD = "emailAddress"


class PaymentOutcome(StrEnum):
    """Terminal signals reported by the checkout widget."""

    SUCCESS = "success"
    CLOSE = "close"
    FAILURE = "failure"


@dataclass(frozen=True)
class PaymentForm:
    """Raw values typed on the payment page."""

    amount_usd: str
    email: str
    country: str | None = None

    def validate(self) -> list[FormError]:
        errors: list[FormError] = []
        amount = self.amount_usd.strip()
        if not amount:
            errors.append(FormError(AMOUNT_FIELD, "Payment amount is required."))
        elif parse_amount(amount) is None:
            errors.append(FormError(AMOUNT_FIELD, "Please enter a valid amount greater than 0."))
        email = self.email.strip()
        if not email:
            errors.append(FormError(EMAIL_FIELD, "Email address is required for payment."))
        elif not EMAIL_PATTERN.search(email):
            errors.append(FormError(EMAIL_FIELD, "Please enter a valid email format."))
        return errors


def parse_amount(raw: str) -> float | None:
    """Return a positive finite amount parsed from ``raw`` or ``None``."""

    try:
        value = float(raw.strip())
    except ValueError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


class CustomField(BaseModel):
    display_name: str
    variable_name: str
    value: str


class PaymentMetadata(BaseModel):
    custom_fields: list[CustomField] = Field(default_factory=list)


class PaymentRequest(BaseModel):
    """Configuration handed to the checkout widget."""

    public_key: str
    email: str
    amount: int
    currency: str
    reference: str
    metadata: PaymentMetadata


def to_minor_units(amount_usd: float, currency: CurrencyInfo) -> int:
    """Convert a USD amount into the smallest unit of ``currency``."""

    return round(amount_usd * currency.rate * 100)


def format_local_amount(amount_usd: float, country: str | None) -> str:
    currency = currency_for(country)
    return f"{currency.symbol}{amount_usd * currency.rate:,.2f} {currency.currency}"


def build_payment_request(
    amount_usd: float,
    country: str | None,
    email: str,
    *,
    application_type: str,
    public_key: str | None = None,
    clock: Callable[[], float] = time.time,
) -> PaymentRequest:
    """Assemble the checkout request for ``amount_usd`` charged in ``country``'s currency."""

    selected = normalise_country(country)
    currency = currency_for(selected)
    request = PaymentRequest(
        public_key=public_key if public_key is not None else config.PAYSTACK_PUBLIC_KEY,
        email=email.strip(),
        amount=to_minor_units(amount_usd, currency),
        currency=currency.currency,
        reference=str(int(clock() * 1000)),
        metadata=PaymentMetadata(
            custom_fields=[
                CustomField(display_name="Application Type", variable_name="app_type", value=application_type),
                CustomField(
                    display_name="Original Amount (USD)",
                    variable_name="original_amount_usd",
                    value=f"{amount_usd:g}",
                ),
                CustomField(display_name="Selected Country", variable_name="selected_country", value=selected),
                CustomField(
                    display_name="Processed Currency",
                    variable_name="processed_currency",
                    value=currency.currency,
                ),
            ]
        ),
    )
    logger.info("Prepared payment %s: %s %s", request.reference, request.amount, request.currency)
    return request


def handle_payment_outcome(
    outcome: PaymentOutcome | str,
    notifier: Notifier,
    *,
    message: str | None = None,
) -> bool:
    """React to a checkout signal; return ``True`` when the flow should proceed."""

    outcome = PaymentOutcome(outcome)
    if outcome is PaymentOutcome.SUCCESS:
        notifier.success("Payment successful! Verifying transaction...")
        logger.info("Payment completed")
        return True
    if outcome is PaymentOutcome.CLOSE:
        notifier.info("Payment cancelled or closed.")
        logger.info("Payment dialog closed")
        return False
    notifier.error("Payment failed.", message or "Please try again or use another payment method.")
    logger.warning("Payment failed: %s", message or "no details")
    return False


__all__ = [
    "AMOUNT_FIELD",
    "EMAIL_FIELD",
    "PaymentForm",
    "PaymentOutcome",
    "PaymentRequest",
    "build_payment_request",
    "format_local_amount",
    "handle_payment_outcome",
    "parse_amount",
    "to_minor_units",
]
