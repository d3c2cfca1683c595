"""Central configuration for the Miss Bloom Global application wizard.

Values are read once at import time from the environment (optionally seeded
from a local ``.env`` file). Numeric settings that cannot be parsed emit a
``RuntimeWarning`` and fall back to their defaults so a typo in the deployment
environment never prevents the wizard from starting.

``SUBMISSION_ENDPOINT_URL`` points at the collaborator endpoint that receives
completed applications, ``MAX_UPLOAD_BYTES`` caps the size of every uploaded
photo and ``APPLICATION_FEE_USD`` is the base amount forwarded to the payment
gateway before currency conversion.
"""

import logging
import os
import warnings
from typing import Mapping

import streamlit as st
from dotenv import load_dotenv

from . import currencies as currency_config

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_SUBMISSION_ENDPOINT = "http://localhost:5000/api/submit-form"
DEFAULT_MAX_UPLOAD_BYTES = 2 * 1024 * 1024


def _parse_positive_int_env(value: object | None, *, env_var: str, default: int) -> int:
    """Return a positive integer parsed from ``value`` or ``default``."""

    if value is None:
        return default
    if isinstance(value, str):
        candidate = value.strip()
        if not candidate:
            return default
        try:
            parsed = int(float(candidate))
        except ValueError:
            warnings.warn(
                "%s is not a number; ignoring %s" % (candidate, env_var),
                RuntimeWarning,
            )
            return default
    elif isinstance(value, (int, float)):
        parsed = int(value)
    else:
        warnings.warn(
            "Unsupported %s value '%s'; using %s." % (env_var, value, default),
            RuntimeWarning,
        )
        return default
    if parsed <= 0:
        warnings.warn(
            "%s must be positive; using %s." % (env_var, default),
            RuntimeWarning,
        )
        return default
    return parsed


def _normalise_timeout(value: object | None, *, default: float = 30.0) -> float:
    """Return a positive timeout value in seconds."""

    if value is None:
        return default
    candidate = value
    if isinstance(candidate, str):
        stripped = candidate.strip()
        if not stripped:
            return default
        try:
            candidate = float(stripped)
        except ValueError:
            warnings.warn(
                "Unsupported SUBMISSION_TIMEOUT_SECONDS '%s'; falling back to %.1f seconds." % (candidate, default),
                RuntimeWarning,
            )
            return default
    if isinstance(candidate, (int, float)):
        timeout = float(candidate)
        if timeout > 0:
            return timeout
    warnings.warn(
        "SUBMISSION_TIMEOUT_SECONDS must be a positive number; falling back to %.1f seconds." % default,
        RuntimeWarning,
    )
    return default


def _normalise_amount(value: object | None, *, default: float) -> float:
    """Return a positive currency amount parsed from ``value``."""

    if value is None:
        return default
    try:
        amount = float(str(value).strip())
    except ValueError:
        warnings.warn(
            "Unsupported APPLICATION_FEE_USD '%s'; falling back to %.2f." % (value, default),
            RuntimeWarning,
        )
        return default
    if amount <= 0:
        warnings.warn(
            "APPLICATION_FEE_USD must be positive; falling back to %.2f." % default,
            RuntimeWarning,
        )
        return default
    return amount


def _coerce_secret_value(value: object) -> str:
    """Return ``value`` as a trimmed string without raising on unexpected types."""

    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8", errors="ignore").strip()
    return str(value).strip()


def get_paystack_public_key() -> str:
    """Return the Paystack publishable key from secrets or environment variables."""

    # 1. Streamlit secrets (top-level key)
    try:
        direct_secret = st.secrets["PAYSTACK_PUBLIC_KEY"]
    except Exception:
        direct_secret = None
    key = _coerce_secret_value(direct_secret)
    if key:
        return key

    # 2. Streamlit secrets (``paystack`` section)
    try:
        paystack_section = st.secrets["paystack"]
    except Exception:
        paystack_section = None
    if isinstance(paystack_section, Mapping):
        section_key = _coerce_secret_value(paystack_section.get("PUBLIC_KEY"))
        if section_key:
            return section_key

    # 3. Environment variable fallback
    env_key = _coerce_secret_value(os.getenv("PAYSTACK_PUBLIC_KEY"))
    if not env_key:
        logger.info("PAYSTACK_PUBLIC_KEY not configured; the payment step will run without a gateway key.")
    return env_key


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO"

SUBMISSION_ENDPOINT_URL = (os.getenv("SUBMISSION_ENDPOINT_URL") or DEFAULT_SUBMISSION_ENDPOINT).strip()
SUBMISSION_TIMEOUT_SECONDS = _normalise_timeout(os.getenv("SUBMISSION_TIMEOUT_SECONDS"), default=30.0)

MAX_UPLOAD_BYTES = _parse_positive_int_env(
    os.getenv("MAX_UPLOAD_BYTES"),
    env_var="MAX_UPLOAD_BYTES",
    default=DEFAULT_MAX_UPLOAD_BYTES,
)
MEDIA_READ_WORKERS = _parse_positive_int_env(
    os.getenv("MEDIA_READ_WORKERS"),
    env_var="MEDIA_READ_WORKERS",
    default=4,
)

PAYSTACK_PUBLIC_KEY = get_paystack_public_key()
APPLICATION_FEE_USD = _normalise_amount(os.getenv("APPLICATION_FEE_USD"), default=250.0)
DEFAULT_PAYMENT_COUNTRY = currency_config.normalise_country(os.getenv("DEFAULT_PAYMENT_COUNTRY"))

COUNTRY_CURRENCIES = currency_config.COUNTRY_CURRENCIES
CurrencyInfo = currency_config.CurrencyInfo


__all__ = [
    "APPLICATION_FEE_USD",
    "COUNTRY_CURRENCIES",
    "CurrencyInfo",
    "DEFAULT_PAYMENT_COUNTRY",
    "LOG_LEVEL",
    "MAX_UPLOAD_BYTES",
    "MEDIA_READ_WORKERS",
    "PAYSTACK_PUBLIC_KEY",
    "SUBMISSION_ENDPOINT_URL",
    "SUBMISSION_TIMEOUT_SECONDS",
    "get_paystack_public_key",
]
