"""Country to currency rate table used by the payment step.

The rates are illustrative USD conversion factors. The payment gateway account
must have each currency enabled; the wizard only passes the values through.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrencyInfo:
    """Currency code, USD conversion rate and display symbol for a country."""

    currency: str
    rate: float
    symbol: str


COUNTRY_CURRENCIES: Mapping[str, CurrencyInfo] = MappingProxyType(
    {
        "Ghana": CurrencyInfo("GHS", 10, "₵"),
        "Nigeria": CurrencyInfo("NGN", 1500, "₦"),
        "Kenya": CurrencyInfo("KES", 130, "KSh"),
        "South Africa": CurrencyInfo("ZAR", 18, "R"),
        "Egypt": CurrencyInfo("EGP", 47, "E£"),
        "Morocco": CurrencyInfo("MAD", 10, "DH"),
        "Algeria": CurrencyInfo("DZD", 135, "DA"),
        "Ethiopia": CurrencyInfo("ETB", 57, "Br"),
        "Tanzania": CurrencyInfo("TZS", 2500, "TSh"),
        "Uganda": CurrencyInfo("UGX", 3800, "USh"),
        "Rwanda": CurrencyInfo("RWF", 1250, "RF"),
        "Cameroon": CurrencyInfo("XAF", 600, "FCFA"),
        "Senegal": CurrencyInfo("XOF", 600, "FCFA"),
        "Ivory Coast": CurrencyInfo("XOF", 600, "FCFA"),
        "Zambia": CurrencyInfo("ZMW", 25, "ZK"),
        "Botswana": CurrencyInfo("BWP", 13, "P"),
        "Mauritius": CurrencyInfo("MUR", 46, "Rs"),
    }
)

FALLBACK_COUNTRY = next(iter(COUNTRY_CURRENCIES))


def normalise_country(value: object | None) -> str:
    """Return ``value`` when it is a known country, else the first table entry."""

    if isinstance(value, str):
        candidate = value.strip()
        if candidate in COUNTRY_CURRENCIES:
            return candidate
        lowered = candidate.casefold()
        for country in COUNTRY_CURRENCIES:
            if country.casefold() == lowered:
                return country
        if candidate:
            logger.warning("Unknown payment country '%s'; falling back to %s", candidate, FALLBACK_COUNTRY)
    return FALLBACK_COUNTRY


def currency_for(country: str | None) -> CurrencyInfo:
    """Return the :class:`CurrencyInfo` for ``country`` with fallback."""

    return COUNTRY_CURRENCIES[normalise_country(country)]


__all__ = ["COUNTRY_CURRENCIES", "CurrencyInfo", "FALLBACK_COUNTRY", "currency_for", "normalise_country"]
