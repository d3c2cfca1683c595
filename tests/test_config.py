from __future__ import annotations

import pytest
import streamlit as st

import config
from config.currencies import FALLBACK_COUNTRY, currency_for, normalise_country


def test_parse_positive_int_env_accepts_numbers() -> None:
    assert config._parse_positive_int_env("3145728", env_var="MAX_UPLOAD_BYTES", default=1) == 3145728
    assert config._parse_positive_int_env(" 2.0 ", env_var="MEDIA_READ_WORKERS", default=4) == 2
    assert config._parse_positive_int_env(None, env_var="MEDIA_READ_WORKERS", default=4) == 4
    assert config._parse_positive_int_env("  ", env_var="MEDIA_READ_WORKERS", default=4) == 4


@pytest.mark.parametrize("value", ["lots", "0", "-3"])
def test_parse_positive_int_env_warns_on_bad_values(value: str) -> None:
    with pytest.warns(RuntimeWarning):
        assert config._parse_positive_int_env(value, env_var="MAX_UPLOAD_BYTES", default=7) == 7


def test_normalise_timeout() -> None:
    assert config._normalise_timeout("12.5") == 12.5
    assert config._normalise_timeout(None, default=5.0) == 5.0
    with pytest.warns(RuntimeWarning):
        assert config._normalise_timeout("soon", default=5.0) == 5.0
    with pytest.warns(RuntimeWarning):
        assert config._normalise_timeout(-1, default=5.0) == 5.0


def test_normalise_amount() -> None:
    assert config._normalise_amount("99.99", default=250.0) == 99.99
    with pytest.warns(RuntimeWarning):
        assert config._normalise_amount("free", default=250.0) == 250.0
    with pytest.warns(RuntimeWarning):
        assert config._normalise_amount("0", default=250.0) == 250.0


def test_paystack_key_prefers_secrets(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(st, "secrets", {"paystack": {"PUBLIC_KEY": " pk_test_section "}}, raising=False)
    monkeypatch.setenv("PAYSTACK_PUBLIC_KEY", "pk_env")

    assert config.get_paystack_public_key() == "pk_test_section"


def test_paystack_key_falls_back_to_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(st, "secrets", {}, raising=False)
    monkeypatch.setenv("PAYSTACK_PUBLIC_KEY", " pk_env ")

    assert config.get_paystack_public_key() == "pk_env"


def test_normalise_country() -> None:
    assert FALLBACK_COUNTRY == "Ghana"
    assert normalise_country("south africa") == "South Africa"
    assert normalise_country(" Kenya ") == "Kenya"
    assert normalise_country("Atlantis") == "Ghana"
    assert normalise_country(None) == "Ghana"


def test_currency_for() -> None:
    assert currency_for("Ivory Coast").currency == "XOF"
    assert currency_for(None).currency == "GHS"
