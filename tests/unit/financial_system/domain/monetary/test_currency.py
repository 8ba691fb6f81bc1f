from __future__ import annotations

import pytest

from financial_system.domain.monetary.currency import Currency, CurrencyType, normalize_code, resolve_currency
from financial_system.domain.monetary.currency_registry import BRL, BTC, JPY, USD
from financial_system.errors import InvalidCurrencyError


def test_predefined_currencies_are_registered():
    assert Currency.from_str("USD") is USD
    assert Currency.from_str(" brl ") is BRL
    assert JPY.precision == 0
    assert BTC.is_crypto
    assert BRL.is_fiat


@pytest.mark.parametrize("code", ["", "US", "USDT", "U$D", "12A", "ÜSD"])
def test_code_must_be_three_ascii_letters(code):
    with pytest.raises(InvalidCurrencyError):
        normalize_code(code)


def test_from_str_rejects_unknown_code():
    with pytest.raises(InvalidCurrencyError):
        Currency.from_str("ABC")


def test_from_str_rejects_non_string():
    with pytest.raises(TypeError):
        Currency.from_str(978)


def test_currency_validates_precision_and_name():
    with pytest.raises(ValueError):
        Currency("ABC", -1, "Bad")
    with pytest.raises(ValueError):
        Currency("ABC", 19, "Bad")
    with pytest.raises(ValueError):
        Currency("ABC", 2, " ")
    with pytest.raises(TypeError):
        Currency("ABC", 2, "Bad", currency_type="FIAT")


def test_register_refuses_silent_overwrite():
    with pytest.raises(ValueError):
        Currency.register(Currency("USD", 2, "Other Dollar", CurrencyType.FIAT))


def test_equality_is_by_code():
    assert Currency("usd", 2, "US Dollar") == USD
    assert hash(Currency("usd", 2, "US Dollar")) == hash(USD)
    assert USD != "USD"


def test_resolve_currency_accepts_instance_or_code():
    assert resolve_currency(USD) is USD
    assert resolve_currency("jpy") is JPY


def test_resolve_currency_rejects_unregistered_instance():
    with pytest.raises(InvalidCurrencyError):
        resolve_currency(Currency("ZZZ", 2, "Unknown"))


@pytest.mark.parametrize("token", [None, 1, object()])
def test_resolve_currency_rejects_other_tokens(token):
    with pytest.raises(InvalidCurrencyError):
        resolve_currency(token)
