from __future__ import annotations

from financial_system.domain.monetary.currency_registry import BRL, USD
from financial_system.errors import CurrencyMismatchError, InvalidMultiplierError, MoneyError


def test_invalid_multiplier_error_without_reason():
    error = InvalidMultiplierError("1.2.3")

    assert error.multiplier == "1.2.3"
    assert error.reason is None
    assert str(error).endswith("'1.2.3'")


def test_invalid_multiplier_error_appends_reason():
    error = InvalidMultiplierError(0.5, "must be a string")
    assert str(error).endswith("0.5 - must be a string")


def test_currency_mismatch_error_keeps_currencies():
    error = CurrencyMismatchError("add", USD, BRL)

    assert isinstance(error, MoneyError)
    assert isinstance(error, ValueError)
    assert (error.operation, error.left_currency, error.right_currency) == ("add", USD, BRL)
    assert "USD" in str(error) and "BRL" in str(error)
