"""Exception classes for money arithmetic, conversion and transfers.

Every error derives from `MoneyError`, which is a `ValueError`, so callers that
only care about "bad input" can keep catching `ValueError`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from financial_system.domain.monetary.currency import Currency


class MoneyError(ValueError):
    """Base class for all errors raised by this package."""

    pass


class InvalidAmountError(MoneyError):
    """Raised when an amount is missing, not an integer, negative or unparseable."""

    pass


class InvalidCurrencyError(MoneyError):
    """Raised when a currency token is missing, malformed or not registered."""

    pass


class InvalidPrecisionError(MoneyError):
    """Raised when a precision is not a non-negative integer."""

    pass


class CurrencyMismatchError(MoneyError):
    """Raised when two monetary values with different currencies are combined."""

    def __init__(self, operation: str, left_currency: Currency, right_currency: Currency):
        self.operation = operation
        self.left_currency = left_currency
        self.right_currency = right_currency
        super().__init__(f"Cannot call `{operation}` because currencies differ: {left_currency} and {right_currency}")


class InvalidMultiplierError(MoneyError):
    """Raised when a multiplier is not a well-formed decimal numeral."""

    def __init__(self, multiplier: object, reason: str | None = None):
        self.multiplier = multiplier
        self.reason = reason

        message = f"$multiplier must be a decimal numeral like '0.5' or '-2', but provided value is: {multiplier!r}"
        if reason:
            message += f" - {reason}"

        super().__init__(message)


class InsufficientFundsError(MoneyError):
    """Raised when a transfer needs more money than the source account holds."""

    pass


class InvalidTransferError(MoneyError):
    """Raised when a transfer request itself is malformed (value, destinations)."""

    pass


class ExchangeRateNotFoundError(MoneyError):
    """Raised when no exchange rate is known for a currency pair."""

    def __init__(self, source_code: str, target_code: str):
        self.source_code = source_code
        self.target_code = target_code
        super().__init__(f"No exchange rate known for {source_code} -> {target_code}")
