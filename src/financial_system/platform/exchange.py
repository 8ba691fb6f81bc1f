from __future__ import annotations

import logging
from collections.abc import Mapping
from decimal import Decimal, InvalidOperation

from financial_system.config import DEFAULT_EXCHANGE_RATES
from financial_system.domain.monetary.currency import Currency, resolve_currency
from financial_system.domain.monetary.money import Money
from financial_system.domain.monetary.scaled_money import ScaledMoney
from financial_system.errors import ExchangeRateNotFoundError, InvalidMultiplierError
from financial_system.utils.decimal_tools import DecimalLike, as_finite_decimal, to_plain_string

logger = logging.getLogger(__name__)

# Fractional digits kept when a rate is derived from the opposite pair
INVERSE_RATE_DIGITS = 10


class ExchangeRates:
    """In-memory table of exchange rates between registered currencies.

    Rates are stored as plain decimal strings ("5.0", "0.2") so they can be applied to
    `ScaledMoney` with exact integer multiplication. A rate for (A, B) means 1 A = rate B.

    When only the opposite pair is known, the inverse is derived with `Decimal` division and
    rounded to `INVERSE_RATE_DIGITS` fractional digits.
    """

    # region Init

    def __init__(self, rates: Mapping[tuple[Currency | str, Currency | str], DecimalLike] | None = None) -> None:
        self._rates: dict[tuple[Currency, Currency], str] = {}
        for (source, target), rate in (rates or {}).items():
            self.set_rate(source, target, rate)

    @classmethod
    def from_settings(cls) -> ExchangeRates:
        """Build a table from `FINANCIAL_SYSTEM_EXCHANGE_RATES` (see `financial_system.config`)."""
        return cls(DEFAULT_EXCHANGE_RATES)

    # endregion

    # region Main

    def set_rate(self, source: Currency | str, target: Currency | str, rate: DecimalLike) -> None:
        """Store the rate for converting $source into $target.

        Raises:
            InvalidCurrencyError: If a currency is not registered.
            InvalidMultiplierError: If $rate is not a positive finite number.
            ValueError: If $source equals $target.
        """
        source_currency = resolve_currency(source)
        target_currency = resolve_currency(target)
        # Raise: same-currency rate is always 1 and cannot be overridden
        if source_currency == target_currency:
            raise ValueError(f"Cannot call `set_rate` because $source and $target are both {source_currency}")

        try:
            decimal_rate = as_finite_decimal(rate)
        except ValueError as e:
            raise InvalidMultiplierError(rate, "rate is not a finite number") from e
        # Raise: rates must be strictly positive
        if decimal_rate <= 0:
            raise InvalidMultiplierError(rate, "rate must be positive")

        self._rates[(source_currency, target_currency)] = to_plain_string(decimal_rate)
        logger.debug(f"Set exchange rate {source_currency} -> {target_currency} = {self._rates[(source_currency, target_currency)]}")

    def get_rate(self, source: Currency | str, target: Currency | str) -> str:
        """Return the rate for $source -> $target as a decimal numeral string.

        Raises:
            ExchangeRateNotFoundError: If neither the pair nor its opposite is known.
        """
        source_currency = resolve_currency(source)
        target_currency = resolve_currency(target)
        if source_currency == target_currency:
            return "1"

        direct = self._rates.get((source_currency, target_currency))
        if direct is not None:
            return direct

        opposite = self._rates.get((target_currency, source_currency))
        if opposite is None:
            raise ExchangeRateNotFoundError(source_currency.code, target_currency.code)

        try:
            inverse = (Decimal(1) / Decimal(opposite)).quantize(Decimal((0, (1,), -INVERSE_RATE_DIGITS)))
        except InvalidOperation as e:
            raise ExchangeRateNotFoundError(source_currency.code, target_currency.code) from e

        logger.debug(f"Derived exchange rate {source_currency} -> {target_currency} = {inverse} from opposite pair")
        return to_plain_string(inverse)

    def convert(self, money: Money, target: Currency | str) -> Money:
        """Convert a `Money` balance into $target, rounding to the target currency precision."""
        target_currency = resolve_currency(target)
        if money.currency == target_currency:
            return money

        rate = self.get_rate(money.currency, target_currency)
        return Money(money.value * Decimal(rate), target_currency)

    def convert_scaled(self, money: ScaledMoney, target: Currency | str) -> ScaledMoney:
        """Convert a `ScaledMoney` exactly: the rate string is applied with `ScaledMoney.multiply`.

        The product is re-tagged with the target currency; no digit is dropped, so the result
        precision may exceed the target currency's canonical precision.
        """
        target_currency = resolve_currency(target)
        if money.currency == target_currency:
            return money

        rate = self.get_rate(money.currency, target_currency)
        product = money.multiply(rate, separator=".")
        return ScaledMoney(product.amount, target_currency, product.precision)

    def list_rates(self) -> list[tuple[Currency, Currency, str]]:
        """Return (source, target, rate) for all directly stored pairs, sorted by codes."""
        pairs = sorted(self._rates.keys(), key=lambda pair: (pair[0].code, pair[1].code))
        return [(source, target, self._rates[(source, target)]) for source, target in pairs]

    # endregion

    # region Magic

    def __contains__(self, pair) -> bool:
        source, target = pair
        try:
            self.get_rate(source, target)
        except ExchangeRateNotFoundError:
            return False
        return True

    def __repr__(self) -> str:
        rates = {f"{s.code}:{t.code}": r for s, t, r in self.list_rates()}
        return f"{self.__class__.__name__}({rates})"

    # endregion
