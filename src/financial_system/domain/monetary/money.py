from __future__ import annotations

from decimal import Decimal, getcontext, InvalidOperation, localcontext

from financial_system.config import DECIMAL_CONTEXT_PRECISION
from financial_system.domain.monetary.currency import Currency, resolve_currency
from financial_system.domain.monetary.scaled_money import ScaledMoney
from financial_system.errors import CurrencyMismatchError, InvalidAmountError
from financial_system.utils.decimal_tools import DecimalLike, as_decimal

# Set high precision for balance calculations
getcontext().prec = DECIMAL_CONTEXT_PRECISION


class Money:
    """Represents a ledger balance with currency, backed by `Decimal`.

    The value is always quantized to the currency's canonical precision, so 10.5 USD is stored
    as `Decimal("10.50")`. Use `ScaledMoney` when digits beyond that precision must survive.

    Supports values between -999_999_999_999_999.999999999999999999 and
    +999_999_999_999_999.999999999999999999
    """

    # Value limits
    MAX_VALUE = Decimal("999_999_999_999_999.999999999999999999")
    MIN_VALUE = Decimal("-999_999_999_999_999.999999999999999999")

    def __init__(self, value: DecimalLike, currency: Currency | str):
        """Initialize Money with value and currency.

        Args:
            value: Numeric value (Decimal-like scalar).
            currency: Registered `Currency` or its code.

        Raises:
            InvalidAmountError: If value is invalid or out of range.
            InvalidCurrencyError: If currency is not registered.
        """
        currency = resolve_currency(currency)

        # Raise: $value must be convertible to Decimal
        try:
            decimal_value = as_decimal(value)
        except (ValueError, TypeError, InvalidOperation) as e:
            raise InvalidAmountError(f"Cannot init `Money` because $value ({value!r}) cannot be converted to Decimal") from e

        if not decimal_value.is_finite():
            raise InvalidAmountError(f"Cannot init `Money` because $value ({value!r}) is not finite")

        # Raise: value must be within allowed range
        if decimal_value > self.MAX_VALUE:
            raise InvalidAmountError(f"$value exceeds maximum allowed value {self.MAX_VALUE}, but provided value is: {decimal_value}")
        if decimal_value < self.MIN_VALUE:
            raise InvalidAmountError(f"$value is below minimum allowed value {self.MIN_VALUE}, but provided value is: {decimal_value}")

        # Round to currency precision; the context must hold every integer digit plus the minor digits
        quantum = Decimal((0, (1,), -currency.precision))
        with localcontext() as ctx:
            ctx.prec = _exact_precision(decimal_value, quantum)
            self._value = decimal_value.quantize(quantum)
        self._currency = currency

    @classmethod
    def zero(cls, currency: Currency | str) -> Money:
        return cls(Decimal("0"), currency)

    @classmethod
    def from_scaled(cls, scaled: ScaledMoney) -> Money:
        """Convert a `ScaledMoney`, rounding to the currency precision with the context rounding."""
        return cls(scaled.to_decimal(), scaled.currency)

    @property
    def value(self) -> Decimal:
        """Get the decimal value."""
        return self._value

    @property
    def currency(self) -> Currency:
        """Get the currency."""
        return self._currency

    def to_scaled(self) -> ScaledMoney:
        """Return the same value as `ScaledMoney` at the currency precision (10.50 USD -> 1050 @ 2)."""
        return ScaledMoney.from_decimal(self._value, self._currency)

    def _check_same_currency(self, other: Money, operation: str) -> None:
        """Check if two Money objects have the same currency.

        Raises:
            CurrencyMismatchError: If currencies don't match.
        """
        if self.currency != other.currency:
            raise CurrencyMismatchError(operation, self.currency, other.currency)

    # Comparison operators (same currency required)
    def __eq__(self, other) -> bool:
        """Check equality with another Money object."""
        if not isinstance(other, Money):
            return False
        if self.currency != other.currency:
            return False
        return self.value == other.value

    def __lt__(self, other) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "__lt__")
        return self.value < other.value

    def __le__(self, other) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "__le__")
        return self.value <= other.value

    def __gt__(self, other) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "__gt__")
        return self.value > other.value

    def __ge__(self, other) -> bool:
        if not isinstance(other, Money):
            return NotImplemented
        self._check_same_currency(other, "__ge__")
        return self.value >= other.value

    # Arithmetic operations
    def __add__(self, other):
        """Add two Money objects (same currency) or Money + number."""
        if isinstance(other, Money):
            self._check_same_currency(other, "add")
            with localcontext() as ctx:
                ctx.prec = _exact_precision(self.value, other.value)
                total = self.value + other.value
            return Money(total, self.currency)
        if isinstance(other, ScaledMoney):
            return NotImplemented
        try:
            return Money(self.value + as_decimal(other), self.currency)
        except (TypeError, InvalidOperation):
            return NotImplemented

    def __radd__(self, other):
        """Right addition: number + Money."""
        return self.__add__(other)

    def __sub__(self, other):
        """Subtract two Money objects (same currency) or Money - number."""
        if isinstance(other, Money):
            self._check_same_currency(other, "subtract")
            with localcontext() as ctx:
                ctx.prec = _exact_precision(self.value, other.value)
                difference = self.value - other.value
            return Money(difference, self.currency)
        if isinstance(other, ScaledMoney):
            return NotImplemented
        try:
            return Money(self.value - as_decimal(other), self.currency)
        except (TypeError, InvalidOperation):
            return NotImplemented

    def __rsub__(self, other):
        """Right subtraction: number - Money."""
        try:
            return Money(as_decimal(other) - self.value, self.currency)
        except (TypeError, InvalidOperation):
            return NotImplemented

    def __mul__(self, other):
        """Multiply Money by number (returns Money)."""
        if isinstance(other, (Money, ScaledMoney)):
            return NotImplemented  # Money * Money doesn't make sense
        try:
            return Money(self.value * as_decimal(other), self.currency)
        except (TypeError, InvalidOperation):
            return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        """Divide Money by number (returns Money) or Money by Money (returns Decimal)."""
        if isinstance(other, Money):
            self._check_same_currency(other, "divide")
            if other.value == 0:
                raise ZeroDivisionError("Cannot divide by zero Money")
            return self.value / other.value
        try:
            divisor = as_decimal(other)
        except (TypeError, InvalidOperation):
            return NotImplemented
        if divisor == 0:
            raise ZeroDivisionError("Cannot divide Money by zero")
        return Money(self.value / divisor, self.currency)

    def __neg__(self):
        return Money(-self.value, self.currency)

    def __abs__(self):
        return Money(abs(self.value), self.currency)

    # String representations
    def __str__(self) -> str:
        """Return string like '1000.50 USD'."""
        return f"{self.value} {self.currency.code}"

    def __repr__(self) -> str:
        """Return string like 'Money(1000.50, USD)'."""
        return f"{self.__class__.__name__}({self.value}, {self.currency.code})"

    def __hash__(self) -> int:
        return hash((self.value, self.currency.code))

    @classmethod
    def from_str(cls, value_str: str) -> Money:
        """Parse Money from string like '1000.50 USD'.

        Raises:
            InvalidAmountError: If string format or value is invalid.
            InvalidCurrencyError: If the currency part is not registered.
        """
        value_str = value_str.strip()
        if not value_str:
            raise InvalidAmountError("Value string with $value_str = '' cannot be empty")

        parts = value_str.split()
        if len(parts) != 2:
            raise InvalidAmountError(f"Value string with $value_str = '{value_str}' must be in format 'value currency_code'")

        value_part, currency_part = parts

        try:
            value = Decimal(value_part)
        except InvalidOperation as e:
            raise InvalidAmountError(f"Invalid value part '{value_part}' in string '{value_str}'") from e

        return cls(value, currency_part)


def _exact_precision(*values: Decimal) -> int:
    """Return a context precision wide enough to add, subtract or quantize $values without rounding."""
    highest_digit = max(value.adjusted() for value in values)
    lowest_exponent = min(value.as_tuple().exponent for value in values)
    return max(getcontext().prec, highest_digit - lowest_exponent + 2)
