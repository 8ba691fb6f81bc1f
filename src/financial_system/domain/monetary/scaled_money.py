from __future__ import annotations

import re
from decimal import Decimal, ROUND_HALF_EVEN, localcontext
from typing import NamedTuple

from financial_system.config import DEFAULT_PRECISION, DECIMAL_SEPARATOR, validate_decimal_separator
from financial_system.domain.monetary.currency import Currency, resolve_currency
from financial_system.errors import (
    CurrencyMismatchError,
    InvalidAmountError,
    InvalidMultiplierError,
    InvalidPrecisionError,
    MoneyError,
)
from financial_system.utils.decimal_tools import DecimalLike, as_finite_decimal


class MoneyResult(NamedTuple):
    """Outcome of a checked `ScaledMoney.create` call.

    Exactly one of $value and $error is set.
    """

    value: ScaledMoney | None
    error: MoneyError | None

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> ScaledMoney:
        """Return $value, or raise $error if creation failed."""
        if self.error is not None:
            raise self.error
        return self.value


class ScaledMoney:
    """Monetary value stored as an integer scaled by a per-value decimal precision.

    `ScaledMoney(1500, BRL, 2)` means 15.00 BRL. The pair ($amount, $precision) is the only
    source of truth for the value; there is no cached float or Decimal. Instances are immutable
    and every operation returns a new instance.

    The direct constructor checks types only and accepts any sign, because subtraction must be
    able to produce negative results. Use `create` or `create_unchecked` for validated input.

    Equality is structural: 1.0 BRL (10 at precision 1) and 1.00 BRL (100 at precision 2) are
    different objects with the same value; use `same_value` to compare values.
    """

    # region Init

    def __init__(self, amount: int, currency: Currency, precision: int = DEFAULT_PRECISION) -> None:
        # Raise: amount must be an exact integer, never float or Decimal
        if isinstance(amount, bool) or not isinstance(amount, int):
            raise InvalidAmountError(f"$amount must be an int, but provided value is: {amount!r}")

        # Raise: currency must already be resolved
        if not isinstance(currency, Currency):
            raise TypeError(f"$currency must be a Currency instance, but provided value is: {currency!r}")

        _check_precision(precision)

        self._amount = amount
        self._currency = currency
        self._precision = precision

    @classmethod
    def create(cls, amount: int | None, currency: Currency | str, precision: int = DEFAULT_PRECISION) -> MoneyResult:
        """Validate inputs and build a `ScaledMoney` without raising.

        Zero is a valid amount; negative amounts are rejected here and only arise from
        arithmetic (`negate`, `subtract`). Fields are stored verbatim, without normalization.

        Args:
            amount: Value in minor units, e.g. 1500 for 15.00 at precision 2.
            currency: A registered `Currency` or its code.
            precision: Number of fractional digits $amount encodes.

        Returns:
            MoneyResult: With $value on success, or $error (`InvalidAmountError`,
            `InvalidCurrencyError`, `InvalidPrecisionError`) on failure.
        """
        if amount is None:
            return MoneyResult(None, InvalidAmountError("$amount is required, but provided value is: None"))
        if isinstance(amount, bool) or not isinstance(amount, int):
            return MoneyResult(None, InvalidAmountError(f"$amount must be an int, but provided value is: {amount!r}"))
        if amount < 0:
            return MoneyResult(None, InvalidAmountError(f"$amount must not be negative, but provided value is: {amount}"))

        try:
            resolved_currency = resolve_currency(currency)
            _check_precision(precision)
        except MoneyError as e:
            return MoneyResult(None, e)

        return MoneyResult(cls(amount, resolved_currency, precision), None)

    @classmethod
    def create_unchecked(cls, amount: int | None, currency: Currency | str, precision: int = DEFAULT_PRECISION) -> ScaledMoney:
        """Same as `create`, but raises the error instead of returning it.

        Raises:
            InvalidAmountError, InvalidCurrencyError, InvalidPrecisionError: See `create`.
        """
        return cls.create(amount, currency, precision).unwrap()

    @classmethod
    def from_decimal(cls, value: DecimalLike, currency: Currency | str) -> ScaledMoney:
        """Exactly convert a Decimal-like $value; precision is taken from its exponent.

        `from_decimal("15.50", "BRL")` gives amount 1550 at precision 2. Negative values are
        accepted. Floats go through `str`, so `0.1` means one tenth.

        Raises:
            InvalidAmountError: If $value is not a finite number.
        """
        try:
            decimal_value = as_finite_decimal(value)
        except ValueError as e:
            raise InvalidAmountError(f"Cannot call `from_decimal` because $value ({value!r}) is not a finite number") from e

        sign, digits, exponent = decimal_value.as_tuple()
        amount = int("".join(str(d) for d in digits))
        if exponent >= 0:
            amount *= 10**exponent
            precision = 0
        else:
            precision = -exponent

        return cls(-amount if sign else amount, resolve_currency(currency), precision)

    # endregion

    # region Properties

    @property
    def amount(self) -> int:
        """Value scaled by 10 ** $precision."""
        return self._amount

    @property
    def currency(self) -> Currency:
        return self._currency

    @property
    def precision(self) -> int:
        """Number of fractional digits $amount encodes."""
        return self._precision

    @property
    def is_zero(self) -> bool:
        return self._amount == 0

    @property
    def is_negative(self) -> bool:
        return self._amount < 0

    # endregion

    # region Main

    def add(self, other: ScaledMoney) -> ScaledMoney:
        return add(self, other)

    def subtract(self, other: ScaledMoney) -> ScaledMoney:
        return subtract(self, other)

    def negate(self) -> ScaledMoney:
        return negate(self)

    def multiply(self, multiplier: str, separator: str = DECIMAL_SEPARATOR) -> ScaledMoney:
        return multiply(self, multiplier, separator)

    def format(self, separator: str = DECIMAL_SEPARATOR) -> str:
        return format_money(self, separator)

    def to_decimal(self) -> Decimal:
        """Return the exact value as `Decimal`, e.g. `Decimal("15.00")` for 1500 at precision 2."""
        digits = tuple(int(d) for d in str(abs(self._amount)))
        return Decimal((1 if self._amount < 0 else 0, digits, -self._precision))

    def same_value(self, other: ScaledMoney) -> bool:
        """Return True when both values are numerically equal after aligning precisions.

        Raises:
            CurrencyMismatchError: If currencies differ.
        """
        _check_same_currency("same_value", self, other)
        left, right, _ = _align(self, other)
        return left == right

    def round_to_currency(self, rounding: str = ROUND_HALF_EVEN) -> ScaledMoney:
        """Return the value at the currency's canonical precision.

        This is the only operation that may discard digits, and it does so with an explicit
        `decimal` rounding mode. Lower precisions are padded up without loss.

        Args:
            rounding: A `decimal` rounding constant such as `ROUND_HALF_EVEN` or `ROUND_DOWN`.
        """
        target = self._currency.precision
        if self._precision <= target:
            return ScaledMoney(_scale_up(self._amount, target - self._precision), self._currency, target)

        value = self.to_decimal()
        with localcontext() as ctx:
            # Enough significant digits so quantize never hits the context limit
            ctx.prec = len(str(abs(self._amount))) + target + 2
            rounded = value.quantize(Decimal((0, (1,), -target)), rounding=rounding)
            amount = int(rounded.scaleb(target))
        return ScaledMoney(amount, self._currency, target)

    # endregion

    # region Magic

    def __add__(self, other):
        if not isinstance(other, ScaledMoney):
            return NotImplemented
        return add(self, other)

    def __sub__(self, other):
        if not isinstance(other, ScaledMoney):
            return NotImplemented
        return subtract(self, other)

    def __mul__(self, other):
        """Multiply by a decimal numeral string, e.g. `money * "0.5"`."""
        if not isinstance(other, str):
            return NotImplemented
        return multiply(self, other)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __neg__(self):
        return negate(self)

    def __eq__(self, other) -> bool:
        if not isinstance(other, ScaledMoney):
            return False
        return self._amount == other._amount and self._precision == other._precision and self._currency == other._currency

    def __hash__(self) -> int:
        return hash((self._amount, self._precision, self._currency.code))

    def __str__(self) -> str:
        """Return string like '299.99 BRL'."""
        return f"{format_money(self)} {self._currency.code}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(amount={self._amount}, currency={self._currency.code}, precision={self._precision})"

    # endregion


# region Arithmetic


def add(a: ScaledMoney, b: ScaledMoney) -> ScaledMoney:
    """Add two values of the same currency, aligning to the larger precision.

    The lower-precision amount is scaled up by a power of ten, so no fractional digit of either
    operand is lost: 5.00 BRL (500 @ 2) + 5.000 BRL (5000 @ 3) = 10.000 BRL (10000 @ 3).

    Raises:
        CurrencyMismatchError: If $a.currency differs from $b.currency.
    """
    _check_same_currency("add", a, b)
    left, right, precision = _align(a, b)
    return ScaledMoney(left + right, a.currency, precision)


def negate(money: ScaledMoney) -> ScaledMoney:
    """Flip the sign of $money.amount, keeping precision and currency."""
    return ScaledMoney(-money.amount, money.currency, money.precision)


def subtract(a: ScaledMoney, b: ScaledMoney) -> ScaledMoney:
    """Return $a - $b as `add(a, negate(b))`. The result may be negative.

    Raises:
        CurrencyMismatchError: If $a.currency differs from $b.currency.
    """
    _check_same_currency("subtract", a, b)
    return add(a, negate(b))


def multiply(money: ScaledMoney, multiplier: str, separator: str = DECIMAL_SEPARATOR) -> ScaledMoney:
    """Scale $money by a dimensionless factor written as a decimal numeral.

    The raw product has precision $money.precision + (digits after the separator). Trailing
    zeros are then trimmed, but never below $money.precision and never a non-zero digit:

    - 20.00 (2000 @ 2) * "0.5" -> 10000 @ 3 -> 1000 @ 2
    - 299.99 (29999 @ 2) * "1.5" -> 449985 @ 3 (449.985, kept exact)

    The result precision is not capped at the currency's canonical precision; call
    `ScaledMoney.round_to_currency` to round explicitly.

    Raises:
        InvalidMultiplierError: If $multiplier is not a well-formed decimal numeral.
    """
    if not isinstance(money, ScaledMoney):
        raise TypeError(f"$money must be a ScaledMoney instance, but provided value is: {money!r}")

    integer_multiplier, multiplier_precision = parse_multiplier(multiplier, separator)
    raw = ScaledMoney(money.amount * integer_multiplier, money.currency, money.precision + multiplier_precision)
    return normalize(raw, money.precision)


def parse_multiplier(multiplier: str, separator: str = DECIMAL_SEPARATOR) -> tuple[int, int]:
    """Split a decimal numeral into (integer multiplier, multiplier precision).

    Examples:
        >>> parse_multiplier("0.025", ".")
        (25, 3)
        >>> parse_multiplier("-2", ".")
        (-2, 0)
        >>> parse_multiplier("1,5", ",")
        (15, 1)

    Raises:
        InvalidMultiplierError: If $multiplier has characters other than an optional leading
            '-', ASCII digits and at most one $separator, or has no digit at all.
    """
    if not isinstance(multiplier, str):
        raise InvalidMultiplierError(multiplier, "must be a string")

    try:
        validate_decimal_separator(separator)
    except ValueError as e:
        raise InvalidMultiplierError(multiplier, str(e)) from e

    match = _numeral_pattern(separator).fullmatch(multiplier)
    if match is None:
        raise InvalidMultiplierError(multiplier)

    sign, major, minor = match.group(1), match.group(2), match.group(3) or ""
    # Raise: a bare sign or separator is not a number
    if not major and not minor:
        raise InvalidMultiplierError(multiplier, "no digits")

    digits = (major + minor).lstrip("0") or "0"
    integer_multiplier = int(digits)
    return (-integer_multiplier if sign else integer_multiplier), len(minor)


def normalize(money: ScaledMoney, floor_precision: int = 0) -> ScaledMoney:
    """Trim trailing zero digits from $money.amount, lowering precision by one per digit.

    Stops at the first non-zero trailing digit or when precision reaches $floor_precision,
    whichever comes first. The loop runs at most $money.precision - $floor_precision times.
    """
    amount, precision = money.amount, money.precision
    while precision > floor_precision and amount % 10 == 0:
        amount //= 10
        precision -= 1

    if precision == money.precision:
        return money
    return ScaledMoney(amount, money.currency, precision)


# endregion

# region Text


def format_money(money: ScaledMoney, separator: str = DECIMAL_SEPARATOR) -> str:
    """Render $money as major units, $separator and exactly $precision minor digits.

    Amounts with fewer digits than the precision are zero-padded, so 5 @ 2 renders as "0.05"
    and -5 @ 2 as "-0.05". Precision 0 renders no separator.

    Raises:
        ValueError: If $separator is not a single non-digit character.
    """
    validate_decimal_separator(separator)

    precision = money.precision
    digits = str(abs(money.amount)).rjust(precision + 1, "0")
    sign = "-" if money.amount < 0 else ""
    if precision == 0:
        return f"{sign}{digits}"

    split_at = len(digits) - precision
    return f"{sign}{digits[:split_at]}{separator}{digits[split_at:]}"


def parse_money(text: str, currency: Currency | str, separator: str = DECIMAL_SEPARATOR) -> ScaledMoney:
    """Inverse of `format_money`: the digit count after $separator becomes the precision.

    `parse_money("299,99", "BRL", ",")` gives amount 29999 at precision 2.

    Raises:
        InvalidAmountError: If $text is not in the form produced by `format_money`.
        InvalidCurrencyError: If $currency is not registered.
    """
    validate_decimal_separator(separator)
    if not isinstance(text, str):
        raise InvalidAmountError(f"$text must be a string, but provided value is: {text!r}")

    match = _numeral_pattern(separator).fullmatch(text)
    # Raise: both major digits and (if present) minor digits are required
    if match is None or not match.group(2) or (match.group(3) is not None and not match.group(3)):
        raise InvalidAmountError(f"Cannot call `parse_money` because $text ('{text}') is not a formatted amount")

    sign, major, minor = match.group(1), match.group(2), match.group(3) or ""
    amount = int(major + minor)
    return ScaledMoney(-amount if sign else amount, resolve_currency(currency), len(minor))


# endregion

# region Helpers

_NUMERAL_PATTERNS: dict[str, re.Pattern] = {}


def _numeral_pattern(separator: str) -> re.Pattern:
    pattern = _NUMERAL_PATTERNS.get(separator)
    if pattern is None:
        pattern = re.compile(rf"(-?)([0-9]*)(?:{re.escape(separator)}([0-9]*))?")
        _NUMERAL_PATTERNS[separator] = pattern
    return pattern


def _check_precision(precision: int) -> None:
    if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0:
        raise InvalidPrecisionError(f"$precision must be a non-negative int, but provided value is: {precision!r}")


def _check_same_currency(operation: str, a: ScaledMoney, b: ScaledMoney) -> None:
    if not isinstance(a, ScaledMoney) or not isinstance(b, ScaledMoney):
        raise TypeError(f"Cannot call `{operation}` because both operands must be ScaledMoney, but provided values are: {a!r} and {b!r}")
    if a.currency != b.currency:
        raise CurrencyMismatchError(operation, a.currency, b.currency)


def _scale_up(amount: int, digits: int) -> int:
    return amount * 10**digits


def _align(a: ScaledMoney, b: ScaledMoney) -> tuple[int, int, int]:
    """Return both amounts expressed at the larger precision, and that precision."""
    if a.precision == b.precision:
        return a.amount, b.amount, a.precision
    if a.precision > b.precision:
        return a.amount, _scale_up(b.amount, a.precision - b.precision), a.precision
    return _scale_up(a.amount, b.precision - a.precision), b.amount, b.precision


# endregion
