from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import TypeAlias

# Use where optimal type is `Decimal`, but other types are also acceptable (and will be converted to `Decimal`)
DecimalLike: TypeAlias = Decimal | int | str | float


def as_decimal(value: DecimalLike) -> Decimal:
    """Converts input to `Decimal` safely.

    Ensures floats are converted via string to avoid precision noise, so `as_decimal(0.1)` is
    `Decimal("0.1")` and not the binary approximation.

    Args:
        value: Input value as `DecimalLike`.

    Returns:
        Value converted to `Decimal`.

    Raises:
        TypeError: If $value is a bool or any other unsupported type.
        InvalidOperation: If $value is a string that is not a number.
    """
    if isinstance(value, Decimal):
        return value

    # Raise: bool is an int subclass but never a meaningful amount
    if isinstance(value, bool) or not isinstance(value, (int, str, float)):
        raise TypeError(f"$value must be Decimal, int, str or float, but provided value is: {value!r}")

    return Decimal(str(value))


def as_finite_decimal(value: DecimalLike) -> Decimal:
    """Like `as_decimal`, but also rejects NaN and infinities.

    Raises:
        ValueError: If $value cannot be converted or is not finite.
    """
    try:
        result = as_decimal(value)
    except (TypeError, InvalidOperation) as e:
        raise ValueError(f"$value ({value!r}) cannot be converted to Decimal") from e

    if not result.is_finite():
        raise ValueError(f"$value must be a finite number, but provided value is: {value!r}")
    return result


def to_plain_string(value: Decimal) -> str:
    """Render $value as a plain decimal numeral without exponent or trailing zeros.

    Examples:
        >>> to_plain_string(Decimal("1E+2"))
        '100'
        >>> to_plain_string(Decimal("0.2000"))
        '0.2'
    """
    return format(value.normalize(), "f")
