"""Central configuration (single source of truth).

Values come from environment variables prefixed with `FINANCIAL_SYSTEM_`. A `.env` file in the
working directory is loaded first, so local overrides do not need to be exported by hand.

Example `.env`:
    FINANCIAL_SYSTEM_DEFAULT_PRECISION=2
    FINANCIAL_SYSTEM_DECIMAL_SEPARATOR=,
    FINANCIAL_SYSTEM_EXCHANGE_RATES=USD:BRL=5.0,EUR:USD=1.1
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from typing import NamedTuple

from dotenv import find_dotenv, load_dotenv

ENV_PREFIX = "FINANCIAL_SYSTEM_"

# Defaults used when the environment does not say otherwise
DEFAULT_PRECISION_FALLBACK = 2
DECIMAL_SEPARATOR_FALLBACK = "."
DECIMAL_CONTEXT_PRECISION_FALLBACK = 28
EXCHANGE_RATES_FALLBACK = "USD:BRL=5.0,EUR:USD=1.1"


class Settings(NamedTuple):
    """Parsed configuration values.

    Attributes:
        default_precision: Fractional digits used when a precision is not given.
        decimal_separator: Separator between major and minor units in rendered amounts.
        decimal_context_precision: Significant digits of the `decimal` context used by `Money`.
        exchange_rates: Rates keyed by (source code, target code); values are decimal strings.
    """

    default_precision: int
    decimal_separator: str
    decimal_context_precision: int
    exchange_rates: dict[tuple[str, str], str]


def validate_decimal_separator(separator: str) -> str:
    """Return $separator if it can split major and minor units unambiguously.

    Raises:
        ValueError: If $separator is not a single character, or is a digit or a minus sign.
    """
    if not isinstance(separator, str) or len(separator) != 1:
        raise ValueError(f"$separator must be a single character, but provided value is: {separator!r}")
    if separator in "0123456789-":
        raise ValueError(f"$separator cannot be a digit or '-', but provided value is: {separator!r}")
    return separator


def parse_exchange_rates(text: str) -> dict[tuple[str, str], str]:
    """Parse rates written as `SRC:DST=RATE` pairs separated by commas.

    Args:
        text: For example "USD:BRL=5.0,EUR:USD=1.1". Blank text means no rates.

    Returns:
        Mapping from (source code, target code) to the rate string.

    Raises:
        ValueError: If any entry is malformed.
    """
    result: dict[tuple[str, str], str] = {}
    for entry in text.split(","):
        entry = entry.strip()
        if not entry:
            continue

        pair, sep, rate = entry.partition("=")
        source, colon, target = pair.partition(":")
        # Raise: every entry needs both codes and a rate
        if not sep or not colon or not source.strip() or not target.strip() or not rate.strip():
            raise ValueError(f"Exchange rate entry '{entry}' must be in format 'SRC:DST=RATE'")

        result[(source.strip().upper(), target.strip().upper())] = rate.strip()
    return result


def _read_int(environ: Mapping[str, str], name: str, fallback: int, minimum: int) -> int:
    raw = environ.get(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return fallback

    try:
        value = int(raw)
    except ValueError as e:
        raise ValueError(f"${ENV_PREFIX}{name} must be an integer, but provided value is: '{raw}'") from e

    if value < minimum:
        raise ValueError(f"${ENV_PREFIX}{name} must be >= {minimum}, but provided value is: {value}")
    return value


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build `Settings` from $environ.

    Args:
        environ: Variables to read. If None, `.env` is loaded and `os.environ` is used.

    Returns:
        Settings: Parsed values with fallbacks applied.

    Raises:
        ValueError: If any configured value is invalid.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ

    separator = environ.get(ENV_PREFIX + "DECIMAL_SEPARATOR") or DECIMAL_SEPARATOR_FALLBACK
    rates_text = environ.get(ENV_PREFIX + "EXCHANGE_RATES", EXCHANGE_RATES_FALLBACK)

    return Settings(
        default_precision=_read_int(environ, "DEFAULT_PRECISION", DEFAULT_PRECISION_FALLBACK, minimum=0),
        decimal_separator=validate_decimal_separator(separator),
        decimal_context_precision=_read_int(environ, "DECIMAL_CONTEXT_PRECISION", DECIMAL_CONTEXT_PRECISION_FALLBACK, minimum=1),
        exchange_rates=parse_exchange_rates(rates_text),
    )


SETTINGS = load_settings()

DEFAULT_PRECISION: int = SETTINGS.default_precision
DECIMAL_SEPARATOR: str = SETTINGS.decimal_separator
DECIMAL_CONTEXT_PRECISION: int = SETTINGS.decimal_context_precision
DEFAULT_EXCHANGE_RATES: dict[tuple[str, str], str] = SETTINGS.exchange_rates
