from __future__ import annotations

import logging
from enum import Enum
from typing import Dict

from financial_system.errors import InvalidCurrencyError

logger = logging.getLogger(__name__)

# Largest number of fractional digits any registered currency may declare
MAX_CURRENCY_PRECISION = 18


class CurrencyType(Enum):
    """Enumeration of currency types."""

    FIAT = "FIAT"
    CRYPTO = "CRYPTO"
    COMMODITY = "COMMODITY"


class Currency:
    """Represents a currency with an ISO 4217-style code, canonical precision and metadata.

    Codes are exactly three ASCII letters and are stored upper-case. Two currencies are equal
    when their codes are equal; no conversion ever happens implicitly.

    Attributes:
        code (str): Currency code (e.g., "USD", "BRL").
        precision (int): Canonical number of decimal places (0-18).
        name (str): Full currency name.
        currency_type (CurrencyType): Type of currency (FIAT, CRYPTO, COMMODITY).
    """

    # Class-level registry for known currencies
    _registry: Dict[str, "Currency"] = {}

    def __init__(self, code: str, precision: int, name: str, currency_type: CurrencyType = CurrencyType.FIAT):
        """Initialize a Currency instance.

        Args:
            code (str): Currency code (e.g., "USD", "BRL").
            precision (int): Number of decimal places (0-18).
            name (str): Full currency name.
            currency_type (CurrencyType): Type of currency.

        Raises:
            InvalidCurrencyError: If $code is not three ASCII letters.
            ValueError: If $precision or $name are invalid.
            TypeError: If currency_type is not CurrencyType instance.
        """
        self._code = normalize_code(code)

        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 0 or precision > MAX_CURRENCY_PRECISION:
            raise ValueError(f"$precision must be an integer between 0 and {MAX_CURRENCY_PRECISION}, but provided value is: {precision}")

        if not isinstance(name, str) or not name.strip():
            raise ValueError(f"$name must be a non-empty string, but provided value is: '{name}'")

        if not isinstance(currency_type, CurrencyType):
            raise TypeError(f"$currency_type must be a CurrencyType instance, but provided value is: {currency_type}")

        self._precision = precision
        self._name = name.strip()
        self._currency_type = currency_type

    @property
    def code(self) -> str:
        """Get the currency code."""
        return self._code

    @property
    def precision(self) -> int:
        """Get the canonical currency precision."""
        return self._precision

    @property
    def name(self) -> str:
        return self._name

    @property
    def currency_type(self) -> CurrencyType:
        return self._currency_type

    @classmethod
    def register(cls, currency: "Currency", overwrite: bool = False) -> None:
        """Register a currency in the global registry.

        Args:
            currency (Currency): The currency to register.
            overwrite (bool): Whether to overwrite existing currency.

        Raises:
            ValueError: If currency already exists and overwrite is False.
            TypeError: If currency is not Currency instance.
        """
        if not isinstance(currency, Currency):
            raise TypeError(f"$currency must be a Currency instance, but provided value is: {currency}")

        if currency.code in cls._registry and not overwrite:
            raise ValueError(f"Currency with code '{currency.code}' already exists in registry. Use overwrite=True to replace it.")

        cls._registry[currency.code] = currency
        logger.debug(f"Registered currency {currency.code} with precision {currency.precision}")

    @classmethod
    def is_registered(cls, currency: "Currency") -> bool:
        """Return True when $currency is the registered instance for its code (or equal to it)."""
        return cls._registry.get(currency.code) == currency

    @classmethod
    def from_str(cls, code: str) -> "Currency":
        """Get currency from registry by code.

        Args:
            code (str): Currency code to look up (case-insensitive).

        Returns:
            Currency: The currency instance.

        Raises:
            TypeError: If $code is not a string.
            InvalidCurrencyError: If currency code is malformed or not found in registry.
        """
        if not isinstance(code, str):
            raise TypeError(f"$code must be a string, but provided value is: {code}")

        code = normalize_code(code)
        if code not in cls._registry:
            raise InvalidCurrencyError(f"Currency with code '{code}' not found in registry. Available currencies: {sorted(cls._registry.keys())}")

        return cls._registry[code]

    @property
    def is_fiat(self) -> bool:
        return self._currency_type == CurrencyType.FIAT

    @property
    def is_crypto(self) -> bool:
        return self._currency_type == CurrencyType.CRYPTO

    @property
    def is_commodity(self) -> bool:
        return self._currency_type == CurrencyType.COMMODITY

    def __eq__(self, other) -> bool:
        """Check equality with another Currency."""
        if not isinstance(other, Currency):
            return False
        return self.code == other.code

    def __hash__(self) -> int:
        """Hash based on currency code."""
        return hash(self.code)

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}('{self.code}', {self.precision}, '{self.name}', {self.currency_type})"


def normalize_code(code: str) -> str:
    """Return $code stripped and upper-cased if it is three ASCII letters.

    Raises:
        InvalidCurrencyError: If $code is not a string of exactly three ASCII letters.
    """
    if not isinstance(code, str):
        raise InvalidCurrencyError(f"$code must be a string, but provided value is: {code!r}")

    result = code.strip().upper()
    if len(result) != 3 or not result.isascii() or not result.isalpha():
        raise InvalidCurrencyError(f"$code must be exactly three ASCII letters, but provided value is: '{code}'")
    return result


def resolve_currency(currency: Currency | str) -> Currency:
    """Turn a currency token into a registered `Currency`.

    Args:
        currency: A `Currency` instance or a registered currency code such as "BRL".

    Returns:
        Currency: The registered currency.

    Raises:
        InvalidCurrencyError: If $currency is missing, malformed or not registered.
    """
    if isinstance(currency, Currency):
        # Raise: only registered currencies take part in arithmetic
        if not Currency.is_registered(currency):
            raise InvalidCurrencyError(f"Currency '{currency.code}' is not registered")
        return currency

    if isinstance(currency, str):
        return Currency.from_str(currency)

    raise InvalidCurrencyError(f"$currency must be a Currency or a currency code, but provided value is: {currency!r}")
