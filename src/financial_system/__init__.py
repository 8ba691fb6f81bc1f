__version__ = "0.1.0"

from financial_system.domain.monetary.currency import Currency, CurrencyType
from financial_system.domain.monetary import currency_registry
from financial_system.domain.monetary.scaled_money import (
    MoneyResult,
    ScaledMoney,
    add,
    format_money,
    multiply,
    negate,
    parse_money,
    subtract,
)
from financial_system.domain.monetary.money import Money
from financial_system.domain.account import Account
from financial_system.platform.exchange import ExchangeRates
from financial_system.platform.transfer import TransferResult, has_enough, transfer, transfer_unchecked

__all__ = [
    "Account",
    "Currency",
    "CurrencyType",
    "ExchangeRates",
    "Money",
    "MoneyResult",
    "ScaledMoney",
    "TransferResult",
    "add",
    "currency_registry",
    "format_money",
    "has_enough",
    "multiply",
    "negate",
    "parse_money",
    "subtract",
    "transfer",
    "transfer_unchecked",
]
