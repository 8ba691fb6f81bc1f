"""Transfers between accounts, with optional split across several destinations.

A single destination receives the whole value, converted into its currency. A list of
destinations receives equal parts: the value is divided in minor units of the source currency
and the remainder is handed out one minor unit at a time to the first destinations, so the
parts always add up exactly to the value taken from the source.

All functions are pure: accounts are immutable, and the updated copies are returned only when
every step succeeded.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import NamedTuple

from financial_system.domain.account import Account
from financial_system.domain.monetary.money import Money
from financial_system.domain.monetary.scaled_money import ScaledMoney
from financial_system.errors import InsufficientFundsError, InvalidTransferError, MoneyError
from financial_system.platform.exchange import ExchangeRates
from financial_system.utils.decimal_tools import DecimalLike, as_finite_decimal

logger = logging.getLogger(__name__)


class TransferResult(NamedTuple):
    """Outcome of a checked `transfer` call.

    On success $value is (updated source, updated destination) or (updated source, list of
    updated destinations), matching the shape of the destinations argument.
    """

    value: tuple[Account, Account | list[Account]] | None
    error: MoneyError | None

    @property
    def is_ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> tuple[Account, Account | list[Account]]:
        """Return $value, or raise $error if the transfer failed."""
        if self.error is not None:
            raise self.error
        return self.value


def has_enough(account: Account, value: Money | DecimalLike) -> bool:
    """Return True when $account.balance covers $value (plain numbers use the account currency)."""
    return account.has_enough(value)


def transfer(
    source: Account,
    destinations: Account | Sequence[Account],
    value: Money | DecimalLike,
    *,
    exchange_rates: ExchangeRates | None = None,
) -> TransferResult:
    """Move $value from $source to one or more destination accounts without raising.

    Args:
        source: Account to take money from.
        destinations: One account, or a sequence of accounts sharing $value evenly.
        value: Positive amount in the source currency, as Money or a Decimal-like number
            with no more fractional digits than the source currency allows.
        exchange_rates: Rates used when a destination has another currency. Defaults to the
            rates from configuration.

    Returns:
        TransferResult: With updated accounts, or with `InvalidTransferError`,
        `InsufficientFundsError`, `ExchangeRateNotFoundError` or another `MoneyError`.
    """
    try:
        result = _transfer(source, destinations, value, exchange_rates or ExchangeRates.from_settings())
    except MoneyError as e:
        logger.warning(f"Rejected transfer of {value} from account {source.account_id}: {e}")
        return TransferResult(None, e)

    return TransferResult(result, None)


def transfer_unchecked(
    source: Account,
    destinations: Account | Sequence[Account],
    value: Money | DecimalLike,
    *,
    exchange_rates: ExchangeRates | None = None,
) -> tuple[Account, Account | list[Account]]:
    """Same as `transfer`, but raises the error instead of returning it."""
    return transfer(source, destinations, value, exchange_rates=exchange_rates).unwrap()


def split_evenly(amount: Money, parts: int) -> list[Money]:
    """Split $amount into $parts values that differ by at most one minor unit and sum to $amount.

    Examples:
        10.00 USD into 3 parts -> 3.34, 3.33, 3.33

    Raises:
        InvalidTransferError: If $parts is not positive.
    """
    if parts <= 0:
        raise InvalidTransferError(f"$parts must be positive, but provided value is: {parts}")

    scaled = amount.to_scaled()
    base, remainder = divmod(scaled.amount, parts)
    result = []
    for index in range(parts):
        share = base + 1 if index < remainder else base
        result.append(Money.from_scaled(ScaledMoney(share, scaled.currency, scaled.precision)))
    return result


# region Helpers


def _transfer(
    source: Account,
    destinations: Account | Sequence[Account],
    value: Money | DecimalLike,
    exchange_rates: ExchangeRates,
) -> tuple[Account, Account | list[Account]]:
    amount = _as_transfer_amount(source, value)

    if isinstance(destinations, Account):
        _check_distinct(source, [destinations])
        updated_source = _withdraw(source, amount)
        updated_destination = destinations.deposit(exchange_rates.convert(amount, destinations.currency))
        logger.info(f"Transferred {amount} from account {source.account_id} to account {destinations.account_id}")
        return updated_source, updated_destination

    destination_list = list(destinations)
    # Raise: a split transfer needs at least one destination
    if not destination_list:
        raise InvalidTransferError("Cannot call `transfer` because $destinations is empty")
    _check_distinct(source, destination_list)

    updated_source = _withdraw(source, amount)
    updated_destinations = [
        destination.deposit(exchange_rates.convert(share, destination.currency))
        for destination, share in zip(destination_list, split_evenly(amount, len(destination_list)))
    ]
    logger.info(f"Transferred {amount} from account {source.account_id} split across {len(destination_list)} account(s)")
    return updated_source, updated_destinations


def _as_transfer_amount(source: Account, value: Money | DecimalLike) -> Money:
    if isinstance(value, Money):
        amount = value
        # Raise: value must be expressed in the source currency
        if amount.currency != source.currency:
            raise InvalidTransferError(f"Cannot call `transfer` because $value currency ({amount.currency}) differs from source currency ({source.currency})")
    else:
        try:
            requested = as_finite_decimal(value)
        except ValueError as e:
            raise InvalidTransferError(f"Cannot call `transfer` because $value ({value!r}) is not a number") from e
        amount = Money(requested, source.currency)
        # Raise: never round the requested value silently
        if amount.value != requested:
            raise InvalidTransferError(f"Cannot call `transfer` because $value ({value}) has more fractional digits than {source.currency} allows ({source.currency.precision})")

    # Raise: only positive values can be transferred
    if amount.value <= 0:
        raise InvalidTransferError(f"Cannot call `transfer` because $value ({amount}) is not positive")
    return amount


def _check_distinct(source: Account, destinations: list[Account]) -> None:
    # Raise: transferring to itself would double count the source balance
    if any(destination is source for destination in destinations):
        raise InvalidTransferError(f"Cannot call `transfer` because source account {source.account_id} is also a destination")

    # Raise: each destination gets one updated copy, so listing an account twice would split its credit
    seen: set[int] = set()
    for destination in destinations:
        if id(destination) in seen:
            raise InvalidTransferError(f"Cannot call `transfer` because destination account {destination.account_id} is listed more than once")
        seen.add(id(destination))


def _withdraw(source: Account, amount: Money) -> Account:
    if not source.has_enough(amount):
        raise InsufficientFundsError(f"Not enough money. (balance: {source.balance}, requested: {amount})")
    return source.withdraw(amount)


# endregion
