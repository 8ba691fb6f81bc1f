from __future__ import annotations

import logging

import pytest

from financial_system.domain.account import Account
from financial_system.domain.monetary.currency_registry import BRL, ETH, EUR, JPY, USD
from financial_system.domain.monetary.money import Money
from financial_system.errors import (
    ExchangeRateNotFoundError,
    InsufficientFundsError,
    InvalidTransferError,
)
from financial_system.platform.transfer import has_enough, split_evenly, transfer, transfer_unchecked
from tests.helpers.helper_accounts import create_brl_account, create_exchange_rates, create_usd_account


# region Single destination


def test_transfer_to_single_account():
    source = create_usd_account("10.50", 1)
    destination = create_usd_account("0.0", 2)

    result = transfer(source, destination, 5.0, exchange_rates=create_exchange_rates())

    assert result.is_ok
    updated_source, updated_destination = result.value
    assert updated_source.balance == Money("5.50", USD)
    assert updated_destination.balance == Money("5.0", USD)
    assert updated_source.account_id == 1
    assert updated_destination.account_id == 2


def test_transfer_does_not_mutate_inputs():
    source = create_usd_account("10.50")
    destination = create_usd_account("0")

    transfer(source, destination, "5", exchange_rates=create_exchange_rates())

    assert source.balance == Money("10.50", USD)
    assert destination.balance == Money("0", USD)


def test_transfer_converts_into_destination_currency():
    source = create_usd_account("100")
    destination = create_brl_account("10")

    updated_source, updated_destination = transfer_unchecked(source, destination, "20.25", exchange_rates=create_exchange_rates())

    assert updated_source.balance == Money("79.75", USD)
    assert updated_destination.balance == Money("111.25", BRL)


def test_transfer_accepts_money_value():
    source = create_usd_account("10")
    _, destination = transfer_unchecked(source, create_usd_account("0"), Money("2.5", USD), exchange_rates=create_exchange_rates())
    assert destination.balance == Money("2.50", USD)


def test_transfer_whole_balance():
    updated_source, _ = transfer_unchecked(create_usd_account("10.50"), create_usd_account("0"), "10.50", exchange_rates=create_exchange_rates())
    assert updated_source.balance == Money("0", USD)


# endregion

# region Multiple destinations


def test_transfer_splits_evenly():
    account1 = create_usd_account("10.50")
    account2 = create_usd_account("0.0")
    account3 = create_usd_account("500.0")

    updated_source, updated_destinations = transfer_unchecked(account3, [account1, account2], 100.0, exchange_rates=create_exchange_rates())

    assert updated_source.balance == Money("400.0", USD)
    assert [a.balance for a in updated_destinations] == [Money("60.50", USD), Money("50.0", USD)]


def test_transfer_split_never_loses_a_cent():
    source = create_usd_account("100")
    destinations = [create_usd_account("0", i) for i in range(3)]

    updated_source, updated_destinations = transfer_unchecked(source, destinations, "10", exchange_rates=create_exchange_rates())

    balances = [a.balance for a in updated_destinations]
    assert balances == [Money("3.34", USD), Money("3.33", USD), Money("3.33", USD)]
    assert sum(balances, Money.zero(USD)) == Money("10", USD)
    assert updated_source.balance == Money("90", USD)
    assert [a.account_id for a in updated_destinations] == [0, 1, 2]


def test_transfer_split_accepts_tuple_and_mixed_currencies():
    source = create_usd_account("100")
    destinations = (create_usd_account("0"), create_brl_account("0"))

    _, (usd_account, brl_account) = transfer_unchecked(source, destinations, "10", exchange_rates=create_exchange_rates())

    assert usd_account.balance == Money("5", USD)
    assert brl_account.balance == Money("25", BRL)


def test_transfer_split_smaller_than_parts():
    _, destinations = transfer_unchecked(
        create_usd_account("1"),
        [create_usd_account("0") for _ in range(3)],
        "0.01",
        exchange_rates=create_exchange_rates(),
    )
    assert [a.balance for a in destinations] == [Money("0.01", USD), Money("0", USD), Money("0", USD)]


def test_transfer_rejects_empty_destination_list():
    result = transfer(create_usd_account("10"), [], "1", exchange_rates=create_exchange_rates())
    assert isinstance(result.error, InvalidTransferError)


# endregion

# region Failures


def test_transfer_rejects_insufficient_funds(caplog):
    source = create_usd_account("10.50")

    with caplog.at_level(logging.WARNING, logger="financial_system.platform.transfer"):
        result = transfer(source, create_usd_account("0"), 11.0, exchange_rates=create_exchange_rates())

    assert not result.is_ok
    assert result.value is None
    assert isinstance(result.error, InsufficientFundsError)
    assert "Rejected transfer" in caplog.text


def test_transfer_unchecked_raises():
    with pytest.raises(InsufficientFundsError):
        transfer_unchecked(create_usd_account("1"), [create_usd_account("0")], "2", exchange_rates=create_exchange_rates())


@pytest.mark.parametrize("value", [0, "-1", "abc", "NaN", "0.001", None])
def test_transfer_rejects_invalid_value(value):
    result = transfer(create_usd_account("10"), create_usd_account("0"), value, exchange_rates=create_exchange_rates())
    assert isinstance(result.error, InvalidTransferError)


def test_transfer_rejects_money_in_other_currency():
    result = transfer(create_usd_account("10"), create_usd_account("0"), Money("1", BRL), exchange_rates=create_exchange_rates())
    assert isinstance(result.error, InvalidTransferError)


def test_transfer_rejects_source_as_destination():
    source = create_usd_account("10")

    assert isinstance(transfer(source, source, "1").error, InvalidTransferError)
    assert isinstance(transfer(source, [create_usd_account("0"), source], "1").error, InvalidTransferError)


def test_transfer_rejects_repeated_destination():
    source = create_usd_account("100", 1)
    destination = create_usd_account("0", 2)

    result = transfer(source, [destination, destination], "10", exchange_rates=create_exchange_rates())

    assert isinstance(result.error, InvalidTransferError)
    assert result.value is None


def test_transfer_large_eth_balance_returns_result():
    source = Account.open("1", ETH, 1)
    destination = Account.open("0", ETH, 2)

    result = transfer(source, destination, "100000000000000", exchange_rates=create_exchange_rates())

    assert isinstance(result.error, InsufficientFundsError)


def test_transfer_large_eth_value_is_exact():
    source = Account.open("20000000000.5", ETH, 1)
    destinations = [Account.open("0", ETH, 2), Account.open("0", ETH, 3)]

    updated_source, updated_destinations = transfer_unchecked(source, destinations, "10000000000.000000000000000001", exchange_rates=create_exchange_rates())

    assert updated_source.balance == Money("10000000000.499999999999999999", ETH)
    assert [a.balance for a in updated_destinations] == [Money("5000000000.000000000000000001", ETH), Money("5000000000", ETH)]


def test_transfer_uses_inverse_rate_for_opposite_pair():
    # Only EUR -> USD is configured; USD -> EUR is derived
    _, euro_account = transfer_unchecked(create_usd_account("10"), Account.open("0", EUR), "1.10", exchange_rates=create_exchange_rates())
    assert euro_account.balance == Money("1.00", EUR)


def test_transfer_fails_whole_when_rate_missing():
    source = create_brl_account("10")
    destinations = [create_brl_account("0"), Account.open("0", EUR)]

    result = transfer(source, destinations, "4", exchange_rates=create_exchange_rates())

    assert isinstance(result.error, ExchangeRateNotFoundError)
    assert result.value is None


# endregion

# region Helpers


def test_has_enough():
    account = create_usd_account("10.50")

    assert has_enough(account, 5.0)
    assert not has_enough(account, 11.0)


def test_split_evenly():
    assert split_evenly(Money("100", JPY), 3) == [Money("34", JPY), Money("33", JPY), Money("33", JPY)]
    assert split_evenly(Money("1", USD), 1) == [Money("1", USD)]
    with pytest.raises(InvalidTransferError):
        split_evenly(Money("1", USD), 0)


# endregion
