from __future__ import annotations

from decimal import Decimal

import pytest

from financial_system.domain.account import Account
from financial_system.domain.monetary.currency_registry import BRL, USD
from financial_system.domain.monetary.money import Money
from financial_system.errors import CurrencyMismatchError, InsufficientFundsError, InvalidAmountError
from tests.helpers.helper_accounts import create_usd_account


def test_open_account():
    account = Account.open("150.75", "USD", 123456)

    assert account.account_id == 123456
    assert account.balance == Money("150.75", USD)
    assert account.currency == USD


def test_open_anonymous_account():
    assert Account.open("150.75", USD).account_id is None


def test_balance_must_be_money():
    with pytest.raises(TypeError):
        Account(Decimal("10"))


def test_has_enough():
    account = create_usd_account("10.50")

    assert account.has_enough(5.0)
    assert account.has_enough("10.50")
    assert not account.has_enough(11.0)
    assert account.has_enough(Money("10.50", USD))


def test_has_enough_rejects_other_currency():
    with pytest.raises(CurrencyMismatchError):
        create_usd_account("10.50").has_enough(Money("1", BRL))


def test_deposit_returns_new_account():
    account = create_usd_account("10.50", 1)
    updated = account.deposit("0.25")

    assert updated.balance == Money("10.75", USD)
    assert updated.account_id == 1
    assert account.balance == Money("10.50", USD)


def test_deposit_rejects_negative_amount():
    with pytest.raises(InvalidAmountError):
        create_usd_account("10.50").deposit("-1")


def test_withdraw():
    assert create_usd_account("10.50").withdraw(5).balance == Money("5.50", USD)
    assert create_usd_account("10.50").withdraw("10.50").balance == Money("0", USD)


def test_withdraw_rejects_overdraft():
    with pytest.raises(InsufficientFundsError):
        create_usd_account("10.50").withdraw("10.51")


def test_withdraw_rejects_negative_amount():
    with pytest.raises(InvalidAmountError):
        create_usd_account("10.50").withdraw(-1)


def test_equality():
    assert create_usd_account("1", 7) == create_usd_account("1.00", 7)
    assert create_usd_account("1", 7) != create_usd_account("1", 8)
