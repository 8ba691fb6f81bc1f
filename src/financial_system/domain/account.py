from __future__ import annotations

from financial_system.domain.monetary.currency import Currency
from financial_system.domain.monetary.money import Money
from financial_system.errors import InsufficientFundsError, InvalidAmountError
from financial_system.utils.decimal_tools import DecimalLike


class Account:
    """Immutable account record: an optional identifier and a balance in a single currency.

    Operations never mutate the account; `deposit` and `withdraw` return updated copies, which
    keeps a multi-step transfer all-or-nothing (nothing changes until every step succeeded).

    Attributes:
        account_id: External identifier, or None for anonymous accounts.
    """

    # region Init

    def __init__(self, balance: Money, account_id: int | str | None = None) -> None:
        # Raise: balance must be Money so the account currency is known
        if not isinstance(balance, Money):
            raise TypeError(f"$balance must be a Money instance, but provided value is: {balance!r}")

        self._balance = balance
        self._account_id = account_id

    @classmethod
    def open(cls, balance: DecimalLike, currency: Currency | str, account_id: int | str | None = None) -> Account:
        """Create an account from a plain balance, e.g. `Account.open("150.75", "USD")`."""
        return cls(Money(balance, currency), account_id)

    # endregion

    # region Properties

    @property
    def account_id(self) -> int | str | None:
        return self._account_id

    @property
    def balance(self) -> Money:
        return self._balance

    @property
    def currency(self) -> Currency:
        return self._balance.currency

    # endregion

    # region Main

    def has_enough(self, required_amount: Money | DecimalLike) -> bool:
        """Return True if the balance covers $required_amount.

        A plain number is read in the account currency.

        Raises:
            CurrencyMismatchError: If $required_amount is Money in another currency.
        """
        return self._balance >= self._as_money(required_amount)

    def deposit(self, amount: Money | DecimalLike) -> Account:
        """Return a copy with $amount added to the balance.

        Raises:
            InvalidAmountError: If $amount is negative.
            CurrencyMismatchError: If $amount is Money in another currency.
        """
        money = self._as_money(amount)
        # Raise: deposits cannot be negative
        if money.value < 0:
            raise InvalidAmountError(f"Cannot call `deposit` because $amount ({money}) is negative")

        return Account(self._balance + money, self._account_id)

    def withdraw(self, amount: Money | DecimalLike) -> Account:
        """Return a copy with $amount removed from the balance.

        Raises:
            InvalidAmountError: If $amount is negative.
            InsufficientFundsError: If the balance would become negative.
        """
        money = self._as_money(amount)
        # Raise: withdrawals cannot be negative
        if money.value < 0:
            raise InvalidAmountError(f"Cannot call `withdraw` because $amount ({money}) is negative")

        # Raise: ensure balance stays non-negative
        if not self.has_enough(money):
            raise InsufficientFundsError(f"Cannot call `withdraw` because $amount ({money}) exceeds $balance ({self._balance})")

        return Account(self._balance - money, self._account_id)

    # endregion

    # region Utilities

    def _as_money(self, amount: Money | DecimalLike) -> Money:
        if isinstance(amount, Money):
            return amount
        return Money(amount, self.currency)

    # endregion

    # region Magic

    def __eq__(self, other) -> bool:
        if not isinstance(other, Account):
            return False
        return self._account_id == other._account_id and self._balance == other._balance

    def __hash__(self) -> int:
        return hash((self._account_id, self._balance))

    def __str__(self) -> str:
        return f"{self.__class__.__name__}(account_id={self._account_id})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(account_id={self._account_id!r}, balance={self._balance!r})"

    # endregion
