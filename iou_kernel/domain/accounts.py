"""
Account states derived by replaying the ledger.

A debt on one account and a credit on another share a link token. The pair
is created together and shrunk or removed together; neither side ever
carries an amount of zero.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, Mapping

from iou_kernel.exceptions import AccountNotFoundError


@dataclass(frozen=True)
class DebtEntry:
    """This account owes `amount` to `counterparty`."""

    token: str
    counterparty: str
    amount: int


@dataclass(frozen=True)
class CreditEntry:
    """`counterparty` owes `amount` to this account."""

    token: str
    counterparty: str
    amount: int


@dataclass(frozen=True)
class AccountState:
    """
    Derived cash, debts, and credits of one participant.

    Debts and credits are kept in creation order; the oldest debt is
    settled first.
    """

    cash: int = 0
    debts: tuple[DebtEntry, ...] = ()
    credits: tuple[CreditEntry, ...] = ()

    @property
    def total_debt(self) -> int:
        return sum(d.amount for d in self.debts)

    @property
    def total_credit(self) -> int:
        return sum(c.amount for c in self.credits)

    @property
    def net_worth(self) -> int:
        """Cash plus money owed to this account minus money it owes."""
        return self.cash + self.total_credit - self.total_debt

    def is_empty(self) -> bool:
        return self.cash == 0 and not self.debts and not self.credits

    def with_debt(self, entry: DebtEntry) -> AccountState:
        return replace(self, debts=_prune(self.debts + (entry,)))

    def with_credit(self, entry: CreditEntry) -> AccountState:
        return replace(self, credits=_prune(self.credits + (entry,)))

    def with_debt_amount(self, token: str, amount: int) -> AccountState:
        """Set the amount of the debt linked by `token`; zero removes it."""
        debts = tuple(
            replace(d, amount=amount) if d.token == token else d for d in self.debts
        )
        return replace(self, debts=_prune(debts))

    def with_credit_amount(self, token: str, amount: int) -> AccountState:
        """Set the amount of the credit linked by `token`; zero removes it."""
        credits = tuple(
            replace(c, amount=amount) if c.token == token else c
            for c in self.credits
        )
        return replace(self, credits=_prune(credits))


def _prune(entries):
    return tuple(e for e in entries if e.amount != 0)


def relabel_tokens(accounts: Mapping[str, AccountState]) -> dict[str, AccountState]:
    """
    Rename link tokens by order of first appearance.

    Two replays of the same ledger are equal after relabeling even when
    their token sources differ.
    """
    names: dict[str, str] = {}

    def _label(token: str) -> str:
        if token not in names:
            names[token] = f"link-{len(names) + 1}"
        return names[token]

    def _relabel(entries: Iterable):
        return tuple(replace(e, token=_label(e.token)) for e in entries)

    return {
        username: replace(
            state, debts=_relabel(state.debts), credits=_relabel(state.credits)
        )
        for username, state in accounts.items()
    }


def require_account(
    accounts: Mapping[str, AccountState],
    username: str,
    event_type: str | None = None,
) -> AccountState:
    """
    Look up an account that must already have been opened.

    Raises:
        AccountNotFoundError: `username` was never opened.
    """
    try:
        return accounts[username]
    except KeyError:
        raise AccountNotFoundError(username, event_type) from None
