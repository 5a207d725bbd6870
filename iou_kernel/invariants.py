"""
Ledger Invariants Contract.

These invariants hold after every event of a well-formed ledger. The
reducer is written to preserve them; ``verify_state`` checks them
explicitly when replay runs with verification on, and the property tests
check them over generated ledgers.
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum, unique
from typing import TYPE_CHECKING, Mapping

from iou_kernel.exceptions import InvariantViolationError

if TYPE_CHECKING:
    from iou_kernel.domain.accounts import AccountState


@unique
class LedgerInvariant(str, Enum):
    """Guarantees the replay of a ledger provides."""

    NON_NEGATIVE_CASH = "non_negative_cash"
    """No account ever holds negative cash."""

    NO_ZERO_ENTRIES = "no_zero_entries"
    """Debt and credit entries with amount 0 are pruned immediately."""

    LINKAGE = "linkage"
    """Every debt token matches exactly one credit on the counterparty,
    with the same amount, and vice versa."""

    CONSERVATION = "conservation"
    """sum(cash) + sum(credits) - sum(debts) equals the total ever topped
    up. Transfers and settlement never change it."""


ALL_LEDGER_INVARIANTS: frozenset[LedgerInvariant] = frozenset(LedgerInvariant)


def ledger_total(accounts: Mapping[str, AccountState]) -> int:
    """System value: sum of every account's net worth."""
    return sum(state.net_worth for state in accounts.values())


def verify_state(
    accounts: Mapping[str, AccountState],
    expected_total: int | None = None,
    check_linkage: bool = True,
) -> None:
    """
    Check the ledger invariants against one account mapping.

    Conservation is only checked when `expected_total` is given.

    Raises:
        InvariantViolationError: on the first broken invariant.
    """
    for username, state in accounts.items():
        if state.cash < 0:
            raise InvariantViolationError(
                LedgerInvariant.NON_NEGATIVE_CASH.value,
                f"{username} has cash {state.cash}",
            )
        for entry in (*state.debts, *state.credits):
            if entry.amount <= 0:
                raise InvariantViolationError(
                    LedgerInvariant.NO_ZERO_ENTRIES.value,
                    f"{username} holds entry {entry.token} with amount {entry.amount}",
                )

    if check_linkage:
        _verify_linkage(accounts)

    if expected_total is not None:
        total = ledger_total(accounts)
        if total != expected_total:
            raise InvariantViolationError(
                LedgerInvariant.CONSERVATION.value,
                f"ledger total {total} != topped up {expected_total}",
            )


def _verify_linkage(accounts: Mapping[str, AccountState]) -> None:
    debts: dict[str, list[tuple[str, str, int]]] = defaultdict(list)
    credits: dict[str, list[tuple[str, str, int]]] = defaultdict(list)
    for username, state in accounts.items():
        for d in state.debts:
            debts[d.token].append((username, d.counterparty, d.amount))
        for c in state.credits:
            # Stored as (debtor, creditor, amount) to compare with debts
            credits[c.token].append((c.counterparty, username, c.amount))

    for token in debts.keys() | credits.keys():
        if len(debts[token]) != 1 or len(credits[token]) != 1:
            raise InvariantViolationError(
                LedgerInvariant.LINKAGE.value,
                f"token {token} has {len(debts[token])} debts "
                f"and {len(credits[token])} credits",
            )
        if debts[token][0] != credits[token][0]:
            raise InvariantViolationError(
                LedgerInvariant.LINKAGE.value,
                f"token {token}: debt {debts[token][0]} != credit {credits[token][0]}",
            )
