"""
Report lines for an account, in the ledger's established wording.

Debts and credits are grouped by counterparty, summed, and emitted one
line per counterparty in order of first appearance:

    Owing 10 from Charlie.
    Your balance is 0.
    Owing 20 to Alice.
"""

from __future__ import annotations

from typing import Iterable

from iou_kernel.domain.accounts import AccountState, CreditEntry, DebtEntry


def summarize(entries: Iterable[DebtEntry | CreditEntry]) -> list[tuple[str, int]]:
    """Sum entry amounts per counterparty, keeping first-appearance order."""
    totals: dict[str, int] = {}
    for entry in entries:
        totals[entry.counterparty] = totals.get(entry.counterparty, 0) + entry.amount
    return list(totals.items())


def debt_lines(state: AccountState) -> list[str]:
    return [f"Owing {total} to {name}." for name, total in summarize(state.debts)]


def credit_lines(state: AccountState) -> list[str]:
    return [f"Owing {total} from {name}." for name, total in summarize(state.credits)]


def balance_line(state: AccountState) -> str:
    return f"Your balance is {state.cash}."


def render_account(state: AccountState) -> list[str]:
    """Credits, then balance, then debts."""
    return [*credit_lines(state), balance_line(state), *debt_lines(state)]


def greeting(username: str) -> str:
    return f"Hello, {username}!"


def transferred_line(amount: int, recipient: str) -> str:
    return f"Transferred {amount} to {recipient}."
