"""
Debt clearing -- FIFO settlement of outstanding debts.

Responsibility:
    After cash arrives somewhere (a Topup, or the recipient side of a
    Transfer), pay down outstanding debts oldest-first.

Architecture position:
    Kernel > Domain -- pure, zero I/O apart from debug logging.

Behavior:
    The pass is gated on the anchor account: it runs only when the anchor
    itself has debts. Once open, it sweeps every indebted account in
    ledger order, not just the anchor. For each debtor:

      * cash covers the oldest debt  -> settle it fully, move to the next
      * cash covers part of it       -> shrink debt and credit to the
                                        unpaid remainder, stop
      * no cash                      -> nothing changes for this debtor

    A partially paid debt is never skipped in favor of a smaller, newer
    one.

Invariants preserved:
    - cash >= 0 on every account
    - no debt/credit entry with amount 0
    - debt and credit sharing a token keep equal amounts
    - sum(cash) + sum(credits) - sum(debts) is unchanged
"""

from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from iou_kernel.domain.accounts import AccountState, DebtEntry, require_account
from iou_kernel.logging_config import get_logger

logger = get_logger("domain.clearing")


def clear_debts(
    accounts: Mapping[str, AccountState],
    anchor: str,
) -> Mapping[str, AccountState]:
    """
    Settle outstanding debts after cash arrived at `anchor`.

    Returns `accounts` itself when the anchor has no debts; otherwise a
    new mapping.

    Raises:
        AccountNotFoundError: `anchor` was never opened.
    """
    if not require_account(accounts, anchor).debts:
        return accounts

    settled = dict(accounts)
    for username in settled:
        if settled[username].debts:
            _settle_debtor(settled, username)
    return settled


def _settle_debtor(accounts: dict[str, AccountState], debtor: str) -> None:
    """Pay `debtor`'s debts in creation order until its cash runs out."""
    for entry in accounts[debtor].debts:
        cash = accounts[debtor].cash
        if cash == 0:
            return
        if cash >= entry.amount:
            _pay(accounts, debtor, entry, paid=entry.amount)
            logger.debug(
                "debt_settled",
                extra={
                    "debtor": debtor,
                    "creditor": entry.counterparty,
                    "amount": entry.amount,
                    "token": entry.token,
                },
            )
            continue
        _pay(accounts, debtor, entry, paid=cash)
        logger.debug(
            "debt_partially_settled",
            extra={
                "debtor": debtor,
                "creditor": entry.counterparty,
                "paid": cash,
                "outstanding": entry.amount - cash,
                "token": entry.token,
            },
        )
        return


def _pay(
    accounts: dict[str, AccountState],
    debtor: str,
    entry: DebtEntry,
    paid: int,
) -> None:
    # The creditor's credit may be missing if the creditor was re-opened;
    # the debtor still pays, as the ledger has always done.
    outstanding = entry.amount - paid
    debtor_state = accounts[debtor]
    creditor_state = require_account(accounts, entry.counterparty)

    accounts[debtor] = replace(
        debtor_state, cash=debtor_state.cash - paid
    ).with_debt_amount(entry.token, outstanding)
    accounts[entry.counterparty] = replace(
        creditor_state, cash=creditor_state.cash + paid
    ).with_credit_amount(entry.token, outstanding)
