"""
Money movement -- apply one Transfer to the account mapping.

The sender pays what it can in cash right now. Any shortfall becomes a
linked debt on the sender and a matching credit on the recipient, both
carrying the same token. A zero shortfall creates no entries.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Mapping

from iou_kernel.domain.accounts import (
    AccountState,
    CreditEntry,
    DebtEntry,
    require_account,
)
from iou_kernel.domain.events import EventType, Transfer


def move_money(
    accounts: Mapping[str, AccountState],
    transfer: Transfer,
    token: str,
) -> dict[str, AccountState]:
    """
    Return a new mapping with `transfer` applied.

    Preconditions:
        Both parties have been opened.
    Postconditions:
        sender.cash >= 0; recipient.cash grew by the cash portion; the
        debt portion is recorded as a DebtEntry/CreditEntry pair under
        `token`.

    Raises:
        AccountNotFoundError: either party was never opened.
    """
    sender = require_account(accounts, transfer.sender, EventType.TRANSFER.value)
    recipient = require_account(
        accounts, transfer.recipient, EventType.TRANSFER.value
    )

    remaining_cash = sender.cash - transfer.amount
    debt_portion = max(0, -remaining_cash)
    cash_portion = transfer.amount - debt_portion

    sender = replace(sender, cash=max(remaining_cash, 0)).with_debt(
        DebtEntry(token=token, counterparty=transfer.recipient, amount=debt_portion)
    )
    recipient = replace(recipient, cash=recipient.cash + cash_portion).with_credit(
        CreditEntry(token=token, counterparty=transfer.sender, amount=debt_portion)
    )

    moved = dict(accounts)
    moved[transfer.sender] = sender
    moved[transfer.recipient] = recipient
    return moved
