"""
Reconciler -- replay the whole ledger into account states.

Responsibility:
    Left-folds the event sequence, starting from an empty mapping, through
    Money Movement and Debt Clearing. The only entry point the outer layers
    use to learn balances.

Architecture position:
    Kernel > Domain -- pure functional core. The caller supplies the
    events; nothing is read or written here.

Fold rules:
    Open(u)             -> u is (re)set to the empty state
    Topup(u, amt)       -> u.cash += amt, then clear debts anchored at u
    Transfer(f, t, amt) -> move money f -> t, then clear debts anchored at t
    anything else       -> skipped

Failure modes:
    - AccountNotFoundError (a LookupError) when an event names an account
      with no prior Open. The stored ledger should be treated as corrupt.
    - InvariantViolationError when ``verify=True`` and a step breaks a
      ledger invariant.

Determinism:
    With a CounterTokenSource (the default) two replays are identical.
    With any other source they are identical after ``relabel_tokens``.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Iterable, Iterator, Mapping

from iou_kernel.domain.accounts import AccountState, require_account
from iou_kernel.domain.clearing import clear_debts
from iou_kernel.domain.events import (
    Event,
    EventType,
    Open,
    Topup,
    Transfer,
    UnknownEvent,
)
from iou_kernel.domain.movement import move_money
from iou_kernel.domain.tokens import CounterTokenSource, TokenSource
from iou_kernel.exceptions import AccountNotFoundError
from iou_kernel.invariants import verify_state
from iou_kernel.logging_config import LogContext, get_logger

logger = get_logger("domain.reconciler")

Accounts = Mapping[str, AccountState]


def apply_event(
    accounts: Accounts,
    event: Event,
    token_source: TokenSource,
) -> Accounts:
    """Apply one event and return the resulting mapping."""
    match event:
        case Open(username=username):
            previous = accounts.get(username)
            if previous is not None and not previous.is_empty():
                logger.warning(
                    "account_reopened",
                    extra={
                        "account": username,
                        "discarded_cash": previous.cash,
                        "discarded_debts": len(previous.debts),
                        "discarded_credits": len(previous.credits),
                    },
                )
            return {**accounts, username: AccountState()}
        case Topup(username=username, amount=amount):
            state = require_account(accounts, username, EventType.TOPUP.value)
            topped_up = {**accounts, username: replace(state, cash=state.cash + amount)}
            return clear_debts(topped_up, username)
        case Transfer(recipient=recipient):
            moved = move_money(accounts, event, token_source.next_token())
            return clear_debts(moved, recipient)
        case UnknownEvent(event_type=event_type):
            logger.info("unknown_event_skipped", extra={"event_type": event_type})
            return accounts
    logger.info("unknown_event_skipped", extra={"event_type": type(event).__name__})
    return accounts


def replay(
    events: Iterable[Event],
    token_source: TokenSource | None = None,
    verify: bool = False,
) -> Iterator[tuple[Event, Accounts]]:
    """
    Yield ``(event, accounts)`` after every event of the ledger.

    With ``verify=True`` every intermediate state is checked against the
    ledger invariants. Linkage and conservation stop being checked once a
    non-empty account has been re-opened, since re-opening orphans the
    other side of its links.
    """
    tokens = token_source if token_source is not None else CounterTokenSource()
    accounts: Accounts = {}
    expected_total = 0
    strict = True

    for seq, event in enumerate(events, start=1):
        if verify:
            match event:
                case Topup(amount=amount):
                    expected_total += amount
                case Open(username=username) if username in accounts:
                    discarded = accounts[username]
                    if discarded.debts or discarded.credits:
                        strict = False
                    expected_total -= discarded.cash

        with LogContext.bind(event_seq=seq):
            try:
                accounts = apply_event(accounts, event, tokens)
            except AccountNotFoundError as exc:
                logger.error(
                    "account_not_found",
                    extra={"account": exc.username, "event_type": exc.event_type},
                )
                raise

        if verify:
            verify_state(
                accounts,
                expected_total=expected_total if strict else None,
                check_linkage=strict,
            )
        yield event, accounts


def reconcile(
    events: Iterable[Event],
    token_source: TokenSource | None = None,
    verify: bool = False,
) -> dict[str, AccountState]:
    """
    Replay `events` from the start and return the final account states.

    Raises:
        AccountNotFoundError: an event references an un-opened username.
        InvariantViolationError: ``verify=True`` and a step broke an invariant.
    """
    accounts: Accounts = {}
    count = 0
    for _, accounts in replay(events, token_source=token_source, verify=verify):
        count += 1
    logger.debug(
        "reconciliation_completed",
        extra={"event_count": count, "account_count": len(accounts)},
    )
    return dict(accounts)
