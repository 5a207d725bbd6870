"""
Reconciler tests: whole-ledger replay scenarios.

Amounts are checked exactly; tokens are checked only for linkage, since
they are minted per replay.
"""

import pytest

from iou_kernel.domain.accounts import AccountState, CreditEntry, DebtEntry
from iou_kernel.domain.events import (
    UnknownEvent,
    make_open,
    make_topup,
    make_transfer,
)
from iou_kernel.domain.reconciler import reconcile, replay
from iou_kernel.domain.tokens import CounterTokenSource
from iou_kernel.exceptions import AccountNotFoundError

ALICE = "Alice"
BOB = "Bob"
CHARLIE = "Charlie"


def _debts(state):
    return [(d.counterparty, d.amount) for d in state.debts]


def _credits(state):
    return [(c.counterparty, c.amount) for c in state.credits]


class TestBasicReplay:
    def test_empty_ledger(self):
        assert reconcile([]) == {}

    def test_open_creates_empty_account(self):
        assert reconcile([make_open(BOB)]) == {BOB: AccountState()}

    def test_topups(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_topup(ALICE, 100),
            make_topup(BOB, 80),
        ]
        assert reconcile(events) == {
            ALICE: AccountState(cash=100),
            BOB: AccountState(cash=80),
        }

    def test_unknown_events_are_ignored(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            UnknownEvent(event_type="unknown type", payload={"jibberish": True}),
            make_topup(ALICE, 100),
            make_topup(BOB, 80),
        ]
        assert reconcile(events) == {
            ALICE: AccountState(cash=100),
            BOB: AccountState(cash=80),
        }

    def test_cash_transactions(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_topup(ALICE, 100),
            make_topup(BOB, 80),
            make_transfer(BOB, ALICE, 50),
        ]
        assert reconcile(events) == {
            ALICE: AccountState(cash=150),
            BOB: AccountState(cash=30),
        }

    def test_accounts_keep_open_order(self):
        events = [make_open(CHARLIE), make_open(ALICE), make_open(BOB)]
        assert list(reconcile(events)) == [CHARLIE, ALICE, BOB]


class TestDebts:
    def test_debts_stored_in_sequence(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_topup(ALICE, 100),
            make_topup(BOB, 80),
            make_transfer(BOB, ALICE, 150),
            make_transfer(BOB, ALICE, 20),
        ]
        accounts = reconcile(events)
        assert accounts[ALICE].cash == 180
        assert _credits(accounts[ALICE]) == [(BOB, 70), (BOB, 20)]
        assert accounts[BOB].cash == 0
        assert _debts(accounts[BOB]) == [(ALICE, 70), (ALICE, 20)]

    def test_topup_pays_down_debt(self):
        events = [
            make_open(BOB),
            make_open(ALICE),
            make_transfer(BOB, ALICE, 20),
            make_topup(BOB, 10),
        ]
        accounts = reconcile(events)
        assert accounts[BOB].cash == 0
        assert _debts(accounts[BOB]) == [(ALICE, 10)]
        assert accounts[ALICE].cash == 10
        assert _credits(accounts[ALICE]) == [(BOB, 10)]
        assert accounts[BOB].debts[0].token == accounts[ALICE].credits[0].token

    def test_debts_repaid_in_fifo_order(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_topup(ALICE, 50),
            make_topup(BOB, 20),
            make_transfer(BOB, ALICE, 50),
            make_transfer(BOB, ALICE, 17),
            make_transfer(BOB, ALICE, 8),
            make_topup(BOB, 40),
        ]
        accounts = reconcile(events)
        assert accounts[ALICE].cash == 110
        assert accounts[ALICE].debts == ()
        assert _credits(accounts[ALICE]) == [(BOB, 7), (BOB, 8)]
        assert accounts[BOB].cash == 0
        assert accounts[BOB].credits == ()
        assert _debts(accounts[BOB]) == [(ALICE, 7), (ALICE, 8)]

    def test_acceptance_criteria(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_topup(ALICE, 100),
            make_topup(BOB, 80),
            make_transfer(BOB, ALICE, 50),
            make_transfer(BOB, ALICE, 100),
            make_topup(BOB, 30),
            make_transfer(ALICE, BOB, 30),
            make_topup(BOB, 100),
        ]
        assert reconcile(events) == {
            ALICE: AccountState(cash=220),
            BOB: AccountState(cash=90),
        }

    def test_incoming_transfer_settles_recipient_debt(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_open(CHARLIE),
            make_transfer(BOB, ALICE, 20),
            make_topup(CHARLIE, 15),
            make_transfer(CHARLIE, BOB, 15),
        ]
        accounts = reconcile(events)
        assert accounts[BOB].cash == 0
        assert _debts(accounts[BOB]) == [(ALICE, 5)]
        assert accounts[ALICE].cash == 15
        assert accounts[CHARLIE] == AccountState()

    def test_counter_tokens_are_deterministic(self):
        events = [make_open(BOB), make_open(ALICE), make_transfer(BOB, ALICE, 20)]
        accounts = reconcile(events)
        assert accounts[BOB].debts == (DebtEntry("t1", ALICE, 20),)
        assert accounts[ALICE].credits == (CreditEntry("t1", BOB, 20),)


class TestReopen:
    def test_reopen_resets_account(self):
        events = [
            make_open(BOB),
            make_topup(BOB, 30),
            make_open(BOB),
        ]
        assert reconcile(events) == {BOB: AccountState()}

    def test_reopen_keeps_position(self):
        events = [make_open(BOB), make_open(ALICE), make_open(BOB)]
        assert list(reconcile(events)) == [BOB, ALICE]

    def test_reopen_of_non_empty_account_is_logged(self, captured_logs):
        reconcile([make_open(BOB), make_topup(BOB, 30), make_open(BOB)])
        records = [r for r in captured_logs() if r["message"] == "account_reopened"]
        assert len(records) == 1
        assert records[0]["level"] == "WARNING"
        assert records[0]["discarded_cash"] == 30

    def test_reopen_of_empty_account_is_silent(self, captured_logs):
        reconcile([make_open(BOB), make_open(BOB)])
        assert not [r for r in captured_logs() if r["message"] == "account_reopened"]

    def test_verify_tolerates_reopen_with_links(self):
        events = [
            make_open(BOB),
            make_open(ALICE),
            make_transfer(BOB, ALICE, 20),
            make_open(ALICE),
            make_topup(BOB, 25),
        ]
        accounts = reconcile(events, verify=True)
        assert accounts[ALICE] == AccountState(cash=20)
        assert accounts[BOB] == AccountState(cash=5)


class TestUnopenedAccounts:
    def test_topup_unopened(self):
        with pytest.raises(LookupError):
            reconcile([make_topup(BOB, 10)])

    def test_transfer_to_unopened(self, captured_logs):
        with pytest.raises(AccountNotFoundError) as exc:
            reconcile([make_open(BOB), make_transfer(BOB, ALICE, 10)])
        assert exc.value.username == ALICE
        errors = [r for r in captured_logs() if r["message"] == "account_not_found"]
        assert errors[0]["event_seq"] == 2
        assert errors[0]["account"] == ALICE


class TestReplay:
    def test_yields_every_prefix(self):
        events = [make_open(BOB), make_topup(BOB, 5), make_topup(BOB, 7)]
        cash = [accounts[BOB].cash for _, accounts in replay(events)]
        assert cash == [0, 5, 12]

    def test_replay_matches_reconcile(self):
        events = [
            make_open(ALICE),
            make_open(BOB),
            make_transfer(BOB, ALICE, 20),
            make_topup(BOB, 10),
        ]
        *_, (_, last) = replay(events, token_source=CounterTokenSource())
        assert dict(last) == reconcile(events)

    def test_input_events_not_consumed_twice(self):
        events = [make_open(BOB), make_topup(BOB, 5)]
        assert reconcile(events) == reconcile(events)

    def test_completion_is_logged(self, captured_logs):
        reconcile([make_open(BOB), make_topup(BOB, 5)])
        done = [r for r in captured_logs() if r["message"] == "reconciliation_completed"]
        assert done[0]["event_count"] == 2
        assert done[0]["account_count"] == 1
