"""
Tests for FIFO debt clearing.

Covers full and partial settlement, the anchor gate, the sweep over every
indebted account once the gate opens, and orphaned links left by a
re-opened creditor.
"""

from iou_kernel.domain.accounts import AccountState, CreditEntry, DebtEntry
from iou_kernel.domain.clearing import clear_debts


def _bob_owes_alice(bob_cash, *amounts, alice_cash=0):
    tokens = [f"t{i}" for i in range(1, len(amounts) + 1)]
    return {
        "Alice": AccountState(
            cash=alice_cash,
            credits=tuple(CreditEntry(t, "Bob", a) for t, a in zip(tokens, amounts)),
        ),
        "Bob": AccountState(
            cash=bob_cash,
            debts=tuple(DebtEntry(t, "Alice", a) for t, a in zip(tokens, amounts)),
        ),
    }


class TestFifoSettlement:
    def test_exact_cash_clears_first_debt_only(self):
        cleared = clear_debts(_bob_owes_alice(7, 7, 8), "Bob")
        assert cleared["Bob"] == AccountState(cash=0, debts=(DebtEntry("t2", "Alice", 8),))
        assert cleared["Alice"] == AccountState(cash=7, credits=(CreditEntry("t2", "Bob", 8),))

    def test_surplus_shrinks_second_debt(self):
        cleared = clear_debts(_bob_owes_alice(10, 7, 8), "Bob")
        assert cleared["Bob"] == AccountState(cash=0, debts=(DebtEntry("t2", "Alice", 5),))
        assert cleared["Alice"] == AccountState(cash=10, credits=(CreditEntry("t2", "Bob", 5),))

    def test_enough_cash_clears_everything(self):
        cleared = clear_debts(_bob_owes_alice(20, 7, 8), "Bob")
        assert cleared["Bob"] == AccountState(cash=5)
        assert cleared["Alice"] == AccountState(cash=15)

    def test_partial_debt_blocks_smaller_newer_debt(self):
        """Bob can afford the 2 but the older 10 is paid down first."""
        cleared = clear_debts(_bob_owes_alice(4, 10, 2), "Bob")
        assert cleared["Bob"].debts == (DebtEntry("t1", "Alice", 6), DebtEntry("t2", "Alice", 2))
        assert cleared["Bob"].cash == 0

    def test_different_creditors(self):
        accounts = {
            "Alice": AccountState(credits=(CreditEntry("t1", "Bob", 7),)),
            "Carol": AccountState(credits=(CreditEntry("t2", "Bob", 8),)),
            "Bob": AccountState(
                cash=10,
                debts=(DebtEntry("t1", "Alice", 7), DebtEntry("t2", "Carol", 8)),
            ),
        }
        cleared = clear_debts(accounts, "Bob")
        assert cleared["Alice"] == AccountState(cash=7)
        assert cleared["Carol"] == AccountState(cash=3, credits=(CreditEntry("t2", "Bob", 5),))
        assert cleared["Bob"] == AccountState(cash=0, debts=(DebtEntry("t2", "Carol", 5),))

    def test_no_cash_changes_nothing(self):
        accounts = _bob_owes_alice(0, 7, 8)
        assert clear_debts(accounts, "Bob") == accounts


class TestAnchorGate:
    def test_anchor_without_debts_returns_input(self):
        accounts = _bob_owes_alice(10, 7)
        assert clear_debts(accounts, "Alice") is accounts

    def test_indebted_anchor_sweeps_other_debtors(self):
        accounts = {
            "Alice": AccountState(
                credits=(CreditEntry("t1", "Bob", 5), CreditEntry("t2", "Carol", 3))
            ),
            "Bob": AccountState(cash=5, debts=(DebtEntry("t1", "Alice", 5),)),
            "Carol": AccountState(cash=0, debts=(DebtEntry("t2", "Alice", 3),)),
        }
        cleared = clear_debts(accounts, "Carol")
        assert cleared["Bob"] == AccountState(cash=0)
        assert cleared["Alice"] == AccountState(cash=5, credits=(CreditEntry("t2", "Carol", 3),))
        assert cleared["Carol"] == accounts["Carol"]

    def test_does_not_mutate_input(self):
        accounts = _bob_owes_alice(10, 7)
        clear_debts(accounts, "Bob")
        assert accounts == _bob_owes_alice(10, 7)


class TestOrphanedLinks:
    def test_debt_to_reopened_creditor_is_still_paid(self):
        accounts = {
            "Alice": AccountState(),
            "Bob": AccountState(cash=10, debts=(DebtEntry("t1", "Alice", 7),)),
        }
        cleared = clear_debts(accounts, "Bob")
        assert cleared["Bob"] == AccountState(cash=3)
        assert cleared["Alice"] == AccountState(cash=7)
