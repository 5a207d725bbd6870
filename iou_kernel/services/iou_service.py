"""
IouService -- the commands a participant can issue.

Responsibility:
    Orchestrates session lookup, event construction, ledger append, and
    replay for the login / topup / pay / balance commands, returning report
    lines for the caller to print.

Architecture position:
    Kernel > Services -- imperative shell around the pure domain. Flushes
    within the caller's transaction; never commits.

Failure modes:
    - NotLoggedInError: topup/pay/balance with no current user.
    - UnknownCounterpartyError: pay to a username with no account.
    - ValidationError: bad amount, or paying oneself.
    - AccountNotFoundError: stored ledger references an un-opened account.
    In every failure case nothing is appended.
"""

from __future__ import annotations

from dataclasses import dataclass

from iou_kernel.domain.accounts import AccountState, require_account
from iou_kernel.domain.events import make_open, make_topup, make_transfer
from iou_kernel.domain.reconciler import reconcile
from iou_kernel.domain.tokens import make_token_source
from iou_kernel.exceptions import NotLoggedInError, UnknownCounterpartyError
from iou_kernel.logging_config import LogContext, get_logger
from iou_kernel.reporting import greeting, render_account, transferred_line
from iou_kernel.services.base import BaseService
from iou_kernel.services.ledger_service import LedgerService
from iou_kernel.services.session_service import SessionService

logger = get_logger("services.iou")


@dataclass(frozen=True)
class AccountReport:
    """What a command has to say about the current account."""

    username: str
    state: AccountState
    lines: tuple[str, ...]
    transferred: int = 0


class IouService(BaseService):
    """
    Login, topup, pay, and balance over the stored ledger.

    Every read replays the whole ledger; there is no cached state.
    """

    def __init__(
        self,
        session,
        token_strategy: str = "counter",
        verify_invariants: bool = False,
    ):
        super().__init__(session)
        self.ledger = LedgerService(session)
        self.sessions = SessionService(session)
        self._token_strategy = token_strategy
        self._verify = verify_invariants

    def accounts(self) -> dict[str, AccountState]:
        """Replay the stored ledger."""
        return reconcile(
            self.ledger.load_events(),
            token_source=make_token_source(self._token_strategy),
            verify=self._verify,
        )

    def login(self, username: str) -> AccountReport:
        """Act as `username`, opening an account for it on first login."""
        with LogContext.bind(command="login", username=username):
            if username not in self.accounts():
                self.ledger.append(make_open(username))
                logger.info("account_opened", extra={"username": username})
            self.sessions.set_current(username)
            state = self.accounts()[username]
            return AccountReport(
                username=username,
                state=state,
                lines=(greeting(username), *render_account(state)),
            )

    def topup(self, amount: int) -> AccountReport:
        current = self._require_current()
        with LogContext.bind(command="topup", username=current):
            self.ledger.append(make_topup(current, amount))
            state = self.accounts()[current]
            return AccountReport(
                username=current, state=state, lines=tuple(render_account(state))
            )

    def pay(self, counterparty: str, amount: int) -> AccountReport:
        """
        Pay `amount` to `counterparty`, in cash where possible and as debt
        for the rest.
        """
        current = self._require_current()
        with LogContext.bind(command="pay", username=current):
            before = self.accounts()
            if counterparty not in before:
                raise UnknownCounterpartyError(counterparty)
            self.ledger.append(make_transfer(current, counterparty, amount))
            state = self.accounts()[current]

            transferred = abs(require_account(before, current).cash - state.cash)
            lines = [transferred_line(transferred, counterparty)] if transferred else []
            lines.extend(render_account(state))
            return AccountReport(
                username=current,
                state=state,
                lines=tuple(lines),
                transferred=transferred,
            )

    def balance(self) -> AccountReport:
        current = self._require_current()
        state = require_account(self.accounts(), current)
        return AccountReport(
            username=current, state=state, lines=tuple(render_account(state))
        )

    def _require_current(self) -> str:
        current = self.sessions.current_username()
        if current is None:
            logger.info("command_rejected_not_logged_in")
            raise NotLoggedInError()
        return current
