"""
Pure domain layer.

Events, account states, and the replay reducer. Nothing here touches the
database, the clock, or any other I/O. All domain objects are immutable and
replay is deterministic up to link-token labels.
"""

from iou_kernel.domain.accounts import (
    AccountState,
    CreditEntry,
    DebtEntry,
    relabel_tokens,
)
from iou_kernel.domain.events import (
    Event,
    EventType,
    Open,
    Topup,
    Transfer,
    UnknownEvent,
    event_from_dict,
    event_to_dict,
    make_open,
    make_topup,
    make_transfer,
)
from iou_kernel.domain.reconciler import reconcile, replay
from iou_kernel.domain.tokens import (
    CounterTokenSource,
    TokenSource,
    UuidTokenSource,
    make_token_source,
)

__all__ = [
    # Events
    "Event",
    "EventType",
    "Open",
    "Topup",
    "Transfer",
    "UnknownEvent",
    "make_open",
    "make_topup",
    "make_transfer",
    "event_to_dict",
    "event_from_dict",
    # Accounts
    "AccountState",
    "DebtEntry",
    "CreditEntry",
    "relabel_tokens",
    # Tokens
    "TokenSource",
    "CounterTokenSource",
    "UuidTokenSource",
    "make_token_source",
    # Replay
    "reconcile",
    "replay",
]
