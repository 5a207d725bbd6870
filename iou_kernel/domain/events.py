"""
Events -- the immutable records of the IOU ledger.

Responsibility:
    Defines the closed set of event kinds (Open, Topup, Transfer) and their
    validated factory functions, plus conversion to and from the stored
    dict form.

Architecture position:
    Kernel > Domain -- pure, zero I/O. Factories never see ledger state.

Invariants enforced:
    - An invalid event never exists: the factories raise ValidationError
      before anything is constructed.
    - Amounts are integers of 1 or more.

Failure modes:
    - ValidationError from make_topup / make_transfer.
    - UnsupportedEventError when serializing an UnknownEvent.

Stored form:
    {"type": "open",  "username": "Bob", "amount": 0}
    {"type": "topup", "username": "Bob", "amount": 10}
    {"type": "txn",   "from": "Bob", "to": "Alice", "amount": 20}
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from iou_kernel.exceptions import UnsupportedEventError, ValidationError


class EventType(str, Enum):
    """Wire tags of the known event kinds."""

    OPEN = "open"
    TOPUP = "topup"
    TRANSFER = "txn"


@dataclass(frozen=True)
class Open:
    """Create (or destructively reset) an account."""

    username: str

    @property
    def event_type(self) -> EventType:
        return EventType.OPEN


@dataclass(frozen=True)
class Topup:
    """Add cash to an account from outside the system."""

    username: str
    amount: int

    @property
    def event_type(self) -> EventType:
        return EventType.TOPUP


@dataclass(frozen=True)
class Transfer:
    """Pay `amount` from one account to another, in cash or as debt."""

    sender: str
    recipient: str
    amount: int

    @property
    def event_type(self) -> EventType:
        return EventType.TRANSFER


@dataclass(frozen=True)
class UnknownEvent:
    """
    A stored record whose type this kernel does not recognize.

    Kept so that ledgers written by newer versions still replay; the
    reducer skips it.
    """

    event_type: str
    payload: Mapping[str, Any] = field(default_factory=dict)


Event = Open | Topup | Transfer | UnknownEvent


# ---------------------------------------------------------------------------
# Validated factories
# ---------------------------------------------------------------------------


def _check_amount(amount: Any) -> int:
    if amount is None:
        raise ValidationError("amount must be present", field="amount")
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError("amount must be an integer", field="amount")
    if amount <= 0:
        raise ValidationError("amount must be 1 or more", field="amount")
    return amount


def make_open(username: str) -> Open:
    """Build an Open event."""
    return Open(username=username)


def make_topup(username: str | None, amount: int | None) -> Topup:
    """
    Build a Topup event.

    Raises:
        ValidationError: amount missing, amount < 1, or username missing.
    """
    amount = _check_amount(amount)
    if username is None:
        raise ValidationError("username must be present", field="username")
    return Topup(username=username, amount=amount)


def make_transfer(sender: str, recipient: str, amount: int | None) -> Transfer:
    """
    Build a Transfer event.

    Raises:
        ValidationError: sender == recipient, amount missing, or amount < 1.
    """
    if sender == recipient:
        raise ValidationError("from and to cannot be the same", field="to")
    amount = _check_amount(amount)
    return Transfer(sender=sender, recipient=recipient, amount=amount)


# ---------------------------------------------------------------------------
# Stored form
# ---------------------------------------------------------------------------


def event_to_dict(event: Event) -> dict[str, Any]:
    """Convert an event to its stored dict form."""
    match event:
        case Open(username=username):
            return {"type": EventType.OPEN.value, "username": username, "amount": 0}
        case Topup(username=username, amount=amount):
            return {"type": EventType.TOPUP.value, "username": username, "amount": amount}
        case Transfer(sender=sender, recipient=recipient, amount=amount):
            return {
                "type": EventType.TRANSFER.value,
                "from": sender,
                "to": recipient,
                "amount": amount,
            }
        case UnknownEvent(event_type=event_type):
            raise UnsupportedEventError(event_type)
    raise UnsupportedEventError(type(event).__name__)


def event_from_dict(data: Mapping[str, Any]) -> Event:
    """
    Rebuild an event from its stored dict form.

    Known kinds go through the validating factories, so a tampered record
    fails here rather than during replay. Unknown kinds become UnknownEvent.
    """
    event_type = data.get("type")
    if event_type == EventType.OPEN.value:
        return make_open(data.get("username"))
    if event_type == EventType.TOPUP.value:
        return make_topup(data.get("username"), data.get("amount"))
    if event_type == EventType.TRANSFER.value:
        return make_transfer(data.get("from"), data.get("to"), data.get("amount"))
    payload = {k: v for k, v in data.items() if k != "type"}
    return UnknownEvent(event_type=str(event_type), payload=payload)
