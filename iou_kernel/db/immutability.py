"""
ORM-Level Immutability Enforcement for the stored ledger.

The ledger is append-only: once a LedgerEventRecord is flushed it may not be
updated or deleted. SQLAlchemy fires mapper events before UPDATE/DELETE SQL
is emitted; the listeners here raise ImmutabilityViolationError and the
transaction is aborted before the database is touched.

    session.flush()
         |
         v
    [before_update] --> _check_ledger_event_update() --> ImmutabilityViolationError
    [before_delete] --> _check_ledger_event_delete() --> ImmutabilityViolationError

Bulk ``UPDATE``/``DELETE`` statements bypass mapper events and are not
covered.
"""

from sqlalchemy import event

from iou_kernel.exceptions import ImmutabilityViolationError
from iou_kernel.logging_config import get_logger

logger = get_logger("db.immutability")


def _check_ledger_event_update(mapper, connection, target):
    logger.error(
        "immutability_violation_blocked",
        extra={"entity_type": "LedgerEvent", "seq": target.seq, "operation": "UPDATE"},
    )
    raise ImmutabilityViolationError(
        entity_type="LedgerEvent",
        entity_id=str(target.seq),
        reason="Ledger events are append-only and cannot be modified",
    )


def _check_ledger_event_delete(mapper, connection, target):
    logger.error(
        "immutability_violation_blocked",
        extra={"entity_type": "LedgerEvent", "seq": target.seq, "operation": "DELETE"},
    )
    raise ImmutabilityViolationError(
        entity_type="LedgerEvent",
        entity_id=str(target.seq),
        reason="Ledger events are append-only and cannot be deleted",
    )


def register_immutability_listeners() -> None:
    """Register the ledger immutability listeners (idempotent)."""
    from iou_kernel.models.ledger_event import LedgerEventRecord

    for name, fn in (
        ("before_update", _check_ledger_event_update),
        ("before_delete", _check_ledger_event_delete),
    ):
        if not event.contains(LedgerEventRecord, name, fn):
            event.listen(LedgerEventRecord, name, fn)


def unregister_immutability_listeners() -> None:
    """Remove the listeners. FOR TESTING ONLY."""
    from iou_kernel.models.ledger_event import LedgerEventRecord

    for name, fn in (
        ("before_update", _check_ledger_event_update),
        ("before_delete", _check_ledger_event_delete),
    ):
        if event.contains(LedgerEventRecord, name, fn):
            event.remove(LedgerEventRecord, name, fn)
