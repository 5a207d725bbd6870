"""
LedgerService -- append-only access to the stored event sequence.

Responsibility:
    Appends validated events as LedgerEventRecord rows and loads the whole
    sequence back, in append order, for replay.

Invariants enforced:
    - Only events built by the validating factories are appended;
      UnknownEvent cannot be written.
    - Rows are never updated or deleted (ORM listeners).

Failure modes:
    - UnsupportedEventError when appending an UnknownEvent.
    - ValidationError on load when a stored known-kind record is malformed.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from iou_kernel.domain.events import Event, event_from_dict, event_to_dict
from iou_kernel.logging_config import get_logger
from iou_kernel.models.ledger_event import LedgerEventRecord
from iou_kernel.services.base import BaseService

logger = get_logger("services.ledger")


class LedgerService(BaseService):
    """Append and load ledger events."""

    def append(self, event: Event) -> int:
        """Append `event` and return its sequence number."""
        payload = event_to_dict(event)
        record = LedgerEventRecord(event_type=payload["type"], payload=payload)
        self.session.add(record)
        self.session.flush()
        logger.info(
            "event_appended",
            extra={"seq": record.seq, "event_type": record.event_type},
        )
        return record.seq

    def records(self) -> list[LedgerEventRecord]:
        stmt = select(LedgerEventRecord).order_by(LedgerEventRecord.seq)
        return list(self.session.scalars(stmt))

    def load_events(self) -> list[Event]:
        """Every stored event, oldest first."""
        return [event_from_dict(record.payload) for record in self.records()]

    def export_document(self, current: str | None = None) -> dict[str, Any]:
        """
        The ledger as a plain document:
        ``{"ledger": [<stored dicts>], "current": <username or None>}``.
        """
        return {
            "ledger": [dict(record.payload) for record in self.records()],
            "current": current,
        }
