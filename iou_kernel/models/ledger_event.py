"""
Module: iou_kernel.models.ledger_event
Responsibility: ORM persistence for ledger events, one row per event, in
    append order.
Architecture position: Kernel > Models. May import from db/base.py only.

Invariants enforced:
    - Rows are immutable once flushed (db/immutability.py listeners).
    - ``seq`` is assigned by the database and strictly increases, so
      ``ORDER BY seq`` is the replay order.
    - The payload is the event's stored dict form (see domain/events.py);
      link tokens are never stored.
"""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import JSON, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from iou_kernel.db.base import Base, UUIDString


class LedgerEventRecord(Base):
    """One appended ledger event."""

    __tablename__ = "ledger_events"

    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    event_id: Mapped[UUID] = mapped_column(
        UUIDString(), nullable=False, unique=True, default=uuid4
    )

    # Wire tag: "open", "topup", "txn", or a tag from a newer writer
    event_type: Mapped[str] = mapped_column(String(32), nullable=False)

    payload: Mapped[dict] = mapped_column(JSON, nullable=False)

    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<LedgerEventRecord seq={self.seq} type={self.event_type}>"
