"""ORM models. Importing this package registers every table on Base.metadata."""

from iou_kernel.models.ledger_event import LedgerEventRecord
from iou_kernel.models.session_state import SessionStateRecord

__all__ = ["LedgerEventRecord", "SessionStateRecord"]
