"""
Module: iou_kernel.models.session_state
Responsibility: Key/value rows for CLI session state, currently only the
    logged-in username.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from iou_kernel.db.base import Base

CURRENT_USER_KEY = "current"


class SessionStateRecord(Base):
    __tablename__ = "session_state"

    key: Mapped[str] = mapped_column(String(64), primary_key=True)
    value: Mapped[str | None] = mapped_column(String(255), nullable=True)
