"""SessionService -- which username the CLI is acting as."""

from __future__ import annotations

from iou_kernel.logging_config import get_logger
from iou_kernel.models.session_state import CURRENT_USER_KEY, SessionStateRecord
from iou_kernel.services.base import BaseService

logger = get_logger("services.session")


class SessionService(BaseService):
    def current_username(self) -> str | None:
        record = self.session.get(SessionStateRecord, CURRENT_USER_KEY)
        return record.value if record is not None else None

    def set_current(self, username: str) -> None:
        record = self.session.get(SessionStateRecord, CURRENT_USER_KEY)
        if record is None:
            record = SessionStateRecord(key=CURRENT_USER_KEY, value=username)
            self.session.add(record)
        else:
            record.value = username
        self.session.flush()
        logger.info("current_user_set", extra={"username": username})
