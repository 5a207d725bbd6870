"""
BaseService -- abstract base for all kernel services.

Responsibility:
    Provides the common constructor and session-handling contract. Every
    service receives a SQLAlchemy ``Session`` and uses ``session.flush()``,
    never ``session.commit()``; the caller (CLI or test harness) owns the
    transaction.
"""

from abc import ABC

from sqlalchemy.orm import Session


class BaseService(ABC):
    """
    Abstract base class for all kernel services.

    Guarantees:
        - The service never commits or rolls back; the caller controls
          transaction boundaries.
    """

    def __init__(self, session: Session):
        self.session = session
