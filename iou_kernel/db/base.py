"""
Module: iou_kernel.db.base
Responsibility: Declarative base for the ORM models and the portable UUID
    column type.
Architecture position: Kernel > DB. Lowest-level import target within the
    kernel; MUST NOT import from models/, services/, or domain/.

Invariants enforced:
    - datetime columns are always timezone-aware.
    - UUIDs are stored as String(36) so SQLite and PostgreSQL behave alike.
"""

from datetime import datetime
from typing import ClassVar
from uuid import UUID as PyUUID

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """
    UUID type stored as String(36) for cross-database portability.

    Guarantees:
        - process_bind_param: UUID -> str on INSERT/UPDATE.
        - process_result_value: str -> UUID on SELECT.
    """

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is not None:
            return str(value)
        return None

    def process_result_value(self, value, dialect):
        if value is not None:
            return PyUUID(value)
        return None


class Base(DeclarativeBase):
    """Declarative base for all IOU ORM models."""

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=True),
        PyUUID: UUIDString(),
    }
