"""Imperative shell: services that read and append the stored ledger."""

from iou_kernel.services.iou_service import AccountReport, IouService
from iou_kernel.services.ledger_service import LedgerService
from iou_kernel.services.session_service import SessionService

__all__ = ["AccountReport", "IouService", "LedgerService", "SessionService"]
