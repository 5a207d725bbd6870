"""
Configuration schema (``iou_config.schema``).

A single frozen dataclass; every field has a default so an absent or empty
configuration file is valid.
"""

from __future__ import annotations

from dataclasses import dataclass

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
TOKEN_STRATEGIES = ("counter", "uuid")


@dataclass(frozen=True)
class IouConfig:
    """
    Runtime configuration.

    Attributes:
        database_url: SQLAlchemy URL of the ledger database.
        log_level: Level for the ``iou_kernel`` logger hierarchy.
        token_strategy: How replay mints link tokens (``counter`` or ``uuid``).
        verify_invariants: Check ledger invariants after every replayed event.
    """

    database_url: str = "sqlite:///iou.db"
    log_level: str = "WARNING"
    token_strategy: str = "counter"
    verify_invariants: bool = False
