"""
Pytest fixtures for the IOU ledger test suite.

Provides:
- Logging reset between tests, plus a JSON log capture fixture
- A temporary SQLite ledger database per test
"""

import json
import logging
from io import StringIO

import pytest

from iou_kernel.db.engine import (
    create_tables,
    get_session,
    init_engine_from_url,
    reset_engine,
)
from iou_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    reset_logging,
)

# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _clean_logging():
    """Reset logging state and LogContext between tests."""
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def captured_logs():
    """
    Capture iou_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs):
            reconcile(events)
            assert any(r["message"] == "account_reopened" for r in captured_logs())
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("iou_kernel")
    previous_level = root.level
    root.addHandler(handler)
    root.setLevel(logging.DEBUG)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database fixtures
# =============================================================================


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite:///{tmp_path / 'iou.db'}"


@pytest.fixture
def session(database_url):
    """A session on a fresh ledger database; rolled back after the test."""
    init_engine_from_url(database_url)
    create_tables()
    s = get_session()
    yield s
    s.rollback()
    s.close()
    reset_engine()
