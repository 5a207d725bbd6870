"""
Structured logging for the IOU kernel.

Every record under the ``iou_kernel`` logger hierarchy is written as one JSON
object per line. Messages are snake_case event names (``event_appended``,
``debt_settled``, ``account_reopened``); details travel as ``extra`` fields.

Context fields are attached to every record emitted while they are bound:

    correlation_id   one CLI invocation                  iou_cli.main
    command          login / topup / pay / balance / ...  iou_cli.main, IouService
    username         the account a command acts as       IouService
    event_seq        1-based position of the event        domain.reconciler.replay
                     being replayed

A record's own ``extra`` fields win over context fields of the same name.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, is_dataclass
from datetime import UTC, datetime
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterator, Mapping

ROOT_LOGGER = "iou_kernel"

CONTEXT_FIELDS = ("correlation_id", "command", "username", "event_seq")

_EMPTY: Mapping[str, Any] = MappingProxyType({})
_context: ContextVar[Mapping[str, Any]] = ContextVar("iou_log_context", default=_EMPTY)


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


def _merged(fields: Mapping[str, Any]) -> Mapping[str, Any]:
    unknown = set(fields) - set(CONTEXT_FIELDS)
    if unknown:
        raise TypeError(f"Unknown log context field: {sorted(unknown)[0]}")
    updates = {k: v for k, v in fields.items() if v is not None}
    return MappingProxyType({**_context.get(), **updates})


class LogContext:
    """
    The context fields bound in the current execution context.

    Values are held in a single ContextVar as a read-only mapping, so a
    binding made inside a command never leaks into the next one. None
    values are ignored; unknown field names raise TypeError.
    """

    @staticmethod
    def set(**fields: Any) -> None:
        _context.set(_merged(fields))

    @staticmethod
    def get_all() -> dict[str, Any]:
        return dict(_context.get())

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)

    @staticmethod
    @contextmanager
    def bind(**fields: Any) -> Iterator[None]:
        """Bind `fields` for the duration of the block, then restore."""
        token = _context.set(_merged(fields))
        try:
            yield
        finally:
            _context.reset(token)


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_RESERVED: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # IouKernelError subclasses carry their details as public attributes
    fields.update(
        (f"exc_{key}", val) for key, val in vars(exc).items() if not key.startswith("_")
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: base fields, context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }
        payload.update(
            (key, val) for key, val in vars(record).items() if key not in _RESERVED
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_jsonable)


# ---------------------------------------------------------------------------
# Logger factory and initialization
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Logger ``iou_kernel.<name>``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


_configured = False
_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Route the ``iou_kernel`` hierarchy to one JSON handler, stderr by default.

    Only the first call in a process has any effect. `level` may be a
    number or a level name such as ``"WARNING"``.
    """
    global _configured
    with _lock:
        if _configured:
            return
        _configured = True

        out = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
        out.setFormatter(StructuredFormatter())

        root = logging.getLogger(ROOT_LOGGER)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(out)


def reset_logging() -> None:
    """Undo configure_logging. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
        root = logging.getLogger(ROOT_LOGGER)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
        root.propagate = True
