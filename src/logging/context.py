# src/logging/context.py — v1
"""Contextual logging: attach the current source and operation to log records."""

from __future__ import annotations

import contextvars
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

_source_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "source_id", default=None
)
_operation: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "operation", default=None
)


@dataclass
class LogContext:
    """Snapshot of current logging context."""

    source_id: str | None = None
    operation: str | None = None

    def as_dict(self) -> dict[str, Any]:
        """Return non-None fields as dict for JSON log injection."""
        return {k: v for k, v in self.__dict__.items() if v is not None}


def get_context() -> LogContext:
    """Snapshot current context variables."""
    return LogContext(source_id=_source_id.get(), operation=_operation.get())


def set_operation_context(operation: str, source_id: str | None = None) -> None:
    """Set the operation (sort, merge, combine...) and the record set it runs on."""
    _operation.set(operation)
    _source_id.set(source_id)


def clear_context() -> None:
    """Reset all context variables."""
    _source_id.set(None)
    _operation.set(None)


@contextmanager
def operation_context(operation: str, source_id: str | None = None) -> Iterator[LogContext]:
    """Scope log context to a block, restoring the previous values afterwards."""
    op_token = _operation.set(operation)
    src_token = _source_id.set(source_id)
    try:
        yield get_context()
    finally:
        _operation.reset(op_token)
        _source_id.reset(src_token)
