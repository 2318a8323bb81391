"""Sync session context utilities.

Each InspectionStore owns a session ID. Bootstrap runs inside
`session_context` so every log line it emits can be traced back to its store.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from uuid import uuid4

_session_id_var: ContextVar[str | None] = ContextVar("session_id", default=None)


def get_session_id() -> str | None:
    """Get the current store session ID (if any)."""

    return _session_id_var.get()


def new_session_id() -> str:
    """Generate a short session ID for a new store."""

    return uuid4().hex[:12]


@contextmanager
def session_context(session_id: str | None):
    """Bind `session_id` for the duration of the block, restoring the outer one."""

    token = _session_id_var.set(session_id)
    try:
        yield
    finally:
        _session_id_var.reset(token)
