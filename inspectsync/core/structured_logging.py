"""JSON log lines for the sync core.

Each line carries the event name, a UTC timestamp and, inside a store's
`session_context`, that store's session ID. Fields passed as None are left out
so optional attributes (entity ids, status codes) only appear when known.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import Any

from inspectsync.core.sync_context import get_session_id


def log_json(
    logger: logging.Logger,
    level: int,
    event: str,
    **fields: Any,
) -> None:
    if not logger.isEnabledFor(level):
        return

    payload: dict[str, Any] = {
        "timestamp": datetime.now(UTC).isoformat(),
        "event": event,
        "session_id": get_session_id(),
    }
    payload.update(fields)
    logger.log(
        level,
        json.dumps({k: v for k, v in payload.items() if v is not None}, default=str),
    )
