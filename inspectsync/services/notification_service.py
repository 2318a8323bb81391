"""Change notifications for the UI layer."""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from inspectsync.core.structured_logging import log_json
from inspectsync.models.enums import ChangeKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoreEvent:
    """A single change in the inspection store.

    `entity_id` is the affected result id, or None for hierarchy events.
    """

    kind: ChangeKind
    entity_id: int | None = None
    value: Any = None


Listener = Callable[[StoreEvent], None]


class ChangeNotifier:
    """Fan out store events to subscribed listeners."""

    def __init__(self) -> None:
        self._listeners: list[Listener] = []
        self._lock = threading.Lock()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener and return a callable that removes it."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: StoreEvent) -> None:
        """Deliver an event to every listener.

        A listener that raises is logged and does not stop delivery to the
        remaining listeners.
        """
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event)
            except Exception as exc:
                log_json(
                    logger,
                    logging.ERROR,
                    "listener_error",
                    kind=event.kind.value,
                    entity_id=event.entity_id,
                    error=str(exc),
                    exception=exc.__class__.__name__,
                )
