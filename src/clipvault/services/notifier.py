import logging
import threading
from typing import Any, Callable, Iterable, List

from clipvault.models.clipboard_entry import ClipboardEntry

logger = logging.getLogger(__name__)

HISTORY_EVENT = "clipboard-history"
UPDATE_EVENT = "clipboard-update"

Listener = Callable[[str, Any], None]


class Notifier:
    """Fire-and-forget fan-out of pipeline events to the UI layer.

    An emitted ``clipboard-update`` says a change was seen, not that it has
    been stored.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener(event_name, payload)``; returns an unsubscribe callable."""
        with self._lock:
            self._listeners.append(listener)

        def _unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event_name: str, payload: Any) -> None:
        with self._lock:
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(event_name, payload)
            except Exception:
                logger.exception("Listener failed on %s event", event_name)

    def emit_history(self, entries: Iterable[ClipboardEntry]) -> int:
        count = 0
        for entry in entries:
            self.emit(HISTORY_EVENT, entry.to_payload())
            count += 1
        return count


def log_listener(event_name: str, payload: Any) -> None:
    """Default listener that logs a short preview of each event."""
    if isinstance(payload, dict):
        preview = payload.get("content", "")[:60]
    else:
        preview = str(payload)[:60]
    logger.info("%s | preview=%r", event_name, preview)
