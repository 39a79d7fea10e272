import threading


class DedupGuard:
    """Sole owner of the last-seen clipboard content.

    ``observe`` is a compare-and-store under a lock; nothing else reads or
    writes the state directly.
    """

    def __init__(self, initial: str = "") -> None:
        self._lock = threading.Lock()
        self._last_seen = initial

    def observe(self, candidate: str) -> bool:
        """Return ``True`` and remember ``candidate`` if it differs from the last one."""
        with self._lock:
            if candidate == self._last_seen:
                return False
            self._last_seen = candidate
            return True

    def reset(self, value: str = "") -> None:
        with self._lock:
            self._last_seen = value

    @property
    def last_seen(self) -> str:
        with self._lock:
            return self._last_seen
