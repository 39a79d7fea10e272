"""Fixed-capacity handoff between the clipboard poller and the persistence worker."""

import logging
import threading
import time
from collections import deque
from typing import Deque, Optional

from clipvault.config import RELAY_POLICIES

logger = logging.getLogger(__name__)

# Upper bound on one condition wait, so stop events are noticed promptly.
_WAIT_SLICE = 0.1


class BoundedRelay:
    """FIFO channel with a fixed number of in-flight messages.

    With the ``block`` policy a full relay makes ``submit`` wait for the
    consumer; with ``drop`` the new message is rejected and logged.
    """

    def __init__(self, capacity: int = 10, policy: str = "block") -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if policy not in RELAY_POLICIES:
            raise ValueError(f"policy must be one of {RELAY_POLICIES}, got {policy!r}")

        self.capacity = capacity
        self.policy = policy
        self._items: Deque[str] = deque()
        self._cond = threading.Condition()
        self._closed = False
        self._unfinished = 0
        self.dropped = 0

    @property
    def closed(self) -> bool:
        return self._closed

    def qsize(self) -> int:
        with self._cond:
            return len(self._items)

    def full(self) -> bool:
        with self._cond:
            return len(self._items) >= self.capacity

    def submit(
        self,
        content: str,
        stop_event: Optional[threading.Event] = None,
        timeout: Optional[float] = None,
    ) -> bool:
        """Enqueue ``content``.

        Returns ``False`` when the message was not accepted: dropped by the
        ``drop`` policy, ``timeout`` elapsed, ``stop_event`` was set, or the
        relay is closed.
        """
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._cond:
            while len(self._items) >= self.capacity and not self._closed:
                if self.policy == "drop":
                    self.dropped += 1
                    logger.warning(
                        "Relay full (%d pending), dropping clipboard change", len(self._items))
                    return False
                if stop_event is not None and stop_event.is_set():
                    return False

                wait_for = _WAIT_SLICE
                if deadline is not None:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        return False
                    wait_for = min(wait_for, remaining)
                self._cond.wait(wait_for)

            if self._closed:
                return False

            self._items.append(content)
            self._unfinished += 1
            self._cond.notify_all()
            return True

    def get(self, timeout: Optional[float] = None) -> Optional[str]:
        """Take the oldest message, or ``None`` on timeout or once closed and empty."""
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._cond:
            while not self._items:
                if self._closed:
                    return None
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return None
                self._cond.wait(remaining)

            content = self._items.popleft()
            self._cond.notify_all()
            return content

    def drain(self) -> int:
        """Discard everything pending and return how many messages were dropped."""
        with self._cond:
            count = len(self._items)
            self._items.clear()
            self._unfinished -= count
            self._cond.notify_all()
            return count

    def task_done(self) -> None:
        """Mark one message taken with ``get`` as fully processed."""
        with self._cond:
            if self._unfinished <= 0:
                raise ValueError("task_done() called too many times")
            self._unfinished -= 1
            if self._unfinished == 0:
                self._cond.notify_all()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait until every accepted message has been marked done."""
        deadline = None if timeout is None else time.monotonic() + timeout

        with self._cond:
            while self._unfinished:
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    return False
                self._cond.wait(remaining)
            return True

    def close(self) -> None:
        with self._cond:
            self._closed = True
            self._cond.notify_all()

    def __repr__(self) -> str:
        return (
            f"<BoundedRelay capacity={self.capacity} policy={self.policy!r} "
            f"pending={self.qsize()}>"
        )
