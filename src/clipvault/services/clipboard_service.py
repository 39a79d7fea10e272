"""Clipboard polling service for clipvault.

Samples the clipboard on a fixed interval from a background thread, gates
each sample through the ``DedupGuard`` and hands distinct changes to the
``BoundedRelay``.
"""

import logging
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from clipvault.clipboard import ClipboardBackend, ClipboardUnavailable
from clipvault.services.dedup_guard import DedupGuard
from clipvault.services.relay import BoundedRelay

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClipboardSample:
    """One successful clipboard read."""

    content: str
    observed_at: datetime

    @classmethod
    def now(cls, content: str) -> "ClipboardSample":
        return cls(content=content, observed_at=datetime.now(timezone.utc))


class ClipboardService:
    """Poller that feeds distinct clipboard changes into the relay."""

    def __init__(
        self,
        clipboard: ClipboardBackend,
        relay: BoundedRelay,
        guard: Optional[DedupGuard] = None,
        poll_interval: float = 1.0,
        auto_start: bool = False,
    ) -> None:
        self.clipboard = clipboard
        self.relay = relay
        self.guard = guard or DedupGuard()
        self.poll_interval = poll_interval
        self._lock = threading.RLock()
        self._stop_event = threading.Event()
        self._poll_thread: Optional[threading.Thread] = None
        self._is_running = False

        if auto_start:
            self.start()

    # ---------------------------------------------------------------------
    # Lifecycle management
    # ---------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._is_running

    def start(self) -> None:
        with self._lock:
            if self._is_running:
                logger.debug("ClipboardService already running")
                return

            logger.info(
                "Starting ClipboardService polling (interval=%ss, backend=%s)",
                self.poll_interval, self.clipboard.name)
            self._stop_event.clear()
            self._is_running = True
            self._poll_thread = threading.Thread(
                target=self._poll_loop, name="clipvault-poller", daemon=True)
            self._poll_thread.start()

    def stop(self, timeout: float = 2.0) -> None:
        with self._lock:
            if not self._is_running:
                return

            logger.info("Stopping ClipboardService polling")
            self._is_running = False
            self._stop_event.set()

        # join outside the lock
        if self._poll_thread is not None:
            self._poll_thread.join(timeout=timeout)
            self._poll_thread = None

    def run_forever(self) -> None:
        """Poll in the background and block until ``stop()`` or Ctrl+C."""
        try:
            if not self._is_running:
                self.start()

            while not self._stop_event.wait(timeout=self.poll_interval):
                continue
        except KeyboardInterrupt:
            logger.info("ClipboardService interrupted by user")
        finally:
            self.stop()

    # ---------------------------------------------------------------------
    # Polling
    # ---------------------------------------------------------------------
    def poll_once(self) -> Optional[ClipboardSample]:
        """Run a single tick.

        Returns the sample handed to the relay, or ``None`` when the read
        failed, nothing changed, or the relay refused the message.
        """
        try:
            sample = ClipboardSample.now(self.clipboard.read())
        except ClipboardUnavailable as exc:
            logger.debug("Clipboard unavailable, retrying next tick: %s", exc)
            return None
        except Exception:
            logger.debug("Clipboard read failed, retrying next tick", exc_info=True)
            return None

        if not self.guard.observe(sample.content):
            return None

        logger.debug("Clipboard changed (%d chars)", len(sample.content))
        if not self.relay.submit(sample.content, stop_event=self._stop_event):
            return None
        return sample

    def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            self.poll_once()
            self._stop_event.wait(self.poll_interval)

    # ---------------------------------------------------------------------
    # Context manager helpers
    # ---------------------------------------------------------------------
    def __enter__(self) -> "ClipboardService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
