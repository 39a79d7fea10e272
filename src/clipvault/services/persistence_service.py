"""Persistence worker for clipvault.

Drains the ``BoundedRelay`` on an asyncio loop hosted in its own thread.
For each message it classifies the content, dispatches the database write
to a thread pool without awaiting it, notifies listeners straight away and
then throttles before taking the next message.
"""

import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Set

from clipvault.database.base import ClipboardStore, StorageError, now_timestamp
from clipvault.models.clipboard_entry import ContentType
from clipvault.services.notifier import UPDATE_EVENT, Notifier
from clipvault.services.relay import BoundedRelay
from clipvault.utils.classifier import classify

logger = logging.getLogger(__name__)


class PersistenceService:

    def __init__(
        self,
        store: ClipboardStore,
        relay: BoundedRelay,
        notifier: Notifier,
        throttle: float = 0.2,
        write_workers: int = 1,
        receive_timeout: float = 0.1,
        auto_start: bool = False,
    ) -> None:
        self.store = store
        self.relay = relay
        self.notifier = notifier
        self.throttle = throttle
        self.write_workers = write_workers
        self.receive_timeout = receive_timeout

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._executor: Optional[ThreadPoolExecutor] = None
        self._wakeup: Optional[asyncio.Event] = None
        self._writes: Set[asyncio.Future] = set()
        self._running = False
        self._ready = threading.Event()
        self._stop_event = threading.Event()
        self._count_lock = threading.Lock()
        self._inflight = 0

        if auto_start:
            self.start()

    # ---------------------------------------------------------------------
    # Lifecycle management
    # ---------------------------------------------------------------------
    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        if self._running:
            return

        logger.info(
            "Starting PersistenceService (throttle=%ss, write_workers=%d)",
            self.throttle, self.write_workers)
        self._running = True
        self._ready.clear()
        self._stop_event.clear()
        self._executor = ThreadPoolExecutor(
            max_workers=self.write_workers, thread_name_prefix="clipvault-write")
        self._thread = threading.Thread(
            target=self._run_worker_loop, name="clipvault-persistence", daemon=True)
        self._thread.start()

    def stop(self, timeout: float = 5.0) -> None:
        """Stop receiving, let in-flight writes finish and release the pool."""
        if self._thread is None:
            return

        logger.info("Stopping PersistenceService")
        self._running = False
        self._stop_event.set()

        loop = self._loop
        if loop is not None and self._wakeup is not None:
            try:
                loop.call_soon_threadsafe(self._wakeup.set)
            except RuntimeError:
                pass  # loop already closed

        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

        abandoned = self.relay.drain()
        if abandoned:
            logger.warning("PersistenceService stopped, discarded %d unprocessed changes", abandoned)

        self._ready.clear()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._ready.wait(timeout)

    def pending_writes(self) -> int:
        """Messages taken from the relay whose write has not finished yet."""
        with self._count_lock:
            return self._inflight

    def wait_idle(self, timeout: float = 5.0) -> bool:
        """Block until every accepted change has been handled and its write finished."""
        return self.relay.join(timeout)

    # ---------------------------------------------------------------------
    # Worker loop
    # ---------------------------------------------------------------------
    def _run_worker_loop(self) -> None:
        try:
            self._loop = asyncio.new_event_loop()
            asyncio.set_event_loop(self._loop)
            self._loop.run_until_complete(self._async_worker_main())
        except Exception:
            logger.exception("Persistence loop error")
        finally:
            if self._loop:
                self._loop.run_until_complete(self._loop.shutdown_default_executor())
                self._loop.close()
                self._loop = None
            self._running = False

    async def _async_worker_main(self) -> None:
        loop = asyncio.get_running_loop()
        self._wakeup = asyncio.Event()
        self._ready.set()

        while not self._stop_event.is_set():
            content = await loop.run_in_executor(None, self._receive)
            if content is None:
                if self.relay.closed and self.relay.qsize() == 0:
                    logger.debug("Relay closed, persistence loop exiting")
                    break
                continue

            await self._handle(content)
            await self._throttle()

        if self._writes:
            logger.debug("Waiting for %d in-flight writes", len(self._writes))
            await asyncio.wait(list(self._writes))

    def _receive(self) -> Optional[str]:
        content = self.relay.get(timeout=self.receive_timeout)
        if content is not None:
            with self._count_lock:
                self._inflight += 1
        return content

    async def _handle(self, content: str) -> None:
        """Process one relay message: dispatch the write, then notify."""
        loop = asyncio.get_running_loop()
        content_type = classify(content)
        timestamp = now_timestamp()

        try:
            future = loop.run_in_executor(
                self._executor, self._write, content, content_type, timestamp)
        except RuntimeError:
            # pool already shut down
            logger.error("Write pool unavailable, change not persisted")
            self._write_done()
        else:
            self._writes.add(future)
            future.add_done_callback(self._writes.discard)

        self.notifier.emit(UPDATE_EVENT, content)

    async def _throttle(self) -> None:
        if self.throttle <= 0 or self._wakeup is None:
            return
        try:
            await asyncio.wait_for(self._wakeup.wait(), timeout=self.throttle)
        except asyncio.TimeoutError:
            pass

    # ---------------------------------------------------------------------
    # Write units (pool threads)
    # ---------------------------------------------------------------------
    def _write(self, content: str, content_type: ContentType, timestamp: str) -> Optional[int]:
        try:
            entry_id = self.store.insert_if_not_duplicate(content, content_type, timestamp)
            if entry_id is None:
                logger.debug("Change matches latest stored entry, not saved")
            else:
                logger.debug("Saved entry %d (%s)", entry_id, content_type.value)
            return entry_id
        except StorageError as exc:
            logger.error("Failed to save clipboard entry to database: %s", exc)
        except Exception:
            logger.exception("Unexpected error while saving clipboard entry")
        finally:
            self._write_done()
        return None

    def _write_done(self) -> None:
        with self._count_lock:
            self._inflight -= 1
        self.relay.task_done()

    def __enter__(self) -> "PersistenceService":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()
