#!/usr/bin/env python3

import argparse
import logging
import signal
import sys
import time
from pathlib import Path
from typing import Callable, List, Optional

from clipvault.clipboard import ClipboardBackend, get_clipboard
from clipvault.config import RELAY_POLICIES, STORAGE_BACKENDS, PipelineConfig
from clipvault.database import ClipboardStore, create_store
from clipvault.services import (
    BoundedRelay,
    ClipboardService,
    DedupGuard,
    HistoryService,
    Notifier,
    PersistenceService,
)
from clipvault.services.notifier import Listener, log_listener

logger = logging.getLogger(__name__)


class ClipVaultApp:

    def __init__(
        self,
        config: Optional[PipelineConfig] = None,
        clipboard: Optional[ClipboardBackend] = None,
        store: Optional[ClipboardStore] = None,
        listeners: Optional[List[Listener]] = None,
    ):
        self.config = config or PipelineConfig()
        self.clipboard = clipboard or get_clipboard()
        self.store = store
        self.notifier = Notifier()
        for listener in listeners if listeners is not None else [log_listener]:
            self.notifier.subscribe(listener)

        self.guard = DedupGuard()
        self.relay = BoundedRelay(
            capacity=self.config.relay_capacity,
            policy=self.config.relay_policy,
        )
        self.clipboard_service: Optional[ClipboardService] = None
        self.persistence_service: Optional[PersistenceService] = None
        self.history: Optional[HistoryService] = None
        self.running = False

    def start(self):
        if self.running:
            return

        logger.info(
            "Starting clipvault - storage: %s, clipboard: %s",
            self.config.storage, self.clipboard.name)

        # Storage failures at startup are fatal.
        if self.store is None:
            self.store = create_store(self.config)
        self.history = HistoryService(self.store, self.clipboard)

        emitted = self.notifier.emit_history(
            self.store.list_recent(self.config.history_limit))
        logger.info("Loaded %d history entries", emitted)

        self.running = True

        self.persistence_service = PersistenceService(
            store=self.store,
            relay=self.relay,
            notifier=self.notifier,
            throttle=self.config.throttle,
            write_workers=self.config.write_workers,
            auto_start=True,
        )
        if not self.persistence_service.wait_until_ready(timeout=10.0):
            logger.error("Persistence service failed to start")
            self.stop()
            return

        self.clipboard_service = ClipboardService(
            clipboard=self.clipboard,
            relay=self.relay,
            guard=self.guard,
            poll_interval=self.config.poll_interval,
            auto_start=True,
        )

    def stop(self):
        if not self.running:
            return

        self.running = False

        if self.clipboard_service:
            self.clipboard_service.stop()

        if self.persistence_service:
            self.persistence_service.stop()

        self.relay.close()

        if self.store:
            self.store.close()

        logger.info("clipvault stopped")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        return self.notifier.subscribe(listener)

    def run_forever(self):
        self.start()

        try:
            while self.running:
                time.sleep(1.0)
        except KeyboardInterrupt:
            logger.info("Stopping...")
        finally:
            self.stop()

    def __enter__(self) -> "ClipVaultApp":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description="clipvault - clipboard history recorder"
    )

    parser.add_argument(
        "-i", "--poll-interval",
        type=float,
        default=None,
        help="Clipboard polling interval in seconds (default: 1.0)"
    )

    parser.add_argument(
        "-t", "--throttle",
        type=float,
        default=None,
        help="Delay after each persisted change in seconds (default: 0.2)"
    )

    parser.add_argument(
        "-c", "--capacity",
        type=int,
        default=None,
        help="Number of pending changes held between poller and writer (default: 10)"
    )

    parser.add_argument(
        "--policy",
        choices=RELAY_POLICIES,
        default=None,
        help="What to do when the pending queue is full (default: block)"
    )

    parser.add_argument(
        "-w", "--write-workers",
        type=int,
        default=None,
        help="Concurrent database writers (default: 1)"
    )

    parser.add_argument(
        "--storage",
        choices=STORAGE_BACKENDS,
        default=None,
        help="History backend (default: sqlite)"
    )

    parser.add_argument(
        "--db-path",
        type=Path,
        default=None,
        help="SQLite database file (default: ~/.clipvault/clipboard_history.db)"
    )

    parser.add_argument(
        "--history-limit",
        type=int,
        default=None,
        help="History entries announced at startup (default: 20)"
    )

    parser.add_argument(
        "--serve",
        action="store_true",
        help="Expose the history commands over HTTP"
    )

    parser.add_argument(
        "--host",
        type=str,
        default="127.0.0.1",
        help="HTTP bind address (default: 127.0.0.1)"
    )

    parser.add_argument(
        "-p", "--port",
        type=int,
        default=3001,
        help="HTTP port (default: 3001)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose debug logging"
    )

    return parser.parse_args(argv)


def build_config(args) -> PipelineConfig:
    return PipelineConfig.from_env().with_overrides(
        poll_interval=args.poll_interval,
        throttle=args.throttle,
        relay_capacity=args.capacity,
        relay_policy=args.policy,
        write_workers=args.write_workers,
        storage=args.storage,
        db_path=args.db_path,
        history_limit=args.history_limit,
    )


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(levelname)s: %(message)s',
    )

    try:
        config = build_config(args)
    except ValueError as e:
        logger.error("Invalid configuration: %s", e)
        sys.exit(2)

    app = ClipVaultApp(config=config)

    if args.serve:
        import uvicorn
        from clipvault.api import create_app

        try:
            app.start()
            uvicorn.run(create_app(app.history), host=args.host, port=args.port)
        except Exception as e:
            logger.error("Fatal error: %s", e)
            sys.exit(1)
        finally:
            app.stop()
        return

    def signal_handler(signum, frame):
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run_forever()
    except Exception as e:
        logger.error("Fatal error: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
