"""Service layer for clipvault."""

from .clipboard_service import ClipboardSample, ClipboardService
from .dedup_guard import DedupGuard
from .history_service import HistoryService
from .notifier import HISTORY_EVENT, UPDATE_EVENT, Notifier
from .persistence_service import PersistenceService
from .relay import BoundedRelay

__all__ = [
    "BoundedRelay",
    "ClipboardSample",
    "ClipboardService",
    "DedupGuard",
    "HISTORY_EVENT",
    "HistoryService",
    "Notifier",
    "PersistenceService",
    "UPDATE_EVENT",
]
