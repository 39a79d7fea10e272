import logging
from typing import List, Optional

from clipvault.clipboard import ClipboardBackend
from clipvault.database.base import DEFAULT_HISTORY_LIMIT, ClipboardStore, StorageError
from clipvault.models.clipboard_entry import ClipboardEntry, DeleteResult

logger = logging.getLogger(__name__)


class HistoryService:
    """Commands the UI invokes against the stored history and the clipboard."""

    def __init__(self, store: ClipboardStore, clipboard: ClipboardBackend) -> None:
        self.store = store
        self.clipboard = clipboard

    def get_history(self, limit: Optional[int] = None) -> List[ClipboardEntry]:
        if limit is None:
            limit = DEFAULT_HISTORY_LIMIT
        return self.store.list_recent(limit)

    def delete_entry(self, entry_id: int) -> DeleteResult:
        try:
            self.store.delete_by_id(entry_id)
        except StorageError as exc:
            logger.error("Failed to delete entry %s: %s", entry_id, exc)
            return DeleteResult(
                success=False,
                message=f"Failed to delete entry from database: {exc}",
            )

        logger.info("Deleted clipboard entry with ID: %s", entry_id)
        return DeleteResult(
            success=True,
            message=f"Successfully deleted entry with ID {entry_id}",
        )

    def clear_all(self) -> DeleteResult:
        try:
            self.store.delete_all()
        except StorageError as exc:
            logger.error("Failed to clear clipboard history: %s", exc)
            return DeleteResult(
                success=False,
                message=f"Failed to clear entries from database: {exc}",
            )

        logger.info("Cleared all clipboard entries")
        return DeleteResult(success=True, message="All clipboard entries cleared")

    def copy_to_clipboard(self, text: str) -> None:
        """Put ``text`` on the system clipboard; raises ``ClipboardUnavailable``."""
        self.clipboard.write(text)
