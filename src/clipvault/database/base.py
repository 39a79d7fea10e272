from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional

from clipvault.models.clipboard_entry import ClipboardEntry, ContentType

DEFAULT_HISTORY_LIMIT = 20


class StorageError(Exception):
    """Raised when the history store cannot be read or written."""


def now_timestamp() -> str:
    """Current UTC time as RFC3339 with a fixed width, so strings sort by time."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


class ClipboardStore(ABC):
    """Durable, ordered clipboard history.

    Entries are ordered most-recent-first by timestamp. Implementations must
    make ``insert_if_not_duplicate`` a single atomic unit: the read of the
    latest entry and the insert may not interleave with another writer.
    """

    @abstractmethod
    def insert_if_not_duplicate(
        self,
        content: str,
        content_type: ContentType,
        timestamp: Optional[str] = None,
    ) -> Optional[int]:
        """Insert ``content`` unless it equals the most recent stored content.

        Returns:
            The new entry id, or ``None`` when the insert was skipped.
        """

    @abstractmethod
    def most_recent_content(self) -> Optional[str]:
        pass

    @abstractmethod
    def list_recent(self, limit: int = DEFAULT_HISTORY_LIMIT) -> List[ClipboardEntry]:
        pass

    @abstractmethod
    def delete_by_id(self, entry_id: int) -> bool:
        """Delete one entry. Succeeds whether or not the id existed."""

    @abstractmethod
    def delete_all(self) -> bool:
        pass

    def close(self) -> None:
        pass

    def __enter__(self) -> "ClipboardStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
