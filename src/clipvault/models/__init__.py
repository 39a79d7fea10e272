from clipvault.models.clipboard_entry import ClipboardEntry, ContentType, DeleteResult

__all__ = ["ClipboardEntry", "ContentType", "DeleteResult"]
