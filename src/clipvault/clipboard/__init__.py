from clipvault.clipboard.base import ClipboardBackend, ClipboardUnavailable
from clipvault.clipboard.factory import get_clipboard_class, get_clipboard

__all__ = [
    'ClipboardBackend',
    'ClipboardUnavailable',
    'get_clipboard_class',
    'get_clipboard',
]
