"""
Platform-specific clipboard factory.

This module picks the clipboard backend for the current platform.
"""

import platform
from typing import Type

from clipvault.clipboard.base import ClipboardBackend


def get_clipboard_class() -> Type[ClipboardBackend]:
    """
    Get the ClipboardBackend implementation for the current platform.

    Linux uses the native command-line tools when they are installed; every
    other platform, and Linux without those tools, goes through pyperclip.
    """
    system = platform.system()

    if system == "Linux":
        from clipvault.clipboard.linux import LinuxClipboard
        if LinuxClipboard.is_supported():
            return LinuxClipboard

    from clipvault.clipboard.pyperclip_backend import PyperclipClipboard
    return PyperclipClipboard


def get_clipboard() -> ClipboardBackend:
    clipboard_class = get_clipboard_class()
    return clipboard_class()
