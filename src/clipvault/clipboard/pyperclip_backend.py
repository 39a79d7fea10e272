import pyperclip

from clipvault.clipboard.base import ClipboardBackend, ClipboardUnavailable

PyperclipException = getattr(pyperclip, "PyperclipException", Exception)


class PyperclipClipboard(ClipboardBackend):
    """Cross-platform fallback built on pyperclip."""

    name = "pyperclip"

    def read(self) -> str:
        try:
            text = pyperclip.paste()
        except PyperclipException as exc:
            raise ClipboardUnavailable(str(exc)) from exc
        if text is None:
            raise ClipboardUnavailable("clipboard holds no text")
        return text

    def write(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except PyperclipException as exc:
            raise ClipboardUnavailable(str(exc)) from exc
