from clipvault.models.clipboard_entry import ContentType

_URL_PREFIXES = ("http://", "https://")


def _line_count(content: str) -> int:
    # Only "\n" ends a line ("\r\n" included); a trailing newline adds no line.
    if not content:
        return 0
    return content.count("\n") + (0 if content.endswith("\n") else 1)


def classify(content: str) -> ContentType:
    """Tag clipboard text with a content type.

    Rules are checked in order and the first match wins, so a multi-line
    document that opens with ``{`` is ``json``.
    """
    stripped = content.lstrip()
    if stripped.startswith("{") or stripped.startswith("["):
        return ContentType.JSON
    if content.startswith(_URL_PREFIXES):
        return ContentType.URL
    if _line_count(content) > 1:
        return ContentType.MULTILINE
    return ContentType.TEXT
