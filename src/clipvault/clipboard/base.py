from abc import ABC, abstractmethod


class ClipboardUnavailable(Exception):
    """Raised when the system clipboard cannot be read or written."""


class ClipboardBackend(ABC):
    """Text-only access to the system clipboard.

    Both operations are fallible. Implementations raise
    ``ClipboardUnavailable`` instead of leaking platform-specific errors.
    """

    name: str = "base"

    @abstractmethod
    def read(self) -> str:
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
