import sys
import threading
from pathlib import Path
from typing import Any, Iterable, List, Optional, Tuple

import pytest

# Make src importable without an editable install
REPO_ROOT = Path(__file__).resolve().parent.parent
SRC = REPO_ROOT / "src"
sys.path.insert(0, str(SRC))

from clipvault.clipboard import ClipboardBackend, ClipboardUnavailable  # noqa: E402
from clipvault.database import SQLiteStore  # noqa: E402
from clipvault.services import BoundedRelay, Notifier  # noqa: E402


class ScriptedClipboard(ClipboardBackend):
    """Clipboard that replays a script of reads.

    ``None`` in the script makes that read fail. Once the script is
    exhausted the last value keeps being returned.
    """

    name = "scripted"

    def __init__(self, script: Iterable[Optional[str]] = ()) -> None:
        self._script = list(script)
        self._lock = threading.Lock()
        self._current: Optional[str] = None
        self.reads = 0
        self.written: List[str] = []
        self.fail_writes = False

    def push(self, *values: Optional[str]) -> None:
        with self._lock:
            self._script.extend(values)

    def read(self) -> str:
        with self._lock:
            self.reads += 1
            if self._script:
                value = self._script.pop(0)
                if value is None:
                    raise ClipboardUnavailable("scripted failure")
                self._current = value
            if self._current is None:
                raise ClipboardUnavailable("clipboard empty")
            return self._current

    def write(self, text: str) -> None:
        if self.fail_writes:
            raise ClipboardUnavailable("scripted write failure")
        with self._lock:
            self.written.append(text)
            self._current = text


class RecordingListener:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.events: List[Tuple[str, Any]] = []

    def __call__(self, event_name: str, payload: Any) -> None:
        with self._lock:
            self.events.append((event_name, payload))

    def payloads(self, event_name: str) -> List[Any]:
        with self._lock:
            return [payload for name, payload in self.events if name == event_name]


@pytest.fixture
def clipboard() -> ScriptedClipboard:
    return ScriptedClipboard()


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore(tmp_path / "history.db")


@pytest.fixture
def relay() -> BoundedRelay:
    return BoundedRelay(capacity=10)


@pytest.fixture
def recorder() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def notifier(recorder) -> Notifier:
    notifier = Notifier()
    notifier.subscribe(recorder)
    return notifier
