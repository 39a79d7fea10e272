import os
import shutil
import subprocess
from typing import List, Optional

from clipvault.clipboard.base import ClipboardBackend, ClipboardUnavailable


class LinuxClipboard(ClipboardBackend):
    """Clipboard access through ``wl-paste``/``wl-copy`` or ``xclip``.

    Wayland tools are preferred when ``WAYLAND_DISPLAY`` is set; ``xclip`` is
    used otherwise.
    """

    name = "linux"

    def __init__(self, timeout: float = 1.5) -> None:
        self.timeout = timeout

    @staticmethod
    def is_supported() -> bool:
        return bool(
            (os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-paste"))
            or shutil.which("xclip")
        )

    def read(self) -> str:
        strategies = (
            self._from_wayland,
            self._from_xclip,
        )

        for strategy in strategies:
            data = strategy()
            if data is not None:
                return data.decode("utf-8", errors="ignore")

        raise ClipboardUnavailable("no clipboard tool returned text")

    def write(self, text: str) -> None:
        payload = text.encode("utf-8")

        if os.environ.get("WAYLAND_DISPLAY") and shutil.which("wl-copy"):
            command = ["wl-copy"]
        elif shutil.which("xclip"):
            command = ["xclip", "-selection", "clipboard"]
        else:
            raise ClipboardUnavailable("neither wl-copy nor xclip is installed")

        try:
            subprocess.run(
                command,
                input=payload,
                check=True,
                timeout=self.timeout * 2,
            )
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, OSError) as exc:
            raise ClipboardUnavailable(f"{command[0]} failed: {exc}") from exc

    def _from_wayland(self) -> Optional[bytes]:
        if not os.environ.get("WAYLAND_DISPLAY") or not shutil.which("wl-paste"):
            return None
        return self._run_command(["wl-paste", "--no-newline"])

    def _from_xclip(self) -> Optional[bytes]:
        if not shutil.which("xclip"):
            return None
        return self._run_command(["xclip", "-selection", "clipboard", "-o"])

    def _run_command(self, command: List[str]) -> Optional[bytes]:
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                check=True,
                timeout=self.timeout,
            )
            return result.stdout
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired, FileNotFoundError):
            return None
