"""Copying response text to the system clipboard from the console."""

from __future__ import annotations

import platform
import shutil
import subprocess
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Tuple

from base_classes import ClipboardTarget


@dataclass
class ClipboardOutcome:
    """Result metadata for a clipboard attempt."""

    success: bool
    method: str
    error: Optional[str] = None


class ClipboardHelper:
    """OSC-52 through the terminal first, then the platform's clipboard tools."""

    def __init__(self, runner: Callable[..., object] = subprocess.run) -> None:
        self._run = runner

    def copy(self, text: str, primary: Optional[Callable[[str], None]] = None) -> ClipboardOutcome:
        if text is None:
            text = ""

        last_error: Optional[str] = None
        if primary is not None:
            try:
                primary(text)
                return ClipboardOutcome(True, "osc52")
            except Exception as exc:
                last_error = str(exc)

        for command in self._iter_fallback_commands():
            try:
                self._run(command, check=True, input=text.encode("utf-8"))
                return ClipboardOutcome(True, " ".join(command))
            except (OSError, subprocess.SubprocessError) as fallback_exc:
                last_error = f"{' '.join(command)}: {fallback_exc}"

        return ClipboardOutcome(False, "none", error=last_error or "no clipboard tool found")

    def _iter_fallback_commands(self) -> Iterable[Tuple[str, ...]]:
        system = platform.system().lower()
        if system == "darwin":
            if shutil.which("pbcopy"):
                yield ("pbcopy",)
            return
        if system == "windows":
            yield ("powershell", "-Command", "Set-Clipboard")
            return
        # Assume Linux / BSD
        if shutil.which("wl-copy"):
            yield ("wl-copy",)
        if shutil.which("xclip"):
            yield ("xclip", "-selection", "clipboard")


class TerminalClipboard(ClipboardTarget):
    """``ClipboardTarget`` backed by ``ClipboardHelper``.

    ``primary`` is normally the Textual app's ``copy_to_clipboard`` (OSC-52).
    The last attempt is kept for status reporting.
    """

    def __init__(self, primary: Optional[Callable[[str], None]] = None, helper: Optional[ClipboardHelper] = None) -> None:
        self.primary = primary
        self.helper = helper or ClipboardHelper()
        self.last_outcome: Optional[ClipboardOutcome] = None

    def set_text(self, text: str) -> bool:
        self.last_outcome = self.helper.copy(text, self.primary)
        return self.last_outcome.success
