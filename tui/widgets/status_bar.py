"""Status and key-help lines."""

from __future__ import annotations

from typing import Optional

from textual.widgets import Static

from core.events import KeyMap
from core.session_state import SessionState
from tui.render import help_line, status_line


class StatusBar(Static):
    """Authentication state, or the transient message while one is live."""

    def show(self, state: SessionState) -> None:
        self.update(status_line(state))


class HelpLine(Static):

    def show(self, state: SessionState, keymap: Optional[KeyMap] = None, inline_history: bool = False) -> None:
        self.update(help_line(state, keymap, inline_history))
