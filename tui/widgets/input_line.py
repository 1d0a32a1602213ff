"""Bordered single-line input showing the active mode's prompt."""

from __future__ import annotations

from textual.widgets import Static

from core.session_state import SessionState
from tui.render import input_line, input_title


class InputLine(Static):
    """Mirrors the session's line editor; keys are handled by the app, not here."""

    def show(self, state: SessionState) -> None:
        self.border_title = input_title(state)
        self.update(input_line(state))
