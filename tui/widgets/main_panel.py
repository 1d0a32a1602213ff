"""Main content area: command list, history, builder or the response viewer."""

from __future__ import annotations

from rich.text import Text

from textual.widgets import Static

from core.output_viewer import OutputViewer
from core.session_state import CommandBuilderMode, CommandMode, HistoryMode, SessionState
from tui.render import builder_panel, command_list, history_list, panel_title


class MainPanel(Static):
    """Renders whatever the active mode shows below the status bar.

    The response is sliced by the session's scroll offset before it gets here,
    so the widget itself never scrolls.
    """

    def show(self, state: SessionState, viewer: OutputViewer, inline_history: bool = False) -> None:
        self.border_title = panel_title(state, inline_history)
        mode = state.mode
        if isinstance(mode, CommandMode):
            body = history_list(state) if inline_history else command_list(state)
        elif isinstance(mode, HistoryMode):
            body = history_list(state)
        elif isinstance(mode, CommandBuilderMode):
            body = builder_panel(state)
        else:
            body = Text("\n").join(viewer.visible_lines(state))
            body.no_wrap = True
            body.overflow = "crop"
        self.update(body)

    def viewport(self) -> tuple:
        """(width, height) available for content inside border and padding."""
        size = self.content_size
        return size.width, size.height
