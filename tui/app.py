"""Textual application hosting the xrpc-console session loop."""

from __future__ import annotations

from typing import Optional

from textual import events
from textual.app import App, ComposeResult
from textual.binding import Binding

from core.events import KeyEvent, KeyMap, Resize, Tick
from core.session_loop import SessionLoop
from tui.widgets.input_line import InputLine
from tui.widgets.main_panel import MainPanel
from tui.widgets.status_bar import HelpLine, StatusBar
from utils.logging_utils import LoggingHandler

DEFAULT_TICK_INTERVAL = 0.1


def to_key_event(event: events.Key) -> KeyEvent:
    character = event.character if event.is_printable else None
    return KeyEvent(key=event.key, character=character)


class XrpcConsoleApp(App):
    """Full-screen front end.

    Every key press and timer tick is posted to the session loop and the loop
    is pumped immediately; widgets are redrawn from the session state only when
    the loop reports a change. None of the widgets take focus, so every key
    lands in ``on_key``.
    """

    CSS_PATH = "styles/app.tcss"
    ENABLE_COMMAND_PALETTE = False

    BINDINGS = [
        # Textual reserves ctrl+c by default; route it to the session instead
        Binding("ctrl+c", "session_key('ctrl+c')", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        loop: SessionLoop,
        keymap: Optional[KeyMap] = None,
        inline_history: bool = False,
        tick_interval: float = DEFAULT_TICK_INTERVAL,
        logger: Optional[LoggingHandler] = None,
    ) -> None:
        super().__init__()
        self.loop = loop
        self.keymap = keymap or KeyMap()
        self.inline_history = inline_history
        self.tick_interval = tick_interval
        self.logger = logger or LoggingHandler(None)
        self.fatal_error: Optional[BaseException] = None

        self.input_line: Optional[InputLine] = None
        self.status_bar: Optional[StatusBar] = None
        self.main_panel: Optional[MainPanel] = None
        self.help_line: Optional[HelpLine] = None

    # ----- layout --------------------------------------------------
    def compose(self) -> ComposeResult:
        self.input_line = InputLine(id="input_line")
        self.status_bar = StatusBar(id="status_bar")
        self.main_panel = MainPanel(id="main_panel")
        self.help_line = HelpLine(id="help_line")
        yield self.input_line
        yield self.status_bar
        yield self.main_panel
        yield self.help_line

    def on_mount(self) -> None:
        self.logger.tui_event('mount', {'tick_interval': self.tick_interval, 'inline_history': self.inline_history})
        self.set_interval(self.tick_interval, self._on_tick)
        self.call_after_refresh(self._sync_viewport)
        self._redraw(force=True)

    # ----- input ---------------------------------------------------
    async def on_key(self, event: events.Key) -> None:
        event.prevent_default()
        event.stop()
        self._feed(to_key_event(event))

    def action_session_key(self, key: str) -> None:
        self._feed(KeyEvent(key=key))

    def on_resize(self, event: events.Resize) -> None:
        self.call_after_refresh(self._sync_viewport)

    def _on_tick(self) -> None:
        self._feed(Tick())

    def _sync_viewport(self) -> None:
        if self.main_panel is None:
            return
        width, height = self.main_panel.viewport()
        self.logger.tui_detail('viewport', {'width': width, 'height': height})
        self._feed(Resize(width=width, height=height))

    # ----- loop ----------------------------------------------------
    def _feed(self, event) -> None:
        try:
            self.loop.post(event)
            self.loop.pump()
            self._redraw()
        except Exception as e:
            self.logger.error('tui.app', e)
            self.fatal_error = e
            self.exit(return_code=1)
            return
        if not self.loop.running:
            self.exit()

    def _redraw(self, force: bool = False) -> None:
        if not (force or self.loop.dirty):
            return
        state = self.loop.state
        if self.input_line is not None:
            self.input_line.show(state)
        if self.status_bar is not None:
            self.status_bar.show(state)
        if self.main_panel is not None:
            self.main_panel.show(state, self.loop.controller.viewer, self.inline_history)
        if self.help_line is not None:
            self.help_line.show(state, self.keymap, self.inline_history)
        self.loop.dirty = False
