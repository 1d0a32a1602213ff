"""
Mode state machine for the console.

``ConsoleController.handle(state, event)`` applies exactly one transition for
the active mode. The controller keeps no reference to the session state
between events; the session loop hands it in for each step.

Recoverable collaborator failures are turned into a timestamped session
message here and never propagate further.
"""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Callable, Dict, Optional

from base_classes import (
    AuthenticationFailure,
    ClipboardFailure,
    ClipboardTarget,
    ConsoleError,
    ExportFailure,
    ExportTarget,
    XrpcProvider,
)
from catalog import AVAILABLE_COMMANDS, find_command
from core.dispatcher import RequestDispatcher
from core.events import KeyEvent, KeyMap
from core.output_viewer import LINE_STEP, PAGE_STEP, OutputViewer, format_json
from core.session_state import (
    CommandBuilderMode,
    CommandMode,
    HistoryMode,
    NormalMode,
    PasswordMode,
    SessionState,
    ViewingResponseMode,
    mode_name,
    utcnow,
)
from utils.export_utils import export_filename
from utils.logging_utils import LoggingHandler

HISTORY_MODE = "mode"
HISTORY_INLINE = "inline"


class ConsoleController:
    def __init__(
        self,
        provider: XrpcProvider,
        dispatcher: Optional[RequestDispatcher] = None,
        viewer: Optional[OutputViewer] = None,
        clipboard: Optional[ClipboardTarget] = None,
        exporter: Optional[ExportTarget] = None,
        keymap: Optional[KeyMap] = None,
        history_navigation: str = HISTORY_MODE,
        logger: Optional[LoggingHandler] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.provider = provider
        self.logger = logger or LoggingHandler(None)
        self.dispatcher = dispatcher or RequestDispatcher(provider, self.logger, clock=clock)
        self.viewer = viewer or OutputViewer()
        self.clipboard = clipboard
        self.exporter = exporter
        self.keymap = keymap or KeyMap()
        nav = (history_navigation or HISTORY_MODE).strip().lower()
        self.history_navigation = nav if nav in (HISTORY_MODE, HISTORY_INLINE) else HISTORY_MODE
        self.clock = clock
        self._handlers: Dict[type, Callable[[SessionState, KeyEvent], None]] = {
            NormalMode: self._handle_normal,
            PasswordMode: self._handle_password,
            CommandMode: self._handle_command,
            HistoryMode: self._handle_history,
            CommandBuilderMode: self._handle_builder,
            ViewingResponseMode: self._handle_viewing,
        }

    # --- Entry point --------------------------------------------------------
    def handle(self, state: SessionState, event: KeyEvent) -> None:
        if self.keymap.matches(event, 'quit'):
            state.quit = True
            self.logger.tui_event('quit', {'mode': mode_name(state.mode)})
            return

        before = mode_name(state.mode)
        handler = self._handlers[type(state.mode)]
        try:
            handler(state, event)
        except ConsoleError as e:
            # Collaborators store their own message; make sure one is visible
            if state.error is None:
                state.set_error(e.user_message, now=self.clock())
            self.logger.error('core.controller', e)

        after = mode_name(state.mode)
        if after != before:
            self.logger.tui_detail('mode_change', {'from': before, 'to': after, 'key': event.key})

    # --- Normal / Password --------------------------------------------------
    def _handle_normal(self, state: SessionState, event: KeyEvent) -> None:
        if event.key == 'enter':
            if not state.editor.is_empty:
                state.identifier = state.editor.take()
                state.mode = PasswordMode()
            return
        state.editor.handle_key(event.key, event.character)

    def _handle_password(self, state: SessionState, event: KeyEvent) -> None:
        if event.key != 'enter':
            state.editor.handle_key(event.key, event.character)
            return
        if state.identifier is None:
            return

        identifier = state.identifier
        state.identifier = None
        password = state.editor.take()
        self.logger.auth_event('auth_start', {'identifier': identifier, 'host': state.pds_host})
        try:
            credential = self.provider.create_session(identifier, password)
        except AuthenticationFailure as e:
            state.clear_credential()
            state.set_error(f"Authentication failed: {e.user_message}", now=self.clock())
            state.mode = NormalMode()
            self.logger.auth_event('auth_failed', {'identifier': identifier, 'reason': e.reason, 'status': e.status})
            return

        state.set_credential(credential)
        state.clear_error()
        state.selected_index = None
        state.mode = CommandMode()
        self.logger.auth_event('auth_ok', {'identifier': identifier})

    # --- Command ------------------------------------------------------------
    def _handle_command(self, state: SessionState, event: KeyEvent) -> None:
        key = event.key
        inline = self.history_navigation == HISTORY_INLINE

        if key == 'enter':
            if inline and state.editor.is_empty and not state.history.is_empty and state.selected_index is not None:
                self._replay(state, state.selected_index)
                return
            self._select_command(state)
        elif key == 'up':
            limit = len(state.history) if inline else len(AVAILABLE_COMMANDS)
            if limit:
                if state.selected_index is None:
                    state.selected_index = 0 if inline else limit - 1
                elif state.selected_index > 0:
                    state.selected_index -= 1
        elif key == 'down':
            limit = len(state.history) if inline else len(AVAILABLE_COMMANDS)
            if limit:
                if state.selected_index is None:
                    state.selected_index = 0
                elif state.selected_index < limit - 1:
                    state.selected_index += 1
        elif key == 'tab':
            self._complete(state)
        elif self.keymap.matches(event, 'history') and not inline:
            state.mode = HistoryMode()
            state.selected_index = None if state.history.is_empty else 0
        elif self.keymap.matches(event, 'refresh'):
            self._refresh(state)
        else:
            state.editor.handle_key(key, event.character)
            state.completion.recompute(state.editor.content)

    def _select_command(self, state: SessionState) -> None:
        if not state.editor.is_empty:
            typed = state.editor.content
            command = find_command(typed)
            if command is None:
                state.set_error(f"Command not found: {typed}", now=self.clock())
                return
        elif state.selected_index is not None and 0 <= state.selected_index < len(AVAILABLE_COMMANDS):
            command = AVAILABLE_COMMANDS[state.selected_index]
        else:
            return

        state.editor.clear()
        state.completion.reset()
        state.output = None
        state.mode = CommandBuilderMode(method=command.method)
        if not command.parameters:
            self._dispatch(state, command.method, [])

    def _complete(self, state: SessionState) -> None:
        completion = state.completion
        if completion.active:
            match = completion.current()
            if match is not None:
                state.editor.set_text(match)
                completion.advance()
        elif not state.editor.is_empty:
            completion.recompute(state.editor.content)

    def _refresh(self, state: SessionState) -> None:
        token = state.refresh_token
        if token is None:
            return
        self.logger.auth_event('refresh_start', {'host': state.pds_host})
        try:
            credential = self.provider.refresh_session(token)
        except AuthenticationFailure as e:
            state.clear_credential()
            state.editor.clear()
            state.mode = NormalMode()
            state.set_error(f"Session refresh failed: {e.user_message}", now=self.clock())
            self.logger.auth_event('refresh_failed', {'reason': e.reason, 'status': e.status})
            return
        state.set_credential(credential)
        state.set_info("Session refreshed", now=self.clock())
        self.logger.auth_event('refresh_ok', {})

    # --- History ------------------------------------------------------------
    def _handle_history(self, state: SessionState, event: KeyEvent) -> None:
        key = event.key
        if key == 'enter':
            if state.selected_index is not None:
                self._replay(state, state.selected_index)
        elif key == 'escape':
            state.mode = CommandMode()
            state.selected_index = 0
        elif key == 'up':
            if state.selected_index is not None and state.selected_index > 0:
                state.selected_index -= 1
        elif key == 'down':
            if state.selected_index is not None and state.selected_index < len(state.history) - 1:
                state.selected_index += 1

    def _replay(self, state: SessionState, index: int) -> None:
        entry = state.history.get(index)
        if entry is None:
            return
        self.logger.history_event('history_replay', {'method': entry.method, 'ticket': entry.ticket, 'index': index})
        self._dispatch(state, entry.method, list(entry.params))

    # --- CommandBuilder -----------------------------------------------------
    def _handle_builder(self, state: SessionState, event: KeyEvent) -> None:
        mode = state.mode
        key = event.key
        if key == 'escape':
            state.editor.clear()
            state.mode = CommandMode()
            return
        if key != 'enter':
            state.editor.handle_key(key, event.character)
            return

        command = find_command(mode.method)
        if command is None:
            state.editor.clear()
            state.mode = CommandMode()
            state.set_error(f"Command not found: {mode.method}", now=self.clock())
            return

        index = mode.current_param_index
        if index >= len(command.parameters):
            self._dispatch(state, command.method, list(mode.collected_values))
            return

        param = command.parameters[index]
        if state.editor.is_empty:
            if not param.optional:
                return
            value = param.default or ""
        else:
            value = state.editor.content

        values = list(mode.collected_values)
        if index == len(values):
            values.append(value)
        else:
            values[index] = value
        state.editor.clear()

        if index + 1 < len(command.parameters):
            state.mode = replace(mode, current_param_index=index + 1, collected_values=tuple(values))
        else:
            self._dispatch(state, command.method, values)

    def _dispatch(self, state: SessionState, method: str, values) -> None:
        try:
            self.dispatcher.execute(state, method, values)
        finally:
            state.editor.clear()
            state.scroll_offset = 0
            state.mode = ViewingResponseMode()

    # --- ViewingResponse ----------------------------------------------------
    def _handle_viewing(self, state: SessionState, event: KeyEvent) -> None:
        key = event.key
        if key == 'enter':
            state.mode = CommandMode()
            state.editor.clear()
            state.scroll_offset = 0
        elif key == 'up':
            self.viewer.scroll(state, -LINE_STEP)
        elif key == 'down':
            self.viewer.scroll(state, LINE_STEP)
        elif key == 'pageup':
            self.viewer.scroll(state, -PAGE_STEP)
        elif key == 'pagedown':
            self.viewer.scroll(state, PAGE_STEP)
        elif key == 'home':
            self.viewer.scroll_home(state)
        elif key == 'end':
            self.viewer.scroll_end(state)
        elif self.keymap.matches(event, 'copy'):
            self._copy(state)
        elif self.keymap.matches(event, 'export'):
            self._export(state)

    def _copy(self, state: SessionState) -> None:
        if state.output is None or self.clipboard is None:
            return
        try:
            copied = self.clipboard.set_text(format_json(state.output))
        except ClipboardFailure as e:
            state.set_error(f"Failed to copy to clipboard: {e.user_message}", now=self.clock())
            self.logger.error('core.controller.copy', e)
            return
        if copied:
            state.set_info("Copied response to clipboard", now=self.clock())
        else:
            state.set_error("Failed to copy to clipboard", now=self.clock())
        self.logger.tui_event('copy', {'ok': bool(copied)})

    def _export(self, state: SessionState) -> None:
        if state.output is None or self.exporter is None:
            return
        filename = export_filename(self.clock())
        try:
            path = self.exporter.write(filename, format_json(state.output))
        except ExportFailure as e:
            state.set_error(f"Failed to write file: {e.user_message}", now=self.clock())
            self.logger.error('core.controller.export', e)
            return
        state.set_info(f"Exported to {path}", now=self.clock())
        self.logger.tui_event('export', {'path': path})
