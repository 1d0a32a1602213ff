"""Pure renderers: session state in, Rich ``Text`` out. Widgets only display these."""

from __future__ import annotations

from typing import Optional

from rich.text import Text

from catalog import AVAILABLE_COMMANDS, describe_parameter, find_command
from core.events import KeyMap
from core.session_state import (
    CommandBuilderMode,
    CommandMode,
    HistoryMode,
    NormalMode,
    PasswordMode,
    SessionState,
    ViewingResponseMode,
)

SELECTED_STYLE = "bold reverse yellow"
GHOST_STYLE = "bright_black"
CURSOR_STYLE = "reverse"

_INPUT_STYLES = {
    NormalMode: "",
    PasswordMode: "red",
    CommandMode: "yellow",
    HistoryMode: "yellow",
    CommandBuilderMode: "green",
    ViewingResponseMode: "blue",
}


def _key_label(binding: str) -> str:
    if binding.startswith("ctrl+"):
        return "Ctrl+" + binding[len("ctrl+"):]
    return binding


def input_title(state: SessionState) -> str:
    mode = state.mode
    if isinstance(mode, NormalMode):
        return "Enter your identifier"
    if isinstance(mode, PasswordMode):
        return "Enter your password"
    if isinstance(mode, CommandMode):
        return "Enter or select a command (Tab to autocomplete)"
    if isinstance(mode, HistoryMode):
        return "Command History"
    if isinstance(mode, CommandBuilderMode):
        command = find_command(mode.method)
        if command is None or mode.current_param_index >= len(command.parameters):
            return "Enter parameter"
        param = command.parameters[mode.current_param_index]
        if param.optional:
            return f"Enter {param.name} (optional, default: {param.default or 'none'})"
        return f"Enter {param.name}"
    return "Press Enter to return to command list"


def input_line(state: SessionState, show_cursor: bool = True) -> Text:
    """The editable line: masked while entering the password, ghost completion in Command mode."""
    style = _INPUT_STYLES.get(type(state.mode), "")
    editor = state.editor
    shown = editor.masked() if isinstance(state.mode, PasswordMode) else editor.content

    text = Text(style=style)
    if show_cursor and not isinstance(state.mode, (HistoryMode, ViewingResponseMode)):
        pos = editor.cursor_position
        text.append(shown[:pos])
        text.append(shown[pos:pos + 1] or " ", CURSOR_STYLE)
        text.append(shown[pos + 1:])
    else:
        text.append(shown)

    if isinstance(state.mode, CommandMode) and not editor.is_empty:
        completion = state.completion
        suffix = completion.suggestion_suffix(editor.content)
        if suffix:
            text.append(suffix, GHOST_STYLE)
            text.append(f" ({completion.index + 1}/{len(completion.matches)})", GHOST_STYLE)
    return text


def status_line(state: SessionState) -> Text:
    if state.error is not None:
        style = "green" if state.error.level == "info" else "red"
        return Text(state.error.text, style=style)
    if state.is_authenticated:
        return Text.assemble("Authenticated | ", ("PDS: ", "grey62"), (state.pds_host, "cyan"))
    return Text("Not authenticated", style="grey62")


def help_line(state: SessionState, keymap: Optional[KeyMap] = None, inline_history: bool = False) -> str:
    keys = keymap or KeyMap()
    quit_hint = f"{_key_label(keys.quit)} - Quit"
    mode = state.mode
    if isinstance(mode, (NormalMode, PasswordMode)):
        return f"Enter - Submit | {quit_hint}"
    if isinstance(mode, CommandMode):
        if inline_history:
            return (f"Tab - Autocomplete | ↑↓ - Browse History | Enter - Select Command | "
                    f"{_key_label(keys.refresh)} - Refresh Session | {quit_hint}")
        return (f"Tab - Autocomplete | ↑↓ - Scroll Commands | Enter - Select Command | "
                f"{_key_label(keys.history)} - History | {_key_label(keys.refresh)} - Refresh Session | {quit_hint}")
    if isinstance(mode, HistoryMode):
        return f"↑↓ - Browse History | Enter - Use Command | Esc - Back | {quit_hint}"
    if isinstance(mode, CommandBuilderMode):
        return f"Enter - Next Parameter/Submit | Esc - Cancel | {quit_hint}"
    return (f"Enter - Return to Commands | ↑↓ PgUp PgDn Home End - Scroll | "
            f"{_key_label(keys.copy)} - Copy to Clipboard | {_key_label(keys.export)} - Export to File | {quit_hint}")


def command_list(state: SessionState) -> Text:
    text = Text()
    for i, command in enumerate(AVAILABLE_COMMANDS):
        style = SELECTED_STYLE if i == state.selected_index else "bold"
        text.append(command.method, style)
        text.append("\n  ")
        text.append(command.description, "grey62")
        text.append("\n")
        for param in command.parameters:
            text.append("    ")
            text.append(param.name, "cyan")
            text.append(": ")
            text.append(describe_parameter(param), GHOST_STYLE)
            text.append("\n")
        text.append("\n")
    text.rstrip()
    return text


def history_list(state: SessionState) -> Text:
    if state.history.is_empty:
        return Text("No commands yet", style=GHOST_STYLE)
    text = Text()
    for i, entry in enumerate(state.history):
        style = SELECTED_STYLE if i == state.selected_index else ""
        text.append(entry.timestamp.strftime("%H:%M:%S"), "grey62")
        text.append(" ")
        text.append("✓" if entry.success else "✗", "green" if entry.success else "red")
        text.append(" ")
        text.append(entry.method, style)
        text.append("\n  ")
        text.append(entry.url, GHOST_STYLE)
        text.append("\n")
    text.rstrip()
    return text


def builder_panel(state: SessionState) -> Text:
    mode = state.mode
    if not isinstance(mode, CommandBuilderMode):
        return Text()
    command = find_command(mode.method)
    text = Text.assemble("Building command: ", (mode.method, "bold yellow"), "\n\n")
    if command is None:
        return text
    for i, param in enumerate(command.parameters):
        current = i == mode.current_param_index
        if i < len(mode.collected_values):
            value = mode.collected_values[i]
        elif current:
            value = state.editor.content
        else:
            value = ""
        label = f"{param.name} (optional): " if param.optional else f"{param.name}: "
        text.append("> " if current else "  ", "green")
        text.append(label, "bold cyan" if current else "cyan")
        text.append(value, "green" if i < len(mode.collected_values) else "")
        text.append("\n    ")
        if param.optional:
            text.append(f"{param.description} (default: {param.default or 'none'})", GHOST_STYLE)
        else:
            text.append(param.description, GHOST_STYLE)
        text.append("\n")
    text.rstrip()
    return text


def panel_title(state: SessionState, inline_history: bool = False) -> str:
    mode = state.mode
    if isinstance(mode, CommandMode):
        return "Command History" if inline_history else "Available Commands"
    if isinstance(mode, HistoryMode):
        return "Command History"
    if isinstance(mode, CommandBuilderMode):
        return "Command Builder"
    return "Response"
