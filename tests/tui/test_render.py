from __future__ import annotations

import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.events import KeyMap
from core.session_state import (
    CommandBuilderMode,
    CommandMode,
    HistoryMode,
    PasswordMode,
    SessionState,
    ViewingResponseMode,
)
from base_classes import Credential
from tui import render


def test_password_is_masked():
    state = SessionState(mode=PasswordMode())
    state.editor.set_text("secret")
    line = render.input_line(state)
    assert "secret" not in line.plain
    assert line.plain.startswith("••••••")


def test_command_mode_ghost_suggestion_and_counter():
    state = SessionState(mode=CommandMode())
    state.editor.set_text("app.bsky.feed.getT")
    state.completion.recompute(state.editor.content)
    line = render.input_line(state, show_cursor=False)
    assert line.plain == "app.bsky.feed.getTimeline (1/1)"


def test_builder_title_mentions_default():
    state = SessionState(mode=CommandBuilderMode("app.bsky.feed.getTimeline", 0, ()))
    assert render.input_title(state) == "Enter limit (optional, default: 50)"
    state.mode = CommandBuilderMode("app.bsky.feed.getTimeline", 1, ("50",))
    assert render.input_title(state) == "Enter cursor (optional, default: none)"
    state.mode = CommandBuilderMode("app.bsky.actor.getProfile", 0, ())
    assert render.input_title(state) == "Enter actor"


def test_builder_panel_shows_collected_values():
    state = SessionState(mode=CommandBuilderMode("app.bsky.feed.getPostThread", 1, ("at://x",)))
    state.editor.set_text("3")
    text = render.builder_panel(state).plain
    assert "Building command: app.bsky.feed.getPostThread" in text
    assert "uri: at://x" in text
    assert "> depth (optional): 3" in text


def test_status_line_variants():
    state = SessionState(pds_host="https://pds.example")
    assert render.status_line(state).plain == "Not authenticated"
    state.set_credential(Credential("A", "R"))
    assert render.status_line(state).plain == "Authenticated | PDS: https://pds.example"
    state.set_error("Request failed (500): oops")
    status = render.status_line(state)
    assert status.plain == "Request failed (500): oops"
    assert str(status.style) == "red"


def test_history_list_marks_outcome():
    state = SessionState(mode=HistoryMode())
    ok = state.history.record("a.b.c", "https://h/xrpc/a.b.c", [])
    ok.success = True
    state.history.record("d.e.f", "https://h/xrpc/d.e.f", [])
    text = render.history_list(state).plain
    assert "✗ d.e.f" in text
    assert "✓ a.b.c" in text
    assert text.index("d.e.f") < text.index("a.b.c")


def test_help_line_uses_configured_keys():
    keys = KeyMap(history="ctrl+h", copy="y")
    state = SessionState(mode=CommandMode())
    assert "Ctrl+h - History" in render.help_line(state, keys)
    state.mode = ViewingResponseMode()
    assert "y - Copy to Clipboard" in render.help_line(state, keys)
    state.mode = CommandMode()
    assert "Browse History" in render.help_line(state, keys, inline_history=True)


def test_command_list_highlights_selection():
    state = SessionState(mode=CommandMode())
    state.selected_index = 1
    text = render.command_list(state)
    assert "app.bsky.actor.getProfile" in text.plain
    start = text.plain.index("app.bsky.feed.getTimeline")
    styles = [str(s.style) for s in text.spans if s.start == start]
    assert render.SELECTED_STYLE in styles
