from __future__ import annotations

import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.line_editor import LineEditor, MASK_GLYPH


def test_insert_at_cursor_and_backspace():
    ed = LineEditor()
    for ch in "alce":
        ed.insert(ch)
    ed.move_left()
    ed.move_left()
    ed.insert("i")
    assert ed.content == "alice"
    assert ed.cursor_position == 3

    assert ed.backspace() is True
    assert ed.content == "alce"
    ed.move_home()
    assert ed.backspace() is False
    assert ed.content == "alce"


def test_cursor_moves_are_clamped():
    ed = LineEditor("ab")
    ed.move_right()
    assert ed.cursor_position == 2
    ed.move_home()
    ed.move_left()
    assert ed.cursor_position == 0
    ed.move_end()
    assert ed.cursor_position == 2


def test_handle_key_reports_content_changes():
    ed = LineEditor()
    assert ed.handle_key("a", "a") is True
    assert ed.handle_key("space", " ") is True
    assert ed.handle_key("left") is False
    assert ed.handle_key("tab", "\t") is False
    assert ed.handle_key("end") is False
    assert ed.handle_key("backspace") is True
    assert ed.content == "a"


def test_take_and_mask():
    ed = LineEditor("secret")
    assert ed.masked() == MASK_GLYPH * 6
    assert ed.take() == "secret"
    assert ed.is_empty
    assert ed.cursor_position == 0
