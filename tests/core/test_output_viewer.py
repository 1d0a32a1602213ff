from __future__ import annotations

import itertools
import json
import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from core.output_viewer import (
    BRACKET_STYLE,
    COLON_STYLE,
    DELIMITER_STYLE,
    ERROR_STYLE,
    STRING_STYLE,
    OutputViewer,
    format_json,
    highlight_json,
)
from core.session_state import SessionState


def style_at(line, pos):
    styles = [str(span.style) for span in line.spans if span.start <= pos < span.end]
    return styles[-1] if styles else None


def test_lines_follow_pretty_printed_structure():
    value = {"a": [1, 2], "b": "x,y"}
    lines = highlight_json(format_json(value))
    assert [l.plain for l in lines] == format_json(value).splitlines()
    assert all(l.plain.strip() for l in lines)


def test_character_classes_are_styled():
    line = highlight_json('{"k": "v", "n": 1}')[0]
    plain = line.plain
    assert style_at(line, plain.index("{")) == BRACKET_STYLE
    assert style_at(line, plain.index('"')) == DELIMITER_STYLE
    assert style_at(line, plain.index("k")) == STRING_STYLE
    assert style_at(line, plain.index(":")) == COLON_STYLE
    assert style_at(line, plain.index(",")) is None


def test_structural_characters_inside_strings_stay_strings():
    text = format_json({"q": 'say "hi", [ok]: done'})
    lines = highlight_json(text)
    assert len(lines) == 3
    middle = lines[1]
    pos = middle.plain.index("[ok]")
    assert style_at(middle, pos) == STRING_STYLE
    assert style_at(middle, middle.plain.index(", [")) == STRING_STYLE


def test_compact_commas_break_lines():
    lines = highlight_json("[1,2,3]")
    assert [l.plain for l in lines] == ["[1,", "2,", "3]"]


def test_non_ascii_kept():
    lines = OutputViewer().render({"name": "Zoë 🦋"})
    assert any("Zoë 🦋" in l.plain for l in lines)


def test_error_only_renders_one_red_line():
    viewer = OutputViewer()
    lines = viewer.render(None, "Request failed (400): bad request")
    assert len(lines) == 1
    assert lines[0].plain == "Request failed (400): bad request"
    assert str(lines[0].style) == ERROR_STYLE
    assert viewer.render(None, None) == []


def test_output_wins_over_error():
    lines = OutputViewer().render([1], "old error")
    assert "old error" not in "".join(l.plain for l in lines)


def test_wrap_splits_long_lines_to_width():
    viewer = OutputViewer()
    lines = viewer.render({"text": "x" * 50}, width=20)
    assert all(len(l.plain) <= 20 for l in lines)
    joined = "".join(l.plain for l in lines)
    assert "x" * 50 in joined


def _state_with_lines(count, viewport):
    state = SessionState()
    state.output = list(range(count - 2))  # brackets add two lines
    state.viewport_height = viewport
    return state


def test_content_height_tracks_latest_output():
    viewer = OutputViewer()
    state = _state_with_lines(32, 10)
    assert viewer.content_height(state) == 32
    state.output = {"a": 1}
    assert viewer.content_height(state) == 3


def test_scroll_steps_pages_and_jumps():
    viewer = OutputViewer()
    state = _state_with_lines(32, 10)
    assert viewer.max_scroll(state) == 22

    assert viewer.scroll(state, 1) == 1
    assert viewer.scroll(state, 10) == 11
    assert viewer.scroll(state, 10) == 21
    assert viewer.scroll(state, 10) == 22
    assert viewer.scroll(state, -1) == 21
    assert viewer.scroll(state, -10) == 11
    assert viewer.scroll_home(state) == 0
    assert viewer.scroll(state, -1) == 0
    assert viewer.scroll_end(state) == 22


def test_scroll_offset_always_within_bounds():
    viewer = OutputViewer()
    deltas = [1, -1, 10, -10]
    for count, viewport in [(5, 10), (32, 10), (11, 10), (3, 0)]:
        state = _state_with_lines(count, viewport)
        upper = max(0, viewer.content_height(state) - viewport)
        for ops in itertools.product(deltas, repeat=4):
            state.scroll_offset = 0
            for delta in ops:
                viewer.scroll(state, delta)
                assert 0 <= state.scroll_offset <= upper


def test_short_content_cannot_scroll():
    viewer = OutputViewer()
    state = _state_with_lines(5, 10)
    assert viewer.scroll(state, 10) == 0
    assert viewer.scroll_end(state) == 0


def test_visible_lines_slice_by_offset():
    viewer = OutputViewer()
    state = _state_with_lines(32, 10)
    viewer.scroll(state, 1)
    visible = viewer.visible_lines(state)
    assert len(visible) == 10
    assert visible[0].plain == "  0,"
    assert json.loads(format_json(state.output)) == state.output
