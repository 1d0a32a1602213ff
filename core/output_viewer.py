"""
Output viewer: turns the latest response (or error) into styled lines and
keeps the scroll offset inside the content.

Successful output is pretty-printed JSON passed through a small structural
highlighter. It does not tokenize JSON; it only tracks whether the cursor is
inside a string so that brackets, colons and commas inside string values are
left alone.
"""

from __future__ import annotations

import json
from typing import Any, List, Optional

from rich.text import Text

from core.session_state import SessionState

STRING_STYLE = "green"
DELIMITER_STYLE = "green"
BRACKET_STYLE = "yellow"
COLON_STYLE = "cyan"
ERROR_STYLE = "red"

LINE_STEP = 1
PAGE_STEP = 10


def format_json(value: Any) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def highlight_json(text: str) -> List[Text]:
    """Split pretty-printed JSON into styled lines.

    A line ends after every structural comma and at every structural newline.
    The newline the pretty printer emits right after a comma belongs to that
    same break.
    """
    lines: List[Text] = []
    current = Text()
    in_string = False
    escaped = False
    after_comma = False

    for char in text:
        if in_string:
            if escaped:
                escaped = False
                current.append(char, STRING_STYLE)
            elif char == "\\":
                escaped = True
                current.append(char, STRING_STYLE)
            elif char == '"':
                in_string = False
                current.append(char, DELIMITER_STYLE)
            else:
                current.append(char, STRING_STYLE)
            continue

        if after_comma:
            after_comma = False
            if char == "\n":
                continue

        if char == '"':
            in_string = True
            current.append(char, DELIMITER_STYLE)
        elif char in "{}[]":
            current.append(char, BRACKET_STYLE)
        elif char == ":":
            current.append(char, COLON_STYLE)
        elif char == ",":
            current.append(char)
            lines.append(current)
            current = Text()
            after_comma = True
        elif char == "\n":
            lines.append(current)
            current = Text()
        else:
            current.append(char)

    if current.plain:
        lines.append(current)
    return lines


def wrap_lines(lines: List[Text], width: Optional[int]) -> List[Text]:
    if not width or width <= 0:
        return lines
    wrapped: List[Text] = []
    for line in lines:
        length = len(line.plain)
        if length <= width:
            wrapped.append(line)
            continue
        wrapped.extend(line.divide(range(width, length, width)))
    return wrapped


class OutputViewer:
    """Renders session output and applies scroll moves against a viewport."""

    def render(self, output: Any = None, error: Optional[str] = None, width: Optional[int] = None) -> List[Text]:
        if output is not None:
            lines = highlight_json(format_json(output))
        elif error:
            lines = [Text(error, style=ERROR_STYLE)]
        else:
            lines = []
        return wrap_lines(lines, width)

    def render_state(self, state: SessionState) -> List[Text]:
        return self.render(state.output, state.error_text, state.viewport_width)

    def content_height(self, state: SessionState) -> int:
        # Recomputed on every call so it always reflects the latest response
        return len(self.render_state(state))

    def max_scroll(self, state: SessionState, viewport_height: Optional[int] = None) -> int:
        height = state.viewport_height if viewport_height is None else viewport_height
        return max(0, self.content_height(state) - max(0, height))

    def scroll(self, state: SessionState, delta: int, viewport_height: Optional[int] = None) -> int:
        """Move by a line (+-1) or a page (+-10, one viewport height) and clamp."""
        height = state.viewport_height if viewport_height is None else viewport_height
        limit = self.max_scroll(state, height)
        if delta in (PAGE_STEP, -PAGE_STEP):
            step = max(0, height) * (1 if delta > 0 else -1)
        else:
            step = delta
        state.scroll_offset = min(max(0, state.scroll_offset + step), limit)
        return state.scroll_offset

    def scroll_home(self, state: SessionState) -> int:
        state.scroll_offset = 0
        return 0

    def scroll_end(self, state: SessionState, viewport_height: Optional[int] = None) -> int:
        state.scroll_offset = self.max_scroll(state, viewport_height)
        return state.scroll_offset

    def visible_lines(self, state: SessionState) -> List[Text]:
        lines = self.render_state(state)
        limit = max(0, len(lines) - max(0, state.viewport_height))
        offset = min(max(0, state.scroll_offset), limit)
        if state.viewport_height <= 0:
            return lines[offset:]
        return lines[offset: offset + state.viewport_height]
