"""Cursor-addressable single-line text buffer shared by every text-entry mode."""

from __future__ import annotations

from typing import Optional

MASK_GLYPH = "•"


class LineEditor:

    def __init__(self, content: str = "") -> None:
        self.content = content
        self.cursor_position = len(content)

    def __len__(self) -> int:
        return len(self.content)

    @property
    def is_empty(self) -> bool:
        return not self.content

    def insert(self, char: str) -> None:
        self.content = self.content[: self.cursor_position] + char + self.content[self.cursor_position :]
        self.cursor_position += len(char)

    def backspace(self) -> bool:
        if self.cursor_position == 0:
            return False
        self.content = self.content[: self.cursor_position - 1] + self.content[self.cursor_position :]
        self.cursor_position -= 1
        return True

    def move_left(self) -> None:
        if self.cursor_position > 0:
            self.cursor_position -= 1

    def move_right(self) -> None:
        if self.cursor_position < len(self.content):
            self.cursor_position += 1

    def move_home(self) -> None:
        self.cursor_position = 0

    def move_end(self) -> None:
        self.cursor_position = len(self.content)

    def set_text(self, text: str) -> None:
        """Replace the buffer and park the cursor at the end."""
        self.content = text
        self.cursor_position = len(text)

    def clear(self) -> None:
        self.content = ""
        self.cursor_position = 0

    def take(self) -> str:
        text = self.content
        self.clear()
        return text

    def masked(self, glyph: str = MASK_GLYPH) -> str:
        return glyph * len(self.content)

    def handle_key(self, key: str, character: Optional[str] = None) -> bool:
        """Apply an editing key. Returns True when the buffer content changed."""
        if character is not None and len(character) == 1 and character.isprintable():
            self.insert(character)
            return True
        if key == "backspace":
            return self.backspace()
        if key == "left":
            self.move_left()
        elif key == "right":
            self.move_right()
        elif key == "home":
            self.move_home()
        elif key == "end":
            self.move_end()
        return False
