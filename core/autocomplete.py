"""Prefix completion over catalog method names."""

from __future__ import annotations

from typing import Iterable, List, Optional


class AutocompleteIndex:
    """Tracks the match list for the current buffer and a cyclable selection.

    Matching is case-sensitive and keeps catalog order. ``index`` is None when
    no cycle is active.
    """

    def __init__(self, methods: Iterable[str]) -> None:
        self._methods: List[str] = list(methods)
        self.matches: List[str] = []
        self.index: Optional[int] = None

    @property
    def active(self) -> bool:
        return self.index is not None

    def recompute(self, buffer: str) -> List[str]:
        if not buffer:
            self.reset()
            return []
        self.matches = [method for method in self._methods if method.startswith(buffer)]
        if not self.matches:
            self.index = None
        elif self.index is None or self.index >= len(self.matches):
            self.index = 0
        return list(self.matches)

    def current(self) -> Optional[str]:
        if self.index is None or not self.matches:
            return None
        return self.matches[self.index]

    def advance(self) -> Optional[int]:
        if self.index is None or not self.matches:
            return None
        self.index = (self.index + 1) % len(self.matches)
        return self.index

    def reset(self) -> None:
        self.matches = []
        self.index = None

    def suggestion_suffix(self, buffer: str) -> str:
        """Untyped remainder of the current match, for ghost-text display."""
        current = self.current()
        if not buffer or not current or not current.startswith(buffer):
            return ""
        return current[len(buffer):]
