"""Input events consumed by the session loop and the designated key map."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional, Union

# Key names follow Textual's naming ("enter", "pageup", "ctrl+c", ...)
EDITING_KEYS = frozenset({"backspace", "left", "right", "home", "end"})


@dataclass(frozen=True)
class KeyEvent:
    key: str
    character: Optional[str] = None

    @property
    def is_printable(self) -> bool:
        return self.character is not None and len(self.character) == 1 and self.character.isprintable()

    @classmethod
    def char(cls, character: str) -> "KeyEvent":
        return cls(key=character, character=character)


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


Event = Union[KeyEvent, Tick, Resize]


@dataclass(frozen=True)
class KeyMap:
    quit: str = "ctrl+c"
    history: str = "ctrl+r"
    copy: str = "c"
    export: str = "e"
    refresh: str = "ctrl+t"

    @classmethod
    def from_config(cls, config: Any) -> "KeyMap":
        defaults = cls()
        values = {}
        for name in ("quit", "history", "copy", "export", "refresh"):
            raw = config.get_option('KEYS', name, getattr(defaults, name)) if config is not None else None
            values[name] = str(raw).strip().lower() if raw else getattr(defaults, name)
        return cls(**values)

    def matches(self, event: KeyEvent, name: str) -> bool:
        binding = getattr(self, name)
        if len(binding) == 1:
            return event.character == binding
        return event.key == binding
