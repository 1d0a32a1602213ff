"""
Session state for the console.

``SessionState`` is the single mutable aggregate of a console run. It is owned
by the session loop and handed to the controller and dispatcher for the
duration of one event; neither keeps a reference to it between events.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Optional, Tuple, Union

from base_classes import Credential
from catalog import method_names
from core.autocomplete import AutocompleteIndex
from core.history import HistoryLog, MAX_HISTORY
from core.line_editor import LineEditor

DEFAULT_HOST = "https://bsky.social"
MESSAGE_TTL_SECONDS = 5.0


# --- Modes ------------------------------------------------------------------


@dataclass(frozen=True)
class NormalMode:
    """Awaiting the account identifier."""


@dataclass(frozen=True)
class PasswordMode:
    """Awaiting the password for the pending identifier."""


@dataclass(frozen=True)
class CommandMode:
    """Browsing or typing a catalog method."""


@dataclass(frozen=True)
class HistoryMode:
    """Browsing past invocations."""


@dataclass(frozen=True)
class CommandBuilderMode:
    """Sequential parameter wizard for ``method``."""

    method: str
    current_param_index: int = 0
    collected_values: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ViewingResponseMode:
    """Scrolling, copying or exporting the latest response."""


Mode = Union[NormalMode, PasswordMode, CommandMode, HistoryMode, CommandBuilderMode, ViewingResponseMode]


def mode_name(mode: Mode) -> str:
    return type(mode).__name__[: -len("Mode")]


# --- Messages -----------------------------------------------------------------


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class SessionMessage:
    """Transient status line; errors and info share the slot."""

    text: str
    created_at: datetime
    level: str = "error"

    def expired(self, now: datetime, ttl: float = MESSAGE_TTL_SECONDS) -> bool:
        return (now - self.created_at).total_seconds() >= ttl


# --- State ----------------------------------------------------------------------


@dataclass
class SessionState:
    pds_host: str = DEFAULT_HOST
    mode: Mode = field(default_factory=NormalMode)
    editor: LineEditor = field(default_factory=LineEditor)
    completion: AutocompleteIndex = field(default_factory=lambda: AutocompleteIndex(method_names()))
    history: HistoryLog = field(default_factory=lambda: HistoryLog(MAX_HISTORY))
    credential: Optional[Credential] = None
    output: Optional[Any] = None
    error: Optional[SessionMessage] = None
    identifier: Optional[str] = None
    selected_index: Optional[int] = None
    scroll_offset: int = 0
    viewport_height: int = 0
    viewport_width: Optional[int] = None
    quit: bool = False

    # --- credential ---------------------------------------------------------
    @property
    def is_authenticated(self) -> bool:
        return self.credential is not None

    @property
    def access_token(self) -> Optional[str]:
        return self.credential.access_token if self.credential else None

    @property
    def refresh_token(self) -> Optional[str]:
        return self.credential.refresh_token if self.credential else None

    def set_credential(self, credential: Credential) -> None:
        self.credential = credential

    def clear_credential(self) -> None:
        self.credential = None

    # --- messages -----------------------------------------------------------
    def set_message(self, text: str, level: str = "error", now: Optional[datetime] = None) -> SessionMessage:
        self.error = SessionMessage(text=text, created_at=now or utcnow(), level=level)
        return self.error

    def set_error(self, text: str, now: Optional[datetime] = None) -> SessionMessage:
        return self.set_message(text, "error", now)

    def set_info(self, text: str, now: Optional[datetime] = None) -> SessionMessage:
        return self.set_message(text, "info", now)

    def clear_error(self) -> None:
        self.error = None

    def expire_message(self, now: Optional[datetime] = None, ttl: float = MESSAGE_TTL_SECONDS) -> bool:
        if self.error is not None and self.error.expired(now or utcnow(), ttl):
            self.error = None
            return True
        return False

    @property
    def error_text(self) -> Optional[str]:
        return self.error.text if self.error else None
