"""Bounded, newest-first log of dispatched calls."""

from __future__ import annotations

import itertools
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Deque, Iterator, List, Optional

MAX_HISTORY = 100


@dataclass
class HistoryEntry:
    method: str
    url: str
    params: List[str]
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    success: bool = False
    ticket: int = 0


class HistoryLog:
    """Fixed-capacity ring: index 0 is the most recent entry.

    Entries are only ever mutated by ``mark_outcome``, which back-fills the
    success flag once the matching request resolves.
    """

    def __init__(self, capacity: int = MAX_HISTORY) -> None:
        self.capacity = max(1, int(capacity))
        self._entries: Deque[HistoryEntry] = deque()
        self._tickets = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[HistoryEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> HistoryEntry:
        return self._entries[index]

    def get(self, index: Optional[int]) -> Optional[HistoryEntry]:
        if index is None or index < 0 or index >= len(self._entries):
            return None
        return self._entries[index]

    @property
    def is_empty(self) -> bool:
        return not self._entries

    def record(self, method: str, url: str, params: List[str]) -> HistoryEntry:
        entry = HistoryEntry(method=method, url=url, params=list(params), ticket=next(self._tickets))
        self._entries.appendleft(entry)
        while len(self._entries) > self.capacity:
            self._entries.pop()
        return entry

    def mark_outcome(self, method: str, success: bool, ticket: Optional[int] = None) -> Optional[HistoryEntry]:
        """Set ``success`` on the newest entry for ``method`` (or the one holding ``ticket``)."""
        for entry in self._entries:
            if ticket is not None:
                if entry.ticket != ticket:
                    continue
            elif entry.method != method:
                continue
            entry.success = success
            return entry
        return None

    def snapshot(self) -> List[HistoryEntry]:
        return list(self._entries)
