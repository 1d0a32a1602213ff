"""
Session loop: the single owner of ``SessionState``.

Input events and ticks arrive from two producers (the terminal and a
periodic timer) through one bounded queue. ``pump`` drains whatever is
queued without blocking, hands key events to the controller, applies
resizes and expires the transient message on ticks.
"""

from __future__ import annotations

import queue
from datetime import datetime
from typing import Callable, Optional

from core.controller import ConsoleController
from core.events import Event, KeyEvent, Resize, Tick
from core.session_state import MESSAGE_TTL_SECONDS, SessionState, utcnow
from utils.logging_utils import LoggingHandler

DEFAULT_QUEUE_SIZE = 100


class SessionLoop:
    def __init__(
        self,
        state: SessionState,
        controller: ConsoleController,
        queue_size: int = DEFAULT_QUEUE_SIZE,
        message_ttl: float = MESSAGE_TTL_SECONDS,
        logger: Optional[LoggingHandler] = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.state = state
        self.controller = controller
        self.message_ttl = message_ttl
        self.logger = logger or LoggingHandler(None)
        self.clock = clock
        self.dropped = 0
        self.dirty = True
        self._queue: "queue.Queue[Event]" = queue.Queue(maxsize=max(1, int(queue_size)))

    @property
    def running(self) -> bool:
        return not self.state.quit

    def post(self, event: Event) -> bool:
        """Enqueue without blocking. Returns False when the event was dropped."""
        try:
            self._queue.put_nowait(event)
            return True
        except queue.Full:
            self.dropped += 1
            self.logger.tui_event('event_dropped', {'event': type(event).__name__, 'dropped': self.dropped})
            return False

    def pump(self) -> int:
        """Process every queued event. Returns how many were handled."""
        handled = 0
        while not self.state.quit:
            try:
                event = self._queue.get_nowait()
            except queue.Empty:
                break
            self.step(event)
            handled += 1
        return handled

    def step(self, event: Event) -> None:
        """Apply one event. Sets ``dirty`` when the screen needs a redraw."""
        if isinstance(event, KeyEvent):
            self.controller.handle(self.state, event)
            self.dirty = True
        elif isinstance(event, Tick):
            if self.state.expire_message(self.clock(), self.message_ttl):
                self.logger.tui_detail('message_expired', {})
                self.dirty = True
        elif isinstance(event, Resize):
            self.state.viewport_height = max(0, event.height)
            self.state.viewport_width = max(0, event.width) or None
            # Keep the offset valid for the new viewport
            self.controller.viewer.scroll(self.state, 0)
            self.dirty = True
