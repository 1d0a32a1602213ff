"""
Request dispatcher: method + ordered values -> authenticated XRPC GET.

The dispatcher owns the whole life of one call: it validates the method
against the catalog, builds the URL, records the history entry before the
network round trip, attaches the bearer token and classifies the outcome.
State is updated before any error is raised so callers only need to log.
"""

from __future__ import annotations

import json
import time
from datetime import datetime
from typing import Any, Callable, List, Optional, Sequence
from urllib.parse import quote

from base_classes import (
    CommandNotFound,
    ConsoleError,
    RequestFailed,
    ResponseInvalid,
    XrpcProvider,
)
from catalog import XrpcCommand, find_command
from core.session_state import SessionState, utcnow
from utils.logging_utils import LoggingHandler

XRPC_PREFIX = "/xrpc/"


def build_query(command: XrpcCommand, values: Sequence[str], encode: bool = True) -> str:
    """Join declared parameters in order; empty optional values are skipped."""
    pairs: List[str] = []
    for idx, param in enumerate(command.parameters):
        if idx >= len(values):
            break
        value = values[idx]
        if value == "" and param.optional:
            continue
        if encode:
            value = quote(value, safe="")
        pairs.append(f"{param.name}={value}")
    return ("?" + "&".join(pairs)) if pairs else ""


def build_url(host: str, command: XrpcCommand, values: Sequence[str], encode: bool = True) -> str:
    return f"{host.rstrip('/')}{XRPC_PREFIX}{command.method}{build_query(command, values, encode)}"


class RequestDispatcher:
    def __init__(
        self,
        provider: XrpcProvider,
        logger: Optional[LoggingHandler] = None,
        encode_query: bool = True,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.provider = provider
        self.logger = logger or LoggingHandler(None)
        self.encode_query = encode_query
        self.clock = clock

    def execute(self, state: SessionState, method: str, values: Sequence[str]) -> Any:
        """Run one call and store its outcome on ``state``.

        Returns the parsed JSON on success. On failure the message is stored as
        the session error, the history entry is marked failed and the
        ``ConsoleError`` is raised.
        """
        state.output = None
        state.scroll_offset = 0

        command = find_command(method)
        if command is None:
            err = CommandNotFound(method)
            state.set_error(err.user_message, now=self.clock())
            self.logger.dispatch_done({'method': method, 'ok': False, 'error': err.user_message})
            raise err

        url = build_url(state.pds_host, command, values, self.encode_query)
        entry = state.history.record(method, url, list(values))
        self.logger.history_event('history_record', {'method': method, 'ticket': entry.ticket, 'size': len(state.history)})
        self.logger.dispatch_start({'method': method, 'url': url, 'ticket': entry.ticket, 'authenticated': state.is_authenticated})

        started = time.monotonic()
        try:
            response = self.provider.get(url, token=state.access_token, accept=command.encoding)
            if not response.ok:
                raise RequestFailed.from_status(response.status, response.body)
            try:
                result = json.loads(response.body)
            except ValueError as e:
                raise ResponseInvalid(f"Failed to parse response: {e}")
        except ConsoleError as e:
            state.history.mark_outcome(method, False, ticket=entry.ticket)
            state.set_error(e.user_message, now=self.clock())
            self.logger.dispatch_done({
                'method': method,
                'ticket': entry.ticket,
                'ok': False,
                'status': getattr(e, 'status', None),
                'error': e.user_message,
                'elapsed_ms': int((time.monotonic() - started) * 1000),
            })
            raise

        state.history.mark_outcome(method, True, ticket=entry.ticket)
        state.output = result
        state.clear_error()
        self.logger.dispatch_done({
            'method': method,
            'ticket': entry.ticket,
            'ok': True,
            'status': response.status,
            'elapsed_ms': int((time.monotonic() - started) * 1000),
        })
        self.logger.dispatch_detail('dispatch_body', {'method': method, 'body': response.body})
        return result
