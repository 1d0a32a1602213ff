from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from base_classes import (
    CommandNotFound,
    Credential,
    RequestFailed,
    ResponseInvalid,
    TransportResponse,
    XrpcProvider,
)
from catalog import find_command
from core.dispatcher import RequestDispatcher, build_query, build_url
from core.session_state import SessionState

STAMP = datetime(2024, 5, 6, 7, 8, 9, tzinfo=timezone.utc)


class FakeProvider(XrpcProvider):
    def __init__(self, response=None, error=None):
        self.response = response or TransportResponse(200, json.dumps({"ok": True}))
        self.error = error
        self.calls = []

    def create_session(self, identifier, password):
        raise NotImplementedError

    def refresh_session(self, refresh_token):
        raise NotImplementedError

    def get(self, url, token=None, accept="application/json"):
        self.calls.append({"url": url, "token": token, "accept": accept})
        if self.error is not None:
            raise self.error
        return self.response


def _state(host="https://pds.example"):
    return SessionState(pds_host=host)


def test_get_profile_url():
    cmd = find_command("app.bsky.actor.getProfile")
    url = build_url("https://bsky.social", cmd, ["alice.test"])
    assert url == "https://bsky.social/xrpc/app.bsky.actor.getProfile?actor=alice.test"


def test_trailing_slash_in_host_is_stripped():
    cmd = find_command("com.atproto.server.describeServer")
    assert build_url("https://pds.example/", cmd, []) == "https://pds.example/xrpc/com.atproto.server.describeServer"


def test_empty_optional_values_are_skipped():
    cmd = find_command("app.bsky.feed.getTimeline")
    assert build_query(cmd, ["50", ""]) == "?limit=50"
    assert build_query(cmd, ["", ""]) == ""
    assert build_query(cmd, ["", "abc"]) == "?cursor=abc"


def test_values_percent_encoded_unless_disabled():
    cmd = find_command("app.bsky.feed.getPostThread")
    uri = "at://did:plc:abc/app.bsky.feed.post/1"
    assert build_query(cmd, [uri, "6", "80"]) == "?uri=at%3A%2F%2Fdid%3Aplc%3Aabc%2Fapp.bsky.feed.post%2F1&depth=6&parentHeight=80"
    assert build_query(cmd, [uri, "6", "80"], encode=False) == f"?uri={uri}&depth=6&parentHeight=80"


def test_success_sets_output_and_marks_history():
    provider = FakeProvider(TransportResponse(200, json.dumps({"did": "did:plc:x"})))
    state = _state()
    state.set_credential(Credential("A", "R"))
    state.set_error("stale")
    result = RequestDispatcher(provider).execute(state, "com.atproto.identity.resolveHandle", ["alice.test"])

    assert result == {"did": "did:plc:x"}
    assert state.output == {"did": "did:plc:x"}
    assert state.error is None
    entry = state.history[0]
    assert entry.success is True
    assert entry.url == "https://pds.example/xrpc/com.atproto.identity.resolveHandle?handle=alice.test"
    assert entry.params == ["alice.test"]
    assert provider.calls[0]["token"] == "A"
    assert provider.calls[0]["accept"] == "application/json"


def test_unauthenticated_call_sends_no_token():
    provider = FakeProvider()
    RequestDispatcher(provider).execute(_state(), "com.atproto.server.describeServer", [])
    assert provider.calls[0]["token"] is None


def test_http_400_marks_failed_and_formats_error():
    provider = FakeProvider(TransportResponse(400, "bad request"))
    state = _state()
    with pytest.raises(RequestFailed) as ei:
        RequestDispatcher(provider).execute(state, "app.bsky.actor.getProfile", ["alice.test"])

    assert ei.value.status == 400
    assert state.history[0].success is False
    assert "400" in state.error_text
    assert "bad request" in state.error_text
    assert state.error_text == "Request failed (400): bad request"
    assert state.output is None


def test_transport_failure_is_request_failed():
    provider = FakeProvider(error=RequestFailed.from_transport("connection refused"))
    state = _state()
    with pytest.raises(RequestFailed):
        RequestDispatcher(provider).execute(state, "app.bsky.actor.getProfile", ["bob"])
    assert state.error_text == "Request failed: connection refused"
    assert state.history[0].success is False


def test_unparsable_body_is_response_invalid():
    provider = FakeProvider(TransportResponse(200, "<html>"))
    state = _state()
    with pytest.raises(ResponseInvalid):
        RequestDispatcher(provider).execute(state, "app.bsky.actor.getProfile", ["bob"])
    assert state.error_text.startswith("Failed to parse response:")
    assert state.history[0].success is False


def test_unknown_method_aborts_before_history():
    provider = FakeProvider()
    state = _state()
    with pytest.raises(CommandNotFound):
        RequestDispatcher(provider).execute(state, "app.bsky.nope", [])
    assert state.error_text == "Command not found: app.bsky.nope"
    assert state.history.is_empty
    assert provider.calls == []


def test_history_recorded_before_call_resolves():
    state = _state()
    seen = {}

    class PeekingProvider(FakeProvider):
        def get(self, url, token=None, accept="application/json"):
            entry = state.history[0]
            seen["url"] = entry.url
            seen["success"] = entry.success
            return super().get(url, token, accept)

    RequestDispatcher(PeekingProvider()).execute(state, "app.bsky.actor.getProfile", ["alice.test"])
    assert seen == {"url": "https://pds.example/xrpc/app.bsky.actor.getProfile?actor=alice.test", "success": False}
    assert state.history[0].success is True


def test_errors_are_stamped_with_injected_clock():
    dispatcher = RequestDispatcher(FakeProvider(TransportResponse(500, "boom")), clock=lambda: STAMP)
    state = _state()
    with pytest.raises(RequestFailed):
        dispatcher.execute(state, "app.bsky.actor.getProfile", ["bob"])
    assert state.error.created_at == STAMP

    with pytest.raises(CommandNotFound):
        dispatcher.execute(state, "app.bsky.nope", [])
    assert state.error.created_at == STAMP
    assert state.expire_message(STAMP) is False
