from __future__ import annotations

import os
import subprocess
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir, os.pardir))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from tui.utils.clipboard import ClipboardHelper, TerminalClipboard


class RecordingRunner:
    def __init__(self, fail=False):
        self.fail = fail
        self.calls = []

    def __call__(self, command, check=True, input=None):
        self.calls.append((command, input))
        if self.fail:
            raise subprocess.CalledProcessError(1, command)


def _helper(runner, commands):
    helper = ClipboardHelper(runner=runner)
    helper._iter_fallback_commands = lambda: iter(commands)
    return helper


def test_osc52_primary_wins():
    copied = []
    runner = RecordingRunner()
    outcome = _helper(runner, [("xclip",)]).copy("{}", copied.append)
    assert outcome.success is True
    assert outcome.method == "osc52"
    assert copied == ["{}"]
    assert runner.calls == []


def test_falls_back_to_platform_tool():
    def broken(_text):
        raise RuntimeError("no terminal")

    runner = RecordingRunner()
    outcome = _helper(runner, [("wl-copy",)]).copy("é", broken)
    assert outcome.success is True
    assert outcome.method == "wl-copy"
    assert runner.calls == [(("wl-copy",), "é".encode("utf-8"))]


def test_reports_last_error_when_everything_fails():
    runner = RecordingRunner(fail=True)
    outcome = _helper(runner, [("pbcopy",)]).copy("x")
    assert outcome.success is False
    assert outcome.error.startswith("pbcopy:")


def test_terminal_clipboard_set_text():
    runner = RecordingRunner(fail=True)
    target = TerminalClipboard(primary=None, helper=_helper(runner, []))
    assert target.set_text("x") is False
    assert target.last_outcome.error == "no clipboard tool found"

    copied = []
    target.primary = copied.append
    assert target.set_text("y") is True
    assert copied == ["y"]
