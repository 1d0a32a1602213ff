"""
TUI (Terminal User Interface) mode for the XRPC console using Textual.

The Textual app is a thin shell: key presses, resizes and ticks are turned into
console events and fed to the SessionLoop, which owns all mode and request logic.
"""

__version__ = "1.0.0"
