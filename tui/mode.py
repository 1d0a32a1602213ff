"""
ConsoleMode - wires configuration, providers and the session core into the
Textual app and runs it.
"""

from typing import Optional

from base_classes import TerminalFailure, XrpcProvider
from core.controller import ConsoleController, HISTORY_INLINE
from core.dispatcher import RequestDispatcher
from core.events import KeyMap
from core.history import HistoryLog, MAX_HISTORY
from core.output_viewer import OutputViewer
from core.session_loop import DEFAULT_QUEUE_SIZE, SessionLoop
from core.session_state import DEFAULT_HOST, MESSAGE_TTL_SECONDS, SessionState
from providers.mock_provider import MockProvider
from providers.xrpc_provider import DEFAULT_TIMEOUT, HttpXrpcProvider
from tui.utils.clipboard import TerminalClipboard
from utils.export_utils import FileExporter
from utils.logging_utils import LoggingHandler


def build_provider(config) -> XrpcProvider:
    """Pick the provider named by ``[XRPC] provider`` (xrpc or mock)."""
    name = config.get_str('XRPC', 'provider', 'xrpc').strip().lower()
    if name == 'mock':
        return MockProvider()
    host = config.get_str('XRPC', 'host', DEFAULT_HOST)
    timeout = config.get_float('XRPC', 'timeout', DEFAULT_TIMEOUT)
    return HttpXrpcProvider(host, timeout=timeout)


class ConsoleMode:
    """
    Full-screen console mode.

    Builds one ``SessionState`` and the components that act on it, then hands
    the session loop to the Textual app.
    """

    def __init__(self, config, logger: Optional[LoggingHandler] = None, provider: Optional[XrpcProvider] = None):
        self.config = config
        self.logger = logger or LoggingHandler(None)
        self.provider = provider or build_provider(config)
        self.keymap = KeyMap.from_config(config)
        self.clipboard = TerminalClipboard()

        nav = config.get_str('CONSOLE', 'history_navigation', 'mode').strip().lower()
        self.inline_history = nav == HISTORY_INLINE

        self.state = SessionState(
            pds_host=config.get_str('XRPC', 'host', DEFAULT_HOST),
            history=HistoryLog(config.get_int('CONSOLE', 'history_capacity', MAX_HISTORY)),
        )
        self.controller = ConsoleController(
            self.provider,
            dispatcher=RequestDispatcher(
                self.provider,
                self.logger,
                encode_query=config.get_bool('XRPC', 'encode_query', True),
            ),
            viewer=OutputViewer(),
            clipboard=self.clipboard,
            exporter=FileExporter(config.get_str('CONSOLE', 'export_dir', '.')),
            keymap=self.keymap,
            history_navigation=nav,
            logger=self.logger,
        )
        self.loop = SessionLoop(
            self.state,
            self.controller,
            queue_size=config.get_int('CONSOLE', 'queue_size', DEFAULT_QUEUE_SIZE),
            message_ttl=config.get_float('CONSOLE', 'message_ttl', MESSAGE_TTL_SECONDS),
            logger=self.logger,
        )

    def start(self) -> int:
        """Run the app until quit. Returns the exit status."""
        from tui.app import XrpcConsoleApp

        app = XrpcConsoleApp(
            self.loop,
            keymap=self.keymap,
            inline_history=self.inline_history,
            tick_interval=self.config.get_float('CONSOLE', 'tick_interval', 0.1),
            logger=self.logger,
        )
        self.clipboard.primary = app.copy_to_clipboard
        try:
            app.run()
        except Exception as e:
            raise TerminalFailure(str(e)) from e
        if app.fatal_error is not None:
            raise TerminalFailure(str(app.fatal_error)) from app.fatal_error
        return app.return_code or 0
