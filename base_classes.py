"""
Abstract base classes and error types for xrpc-console components.

These classes define the contracts the console core consumes from its
collaborators: the XRPC provider (authentication + transport), the
clipboard and the file exporter.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Any, Dict


@dataclass(frozen=True)
class Credential:
    """Access/refresh token pair. Always stored and cleared together."""

    access_token: str
    refresh_token: str


@dataclass
class TransportResponse:
    status: int
    body: str
    content_type: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class XrpcProvider(ABC):
    """
    Abstract class for XRPC handlers
    """

    @abstractmethod
    def create_session(self, identifier: str, password: str) -> Credential:
        pass

    @abstractmethod
    def refresh_session(self, refresh_token: str) -> Credential:
        pass

    @abstractmethod
    def get(self, url: str, token: Optional[str] = None, accept: str = "application/json") -> TransportResponse:
        pass


class ClipboardTarget(ABC):
    """
    Abstract class for clipboard sinks
    """

    @abstractmethod
    def set_text(self, text: str) -> bool:
        pass


class ExportTarget(ABC):
    """
    Abstract class for response exporters
    """

    @abstractmethod
    def write(self, filename: str, text: str) -> str:
        """Write ``text`` and return the path that was written."""
        pass


# --- Errors ---------------------------------------------------------------


class ConsoleError(Exception):
    def __init__(self, user_message: str, *, recoverable: bool = True, debug_info: Optional[Dict[str, Any]] = None):
        super().__init__(user_message)
        self.user_message = user_message
        self.recoverable = recoverable
        self.debug_info = debug_info or {}


class AuthenticationFailure(ConsoleError):
    """Login failed. ``reason`` is one of 'credentials', 'transport' or 'response'."""

    def __init__(self, user_message: str, *, reason: str = "credentials", status: Optional[int] = None):
        super().__init__(user_message, debug_info={'reason': reason, 'status': status})
        self.reason = reason
        self.status = status


class CommandNotFound(ConsoleError):
    def __init__(self, method: str):
        super().__init__(f"Command not found: {method}")
        self.method = method


class RequestFailed(ConsoleError):
    def __init__(self, user_message: str, *, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(user_message, debug_info={'status': status})
        self.status = status
        self.body = body

    @classmethod
    def from_status(cls, status: int, body: str) -> "RequestFailed":
        return cls(f"Request failed ({status}): {body}", status=status, body=body)

    @classmethod
    def from_transport(cls, message: str) -> "RequestFailed":
        return cls(f"Request failed: {message}")


class ResponseInvalid(ConsoleError):
    pass


class TerminalFailure(ConsoleError):
    def __init__(self, user_message: str):
        super().__init__(user_message, recoverable=False)


class ClipboardFailure(ConsoleError):
    pass


class ExportFailure(ConsoleError):
    pass
