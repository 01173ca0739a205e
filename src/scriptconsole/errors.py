"""Exception hierarchy for scriptconsole."""

from __future__ import annotations


class ScriptConsoleError(Exception):
    """Base error for all scriptconsole errors."""


class TransportError(ScriptConsoleError):
    """Raised when the connection cannot be opened or a frame cannot be sent."""

    def __init__(self, message: str, url: str = "") -> None:
        super().__init__(message)
        self.url = url


class ProtocolError(ScriptConsoleError):
    """Raised when a client message cannot be decoded by the endpoint."""

    def __init__(self, message: str, raw: str = "") -> None:
        super().__init__(message)
        self.raw = raw


class ScriptRunError(ScriptConsoleError):
    """Raised by the endpoint runner when a script cannot be started or fed."""
