"""Connection transports for scriptconsole sessions.

Public API:
    Transport -- Abstract base class
    WebSocketTransport -- Websocket client transport
"""

from scriptconsole.transport.base import Transport

__all__ = ["Transport", "WebSocketTransport"]


def __getattr__(name: str) -> type:
    """Lazy import for concrete implementations that require external deps."""
    if name == "WebSocketTransport":
        from scriptconsole.transport.websocket import WebSocketTransport
        return WebSocketTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
