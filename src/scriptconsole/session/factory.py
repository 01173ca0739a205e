"""Build sessions from configuration."""

from __future__ import annotations

from scriptconsole.config.settings import ClientConfig
from scriptconsole.session.controller import ScriptSession


async def open_session(config: ClientConfig | None = None) -> ScriptSession:
    """Connect a websocket session to the configured endpoint.

    The returned session is open and processing events; release it with
    ``await session.close()`` or use it as an async context manager.

    Raises:
        TransportError: If the endpoint cannot be reached.
    """
    from scriptconsole.transport.websocket import WebSocketTransport

    if config is None:
        config = ClientConfig()
    transport = WebSocketTransport(config.endpoint_url, open_timeout=config.connect_timeout)
    session = ScriptSession(transport, close_timeout=config.close_timeout)
    await session.open()
    return session
