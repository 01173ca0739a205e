"""Websocket transport built on the ``websockets`` library."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator

import websockets
from websockets.exceptions import ConnectionClosed, ConnectionClosedError, WebSocketException

from scriptconsole.domain.models import (
    MessageReceived,
    TransportClosed,
    TransportEvent,
    TransportFailed,
    TransportOpened,
)
from scriptconsole.errors import TransportError
from scriptconsole.transport.base import Transport

logger = logging.getLogger(__name__)


class WebSocketTransport(Transport):
    """Talks to an execution endpoint over one websocket connection."""

    def __init__(self, url: str, open_timeout: float = 10.0) -> None:
        self._url = url
        self._open_timeout = open_timeout
        self._ws: websockets.ClientConnection | None = None
        self._open = False

    @property
    def is_open(self) -> bool:
        return self._ws is not None and self._open

    @property
    def url(self) -> str:
        return self._url

    async def connect(self) -> None:
        """Open the websocket connection."""
        try:
            self._ws = await websockets.connect(self._url, open_timeout=self._open_timeout)
        except (OSError, TimeoutError, WebSocketException) as e:
            raise TransportError(f"Failed to connect to {self._url}: {e}", url=self._url) from e
        self._open = True
        logger.info("Connected to endpoint at %s", self._url)

    async def disconnect(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            self._open = False
            await self._ws.close()
            logger.info("Disconnected from endpoint")

    async def send(self, data: str) -> None:
        """Send a text frame."""
        if not self.is_open:
            raise TransportError("Not connected to endpoint", url=self._url)
        try:
            await self._ws.send(data)
        except ConnectionClosed as e:
            self._open = False
            raise TransportError(f"Connection closed while sending: {e}", url=self._url) from e
        logger.debug("Sent frame: %s", data[:100])

    async def events(self) -> AsyncIterator[TransportEvent]:
        """Yield the open event, every incoming frame, then the close."""
        if self._ws is None:
            raise TransportError("Not connected to endpoint", url=self._url)
        ws = self._ws
        yield TransportOpened(url=self._url)
        try:
            async for message in ws:
                if isinstance(message, bytes):
                    message = message.decode("utf-8", errors="replace")
                logger.debug("Received frame: %s", message[:100])
                yield MessageReceived(data=message)
        except ConnectionClosedError as e:
            self._open = False
            logger.warning("Connection to %s failed: %s", self._url, e)
            yield TransportFailed(message=str(e))
            yield _closed_event(e)
            return
        self._open = False
        logger.info("Connection to %s closed", self._url)
        yield TransportClosed(code=ws.close_code, reason=ws.close_reason or "")


def _closed_event(error: ConnectionClosed) -> TransportClosed:
    if error.rcvd is None:
        return TransportClosed()
    return TransportClosed(code=error.rcvd.code, reason=error.rcvd.reason)
