"""Abstract base class for session transports.

A transport is the single full-duplex channel a session talks to its
execution endpoint over. Outgoing frames are sent with ``send()``;
everything that happens on the connection (open, incoming frames,
errors, close) is reported as an ordered stream of events from
``events()``.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator

from scriptconsole.domain.models import TransportEvent

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract interface for a session's connection to an endpoint.

    Example usage::

        async with WebSocketTransport("ws://localhost:3002/ws/compiler") as t:
            await t.send('{"type":"START","script":"run.py"}')
            async for event in t.events():
                print(event)
    """

    @property
    @abstractmethod
    def is_open(self) -> bool:
        """Whether frames can currently be sent."""
        ...

    @property
    def url(self) -> str:
        """Address of the endpoint, for logging and error messages."""
        return ""

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection.

        Raises:
            TransportError: If the connection cannot be established.
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection. Safe to call multiple times."""
        ...

    @abstractmethod
    async def send(self, data: str) -> None:
        """Send one text frame without waiting for any reply.

        Raises:
            TransportError: If the connection is not open or the send fails.
        """
        ...

    @abstractmethod
    def events(self) -> AsyncIterator[TransportEvent]:
        """Yield connection events in delivery order.

        The stream starts with ``TransportOpened`` and ends with exactly
        one ``TransportClosed``. A ``TransportFailed`` precedes the close
        when the connection ends abnormally.
        """
        ...

    async def __aenter__(self) -> Transport:
        await self.connect()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.disconnect()
