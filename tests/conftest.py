"""Shared test fixtures for the scriptconsole test suite.

Provides an in-memory transport that records every frame a session
sends and lets tests inject transport events, plus sessions and script
directories built on top of it.
"""

from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import AsyncIterator
from pathlib import Path

import pytest
import pytest_asyncio

from scriptconsole.domain.models import (
    MessageReceived,
    TransportClosed,
    TransportEvent,
    TransportOpened,
)
from scriptconsole.errors import TransportError
from scriptconsole.session.controller import ScriptSession
from scriptconsole.transport.base import Transport


class FakeTransport(Transport):
    """In-memory transport: records sends, replays pushed events."""

    def __init__(self, is_open: bool = True) -> None:
        self._open = is_open
        self._queue: asyncio.Queue[TransportEvent] = asyncio.Queue()
        self.sent: list[str] = []
        self.fail_send = False
        self.connect_calls = 0

    @property
    def is_open(self) -> bool:
        return self._open

    @property
    def url(self) -> str:
        return "fake://endpoint"

    @property
    def sent_messages(self) -> list[dict]:
        return [json.loads(s) for s in self.sent]

    async def connect(self) -> None:
        self.connect_calls += 1
        self._open = True

    async def disconnect(self) -> None:
        if self._open:
            self._open = False
            self.push(TransportClosed(code=1000))

    async def send(self, data: str) -> None:
        if not self._open or self.fail_send:
            raise TransportError("fake send failure", url=self.url)
        self.sent.append(data)

    def push(self, event: TransportEvent) -> None:
        self._queue.put_nowait(event)

    def push_frame(self, payload: dict | str) -> None:
        data = payload if isinstance(payload, str) else json.dumps(payload)
        self.push(MessageReceived(data=data))

    async def events(self) -> AsyncIterator[TransportEvent]:
        yield TransportOpened(url=self.url)
        while True:
            event = await self._queue.get()
            yield event
            if isinstance(event, TransportClosed):
                return


# ---------------------------------------------------------------------------
# Session Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def fake_transport() -> FakeTransport:
    """An open in-memory transport."""
    return FakeTransport()


@pytest.fixture
def session(fake_transport: FakeTransport) -> ScriptSession:
    """An IDLE session over the fake transport (no pump task running)."""
    return ScriptSession(fake_transport)


@pytest_asyncio.fixture
async def running_session(session: ScriptSession) -> ScriptSession:
    """A session that has already sent START for run.py."""
    assert await session.start("run.py")
    return session


# ---------------------------------------------------------------------------
# Endpoint Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def scripts_dir(tmp_path: Path) -> Path:
    """A directory of small scripts for the endpoint to run."""
    (tmp_path / "hello.py").write_text('print("hello")\n')
    (tmp_path / "echo.py").write_text(
        'name = input()\n'
        'print("got " + name)\n'
    )
    (tmp_path / "forever.py").write_text(
        'import time\n'
        'print("started", flush=True)\n'
        'while True:\n'
        '    time.sleep(0.1)\n'
    )
    (tmp_path / "fails.py").write_text(
        'import sys\n'
        'print("before")\n'
        'print(1 / 0)\n'
    )
    return tmp_path


@pytest.fixture
def python_command() -> str:
    """The interpreter running the tests, used to run endpoint scripts."""
    return sys.executable
