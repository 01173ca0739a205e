"""Client-side session controller.

``ScriptSession`` owns one transport to an execution endpoint and the
state machine for the runs made over it::

    IDLE --start--> RUNNING --closed/terminate--> TERMINATED
      any --transport error--> ERRORED
      any --transport close--> TERMINATED

User actions (``start``, ``send_input``, ``terminate``) are validated
locally before anything is sent; a rejected action sets ``last_error``
and sends nothing. Everything the transport reports is fed through
``handle_event`` one event at a time by a single pump task, so state and
transcript never see concurrent writers.

Frames that arrive while the session is not RUNNING (for example output
still in flight after a user terminate) are ignored.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from scriptconsole.domain.models import (
    ClientMessage,
    EndpointFrame,
    InputMessage,
    MalformedFrame,
    MessageReceived,
    SessionState,
    StartMessage,
    TerminateMessage,
    TransportClosed,
    TransportEvent,
    TransportFailed,
    TransportOpened,
    is_valid_script_name,
)
from scriptconsole.errors import TransportError
from scriptconsole.protocol.codec import decode_endpoint_frame, encode_client_message
from scriptconsole.transport.base import Transport

logger = logging.getLogger(__name__)

INVALID_NAME_ERROR = "Invalid filename format."
NOT_CONNECTED_ERROR = "WebSocket not connected."
ALREADY_RUNNING_ERROR = "Script is already running."
NOT_IDLE_ERROR = "Session is not idle."
CONNECTION_ERROR = "Connection error, please check server or URL."

INVALID_FRAME_NOTE = "\n[Invalid JSON received]\n"
TERMINATED_NOTE = "\n[Script terminated by user]\n"

OutputListener = Callable[[str], None]
StateListener = Callable[[SessionState], None]


class ScriptSession:
    """One execution session bound to one transport.

    Example usage::

        async with ScriptSession(WebSocketTransport(url)) as session:
            await session.start("run.py")
            await session.send_input("42")
            await session.wait_finished()
            print(session.transcript)
    """

    def __init__(self, transport: Transport, close_timeout: float = 1.0) -> None:
        self._transport: Transport | None = transport
        self._close_timeout = close_timeout
        self._state = SessionState.IDLE
        self._chunks: list[str] = []
        self._last_error: str | None = None
        self._script_name = ""
        self._user_input = ""
        self._pump_task: asyncio.Task[None] | None = None
        self._finished = asyncio.Event()
        self._finished.set()
        self._output_listeners: list[OutputListener] = []
        self._state_listeners: list[StateListener] = []

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is SessionState.RUNNING

    @property
    def transcript(self) -> str:
        """All output received for the current run, as one string."""
        return "".join(self._chunks)

    @property
    def last_error(self) -> str | None:
        return self._last_error

    @property
    def transport(self) -> Transport | None:
        """The owned transport, or None once the connection has closed."""
        return self._transport

    @property
    def is_connected(self) -> bool:
        return self._transport is not None and self._transport.is_open

    # ------------------------------------------------------------------
    # User-editable fields
    # ------------------------------------------------------------------

    @property
    def script_name(self) -> str:
        return self._script_name

    @script_name.setter
    def script_name(self, value: str) -> None:
        self._script_name = value.strip()

    @property
    def user_input(self) -> str:
        return self._user_input

    @user_input.setter
    def user_input(self, value: str) -> None:
        self._user_input = value

    def dismiss_error(self) -> None:
        """Clear the error indicator."""
        self._last_error = None

    # ------------------------------------------------------------------
    # Listeners
    # ------------------------------------------------------------------

    def add_output_listener(self, listener: OutputListener) -> None:
        """Call ``listener(chunk)`` whenever text is appended to the transcript."""
        self._output_listeners.append(listener)

    def add_state_listener(self, listener: StateListener) -> None:
        """Call ``listener(state)`` whenever the session changes state."""
        self._state_listeners.append(listener)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def open(self) -> None:
        """Connect the transport and start processing its events.

        Raises:
            TransportError: If the transport cannot connect.
        """
        if self._transport is None:
            raise TransportError("Session transport is already closed")
        if self._pump_task is not None:
            return
        await self._transport.connect()
        self._pump_task = asyncio.create_task(self._pump(self._transport))

    async def close(self) -> None:
        """Release the session and close its transport."""
        transport = self._transport
        if transport is not None:
            await transport.disconnect()
        task = self._pump_task
        if task is not None and not task.done():
            _, pending = await asyncio.wait({task}, timeout=self._close_timeout)
            if pending:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._pump_task = None
        if self._transport is not None:
            # The pump never saw the close event; apply it here.
            self.handle_event(TransportClosed(reason="session closed"))

    async def wait_finished(self) -> SessionState:
        """Wait until the current run (if any) is no longer RUNNING."""
        await self._finished.wait()
        return self._state

    async def __aenter__(self) -> ScriptSession:
        await self.open()
        return self

    async def __aexit__(self, exc_type: type | None, exc_val: Exception | None, exc_tb: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    async def start(self, script_name: str | None = None) -> bool:
        """Ask the endpoint to run the current script name.

        Returns True if a START frame was sent. On a failed guard the
        reason is left in ``last_error`` and nothing is sent.
        """
        if script_name is not None:
            self.script_name = script_name
        name = self._script_name

        if not is_valid_script_name(name):
            return self._reject(INVALID_NAME_ERROR)
        if not self.is_connected:
            return self._reject(NOT_CONNECTED_ERROR)
        if self._state is SessionState.RUNNING:
            return self._reject(ALREADY_RUNNING_ERROR)
        if self._state is not SessionState.IDLE:
            return self._reject(NOT_IDLE_ERROR)

        self._last_error = None
        self._chunks.clear()
        self._set_state(SessionState.RUNNING)
        logger.info("Starting script %s", name)
        return await self._send(StartMessage(script=name))

    async def send_input(self, text: str | None = None) -> bool:
        """Send the input buffer (or ``text``) as one line of stdin.

        Empty input is silently dropped. Returns True if a frame was sent.
        """
        if text is not None:
            self._user_input = text
        if self._state is not SessionState.RUNNING or not self._user_input:
            return False
        if not self.is_connected:
            return self._reject(NOT_CONNECTED_ERROR)

        line = self._user_input
        self._user_input = ""
        self._last_error = None
        return await self._send(InputMessage(input=line))

    async def terminate(self) -> bool:
        """Ask the endpoint to kill the run and mark it terminated locally.

        Does not wait for the endpoint to confirm. A no-op unless RUNNING.
        """
        if self._state is not SessionState.RUNNING or not self.is_connected:
            return False
        self._append(TERMINATED_NOTE)
        self._set_state(SessionState.TERMINATED)
        logger.info("Terminating script %s", self._script_name)
        return await self._send(TerminateMessage())

    def reset(self) -> bool:
        """Return a finished session to IDLE so the transport can be reused.

        Only a TERMINATED session whose transport is still open can be
        reset. The transcript is kept until the next start.
        """
        if self._state is not SessionState.TERMINATED or not self.is_connected:
            return False
        self._set_state(SessionState.IDLE)
        return True

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    def handle_event(self, event: TransportEvent) -> None:
        """Apply one transport event to the session."""
        if isinstance(event, TransportOpened):
            logger.info("Session connected to %s", event.url or "endpoint")
            self._last_error = None
        elif isinstance(event, MessageReceived):
            self._handle_frame(decode_endpoint_frame(event.data))
        elif isinstance(event, TransportFailed):
            logger.error("Transport error: %s", event.message)
            self._last_error = CONNECTION_ERROR
            self._set_state(SessionState.ERRORED)
        elif isinstance(event, TransportClosed):
            logger.info("Session transport closed (code=%s, reason=%r)", event.code, event.reason)
            self._transport = None
            if self._state is not SessionState.ERRORED:
                self._set_state(SessionState.TERMINATED)

    def _handle_frame(self, frame: EndpointFrame | MalformedFrame) -> None:
        if isinstance(frame, MalformedFrame):
            self._append(INVALID_FRAME_NOTE)
            return
        if self._state is not SessionState.RUNNING:
            if not frame.is_empty:
                logger.debug("Ignoring frame received while %s: %s", self._state.value, frame)
            return
        if frame.output:
            self._append(frame.output)
        if frame.error:
            logger.debug("Endpoint reported error: %s", frame.error)
            self._append(frame.error)
        if frame.closed:
            logger.info("Script %s finished", self._script_name)
            self._set_state(SessionState.TERMINATED)

    async def _pump(self, transport: Transport) -> None:
        try:
            async for event in transport.events():
                self.handle_event(event)
        except Exception as e:
            # A broken event stream ends the session like a transport error.
            logger.exception("Transport event stream failed")
            self.handle_event(TransportFailed(message=str(e) or type(e).__name__))
            self.handle_event(TransportClosed(reason="event stream failed"))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _send(self, message: ClientMessage) -> bool:
        transport = self._transport
        if transport is None:
            return self._reject(NOT_CONNECTED_ERROR)
        try:
            await transport.send(encode_client_message(message))
        except TransportError as e:
            logger.error("Failed to send %s frame: %s", message.type, e)
            self._last_error = CONNECTION_ERROR
            self._set_state(SessionState.ERRORED)
            return False
        return True

    def _reject(self, reason: str) -> bool:
        logger.warning("Rejected action: %s", reason)
        self._last_error = reason
        return False

    def _append(self, chunk: str) -> None:
        self._chunks.append(chunk)
        for listener in self._output_listeners:
            try:
                listener(chunk)
            except Exception:
                logger.exception("Output listener failed")

    def _set_state(self, state: SessionState) -> None:
        if state is self._state:
            return
        logger.debug("Session state %s -> %s", self._state.value, state.value)
        self._state = state
        if state is SessionState.RUNNING:
            self._finished.clear()
        else:
            self._finished.set()
        for listener in self._state_listeners:
            try:
                listener(state)
            except Exception:
                logger.exception("State listener failed")
