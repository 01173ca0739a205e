"""FastAPI websocket server for the reference execution endpoint.

Each websocket connection gets its own ``ScriptRunner``. Client
messages are dispatched as they arrive:

    {"type": "START", "script": "run.py"}  -> start the script
    {"type": "INPUT", "input": "42"}       -> one line of stdin
    {"type": "TERMINATE"}                  -> kill the script

and the runner streams ``{"output": ...}`` frames back, followed by
``{"closed": true}`` when the process exits. Problems with a request
are reported as ``{"error": ...}`` frames and never close the
connection.
"""

from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from pydantic import BaseModel

from scriptconsole.domain.models import (
    EndpointFrame,
    InputMessage,
    StartMessage,
    TerminateMessage,
)
from scriptconsole.endpoint.runner import FrameSink, ScriptRunner
from scriptconsole.errors import ProtocolError, ScriptRunError
from scriptconsole.protocol.codec import decode_client_message, encode_endpoint_frame

logger = logging.getLogger(__name__)


class EndpointStatus(BaseModel):
    status: str = "ok"
    scripts_dir: str = ""
    active_sessions: int = 0


def create_app(
    scripts_dir: Path | str = "scripts",
    path: str = "/ws/compiler",
    python_command: str = "python3",
    kill_timeout: float = 2.0,
) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="scriptconsole Endpoint",
        description="Runs scripts and streams their output over a websocket",
        version="0.1.0",
    )

    app.state.scripts_dir = Path(scripts_dir)
    app.state.active_sessions = 0

    @app.get("/health")
    async def health_check() -> EndpointStatus:
        return EndpointStatus(
            status="ok",
            scripts_dir=str(app.state.scripts_dir),
            active_sessions=app.state.active_sessions,
        )

    @app.websocket(path)
    async def script_session(websocket: WebSocket) -> None:
        await websocket.accept()

        async def emit(frame: EndpointFrame) -> None:
            try:
                await websocket.send_text(encode_endpoint_frame(frame))
            except (WebSocketDisconnect, RuntimeError) as e:
                logger.debug("Dropping frame for closed connection: %s", e)

        runner = ScriptRunner(
            app.state.scripts_dir,
            emit,
            python_command=python_command,
            kill_timeout=kill_timeout,
        )
        app.state.active_sessions += 1
        logger.info("Session opened (%d active)", app.state.active_sessions)
        try:
            while True:
                raw = await websocket.receive_text()
                await _dispatch(runner, raw, emit)
        except WebSocketDisconnect:
            logger.info("Session disconnected")
        finally:
            await runner.stop()
            app.state.active_sessions -= 1

    return app


async def _dispatch(runner: ScriptRunner, raw: str, emit: FrameSink) -> None:
    """Apply one client message to the runner, reporting failures as error frames."""
    try:
        message = decode_client_message(raw)
        if isinstance(message, StartMessage):
            await runner.start(message.script)
        elif isinstance(message, InputMessage):
            await runner.send_input(message.input)
        elif isinstance(message, TerminateMessage):
            await runner.terminate()
    except (ProtocolError, ScriptRunError) as e:
        logger.warning("Request failed: %s", e)
        await emit(EndpointFrame(error=f"Error: {e}\n"))

