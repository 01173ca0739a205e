"""Script process runner for the execution endpoint.

Runs one Python script at a time as a subprocess, streams its merged
stdout/stderr back as output frames, forwards input lines to its stdin
and kills it on request. Exactly one closed frame is emitted per run,
after the process has exited and all of its output has been sent.
"""

from __future__ import annotations

import asyncio
import codecs
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from scriptconsole.domain.models import EndpointFrame, is_valid_script_name
from scriptconsole.errors import ScriptRunError

logger = logging.getLogger(__name__)

READ_CHUNK_SIZE = 4096

FrameSink = Callable[[EndpointFrame], Awaitable[None]]


class ScriptRunner:
    """Runs scripts from ``scripts_dir`` on behalf of one connection."""

    def __init__(
        self,
        scripts_dir: Path | str,
        emit: FrameSink,
        python_command: str = "python3",
        kill_timeout: float = 2.0,
    ) -> None:
        self._scripts_dir = Path(scripts_dir)
        self._emit = emit
        self._python_command = python_command
        self._kill_timeout = kill_timeout
        self._process: asyncio.subprocess.Process | None = None
        self._watch_task: asyncio.Task[None] | None = None
        self._script: str | None = None

    @property
    def is_running(self) -> bool:
        return self._watch_task is not None and not self._watch_task.done()

    @property
    def script(self) -> str | None:
        return self._script

    async def start(self, script: str) -> None:
        """Start ``script`` and begin streaming its output.

        Raises:
            ScriptRunError: If the name is invalid, the script does not
                exist, a run is already in progress, or the process
                cannot be spawned.
        """
        if not is_valid_script_name(script):
            raise ScriptRunError(f"Invalid script name: {script!r}")
        if self.is_running:
            raise ScriptRunError(f"Script {self._script} is already running")
        path = self._scripts_dir / script
        if not path.is_file():
            raise ScriptRunError(f"Script not found: {script}")

        try:
            self._process = await asyncio.create_subprocess_exec(
                self._python_command, "-u", str(path),
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
                cwd=str(self._scripts_dir),
            )
        except OSError as e:
            raise ScriptRunError(f"Failed to start {script}: {e}") from e
        if self._process.stdout is None:
            self._process.kill()
            raise ScriptRunError(f"No output pipe for {script}")

        self._script = script
        self._watch_task = asyncio.create_task(self._watch(self._process, self._process.stdout))
        logger.info("Started script %s (pid=%d)", script, self._process.pid)

    async def send_input(self, text: str) -> None:
        """Write ``text`` as one line to the running script's stdin."""
        process = self._process
        if not self.is_running or process is None or process.stdin is None:
            raise ScriptRunError("No script is running")
        try:
            process.stdin.write(text.encode() + b"\n")
            await process.stdin.drain()
        except (BrokenPipeError, ConnectionResetError) as e:
            raise ScriptRunError(f"Failed to write to script: {e}") from e
        logger.debug("Sent input to %s: %s", self._script, text[:50])

    async def terminate(self) -> None:
        """Forcibly stop the running script.

        The closed frame is still sent by the watcher once the process
        has exited.
        """
        process = self._process
        if not self.is_running or process is None:
            raise ScriptRunError("No script is running")
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
            logger.info("Killed script %s (pid=%d)", self._script, process.pid)

    async def stop(self) -> None:
        """Kill any running script and wait for its watcher to finish."""
        if not self.is_running:
            return
        await self.terminate()
        task = self._watch_task
        if task is not None:
            try:
                await asyncio.wait_for(task, timeout=self._kill_timeout)
            except asyncio.TimeoutError:
                logger.warning("Watcher for %s did not finish in time", self._script)
                task.cancel()

    async def _watch(self, process: asyncio.subprocess.Process, stdout: asyncio.StreamReader) -> None:
        """Stream output until EOF, reap the process, then report closed."""
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        while True:
            data = await stdout.read(READ_CHUNK_SIZE)
            if not data:
                break
            text = decoder.decode(data)
            if text:
                await self._emit(EndpointFrame(output=text))
        tail = decoder.decode(b"", final=True)
        if tail:
            await self._emit(EndpointFrame(output=tail))

        returncode = await process.wait()
        logger.info("Script %s exited with code %s", self._script, returncode)
        await self._emit(EndpointFrame(closed=True))
