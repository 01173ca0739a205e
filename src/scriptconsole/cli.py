"""Command-line interface for scriptconsole.

Provides the main entry point for running a script interactively on a
remote endpoint, or for starting the reference endpoint server.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
import threading
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="scriptconsole",
        description="Run scripts on a remote endpoint and interact with them",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/scriptconsole.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Run a script and attach to it")
    run_parser.add_argument("script", type=str, help="Script filename, e.g. test.py")
    run_parser.add_argument(
        "--url", type=str, default=None,
        help="Endpoint websocket URL (overrides configuration)",
    )

    health_parser = subparsers.add_parser("health", help="Check that the endpoint is reachable")
    health_parser.add_argument(
        "--url", type=str, default=None,
        help="Endpoint websocket URL (overrides configuration)",
    )

    endpoint_parser = subparsers.add_parser("endpoint", help="Start the reference execution endpoint")
    endpoint_parser.add_argument(
        "--scripts-dir", type=Path, default=None,
        help="Directory holding runnable scripts (overrides configuration)",
    )

    return parser.parse_args(argv)


async def _run_script(settings, args) -> int:
    """Connect, start the script, and relay stdin/stdout until it ends."""
    from scriptconsole.errors import TransportError
    from scriptconsole.session.factory import open_session

    config = settings.client
    if args.url:
        config = config.model_copy(update={"endpoint_url": args.url})

    try:
        session = await open_session(config)
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    def write_chunk(chunk: str) -> None:
        sys.stdout.write(chunk)
        sys.stdout.flush()

    session.add_output_listener(write_chunk)
    loop = asyncio.get_running_loop()
    interrupts: set[asyncio.Task] = set()
    try:
        loop.add_signal_handler(signal.SIGINT, _request_terminate, session, interrupts)
    except (NotImplementedError, RuntimeError):
        logger.debug("Signal handlers not supported; Ctrl-C will abort without TERMINATE")

    try:
        if not await session.start(args.script):
            print(f"Error: {session.last_error}", file=sys.stderr)
            return 1
        _forward_stdin(session, loop)
        state = await session.wait_finished()
        logger.info("Session ended in state %s", state.value)
    finally:
        try:
            loop.remove_signal_handler(signal.SIGINT)
        except (NotImplementedError, RuntimeError):
            pass
        await session.close()

    if session.last_error:
        print(f"\nError: {session.last_error}", file=sys.stderr)
        return 1
    return 0


async def _health(settings, args) -> int:
    """Print the endpoint's health status."""
    from scriptconsole.errors import TransportError
    from scriptconsole.transport.health import check_health

    url = args.url or settings.client.endpoint_url
    try:
        status = await check_health(url, timeout=settings.client.connect_timeout)
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    print(f"Endpoint:        {url}")
    print(f"Status:          {status.get('status')}")
    print(f"Active sessions: {status.get('active_sessions')}")
    return 0


def _request_terminate(session, pending: set[asyncio.Task]) -> asyncio.Task:
    """Schedule a TERMINATE and hold the task until it completes."""
    task = asyncio.ensure_future(session.terminate())
    pending.add(task)
    task.add_done_callback(pending.discard)
    return task


def _forward_stdin(session, loop: asyncio.AbstractEventLoop) -> None:
    """Relay stdin lines to the session from a daemon thread."""

    def reader() -> None:
        for line in sys.stdin:
            future = asyncio.run_coroutine_threadsafe(session.send_input(line.rstrip("\n")), loop)
            future.result()

    threading.Thread(target=reader, name="stdin-reader", daemon=True).start()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the scriptconsole CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from scriptconsole.config.settings import load_settings
    from scriptconsole.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "run":
        logger.info("Running %s on %s", args.script, args.url or settings.client.endpoint_url)
        sys.exit(asyncio.run(_run_script(settings, args)))

    elif args.command == "health":
        sys.exit(asyncio.run(_health(settings, args)))

    elif args.command == "endpoint":
        logger.info("Starting endpoint server")
        from scriptconsole.endpoint.server import create_app
        import uvicorn
        ep = settings.endpoint
        app = create_app(
            scripts_dir=args.scripts_dir or ep.scripts_dir,
            path=ep.path,
            python_command=ep.python_command,
            kill_timeout=ep.kill_timeout,
        )
        uvicorn.run(
            app,
            host=ep.host,
            port=ep.port,
        )


if __name__ == "__main__":
    main()
