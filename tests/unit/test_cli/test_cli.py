"""Tests for the command-line interface."""

from __future__ import annotations

import asyncio
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from scriptconsole.cli import _health, _request_terminate, _run_script, main, parse_args
from scriptconsole.config.settings import Settings
from scriptconsole.domain.models import SessionState
from scriptconsole.errors import TransportError


class TestParseArgs:
    def test_run_command(self) -> None:
        args = parse_args(["run", "test.py", "--url", "ws://host:1/ws"])
        assert args.command == "run"
        assert args.script == "test.py"
        assert args.url == "ws://host:1/ws"

    def test_global_options(self) -> None:
        args = parse_args(["-v", "-c", "conf.yaml", "health"])
        assert args.verbose is True
        assert args.config == Path("conf.yaml")
        assert args.command == "health"

    def test_endpoint_command(self) -> None:
        args = parse_args(["endpoint", "--scripts-dir", "/tmp/scripts"])
        assert args.scripts_dir == Path("/tmp/scripts")

    def test_no_command(self) -> None:
        assert parse_args([]).command is None


class TestRunScript:
    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = parse_args(["run", "test.py"])
        with patch(
            "scriptconsole.session.factory.open_session",
            AsyncMock(side_effect=TransportError("Failed to connect")),
        ):
            code = await _run_script(Settings(), args)
        assert code == 1
        assert "Failed to connect" in capsys.readouterr().err

    @pytest.mark.asyncio
    async def test_invalid_script_name(
        self, fake_transport, capsys: pytest.CaptureFixture[str]
    ) -> None:
        from scriptconsole.session.controller import ScriptSession

        session = ScriptSession(fake_transport)
        args = parse_args(["run", "bad name.py"])
        with patch("scriptconsole.session.factory.open_session", AsyncMock(return_value=session)):
            code = await _run_script(Settings(), args)
        assert code == 1
        assert "Invalid filename format." in capsys.readouterr().err
        assert fake_transport.sent == []


class TestRequestTerminate:
    @pytest.mark.asyncio
    async def test_task_is_held_until_done(self, running_session, fake_transport) -> None:
        pending: set[asyncio.Task] = set()
        task = _request_terminate(running_session, pending)
        assert task in pending
        await task
        await asyncio.sleep(0)
        assert pending == set()
        assert running_session.state is SessionState.TERMINATED
        assert fake_transport.sent_messages[-1] == {"type": "TERMINATE"}


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = parse_args(["health"])
        status = {"status": "ok", "active_sessions": 2}
        with patch("scriptconsole.transport.health.check_health", AsyncMock(return_value=status)):
            code = await _health(Settings(), args)
        assert code == 0
        out = capsys.readouterr().out
        assert "ok" in out
        assert "2" in out

    @pytest.mark.asyncio
    async def test_unhealthy(self, capsys: pytest.CaptureFixture[str]) -> None:
        args = parse_args(["health", "--url", "ws://127.0.0.1:1/ws"])
        with patch(
            "scriptconsole.transport.health.check_health",
            AsyncMock(side_effect=TransportError("Health check failed")),
        ):
            code = await _health(Settings(), args)
        assert code == 1


class TestMain:
    def test_no_command_prints_help(self) -> None:
        with pytest.raises(SystemExit):
            main([])

    def test_endpoint_serves_configured_host_and_port(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.chdir(tmp_path)
        config = tmp_path / "scriptconsole.yaml"
        config.write_text("endpoint:\n  host: 0.0.0.0\n  port: 4100\n  path: /ws/run\n")
        with patch("uvicorn.run") as run:
            main(["-c", str(config), "endpoint", "--scripts-dir", str(tmp_path)])
        app = run.call_args.args[0]
        assert run.call_args.kwargs == {"host": "0.0.0.0", "port": 4100}
        assert app.state.scripts_dir == tmp_path
        assert any(getattr(route, "path", None) == "/ws/run" for route in app.routes)
