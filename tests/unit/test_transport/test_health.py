"""Tests for the endpoint health probe."""

from __future__ import annotations

import pytest

from scriptconsole.errors import TransportError
from scriptconsole.transport.health import check_health, health_url


class TestHealthUrl:
    @pytest.mark.parametrize(
        ("endpoint", "expected"),
        [
            ("ws://localhost:3002/ws/compiler", "http://localhost:3002/health"),
            ("wss://example.com/ws/compiler", "https://example.com/health"),
            ("http://10.0.0.5:8000/", "http://10.0.0.5:8000/health"),
        ],
    )
    def test_mapping(self, endpoint: str, expected: str) -> None:
        assert health_url(endpoint) == expected

    @pytest.mark.parametrize("endpoint", ["ftp://host/x", "localhost:3002", ""])
    def test_unsupported(self, endpoint: str) -> None:
        with pytest.raises(TransportError):
            health_url(endpoint)


class TestCheckHealth:
    @pytest.mark.asyncio
    async def test_unreachable_endpoint(self) -> None:
        with pytest.raises(TransportError, match="Health check"):
            await check_health("ws://127.0.0.1:1/ws/compiler", timeout=2.0)
