"""HTTP health probe for an execution endpoint.

The endpoint serves ``GET /health`` on the same host and port as its
websocket route, so the probe URL is derived from the websocket URL.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit, urlunsplit

import httpx

from scriptconsole.errors import TransportError

logger = logging.getLogger(__name__)

_SCHEMES = {"ws": "http", "wss": "https", "http": "http", "https": "https"}


def health_url(endpoint_url: str) -> str:
    """Map ``ws://host:port/any/path`` to ``http://host:port/health``."""
    parts = urlsplit(endpoint_url)
    scheme = _SCHEMES.get(parts.scheme)
    if scheme is None or not parts.netloc:
        raise TransportError(f"Unsupported endpoint URL: {endpoint_url}", url=endpoint_url)
    return urlunsplit((scheme, parts.netloc, "/health", "", ""))


async def check_health(endpoint_url: str, timeout: float = 10.0) -> dict:
    """Fetch the endpoint's health status.

    Raises:
        TransportError: If the endpoint is unreachable or unhealthy.
    """
    url = health_url(endpoint_url)
    try:
        async with httpx.AsyncClient(timeout=timeout) as client:
            resp = await client.get(url)
            resp.raise_for_status()
    except httpx.HTTPError as e:
        raise TransportError(f"Health check {url} failed: {e}", url=endpoint_url) from e
    logger.info("Endpoint at %s is healthy", url)
    return resp.json()
