"""JSON wire codec for session messages.

Client messages are tagged objects (``{"type": "START", "script": ...}``).
Endpoint frames are objects with optional ``output``, ``error`` and
``closed`` fields. Decoding on the client side never raises: anything
that is not a well-formed frame comes back as a ``MalformedFrame``.
"""

from __future__ import annotations

import logging

from pydantic import TypeAdapter, ValidationError

from scriptconsole.domain.models import (
    ClientMessage,
    EndpointFrame,
    MalformedFrame,
)
from scriptconsole.errors import ProtocolError

logger = logging.getLogger(__name__)

_client_message_adapter: TypeAdapter[ClientMessage] = TypeAdapter(ClientMessage)


def encode_client_message(message: ClientMessage) -> str:
    """Serialize a client message to its single compact JSON form."""
    return message.model_dump_json()


def decode_endpoint_frame(raw: str | bytes) -> EndpointFrame | MalformedFrame:
    """Parse a payload received from the endpoint.

    Returns a ``MalformedFrame`` instead of raising when the payload is
    not JSON, not an object, or has fields of the wrong type.
    """
    try:
        return EndpointFrame.model_validate_json(raw)
    except ValidationError as e:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        reason = e.errors()[0]["msg"]
        logger.warning("Malformed frame from endpoint: %s", reason)
        return MalformedFrame(raw=text, reason=reason)


def decode_client_message(raw: str | bytes) -> ClientMessage:
    """Parse a message received from a client.

    Raises:
        ProtocolError: If the payload is not a known client message.
    """
    try:
        return _client_message_adapter.validate_json(raw)
    except ValidationError as e:
        text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
        raise ProtocolError(f"Invalid client message: {e.errors()[0]['msg']}", raw=text) from e


def encode_endpoint_frame(frame: EndpointFrame) -> str:
    """Serialize an endpoint frame, leaving out unset fields."""
    return frame.model_dump_json(exclude_none=True)
