"""Domain models for scriptconsole.

This package contains the session states, protocol messages, endpoint
frames and transport events used throughout the system. All models use
Pydantic v2 for validation and serialization.
"""

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

__all__ = [
    "ClientMessage",
    "EndpointFrame",
    "InputMessage",
    "MalformedFrame",
    "MessageReceived",
    "SessionState",
    "StartMessage",
    "TerminateMessage",
    "TransportClosed",
    "TransportEvent",
    "TransportFailed",
    "TransportOpened",
    "is_valid_script_name",
]
