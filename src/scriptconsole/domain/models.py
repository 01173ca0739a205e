"""Core domain models for the scriptconsole system.

These models represent the data flowing over a session connection:
the session state machine's states, the messages a client sends to the
execution endpoint, the frames the endpoint sends back, and the
lifecycle events a transport reports to its session.
"""

from __future__ import annotations

import enum
import re
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictStr

SCRIPT_NAME_PATTERN = re.compile(r"[\w-]+\.py", re.ASCII)


def is_valid_script_name(name: str) -> bool:
    """Whether ``name`` is a bare script filename like ``run.py``.

    Only letters, digits, underscore and hyphen are allowed before the
    ``.py`` suffix, so path separators never reach the endpoint.
    """
    return SCRIPT_NAME_PATTERN.fullmatch(name) is not None


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class SessionState(str, enum.Enum):
    """State of a script session from the client's point of view."""

    IDLE = "idle"  # Connected, no run in progress
    RUNNING = "running"  # START sent, waiting for output or closed
    TERMINATED = "terminated"  # Run finished or connection closed
    ERRORED = "errored"  # Transport reported an error


# ---------------------------------------------------------------------------
# Client -> Endpoint messages (discriminated union)
# ---------------------------------------------------------------------------


class StartMessage(BaseModel):
    """Ask the endpoint to begin executing a script."""

    model_config = ConfigDict(frozen=True)

    type: Literal["START"] = "START"
    script: str = Field(description="Script filename, e.g. 'run.py'")


class InputMessage(BaseModel):
    """One line of stdin for the running script."""

    model_config = ConfigDict(frozen=True)

    type: Literal["INPUT"] = "INPUT"
    input: str = Field(description="Text forwarded as a line of stdin")


class TerminateMessage(BaseModel):
    """Ask the endpoint to forcibly stop the running script."""

    model_config = ConfigDict(frozen=True)

    type: Literal["TERMINATE"] = "TERMINATE"


ClientMessage = Annotated[
    Union[StartMessage, InputMessage, TerminateMessage],
    Field(discriminator="type"),
]


# ---------------------------------------------------------------------------
# Endpoint -> Client frames
# ---------------------------------------------------------------------------


class EndpointFrame(BaseModel):
    """A frame sent by the execution endpoint.

    Every field is optional and independent: a single frame may carry
    output, an error, the closed flag, any combination of them, or
    nothing at all.
    """

    model_config = ConfigDict(frozen=True)

    output: StrictStr | None = Field(default=None, description="Chunk of script stdout/stderr")
    error: StrictStr | None = Field(default=None, description="Out-of-band execution error")
    closed: StrictBool | None = Field(default=None, description="True once the run has ended")

    @property
    def is_empty(self) -> bool:
        return not self.output and not self.error and not self.closed


class MalformedFrame(BaseModel):
    """A payload from the endpoint that could not be decoded."""

    model_config = ConfigDict(frozen=True)

    raw: str = Field(description="The payload exactly as received")
    reason: str = Field(description="Why decoding failed")


# ---------------------------------------------------------------------------
# Transport events (discriminated union)
# ---------------------------------------------------------------------------


class TransportOpened(BaseModel):
    """The connection to the endpoint is established."""

    model_config = ConfigDict(frozen=True)

    event_type: Literal["opened"] = "opened"
    url: str = Field(default="", description="Address of the endpoint")


class MessageReceived(BaseModel):
    """A text frame arrived from the endpoint."""

    model_config = ConfigDict(frozen=True)

    event_type: Literal["message"] = "message"
    data: str = Field(description="Raw frame payload")


class TransportFailed(BaseModel):
    """The connection reported an error."""

    model_config = ConfigDict(frozen=True)

    event_type: Literal["failed"] = "failed"
    message: str = Field(default="", description="Description of the failure")


class TransportClosed(BaseModel):
    """The connection is closed; no more events follow."""

    model_config = ConfigDict(frozen=True)

    event_type: Literal["closed"] = "closed"
    code: int | None = Field(default=None, description="Close code, if the peer sent one")
    reason: str = Field(default="", description="Close reason, if the peer sent one")


TransportEvent = Annotated[
    Union[TransportOpened, MessageReceived, TransportFailed, TransportClosed],
    Field(discriminator="event_type"),
]
