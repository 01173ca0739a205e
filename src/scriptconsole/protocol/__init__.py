"""Wire protocol for scriptconsole sessions.

Public API:
    encode_client_message -- START/INPUT/TERMINATE to JSON
    decode_endpoint_frame -- JSON to EndpointFrame or MalformedFrame
    decode_client_message -- endpoint-side parsing of client messages
    encode_endpoint_frame -- endpoint-side serialization of frames
"""

from scriptconsole.protocol.codec import (
    decode_client_message,
    decode_endpoint_frame,
    encode_client_message,
    encode_endpoint_frame,
)

__all__ = [
    "decode_client_message",
    "decode_endpoint_frame",
    "encode_client_message",
    "encode_endpoint_frame",
]
