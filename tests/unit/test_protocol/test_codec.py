"""Tests for the JSON wire codec."""

from __future__ import annotations

import json

import pytest

from scriptconsole.domain.models import (
    EndpointFrame,
    InputMessage,
    MalformedFrame,
    StartMessage,
    TerminateMessage,
)
from scriptconsole.errors import ProtocolError
from scriptconsole.protocol.codec import (
    decode_client_message,
    decode_endpoint_frame,
    encode_client_message,
    encode_endpoint_frame,
)


class TestEncodeClientMessage:
    def test_start(self) -> None:
        assert encode_client_message(StartMessage(script="run.py")) == '{"type":"START","script":"run.py"}'

    def test_input(self) -> None:
        assert encode_client_message(InputMessage(input="hello world")) == '{"type":"INPUT","input":"hello world"}'

    def test_terminate(self) -> None:
        assert encode_client_message(TerminateMessage()) == '{"type":"TERMINATE"}'

    def test_input_escaping(self) -> None:
        wire = encode_client_message(InputMessage(input='say "hi"\n'))
        assert json.loads(wire) == {"type": "INPUT", "input": 'say "hi"\n'}

    def test_encoding_is_deterministic(self) -> None:
        msg = StartMessage(script="a.py")
        assert encode_client_message(msg) == encode_client_message(StartMessage(script="a.py"))


class TestDecodeEndpointFrame:
    def test_output(self) -> None:
        frame = decode_endpoint_frame('{"output": "hello\\n"}')
        assert frame == EndpointFrame(output="hello\n")

    def test_error(self) -> None:
        frame = decode_endpoint_frame('{"error": "division by zero"}')
        assert isinstance(frame, EndpointFrame)
        assert frame.error == "division by zero"

    def test_closed(self) -> None:
        frame = decode_endpoint_frame('{"closed": true}')
        assert isinstance(frame, EndpointFrame)
        assert frame.closed is True

    def test_all_fields(self) -> None:
        frame = decode_endpoint_frame('{"output": "a", "error": "b", "closed": true}')
        assert frame == EndpointFrame(output="a", error="b", closed=True)

    def test_empty_object_is_legal(self) -> None:
        frame = decode_endpoint_frame("{}")
        assert isinstance(frame, EndpointFrame)
        assert frame.is_empty

    def test_unknown_fields_ignored(self) -> None:
        frame = decode_endpoint_frame('{"output": "x", "pid": 12}')
        assert frame == EndpointFrame(output="x")

    def test_bytes_payload(self) -> None:
        frame = decode_endpoint_frame(b'{"output": "x"}')
        assert frame == EndpointFrame(output="x")

    @pytest.mark.parametrize(
        "payload",
        [
            "not json",
            "{",
            "",
            "[1, 2]",
            '"just a string"',
            "42",
            '{"output": 5}',
            '{"closed": "yes"}',
        ],
    )
    def test_malformed_payloads_do_not_raise(self, payload: str) -> None:
        result = decode_endpoint_frame(payload)
        assert isinstance(result, MalformedFrame)
        assert result.raw == payload
        assert result.reason


class TestEndpointSideCodec:
    def test_decode_start(self) -> None:
        msg = decode_client_message('{"type": "START", "script": "run.py"}')
        assert msg == StartMessage(script="run.py")

    def test_decode_terminate(self) -> None:
        assert decode_client_message('{"type": "TERMINATE"}') == TerminateMessage()

    @pytest.mark.parametrize(
        "payload",
        ["nope", '{"type": "KILL"}', '{"type": "START"}', '{"script": "run.py"}'],
    )
    def test_decode_invalid_raises(self, payload: str) -> None:
        with pytest.raises(ProtocolError) as exc_info:
            decode_client_message(payload)
        assert exc_info.value.raw == payload

    def test_encode_frame_omits_unset_fields(self) -> None:
        assert encode_endpoint_frame(EndpointFrame(output="hi")) == '{"output":"hi"}'
        assert encode_endpoint_frame(EndpointFrame(closed=True)) == '{"closed":true}'
