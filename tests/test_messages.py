"""Tests for JSON-RPC envelope decoding."""

from __future__ import annotations

import pytest

from yii2nav.lsp.messages import (
    INVALID_REQUEST,
    InvalidMessage,
    MessageParseError,
    Notification,
    Request,
    Response,
    ResponseError,
    decode_message,
)


def test_request() -> None:
    msg = decode_message(b'{"jsonrpc":"2.0","id":7,"method":"shutdown"}')
    assert msg == Request(id=7, method="shutdown")


def test_notification_has_no_id() -> None:
    msg = decode_message(b'{"jsonrpc":"2.0","method":"initialized","params":{}}')
    assert msg == Notification(method="initialized", params={})


def test_string_ids_are_kept() -> None:
    msg = decode_message(b'{"jsonrpc":"2.0","id":"abc","method":"initialize","params":{}}')
    assert isinstance(msg, Request) and msg.id == "abc"


def test_incoming_response() -> None:
    assert decode_message(b'{"jsonrpc":"2.0","id":3,"result":null}') == Response(id=3, result=None)


def test_incoming_error_response() -> None:
    msg = decode_message(b'{"jsonrpc":"2.0","id":3,"error":{"code":-32601,"message":"nope"}}')
    assert msg == Response(id=3, error=ResponseError(code=-32601, message="nope"))


@pytest.mark.parametrize("payload", [b"{not json", b"\xff\xfe", b""])
def test_unparsable_payload(payload: bytes) -> None:
    with pytest.raises(MessageParseError):
        decode_message(payload)


def test_non_object_is_invalid_without_id() -> None:
    with pytest.raises(InvalidMessage) as exc:
        decode_message(b"[1, 2]")
    assert exc.value.id is None
    assert not exc.value.answerable


def test_fractional_id_is_answerable_without_id() -> None:
    with pytest.raises(InvalidMessage) as exc:
        decode_message(b'{"jsonrpc":"2.0","id":1.5,"method":"shutdown"}')
    assert exc.value.id is None
    assert exc.value.answerable


def test_bad_method_keeps_id() -> None:
    with pytest.raises(InvalidMessage) as exc:
        decode_message(b'{"jsonrpc":"2.0","id":4,"method":42}')
    assert exc.value.id == 4


def test_missing_method_and_result() -> None:
    with pytest.raises(InvalidMessage) as exc:
        decode_message(b'{"jsonrpc":"2.0","id":5}')
    assert exc.value.id == 5


def test_response_serialization_keeps_null_result() -> None:
    assert Response(id=1, result=None).to_dict() == {"jsonrpc": "2.0", "id": 1, "result": None}


def test_error_response_serialization() -> None:
    d = Response(id=1, error=ResponseError(INVALID_REQUEST, "bad")).to_dict()
    assert d == {"jsonrpc": "2.0", "id": 1, "error": {"code": -32600, "message": "bad"}}
    assert "result" not in d
