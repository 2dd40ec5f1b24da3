"""
JSON-RPC 2.0 message envelopes.

Incoming payloads decode into one of three frozen dataclasses:
- Request - has ``method`` and ``id``; must be answered exactly once
- Notification - has ``method`` and no ``id``
- Response - has ``id`` and ``result`` or ``error``
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

JSONRPC_VERSION = "2.0"

# JSON-RPC error codes
INVALID_REQUEST = -32600
INTERNAL_ERROR = -32603


class Method(str, Enum):
    """Every method the server handles."""

    INITIALIZE = "initialize"
    INITIALIZED = "initialized"
    SHUTDOWN = "shutdown"
    EXIT = "exit"
    DEFINITION = "textDocument/definition"
    DID_OPEN = "textDocument/didOpen"
    DID_CHANGE = "textDocument/didChange"
    DID_CLOSE = "textDocument/didClose"


@dataclass(frozen=True)
class ResponseError:
    code: int
    message: str
    data: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data is not None:
            d["data"] = self.data
        return d


@dataclass(frozen=True)
class Request:
    id: int | str
    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        return d


@dataclass(frozen=True)
class Notification:
    method: str
    params: Any = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": self.method}
        if self.params is not None:
            d["params"] = self.params
        return d


@dataclass(frozen=True)
class Response:
    id: int | str | None
    result: Any = None
    error: ResponseError | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize; ``result`` is always present unless this is an error."""
        d: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "id": self.id}
        if self.error is not None:
            d["error"] = self.error.to_dict()
        else:
            d["result"] = self.result
        return d


Message = Union[Request, Notification, Response]


class MessageParseError(ValueError):
    """Payload is not UTF-8 encoded JSON."""


class InvalidMessage(ValueError):
    """Payload is JSON but not a JSON-RPC envelope.

    ``id`` holds the request id when one could be read. ``answerable`` is
    set when the caller should still reply, with a null id if none was
    usable.
    """

    def __init__(self, reason: str, id: int | str | None = None, answerable: bool = False):
        super().__init__(reason)
        self.id = id
        self.answerable = answerable or id is not None


def _is_id(value: Any) -> bool:
    return isinstance(value, (int, str)) and not isinstance(value, bool)


def decode_message(payload: bytes) -> Message:
    """
    Decode a framed payload into a typed message.

    Raises:
        MessageParseError: payload is not valid UTF-8 JSON
        InvalidMessage: payload is JSON but not a well-formed envelope
    """
    try:
        data = json.loads(payload.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MessageParseError(str(e)) from e

    if not isinstance(data, dict):
        raise InvalidMessage(f"expected a JSON object, got {type(data).__name__}")

    msg_id = data.get("id")
    if "id" in data and not _is_id(msg_id) and msg_id is not None:
        raise InvalidMessage(f"invalid id: {msg_id!r}", answerable=True)

    method = data.get("method")
    if method is not None:
        if not isinstance(method, str):
            raise InvalidMessage(f"invalid method: {method!r}", id=msg_id)
        if "id" in data and msg_id is not None:
            return Request(id=msg_id, method=method, params=data.get("params"))
        return Notification(method=method, params=data.get("params"))

    if "result" in data or "error" in data:
        error = data.get("error")
        if isinstance(error, dict):
            code = error.get("code")
            return Response(
                id=msg_id,
                error=ResponseError(
                    code=code if isinstance(code, int) else INTERNAL_ERROR,
                    message=str(error.get("message", "")),
                    data=error.get("data"),
                ),
            )
        return Response(id=msg_id, result=data.get("result"))

    raise InvalidMessage("message has neither method nor result", id=msg_id)
