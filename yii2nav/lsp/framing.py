"""
Base-protocol framing: ``Content-Length`` headers over a byte stream.

Input arrives in arbitrary chunks; the framer keeps whatever has not been
consumed yet and hands out complete payloads as they become available.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

HEADER_DELIMITER = b"\r\n\r\n"

_CONTENT_LENGTH = re.compile(rb"^content-length[ \t]*:[ \t]*(\d+)[ \t]*\r?$", re.IGNORECASE | re.MULTILINE)


class MessageFramer:
    """Extracts length-prefixed JSON payloads from a growing buffer."""

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._stalled = False

    def __len__(self) -> int:
        return len(self._buffer)

    def accumulate(self, data: bytes) -> None:
        """Append newly received bytes."""
        self._buffer.extend(data)

    def try_extract(self) -> bytes | None:
        """
        Remove and return the next complete payload.

        Returns:
            The payload bytes, or None if the buffer does not hold a full
            message yet. A header block without ``Content-Length`` also
            yields None, and keeps doing so for this buffer.
        """
        header_end = self._buffer.find(HEADER_DELIMITER)
        if header_end == -1:
            return None

        match = _CONTENT_LENGTH.search(bytes(self._buffer[:header_end]))
        if match is None:
            if not self._stalled:
                logger.warning("Header block without Content-Length; input is stalled")
                self._stalled = True
            return None

        body_start = header_end + len(HEADER_DELIMITER)
        body_end = body_start + int(match.group(1))
        if len(self._buffer) < body_end:
            return None

        payload = bytes(self._buffer[body_start:body_end])
        del self._buffer[:body_end]
        return payload

    def drain(self) -> list[bytes]:
        """Extract every complete payload currently buffered."""
        payloads = []
        while True:
            payload = self.try_extract()
            if payload is None:
                return payloads
            payloads.append(payload)


def encode_message(message: dict[str, Any]) -> bytes:
    """Serialize a message and prefix its header.

    The declared length is the UTF-8 byte length of the body.
    """
    body = json.dumps(message, ensure_ascii=False, separators=(",", ":")).encode("utf-8")
    header = f"Content-Length: {len(body)}\r\n\r\n".encode("ascii")
    return header + body
