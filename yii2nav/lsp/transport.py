"""
Byte pumps between a byte stream and a server session.

Reads are chunked and handed to the session as they arrive; the loop ends
on end of input or when the session exits the process.
"""

from __future__ import annotations

import logging
import socket
import sys
from typing import BinaryIO, Callable

from ..config import ServerConfig
from .server import Yii2LanguageServer, create_server

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


def serve_stream(server: Yii2LanguageServer, read: Callable[[int], bytes]) -> None:
    """Feed chunks from `read` into `server` until end of input."""
    while True:
        chunk = read(CHUNK_SIZE)
        if not chunk:
            logger.info("Input stream closed")
            return
        server.feed(chunk)


def _run(server: Yii2LanguageServer, config: ServerConfig, read: Callable[[int], bytes]) -> None:
    if config.client_log:
        server.enable_client_log()
    try:
        serve_stream(server, read)
    finally:
        server.disable_client_log()


def start_io(
    config: ServerConfig,
    stdin: BinaryIO | None = None,
    stdout: BinaryIO | None = None,
) -> None:
    """Serve one session over stdin/stdout."""
    stdin = stdin or sys.stdin.buffer
    stdout = stdout or sys.stdout.buffer

    def write(data: bytes) -> None:
        stdout.write(data)
        stdout.flush()

    read = getattr(stdin, "read1", stdin.read)
    logger.info("Starting yii2nav language server on stdio")
    _run(create_server(write, config), config, read)


def start_tcp(config: ServerConfig, host: str, port: int) -> None:
    """Accept a single client over TCP and serve it (for debugging)."""
    with socket.create_server((host, port)) as listener:
        logger.info(f"Starting yii2nav language server on {host}:{port}")
        conn, addr = listener.accept()
        logger.info(f"Client connected: {addr}")
        with conn:
            _run(create_server(conn.sendall, config), config, conn.recv)
