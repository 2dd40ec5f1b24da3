"""
LSP server implementation for Yii2 view navigation.

Provides:
- Go to definition from ``$this->render('view')`` to the view file
- Open-document tracking so unsaved buffers resolve correctly
- Editor-side log mirroring through ``window/logMessage``
"""

from __future__ import annotations

import logging
import os
import sys
from enum import Enum
from pathlib import Path
from typing import Any, Callable

from lsprotocol import types as lsp
from lsprotocol.converters import get_converter
from pygls.workspace import Workspace

from .. import __version__
from ..config import ServerConfig
from ..logs import LOGGER_NAME, ClientLogHandler
from ..paths import is_file_uri, path_to_uri, uri_to_path
from ..resolver import resolve_render_call
from ..views import locate_view
from .framing import MessageFramer, encode_message
from .messages import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    InvalidMessage,
    Message,
    MessageParseError,
    Method,
    Notification,
    Request,
    Response,
    ResponseError,
    decode_message,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "yii2nav"

_SYNC_KINDS = {
    "incremental": lsp.TextDocumentSyncKind.Incremental,
    "full": lsp.TextDocumentSyncKind.Full,
}


class SessionState(str, Enum):
    """Lifecycle of the single client session."""

    UNINITIALIZED = "uninitialized"
    INITIALIZED = "initialized"
    SHUTTING_DOWN = "shutting_down"
    EXITED = "exited"


class Yii2LanguageServer:
    """Language server session: framing, dispatch and lifecycle.

    Bytes go in through :meth:`feed`; encoded responses and notifications go
    out through the ``write`` callable.
    """

    def __init__(self, write: Callable[[bytes], None], config: ServerConfig | None = None):
        self.config = config or ServerConfig()
        self.state = SessionState.UNINITIALIZED
        self.root_path: str | None = None
        self.sync_kind = _SYNC_KINDS[self.config.text_document_sync]
        self.workspace = Workspace(None, sync_kind=self.sync_kind)
        self._write = write
        self._framer = MessageFramer()
        self._converter = get_converter()
        self._client_log: ClientLogHandler | None = None
        self._open_uris: set[str] = set()

        self._handlers: dict[Method, Callable[[Any], Any]] = {
            Method.INITIALIZE: self._initialize,
            Method.INITIALIZED: self._initialized,
            Method.SHUTDOWN: self._shutdown,
            Method.EXIT: self._exit,
            Method.DEFINITION: self._definition,
            Method.DID_OPEN: self._did_open,
            Method.DID_CHANGE: self._did_change,
            Method.DID_CLOSE: self._did_close,
        }
        missing = [m.value for m in Method if m not in self._handlers]
        if missing:
            raise RuntimeError(f"No handler for: {', '.join(missing)}")

    # -- I/O ---------------------------------------------------------------

    def feed(self, data: bytes) -> None:
        """Accept a chunk of input and handle every message it completes."""
        self._framer.accumulate(data)
        while True:
            payload = self._framer.try_extract()
            if payload is None:
                return
            self.handle_payload(payload)

    def send(self, message: Message) -> None:
        self._write(encode_message(message.to_dict()))

    def notify(self, method: str, params: Any = None) -> None:
        """Send a notification to the client."""
        self.send(Notification(method=method, params=params))

    def enable_client_log(self, level: int = logging.INFO) -> ClientLogHandler:
        """Mirror package log records to the client as window/logMessage."""
        if self._client_log is None:
            self._client_log = ClientLogHandler(self.notify, level)
            self._client_log.setFormatter(logging.Formatter("%(message)s"))
            logging.getLogger(LOGGER_NAME).addHandler(self._client_log)
        return self._client_log

    def disable_client_log(self) -> None:
        if self._client_log is not None:
            logging.getLogger(LOGGER_NAME).removeHandler(self._client_log)
            self._client_log = None

    # -- dispatch ----------------------------------------------------------

    def handle_payload(self, payload: bytes) -> None:
        """Decode one framed payload and route it."""
        try:
            message = decode_message(payload)
        except MessageParseError as e:
            # no id can be trusted from an unparsable payload
            logger.error(f"Error parsing message: {e}")
            return
        except InvalidMessage as e:
            if not e.answerable:
                logger.error(f"Dropping invalid message: {e}")
                return
            logger.error(f"Invalid request {e.id!r}: {e}")
            self.send(Response(id=e.id, error=ResponseError(INVALID_REQUEST, str(e))))
            return
        self.route(message)

    def route(self, message: Message) -> None:
        """Dispatch a decoded message to its handler."""
        if isinstance(message, Response):
            logger.debug(f"Ignoring response for id {message.id!r}")
            return

        try:
            method = Method(message.method)
        except ValueError:
            if isinstance(message, Request):
                logger.debug(f"Unknown request {message.method}; answering null")
                self.send(Response(id=message.id, result=None))
            else:
                logger.debug(f"Ignoring notification {message.method}")
            return

        handler = self._handlers[method]
        if method is Method.EXIT and isinstance(message, Request):
            # the handler ends the process, so answer first
            self.send(Response(id=message.id, result=None))
            handler(message.params)
            return

        if isinstance(message, Notification):
            try:
                handler(message.params)
            except Exception:
                logger.exception(f"Error handling {message.method}")
            return

        try:
            result = handler(message.params)
        except Exception as e:
            logger.exception(f"Error handling {message.method}")
            self.send(Response(id=message.id, error=ResponseError(INTERNAL_ERROR, str(e))))
            return
        self.send(Response(id=message.id, result=result))

    # -- lifecycle ---------------------------------------------------------

    def _initialize(self, params: Any) -> dict[str, Any]:
        params = params if isinstance(params, dict) else {}
        root_uri = params.get("rootUri")
        if not root_uri:
            folders = params.get("workspaceFolders") or []
            if folders and isinstance(folders[0], dict):
                root_uri = folders[0].get("uri")
        if root_uri:
            self.root_path = uri_to_path(root_uri)
        elif params.get("rootPath"):
            self.root_path = params["rootPath"]
            root_uri = path_to_uri(self.root_path)

        self.workspace = Workspace(root_uri or None, sync_kind=self.sync_kind)
        self._open_uris.clear()
        self.state = SessionState.INITIALIZED
        logger.info(f"Initialize received (root: {self.root_path})")

        capabilities = lsp.ServerCapabilities(
            definition_provider=True,
            text_document_sync=self.sync_kind,
        )
        return {
            "capabilities": self._converter.unstructure(capabilities),
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }

    def _initialized(self, params: Any) -> None:
        logger.info("Yii2 language server initialized successfully!")

    def _shutdown(self, params: Any) -> None:
        self.state = SessionState.SHUTTING_DOWN
        logger.info("Shutdown received")

    def _exit(self, params: Any) -> None:
        self.state = SessionState.EXITED
        logger.info("Exit received")
        sys.exit(0)

    # -- documents ---------------------------------------------------------

    def _did_open(self, params: Any) -> None:
        p = self._converter.structure(params, lsp.DidOpenTextDocumentParams)
        self.workspace.put_text_document(p.text_document)
        self._open_uris.add(p.text_document.uri)

    def _did_change(self, params: Any) -> None:
        p = self._converter.structure(params, lsp.DidChangeTextDocumentParams)
        for change in p.content_changes:
            self.workspace.update_text_document(p.text_document, change)

    def _did_close(self, params: Any) -> None:
        p = self._converter.structure(params, lsp.DidCloseTextDocumentParams)
        self.workspace.remove_text_document(p.text_document.uri)
        self._open_uris.discard(p.text_document.uri)

    def document_text(self, uri: str) -> str | None:
        """Text of an open buffer, else the file on disk, else None."""
        if uri in self._open_uris:
            return self.workspace.get_text_document(uri).source
        if not is_file_uri(uri):
            logger.info(f"Not a file URI: {uri}")
            return None
        try:
            return Path(uri_to_path(uri)).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.info(f"Document not readable: {e}")
            return None

    # -- features ----------------------------------------------------------

    def _definition(self, params: Any) -> dict[str, Any] | None:
        try:
            return self._find_definition(params)
        except Exception:
            logger.exception("Error in definition handler")
            return None

    def _find_definition(self, params: Any) -> dict[str, Any] | None:
        p = self._converter.structure(params, lsp.DefinitionParams)
        uri, position = p.text_document.uri, p.position
        logger.info(f"Definition request received at {position.line}:{position.character}")

        text = self.document_text(uri)
        if text is None:
            return None

        match = resolve_render_call(text, position)
        if match is None:
            logger.info("No render() call found at cursor position")
            return None
        logger.info(f"Found view name: {match.view_name}")

        if not is_file_uri(uri):
            logger.info(f"Cannot resolve views relative to {uri}")
            return None
        controller_path = uri_to_path(uri)
        if not os.path.isabs(controller_path):
            logger.info(f"Controller path is not absolute: {controller_path}")
            return None

        view_path = locate_view(controller_path, match.view_name, self.config.view_extension)
        if view_path is None:
            logger.info("View file not found")
            return None

        view_uri = path_to_uri(view_path)
        logger.info(f"Returning URI: {view_uri}")
        origin = lsp.Position(line=0, character=0)
        location = lsp.Location(uri=view_uri, range=lsp.Range(start=origin, end=origin))
        return self._converter.unstructure(location)


def create_server(
    write: Callable[[bytes], None], config: ServerConfig | None = None
) -> Yii2LanguageServer:
    """Create a server session writing its output through `write`."""
    return Yii2LanguageServer(write, config)


def start_server(config: ServerConfig | None = None, transport: str = "stdio") -> None:
    """Start the LSP server.

    Args:
        config: Server settings
        transport: Transport method ("stdio" or "tcp")
    """
    from .transport import start_io, start_tcp

    config = config or ServerConfig()
    if transport == "stdio":
        start_io(config)
    else:
        # TCP transport for debugging
        start_tcp(config, config.tcp_host, config.tcp_port)
