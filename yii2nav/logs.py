"""
Logging setup for the language server.

Stdout carries the protocol stream, so records go to stderr, an optional
log file, and optionally to the editor as ``window/logMessage``.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any, Callable

from lsprotocol import types as lsp

LOGGER_NAME = "yii2nav"
LOG_FORMAT = "[yii2nav] %(levelname)s %(name)s: %(message)s"
CLIENT_PREFIX = "[yii2nav]"


def configure_logging(level: str = "INFO", log_file: Path | None = None) -> logging.Logger:
    """
    Install stderr (and file) handlers on the package logger.

    Calling it again replaces the handlers it installed before.
    """
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if getattr(handler, "_yii2nav_owned", False):
            logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler._yii2nav_owned = True  # type: ignore[attr-defined]
        logger.addHandler(handler)

    logger.setLevel(level)
    logger.propagate = False
    return logger


def _message_type(levelno: int) -> lsp.MessageType:
    if levelno >= logging.ERROR:
        return lsp.MessageType.Error
    if levelno >= logging.WARNING:
        return lsp.MessageType.Warning
    if levelno >= logging.INFO:
        return lsp.MessageType.Info
    return lsp.MessageType.Log


class ClientLogHandler(logging.Handler):
    """Forward log records to the editor as ``window/logMessage``."""

    def __init__(self, notify: Callable[[str, Any], None], level: int = logging.NOTSET):
        super().__init__(level)
        self._notify = notify
        self._emitting = False

    def emit(self, record: logging.LogRecord) -> None:
        # records logged while sending would recurse
        if self._emitting:
            return
        self._emitting = True
        try:
            self._notify(
                "window/logMessage",
                {
                    "type": _message_type(record.levelno).value,
                    "message": f"{CLIENT_PREFIX} {self.format(record)}",
                },
            )
        except Exception:
            self.handleError(record)
        finally:
            self._emitting = False
