"""Pytest configuration and fixtures."""

import json
import logging
from pathlib import Path
from typing import Any

import pytest

from yii2nav.logs import LOGGER_NAME
from yii2nav.lsp.framing import MessageFramer
from yii2nav.lsp.server import Yii2LanguageServer
from yii2nav.paths import path_to_uri

SITE_CONTROLLER = """<?php
namespace app\\controllers;

class SiteController extends Controller
{
    public function actionIndex()
    {
        return $this->render('index', array());
    }

    public function actionError()
    {
        return $this->render("//site/error");
    }

    public function actionMissing()
    {
        return $this->render('nowhere');
    }
}
"""


@pytest.fixture(autouse=True)
def _restore_package_logger():
    """Undo handler changes made by configure_logging / client logging."""
    logger = logging.getLogger(LOGGER_NAME)
    handlers, level, propagate = list(logger.handlers), logger.level, logger.propagate
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


def write(path: Path, text: str = "<?php\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def frame(message: dict[str, Any]) -> bytes:
    """Frame a message the way an editor would."""
    body = json.dumps(message, ensure_ascii=False).encode("utf-8")
    return f"Content-Length: {len(body)}\r\n\r\n".encode("ascii") + body


def unframe(data: bytes) -> list[dict[str, Any]]:
    framer = MessageFramer()
    framer.accumulate(data)
    return [json.loads(p) for p in framer.drain()]


@pytest.fixture
def basic_app(tmp_path: Path) -> Path:
    """A basic-template application with controllers and views."""
    app = tmp_path / "app"
    write(app / "controllers" / "SiteController.php", SITE_CONTROLLER)
    write(app / "controllers" / "PostController.php")
    write(app / "views" / "site" / "index.php")
    write(app / "views" / "site" / "error.php")
    write(app / "views" / "post" / "view.php")
    write(app / "views" / "view.php")
    return app


@pytest.fixture
def site_controller(basic_app: Path) -> Path:
    return basic_app / "controllers" / "SiteController.php"


class Client:
    """Drives a server session and collects what it writes."""

    def __init__(self, server_factory):
        self.output = bytearray()
        self.server: Yii2LanguageServer = server_factory(self.output.extend)
        self._next_id = 0

    def messages(self) -> list[dict[str, Any]]:
        return unframe(bytes(self.output))

    def responses(self) -> list[dict[str, Any]]:
        return [m for m in self.messages() if "method" not in m]

    def request(self, method: str, params: Any = None) -> dict[str, Any]:
        self._next_id += 1
        msg_id = self._next_id
        message: dict[str, Any] = {"jsonrpc": "2.0", "id": msg_id, "method": method}
        if params is not None:
            message["params"] = params
        self.server.feed(frame(message))
        answers = [m for m in self.responses() if m.get("id") == msg_id]
        assert len(answers) == 1
        return answers[0]

    def notify(self, method: str, params: Any = None) -> None:
        message: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            message["params"] = params
        self.server.feed(frame(message))

    def definition(self, path: Path, line: int, character: int) -> Any:
        return self.request(
            "textDocument/definition",
            {
                "textDocument": {"uri": path_to_uri(path)},
                "position": {"line": line, "character": character},
            },
        )["result"]


@pytest.fixture
def client() -> Client:
    return Client(lambda write: Yii2LanguageServer(write))
