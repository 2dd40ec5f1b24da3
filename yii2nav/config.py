"""
Server settings.

Settings are read from the first of these found while walking up from the
working directory:
- ``yii2nav.toml``
- ``.yii2nav.toml``
- ``pyproject.toml`` with a ``[tool.yii2nav]`` table

CLI options override file values.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any

from .views import DEFAULT_VIEW_EXTENSION

CONFIG_FILENAMES = ("yii2nav.toml", ".yii2nav.toml")
SYNC_KINDS = ("incremental", "full")


class ConfigError(ValueError):
    """A settings file or override holds an unusable value."""


@dataclass(frozen=True)
class ServerConfig:
    log_level: str = "INFO"
    log_file: Path | None = None
    client_log: bool = True  # mirror log records as window/logMessage
    text_document_sync: str = "incremental"
    view_extension: str = DEFAULT_VIEW_EXTENSION
    tcp_host: str = "127.0.0.1"
    tcp_port: int = 2087

    def with_overrides(self, **overrides: Any) -> "ServerConfig":
        """Return a copy with every non-None override applied and validated."""
        values = {k: v for k, v in overrides.items() if v is not None}
        return _validated(replace(self, **values))


def _validated(cfg: ServerConfig) -> ServerConfig:
    level = str(cfg.log_level).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"unknown log_level: {cfg.log_level!r}")

    sync = str(cfg.text_document_sync).lower()
    if sync not in SYNC_KINDS:
        raise ConfigError(f"text_document_sync must be one of {', '.join(SYNC_KINDS)}")

    ext = str(cfg.view_extension)
    if not ext:
        raise ConfigError("view_extension must not be empty")
    if not ext.startswith("."):
        ext = "." + ext

    if not isinstance(cfg.client_log, bool):
        raise ConfigError(f"client_log must be true or false, got {cfg.client_log!r}")

    if not isinstance(cfg.tcp_port, int) or not 0 < cfg.tcp_port < 65536:
        raise ConfigError(f"tcp_port out of range: {cfg.tcp_port!r}")

    log_file = Path(cfg.log_file) if cfg.log_file is not None else None
    return replace(
        cfg,
        log_level=level,
        text_document_sync=sync,
        view_extension=ext,
        log_file=log_file,
    )


def find_config(start: Path) -> Path | None:
    """Find the nearest settings file by walking up from `start`."""
    cur = start.resolve()
    for p in (cur, *cur.parents):
        for name in CONFIG_FILENAMES:
            candidate = p / name
            if candidate.is_file():
                return candidate
        pyproject = p / "pyproject.toml"
        if pyproject.is_file() and _tool_table(pyproject) is not None:
            return pyproject
    return None


def _tool_table(pyproject: Path) -> dict[str, Any] | None:
    import tomllib

    try:
        data = tomllib.loads(pyproject.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return None
    table = data.get("tool", {}).get("yii2nav")
    return table if isinstance(table, dict) else None


def load_config(path: Path | None = None) -> ServerConfig:
    """
    Load settings from a TOML file.

    Args:
        path: Settings file; None means defaults only

    Returns:
        Validated ServerConfig.

    Raises:
        ConfigError: The file cannot be parsed or holds invalid values.
    """
    import tomllib

    if path is None:
        return ServerConfig()

    if path.name == "pyproject.toml":
        data = _tool_table(path)
        if data is None:
            raise ConfigError(f"{path} has no [tool.yii2nav] table")
    else:
        try:
            data = tomllib.loads(path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigError(f"cannot read {path}: {e}") from e

    known = {f.name for f in fields(ServerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"unknown settings in {path}: {', '.join(unknown)}")

    values = dict(data)
    if values.get("log_file"):
        log_file = Path(values["log_file"]).expanduser()
        if not log_file.is_absolute():
            log_file = path.parent / log_file
        values["log_file"] = log_file
    elif "log_file" in values:
        values["log_file"] = None

    return _validated(replace(ServerConfig(), **values))
