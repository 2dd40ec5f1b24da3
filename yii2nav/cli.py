"""CLI entrypoint for yii2nav."""

import logging
import sys
from pathlib import Path

import click
from lsprotocol import types as lsp
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import ConfigError, ServerConfig, find_config, load_config
from .logs import configure_logging
from .resolver import resolve_render_call
from .views import classify_view_name, view_candidates, locate_view

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(__version__, prog_name="yii2nav")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Settings file (defaults to the nearest yii2nav.toml / [tool.yii2nav])",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Log level (overrides the settings file)",
)
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Also write logs to this file",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, log_level: str | None, log_file: Path | None) -> None:
    """yii2nav - jump from Yii2 render() calls to their view files."""
    ctx.ensure_object(dict)
    if config_path is None:
        config_path = find_config(Path.cwd())

    try:
        config = load_config(config_path).with_overrides(log_level=log_level, log_file=log_file)
    except ConfigError as e:
        raise click.ClickException(str(e))

    configure_logging(config.log_level, config.log_file)
    if config_path is not None:
        logger.debug(f"Loaded settings from {config_path}")
    ctx.obj["config"] = config


# -----------------------------------------------------------------------------
# LSP server command
# -----------------------------------------------------------------------------


@cli.command("lsp")
@click.option(
    "--transport",
    type=click.Choice(["stdio", "tcp"]),
    default="stdio",
    show_default=True,
    help="Transport method (stdio for editors, tcp for debugging)",
)
@click.option("--stdio", "stdio_flag", is_flag=True, help="Same as --transport stdio")
@click.option("--host", type=str, default=None, help="TCP host (default 127.0.0.1)")
@click.option("--port", type=int, default=None, help="TCP port (default 2087)")
@click.option(
    "--client-log/--no-client-log",
    default=None,
    help="Mirror logs to the editor as window/logMessage",
)
@click.option(
    "--sync",
    type=click.Choice(["incremental", "full"]),
    default=None,
    help="Advertised text document sync kind",
)
@click.pass_context
def lsp_command(
    ctx: click.Context,
    transport: str,
    stdio_flag: bool,
    host: str | None,
    port: int | None,
    client_log: bool | None,
    sync: str | None,
) -> None:
    """Start the language server.

    For editors, configure the server command as:

        yii2nav lsp --stdio

    For debugging with a TCP connection:

        yii2nav lsp --transport tcp --port 2087
    """
    from .lsp import start_server

    if stdio_flag:
        transport = "stdio"

    try:
        config: ServerConfig = ctx.obj["config"].with_overrides(
            tcp_host=host,
            tcp_port=port,
            client_log=client_log,
            text_document_sync=sync,
        )
    except ConfigError as e:
        raise click.BadParameter(str(e))

    try:
        start_server(config, transport=transport)
    except Exception:
        logger.exception("Language server stopped on an unrecoverable error")
        sys.exit(1)


# -----------------------------------------------------------------------------
# Debugging commands
# -----------------------------------------------------------------------------


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("line", type=click.IntRange(min=0))
@click.argument("character", type=click.IntRange(min=0))
@click.pass_context
def resolve(ctx: click.Context, file: Path, line: int, character: int) -> None:
    """Resolve the render() call at LINE:CHARACTER (zero-based) of FILE.

    Prints the view file the editor would open.
    """
    config: ServerConfig = ctx.obj["config"]
    err = Console(stderr=True)

    try:
        text = file.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise click.ClickException(f"Cannot read {file}: {e}")

    match = resolve_render_call(text, lsp.Position(line=line, character=character))
    if match is None:
        err.print(f"No render() call at {line}:{character}", style="yellow")
        sys.exit(1)

    view_path = locate_view(file.resolve(), match.view_name, config.view_extension)
    if view_path is None:
        err.print(f"View '{match.view_name}' not found", style="red")
        sys.exit(1)

    click.echo(str(view_path))


@cli.command()
@click.argument("controller", type=click.Path(dir_okay=False, path_type=Path))
@click.argument("view_name", type=str)
@click.pass_context
def candidates(ctx: click.Context, controller: Path, view_name: str) -> None:
    """List the files VIEW_NAME may refer to from CONTROLLER, in probe order."""
    config: ServerConfig = ctx.obj["config"]
    console = Console()

    kind, _ = classify_view_name(view_name)
    paths = view_candidates(controller.resolve(), view_name, config.view_extension)

    table = Table(title=f"{view_name} ({kind.value} view)")
    table.add_column("#", justify="right")
    table.add_column("Candidate", overflow="fold")
    table.add_column("Exists", no_wrap=True)

    winner_seen = False
    for i, path in enumerate(paths, start=1):
        exists = path.exists()
        mark = ""
        if exists:
            mark = "yes" if winner_seen else "yes (selected)"
            winner_seen = True
        table.add_row(str(i), str(path), mark)

    console.print(table)


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
