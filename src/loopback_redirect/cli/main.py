"""Command line entry point for the loopback redirect listener."""

import webbrowser
from dataclasses import asdict
from pathlib import Path
from typing import Annotated

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from structlog import get_logger

from loopback_redirect._version import __version__
from loopback_redirect.config.settings import LoggingSettings, Settings, get_settings
from loopback_redirect.core.logging import configure_logging
from loopback_redirect.exceptions import ConfigurationError
from loopback_redirect.listener.server import LOOPBACK_HOST, capture_outcome
from loopback_redirect.models import CodeReceived, IoFailure, Outcome, TimedOut


EXIT_IO_FAILURE = 1
EXIT_TIMEOUT = 124

app = typer.Typer(
    name="loopback-redirect",
    help="Capture an OAuth authorization code on a loopback redirect URI",
    no_args_is_help=True,
)

# stdout carries only the code (or JSON); everything else goes to stderr
console = Console(stderr=True)
logger = get_logger(__name__)


@app.callback()
def main_callback(
    ctx: typer.Context,
    log_level: Annotated[
        str | None,
        typer.Option(
            "--log-level",
            help="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
        ),
    ] = None,
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            help="Path to a TOML configuration file",
            dir_okay=False,
        ),
    ] = None,
) -> None:
    """Load settings and configure logging for every command."""
    try:
        settings = get_settings(config)
        if log_level is not None:
            settings.logging = LoggingSettings(
                level=log_level, json_output=settings.logging.json_output
            )
    except (ConfigurationError, ValidationError) as e:
        console.print(
            f"[red]Configuration error:[/red] {escape(str(e))}", soft_wrap=True
        )
        raise typer.Exit(EXIT_IO_FAILURE) from e

    configure_logging(settings.logging.level, settings.logging.json_output)
    ctx.obj = settings


def _open_browser(url: str) -> None:
    """Open the provider's authorization URL once the port is bound."""
    logger.info("oauth_browser_opening", auth_url=url)
    console.print("If your browser doesn't open, visit this URL:")
    console.print(url, markup=False, soft_wrap=True)
    webbrowser.open(url)


def _outcome_payload(outcome: Outcome) -> dict[str, object]:
    kind = {
        CodeReceived: "code",
        TimedOut: "timeout",
        IoFailure: "io_failure",
    }[type(outcome)]
    return {"outcome": kind, **asdict(outcome)}


def _report(outcome: Outcome, json_output: bool) -> None:
    if json_output:
        typer.echo(orjson.dumps(_outcome_payload(outcome)).decode())
    elif isinstance(outcome, CodeReceived):
        typer.echo(outcome.code)

    if isinstance(outcome, TimedOut):
        console.print(
            f"[yellow]Timed out after {outcome.timeout_seconds:g}s "
            "waiting for the OAuth redirect.[/yellow]"
        )
        raise typer.Exit(EXIT_TIMEOUT)
    if isinstance(outcome, IoFailure):
        console.print(
            f"[red]Error ({outcome.error_type}):[/red] {escape(outcome.message)}",
            soft_wrap=True,
        )
        raise typer.Exit(EXIT_IO_FAILURE)


@app.command(name="listen")
def listen_command(
    ctx: typer.Context,
    port: Annotated[
        int | None,
        typer.Option(
            "--port",
            "-p",
            min=1,
            max=65535,
            help="Loopback port of the registered redirect URI",
        ),
    ] = None,
    timeout: Annotated[
        float | None,
        typer.Option(
            "--timeout",
            "-t",
            min=0,
            help="Seconds to wait for the redirect",
        ),
    ] = None,
    open_url: Annotated[
        str | None,
        typer.Option(
            "--open",
            help="Authorization URL to open in the browser once listening",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Print the outcome as a JSON object"),
    ] = False,
) -> None:
    """Wait for one OAuth redirect and print its authorization code.

    Exit status is 0 when a code was received, 124 on timeout and 1 when the
    port could not be bound or the redirect carried no code.

    Examples:
        loopback-redirect listen --port 53142 --timeout 120
        loopback-redirect listen -p 53142 --open "https://provider/authorize?..."

    """
    settings: Settings = ctx.obj
    listener_settings = settings.listener
    port = port if port is not None else listener_settings.default_port
    timeout = timeout if timeout is not None else listener_settings.default_timeout

    console.print(
        f"Waiting for OAuth redirect on http://{LOOPBACK_HOST}:{port}/ "
        f"(timeout {timeout:g}s)..."
    )

    try:
        outcome = capture_outcome(
            port,
            timeout,
            settings=listener_settings,
            on_listening=(lambda _port: _open_browser(open_url)) if open_url else None,
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled by user.[/yellow]")
        raise typer.Exit(EXIT_IO_FAILURE) from None

    _report(outcome, json_output)


@app.command(name="version")
def version_command() -> None:
    """Show the installed version."""
    typer.echo(__version__)


def main() -> None:
    """Console script entry point."""
    app()
