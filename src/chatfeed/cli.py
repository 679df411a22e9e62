"""Typer-based CLI entry point."""

from __future__ import annotations

import asyncio
import functools
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich import print
from rich.markup import escape
from rich.table import Table

from chatfeed.errors import ChatFeedError, SettingsError
from chatfeed.gui.utils.console_logger import ensure_console_logger
from chatfeed.harness import ScrollTestConfig, run_scroll_validation
from chatfeed.settings import load_settings

app = typer.Typer(help="Windowed pagination and scroll anchoring for live chat feeds")


def _settings_option():
    return typer.Option(None, "--settings", "-s", help="JSON settings file", exists=True, dir_okay=False)


def _handle_errors(func):
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except SettingsError as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(2) from exc
        except ChatFeedError as exc:
            typer.echo(f"Unexpected error: {exc}", err=True)
            raise typer.Exit(1) from exc

    return wrapper


def _configure_logging(verbose: bool) -> None:
    ensure_console_logger(
        logging.getLogger("chatfeed"),
        "chatfeed-console",
        level=logging.DEBUG if verbose else logging.WARNING,
    )


@app.command()
@_handle_errors
def harness(
    messages: Optional[int] = typer.Option(None, "--messages", "-n", min=1, help="Messages to seed"),
    viewport: float = typer.Option(740.0, "--viewport", min=1.0, help="Viewport height in px"),
    increment: float = typer.Option(10.0, "--increment", min=1.0, help="Scroll step in px"),
    native: bool = typer.Option(False, "--native/--compensate", help="Let the surface anchor natively"),
    settings_path: Optional[Path] = _settings_option(),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Run the pixel-accuracy scroll anchor validation."""

    _configure_logging(verbose)
    settings = load_settings(settings_path)
    cfg = ScrollTestConfig(
        viewport_height=viewport,
        scroll_increment=increment,
        message_count=messages,
        native_anchoring=native,
    )
    result = asyncio.run(run_scroll_validation(cfg, settings, report=lambda line: print(f"[dim]{escape(line)}")))

    table = Table(title="Scroll anchor validation")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    for name, value in vars(result.stats).items():
        table.add_row(name.replace("_", " "), f"{value:.3f}" if isinstance(value, float) else str(value))
    print(table)

    if not result.passed:
        print(f"[red]FAILED: {escape(result.error or '')}")
        raise typer.Exit(1)
    print("[green]All scroll anchor validations passed")


@app.command()
@_handle_errors
def limit(
    viewport: float = typer.Option(..., "--viewport", min=0.0, help="Viewport height in px"),
    settings_path: Optional[Path] = _settings_option(),
) -> None:
    """Print the page limit used for a viewport height."""

    settings = load_settings(settings_path)
    typer.echo(settings.compute_limit(viewport))


@app.command("settings")
@_handle_errors
def show_settings(settings_path: Optional[Path] = _settings_option()) -> None:
    """Print the effective settings document."""

    settings = load_settings(settings_path)
    typer.echo(json.dumps(settings.to_document(), indent=2))


def main() -> None:  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
