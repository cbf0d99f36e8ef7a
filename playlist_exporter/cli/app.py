"""
Defines the command-line interface for the application using Typer.
"""

import asyncio
import logging
import os
import time
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler

from playlist_exporter import __version__
from playlist_exporter.api.client import CatalogClient
from playlist_exporter.core.orchestrator import Orchestrator
from playlist_exporter.exceptions import ExporterError
from playlist_exporter.media import MediaFetcher, Tagger, Transcoder, locate_converter
from playlist_exporter.storage.config_manager import ConfigManager

from .formatters import (
    format_error_with_suggestions,
    print_config,
    print_summary_panel,
    print_validation_table,
)

console = Console()

logging.basicConfig(
    level="INFO",
    format="%(message)s",
    datefmt="[%X]",
    handlers=[
        RichHandler(
            console=console,
            rich_tracebacks=True,
            show_path=False,
            show_level=False,
            markup=True,
        )
    ],
)
log = logging.getLogger("playlist_exporter")

app = typer.Typer(
    name="playlist-exporter",
    help=(
        "Export every playlist on a Pipe Bomb server to tagged local audio files."
        " Use 'playlist-exporter <command> --help' for more info."
    ),
    rich_markup_mode="rich",
    pretty_exceptions_show_locals=False,
    add_completion=False,
)


def get_config_dir() -> Path:
    if os.name == "nt":
        base_dir = Path(os.getenv("APPDATA", "~\\AppData\\Roaming"))
    else:
        base_dir = Path(os.getenv("XDG_CONFIG_HOME", "~/.config"))
    return base_dir.expanduser() / "playlist-exporter"


CONFIG_DIR = get_config_dir()
CONFIG_FILE = CONFIG_DIR / "config.ini"


@app.callback(invoke_without_command=True)
def main_callback(
    ctx: typer.Context,
    verbose: int = typer.Option(
        0,
        "--verbose",
        "-v",
        count=True,
        help="Increase logging verbosity (-vv for debug).",
    ),
    version: bool = typer.Option(
        False, "--version", help="Show version and exit.", is_eager=True
    ),
    show_config: bool = typer.Option(
        False, "--show-config", help="Display the current configuration."
    ),
):
    """Pipe Bomb playlist exporter"""
    if version:
        console.print(
            f"[bold]playlist-exporter[/bold] version [cyan]{__version__}[/cyan]"
        )
        raise typer.Exit()

    log_level = "INFO"
    if verbose >= 2:
        log_level = "DEBUG"
    logging.getLogger("playlist_exporter").setLevel(log_level)

    if show_config:
        try:
            values = ConfigManager(CONFIG_FILE).read_file_values()
        except ExporterError as e:
            console.print(
                f"[red]✗ {e}[/] Run [cyan]playlist-exporter init[/cyan] first."
            )
            raise typer.Exit(code=1) from e
        print_config(CONFIG_FILE, values)
        raise typer.Exit()

    if ctx.invoked_subcommand is None:
        console.print(ctx.get_help())


@app.command()
def init(
    server: str = typer.Argument(..., help="Address of the Pipe Bomb server."),
    private_key: str = typer.Argument(..., help="Your account's private key."),
    force: bool = typer.Option(
        False, "--force", "-f", help="Overwrite an existing configuration."
    ),
):
    """Initialize configuration with the server address and private key."""
    if (
        CONFIG_FILE.exists()
        and not force
        and not typer.confirm("Configuration file already exists. Overwrite it?")
    ):
        raise typer.Abort()

    config_manager = ConfigManager(CONFIG_FILE)
    try:
        config_manager.save_new_config({"server": server, "private_key": private_key})
    except ExporterError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1) from e
    console.print(f"\n[bold green]✓ Configuration saved to '{CONFIG_FILE}'[/bold green]")
    console.print("Ready to export! Try: [cyan]playlist-exporter export[/cyan]")


@app.command(name="export")
def export_command(
    output_dir: str | None = typer.Option(
        None, "-o", "--output", help="Root directory for exported playlists."
    ),
    workers: int | None = typer.Option(
        None,
        "-w",
        "--workers",
        help="Number of tracks exported concurrently per playlist (default 15).",
    ),
    target_format: str | None = typer.Option(
        None, "-f", "--format", help="Output audio format: mp3 or flac."
    ),
    scratch_dir: str | None = typer.Option(
        None, "--scratch", help="Scratch directory, wiped at start and end of run."
    ),
    converter_path: str | None = typer.Option(
        None, "--ffmpeg", help="Path to the ffmpeg executable."
    ),
    track_timeout: float | None = typer.Option(
        None,
        "--timeout",
        help="Give up on a track after this many seconds (default: never).",
    ),
):
    """Export every playlist to local audio files."""
    cli_options = {
        key: value
        for key, value in {
            "output_dir": output_dir,
            "max_workers": workers,
            "target_format": target_format,
            "scratch_dir": scratch_dir,
            "converter_path": converter_path,
            "track_timeout": track_timeout,
        }.items()
        if value is not None
    }

    async def _export_async():
        client = None
        fetcher = None
        orchestrator = None
        duration = 0.0
        try:
            config_manager = ConfigManager(CONFIG_FILE)
            config = config_manager.load_config(cli_options)
            converter = locate_converter(config.converter_path or None)
            log.debug(f"Using converter at '{converter}'")

            client = CatalogClient(config.server, config.private_key, config.max_workers)
            await client.authenticator.authenticate()

            fetcher = MediaFetcher(config.max_workers, headers=client.auth_headers)
            orchestrator = Orchestrator(
                config, client, fetcher, Transcoder(converter), Tagger()
            )

            console.print("[bold cyan]🎵 Starting export session...[/bold cyan]")
            start_time = time.monotonic()
            await orchestrator.run()
            duration = time.monotonic() - start_time
        except ExporterError as e:
            console.print(format_error_with_suggestions(e))
            raise typer.Exit(code=1) from e
        except Exception as e:
            console.print(f"[bold red]Unexpected error: {e}[/bold red]")
            log.debug("Full traceback:", exc_info=True)
            raise typer.Exit(code=1) from e
        finally:
            if fetcher:
                await fetcher.close()
            if client:
                await client.close()

        print_summary_panel(orchestrator.stats, duration)
        orchestrator.save_session_stats(CONFIG_DIR)

    asyncio.run(_export_async())


@app.command()
def validate():
    """Validate the current configuration."""
    try:
        config_manager = ConfigManager(CONFIG_FILE)
        config = config_manager.load_config()
        print_validation_table(config)
    except ExporterError as e:
        console.print(f"[red]✗ Configuration is invalid: {e}[/red]")
        raise typer.Exit(code=1) from e
