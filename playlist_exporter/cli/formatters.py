"""
Functions for formatting and displaying data in the console using Rich.
"""

from pathlib import Path
from typing import Any

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from playlist_exporter.models.config import ExportConfig, get_format_info
from playlist_exporter.models.stats import ExportStats

HIDDEN_KEYS = ("private_key",)
SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def human_size(num_bytes: float) -> str:
    """Exported bytes as shown in the summary, e.g. '212.4 MB'."""
    if num_bytes <= 0:
        return "0 B"
    for unit in SIZE_UNITS[:-1]:
        if num_bytes < 1024:
            return f"{num_bytes:.1f} {unit}"
        num_bytes /= 1024
    return f"{num_bytes:.1f} {SIZE_UNITS[-1]}"


def human_duration(seconds: float) -> str:
    """Session length as '1h 2m 3s', dropping leading zero units."""
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_error_with_suggestions(
    error: Exception, context: dict | None = None
) -> Panel:
    """Formats an error with actionable suggestions into a Rich Panel."""
    error_type = type(error).__name__
    error_msg = str(error)

    suggestions_map = {
        "AuthenticationError": [
            "• Verify the private key in the configuration file or PB_KEY.",
            "• Check that the account exists on the catalog server.",
        ],
        "ConfigurationError": [
            "• Run `playlist-exporter init <SERVER> <PRIVATE_KEY>` to create a config.",
            "• Or set PB_SERVER and PB_KEY in the environment or a .env file.",
        ],
        "ConverterNotFoundError": [
            "• Install ffmpeg and make sure it is on your PATH.",
            "• Or point to the binary with `--ffmpeg /path/to/ffmpeg`.",
        ],
        "ClientResponseError": [
            "• The catalog server returned an error.",
            "• The server might be temporarily unavailable.",
            "• Please try again in a few minutes.",
        ],
        "ClientConnectorError": [
            "• The catalog server could not be reached.",
            "• Check the server address and your internet connection.",
        ],
    }

    suggestions = suggestions_map.get(
        error_type, ["• Run the command with -vv for detailed logs."]
    )

    error_text = Text()
    error_text.append(f"{error_type}: ", style="bold red")
    error_text.append(error_msg)

    suggestion_text = Text("\n".join(suggestions))

    content = Table.grid(padding=(1, 0))
    content.add_row(error_text)
    content.add_row()
    content.add_row(Text("Suggestions", style="bold yellow"))
    content.add_row(suggestion_text)

    if context:
        content.add_row()
        content.add_row(Text(f"Context: {context}", style="dim"))

    return Panel(
        content,
        title="[bold red]An Error Occurred[/bold red]",
        border_style="red",
        expand=False,
    )


def print_config(config_path: Path, config_data: dict[str, Any]):
    """Displays the current configuration, hiding sensitive data."""
    console = Console()
    content = ""
    for key, value in config_data.items():
        if key in HIDDEN_KEYS and value:
            value = "[hidden]"
        content += f"{key} = {value}\n"

    console.print(
        Panel(
            content.strip(),
            title=f"Configuration ([dim]{config_path}[/dim])",
            border_style="cyan",
        )
    )


def print_validation_table(config: ExportConfig):
    """Displays a summary of the current settings."""
    console = Console()
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="bold cyan")
    table.add_column()

    format_info = get_format_info(config.target_format)

    table.add_row("Server:", f"[green]{config.server}[/green]")
    table.add_row("Target Format:", f"[{format_info['color']}]{format_info['name']}[/]")
    table.add_row("Max Workers:", str(config.max_workers))
    table.add_row(
        "Track Timeout:",
        f"{config.track_timeout:g}s" if config.track_timeout else "✗ Disabled",
    )
    table.add_row("Output Directory:", f"[dim]{config.output_dir}[/dim]")
    table.add_row("Scratch Directory:", f"[dim]{config.scratch_dir}[/dim]")
    table.add_row("Converter:", f"[dim]{config.converter_path or 'ffmpeg (PATH)'}[/dim]")

    console.print(
        Panel(
            table,
            title="[bold green]✓ Validated Settings[/bold green]",
            border_style="green",
        )
    )


def print_summary_panel(stats: ExportStats, duration_s: float):
    """Displays the final summary of the export session."""
    console = Console()

    stats_table = Table(show_header=False, box=None, padding=(0, 2))
    stats_table.add_column(style="bold cyan", justify="right", width=20)
    stats_table.add_column(style="white", justify="left")

    stats_table.add_row(
        "Playlists:",
        f"[green]{stats.playlists_completed}[/green] / {stats.playlists_found}",
    )
    if stats.playlists_failed > 0:
        stats_table.add_row(
            "✗ Playlists Failed:", f"[bold red]{stats.playlists_failed}[/bold red]"
        )

    stats_table.add_row(
        "✓ Exported:", f"[bold green]{stats.tracks_downloaded}[/bold green]"
    )
    if stats.tracks_skipped_exists > 0:
        stats_table.add_row(
            "○ Skipped:", f"[yellow]{stats.tracks_skipped_exists} (exists)[/yellow]"
        )
    if stats.tracks_failed > 0:
        stats_table.add_row("✗ Failed:", f"[bold red]{stats.tracks_failed}[/bold red]")

    stats_table.add_row("", "")  # Spacer

    stats_table.add_row(
        "Total Size:", f"[cyan]{human_size(stats.total_size_downloaded)}[/cyan]"
    )
    stats_table.add_row("Time Elapsed:", f"[blue]{human_duration(duration_s)}[/blue]")

    if stats.tracks_downloaded > 0 and duration_s > 0:
        tracks_per_minute = (stats.tracks_downloaded / duration_s) * 60
        stats_table.add_row(
            "Throughput:", f"[cyan]{tracks_per_minute:.1f} tracks/min[/cyan]"
        )

    border_color = "yellow" if stats.tracks_failed or stats.playlists_failed else "green"

    console.print()
    console.print(
        Panel(
            stats_table,
            title="🎵 [bold]Finished![/bold]",
            border_style=border_color,
            box=box.DOUBLE,
            expand=False,
            padding=(1, 2),
        )
    )
    console.print()
