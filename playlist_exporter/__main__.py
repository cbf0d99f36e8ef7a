"""
Entry point for the `playlist-exporter` script and `python -m playlist_exporter`.

Exit codes:
    0  the export ran to the end, even if some tracks or playlists failed,
       or the user cancelled it with Ctrl-C
    1  the export could not start (configuration, login, missing ffmpeg)
    2  the command line itself was invalid
"""

import logging
import os
import sys

import click
from rich.console import Console

from playlist_exporter.cli.app import app
from playlist_exporter.cli.formatters import format_error_with_suggestions
from playlist_exporter.exceptions import ExporterError

PROG_NAME = "playlist-exporter"

EXIT_OK = 0
EXIT_STARTUP_FAILURE = 1

log = logging.getLogger("playlist_exporter")


def main(argv: list[str] | None = None) -> int:
    """Runs the CLI and turns its outcome into a process exit code."""
    if os.name == "nt":
        # Track and playlist names are printed as-is
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding="utf-8")

    console = Console()
    try:
        result = app(args=argv, prog_name=PROG_NAME, standalone_mode=False)
    except click.ClickException as e:
        e.show()
        return e.exit_code
    except click.Abort:
        # Ctrl-C, or declining the overwrite prompt of `init`
        console.print("\n[yellow]⚠️  Export cancelled.[/yellow]")
        return EXIT_OK
    except ExporterError as e:
        console.print(format_error_with_suggestions(e))
        return EXIT_STARTUP_FAILURE
    except Exception as e:
        console.print(format_error_with_suggestions(e, {"type": "Unexpected"}))
        log.debug("Full traceback:", exc_info=True)
        return EXIT_STARTUP_FAILURE

    return result if isinstance(result, int) else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
