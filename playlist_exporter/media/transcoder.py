"""
Runs the external audio converter (ffmpeg) as an asyncio subprocess.
"""

import asyncio
import logging
import os
import shutil
import uuid
from contextlib import suppress
from pathlib import Path

from playlist_exporter.exceptions import ConverterNotFoundError, ExternalToolError

log = logging.getLogger(__name__)

DEFAULT_CONVERTER = "ffmpeg"


def locate_converter(explicit_path: str | None = None) -> str:
    """
    Finds the converter executable: an explicit path first, then PATH.

    Raises:
        ConverterNotFoundError: If neither yields an executable.
    """
    if explicit_path:
        if os.path.isfile(explicit_path) and os.access(explicit_path, os.X_OK):
            return explicit_path
        if found := shutil.which(explicit_path):
            return found
        raise ConverterNotFoundError(f"Converter not found at '{explicit_path}'.")

    if found := shutil.which(DEFAULT_CONVERTER):
        return found
    raise ConverterNotFoundError(
        "Failed to locate ffmpeg. Install it or pass --ffmpeg <path>."
    )


def partial_path_for(destination: Path) -> Path:
    """A hidden sibling of `destination` that keeps its extension for ffmpeg."""
    return destination.with_name(
        f".{destination.stem}.{uuid.uuid4().hex[:8]}.part{destination.suffix}"
    )


def _discard(path: Path) -> None:
    with suppress(FileNotFoundError):
        os.remove(path)


class Transcoder:
    """Converts a source file into the format implied by the destination extension."""

    def __init__(self, converter_path: str):
        self.converter_path = converter_path

    async def transcode(self, source: Path, destination: Path) -> None:
        """
        Invokes `<converter> -i <source> <partial>` and moves the partial
        output onto `destination` once the converter succeeds.

        `destination` only ever appears complete. A failed, timed-out or
        cancelled conversion removes its own partial output and nothing else;
        the converter process is killed if it is still running.

        Raises:
            ExternalToolError: If the converter cannot be spawned or exits
            non-zero.
        """
        partial = partial_path_for(destination)
        try:
            process = await asyncio.create_subprocess_exec(
                self.converter_path,
                "-i",
                str(source),
                str(partial),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ExternalToolError(f"Could not start converter: {e}") from e

        try:
            _, stderr = await process.communicate()
        except asyncio.CancelledError:
            if process.returncode is None:
                with suppress(ProcessLookupError):
                    process.kill()
                await process.wait()
            _discard(partial)
            log.debug(f"Converter for '{source.name}' was cancelled and killed.")
            raise

        if process.returncode != 0:
            _discard(partial)
            if stderr:
                last_line = stderr.decode(errors="replace").strip().splitlines()[-1:]
                log.debug(f"Converter output for '{source.name}': {' '.join(last_line)}")
            raise ExternalToolError(
                f"Converter exited with code {process.returncode} for '{source.name}'"
            )

        try:
            os.replace(partial, destination)
        except OSError as e:
            _discard(partial)
            raise ExternalToolError(
                f"Could not move converted '{source.name}' into place: {e}"
            ) from e
