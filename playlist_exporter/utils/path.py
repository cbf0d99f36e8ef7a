"""
Utilities for handling file paths and deterministic export destinations.
"""

from pathlib import Path

from pathvalidate import sanitize_filename


def sanitize_name(name: str) -> str:
    """Returns a filesystem-safe version of a display name."""
    return sanitize_filename(name)


def create_dir(directory_path: Path) -> None:
    """Creates a directory if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def playlist_dir(
    output_root: Path, owner_username: str, collection_id: str, name: str
) -> Path:
    """
    Builds `<root>/<owner>/<collection_id> - <sanitized name>`.

    Only the display name is sanitized; the owner and the identifier are
    used as-is, matching the catalog's own naming.
    """
    return output_root / owner_username / f"{collection_id} - {sanitize_name(name)}"


def track_destination(directory: Path, track_id: str, extension: str) -> Path:
    """Builds `<directory>/<track_id>.<extension>`."""
    return directory / f"{track_id}.{extension}"
