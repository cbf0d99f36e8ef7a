"""
Writes title, artist and cover art tags into finished audio files.
"""

import asyncio
import logging
import os
from pathlib import Path

import mutagen.id3 as id3
from mutagen import MutagenError
from mutagen.flac import FLAC, Picture
from mutagen.id3 import ID3NoHeaderError

from playlist_exporter.exceptions import TagWriteError

log = logging.getLogger(__name__)

# --- Constants ---
COVER_MIME = "image/jpeg"
COVER_DESCRIPTION = "From Pipe Bomb"
COVER_TYPE_FRONT = 3
FLAC_MAX_BLOCKSIZE = 16777215  # ~16.7MB, max size for a FLAC metadata block


class Tagger:
    """
    Writes metadata tags to MP3 (ID3v2.3) and FLAC (Vorbis comment) files.

    Lyrics are not supported.
    """

    async def tag(
        self,
        path: Path,
        title: str,
        artists: list[str],
        cover: bytes | None = None,
    ) -> None:
        """
        Tags `path` in a worker thread.

        Raises:
            TagWriteError: If the tags could not be written.
        """
        try:
            await asyncio.to_thread(self.tag_file, str(path), title, artists, cover)
        except (MutagenError, OSError, ValueError) as e:
            raise TagWriteError(
                f"Failed to tag file '{os.path.basename(path)}': {e}"
            ) from e

    def tag_file(
        self, path: str, title: str, artists: list[str], cover: bytes | None
    ) -> None:
        artist_line = ", ".join(artists)
        if path.lower().endswith(".flac"):
            self._tag_flac(path, title, artist_line, cover)
        else:
            self._tag_mp3(path, title, artist_line, cover)

    def _tag_mp3(
        self, path: str, title: str, artist_line: str, cover: bytes | None
    ) -> None:
        try:
            audio = id3.ID3(path)
        except ID3NoHeaderError:
            audio = id3.ID3()

        audio.add(id3.TIT2(encoding=3, text=title))
        if artist_line:
            audio.add(id3.TPE1(encoding=3, text=artist_line))

        if cover:
            audio.delall("APIC")
            audio.add(
                id3.APIC(
                    encoding=3,
                    mime=COVER_MIME,
                    type=COVER_TYPE_FRONT,
                    desc=COVER_DESCRIPTION,
                    data=cover,
                )
            )

        audio.save(filename=path, v2_version=3)

    def _tag_flac(
        self, path: str, title: str, artist_line: str, cover: bytes | None
    ) -> None:
        audio = FLAC(path)
        audio["TITLE"] = [title]
        if artist_line:
            audio["ARTIST"] = [artist_line]

        if cover:
            if len(cover) > FLAC_MAX_BLOCKSIZE:
                log.warning("Cover art is too large to embed in FLAC. Skipping it.")
            else:
                pic = Picture()
                pic.type = COVER_TYPE_FRONT
                pic.mime = COVER_MIME
                pic.desc = COVER_DESCRIPTION
                pic.data = cover
                audio.clear_pictures()
                audio.add_picture(pic)

        audio.save()
