"""
Catalog entities as seen by the export core.

`Track` and `Playlist` keep a reference to the client that produced them so
metadata and track lists can be fetched lazily, on demand.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, Field, field_validator

if TYPE_CHECKING:
    from playlist_exporter.api.client import CatalogClient


class TrackMetadata(BaseModel):
    """Title and ordered artist names of a track."""

    title: str = "Unknown Title"
    artists: list[str] = Field(default_factory=list)

    @field_validator("artists", mode="before")
    @classmethod
    def coerce_artists(cls, v: Any) -> list[str]:
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return [a["name"] if isinstance(a, dict) else str(a) for a in v]

    @property
    def artist_line(self) -> str:
        return ", ".join(self.artists)


@dataclass
class Track:
    """A single playable item. Metadata stays `None` until loaded."""

    track_id: str
    client: "CatalogClient" = field(repr=False)
    metadata: TrackMetadata | None = None

    async def load_metadata(self) -> TrackMetadata:
        self.metadata = await self.client.fetch_track_metadata(self.track_id)
        return self.metadata

    @property
    def audio_url(self) -> str:
        return self.client.audio_url(self.track_id)

    @property
    def thumbnail_url(self) -> str:
        return self.client.thumbnail_url(self.track_id)


@dataclass
class Owner:
    username: str


@dataclass
class Playlist:
    """An owned, named, ordered collection of tracks."""

    collection_id: str
    name: str
    owner: Owner
    client: "CatalogClient" = field(repr=False)

    async def get_track_list(self) -> list[Track]:
        """Fetches a fresh track list. The caller is free to consume it."""
        return await self.client.fetch_playlist_tracks(self.collection_id)
