"""Music-service and taste-profile models.

Raw per-service artist lists come in from the streaming-service sync layer
(Spotify, Apple Music, YouTube Music, Tidal, Deezer).  The artist
aggregator folds them into one :class:`UserMusicProfile` per user, which is
what every matcher downstream consumes.  All models use frozen config; the
aggregator keeps its own mutable accumulator while folding and only builds
these models on output.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ServiceId(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Streaming services a user can connect."""

    SPOTIFY = "spotify"
    APPLE_MUSIC = "apple_music"
    YOUTUBE_MUSIC = "youtube_music"
    TIDAL = "tidal"
    DEEZER = "deezer"


class RawArtistEntry(BaseModel):
    """One artist as reported by one external music service."""

    model_config = ConfigDict(frozen=True)

    name: str
    source_id: str | None = None
    genres: list[str] = Field(default_factory=list)
    popularity: int | None = None
    image_url: str | None = None


class ServiceProfile(BaseModel):
    """Everything one connected service reported during a sync.

    ``artists`` and ``genres`` are ranked lists (index 0 is the strongest
    signal).  ``recent_artists`` holds recently played artist names.
    """

    model_config = ConfigDict(frozen=True)

    service: ServiceId
    artists: list[RawArtistEntry] = Field(default_factory=list)
    genres: list[str] = Field(default_factory=list)
    recent_artists: list[str] = Field(default_factory=list)


class AggregatedArtist(BaseModel):
    """One distinct real-world artist in a user's aggregated profile.

    ``score`` is the sum of weighted, rank-decayed contributions from every
    service list that mentioned the artist.  ``normalized_name`` is unique
    within one user's aggregate.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    normalized_name: str
    score: float = 0.0
    genres: list[str] = Field(default_factory=list)
    sources: list[ServiceId] = Field(default_factory=list)
    image_url: str | None = None
    source_ids: dict[str, str] = Field(default_factory=dict)


class UserMusicProfile(BaseModel):
    """A user's aggregated taste: ranked artists, ranked genres, recent plays."""

    model_config = ConfigDict(frozen=True)

    top_artists: list[AggregatedArtist] = Field(default_factory=list)
    top_genres: list[str] = Field(default_factory=list)
    recent_artist_names: list[str] = Field(default_factory=list)
    connected_services: list[ServiceId] = Field(default_factory=list)


class MusicConnection(BaseModel):
    """The part of a stored service connection the profile builder needs."""

    model_config = ConfigDict(frozen=True)

    service: ServiceId
    is_active: bool = True
    error: str | None = None


class ConnectionIssue(BaseModel):
    """A connection that reported an error on its last sync."""

    model_config = ConfigDict(frozen=True)

    service: ServiceId
    error: str


class ConnectionStats(BaseModel):
    """Summary of a user's service connections for the settings page."""

    model_config = ConfigDict(frozen=True)

    total: int = 0
    active: int = 0
    services: list[ServiceId] = Field(default_factory=list)
    errors: list[ConnectionIssue] = Field(default_factory=list)


class MatchResult(BaseModel):
    """A concert match score with its human-readable reasons."""

    model_config = ConfigDict(frozen=True)

    score: float = 0.0
    reasons: list[str] = Field(default_factory=list)
