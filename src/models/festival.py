"""Festival, lineup and schedule models.

A festival's lineup is static reference data: one :class:`FestivalArtist`
per scheduled set.  Matching a lineup against a user's taste produces a
:class:`FestivalArtistMatch` per set, which carries a discrete tier used
for UI grouping and itinerary priority.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchType(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Festival match tier, strongest first."""

    PERFECT = "perfect"      # in the user's top artists
    GENRE = "genre"          # shares one or more genres with the user
    DISCOVERY = "discovery"  # loosely related genre root
    NONE = "none"


class FestivalLocation(BaseModel):
    model_config = ConfigDict(frozen=True)

    city: str = ""
    state: str | None = None
    country: str = ""
    venue: str | None = None


class FestivalDates(BaseModel):
    """Inclusive ``YYYY-MM-DD`` date range."""

    model_config = ConfigDict(frozen=True)

    start: str
    end: str
    year: int | None = None


class Festival(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    slug: str = ""
    location: FestivalLocation = Field(default_factory=FestivalLocation)
    dates: FestivalDates
    genres: list[str] = Field(default_factory=list)


class FestivalArtist(BaseModel):
    """One lineup slot.  ``start_time``/``end_time`` are ``HH:MM`` strings."""

    model_config = ConfigDict(frozen=True)

    id: str
    artist_name: str
    normalized_name: str = ""
    day: str | None = None
    stage: str | None = None
    start_time: str | None = None
    end_time: str | None = None
    headliner: bool = False
    genres: list[str] = Field(default_factory=list)


class FestivalArtistMatch(FestivalArtist):
    """A lineup slot scored against one profile."""

    match_type: MatchType = MatchType.NONE
    match_score: float = 0.0
    match_reason: str | None = None


class FestivalMatchSummary(BaseModel):
    """Festival-level match percentage plus the per-artist tiers behind it."""

    model_config = ConfigDict(frozen=True)

    match_percentage: int = 0
    matched_artist_count: int = 0
    total_artist_count: int = 0
    perfect_matches: list[FestivalArtistMatch] = Field(default_factory=list)
    discovery_matches: list[FestivalArtistMatch] = Field(default_factory=list)
    all_matches: list[FestivalArtistMatch] = Field(default_factory=list)


class ScheduleConflict(BaseModel):
    """Two picks on the same day whose sets overlap."""

    model_config = ConfigDict(frozen=True)

    artist1: FestivalArtistMatch
    artist2: FestivalArtistMatch
    overlap_minutes: int
    day: str


class ScheduleSlot(BaseModel):
    """One cell of the schedule grid (a stage at a half-hour mark)."""

    model_config = ConfigDict(frozen=True)

    time: str
    stage: str
    artist: FestivalArtistMatch | None = None
    is_empty: bool = True


class ScheduleDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    date: str
    day_name: str
    stages: list[str] = Field(default_factory=list)
    slots: list[list[ScheduleSlot]] = Field(default_factory=list)
