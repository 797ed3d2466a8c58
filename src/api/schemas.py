"""Pydantic request/response schemas for the Stageside API.

# ─── HOW SCHEMAS WORK (Junior Developer Guide) ────────────────────────
#
# Every HTTP request and response body has a model here.  FastAPI uses
# them to validate incoming JSON (invalid bodies get a 422), to
# serialize responses (via response_model=...) and to generate the
# OpenAPI docs at /docs.
#
# Domain models (Concert, Festival, UserMusicProfile, ...) are reused
# directly as fields; these schemas only add the request envelope.
#
# Convention: request schemas end with "Request", response schemas end
# with "Response".  Optional itinerary knobs default to None so the
# route can fall back to Settings.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field, model_validator

from src.models.concert import (
    AggregatedConcert,
    BestPriceLink,
    Concert,
    ConcertSearchParams,
    ConcertSource,
    SourceSearchResult,
)
from src.models.festival import (
    Festival,
    FestivalArtist,
    FestivalArtistMatch,
    ScheduleConflict,
    ScheduleDay,
)
from src.models.group import GroupMatchResult, GroupMember
from src.models.itinerary import GeneratedItinerary
from src.models.music import (
    ConnectionStats,
    MusicConnection,
    ServiceId,
    ServiceProfile,
    UserMusicProfile,
)
from src.models.notification import NotificationPreference


# ---------------------------------------------------------------------------
# System
# ---------------------------------------------------------------------------

class HealthResponse(BaseModel):
    """Application health check response."""

    status: str
    version: str
    sources: dict[str, bool] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Standard error response body."""

    error: str
    detail: str | None = None


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------

class AggregateProfileRequest(BaseModel):
    """Raw per-service data for one user plus their connection records."""

    connections: list[MusicConnection]
    service_data: dict[ServiceId, ServiceProfile] = Field(default_factory=dict)


class ProfileResponse(BaseModel):
    profile: UserMusicProfile
    stats: ConnectionStats


# ---------------------------------------------------------------------------
# Concerts
# ---------------------------------------------------------------------------

class ConcertMatchRequest(BaseModel):
    concerts: list[Concert]
    profile: UserMusicProfile
    min_score: float = Field(default=0.0, ge=0.0)


class ConcertListResponse(BaseModel):
    concerts: list[Concert]


class ConcertSearchRequest(BaseModel):
    """Live multi-source search, optionally ranked against a profile.

    When a profile is given and ``params.artist_names`` is empty, the
    profile's top artists are used for artist-centric sources.
    """

    params: ConcertSearchParams = Field(default_factory=ConcertSearchParams)
    profile: UserMusicProfile | None = None
    min_score: float = Field(default=0.0, ge=0.0)


class ConcertSearchResponse(BaseModel):
    concerts: list[AggregatedConcert]
    total_by_source: dict[str, int]
    searched_sources: list[ConcertSource]
    failed_sources: list[ConcertSource] = Field(default_factory=list)


class DedupeRequest(BaseModel):
    results: list[SourceSearchResult]


class DedupeResponse(BaseModel):
    concerts: list[AggregatedConcert]
    # Keyed by aggregated concert id; concerts without prices are absent.
    best_prices: dict[str, BestPriceLink] = Field(default_factory=dict)


# ---------------------------------------------------------------------------
# Festivals
# ---------------------------------------------------------------------------

class FestivalMatchRequest(BaseModel):
    festival: Festival
    lineup: list[FestivalArtist]
    profile: UserMusicProfile


class ItineraryRequest(BaseModel):
    festival: Festival
    lineup: list[FestivalArtist]
    profile: UserMusicProfile
    max_per_day: int | None = Field(default=None, ge=0)
    include_discoveries: bool | None = None
    rest_break_minutes: int | None = Field(default=None, ge=0)


class SwapRequest(BaseModel):
    itinerary: GeneratedItinerary
    day_index: int = Field(ge=0)
    slot_index: int = Field(ge=0)
    new_artist: FestivalArtistMatch


class CalendarRequest(BaseModel):
    """Export either an explicit agenda or a generated itinerary."""

    festival: Festival
    artists: list[FestivalArtistMatch] | None = None
    itinerary: GeneratedItinerary | None = None

    @model_validator(mode="after")
    def _one_source(self) -> CalendarRequest:
        if self.artists is None and self.itinerary is None:
            raise ValueError("Provide either artists or itinerary")
        return self


class ScheduleRequest(BaseModel):
    festival: Festival
    lineup: list[FestivalArtistMatch]
    # Ids of the user's picks; conflicts are checked among these only.
    agenda_ids: list[str] = Field(default_factory=list)


class ScheduleResponse(BaseModel):
    days: list[ScheduleDay]
    conflicts: list[ScheduleConflict]


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------

class GroupMatchRequest(BaseModel):
    members: list[GroupMember] = Field(min_length=1)
    concerts: list[Concert]


class GroupConcertMatch(BaseModel):
    concert: Concert
    match: GroupMatchResult


class GroupMatchResponse(BaseModel):
    matches: list[GroupConcertMatch]
    overlap_artists: list[str]
    overlap_genres: list[str]


class GroupItineraryMember(BaseModel):
    user_id: str
    username: str
    display_name: str = ""
    profile: UserMusicProfile


class GroupItineraryRequest(BaseModel):
    festival: Festival
    lineup: list[FestivalArtist]
    members: list[GroupItineraryMember] = Field(min_length=1)
    max_per_day: int | None = Field(default=None, ge=0)
    rest_break_minutes: int | None = Field(default=None, ge=0)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

class DigestRequest(BaseModel):
    preference: NotificationPreference
    # Concerts already carrying match scores.
    concerts: list[Concert]
    now: datetime | None = None


class DigestResponse(BaseModel):
    due: bool
    concerts: list[Concert]
    # The preference's remembered ids after sending ``concerts``.
    last_concert_ids: list[str]
