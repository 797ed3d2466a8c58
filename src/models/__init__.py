"""Stageside domain models — re-exports all public model classes.

The models are organized across six submodules by domain concern:
    - music.py        — Streaming-service input and the aggregated taste profile
    - concert.py      — Ticketing listings and cross-source aggregated concerts
    - festival.py     — Festivals, lineups, tiered matches and the schedule grid
    - itinerary.py    — Single-user festival itineraries
    - group.py        — Group matching and group festival itineraries
    - notification.py — Concert digest preferences

If you add a new model class, remember to add it to ``__all__`` too.
"""

from __future__ import annotations

from src.models.concert import (
    AggregatedConcert,
    AggregatorResult,
    AlternateUrl,
    BestPrice,
    BestPriceLink,
    Concert,
    ConcertSearchParams,
    ConcertSource,
    ConcertVenue,
    GeoPoint,
    PriceRange,
    SourceSearchResult,
    VenueSize,
)
from src.models.festival import (
    Festival,
    FestivalArtist,
    FestivalArtistMatch,
    FestivalDates,
    FestivalLocation,
    FestivalMatchSummary,
    MatchType,
    ScheduleConflict,
    ScheduleDay,
    ScheduleSlot,
)
from src.models.group import (
    ConflictResolution,
    DecisionType,
    GeneratedGroupItinerary,
    GroupAlternative,
    GroupItineraryDay,
    GroupItinerarySlot,
    GroupMatchResult,
    GroupMatchType,
    GroupMember,
    GroupMemberMatch,
    GroupMemberProfile,
    LosingMember,
    MatchedMember,
    MemberArtistMatch,
    MemberSatisfaction,
    WinningMember,
)
from src.models.itinerary import (
    GeneratedItinerary,
    ItineraryDay,
    ItinerarySlot,
    SlotPriority,
)
from src.models.music import (
    AggregatedArtist,
    ConnectionIssue,
    ConnectionStats,
    MatchResult,
    MusicConnection,
    RawArtistEntry,
    ServiceId,
    ServiceProfile,
    UserMusicProfile,
)
from src.models.notification import DigestFrequency, NotificationPreference

__all__ = [
    "AggregatedArtist",
    "AggregatedConcert",
    "AggregatorResult",
    "AlternateUrl",
    "BestPrice",
    "BestPriceLink",
    "Concert",
    "ConcertSearchParams",
    "ConcertSource",
    "ConcertVenue",
    "ConflictResolution",
    "ConnectionIssue",
    "ConnectionStats",
    "DecisionType",
    "DigestFrequency",
    "Festival",
    "FestivalArtist",
    "FestivalArtistMatch",
    "FestivalDates",
    "FestivalLocation",
    "FestivalMatchSummary",
    "GeneratedGroupItinerary",
    "GeneratedItinerary",
    "GeoPoint",
    "GroupAlternative",
    "GroupItineraryDay",
    "GroupItinerarySlot",
    "GroupMatchResult",
    "GroupMatchType",
    "GroupMember",
    "GroupMemberMatch",
    "GroupMemberProfile",
    "ItineraryDay",
    "ItinerarySlot",
    "LosingMember",
    "MatchResult",
    "MatchType",
    "MatchedMember",
    "MemberArtistMatch",
    "MemberSatisfaction",
    "MusicConnection",
    "NotificationPreference",
    "PriceRange",
    "RawArtistEntry",
    "ScheduleConflict",
    "ScheduleDay",
    "ScheduleSlot",
    "ServiceId",
    "ServiceProfile",
    "SlotPriority",
    "SourceSearchResult",
    "UserMusicProfile",
    "VenueSize",
    "WinningMember",
]
