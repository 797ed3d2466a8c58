"""Single-user festival itinerary models.

An itinerary is an immutable value.  Editing it (see
``swap_itinerary_artist``) builds a new value that shares every untouched
day with the old one.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.festival import FestivalArtistMatch, ScheduleConflict


class SlotPriority(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Why a slot made it into the itinerary, in greedy fill order."""

    MUST_SEE = "must-see"
    RECOMMENDED = "recommended"
    DISCOVERY = "discovery"
    FILLER = "filler"


class ItinerarySlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    artist: FestivalArtistMatch
    priority: SlotPriority
    reason: str
    # Higher-priority sets that clashed with this one and were left out.
    alternatives: list[FestivalArtistMatch] = Field(default_factory=list)


class ItineraryDay(BaseModel):
    """One festival day; slots are in chronological order."""

    model_config = ConfigDict(frozen=True)

    day_name: str
    date: str = ""
    slots: list[ItinerarySlot] = Field(default_factory=list)
    total_score: float = 0.0
    must_see_count: int = 0


class GeneratedItinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    days: list[ItineraryDay] = Field(default_factory=list)
    total_score: float = 0.0
    # Scheduled slots as a percentage of timed lineup slots.
    coverage: int = 0
    conflicts: list[ScheduleConflict] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
