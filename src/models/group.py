"""Group ("concert buddy") models.

A group is two or more users planning together.  Concert-level matching
classifies how much of the group a concert appeals to.  The group
festival itinerary carries, per slot, why it was chosen when members
disagree and, per member, how satisfied they end up.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.festival import FestivalArtistMatch, MatchType


class GroupMatchType(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    UNIVERSAL = "universal"  # every member matched
    MAJORITY = "majority"    # at least half matched
    SOME = "some"


class DecisionType(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Why a group itinerary slot was chosen."""

    CONSENSUS = "consensus"
    STRONGEST_MATCH = "strongest-match"
    COMPROMISE = "compromise"


class GroupMember(BaseModel):
    """A group member's taste as ranked artist and genre names."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    display_name: str = ""
    top_artists: list[str] = Field(default_factory=list)
    top_genres: list[str] = Field(default_factory=list)


class MatchedMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    match_reason: str


class GroupMatchResult(BaseModel):
    """How a concert fits a group.  ``score`` ranges over [0, 150]."""

    model_config = ConfigDict(frozen=True)

    concert_id: str = ""
    score: float = 0.0
    match_type: GroupMatchType = GroupMatchType.SOME
    matched_members: list[MatchedMember] = Field(default_factory=list)
    overlap_artists: list[str] = Field(default_factory=list)
    overlap_genres: list[str] = Field(default_factory=list)


class MemberArtistMatch(BaseModel):
    """One member's individual match for one lineup artist."""

    model_config = ConfigDict(frozen=True)

    score: float
    match_type: MatchType
    reason: str


class GroupMemberProfile(BaseModel):
    """Per-member lookup from normalized artist name to individual match."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    display_name: str = ""
    artist_matches: dict[str, MemberArtistMatch] = Field(default_factory=dict)


class GroupMemberMatch(BaseModel):
    """A member's match for the artist in a slot (score 0 when unmatched)."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    score: float = 0.0
    match_type: MatchType = MatchType.NONE
    reason: str | None = None


class WinningMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    score: float


class LosingMember(BaseModel):
    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    preferred_artist: str


class ConflictResolution(BaseModel):
    model_config = ConfigDict(frozen=True)

    losing_member: LosingMember
    reason: str


class GroupAlternative(BaseModel):
    """A candidate displaced by a slot's time window."""

    model_config = ConfigDict(frozen=True)

    artist: FestivalArtistMatch
    member_matches: list[GroupMemberMatch] = Field(default_factory=list)
    group_score: float = 0.0


class GroupItinerarySlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    artist: FestivalArtistMatch
    decided_by: DecisionType
    winning_member: WinningMember | None = None
    member_matches: list[GroupMemberMatch] = Field(default_factory=list)
    group_score: float = 0.0
    alternatives: list[GroupAlternative] = Field(default_factory=list)
    conflict_resolution: ConflictResolution | None = None


class GroupItineraryDay(BaseModel):
    model_config = ConfigDict(frozen=True)

    day_name: str
    date: str = ""
    slots: list[GroupItinerarySlot] = Field(default_factory=list)
    group_score: float = 0.0
    consensus_count: int = 0
    compromise_count: int = 0


class MemberSatisfaction(BaseModel):
    """How well the itinerary serves one member (``satisfaction_score`` 0–100)."""

    model_config = ConfigDict(frozen=True)

    user_id: str
    username: str
    satisfaction_score: int = 100
    must_sees_covered: int = 0
    must_sees_total: int = 0
    compromises: int = 0


class GeneratedGroupItinerary(BaseModel):
    model_config = ConfigDict(frozen=True)

    days: list[GroupItineraryDay] = Field(default_factory=list)
    total_group_score: float = 0.0
    # Consensus slots as a percentage of all scheduled slots.
    consensus_rate: int = 0
    member_satisfaction: list[MemberSatisfaction] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
