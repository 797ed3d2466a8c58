"""Group festival itinerary generation.

The single-user greedy planner generalized to N members.  Every lineup set
gets one individual match per member (see :func:`build_member_taste`) and
a group score, the rounded mean of those member scores.  Each day's sets
are placed best group score first under the same rest-buffer rule as the
single-user planner.

Every placed slot is labelled with how the group arrived at it:

consensus
    every member matched the set, or nobody did
strongest-match
    support is uneven; the slot is credited to the member who scored it
    highest
compromise
    a strongest-match slot that displaced a set some *other* member
    would have preferred; that member is recorded as the losing side
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

import structlog

from src.config.tuning import (
    DEFAULT_DAY_NAME,
    DEFAULT_GROUP_REST_BREAK_MINUTES,
    DEFAULT_MAX_PER_DAY,
    MEMBER_GENRE_SCORE,
    MEMBER_MUST_SEE_THRESHOLD,
    MEMBER_TOP_ARTIST_FLOOR,
    MEMBER_TOP_ARTIST_SCORE,
    MEMBER_TOP_RANKED_REASON_LIMIT,
    SPARSE_DAY_THRESHOLD,
)
from src.models.festival import Festival, FestivalArtist, FestivalArtistMatch, MatchType
from src.models.group import (
    ConflictResolution,
    DecisionType,
    GeneratedGroupItinerary,
    GroupAlternative,
    GroupItineraryDay,
    GroupItinerarySlot,
    GroupMemberMatch,
    GroupMemberProfile,
    LosingMember,
    MemberArtistMatch,
    MemberSatisfaction,
    WinningMember,
)
from src.models.music import UserMusicProfile
from src.services.itinerary_generator import (
    TimeWindow,
    ordered_day_names,
    validate_options,
    window_for,
)
from src.services.schedule_service import day_date_string
from src.utils.errors import InvalidInputError
from src.utils.text_normalizer import genres_overlap, normalize_artist_name

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Member taste
# ---------------------------------------------------------------------------

def build_member_taste(
    user_id: str,
    username: str,
    display_name: str,
    profile: UserMusicProfile,
    lineup: Sequence[FestivalArtist],
) -> GroupMemberProfile:
    """Build one member's lookup of lineup matches.

    Every top artist is a ``perfect`` match worth ``max(50, 100 - rank)``.
    Lineup sets not matched that way but sharing a genre with the member's
    top genres are a ``genre`` match worth 40.
    """
    matches: dict[str, MemberArtistMatch] = {}

    for rank, artist in enumerate(profile.top_artists):
        key = normalize_artist_name(artist.name)
        if not key or key in matches:
            continue
        reason = (
            f"Top {rank + 1} artist"
            if rank < MEMBER_TOP_RANKED_REASON_LIMIT
            else "In your top artists"
        )
        matches[key] = MemberArtistMatch(
            score=max(MEMBER_TOP_ARTIST_FLOOR, MEMBER_TOP_ARTIST_SCORE - rank),
            match_type=MatchType.PERFECT,
            reason=reason,
        )

    for lineup_artist in lineup:
        key = normalize_artist_name(lineup_artist.artist_name)
        if not key or key in matches:
            continue
        genre = next(
            (
                g
                for g in lineup_artist.genres
                if any(genres_overlap(g, user_genre) for user_genre in profile.top_genres)
            ),
            None,
        )
        if genre is not None:
            matches[key] = MemberArtistMatch(
                score=MEMBER_GENRE_SCORE,
                match_type=MatchType.GENRE,
                reason=f"Matches {genre} taste",
            )

    return GroupMemberProfile(
        user_id=user_id,
        username=username,
        display_name=display_name,
        artist_matches=matches,
    )


# ---------------------------------------------------------------------------
# Candidate scoring
# ---------------------------------------------------------------------------

@dataclass
class _Candidate:
    artist: FestivalArtistMatch
    member_matches: list[GroupMemberMatch]
    group_score: float
    window: TimeWindow | None

    def score_for(self, user_id: str) -> float:
        for match in self.member_matches:
            if match.user_id == user_id:
                return match.score
        return 0.0


@dataclass
class _DraftSlot:
    candidate: _Candidate
    displaced: list[_Candidate] = field(default_factory=list)


def _member_matches(
    artist: FestivalArtist,
    members: Sequence[GroupMemberProfile],
) -> list[GroupMemberMatch]:
    key = normalize_artist_name(artist.artist_name)
    result = []
    for member in members:
        match = member.artist_matches.get(key)
        if match is None:
            result.append(GroupMemberMatch(user_id=member.user_id, username=member.username))
        else:
            result.append(
                GroupMemberMatch(
                    user_id=member.user_id,
                    username=member.username,
                    score=match.score,
                    match_type=match.match_type,
                    reason=match.reason,
                )
            )
    return result


def _candidate(artist: FestivalArtist, members: Sequence[GroupMemberProfile]) -> _Candidate:
    member_matches = _member_matches(artist, members)
    group_score = sum(m.score for m in member_matches) / len(member_matches)

    best = max(member_matches, key=lambda m: m.score)
    data = artist.model_dump(include=set(FestivalArtist.model_fields))
    data["normalized_name"] = artist.normalized_name or normalize_artist_name(artist.artist_name)
    match = FestivalArtistMatch(
        **data,
        match_type=best.match_type if best.score > 0 else MatchType.NONE,
        match_score=group_score,
        match_reason=best.reason if best.score > 0 else None,
    )
    return _Candidate(
        artist=match,
        member_matches=member_matches,
        group_score=group_score,
        window=window_for(artist),
    )


# ---------------------------------------------------------------------------
# Placement and decisions
# ---------------------------------------------------------------------------

def _place_day(
    candidates: list[_Candidate],
    max_per_day: int,
    rest_break_minutes: int,
) -> list[_DraftSlot]:
    ranked = sorted(candidates, key=lambda c: -c.group_score)
    placed: list[_DraftSlot] = []

    for candidate in ranked:
        if len(placed) >= max_per_day:
            break
        if candidate.group_score == 0:
            # Nobody wants it: only a headliner, only to fill a sparse day.
            if len(placed) >= SPARSE_DAY_THRESHOLD or not candidate.artist.headliner:
                continue

        blocker = None
        if candidate.window is not None:
            blocker = next(
                (
                    slot
                    for slot in placed
                    if slot.candidate.window is not None
                    and slot.candidate.window.blocks(candidate.window, rest_break_minutes)
                ),
                None,
            )
        if blocker is not None:
            blocker.displaced.append(candidate)
        else:
            placed.append(_DraftSlot(candidate=candidate))

    return sorted(
        placed,
        key=lambda s: (
            s.candidate.window is None,
            s.candidate.window.start if s.candidate.window is not None else 0,
        ),
    )


def _decide(draft: _DraftSlot) -> GroupItinerarySlot:
    candidate = draft.candidate
    matches = candidate.member_matches
    matched = [m for m in matches if m.score > 0]

    alternatives = [
        GroupAlternative(
            artist=alt.artist, member_matches=alt.member_matches, group_score=alt.group_score
        )
        for alt in draft.displaced
    ]

    if not matched or len(matched) == len(matches):
        return GroupItinerarySlot(
            artist=candidate.artist,
            decided_by=DecisionType.CONSENSUS,
            member_matches=matches,
            group_score=candidate.group_score,
            alternatives=alternatives,
        )

    winner = max(matches, key=lambda m: m.score)
    winning_member = WinningMember(
        user_id=winner.user_id, username=winner.username, score=winner.score
    )

    for alt in draft.displaced:
        for member in matches:
            if member.user_id == winner.user_id:
                continue
            preferred = alt.score_for(member.user_id)
            if preferred > member.score:
                return GroupItinerarySlot(
                    artist=candidate.artist,
                    decided_by=DecisionType.COMPROMISE,
                    winning_member=winning_member,
                    member_matches=matches,
                    group_score=candidate.group_score,
                    alternatives=alternatives,
                    conflict_resolution=ConflictResolution(
                        losing_member=LosingMember(
                            user_id=member.user_id,
                            username=member.username,
                            preferred_artist=alt.artist.artist_name,
                        ),
                        reason=(
                            f"{winner.username}'s {candidate.artist.artist_name} "
                            f"({winner.score:g}) beat {member.username}'s pick "
                            f"{alt.artist.artist_name} ({preferred:g} vs {member.score:g})"
                        ),
                    ),
                )

    return GroupItinerarySlot(
        artist=candidate.artist,
        decided_by=DecisionType.STRONGEST_MATCH,
        winning_member=winning_member,
        member_matches=matches,
        group_score=candidate.group_score,
        alternatives=alternatives,
    )


def _satisfaction(
    members: Sequence[GroupMemberProfile],
    candidates: Sequence[_Candidate],
    days: Sequence[GroupItineraryDay],
) -> list[MemberSatisfaction]:
    scheduled_ids = {slot.artist.id for day in days for slot in day.slots}
    result = []
    for member in members:
        must_sees = [
            c for c in candidates if c.score_for(member.user_id) >= MEMBER_MUST_SEE_THRESHOLD
        ]
        covered = sum(1 for c in must_sees if c.artist.id in scheduled_ids)
        compromises = sum(
            1
            for day in days
            for slot in day.slots
            if slot.conflict_resolution is not None
            and slot.conflict_resolution.losing_member.user_id == member.user_id
        )
        total = len(must_sees)
        result.append(
            MemberSatisfaction(
                user_id=member.user_id,
                username=member.username,
                satisfaction_score=round(covered / total * 100) if total else 100,
                must_sees_covered=covered,
                must_sees_total=total,
                compromises=compromises,
            )
        )
    return result


def _highlights(
    consensus_rate: int,
    compromise_count: int,
    satisfaction: Sequence[MemberSatisfaction],
    slot_count: int,
) -> list[str]:
    highlights: list[str] = []
    if slot_count:
        highlights.append(f"{consensus_rate}% of picks are group consensus")
    if compromise_count:
        highlights.append(f"{compromise_count} compromises to balance the group")
    if satisfaction:
        average = round(sum(s.satisfaction_score for s in satisfaction) / len(satisfaction))
        highlights.append(f"Average member satisfaction: {average}%")
    return highlights


def generate_group_itinerary(
    lineup: Sequence[FestivalArtist],
    festival: Festival,
    members: Sequence[GroupMemberProfile],
    max_per_day: int = DEFAULT_MAX_PER_DAY,
    rest_break_minutes: int = DEFAULT_GROUP_REST_BREAK_MINUTES,
) -> GeneratedGroupItinerary:
    """Plan a festival for a whole group.

    Parameters
    ----------
    lineup:
        The festival lineup.
    festival:
        The festival; its start date maps day names to calendar dates.
    members:
        Each member's taste, from :func:`build_member_taste`.
    max_per_day:
        Hard cap on sets per day.
    rest_break_minutes:
        Minimum gap kept around every scheduled set.

    Returns
    -------
    GeneratedGroupItinerary
        Days in calendar order with labelled slots, the consensus rate,
        per-member satisfaction and highlights.

    Raises
    ------
    InvalidInputError
        If there are no members, an option is negative or a lineup time
        is not ``HH:MM``.
    """
    if not members:
        raise InvalidInputError("A group itinerary needs at least one member")
    validate_options(max_per_day, rest_break_minutes)

    candidates = [_candidate(artist, members) for artist in lineup]
    by_day: dict[str, list[_Candidate]] = {}
    for candidate in candidates:
        by_day.setdefault(candidate.artist.day or DEFAULT_DAY_NAME, []).append(candidate)

    days: list[GroupItineraryDay] = []
    for day_name in ordered_day_names(list(by_day), festival.dates.start):
        slots = [
            _decide(draft)
            for draft in _place_day(by_day[day_name], max_per_day, rest_break_minutes)
        ]
        days.append(
            GroupItineraryDay(
                day_name=day_name,
                date=day_date_string(day_name, festival.dates.start),
                slots=slots,
                group_score=sum(s.group_score for s in slots),
                consensus_count=sum(1 for s in slots if s.decided_by == DecisionType.CONSENSUS),
                compromise_count=sum(
                    1 for s in slots if s.decided_by == DecisionType.COMPROMISE
                ),
            )
        )

    slot_count = sum(len(d.slots) for d in days)
    consensus = sum(d.consensus_count for d in days)
    compromises = sum(d.compromise_count for d in days)
    consensus_rate = round(consensus / slot_count * 100) if slot_count else 0
    satisfaction = _satisfaction(members, candidates, days)

    logger.info(
        "group_itinerary_generated",
        festival_id=festival.id,
        members=len(members),
        slots=slot_count,
        compromises=compromises,
    )
    return GeneratedGroupItinerary(
        days=days,
        total_group_score=sum(d.group_score for d in days),
        consensus_rate=consensus_rate,
        member_satisfaction=satisfaction,
        highlights=_highlights(consensus_rate, compromises, satisfaction, slot_count),
    )
