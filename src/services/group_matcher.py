"""Group ("concert buddy") matching.

Answers two questions for a group of two or more users:

1. What do they have in common?  ``find_overlap_artists`` and
   ``find_overlap_genres`` count how many members list each artist or
   genre and keep the ones shared by at least two members.
2. How well does a concert fit the group?  ``calculate_group_match_score``
   checks each member individually and classifies the concert as
   ``universal`` (everyone), ``majority`` (at least half) or ``some``.

The group score is a ranking signal, not a percentage: the matched share
of the group (0–100) plus +50 when the concert features a shared favourite
and +20 when it hits a shared genre, capped at 150.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog

from src.config.tuning import (
    GROUP_MAJORITY_FRACTION,
    GROUP_OVERLAP_ARTIST_BONUS,
    GROUP_OVERLAP_DISPLAY_LIMIT,
    GROUP_OVERLAP_GENRE_BONUS,
    GROUP_SCORE_CAP,
)
from src.models.concert import Concert
from src.models.group import GroupMatchResult, GroupMatchType, GroupMember, MatchedMember
from src.providers.artist_index.linear_scan_index import LinearScanArtistIndex
from src.utils.text_normalizer import genres_overlap, is_same_artist, normalize_genre

logger = structlog.get_logger(logger_name=__name__)


def find_overlap_artists(members: Sequence[GroupMember]) -> list[str]:
    """Artists listed by at least two members, most shared first.

    Artist identity is fuzzy; a member listing the same artist twice only
    counts once.  The returned name is the first spelling seen.
    """
    if len(members) < 2:
        return []

    index = LinearScanArtistIndex()
    display: dict[str, str] = {}
    counts: dict[str, int] = {}

    for member in members:
        seen: set[str] = set()
        for artist in member.top_artists:
            key, created = index.find_or_insert(artist)
            if created:
                display[key] = artist
            if key not in seen:
                seen.add(key)
                counts[key] = counts.get(key, 0) + 1

    shared = sorted(
        (key for key, count in counts.items() if count >= 2),
        key=lambda key: -counts[key],
    )
    return [display[key] for key in shared]


def find_overlap_genres(members: Sequence[GroupMember]) -> list[str]:
    """Lowercase genres listed by at least two members, most shared first."""
    if len(members) < 2:
        return []

    counts: dict[str, int] = {}
    for member in members:
        seen: set[str] = set()
        for genre in member.top_genres:
            key = normalize_genre(genre)
            if key and key not in seen:
                seen.add(key)
                counts[key] = counts.get(key, 0) + 1

    shared = [genre for genre, count in counts.items() if count >= 2]
    return sorted(shared, key=lambda genre: -counts[genre])


def _member_reason(
    member: GroupMember,
    concert_artists: Sequence[str],
    concert_genres: Sequence[str],
) -> str | None:
    for concert_artist in concert_artists:
        for artist in member.top_artists:
            if is_same_artist(artist, concert_artist):
                return f"Loves {artist}"
    for genre in member.top_genres:
        if any(genres_overlap(cg, genre) for cg in concert_genres):
            return f"Into {genre}"
    return None


def calculate_group_match_score(
    concert_artists: Iterable[str],
    concert_genres: Iterable[str],
    members: Sequence[GroupMember],
    concert_id: str = "",
) -> GroupMatchResult:
    """Classify how well a concert fits a group.

    Parameters
    ----------
    concert_artists:
        The concert's billed artist names.
    concert_genres:
        The concert's genre tags.
    members:
        The group's members with their top artists and genres.
    concert_id:
        Copied onto the result for the caller's convenience.

    Returns
    -------
    GroupMatchResult
        Score in [0, 150], the match type, one reason per matched member
        and the group's top shared artists and genres.
    """
    concert_artists = list(concert_artists)
    concert_genres = list(concert_genres)
    overlap_artists = find_overlap_artists(members)
    overlap_genres = find_overlap_genres(members)

    matched: list[MatchedMember] = []
    for member in members:
        reason = _member_reason(member, concert_artists, concert_genres)
        if reason is not None:
            matched.append(
                MatchedMember(user_id=member.user_id, username=member.username, match_reason=reason)
            )

    if not members:
        return GroupMatchResult(concert_id=concert_id)

    ratio = len(matched) / len(members)
    if ratio == 1:
        match_type = GroupMatchType.UNIVERSAL
    elif ratio >= GROUP_MAJORITY_FRACTION:
        match_type = GroupMatchType.MAJORITY
    else:
        match_type = GroupMatchType.SOME

    score = ratio * 100
    if any(
        is_same_artist(shared, artist) for artist in concert_artists for shared in overlap_artists
    ):
        score += GROUP_OVERLAP_ARTIST_BONUS
    if any(genres_overlap(cg, shared) for shared in overlap_genres for cg in concert_genres):
        score += GROUP_OVERLAP_GENRE_BONUS

    return GroupMatchResult(
        concert_id=concert_id,
        score=min(round(score), GROUP_SCORE_CAP),
        match_type=match_type,
        matched_members=matched,
        overlap_artists=overlap_artists[:GROUP_OVERLAP_DISPLAY_LIMIT],
        overlap_genres=overlap_genres[:GROUP_OVERLAP_DISPLAY_LIMIT],
    )


def rank_concerts_for_group(
    concerts: Iterable[Concert],
    members: Sequence[GroupMember],
) -> list[tuple[Concert, GroupMatchResult]]:
    """Score every concert for the group, best fit first (stable on ties)."""
    scored = [
        (concert, calculate_group_match_score(concert.artists, concert.genres, members, concert.id))
        for concert in concerts
    ]
    scored.sort(key=lambda pair: -pair[1].score)
    logger.debug("group_concerts_ranked", concerts=len(scored), members=len(members))
    return scored
