"""Taste match scoring for concerts and festival lineups.

Two scoring policies share the same name and genre comparison helpers:

**Concert matching** produces a sortable scalar plus human-readable
reasons.  A top-artist hit is worth 100, plus a rank bonus that decays
with the artist's position in the profile and a bonus for every extra
service that listed the artist.  Failing that, a recently played artist is
worth 70.  Every candidate genre that overlaps a top genre then adds 15.

**Festival matching** buckets each lineup artist into a discrete tier
(``perfect`` / ``genre`` / ``discovery`` / ``none``) because the festival
pages group artists by tier and the itinerary generator schedules by it.

A score of 0 is a valid answer, not an error: the candidate is still
returned and simply ranks last.
"""

from __future__ import annotations

from typing import Iterable

import structlog

from src.config.tuning import (
    DISCOVERY_SCORE,
    FESTIVAL_BONUS_TIER1,
    FESTIVAL_BONUS_TIER1_CAP,
    FESTIVAL_BONUS_TIER1_MIN_PERFECT,
    FESTIVAL_BONUS_TIER2,
    FESTIVAL_BONUS_TIER2_CAP,
    FESTIVAL_BONUS_TIER2_MIN_PERFECT,
    FESTIVAL_MATCH_CEILING,
    GENRE_MATCH_BONUS,
    GENRE_TIER_BASE,
    GENRE_TIER_CAP,
    GENRE_TIER_STEP,
    MULTI_SOURCE_BONUS,
    PERFECT_MATCH_SCORE,
    RANK_BONUS_MAX,
    RANK_BONUS_STEP,
    RECENT_ARTIST_SCORE,
    TOP_ARTIST_BASE_SCORE,
)
from src.models.concert import Concert
from src.models.festival import (
    FestivalArtist,
    FestivalArtistMatch,
    FestivalMatchSummary,
    MatchType,
)
from src.models.music import MatchResult, UserMusicProfile
from src.utils.text_normalizer import (
    genre_root,
    genres_overlap,
    is_same_artist,
    normalize_artist_name,
    normalize_genre,
)

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Concert matching
# ---------------------------------------------------------------------------

def score_concert(
    artists: Iterable[str],
    genres: Iterable[str],
    profile: UserMusicProfile,
) -> MatchResult:
    """Score one candidate (artists + genres) against a user's profile.

    Parameters
    ----------
    artists:
        The candidate's billed artist names.
    genres:
        The candidate's genre tags.
    profile:
        The user's aggregated taste profile.

    Returns
    -------
    MatchResult
        A non-negative score and the reasons behind it, strongest first.
    """
    artists = list(artists)
    score = 0.0
    reasons: list[str] = []

    top_artist_hit = False
    for candidate in artists:
        for rank, top in enumerate(profile.top_artists):
            if not is_same_artist(top.name, candidate):
                continue
            rank_bonus = max(0.0, RANK_BONUS_MAX - rank * RANK_BONUS_STEP)
            source_count = len(top.sources)
            source_bonus = max(source_count - 1, 0) * MULTI_SOURCE_BONUS
            score += TOP_ARTIST_BASE_SCORE + rank_bonus + source_bonus
            suffix = f" ({source_count} services)" if source_count > 1 else ""
            reasons.append(f"You love {top.name}{suffix}")
            top_artist_hit = True
            break
        if top_artist_hit:
            break

    if not top_artist_hit:
        for candidate in artists:
            if any(is_same_artist(name, candidate) for name in profile.recent_artist_names):
                score += RECENT_ARTIST_SCORE
                reasons.append(f"Recently played {candidate}")
                break

    matching_genres = [
        normalize_genre(genre)
        for genre in genres
        if any(genres_overlap(genre, top) for top in profile.top_genres)
    ]
    if matching_genres:
        score += len(matching_genres) * GENRE_MATCH_BONUS
        if not reasons:
            reasons.append(f"Matches your {matching_genres[0]} taste")

    return MatchResult(score=score, reasons=reasons)


def match_concert(concert: Concert, profile: UserMusicProfile) -> Concert:
    """Return a copy of *concert* with ``match_score``/``match_reasons`` attached."""
    result = score_concert(concert.artists, concert.genres, profile)
    return concert.model_copy(
        update={"match_score": result.score, "match_reasons": list(result.reasons)}
    )


def rank_concerts(
    concerts: Iterable[Concert],
    profile: UserMusicProfile,
    min_score: float = 0.0,
) -> list[Concert]:
    """Score every concert and sort by score, highest first.

    Concerts scoring below *min_score* are dropped.  Equal scores keep
    their input order.
    """
    scored = [match_concert(c, profile) for c in concerts]
    kept = [c for c in scored if (c.match_score or 0.0) >= min_score]
    kept.sort(key=lambda c: -(c.match_score or 0.0))
    logger.debug("concerts_ranked", scored=len(scored), kept=len(kept))
    return kept


# ---------------------------------------------------------------------------
# Festival matching
# ---------------------------------------------------------------------------

def _with_match(
    artist: FestivalArtist,
    match_type: MatchType,
    score: float,
    reason: str | None,
) -> FestivalArtistMatch:
    data = artist.model_dump(include=set(FestivalArtist.model_fields))
    data["normalized_name"] = artist.normalized_name or normalize_artist_name(artist.artist_name)
    return FestivalArtistMatch(
        **data, match_type=match_type, match_score=score, match_reason=reason
    )


def _is_related_genre(artist_genre: str, user_genre: str) -> bool:
    # "indie rock" relates to "indie pop" through the shared root "indie".
    left = normalize_genre(artist_genre)
    right = normalize_genre(user_genre)
    left_root = genre_root(left)
    right_root = genre_root(right)
    if not left_root or not right_root:
        return False
    return right_root in left or left_root in right


def calculate_artist_match(
    artist: FestivalArtist,
    profile: UserMusicProfile,
) -> FestivalArtistMatch:
    """Place one lineup artist into a match tier for this profile.

    * ``perfect`` (100): the normalized name equals a top artist's
    * ``genre`` (``min(70, 30 + 15 * overlaps)``): genre tags overlap
    * ``discovery`` (40): a genre shares its first word with a user genre
    * ``none`` (0)
    """
    normalized = normalize_artist_name(artist.artist_name)
    if normalized and any(
        normalize_artist_name(top.name) == normalized for top in profile.top_artists
    ):
        return _with_match(artist, MatchType.PERFECT, PERFECT_MATCH_SCORE, "In your top artists")

    overlap = [
        genre
        for genre in artist.genres
        if any(genres_overlap(genre, user_genre) for user_genre in profile.top_genres)
    ]
    if overlap:
        score = min(GENRE_TIER_CAP, GENRE_TIER_BASE + len(overlap) * GENRE_TIER_STEP)
        return _with_match(artist, MatchType.GENRE, score, f"Matches your {overlap[0]} taste")

    if any(
        _is_related_genre(genre, user_genre)
        for genre in artist.genres
        for user_genre in profile.top_genres
    ):
        return _with_match(artist, MatchType.DISCOVERY, DISCOVERY_SCORE, "You might discover")

    return _with_match(artist, MatchType.NONE, 0, None)


def score_lineup(
    lineup: Iterable[FestivalArtist],
    profile: UserMusicProfile,
) -> list[FestivalArtistMatch]:
    """Tier every lineup artist, keeping lineup order."""
    return [calculate_artist_match(artist, profile) for artist in lineup]


def _by_score(matches: list[FestivalArtistMatch]) -> list[FestivalArtistMatch]:
    return sorted(matches, key=lambda m: -m.match_score)


def calculate_festival_match(
    lineup: Iterable[FestivalArtist],
    profile: UserMusicProfile,
) -> FestivalMatchSummary:
    """Score a whole festival lineup for one user.

    The percentage is the sum of per-artist scores over ``lineup * 100``,
    bumped by +10 (capped at 95) for five or more perfect matches and by
    a further +5 (capped at 98) for ten or more, then rounded.  It never
    exceeds 98.  An empty lineup or a profile with no top artists yields
    0% with every artist in the ``none`` tier.
    """
    lineup = list(lineup)
    if not lineup or not profile.top_artists:
        return FestivalMatchSummary(
            total_artist_count=len(lineup),
            all_matches=[_with_match(a, MatchType.NONE, 0, None) for a in lineup],
        )

    matches = score_lineup(lineup, profile)
    perfect = [m for m in matches if m.match_type == MatchType.PERFECT]
    discovery = [
        m for m in matches if m.match_type in (MatchType.GENRE, MatchType.DISCOVERY)
    ]

    total = sum(m.match_score for m in matches)
    percentage = total / (len(lineup) * PERFECT_MATCH_SCORE) * 100
    if len(perfect) >= FESTIVAL_BONUS_TIER1_MIN_PERFECT:
        percentage = min(FESTIVAL_BONUS_TIER1_CAP, percentage + FESTIVAL_BONUS_TIER1)
    if len(perfect) >= FESTIVAL_BONUS_TIER2_MIN_PERFECT:
        percentage = min(FESTIVAL_BONUS_TIER2_CAP, percentage + FESTIVAL_BONUS_TIER2)

    match_percentage = max(0, min(FESTIVAL_MATCH_CEILING, round(percentage)))

    logger.debug(
        "festival_match_calculated",
        lineup_size=len(lineup),
        perfect=len(perfect),
        match_percentage=match_percentage,
    )
    return FestivalMatchSummary(
        match_percentage=match_percentage,
        matched_artist_count=len(perfect) + len(discovery),
        total_artist_count=len(lineup),
        perfect_matches=_by_score(perfect),
        discovery_matches=_by_score(discovery),
        all_matches=_by_score(matches),
    )
