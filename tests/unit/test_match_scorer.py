"""Unit tests for src.services.match_scorer — concert and festival matching."""

from __future__ import annotations

import pytest

from src.models.concert import Concert, ConcertVenue
from src.models.festival import FestivalArtist, MatchType
from src.models.music import AggregatedArtist, ServiceId, UserMusicProfile
from src.services.match_scorer import (
    calculate_artist_match,
    calculate_festival_match,
    match_concert,
    rank_concerts,
    score_concert,
    score_lineup,
)


def _concert(concert_id: str, artists: list[str], genres: list[str] | None = None) -> Concert:
    return Concert(
        id=concert_id,
        name=" & ".join(artists),
        artists=artists,
        venue=ConcertVenue(name="The Greek", city="Los Angeles"),
        date="2026-05-01",
        genres=genres or [],
    )


def _lineup_artist(artist_id: str, name: str, genres: list[str] | None = None) -> FestivalArtist:
    return FestivalArtist(id=artist_id, artist_name=name, genres=genres or [])


def _profile_with(*names: str, genres: list[str] | None = None) -> UserMusicProfile:
    return UserMusicProfile(
        top_artists=[
            AggregatedArtist(name=n, normalized_name=n.lower(), sources=[ServiceId.SPOTIFY])
            for n in names
        ],
        top_genres=genres or [],
    )


# ======================================================================
# Concert scoring
# ======================================================================


class TestScoreConcert:
    def test_top_artist_at_rank_zero(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Phoebe Bridgers"], [], indie_profile)

        assert result.score == pytest.approx(150)
        assert result.score > 100
        assert result.reasons == ["You love Phoebe Bridgers"]

    def test_rank_bonus_decays(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Mitski"], [], indie_profile)
        assert result.score == pytest.approx(100 + 50 - 3 * 0.5)

    def test_multi_source_bonus_and_reason(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["boygenius"], [], indie_profile)

        assert result.score == pytest.approx(100 + 49.5 + 10)
        assert result.reasons == ["You love boygenius (2 services)"]

    def test_only_first_top_artist_hit_counts(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Mitski", "Phoebe Bridgers"], [], indie_profile)
        assert result.score == pytest.approx(148.5)
        assert result.reasons == ["You love Mitski"]

    def test_recently_played(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Alvvays"], [], indie_profile)

        assert result.score == pytest.approx(70)
        assert result.reasons == ["Recently played Alvvays"]

    def test_genre_only(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Unknown Band"], ["Indie Rock", "Death Metal"], indie_profile)

        assert result.score == pytest.approx(15)
        assert result.reasons == ["Matches your indie rock taste"]

    def test_genre_bonus_stacks_per_matching_genre(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Unknown Band"], ["indie rock", "indie pop"], indie_profile)
        assert result.score == pytest.approx(30)

    def test_top_artist_plus_genre_keeps_single_reason(
        self, indie_profile: UserMusicProfile
    ) -> None:
        result = score_concert(["Phoebe Bridgers"], ["indie rock"], indie_profile)

        assert result.score == pytest.approx(165)
        assert result.reasons == ["You love Phoebe Bridgers"]

    def test_no_match_is_zero_not_error(self, indie_profile: UserMusicProfile) -> None:
        result = score_concert(["Metallica"], ["thrash metal"], indie_profile)
        assert result.score == 0
        assert result.reasons == []

    def test_empty_profile(self, empty_profile: UserMusicProfile) -> None:
        result = score_concert(["Phoebe Bridgers"], ["indie rock"], empty_profile)
        assert result.score == 0


class TestRankConcerts:
    def test_match_concert_returns_copy(self, indie_profile: UserMusicProfile) -> None:
        original = _concert("c1", ["Phoebe Bridgers"])
        matched = match_concert(original, indie_profile)

        assert original.match_score is None
        assert matched.match_score == pytest.approx(150)
        assert matched.match_reasons == ["You love Phoebe Bridgers"]

    def test_sorted_highest_first(self, indie_profile: UserMusicProfile) -> None:
        ranked = rank_concerts(
            [
                _concert("none", ["Metallica"]),
                _concert("genre", ["Unknown"], ["indie rock"]),
                _concert("top", ["Phoebe Bridgers"]),
            ],
            indie_profile,
        )
        assert [c.id for c in ranked] == ["top", "genre", "none"]

    def test_min_score_filters(self, indie_profile: UserMusicProfile) -> None:
        ranked = rank_concerts(
            [_concert("none", ["Metallica"]), _concert("top", ["Phoebe Bridgers"])],
            indie_profile,
            min_score=1,
        )
        assert [c.id for c in ranked] == ["top"]

    def test_ties_keep_input_order(self, indie_profile: UserMusicProfile) -> None:
        ranked = rank_concerts(
            [_concert("first", ["Metallica"]), _concert("second", ["Slayer"])],
            indie_profile,
        )
        assert [c.id for c in ranked] == ["first", "second"]

    def test_scores_never_negative(self, indie_profile: UserMusicProfile) -> None:
        ranked = rank_concerts(
            [_concert(str(i), [name]) for i, name in enumerate(["", "x", "Mitski", "Alvvays"])],
            indie_profile,
        )
        assert all((c.match_score or 0) >= 0 for c in ranked)


# ======================================================================
# Festival tiers
# ======================================================================


class TestCalculateArtistMatch:
    def test_perfect_requires_normalized_equality(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(_lineup_artist("a", "phoebe bridgers!"), indie_profile)

        assert match.match_type == MatchType.PERFECT
        assert match.match_score == 100
        assert match.match_reason == "In your top artists"
        assert match.normalized_name == "phoebe bridgers"

    def test_fuzzy_only_name_is_not_perfect(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(
            _lineup_artist("a", "Phoebe Bridgers Band"), indie_profile
        )
        assert match.match_type == MatchType.NONE

    def test_leading_the_is_ignored(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(_lineup_artist("a", "National"), indie_profile)
        assert match.match_type == MatchType.PERFECT

    def test_genre_tier_one_overlap(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(
            _lineup_artist("a", "Beach House", ["dream pop", "Indie Pop"]), indie_profile
        )

        assert match.match_type == MatchType.GENRE
        assert match.match_score == 45
        assert match.match_reason == "Matches your Indie Pop taste"

    def test_genre_tier_capped_at_70(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(
            _lineup_artist("a", "Someone", ["indie rock", "indie pop", "bedroom pop"]),
            indie_profile,
        )
        assert match.match_score == 70

    def test_discovery_through_shared_root(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(
            _lineup_artist("a", "Indie Folk Trio", ["indie folk"]), indie_profile
        )

        assert match.match_type == MatchType.DISCOVERY
        assert match.match_score == 40
        assert match.match_reason == "You might discover"

    def test_none(self, indie_profile: UserMusicProfile) -> None:
        match = calculate_artist_match(
            _lineup_artist("a", "Techno Unit", ["techno"]), indie_profile
        )

        assert match.match_type == MatchType.NONE
        assert match.match_score == 0
        assert match.match_reason is None

    def test_score_lineup_keeps_order(self, indie_profile, lineup) -> None:
        matches = score_lineup(lineup, indie_profile)
        assert [m.id for m in matches] == [a.id for a in lineup]


class TestCalculateFestivalMatch:
    def test_empty_lineup(self, indie_profile: UserMusicProfile) -> None:
        summary = calculate_festival_match([], indie_profile)
        assert summary.match_percentage == 0
        assert summary.total_artist_count == 0

    def test_profile_without_top_artists(self, empty_profile, lineup) -> None:
        summary = calculate_festival_match(lineup, empty_profile)

        assert summary.match_percentage == 0
        assert summary.total_artist_count == len(lineup)
        assert all(m.match_type == MatchType.NONE for m in summary.all_matches)

    def test_percentage_is_mean_score(self) -> None:
        profile = _profile_with("A Band", "B Band", genres=["indie rock"])
        lineup = [
            _lineup_artist("1", "A Band"),
            _lineup_artist("2", "B Band"),
            _lineup_artist("3", "C Band", ["indie rock"]),
            _lineup_artist("4", "D Band", ["techno"]),
        ]

        summary = calculate_festival_match(lineup, profile)

        # (100 + 100 + 45 + 0) / 400
        assert summary.match_percentage == 61
        assert summary.matched_artist_count == 3
        assert [m.id for m in summary.perfect_matches] == ["1", "2"]
        assert [m.id for m in summary.discovery_matches] == ["3"]
        assert summary.all_matches[-1].id == "4"

    def test_five_perfect_matches_add_bonus(self) -> None:
        names = [f"Band {chr(65 + i)}" for i in range(10)]
        profile = _profile_with(*names[:5])
        summary = calculate_festival_match(
            [_lineup_artist(str(i), n) for i, n in enumerate(names)], profile
        )
        assert summary.match_percentage == 60

    def test_never_exceeds_98(self) -> None:
        names = [f"Band {chr(65 + i)}" for i in range(12)]
        profile = _profile_with(*names)
        summary = calculate_festival_match(
            [_lineup_artist(str(i), n) for i, n in enumerate(names)], profile
        )
        assert summary.match_percentage == 98

    def test_percentage_bounded(self, indie_profile, lineup) -> None:
        summary = calculate_festival_match(lineup, indie_profile)
        assert 0 <= summary.match_percentage <= 98
