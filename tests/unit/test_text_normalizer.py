"""Unit tests for src.utils.text_normalizer."""

from __future__ import annotations

import pytest

from src.utils.text_normalizer import (
    contains_either,
    fuzzy_equal,
    genre_root,
    genres_overlap,
    is_same_artist,
    normalize_artist_name,
    normalize_genre,
    normalize_name,
)

_SAMPLE_NAMES = [
    "The Weeknd",
    "  the   weeknd!! ",
    "AC/DC",
    "Beyoncé",
    "The The",
    "the the the band",
    "Sigur Rós",
    "!!!",
    "",
    "Run-D.M.C.",
    "Tyler, The Creator",
]


class TestNormalizeName:
    def test_lowercases_and_strips_punctuation(self) -> None:
        assert normalize_name("  The   Weeknd!! ") == "the weeknd"

    def test_none_is_empty(self) -> None:
        assert normalize_name(None) == ""

    def test_accents_are_removed_not_folded(self) -> None:
        assert normalize_name("Beyoncé") == "beyonc"

    def test_collapses_internal_whitespace(self) -> None:
        assert normalize_name("Run  -  D.M.C.") == "run dmc"

    @pytest.mark.parametrize("name", _SAMPLE_NAMES)
    def test_idempotent(self, name: str) -> None:
        once = normalize_name(name)
        assert normalize_name(once) == once


class TestNormalizeArtistName:
    def test_drops_leading_the(self) -> None:
        assert normalize_artist_name("The National") == "national"
        assert normalize_artist_name("National") == "national"

    def test_keeps_the_inside_name(self) -> None:
        assert normalize_artist_name("Tyler, The Creator") == "tyler the creator"

    @pytest.mark.parametrize("name", _SAMPLE_NAMES)
    def test_idempotent(self, name: str) -> None:
        once = normalize_artist_name(name)
        assert normalize_artist_name(once) == once


class TestNormalizeGenre:
    def test_keeps_punctuation(self) -> None:
        assert normalize_genre("  R&B ") == "r&b"
        assert normalize_genre("Hip-Hop") == "hip-hop"

    def test_empty(self) -> None:
        assert normalize_genre(None) == ""


class TestFuzzyEqual:
    def test_exact_after_normalization(self) -> None:
        assert fuzzy_equal("The Weeknd", "the weeknd!") is True

    def test_accented_name_matches_plain_spelling(self) -> None:
        # "beyonc" is contained in "beyonce".
        assert fuzzy_equal("Beyoncé", "beyonce") is True

    def test_substring_with_long_enough_shorter_name(self) -> None:
        assert fuzzy_equal("Drake", "Drake feat. 21 Savage") is True

    def test_short_substring_does_not_match(self) -> None:
        assert fuzzy_equal("Sia", "Siamese Dream") is False

    def test_single_typo_in_long_name_matches(self) -> None:
        assert fuzzy_equal("Radiohead", "Radioheed") is True
        assert fuzzy_equal("Arcade Fire", "Arcade Fyre") is True

    def test_two_edits_in_short_name_do_not_match(self) -> None:
        assert fuzzy_equal("Radiohead", "Radiohaed") is False

    def test_different_names(self) -> None:
        assert fuzzy_equal("Mitski", "Metallica") is False

    def test_empty_only_matches_empty(self) -> None:
        assert fuzzy_equal("", "Drake") is False
        assert fuzzy_equal("!!!", None) is True

    @pytest.mark.parametrize(
        ("a", "b"),
        [
            ("Drake", "Drake feat. 21 Savage"),
            ("Radiohead", "Radioheed"),
            ("Sia", "Siamese Dream"),
            ("Beyoncé", "beyonce"),
            ("", "x"),
            ("The National", "National"),
            ("Muse", "Museum"),
        ],
    )
    def test_symmetric(self, a: str, b: str) -> None:
        assert fuzzy_equal(a, b) == fuzzy_equal(b, a)
        assert is_same_artist(a, b) == is_same_artist(b, a)


class TestIsSameArtist:
    def test_ignores_leading_the(self) -> None:
        assert is_same_artist("The National", "National") is True

    def test_blank_never_matches_a_name(self) -> None:
        assert is_same_artist("", "Drake") is False


class TestContainsEither:
    def test_venue_variants(self) -> None:
        assert contains_either("Madison Square Garden", "MSG - Madison Square Garden") is True

    def test_blank_never_matches(self) -> None:
        assert contains_either("", "Los Angeles") is False
        assert contains_either(None, None) is False

    def test_different_cities(self) -> None:
        assert contains_either("Los Angeles", "San Diego") is False


class TestGenres:
    def test_overlap_either_direction(self) -> None:
        assert genres_overlap("indie", "Indie Rock") is True
        assert genres_overlap("Indie Rock", "indie") is True

    def test_overlap_keeps_punctuation(self) -> None:
        assert genres_overlap("Hip-Hop", "hip-hop") is True

    def test_no_overlap(self) -> None:
        assert genres_overlap("rock", "pop") is False
        assert genres_overlap("", "pop") is False

    def test_genre_root(self) -> None:
        assert genre_root("Indie Rock") == "indie"
        assert genre_root("techno") == "techno"
        assert genre_root("") == ""
