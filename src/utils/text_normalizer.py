"""Text normalization utilities for artist, venue and genre names.

Every feature that compares names coming from different services (the
artist aggregator, the concert matcher, the festival matcher, the group
matcher and the cross-source concert deduplicator) goes through this one
module so that "The Weeknd", "the weeknd" and "Weeknd" are treated the
same way everywhere.

Two concerns live here:

1. **Canonical forms** -- ``normalize_name`` case-folds, strips anything
   outside ``[a-z0-9\\s]`` and collapses whitespace.
   ``normalize_artist_name`` additionally drops a leading "the ".

2. **Fuzzy identity** -- ``fuzzy_equal`` / ``is_same_artist`` decide
   whether two names refer to the same real-world artist using exact
   equality, guarded substring containment and a rapidfuzz edit-distance
   ratio for typos.

Accented characters are removed rather than folded ("Beyoncé" becomes
"beyonc"); the substring rule still lets it match "beyonce".
"""

import re
from typing import Callable

from rapidfuzz.distance import Levenshtein

from src.config.tuning import (
    FUZZY_EDIT_RATIO_MAX,
    FUZZY_EDIT_RATIO_MIN_LENGTH,
    FUZZY_SUBSTRING_MIN_LENGTH,
)

_NON_ALNUM = re.compile(r"[^a-z0-9\s]")
_WHITESPACE = re.compile(r"\s+")
# Applied after punctuation/whitespace cleanup so a second pass is a no-op.
_LEADING_THE = re.compile(r"^(?:the )+")


def normalize_name(name: str | None) -> str:
    """Canonicalize a name for comparison.

    Lowercases, removes every character outside ``[a-z0-9\\s]``, collapses
    internal whitespace and trims.  ``None`` normalizes to ``""``.

    Args:
        name: Raw artist, venue or city name.

    Returns:
        The canonical comparison key.
    """
    if not name:
        return ""
    cleaned = _NON_ALNUM.sub("", name.lower())
    return _WHITESPACE.sub(" ", cleaned).strip()


def normalize_artist_name(name: str | None) -> str:
    """Canonicalize an artist name, also dropping a leading "the ".

    "The National" and "National" both normalize to ``"national"``.

    Args:
        name: Raw artist name string.

    Returns:
        Normalized artist name.
    """
    return _LEADING_THE.sub("", normalize_name(name))


def normalize_genre(genre: str | None) -> str:
    """Lowercase a genre tag and collapse its whitespace.

    Genres keep their punctuation ("r&b", "hip-hop") since the tags are
    compared by substring, not by fuzzy identity.
    """
    if not genre:
        return ""
    return _WHITESPACE.sub(" ", genre.lower()).strip()


def fuzzy_equal(
    a: str | None,
    b: str | None,
    normalizer: Callable[[str | None], str] = normalize_name,
) -> bool:
    """Return True when two names are the same under the fuzzy identity rules.

    The rules, applied to the normalized forms:

    * empty forms only match another empty form
    * identical forms match
    * one form containing the other matches when the shorter one has at
      least four characters
    * two forms longer than five characters match when their Levenshtein
      distance divided by the longer length is below 0.2

    Every rule is symmetric, so ``fuzzy_equal(a, b) == fuzzy_equal(b, a)``.

    Args:
        a: First raw name.
        b: Second raw name.
        normalizer: Function producing the canonical forms.

    Returns:
        Whether the names are considered the same entity.
    """
    norm_a = normalizer(a)
    norm_b = normalizer(b)

    if not norm_a or not norm_b:
        return norm_a == norm_b
    if norm_a == norm_b:
        return True

    shorter, longer = sorted((norm_a, norm_b), key=len)
    if len(shorter) >= FUZZY_SUBSTRING_MIN_LENGTH and shorter in longer:
        return True

    if len(shorter) > FUZZY_EDIT_RATIO_MIN_LENGTH:
        distance = Levenshtein.distance(norm_a, norm_b)
        if distance / len(longer) < FUZZY_EDIT_RATIO_MAX:
            return True

    return False


def is_same_artist(a: str | None, b: str | None) -> bool:
    """Fuzzy identity for artist names (leading "the " ignored)."""
    return fuzzy_equal(a, b, normalizer=normalize_artist_name)


def contains_either(a: str | None, b: str | None) -> bool:
    """True when either normalized name contains the other.

    Used for venue and city comparison, where cross-source naming varies
    ("Madison Square Garden" vs "MSG - Madison Square Garden").  Blank
    names never match.
    """
    norm_a = normalize_name(a)
    norm_b = normalize_name(b)
    if not norm_a or not norm_b:
        return False
    return norm_a in norm_b or norm_b in norm_a


def genres_overlap(candidate: str | None, profile_genre: str | None) -> bool:
    """Case-insensitive substring match between two genre tags, either way.

    "indie" matches "indie rock" and "indie rock" matches "indie".
    """
    left = normalize_genre(candidate)
    right = normalize_genre(profile_genre)
    if not left or not right:
        return False
    return left in right or right in left


def genre_root(genre: str | None) -> str:
    """Return the first word of a genre tag ("indie rock" -> "indie")."""
    normalized = normalize_genre(genre)
    return normalized.split(" ", 1)[0] if normalized else ""
