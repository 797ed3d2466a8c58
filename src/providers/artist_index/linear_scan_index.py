"""Linear-scan artist index.

Compares every incoming name against every known display name with
:func:`~src.utils.text_normalizer.is_same_artist`.  O(n²) over a sync, which
is fine at the few-hundred-artists scale a single user's profile reaches.
"""

from __future__ import annotations

from src.interfaces.artist_index import IArtistIndex
from src.utils.text_normalizer import is_same_artist, normalize_artist_name


class LinearScanArtistIndex(IArtistIndex):
    """Scans known artists in insertion order; the first fuzzy match wins."""

    def __init__(self) -> None:
        # key (normalized name at first sight) -> current display name
        self._names: dict[str, str] = {}

    def find_or_insert(self, name: str) -> tuple[str, bool]:
        normalized = normalize_artist_name(name)
        if normalized in self._names:
            return normalized, False

        for key, display_name in self._names.items():
            if is_same_artist(name, display_name):
                return key, False

        self._names[normalized] = name
        return normalized, True

    def update_display_name(self, key: str, name: str) -> None:
        if key in self._names:
            self._names[key] = name

    def __len__(self) -> int:
        return len(self._names)
