"""Abstract base class for the artist collision index.

When the artist aggregator folds per-service lists together it has to ask,
for every incoming name, "is this an artist I have already seen under a
slightly different spelling?".  How that question is answered is a
strategy: a linear scan over every known name is fine for a few hundred
artists, while a phonetic or blocking index would scale further.  The
aggregator only depends on this interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class IArtistIndex(ABC):
    """Contract for fuzzy artist-identity indexes."""

    @abstractmethod
    def find_or_insert(self, name: str) -> tuple[str, bool]:
        """Resolve *name* to an index key, inserting it when it is new.

        Parameters
        ----------
        name:
            The raw display name of the incoming artist.

        Returns
        -------
        tuple[str, bool]
            The key of the matching artist (the normalized name it was
            first inserted under) and ``True`` when the key was just created.
        """

    @abstractmethod
    def update_display_name(self, key: str, name: str) -> None:
        """Record a new display name for *key*, used for later comparisons."""

    @abstractmethod
    def __len__(self) -> int:
        """Number of distinct artists in the index."""
