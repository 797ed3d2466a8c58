"""Abstract base class for ticketing-source providers.

Each ticketing API (Ticketmaster Discovery, SeatGeek, Bandsintown) is
wrapped in an adapter that turns its payload into normalized
:class:`~src.models.concert.Concert` records.  The concert aggregation
service only ever talks to this interface, so a source can be added or
mocked without touching the merge logic.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from src.models.concert import ConcertSearchParams, ConcertSource, SourceSearchResult


class IConcertSource(ABC):
    """Contract for ticketing-source adapters."""

    @abstractmethod
    async def search(self, params: ConcertSearchParams) -> SourceSearchResult:
        """Search the source for music events.

        Parameters
        ----------
        params:
            Location, date range and (for artist-centric sources) the
            artist names to look up.

        Returns
        -------
        SourceSearchResult
            Normalized concerts plus the source's reported total.

        Raises
        ------
        ProviderUnavailableError
            If the source cannot be reached.
        RateLimitError
            If the source throttled the request.
        TicketSourceError
            If the response could not be read.
        """

    @abstractmethod
    def get_source(self) -> ConcertSource:
        """Return which ticketing source this adapter wraps."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the adapter has the credentials it needs."""
