"""Public interface definitions for swappable collaborators.

Every external service, and every pluggable strategy the core relies on,
is accessed through the abstract base classes defined in this package.
Concrete adapters implement these interfaces and are injected at runtime.

CONCRETE PROVIDER MAP:
    Interface         →  Concrete implementations (in src/providers/)
    ─────────────────────────────────────────────────────────────────
    IConcertSource    →  TicketmasterProvider, SeatGeekProvider,
                         BandsintownProvider
    ICacheProvider    →  MemoryCacheProvider
    IArtistIndex      →  LinearScanArtistIndex
"""

from src.interfaces.artist_index import IArtistIndex
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.concert_source import IConcertSource

__all__ = [
    "IArtistIndex",
    "ICacheProvider",
    "IConcertSource",
]
