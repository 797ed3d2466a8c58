"""Concert listing models shared by every ticketing source.

Each ticketing provider (Ticketmaster, SeatGeek, Bandsintown) transforms
its own payload into a :class:`Concert`.  The concert aggregator then
folds listings from every source into :class:`AggregatedConcert` records,
one per real-world event.  ``match_score`` and ``match_reasons`` are not
intrinsic to a listing; the match scorer attaches them on a copy.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.config.tuning import PLACEHOLDER_IMAGE


class ConcertSource(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Ticketing sources, in merge priority order."""

    TICKETMASTER = "ticketmaster"
    SEATGEEK = "seatgeek"
    BANDSINTOWN = "bandsintown"


class VenueSize(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    """Rough venue capacity bucket guessed from the venue name."""

    INTIMATE = "intimate"
    MEDIUM = "medium"
    LARGE = "large"
    ARENA = "arena"
    FESTIVAL = "festival"


class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class ConcertVenue(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = ""
    city: str = ""
    state: str | None = None
    country: str = ""
    address: str | None = None
    location: GeoPoint | None = None


class PriceRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    currency: str = "USD"


class Concert(BaseModel):
    """A normalized concert listing from one ticketing source.

    ``date`` is a ``YYYY-MM-DD`` string and ``time`` an optional ``HH:MM``
    local start time.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    artists: list[str] = Field(default_factory=list)
    venue: ConcertVenue = Field(default_factory=ConcertVenue)
    date: str
    time: str | None = None
    image_url: str = PLACEHOLDER_IMAGE
    ticket_url: str = ""
    price_range: PriceRange | None = None
    genres: list[str] = Field(default_factory=list)
    venue_size: VenueSize | None = None
    distance: float | None = None
    match_score: float | None = None
    match_reasons: list[str] | None = None


class AlternateUrl(BaseModel):
    model_config = ConfigDict(frozen=True)

    source: ConcertSource
    url: str


class BestPrice(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float
    source: ConcertSource


class AggregatedConcert(Concert):
    """One real-world event after cross-source deduplication.

    ``sources`` lists every ticketing source that carried the event, the
    primary (highest-priority) source first.  It is never empty.
    """

    sources: list[ConcertSource] = Field(min_length=1)
    alternate_urls: list[AlternateUrl] = Field(default_factory=list)
    best_price: BestPrice | None = None


class BestPriceLink(BaseModel):
    """Where to buy the cheapest ticket for an aggregated concert."""

    model_config = ConfigDict(frozen=True)

    source: ConcertSource
    url: str
    min: float
    max: float


class ConcertSearchParams(BaseModel):
    """Search filters passed to every ticketing source."""

    model_config = ConfigDict(frozen=True)

    city: str | None = None
    state: str | None = None
    lat: float | None = None
    lng: float | None = None
    radius_miles: int = 50
    date_from: str | None = None
    date_to: str | None = None
    keyword: str | None = None
    artist_names: list[str] = Field(default_factory=list)
    sources: list[ConcertSource] | None = None
    size: int = 100


class SourceSearchResult(BaseModel):
    """What one ticketing source returned for a search."""

    model_config = ConfigDict(frozen=True)

    source: ConcertSource
    concerts: list[Concert] = Field(default_factory=list)
    total: int = 0


class AggregatorResult(BaseModel):
    """Merged listings across every searched source."""

    model_config = ConfigDict(frozen=True)

    concerts: list[AggregatedConcert] = Field(default_factory=list)
    total_by_source: dict[str, int] = Field(default_factory=dict)
    searched_sources: list[ConcertSource] = Field(default_factory=list)
    failed_sources: list[ConcertSource] = Field(default_factory=list)
