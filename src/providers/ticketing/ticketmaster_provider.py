"""Ticketmaster Discovery API v2 concert source.

Searches music events by location and date range and transforms each
event into a :class:`~src.models.concert.Concert`.  Venue capacity is not
in the payload, so a venue-size bucket is guessed from the venue name.
"""

from __future__ import annotations

from typing import Any

import httpx

from src.config.settings import Settings
from src.config.tuning import PLACEHOLDER_IMAGE
from src.interfaces.concert_source import IConcertSource
from src.models.concert import (
    Concert,
    ConcertSearchParams,
    ConcertSource,
    ConcertVenue,
    GeoPoint,
    PriceRange,
    SourceSearchResult,
    VenueSize,
)
from src.providers.ticketing.http_json import get_json
from src.utils.errors import TicketSourceError
from src.utils.logging import get_logger

_BASE_URL = "https://app.ticketmaster.com/discovery/v2/events.json"
_MIN_IMAGE_WIDTH = 500
_UNDEFINED = "Undefined"

_VENUE_SIZE_KEYWORDS: tuple[tuple[VenueSize, tuple[str, ...]], ...] = (
    (VenueSize.FESTIVAL, ("festival", "fairground", "polo field", "speedway", "raceway")),
    (
        VenueSize.ARENA,
        ("arena", "center", "centre", "coliseum", "stadium", "garden", "forum"),
    ),
    (
        VenueSize.LARGE,
        ("amphitheater", "amphitheatre", "pavilion", "theater", "theatre", "hall"),
    ),
    (
        VenueSize.INTIMATE,
        ("lounge", "club", "bar", "cafe", "coffee", "basement", "room", "tavern", "pub"),
    ),
)


def estimate_venue_size(venue_name: str) -> VenueSize:
    """Guess a capacity bucket from keywords in the venue name."""
    name = venue_name.lower()
    for size, keywords in _VENUE_SIZE_KEYWORDS:
        if any(keyword in name for keyword in keywords):
            return size
    return VenueSize.MEDIUM


def _pick_image(images: list[dict[str, Any]]) -> str:
    wide = next(
        (
            img
            for img in images
            if img.get("ratio") == "16_9" and (img.get("width") or 0) > _MIN_IMAGE_WIDTH
        ),
        None,
    )
    large = next((img for img in images if (img.get("width") or 0) > _MIN_IMAGE_WIDTH), None)
    chosen = wide or large or (images[0] if images else None)
    return (chosen or {}).get("url") or PLACEHOLDER_IMAGE


def _dedupe(values: list[str]) -> list[str]:
    return list(dict.fromkeys(v for v in values if v))


def transform_event(event: dict[str, Any]) -> Concert:
    """Convert one Discovery API event into a Concert."""
    embedded = event.get("_embedded") or {}
    venues = embedded.get("venues") or []
    venue_data = venues[0] if venues else None

    if venue_data:
        location = None
        raw_location = venue_data.get("location")
        if raw_location:
            location = GeoPoint(
                lat=float(raw_location["latitude"]), lng=float(raw_location["longitude"])
            )
        country = venue_data.get("country") or {}
        venue = ConcertVenue(
            name=venue_data.get("name") or "TBA",
            city=(venue_data.get("city") or {}).get("name") or "Unknown",
            state=(venue_data.get("state") or {}).get("stateCode"),
            country=country.get("countryCode") or country.get("name") or "US",
            address=(venue_data.get("address") or {}).get("line1"),
            location=location,
        )
    else:
        venue = ConcertVenue(name="TBA", city="Unknown", country="US")

    attractions = embedded.get("attractions") or []
    name = event.get("name") or ""
    if attractions:
        artists = [a.get("name", "") for a in attractions]
    else:
        artists = [name.split(" - ")[0]]

    genres: list[str] = []
    classifications = event.get("classifications") or (
        attractions[0].get("classifications") if attractions else None
    )
    for classification in classifications or []:
        for key in ("genre", "subGenre"):
            genre_name = (classification.get(key) or {}).get("name")
            if genre_name and genre_name != _UNDEFINED:
                genres.append(genre_name)

    price_range = None
    price_ranges = event.get("priceRanges") or []
    if price_ranges:
        first = price_ranges[0]
        price_range = PriceRange(
            min=first["min"], max=first["max"], currency=first.get("currency") or "USD"
        )

    start = (event.get("dates") or {}).get("start") or {}
    return Concert(
        id=str(event["id"]),
        name=name,
        artists=_dedupe(artists),
        venue=venue,
        date=start.get("localDate") or "",
        time=start.get("localTime"),
        image_url=_pick_image(event.get("images") or []),
        ticket_url=event.get("url") or "",
        price_range=price_range,
        genres=_dedupe(genres),
        venue_size=estimate_venue_size(venue_data.get("name", "") if venue_data else ""),
    )


class TicketmasterProvider(IConcertSource):
    """Concert source backed by the Ticketmaster Discovery API.

    Parameters
    ----------
    settings:
        Supplies ``ticketmaster_api_key``; without it the source is
        reported unavailable.
    http_client:
        Shared async HTTP client.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._api_key = settings.ticketmaster_api_key
        self._client = http_client
        self._logger = get_logger(__name__)

    def _build_params(self, params: ConcertSearchParams) -> dict[str, Any]:
        query: dict[str, Any] = {
            "apikey": self._api_key,
            "classificationName": "Music",
            "size": params.size,
            "page": 0,
            "sort": "date,asc",
        }
        if params.lat is not None and params.lng is not None:
            query["latlong"] = f"{params.lat},{params.lng}"
            query["radius"] = params.radius_miles
            query["unit"] = "miles"
        elif params.city:
            query["city"] = params.city
        if params.date_from:
            query["startDateTime"] = f"{params.date_from}T00:00:00Z"
        if params.date_to:
            query["endDateTime"] = f"{params.date_to}T23:59:59Z"
        if params.keyword:
            query["keyword"] = params.keyword
        return query

    async def search(self, params: ConcertSearchParams) -> SourceSearchResult:
        data = await get_json(
            self._client, _BASE_URL, self._build_params(params), self.get_source().value
        )
        events = ((data or {}).get("_embedded") or {}).get("events") or []
        try:
            concerts = [transform_event(event) for event in events]
        except (KeyError, TypeError, ValueError) as exc:
            raise TicketSourceError(
                message=f"Unexpected event payload: {exc}",
                provider_name=self.get_source().value,
            ) from exc

        total = ((data or {}).get("page") or {}).get("totalElements") or len(concerts)
        self._logger.info("ticketmaster_search_complete", concerts=len(concerts), total=total)
        return SourceSearchResult(source=ConcertSource.TICKETMASTER, concerts=concerts, total=total)

    def get_source(self) -> ConcertSource:
        return ConcertSource.TICKETMASTER

    def is_available(self) -> bool:
        return bool(self._api_key)
