"""SeatGeek Platform API concert source."""

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
    PriceRange,
    SourceSearchResult,
)
from src.providers.ticketing.http_json import get_json
from src.utils.errors import TicketSourceError
from src.utils.logging import get_logger

_BASE_URL = "https://api.seatgeek.com/2/events"
# Taxonomy names too generic to count as genres.
_GENERIC_TAXONOMIES = frozenset({"concert", "music"})


def transform_event(event: dict[str, Any]) -> Concert:
    """Convert one SeatGeek event into a Concert."""
    performers = event.get("performers") or []
    main = performers[0] if performers else {}

    genres: list[str] = []
    for performer in performers:
        genres.extend(g.get("name", "") for g in performer.get("genres") or [])
        genres.extend(
            t.get("name", "")
            for t in performer.get("taxonomies") or []
            if t.get("name") not in _GENERIC_TAXONOMIES
        )

    images = main.get("images") or {}
    image_url = images.get("huge") or images.get("banner") or main.get("image") or PLACEHOLDER_IMAGE

    stats = event.get("stats") or {}
    lowest = stats.get("lowest_price") or 0
    price_range = None
    if lowest > 0:
        price_range = PriceRange(min=lowest, max=stats.get("highest_price") or lowest)

    date_part, _, time_part = (event.get("datetime_local") or "").partition("T")
    venue = event.get("venue") or {}
    return Concert(
        id=f"seatgeek-{event['id']}",
        name=event.get("title") or "",
        artists=[p.get("name", "") for p in performers],
        venue=ConcertVenue(
            name=venue.get("name") or "",
            city=venue.get("city") or "",
            state=venue.get("state"),
            country=venue.get("country") or "",
            address=venue.get("address"),
        ),
        date=date_part,
        time=time_part[:5] or None,
        image_url=image_url,
        ticket_url=event.get("url") or "",
        price_range=price_range,
        genres=list(dict.fromkeys(g for g in genres if g)),
    )


class SeatGeekProvider(IConcertSource):
    """Concert source backed by the SeatGeek events endpoint."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._client_id = settings.seatgeek_client_id
        self._client_secret = settings.seatgeek_client_secret
        self._client = http_client
        self._logger = get_logger(__name__)

    def _build_params(self, params: ConcertSearchParams) -> dict[str, Any]:
        query: dict[str, Any] = {
            "client_id": self._client_id,
            "type": "concert",
            "per_page": params.size,
            "page": 1,
            "sort": "datetime_local.asc",
        }
        if self._client_secret:
            query["client_secret"] = self._client_secret
        if params.lat is not None and params.lng is not None:
            query["lat"] = params.lat
            query["lon"] = params.lng
            query["range"] = f"{params.radius_miles}mi"
        elif params.city:
            query["venue.city"] = params.city
            if params.state:
                query["venue.state"] = params.state
        if params.date_from:
            query["datetime_local.gte"] = f"{params.date_from}T00:00:00"
        if params.date_to:
            query["datetime_local.lte"] = f"{params.date_to}T23:59:59"
        if params.keyword:
            query["q"] = params.keyword
        return query

    async def search(self, params: ConcertSearchParams) -> SourceSearchResult:
        data = await get_json(
            self._client, _BASE_URL, self._build_params(params), self.get_source().value
        )
        try:
            concerts = [transform_event(event) for event in (data or {}).get("events") or []]
        except (KeyError, TypeError, ValueError) as exc:
            raise TicketSourceError(
                message=f"Unexpected event payload: {exc}",
                provider_name=self.get_source().value,
            ) from exc

        total = ((data or {}).get("meta") or {}).get("total") or len(concerts)
        self._logger.info("seatgeek_search_complete", concerts=len(concerts), total=total)
        return SourceSearchResult(source=ConcertSource.SEATGEEK, concerts=concerts, total=total)

    def get_source(self) -> ConcertSource:
        return ConcertSource.SEATGEEK

    def is_available(self) -> bool:
        return bool(self._client_id)
