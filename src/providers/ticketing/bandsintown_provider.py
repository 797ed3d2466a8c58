"""Bandsintown artist-events concert source.

Bandsintown is artist-centric: there is no location search, so the
adapter looks up upcoming events for each artist in the search's
``artist_names`` (usually the user's top artists).  Lookups run in
batches of ten with a short pause in between to stay under the API's
implicit rate limit, and at most thirty artists are looked up per search.
An unknown artist is not an error; it simply has no events.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx

from src.config.settings import Settings
from src.config.tuning import (
    BANDSINTOWN_BATCH_DELAY_SECONDS,
    BANDSINTOWN_BATCH_SIZE,
    BANDSINTOWN_MAX_ARTISTS,
    PLACEHOLDER_IMAGE,
)
from src.interfaces.concert_source import IConcertSource
from src.models.concert import (
    Concert,
    ConcertSearchParams,
    ConcertSource,
    ConcertVenue,
    SourceSearchResult,
)
from src.providers.ticketing.http_json import get_json
from src.utils.concurrency import batched_gather
from src.utils.logging import get_logger

_BASE_URL = "https://rest.bandsintown.com"


def date_param(date_from: str | None, date_to: str | None) -> str:
    """Bandsintown's ``date`` query value for an optional range."""
    if date_from and date_to:
        return f"{date_from},{date_to}"
    if date_from:
        return f"{date_from},all"
    return "upcoming"


def transform_event(
    event: dict[str, Any],
    artist_name: str,
    artist_image: str | None = None,
) -> Concert:
    """Convert one Bandsintown event into a Concert."""
    venue = event.get("venue") or {}
    offers = event.get("offers") or []
    offer = next((o for o in offers if o.get("status") == "available"), None) or (
        offers[0] if offers else {}
    )
    date_part, _, time_part = (event.get("datetime") or "").partition("T")
    return Concert(
        id=f"bandsintown-{event['id']}",
        name=event.get("title") or f"{artist_name} at {venue.get('name', '')}",
        artists=list(event.get("lineup") or []) or [artist_name],
        venue=ConcertVenue(
            name=venue.get("name") or "",
            city=venue.get("city") or "",
            state=venue.get("region") or None,
            country=venue.get("country") or "",
        ),
        date=date_part,
        time=time_part[:5] or None,
        image_url=artist_image or PLACEHOLDER_IMAGE,
        ticket_url=offer.get("url") or event.get("url") or "",
        genres=[],
    )


class BandsintownProvider(IConcertSource):
    """Concert source backed by the Bandsintown REST API."""

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._app_id = settings.bandsintown_app_id
        self._client = http_client
        self._logger = get_logger(__name__)

    async def _get(self, path: str, params: dict[str, Any]) -> Any:
        data = await get_json(
            self._client,
            f"{_BASE_URL}{path}",
            {"app_id": self._app_id, **params},
            self.get_source().value,
            not_found_ok=True,
        )
        # Unknown artists come back as {"error": "..."} with a 200.
        if isinstance(data, dict) and data.get("error"):
            return None
        return data

    async def _artist_image(self, artist_name: str) -> str | None:
        data = await self._get(f"/artists/{quote(artist_name, safe='')}", {})
        if isinstance(data, dict):
            return data.get("image_url") or None
        return None

    async def _artist_events(
        self,
        artist_name: str,
        params: ConcertSearchParams,
    ) -> list[Concert]:
        events = await self._get(
            f"/artists/{quote(artist_name, safe='')}/events",
            {"date": date_param(params.date_from, params.date_to)},
        )
        if not isinstance(events, list) or not events:
            return []
        image = await self._artist_image(artist_name)
        return [transform_event(event, artist_name, image) for event in events]

    async def search(self, params: ConcertSearchParams) -> SourceSearchResult:
        artists = params.artist_names[:BANDSINTOWN_MAX_ARTISTS]
        if not artists:
            return SourceSearchResult(source=ConcertSource.BANDSINTOWN)

        concerts = await batched_gather(
            lambda name: self._artist_events(name, params),
            artists,
            batch_size=BANDSINTOWN_BATCH_SIZE,
            delay_seconds=BANDSINTOWN_BATCH_DELAY_SECONDS,
            logger=self._logger,
            error_msg="bandsintown_artist_failed",
        )
        self._logger.info(
            "bandsintown_search_complete", artists=len(artists), concerts=len(concerts)
        )
        return SourceSearchResult(
            source=ConcertSource.BANDSINTOWN, concerts=concerts, total=len(concerts)
        )

    def get_source(self) -> ConcertSource:
        return ConcertSource.BANDSINTOWN

    def is_available(self) -> bool:
        return bool(self._app_id)
