"""Unit tests for the ticketing-source adapters.

HTTP is faked with ``httpx.MockTransport`` so the adapters run their real
request and error-mapping code.
"""

from __future__ import annotations

from typing import Any, Callable
from unittest.mock import MagicMock

import httpx
import pytest

from src.config.settings import Settings
from src.models.concert import ConcertSearchParams, ConcertSource, VenueSize
from src.providers.ticketing.bandsintown_provider import (
    BandsintownProvider,
    date_param,
)
from src.providers.ticketing.bandsintown_provider import (
    transform_event as bandsintown_transform,
)
from src.providers.ticketing.http_json import get_json
from src.providers.ticketing.seatgeek_provider import SeatGeekProvider
from src.providers.ticketing.seatgeek_provider import transform_event as seatgeek_transform
from src.providers.ticketing.ticketmaster_provider import (
    TicketmasterProvider,
    estimate_venue_size,
)
from src.providers.ticketing.ticketmaster_provider import (
    transform_event as ticketmaster_transform,
)
from src.utils.errors import ProviderUnavailableError, RateLimitError, TicketSourceError


def _settings(**overrides) -> Settings:
    defaults = {
        "ticketmaster_api_key": "tm-key",
        "seatgeek_client_id": "sg-id",
        "seatgeek_client_secret": "",
        "bandsintown_app_id": "stageside-test",
    }
    defaults.update(overrides)
    return Settings(**defaults)


def _client(handler: Callable[[httpx.Request], httpx.Response]) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# ======================================================================
# Shared JSON helper
# ======================================================================


class TestGetJson:
    @pytest.mark.asyncio
    async def test_returns_decoded_body(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"ok": True})) as client:
            assert await get_json(client, "https://x.test/a", None, "test") == {"ok": True}

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "error"),
        [
            (429, RateLimitError),
            (500, ProviderUnavailableError),
            (503, ProviderUnavailableError),
            (401, TicketSourceError),
            (404, TicketSourceError),
        ],
    )
    async def test_status_mapping(self, status: int, error: type) -> None:
        async with _client(lambda r: httpx.Response(status)) as client:
            with pytest.raises(error) as exc_info:
                await get_json(client, "https://x.test/a", None, "test")
        assert exc_info.value.provider_name == "test"

    @pytest.mark.asyncio
    async def test_not_found_ok(self) -> None:
        async with _client(lambda r: httpx.Response(404)) as client:
            assert await get_json(client, "https://x.test/a", None, "t", not_found_ok=True) is None

    @pytest.mark.asyncio
    async def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        async with _client(handler) as client:
            with pytest.raises(ProviderUnavailableError):
                await get_json(client, "https://x.test/a", None, "test")

    @pytest.mark.asyncio
    async def test_connection_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(ProviderUnavailableError):
                await get_json(client, "https://x.test/a", None, "test")

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        async with _client(lambda r: httpx.Response(200, text="<html>")) as client:
            with pytest.raises(TicketSourceError):
                await get_json(client, "https://x.test/a", None, "test")


# ======================================================================
# Ticketmaster
# ======================================================================


def _tm_event(**overrides: Any) -> dict[str, Any]:
    event: dict[str, Any] = {
        "id": "tm1",
        "name": "Phoebe Bridgers - Reunion Tour",
        "url": "https://tm.test/e/tm1",
        "dates": {"start": {"localDate": "2026-05-01", "localTime": "20:00:00"}},
        "images": [
            {"url": "https://img.test/small.jpg", "width": 300, "ratio": "16_9"},
            {"url": "https://img.test/big.jpg", "width": 1024, "ratio": "3_2"},
            {"url": "https://img.test/wide.jpg", "width": 1024, "ratio": "16_9"},
        ],
        "priceRanges": [{"min": 45.0, "max": 120.0, "currency": "USD"}],
        "classifications": [
            {"genre": {"name": "Rock"}, "subGenre": {"name": "Undefined"}},
        ],
        "_embedded": {
            "venues": [
                {
                    "name": "The Greek Theatre",
                    "city": {"name": "Los Angeles"},
                    "state": {"stateCode": "CA"},
                    "country": {"countryCode": "US"},
                    "address": {"line1": "2700 N Vermont Ave"},
                    "location": {"latitude": "34.12", "longitude": "-118.29"},
                }
            ],
            "attractions": [{"name": "Phoebe Bridgers"}, {"name": "MUNA"}],
        },
    }
    event.update(overrides)
    return event


class TestTicketmasterTransform:
    @pytest.mark.parametrize(
        ("venue", "size"),
        [
            ("Empire Polo Field", VenueSize.FESTIVAL),
            ("Madison Square Garden", VenueSize.ARENA),
            ("The Greek Theatre", VenueSize.LARGE),
            ("Music Hall of Williamsburg", VenueSize.LARGE),
            ("The Basement East", VenueSize.INTIMATE),
            ("Brooklyn Steel", VenueSize.MEDIUM),
            ("", VenueSize.MEDIUM),
        ],
    )
    def test_estimate_venue_size(self, venue: str, size: VenueSize) -> None:
        assert estimate_venue_size(venue) == size

    def test_full_event(self) -> None:
        concert = ticketmaster_transform(_tm_event())

        assert concert.id == "tm1"
        assert concert.artists == ["Phoebe Bridgers", "MUNA"]
        assert concert.venue.name == "The Greek Theatre"
        assert concert.venue.city == "Los Angeles"
        assert concert.venue.state == "CA"
        assert concert.venue.location.lat == pytest.approx(34.12)
        assert concert.date == "2026-05-01"
        assert concert.time == "20:00:00"
        assert concert.image_url == "https://img.test/wide.jpg"
        assert concert.price_range.min == 45.0
        assert concert.genres == ["Rock"]
        assert concert.venue_size == VenueSize.LARGE

    def test_sparse_event(self) -> None:
        concert = ticketmaster_transform(
            {"id": 7, "name": "Mitski - Live", "dates": {"start": {"localDate": "2026-06-01"}}}
        )

        assert concert.id == "7"
        assert concert.artists == ["Mitski"]
        assert concert.venue.name == "TBA"
        assert concert.venue.city == "Unknown"
        assert concert.image_url == "/placeholder-concert.jpg"
        assert concert.price_range is None
        assert concert.venue_size == VenueSize.MEDIUM


class TestTicketmasterProvider:
    def test_availability(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        assert TicketmasterProvider(_settings(), client).is_available() is True
        assert (
            TicketmasterProvider(_settings(ticketmaster_api_key=""), client).is_available()
            is False
        )
        assert TicketmasterProvider(_settings(), client).get_source() == ConcertSource.TICKETMASTER

    @pytest.mark.asyncio
    async def test_search(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={"_embedded": {"events": [_tm_event()]}, "page": {"totalElements": 42}},
            )

        async with _client(handler) as client:
            result = await TicketmasterProvider(_settings(), client).search(
                ConcertSearchParams(lat=34.0, lng=-118.0, date_from="2026-05-01", size=20)
            )

        assert result.source == ConcertSource.TICKETMASTER
        assert [c.id for c in result.concerts] == ["tm1"]
        assert result.total == 42

        [request] = seen
        assert request.url.host == "app.ticketmaster.com"
        assert request.url.params["apikey"] == "tm-key"
        assert request.url.params["latlong"] == "34.0,-118.0"
        assert request.url.params["startDateTime"] == "2026-05-01T00:00:00Z"
        assert request.url.params["size"] == "20"

    @pytest.mark.asyncio
    async def test_search_without_events(self) -> None:
        async with _client(lambda r: httpx.Response(200, json={"page": {}})) as client:
            result = await TicketmasterProvider(_settings(), client).search(
                ConcertSearchParams(city="Austin")
            )
        assert result.concerts == []
        assert result.total == 0

    @pytest.mark.asyncio
    async def test_malformed_event_is_source_error(self) -> None:
        body = {"_embedded": {"events": [{"name": "no id"}]}}
        async with _client(lambda r: httpx.Response(200, json=body)) as client:
            with pytest.raises(TicketSourceError):
                await TicketmasterProvider(_settings(), client).search(ConcertSearchParams())


# ======================================================================
# SeatGeek
# ======================================================================


def _sg_event(**overrides: Any) -> dict[str, Any]:
    event: dict[str, Any] = {
        "id": 555,
        "title": "Phoebe Bridgers with MUNA",
        "url": "https://sg.test/e/555",
        "datetime_local": "2026-05-01T19:30:00",
        "venue": {"name": "Greek Theatre", "city": "Los Angeles", "state": "CA", "country": "US"},
        "performers": [
            {
                "name": "Phoebe Bridgers",
                "images": {"huge": "https://img.test/huge.jpg"},
                "genres": [{"name": "Indie"}],
                "taxonomies": [{"name": "concert"}, {"name": "indie rock"}],
            },
            {"name": "MUNA", "genres": [{"name": "Indie"}]},
        ],
        "stats": {"lowest_price": 52, "highest_price": 210},
    }
    event.update(overrides)
    return event


class TestSeatGeekTransform:
    def test_full_event(self) -> None:
        concert = seatgeek_transform(_sg_event())

        assert concert.id == "seatgeek-555"
        assert concert.name == "Phoebe Bridgers with MUNA"
        assert concert.artists == ["Phoebe Bridgers", "MUNA"]
        assert concert.date == "2026-05-01"
        assert concert.time == "19:30"
        assert concert.image_url == "https://img.test/huge.jpg"
        assert concert.price_range.min == 52
        assert concert.price_range.max == 210
        assert concert.genres == ["Indie", "indie rock"]

    def test_no_price_when_lowest_is_zero(self) -> None:
        concert = seatgeek_transform(_sg_event(stats={"lowest_price": None}))
        assert concert.price_range is None

    def test_date_only(self) -> None:
        concert = seatgeek_transform(_sg_event(datetime_local="2026-05-01"))
        assert concert.time is None


class TestSeatGeekProvider:
    @pytest.mark.asyncio
    async def test_search(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"events": [_sg_event()], "meta": {"total": 9}})

        async with _client(handler) as client:
            result = await SeatGeekProvider(_settings(), client).search(
                ConcertSearchParams(city="Los Angeles", state="CA", date_to="2026-05-31")
            )

        assert [c.id for c in result.concerts] == ["seatgeek-555"]
        assert result.total == 9
        params = seen[0].url.params
        assert seen[0].url.host == "api.seatgeek.com"
        assert params["client_id"] == "sg-id"
        assert "client_secret" not in params
        assert params["venue.city"] == "Los Angeles"
        assert params["datetime_local.lte"] == "2026-05-31T23:59:59"

    @pytest.mark.asyncio
    async def test_rate_limited(self) -> None:
        async with _client(lambda r: httpx.Response(429)) as client:
            with pytest.raises(RateLimitError):
                await SeatGeekProvider(_settings(), client).search(ConcertSearchParams())

    def test_availability(self) -> None:
        client = MagicMock(spec=httpx.AsyncClient)
        assert SeatGeekProvider(_settings(seatgeek_client_id=""), client).is_available() is False


# ======================================================================
# Bandsintown
# ======================================================================


def _bit_event(event_id: str, artist: str) -> dict[str, Any]:
    return {
        "id": event_id,
        "datetime": "2026-05-02T20:00:00",
        "url": f"https://bit.test/e/{event_id}",
        "venue": {"name": "The Fillmore", "city": "San Francisco", "region": "CA", "country": "US"},
        "lineup": [artist],
        "offers": [
            {"status": "sold out", "url": "https://bit.test/sold"},
            {"status": "available", "url": "https://bit.test/buy"},
        ],
    }


class TestBandsintownHelpers:
    def test_date_param(self) -> None:
        assert date_param("2026-05-01", "2026-05-31") == "2026-05-01,2026-05-31"
        assert date_param("2026-05-01", None) == "2026-05-01,all"
        assert date_param(None, None) == "upcoming"

    def test_transform(self) -> None:
        concert = bandsintown_transform(_bit_event("9", "Mitski"), "Mitski", "https://img.test/m")

        assert concert.id == "bandsintown-9"
        assert concert.name == "Mitski at The Fillmore"
        assert concert.artists == ["Mitski"]
        assert concert.venue.state == "CA"
        assert concert.time == "20:00"
        assert concert.ticket_url == "https://bit.test/buy"
        assert concert.image_url == "https://img.test/m"


class TestBandsintownProvider:
    @pytest.mark.asyncio
    async def test_no_artists_means_no_requests(self) -> None:
        calls: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[])

        async with _client(handler) as client:
            result = await BandsintownProvider(_settings(), client).search(ConcertSearchParams())

        assert result.concerts == []
        assert calls == []

    @pytest.mark.asyncio
    async def test_search_skips_unknown_and_failing_artists(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            path = request.url.path
            if "Unknown Band" in path:
                return httpx.Response(404)
            if "Error Body" in path:
                return httpx.Response(200, json={"error": "Not Found"})
            if "Broken" in path:
                return httpx.Response(502)
            if path.endswith("/events"):
                assert request.url.params["date"] == "upcoming"
                assert request.url.params["app_id"] == "stageside-test"
                return httpx.Response(200, json=[_bit_event("1", "Mitski")])
            return httpx.Response(200, json={"image_url": "https://img.test/mitski.jpg"})

        params = ConcertSearchParams(
            artist_names=["Mitski", "Unknown Band", "Error Body", "Broken"]
        )
        async with _client(handler) as client:
            result = await BandsintownProvider(_settings(), client).search(params)

        assert [c.id for c in result.concerts] == ["bandsintown-1"]
        assert result.concerts[0].image_url == "https://img.test/mitski.jpg"
        assert result.total == 1

    @pytest.mark.asyncio
    async def test_artist_lookups_are_capped(self) -> None:
        looked_up: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/events"):
                looked_up.append(request.url.path)
            return httpx.Response(200, json=[])

        params = ConcertSearchParams(artist_names=[f"Artist {i}" for i in range(35)])
        async with _client(handler) as client:
            await BandsintownProvider(_settings(), client).search(params)

        assert len(looked_up) == 30
        assert looked_up[0] == "/artists/Artist 0/events"
