"""Integration tests for FastAPI API endpoints using TestClient.

The app is built with :func:`src.main.create_app`; the live concert search
service on ``app.state`` is replaced with in-memory ticketing sources.
"""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from src.config.settings import Settings
from src.interfaces.concert_source import IConcertSource
from src.main import create_app
from src.models.concert import (
    Concert,
    ConcertSearchParams,
    ConcertSource,
    ConcertVenue,
    PriceRange,
    SourceSearchResult,
)
from src.models.festival import Festival, FestivalArtist
from src.models.music import UserMusicProfile
from src.providers.cache.memory_cache import MemoryCacheProvider
from src.services.concert_aggregator import ConcertAggregationService
from src.utils.errors import ProviderUnavailableError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class _StaticSource(IConcertSource):
    def __init__(
        self,
        source: ConcertSource,
        concerts: list[Concert] | None = None,
        error: Exception | None = None,
    ) -> None:
        self._source = source
        self._concerts = concerts or []
        self._error = error
        self.seen: list[ConcertSearchParams] = []

    async def search(self, params: ConcertSearchParams) -> SourceSearchResult:
        self.seen.append(params)
        if self._error is not None:
            raise self._error
        return SourceSearchResult(
            source=self._source, concerts=self._concerts, total=len(self._concerts)
        )

    def get_source(self) -> ConcertSource:
        return self._source

    def is_available(self) -> bool:
        return True


def _concert(concert_id: str, artist: str, venue: str, price: float | None = None) -> Concert:
    return Concert(
        id=concert_id,
        name=f"{artist} live",
        artists=[artist],
        venue=ConcertVenue(name=venue, city="Los Angeles", country="US"),
        date="2026-05-01",
        ticket_url=f"https://tickets.test/{concert_id}",
        price_range=PriceRange(min=price, max=price * 2) if price else None,
    )


def _settings(**overrides) -> Settings:
    defaults = {
        "ticketmaster_api_key": "",
        "seatgeek_client_id": "",
        "bandsintown_app_id": "stageside",
        "log_level": "WARNING",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture()
def app() -> FastAPI:
    return create_app(_settings())


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def festival_body(
    festival: Festival,
    lineup: list[FestivalArtist],
    indie_profile: UserMusicProfile,
) -> dict:
    return {
        "festival": festival.model_dump(mode="json"),
        "lineup": [a.model_dump(mode="json") for a in lineup],
        "profile": indie_profile.model_dump(mode="json"),
    }


# ======================================================================
# System
# ======================================================================


class TestHealth:
    def test_health_reports_sources(self, client: TestClient) -> None:
        response = client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["version"] == "0.1.0"
        assert body["sources"] == {
            "ticketmaster": False,
            "seatgeek": False,
            "bandsintown": True,
        }

    def test_degraded_without_sources(self) -> None:
        app = create_app(_settings(bandsintown_app_id=""))
        with TestClient(app) as client:
            assert client.get("/api/v1/health").json()["status"] == "degraded"

    def test_health_follows_the_concert_service(self, app: FastAPI, client: TestClient) -> None:
        app.state.concert_service = ConcertAggregationService(
            [_StaticSource(ConcertSource.SEATGEEK)]
        )

        body = client.get("/api/v1/health").json()

        assert body["status"] == "healthy"
        assert body["sources"] == {
            "ticketmaster": False,
            "seatgeek": True,
            "bandsintown": False,
        }

    def test_request_id_is_echoed(self, client: TestClient) -> None:
        response = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

    def test_request_id_is_generated(self, client: TestClient) -> None:
        assert client.get("/api/v1/health").headers["X-Request-ID"]

    def test_lifespan_populates_state(self, app: FastAPI) -> None:
        with TestClient(app):
            assert isinstance(app.state.concert_service, ConcertAggregationService)
            assert isinstance(app.state.cache, MemoryCacheProvider)
            assert app.state.config["itinerary"]["include_discoveries"] is True


# ======================================================================
# Profiles and concerts
# ======================================================================


class TestProfilesAndConcerts:
    def test_aggregate_profile(self, client: TestClient) -> None:
        body = {
            "connections": [
                {"service": "spotify"},
                {"service": "tidal", "error": "token expired"},
            ],
            "service_data": {
                "spotify": {
                    "service": "spotify",
                    "artists": [{"name": "Mitski"}, {"name": "Phoebe Bridgers"}],
                    "genres": ["indie rock"],
                    "recent_artists": ["Big Thief"],
                },
                "tidal": {"service": "tidal", "artists": [{"name": "Drake"}]},
            },
        }

        response = client.post("/api/v1/profiles/aggregate", json=body)

        assert response.status_code == 200
        data = response.json()
        assert [a["name"] for a in data["profile"]["top_artists"]] == [
            "Mitski",
            "Phoebe Bridgers",
        ]
        assert data["profile"]["recent_artist_names"] == ["Big Thief"]
        assert data["stats"]["total"] == 2
        assert data["stats"]["errors"][0]["service"] == "tidal"

    def test_match_concerts(self, client: TestClient, indie_profile) -> None:
        body = {
            "concerts": [
                _concert("c1", "Unknown Band", "Club").model_dump(mode="json"),
                _concert("c2", "Phoebe Bridgers", "Greek").model_dump(mode="json"),
            ],
            "profile": indie_profile.model_dump(mode="json"),
            "min_score": 1,
        }

        response = client.post("/api/v1/concerts/match", json=body)

        assert response.status_code == 200
        concerts = response.json()["concerts"]
        assert [c["id"] for c in concerts] == ["c2"]
        assert concerts[0]["match_score"] > 0

    def test_search_merges_sources_and_reports_failures(
        self, app: FastAPI, client: TestClient
    ) -> None:
        ticketmaster = _StaticSource(
            ConcertSource.TICKETMASTER, [_concert("tm1", "Mitski", "The Greek Theatre", 80)]
        )
        seatgeek = _StaticSource(
            ConcertSource.SEATGEEK, [_concert("sg1", "Mitski", "Greek Theatre", 60)]
        )
        bandsintown = _StaticSource(
            ConcertSource.BANDSINTOWN,
            error=ProviderUnavailableError("down", provider_name="bandsintown"),
        )
        app.state.concert_service = ConcertAggregationService(
            [ticketmaster, seatgeek, bandsintown]
        )

        response = client.post("/api/v1/concerts/search", json={"params": {"city": "Los Angeles"}})

        assert response.status_code == 200
        data = response.json()
        [concert] = data["concerts"]
        assert concert["id"] == "tm1"
        assert concert["sources"] == ["ticketmaster", "seatgeek"]
        assert concert["best_price"]["source"] == "seatgeek"
        assert data["failed_sources"] == ["bandsintown"]
        assert data["total_by_source"]["ticketmaster"] == 1

    def test_search_uses_profile_artists(self, app, client, indie_profile) -> None:
        bandsintown = _StaticSource(ConcertSource.BANDSINTOWN)
        app.state.concert_service = ConcertAggregationService([bandsintown])

        response = client.post(
            "/api/v1/concerts/search",
            json={"profile": indie_profile.model_dump(mode="json")},
        )

        assert response.status_code == 200
        assert bandsintown.seen[0].artist_names[0] == "Phoebe Bridgers"

    def test_dedupe(self, client: TestClient) -> None:
        body = {
            "results": [
                {
                    "source": "seatgeek",
                    "concerts": [_concert("sg1", "Mitski", "Greek", 60).model_dump(mode="json")],
                },
                {
                    "source": "ticketmaster",
                    "concerts": [_concert("tm1", "Mitski", "Greek", 80).model_dump(mode="json")],
                },
            ]
        }

        response = client.post("/api/v1/concerts/dedupe", json=body)

        assert response.status_code == 200
        data = response.json()
        assert [c["id"] for c in data["concerts"]] == ["tm1"]
        assert data["best_prices"]["tm1"]["url"] == "https://tickets.test/sg1"


# ======================================================================
# Festivals
# ======================================================================


class TestFestivals:
    def test_festival_match(self, client: TestClient, festival_body: dict) -> None:
        response = client.post("/api/v1/festivals/match", json=festival_body)

        assert response.status_code == 200
        data = response.json()
        assert data["total_artist_count"] == 7
        assert {a["id"] for a in data["perfect_matches"]} == {"a1", "a2", "a5"}
        assert 0 <= data["match_percentage"] <= 98

    def test_schedule(self, client: TestClient, festival_body: dict) -> None:
        body = {
            "festival": festival_body["festival"],
            "lineup": festival_body["lineup"],
            "agenda_ids": ["a1", "a2", "a5"],
        }

        response = client.post("/api/v1/festivals/schedule", json=body)

        assert response.status_code == 200
        data = response.json()
        assert [d["day_name"] for d in data["days"]] == ["Friday", "Saturday"]
        [conflict] = data["conflicts"]
        assert (conflict["artist1"]["id"], conflict["artist2"]["id"]) == ("a1", "a2")
        assert conflict["overlap_minutes"] == 30

    def test_itinerary(self, client: TestClient, festival_body: dict) -> None:
        response = client.post("/api/v1/festivals/itinerary", json=festival_body)

        assert response.status_code == 200
        data = response.json()
        assert [s["artist"]["id"] for s in data["days"][0]["slots"]] == ["a3", "a1", "a4"]
        assert data["coverage"] == 71

    def test_itinerary_options(self, client: TestClient, festival_body: dict) -> None:
        body = {**festival_body, "max_per_day": 1, "include_discoveries": False}

        data = client.post("/api/v1/festivals/itinerary", json=body).json()

        assert [[s["artist"]["id"] for s in d["slots"]] for d in data["days"]] == [
            ["a1"],
            ["a5"],
        ]

    def test_itinerary_bad_time_is_422(self, client: TestClient, festival_body: dict) -> None:
        festival_body["lineup"][0]["start_time"] = "8pm"

        response = client.post("/api/v1/festivals/itinerary", json=festival_body)

        assert response.status_code == 422
        assert response.json()["error"] == "InvalidInputError"

    def test_itinerary_negative_option_is_rejected(self, client, festival_body) -> None:
        body = {**festival_body, "rest_break_minutes": -1}
        assert client.post("/api/v1/festivals/itinerary", json=body).status_code == 422

    def test_swap(self, client: TestClient, festival_body: dict) -> None:
        itinerary = client.post("/api/v1/festivals/itinerary", json=festival_body).json()
        alternative = itinerary["days"][0]["slots"][1]["alternatives"][0]

        response = client.post(
            "/api/v1/festivals/itinerary/swap",
            json={
                "itinerary": itinerary,
                "day_index": 0,
                "slot_index": 1,
                "new_artist": alternative,
            },
        )

        assert response.status_code == 200
        slot = response.json()["days"][0]["slots"][1]
        assert slot["artist"]["id"] == "a2"
        assert slot["priority"] == "must-see"
        assert [a["id"] for a in slot["alternatives"]] == ["a1"]

    def test_swap_out_of_range_is_404(self, client: TestClient, festival_body: dict) -> None:
        itinerary = client.post("/api/v1/festivals/itinerary", json=festival_body).json()
        new_artist = itinerary["days"][0]["slots"][0]["artist"]

        response = client.post(
            "/api/v1/festivals/itinerary/swap",
            json={
                "itinerary": itinerary,
                "day_index": 5,
                "slot_index": 0,
                "new_artist": new_artist,
            },
        )

        assert response.status_code == 404
        assert response.json()["error"] == "ItineraryError"

    def test_calendar_from_itinerary(self, client: TestClient, festival_body: dict) -> None:
        itinerary = client.post("/api/v1/festivals/itinerary", json=festival_body).json()

        response = client.post(
            "/api/v1/festivals/calendar",
            json={"festival": festival_body["festival"], "itinerary": itinerary},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/calendar")
        assert 'filename="coachella-2026.ics"' in response.headers["content-disposition"]
        assert response.text.startswith("BEGIN:VCALENDAR\r\n")
        assert response.text.count("BEGIN:VEVENT") == 5

    def test_calendar_from_artists(self, client: TestClient, festival_body: dict) -> None:
        artist = {**festival_body["lineup"][0], "match_type": "perfect", "match_score": 100}

        response = client.post(
            "/api/v1/festivals/calendar",
            json={"festival": festival_body["festival"], "artists": [artist]},
        )

        assert response.status_code == 200
        assert "UID:coachella-2026-a1@stageside.app" in response.text

    def test_calendar_requires_content(self, client: TestClient, festival_body: dict) -> None:
        response = client.post(
            "/api/v1/festivals/calendar", json={"festival": festival_body["festival"]}
        )
        assert response.status_code == 422


# ======================================================================
# Groups
# ======================================================================


class TestGroups:
    def test_group_match(self, client: TestClient) -> None:
        body = {
            "members": [
                {"user_id": "u1", "username": "alice", "top_artists": ["Mitski"]},
                {"user_id": "u2", "username": "bob", "top_artists": ["Mitski", "Drake"]},
            ],
            "concerts": [
                _concert("c1", "Drake", "Arena").model_dump(mode="json"),
                _concert("c2", "Mitski", "Greek").model_dump(mode="json"),
            ],
        }

        response = client.post("/api/v1/groups/match", json=body)

        assert response.status_code == 200
        data = response.json()
        assert [m["concert"]["id"] for m in data["matches"]] == ["c2", "c1"]
        assert data["matches"][0]["match"]["match_type"] == "universal"
        assert data["overlap_artists"] == ["Mitski"]

    def test_group_match_requires_members(self, client: TestClient) -> None:
        response = client.post("/api/v1/groups/match", json={"members": [], "concerts": []})
        assert response.status_code == 422

    def test_group_itinerary(self, client: TestClient, festival_body: dict) -> None:
        body = {
            "festival": festival_body["festival"],
            "lineup": festival_body["lineup"],
            "members": [
                {"user_id": "u1", "username": "alice", "profile": festival_body["profile"]},
                {"user_id": "u2", "username": "bob", "profile": {}},
            ],
        }

        response = client.post("/api/v1/groups/itinerary", json=body)

        assert response.status_code == 200
        data = response.json()
        friday = data["days"][0]
        decisions = {s["artist"]["id"]: s["decided_by"] for s in friday["slots"]}
        assert decisions["a1"] == "strongest-match"
        assert [m["username"] for m in data["member_satisfaction"]] == ["alice", "bob"]


# ======================================================================
# Notifications
# ======================================================================


class TestNotifications:
    def _concerts(self) -> list[dict]:
        concerts = []
        for concert_id, score in (("c1", 90), ("c2", 40), ("c3", 75)):
            concert = _concert(concert_id, "Mitski", "Greek").model_copy(
                update={"match_score": score}
            )
            concerts.append(concert.model_dump(mode="json"))
        return concerts

    def test_digest_due(self, client: TestClient) -> None:
        body = {
            "preference": {
                "frequency": "daily",
                "min_match_score": 50,
                "last_notified_at": "2026-05-30T08:00:00Z",
                "last_concert_ids": ["c3"],
            },
            "concerts": self._concerts(),
            "now": "2026-06-01T08:00:00Z",
        }

        response = client.post("/api/v1/notifications/digest", json=body)

        assert response.status_code == 200
        data = response.json()
        assert data["due"] is True
        assert [c["id"] for c in data["concerts"]] == ["c1"]
        assert data["last_concert_ids"] == ["c3", "c1"]

    def test_digest_not_due(self, client: TestClient) -> None:
        body = {
            "preference": {
                "frequency": "weekly",
                "last_notified_at": "2026-05-30T08:00:00Z",
                "last_concert_ids": ["c3"],
            },
            "concerts": self._concerts(),
            "now": "2026-06-01T08:00:00Z",
        }

        data = client.post("/api/v1/notifications/digest", json=body).json()

        assert data["due"] is False
        assert data["concerts"] == []
        assert data["last_concert_ids"] == ["c3"]
