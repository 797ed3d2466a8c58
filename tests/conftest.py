"""Shared pytest fixtures for the Stageside test suite."""

from __future__ import annotations

from pathlib import Path

import pytest

from src.models.festival import Festival, FestivalArtist, FestivalDates, FestivalLocation
from src.models.music import AggregatedArtist, ServiceId, UserMusicProfile

# ---------------------------------------------------------------------------
# Paths
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


# ---------------------------------------------------------------------------
# Taste profile
# ---------------------------------------------------------------------------


def _top(name: str, *sources: ServiceId, genres: list[str] | None = None) -> AggregatedArtist:
    return AggregatedArtist(
        name=name,
        normalized_name=name.lower(),
        score=100.0,
        genres=genres or [],
        sources=list(sources) or [ServiceId.SPOTIFY],
    )


@pytest.fixture
def indie_profile() -> UserMusicProfile:
    """An indie listener: Phoebe Bridgers at rank 0, Mitski at rank 3."""
    return UserMusicProfile(
        top_artists=[
            _top("Phoebe Bridgers", ServiceId.SPOTIFY, genres=["indie rock"]),
            _top("boygenius", ServiceId.SPOTIFY, ServiceId.APPLE_MUSIC),
            _top("Japanese Breakfast"),
            _top("Mitski", genres=["indie rock", "art pop"]),
            _top("The National"),
        ],
        top_genres=["indie rock", "indie pop", "bedroom pop"],
        recent_artist_names=["Alvvays", "Big Thief"],
        connected_services=[ServiceId.SPOTIFY, ServiceId.APPLE_MUSIC],
    )


@pytest.fixture
def empty_profile() -> UserMusicProfile:
    return UserMusicProfile()


# ---------------------------------------------------------------------------
# Festival and lineup
# ---------------------------------------------------------------------------


@pytest.fixture
def festival() -> Festival:
    """A three-day festival starting Friday 2026-04-10."""
    return Festival(
        id="coachella-2026",
        name="Coachella 2026",
        slug="coachella-2026",
        location=FestivalLocation(
            city="Indio", state="CA", country="US", venue="Empire Polo Club"
        ),
        dates=FestivalDates(start="2026-04-10", end="2026-04-12", year=2026),
        genres=["indie", "electronic", "hip hop"],
    )


@pytest.fixture
def lineup() -> list[FestivalArtist]:
    """A small two-day lineup with every match tier represented for ``indie_profile``."""
    return [
        FestivalArtist(
            id="a1",
            artist_name="Phoebe Bridgers",
            day="Friday",
            stage="Outdoor Theatre",
            start_time="20:00",
            end_time="21:00",
            genres=["indie rock"],
        ),
        FestivalArtist(
            id="a2",
            artist_name="Mitski",
            day="Friday",
            stage="Mojave",
            start_time="20:30",
            end_time="21:30",
            genres=["indie rock"],
        ),
        FestivalArtist(
            id="a3",
            artist_name="Beach House",
            day="Friday",
            stage="Gobi",
            start_time="17:00",
            end_time="18:00",
            genres=["dream pop", "indie pop"],
        ),
        FestivalArtist(
            id="a4",
            artist_name="Big Headliner",
            day="Friday",
            stage="Coachella Stage",
            start_time="23:00",
            end_time="00:30",
            headliner=True,
            genres=["edm"],
        ),
        FestivalArtist(
            id="a5",
            artist_name="Japanese Breakfast",
            day="Saturday",
            stage="Outdoor Theatre",
            start_time="18:00",
            end_time="19:00",
            genres=["indie pop"],
        ),
        FestivalArtist(
            id="a6",
            artist_name="Indie Folk Trio",
            day="Saturday",
            stage="Gobi",
            start_time="14:00",
            end_time="14:45",
            genres=["indie folk"],
        ),
        FestivalArtist(
            id="a7",
            artist_name="Techno Unit",
            day="Saturday",
            stage="Yuma",
            start_time="22:00",
            end_time="23:30",
            genres=["techno"],
        ),
    ]
