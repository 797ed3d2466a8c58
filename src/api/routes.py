"""FastAPI routes for the Stageside API.

Every route except ``/concerts/search`` is a thin wrapper around a pure
service function: the request body carries all the data, the service
computes, the route returns the model.  ``/concerts/search`` fans out to
the live ticketing sources held on ``app.state``.

# ─── API ROUTE MAP (Junior Developer Guide) ───────────────────────────
#
# Endpoint                              Method  Description
# ─────────────────────────────────────────────────────────────────────
# /api/v1/health                        GET     Health + configured sources
# /api/v1/profiles/aggregate            POST    Service data → unified profile
# /api/v1/concerts/match                POST    Score + rank concerts
# /api/v1/concerts/search               POST    Live multi-source search
# /api/v1/concerts/dedupe               POST    Merge per-source results
# /api/v1/festivals/match               POST    Festival match summary
# /api/v1/festivals/schedule            POST    Schedule grid + conflicts
# /api/v1/festivals/itinerary           POST    Generate smart itinerary
# /api/v1/festivals/itinerary/swap      POST    Swap one itinerary slot
# /api/v1/festivals/calendar            POST    Export .ics calendar
# /api/v1/groups/match                  POST    Rank concerts for a group
# /api/v1/groups/itinerary              POST    Generate group itinerary
# /api/v1/notifications/digest          POST    Select digest concerts
#
# DEPENDENCY INJECTION PATTERN:
# Helpers read shared objects from app.state (populated in main.py's
# lifespan); Annotated[T, Depends(helper)] aliases declare them on routes.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Request, Response

from src.api.schemas import (
    AggregateProfileRequest,
    CalendarRequest,
    ConcertListResponse,
    ConcertMatchRequest,
    ConcertSearchRequest,
    ConcertSearchResponse,
    DedupeRequest,
    DedupeResponse,
    DigestRequest,
    DigestResponse,
    FestivalMatchRequest,
    GroupConcertMatch,
    GroupItineraryRequest,
    GroupMatchRequest,
    GroupMatchResponse,
    HealthResponse,
    ItineraryRequest,
    ProfileResponse,
    ScheduleRequest,
    ScheduleResponse,
    SwapRequest,
)
from src.config.settings import Settings
from src.models.concert import ConcertSource
from src.models.festival import FestivalMatchSummary
from src.models.group import GeneratedGroupItinerary
from src.models.itinerary import GeneratedItinerary
from src.services.artist_aggregator import create_unified_profile, get_connection_stats
from src.services.calendar_export import generate_ics, itinerary_to_ics
from src.services.concert_aggregator import (
    ConcertAggregationService,
    get_best_price,
    merge_source_results,
)
from src.services.group_itinerary_generator import build_member_taste, generate_group_itinerary
from src.services.group_matcher import (
    find_overlap_artists,
    find_overlap_genres,
    rank_concerts_for_group,
)
from src.services.itinerary_generator import generate_smart_itinerary, swap_itinerary_artist
from src.services.match_scorer import calculate_festival_match, rank_concerts, score_lineup
from src.services.notification_digest import (
    is_digest_due,
    remember_notified_ids,
    select_digest_concerts,
)
from src.services.schedule_service import build_schedule_grid, detect_conflicts
from src.utils.errors import ItineraryError
from src.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _get_settings(request: Request) -> Settings:
    """Return the settings the app was built with."""
    return request.app.state.settings


def _get_config(request: Request) -> dict:
    """Return the merged YAML + environment configuration."""
    return request.app.state.config


def _get_concert_service(request: Request) -> ConcertAggregationService:
    """Return the multi-source concert search service."""
    return request.app.state.concert_service


SettingsDep = Annotated[Settings, Depends(_get_settings)]
ConfigDep = Annotated[dict, Depends(_get_config)]
ConcertServiceDep = Annotated[ConcertAggregationService, Depends(_get_concert_service)]


# ---------------------------------------------------------------------------
# System endpoints
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Application health check")
async def health_check(concert_service: ConcertServiceDep) -> HealthResponse:
    """Report which ticketing sources live search can use.

    The matching core has no external dependencies, so the app is healthy
    even with no sources; it is ``degraded`` when live search has none.
    """
    enabled = concert_service.available_sources()
    sources = {source.value: source in enabled for source in ConcertSource}
    return HealthResponse(
        status="healthy" if enabled else "degraded",
        version=_VERSION,
        sources=sources,
    )


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


@router.post("/profiles/aggregate", response_model=ProfileResponse)
async def aggregate_profile(body: AggregateProfileRequest) -> ProfileResponse:
    profile = create_unified_profile(body.connections, body.service_data)
    return ProfileResponse(profile=profile, stats=get_connection_stats(body.connections))


# ---------------------------------------------------------------------------
# Concerts
# ---------------------------------------------------------------------------


@router.post("/concerts/match", response_model=ConcertListResponse)
async def match_concerts(body: ConcertMatchRequest) -> ConcertListResponse:
    return ConcertListResponse(
        concerts=rank_concerts(body.concerts, body.profile, min_score=body.min_score)
    )


@router.post("/concerts/search", response_model=ConcertSearchResponse)
async def search_concerts(
    body: ConcertSearchRequest,
    service: ConcertServiceDep,
) -> ConcertSearchResponse:
    """Search every enabled source, merge duplicates and optionally rank."""
    params = body.params
    if body.profile is not None and not params.artist_names:
        params = params.model_copy(
            update={"artist_names": [a.name for a in body.profile.top_artists]}
        )

    result = await service.search_all(params)
    concerts = result.concerts
    if body.profile is not None:
        concerts = rank_concerts(concerts, body.profile, min_score=body.min_score)

    return ConcertSearchResponse(
        concerts=concerts,
        total_by_source=result.total_by_source,
        searched_sources=result.searched_sources,
        failed_sources=result.failed_sources,
    )


@router.post("/concerts/dedupe", response_model=DedupeResponse)
async def dedupe_concerts(body: DedupeRequest) -> DedupeResponse:
    concerts = merge_source_results(body.results)
    best_prices = {}
    for concert in concerts:
        link = get_best_price(concert)
        if link is not None:
            best_prices[concert.id] = link
    return DedupeResponse(concerts=concerts, best_prices=best_prices)


# ---------------------------------------------------------------------------
# Festivals
# ---------------------------------------------------------------------------


@router.post("/festivals/match", response_model=FestivalMatchSummary)
async def match_festival(body: FestivalMatchRequest) -> FestivalMatchSummary:
    return calculate_festival_match(body.lineup, body.profile)


@router.post("/festivals/schedule", response_model=ScheduleResponse)
async def festival_schedule(body: ScheduleRequest) -> ScheduleResponse:
    picks = set(body.agenda_ids)
    agenda = [a for a in body.lineup if a.id in picks]
    return ScheduleResponse(
        days=build_schedule_grid(body.lineup, body.festival),
        conflicts=detect_conflicts(agenda),
    )


@router.post("/festivals/itinerary", response_model=GeneratedItinerary)
async def festival_itinerary(
    body: ItineraryRequest,
    settings: SettingsDep,
    config: ConfigDep,
) -> GeneratedItinerary:
    lineup = score_lineup(body.lineup, body.profile)
    include_discoveries = body.include_discoveries
    if include_discoveries is None:
        include_discoveries = config.get("itinerary", {}).get("include_discoveries", True)
    return generate_smart_itinerary(
        lineup,
        body.festival,
        max_per_day=(
            body.max_per_day if body.max_per_day is not None else settings.default_max_per_day
        ),
        include_discoveries=include_discoveries,
        rest_break_minutes=(
            body.rest_break_minutes
            if body.rest_break_minutes is not None
            else settings.default_rest_break_minutes
        ),
    )


@router.post("/festivals/itinerary/swap", response_model=GeneratedItinerary)
async def swap_itinerary(body: SwapRequest) -> GeneratedItinerary:
    days = body.itinerary.days
    if body.day_index >= len(days) or body.slot_index >= len(days[body.day_index].slots):
        raise ItineraryError(
            f"No slot {body.slot_index} on day {body.day_index} of this itinerary"
        )
    return swap_itinerary_artist(
        body.itinerary, body.day_index, body.slot_index, body.new_artist
    )


@router.post("/festivals/calendar", response_class=Response)
async def festival_calendar(body: CalendarRequest) -> Response:
    if body.itinerary is not None:
        content = itinerary_to_ics(body.festival, body.itinerary)
    else:
        content = generate_ics(body.festival, body.artists or [])
    filename = f"{body.festival.slug or body.festival.id}.ics"
    return Response(
        content=content,
        media_type="text/calendar",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ---------------------------------------------------------------------------
# Groups
# ---------------------------------------------------------------------------


@router.post("/groups/match", response_model=GroupMatchResponse)
async def match_group(body: GroupMatchRequest) -> GroupMatchResponse:
    ranked = rank_concerts_for_group(body.concerts, body.members)
    return GroupMatchResponse(
        matches=[GroupConcertMatch(concert=c, match=m) for c, m in ranked],
        overlap_artists=find_overlap_artists(body.members),
        overlap_genres=find_overlap_genres(body.members),
    )


@router.post("/groups/itinerary", response_model=GeneratedGroupItinerary)
async def group_itinerary(
    body: GroupItineraryRequest,
    settings: SettingsDep,
) -> GeneratedGroupItinerary:
    members = [
        build_member_taste(m.user_id, m.username, m.display_name, m.profile, body.lineup)
        for m in body.members
    ]
    return generate_group_itinerary(
        body.lineup,
        body.festival,
        members,
        max_per_day=(
            body.max_per_day if body.max_per_day is not None else settings.default_max_per_day
        ),
        rest_break_minutes=(
            body.rest_break_minutes
            if body.rest_break_minutes is not None
            else settings.group_rest_break_minutes
        ),
    )


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.post("/notifications/digest", response_model=DigestResponse)
async def notification_digest(body: DigestRequest) -> DigestResponse:
    pref = body.preference
    if not is_digest_due(pref, body.now):
        return DigestResponse(due=False, concerts=[], last_concert_ids=pref.last_concert_ids)

    selected = select_digest_concerts(body.concerts, pref)
    _logger.info("digest_prepared", concerts=len(selected))
    return DigestResponse(
        due=True,
        concerts=selected,
        last_concert_ids=remember_notified_ids(pref.last_concert_ids, [c.id for c in selected]),
    )
