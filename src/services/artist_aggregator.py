"""Artist aggregation across connected music services.

Folds the ranked artist and genre lists every connected streaming service
reports into one deduplicated, score-ranked :class:`UserMusicProfile`.

Scoring:
    Each artist at list position ``i`` in a service's list contributes
    ``max(100 - i, 10) * service_weight``.  An artist listed by several
    services (or twice by one) accumulates the sum of every contribution,
    so the score only ever grows as more evidence arrives.

Deduplication:
    Incoming names are resolved through an :class:`IArtistIndex` (a linear
    fuzzy scan by default).  On collision the entries merge: sources are
    unioned, genre tags are unioned case-insensitively keeping the first
    spelling seen, a missing image is filled in and the longer display
    name wins.

The profile is rebuilt wholesale on every sync; nothing here is
incremental and nothing here does I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping

import structlog

from src.config.tuning import (
    ARTIST_POSITION_BASE,
    ARTIST_POSITION_FLOOR,
    DEFAULT_SERVICE_WEIGHT,
    GENRE_POSITION_BASE,
    GENRE_POSITION_FLOOR,
    MAX_AGGREGATED_ARTISTS,
    MAX_AGGREGATED_GENRES,
    MAX_RECENT_ARTISTS_PER_SERVICE,
    SERVICE_WEIGHTS,
)
from src.interfaces.artist_index import IArtistIndex
from src.models.music import (
    AggregatedArtist,
    ConnectionIssue,
    ConnectionStats,
    MusicConnection,
    RawArtistEntry,
    ServiceId,
    ServiceProfile,
    UserMusicProfile,
)
from src.providers.artist_index.linear_scan_index import LinearScanArtistIndex
from src.utils.text_normalizer import normalize_artist_name, normalize_genre

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class _ArtistAccumulator:
    """Mutable fold state for one artist while services are merged."""

    name: str
    normalized_name: str
    score: float = 0.0
    genres: list[str] = field(default_factory=list)
    genre_keys: set[str] = field(default_factory=set)
    sources: list[ServiceId] = field(default_factory=list)
    image_url: str | None = None
    source_ids: dict[str, str] = field(default_factory=dict)

    def add_genres(self, genres: Iterable[str]) -> None:
        for genre in genres:
            key = normalize_genre(genre)
            if key and key not in self.genre_keys:
                self.genre_keys.add(key)
                self.genres.append(genre)

    def freeze(self) -> AggregatedArtist:
        return AggregatedArtist(
            name=self.name,
            normalized_name=self.normalized_name,
            score=self.score,
            genres=list(self.genres),
            sources=list(self.sources),
            image_url=self.image_url,
            source_ids=dict(self.source_ids),
        )


def service_weight(service: ServiceId | str) -> float:
    """Return the reliability weight of *service* (0.5 for unknown services)."""
    key = service.value if isinstance(service, ServiceId) else str(service)
    return SERVICE_WEIGHTS.get(key, DEFAULT_SERVICE_WEIGHT)


def artist_position_score(index: int, weight: float) -> float:
    return max(ARTIST_POSITION_BASE - index, ARTIST_POSITION_FLOOR) * weight


def aggregate_artists(
    profiles: Iterable[ServiceProfile],
    index_factory: Callable[[], IArtistIndex] = LinearScanArtistIndex,
) -> list[AggregatedArtist]:
    """Merge per-service artist lists into one ranked, deduplicated list.

    Parameters
    ----------
    profiles:
        One entry per connected service.  Service order only affects which
        spelling is seen first, never the final ranking.
    index_factory:
        Builds the collision index used to resolve fuzzy artist identity.

    Returns
    -------
    list[AggregatedArtist]
        At most 200 artists, highest accumulated score first.  Ties keep
        first-seen order.
    """
    index = index_factory()
    accumulators: dict[str, _ArtistAccumulator] = {}

    for profile in profiles:
        weight = service_weight(profile.service)
        for position, entry in enumerate(profile.artists):
            if not normalize_artist_name(entry.name):
                continue
            key, created = index.find_or_insert(entry.name)
            contribution = artist_position_score(position, weight)

            if created:
                acc = _ArtistAccumulator(name=entry.name, normalized_name=key)
                accumulators[key] = acc
            else:
                acc = accumulators[key]
                if len(entry.name) > len(acc.name):
                    acc.name = entry.name
                    index.update_display_name(key, entry.name)

            _merge_entry(acc, entry, profile.service, contribution)

    ranked = sorted(accumulators.values(), key=lambda a: -a.score)
    result = [acc.freeze() for acc in ranked[:MAX_AGGREGATED_ARTISTS]]

    logger.debug(
        "artist_aggregation_complete",
        distinct_artists=len(accumulators),
        returned=len(result),
    )
    return result


def _merge_entry(
    acc: _ArtistAccumulator,
    entry: RawArtistEntry,
    service: ServiceId,
    contribution: float,
) -> None:
    acc.score += contribution
    if service not in acc.sources:
        acc.sources.append(service)
    acc.add_genres(entry.genres)
    if not acc.image_url and entry.image_url:
        acc.image_url = entry.image_url
    if entry.source_id:
        acc.source_ids.setdefault(service.value, entry.source_id)


def aggregate_genres(profiles: Iterable[ServiceProfile]) -> list[str]:
    """Rank genres across services.

    Each genre at position ``i`` contributes ``max(20 - i, 1) * weight``,
    summed by lowercase genre.  Returns the top 30 lowercase genre names.
    """
    weights: dict[str, float] = {}
    for profile in profiles:
        weight = service_weight(profile.service)
        for position, genre in enumerate(profile.genres):
            key = normalize_genre(genre)
            if not key:
                continue
            score = max(GENRE_POSITION_BASE - position, GENRE_POSITION_FLOOR) * weight
            weights[key] = weights.get(key, 0.0) + score

    ranked = sorted(weights.items(), key=lambda item: -item[1])
    return [genre for genre, _ in ranked[:MAX_AGGREGATED_GENRES]]


def create_unified_profile(
    connections: Iterable[MusicConnection],
    service_data: Mapping[ServiceId, ServiceProfile],
) -> UserMusicProfile:
    """Build a user's profile from every healthy connection.

    Only connections that are active and carry no error take part.  A
    connected service with no synced data contributes nothing.  Recently
    played names are the first 20 per service, de-duplicated by exact
    string in first-seen order.
    """
    active_services = [c.service for c in connections if c.is_active and not c.error]

    profiles = [service_data[s] for s in active_services if s in service_data]
    top_artists = aggregate_artists(profiles)
    top_genres = aggregate_genres(profiles)

    recent: list[str] = []
    seen: set[str] = set()
    for profile in profiles:
        for name in profile.recent_artists[:MAX_RECENT_ARTISTS_PER_SERVICE]:
            if name not in seen:
                seen.add(name)
                recent.append(name)

    logger.info(
        "unified_profile_created",
        services=[s.value for s in active_services],
        artists=len(top_artists),
        genres=len(top_genres),
    )
    return UserMusicProfile(
        top_artists=top_artists,
        top_genres=top_genres,
        recent_artist_names=recent,
        connected_services=active_services,
    )


def get_connection_stats(connections: Iterable[MusicConnection]) -> ConnectionStats:
    """Summarize connections: how many, which are healthy, which errored."""
    connections = list(connections)
    active = [c for c in connections if c.is_active and not c.error]
    return ConnectionStats(
        total=len(connections),
        active=len(active),
        services=[c.service for c in active],
        errors=[ConnectionIssue(service=c.service, error=c.error) for c in connections if c.error],
    )
