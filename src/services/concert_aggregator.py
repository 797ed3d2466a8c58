"""Cross-source concert deduplication and the multi-source search service.

Ticketmaster, SeatGeek and Bandsintown often list the same show.  This
module decides when two listings are the same real-world event and folds
them into one :class:`AggregatedConcert`:

    * same date string, AND
    * at least one fuzzy artist-name overlap, AND
    * venue names contain one another OR cities contain one another.

The venue check is deliberately permissive (OR, not AND) because venue
naming varies wildly across sources; requiring date and artist agreement
first keeps false merges rare.

Merging is one-directional and order-dependent.  Sources are folded in
priority order: the primary source's listings are loaded as-is, then every
later source's listing either merges into the first accumulated concert it
matches or is appended as a new event.

:class:`ConcertAggregationService` is the async boundary around the pure
functions: it queries every enabled source concurrently, isolates
per-source failures and caches each source's result.
"""

from __future__ import annotations

from typing import Iterable, Sequence

import structlog

from src.config.tuning import PLACEHOLDER_IMAGE, SOURCE_PRIORITY
from src.interfaces.cache_provider import ICacheProvider
from src.interfaces.concert_source import IConcertSource
from src.models.concert import (
    AggregatedConcert,
    AggregatorResult,
    AlternateUrl,
    BestPrice,
    BestPriceLink,
    Concert,
    ConcertSearchParams,
    ConcertSource,
    SourceSearchResult,
)
from src.utils.concurrency import throttled_gather
from src.utils.errors import StagesideError
from src.utils.text_normalizer import contains_either, is_same_artist, normalize_genre

logger = structlog.get_logger(logger_name=__name__)

_SOURCE_DISPLAY_NAMES: dict[ConcertSource, str] = {
    ConcertSource.TICKETMASTER: "Ticketmaster",
    ConcertSource.SEATGEEK: "SeatGeek",
    ConcertSource.BANDSINTOWN: "Bandsintown",
}


# ---------------------------------------------------------------------------
# Pure merge logic
# ---------------------------------------------------------------------------

def is_same_concert(a: Concert, b: Concert) -> bool:
    """Return True when two listings describe the same real-world event."""
    if not a.date or a.date != b.date:
        return False

    if not any(is_same_artist(x, y) for x in a.artists for y in b.artists):
        return False

    return contains_either(a.venue.name, b.venue.name) or contains_either(
        a.venue.city, b.venue.city
    )


def to_aggregated(concert: Concert, source: ConcertSource) -> AggregatedConcert:
    """Wrap a single-source listing as an aggregated concert."""
    best_price = None
    if concert.price_range is not None:
        best_price = BestPrice(
            min=concert.price_range.min, max=concert.price_range.max, source=source
        )
    return AggregatedConcert(
        **concert.model_dump(include=set(Concert.model_fields)),
        sources=[source],
        best_price=best_price,
    )


def merge_concerts(
    primary: AggregatedConcert,
    secondary: Concert,
    source: ConcertSource,
) -> AggregatedConcert:
    """Fold *secondary* (from *source*) into *primary* and return the result.

    * the source is recorded once
    * a different ticket URL becomes an alternate URL
    * the best price moves only when the secondary minimum is strictly lower
    * genres are unioned case-insensitively, keeping primary spellings
    * the image is backfilled only when primary has none or the placeholder
    """
    sources = list(primary.sources)
    if source not in sources:
        sources.append(source)

    alternate_urls = list(primary.alternate_urls)
    known_urls = {primary.ticket_url, *(alt.url for alt in alternate_urls)}
    if secondary.ticket_url and secondary.ticket_url not in known_urls:
        alternate_urls.append(AlternateUrl(source=source, url=secondary.ticket_url))

    best_price = primary.best_price
    if secondary.price_range is not None and (
        best_price is None or secondary.price_range.min < best_price.min
    ):
        best_price = BestPrice(
            min=secondary.price_range.min, max=secondary.price_range.max, source=source
        )

    genres = list(primary.genres)
    genre_keys = {normalize_genre(g) for g in genres}
    for genre in secondary.genres:
        key = normalize_genre(genre)
        if key and key not in genre_keys:
            genre_keys.add(key)
            genres.append(genre)

    image_url = primary.image_url
    if (not image_url or image_url == PLACEHOLDER_IMAGE) and secondary.image_url:
        image_url = secondary.image_url

    return primary.model_copy(
        update={
            "sources": sources,
            "alternate_urls": alternate_urls,
            "best_price": best_price,
            "genres": genres,
            "image_url": image_url,
        }
    )


def _priority(source: ConcertSource) -> int:
    try:
        return SOURCE_PRIORITY.index(source.value)
    except ValueError:
        return len(SOURCE_PRIORITY)


def merge_source_results(results: Iterable[SourceSearchResult]) -> list[AggregatedConcert]:
    """Fold every source's listings into one list of canonical events.

    Results are processed in source priority order regardless of the order
    they arrive in.  The highest-priority source's listings are taken as-is;
    each later listing merges into the first accumulated concert it matches
    or is appended.
    """
    ordered = sorted(results, key=lambda r: _priority(r.source))
    merged: list[AggregatedConcert] = []

    for position, result in enumerate(ordered):
        for concert in result.concerts:
            if position == 0:
                merged.append(to_aggregated(concert, result.source))
                continue

            for idx, existing in enumerate(merged):
                if is_same_concert(existing, concert):
                    merged[idx] = merge_concerts(existing, concert, result.source)
                    break
            else:
                merged.append(to_aggregated(concert, result.source))

    return merged


def get_best_price(concert: AggregatedConcert) -> BestPriceLink | None:
    """Where to buy the cheapest ticket, or None when no source had prices."""
    if concert.best_price is None:
        return None

    source = concert.best_price.source
    url = concert.ticket_url
    if source != concert.sources[0]:
        for alt in concert.alternate_urls:
            if alt.source == source:
                url = alt.url
                break

    return BestPriceLink(
        source=source, url=url, min=concert.best_price.min, max=concert.best_price.max
    )


def format_source_name(source: ConcertSource) -> str:
    return _SOURCE_DISPLAY_NAMES.get(source, source.value.title())


# ---------------------------------------------------------------------------
# Async search service
# ---------------------------------------------------------------------------

class ConcertAggregationService:
    """Queries every enabled ticketing source and merges the results.

    A failing source is logged and contributes nothing; the remaining
    sources still produce a result.  Each source's response is cached
    under a key derived from the search parameters.

    Parameters
    ----------
    sources:
        Ticketing-source adapters, in any order.
    cache:
        Optional cache for per-source search results.
    cache_ttl:
        Seconds a cached source result stays valid.
    """

    def __init__(
        self,
        sources: Sequence[IConcertSource],
        cache: ICacheProvider | None = None,
        cache_ttl: int = 3600,
    ) -> None:
        self._sources = list(sources)
        self._cache = cache
        self._cache_ttl = cache_ttl

    def available_sources(self) -> list[ConcertSource]:
        return [s.get_source() for s in self._sources if s.is_available()]

    async def search_all(self, params: ConcertSearchParams) -> AggregatorResult:
        """Search all enabled sources concurrently and merge their listings."""
        selected = [
            s
            for s in self._sources
            if s.is_available() and (params.sources is None or s.get_source() in params.sources)
        ]

        raw = await throttled_gather(
            [self._search_source(s, params) for s in selected], return_exceptions=True
        )

        results: list[SourceSearchResult] = []
        failed: list[ConcertSource] = []
        for provider, outcome in zip(selected, raw):
            source = provider.get_source()
            if isinstance(outcome, Exception):
                logger.warning(
                    "concert_source_failed",
                    source=source.value,
                    error=str(outcome),
                    expected=isinstance(outcome, StagesideError),
                )
                failed.append(source)
                continue
            if isinstance(outcome, BaseException):
                raise outcome
            results.append(outcome)

        concerts = merge_source_results(results)
        total_by_source = {s.value: 0 for s in ConcertSource}
        for result in results:
            total_by_source[result.source.value] = result.total

        logger.info(
            "concert_search_complete",
            searched=[s.get_source().value for s in selected],
            failed=[s.value for s in failed],
            concerts=len(concerts),
        )
        return AggregatorResult(
            concerts=concerts,
            total_by_source=total_by_source,
            searched_sources=[s.get_source() for s in selected],
            failed_sources=failed,
        )

    async def _search_source(
        self,
        provider: IConcertSource,
        params: ConcertSearchParams,
    ) -> SourceSearchResult:
        cache_key = f"concerts:{provider.get_source().value}:{params.model_dump_json()}"
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return cached

        result = await provider.search(params)
        if self._cache is not None:
            await self._cache.set(cache_key, result, ttl=self._cache_ttl)
        return result
