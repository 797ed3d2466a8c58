"""Single-user festival itinerary generation.

Builds a conflict-free day-by-day plan from a lineup that has already been
tiered by :func:`~src.services.match_scorer.calculate_artist_match`.

Per day the lineup is split into four buckets and placed greedily in this
order, stopping at ``max_per_day``:

1. **must-see**    -- ``perfect`` tier, best score first
2. **recommended** -- ``genre`` tier scoring 50 or more
3. **discovery**   -- ``discovery`` tier and weaker ``genre`` matches
                      (skipped when discoveries are turned off)
4. **filler**      -- unmatched headliners, only while the day has fewer
                      than three picks, never past four

A set is placeable only if its window, widened by ``rest_break_minutes``
on both sides, does not touch any placed set's window.  A set with no
start time is always placeable; a set with no end time is assumed to run
an hour.  When a must-see cannot be placed, the set holding that time
keeps it as an alternative and a conflict is recorded.  Must-sees left
over once the day is full are kept the same way, on the closest pick.

Placement is priority-first; each day is then re-sorted chronologically
for display.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Sequence

import structlog

from src.config.tuning import (
    DAY_ROLLOVER_HOUR,
    DEFAULT_DAY_NAME,
    DEFAULT_MAX_PER_DAY,
    DEFAULT_REST_BREAK_MINUTES,
    DEFAULT_SLOT_MINUTES,
    FILLER_DAY_CAP,
    RECOMMENDED_MIN_SCORE,
    SPARSE_DAY_THRESHOLD,
)
from src.models.festival import (
    Festival,
    FestivalArtistMatch,
    MatchType,
    ScheduleConflict,
)
from src.models.itinerary import (
    GeneratedItinerary,
    ItineraryDay,
    ItinerarySlot,
    SlotPriority,
)
from src.services.schedule_service import date_for_day_name, time_to_minutes
from src.utils.errors import InvalidInputError

logger = structlog.get_logger(logger_name=__name__)

_MINUTES_PER_DAY = 24 * 60
_ROLLOVER_MINUTES = DAY_ROLLOVER_HOUR * 60


# ---------------------------------------------------------------------------
# Shared scheduling primitives (also used by the group generator)
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TimeWindow:
    """A set's start and end in minutes after midnight."""

    start: int
    end: int

    def blocks(self, other: TimeWindow, rest_break_minutes: int) -> bool:
        """True if *other* starts or ends within the rest buffer around this window."""
        return (
            other.start < self.end + rest_break_minutes
            and self.start < other.end + rest_break_minutes
        )

    def overlap_minutes(self, other: TimeWindow) -> int:
        return max(0, min(self.end, other.end) - max(self.start, other.start))


def _festival_minutes(value: str) -> int:
    minutes = time_to_minutes(value)
    if minutes < _ROLLOVER_MINUTES:
        minutes += _MINUTES_PER_DAY
    return minutes


def window_for(artist: FestivalArtistMatch) -> TimeWindow | None:
    """The set's time window, or None when it has no start time.

    Minutes count from midnight of the festival day.  Early-morning times
    (before ``DAY_ROLLOVER_HOUR``) belong to the same festival night, so a
    00:30 start reads as minute 1470 and sorts after a 23:00 set.
    """
    if not artist.start_time:
        return None
    start = _festival_minutes(artist.start_time)
    if artist.end_time:
        end = _festival_minutes(artist.end_time)
        if end <= start:
            # Set runs past midnight.
            end += _MINUTES_PER_DAY
    else:
        end = start + DEFAULT_SLOT_MINUTES
    return TimeWindow(start=start, end=end)


def group_by_day(lineup: Sequence[FestivalArtistMatch]) -> dict[str, list[FestivalArtistMatch]]:
    """Bucket the lineup by day name, keeping lineup order inside each day."""
    by_day: dict[str, list[FestivalArtistMatch]] = {}
    for artist in lineup:
        by_day.setdefault(artist.day or DEFAULT_DAY_NAME, []).append(artist)
    return by_day


def ordered_day_names(day_names: Sequence[str], festival_start: str) -> list[str]:
    """Weekday names in calendar order from the festival start, then the rest by name."""

    def sort_key(name: str) -> tuple[date, str]:
        resolved = date_for_day_name(name, festival_start)
        return (resolved or date.max, name)

    return sorted(day_names, key=sort_key)


def validate_options(max_per_day: int, rest_break_minutes: int) -> None:
    if max_per_day < 0:
        raise InvalidInputError(f"max_per_day must be >= 0, got {max_per_day}")
    if rest_break_minutes < 0:
        raise InvalidInputError(f"rest_break_minutes must be >= 0, got {rest_break_minutes}")


# ---------------------------------------------------------------------------
# Single-user generator
# ---------------------------------------------------------------------------

@dataclass
class _DraftSlot:
    artist: FestivalArtistMatch
    priority: SlotPriority
    reason: str
    window: TimeWindow | None
    alternatives: list[FestivalArtistMatch] = field(default_factory=list)

    def freeze(self) -> ItinerarySlot:
        return ItinerarySlot(
            artist=self.artist,
            priority=self.priority,
            reason=self.reason,
            alternatives=list(self.alternatives),
        )


def _blocking_slot(
    window: TimeWindow | None,
    placed: Sequence[_DraftSlot],
    rest_break_minutes: int,
) -> _DraftSlot | None:
    if window is None:
        return None
    for slot in placed:
        if slot.window is not None and slot.window.blocks(window, rest_break_minutes):
            return slot
    return None


def _nearest_slot(window: TimeWindow | None, placed: Sequence[_DraftSlot]) -> _DraftSlot | None:
    """The placed slot whose window is closest to *window* (first slot if untimed)."""
    timed = [s for s in placed if s.window is not None]
    if window is None or not timed:
        return placed[0] if placed else None

    def gap(slot: _DraftSlot) -> int:
        return max(slot.window.start - window.end, window.start - slot.window.end, 0)

    return min(timed, key=gap)


def _chronological(slots: list[_DraftSlot]) -> list[_DraftSlot]:
    # Untimed sets go last, keeping placement order among themselves.
    return sorted(
        slots,
        key=lambda s: (s.window is None, s.window.start if s.window is not None else 0),
    )


def _by_score(artists: list[FestivalArtistMatch]) -> list[FestivalArtistMatch]:
    return sorted(artists, key=lambda a: -a.match_score)


def _plan_day(
    day_name: str,
    artists: list[FestivalArtistMatch],
    max_per_day: int,
    include_discoveries: bool,
    rest_break_minutes: int,
    conflicts: list[ScheduleConflict],
) -> list[_DraftSlot]:
    must_see = _by_score([a for a in artists if a.match_type == MatchType.PERFECT])
    recommended = _by_score(
        [
            a
            for a in artists
            if a.match_type == MatchType.GENRE and a.match_score >= RECOMMENDED_MIN_SCORE
        ]
    )
    discoveries = _by_score(
        [
            a
            for a in artists
            if a.match_type == MatchType.DISCOVERY
            or (a.match_type == MatchType.GENRE and a.match_score < RECOMMENDED_MIN_SCORE)
        ]
    )
    filler = sorted(
        [a for a in artists if a.match_type == MatchType.NONE],
        key=lambda a: not a.headliner,
    )

    placed: list[_DraftSlot] = []

    for artist in must_see:
        window = window_for(artist)
        if len(placed) >= max_per_day:
            # Over the cap: keep it next to the closest pick so it is not lost.
            blocker = _nearest_slot(window, placed)
            if blocker is None:
                continue
        else:
            blocker = _blocking_slot(window, placed, rest_break_minutes)
        if blocker is None:
            placed.append(
                _DraftSlot(
                    artist=artist,
                    priority=SlotPriority.MUST_SEE,
                    reason=artist.match_reason or "In your top artists",
                    window=window,
                )
            )
            continue
        blocker.alternatives.append(artist)
        conflicts.append(
            ScheduleConflict(
                artist1=blocker.artist,
                artist2=artist,
                overlap_minutes=(
                    blocker.window.overlap_minutes(window)
                    if blocker.window is not None and window is not None
                    else 0
                ),
                day=day_name,
            )
        )

    def place_if_free(
        bucket: list[FestivalArtistMatch],
        priority: SlotPriority,
        reason_for: Callable[[FestivalArtistMatch], str],
        cap: int,
        headliners_only: bool = False,
    ) -> None:
        for artist in bucket:
            if len(placed) >= cap:
                break
            if headliners_only and not artist.headliner:
                continue
            window = window_for(artist)
            if _blocking_slot(window, placed, rest_break_minutes) is None:
                placed.append(
                    _DraftSlot(
                        artist=artist, priority=priority, reason=reason_for(artist), window=window
                    )
                )

    place_if_free(
        recommended,
        SlotPriority.RECOMMENDED,
        lambda a: a.match_reason or "Matches your taste",
        max_per_day,
    )
    if include_discoveries:
        place_if_free(
            discoveries,
            SlotPriority.DISCOVERY,
            lambda a: "Discover something new",
            max_per_day,
        )
    if len(placed) < SPARSE_DAY_THRESHOLD:
        place_if_free(
            filler,
            SlotPriority.FILLER,
            lambda a: "Popular headliner",
            min(FILLER_DAY_CAP, max_per_day),
            headliners_only=True,
        )

    return _chronological(placed)


def _build_highlights(days: Sequence[ItineraryDay], conflict_count: int) -> list[str]:
    highlights: list[str] = []
    must_see = sum(1 for d in days for s in d.slots if s.priority == SlotPriority.MUST_SEE)
    if must_see:
        highlights.append(f"{must_see} must-see artists scheduled")
    if conflict_count:
        highlights.append(f"{conflict_count} schedule conflicts to consider")
    discoveries = sum(1 for d in days for s in d.slots if s.priority == SlotPriority.DISCOVERY)
    if discoveries:
        highlights.append(f"{discoveries} new artists to discover")
    return highlights


def _day_totals(slots: Sequence[ItinerarySlot]) -> tuple[float, int]:
    total = sum(s.artist.match_score for s in slots)
    must_see = sum(1 for s in slots if s.priority == SlotPriority.MUST_SEE)
    return total, must_see


def generate_smart_itinerary(
    lineup: Sequence[FestivalArtistMatch],
    festival: Festival,
    max_per_day: int = DEFAULT_MAX_PER_DAY,
    include_discoveries: bool = True,
    rest_break_minutes: int = DEFAULT_REST_BREAK_MINUTES,
) -> GeneratedItinerary:
    """Greedily plan a festival for one user.

    Parameters
    ----------
    lineup:
        The festival lineup, already tiered against the user's profile.
    festival:
        The festival; its start date maps day names to calendar dates.
    max_per_day:
        Hard cap on sets per day.
    include_discoveries:
        Whether discovery-tier sets may be scheduled.
    rest_break_minutes:
        Minimum gap kept around every scheduled set.

    Returns
    -------
    GeneratedItinerary
        Days in calendar order with chronologically sorted slots, the
        conflicts found while placing must-sees, coverage and highlights.

    Raises
    ------
    InvalidInputError
        If an option is negative or a lineup time is not ``HH:MM``.
    """
    validate_options(max_per_day, rest_break_minutes)

    by_day = group_by_day(lineup)
    conflicts: list[ScheduleConflict] = []
    days: list[ItineraryDay] = []
    timed_sets = 0

    for day_name in ordered_day_names(list(by_day), festival.dates.start):
        day_artists = by_day[day_name]
        drafts = _plan_day(
            day_name,
            day_artists,
            max_per_day,
            include_discoveries,
            rest_break_minutes,
            conflicts,
        )
        slots = [d.freeze() for d in drafts]
        total, must_see = _day_totals(slots)
        resolved = date_for_day_name(day_name, festival.dates.start)
        days.append(
            ItineraryDay(
                day_name=day_name,
                date=resolved.isoformat() if resolved else "",
                slots=slots,
                total_score=total,
                must_see_count=must_see,
            )
        )
        timed_sets += sum(1 for a in day_artists if a.start_time)

    scheduled = sum(len(d.slots) for d in days)
    coverage = min(100, round(scheduled / timed_sets * 100)) if timed_sets else 0

    logger.info(
        "itinerary_generated",
        festival_id=festival.id,
        days=len(days),
        scheduled=scheduled,
        conflicts=len(conflicts),
    )
    return GeneratedItinerary(
        days=days,
        total_score=sum(d.total_score for d in days),
        coverage=coverage,
        conflicts=conflicts,
        highlights=_build_highlights(days, len(conflicts)),
    )


def swap_itinerary_artist(
    itinerary: GeneratedItinerary,
    day_index: int,
    slot_index: int,
    new_artist: FestivalArtistMatch,
) -> GeneratedItinerary:
    """Return a new itinerary with one slot's artist replaced.

    The replaced artist (and its alternatives) become the new slot's
    alternatives.  The day's score and must-see count and the itinerary
    total are recomputed; every other day is shared with *itinerary*
    unchanged.  The swap itself is not checked for clashes.  Indexes out
    of range return *itinerary* as-is.
    """
    if not 0 <= day_index < len(itinerary.days):
        return itinerary
    day = itinerary.days[day_index]
    if not 0 <= slot_index < len(day.slots):
        return itinerary

    old_slot = day.slots[slot_index]
    new_slot = ItinerarySlot(
        artist=new_artist,
        priority=(
            SlotPriority.MUST_SEE
            if new_artist.match_type == MatchType.PERFECT
            else SlotPriority.RECOMMENDED
        ),
        reason=new_artist.match_reason or "Your choice",
        alternatives=[old_slot.artist, *old_slot.alternatives],
    )

    slots = list(day.slots)
    slots[slot_index] = new_slot
    total, must_see = _day_totals(slots)
    new_day = day.model_copy(
        update={"slots": slots, "total_score": total, "must_see_count": must_see}
    )

    days = list(itinerary.days)
    days[day_index] = new_day
    logger.debug("itinerary_slot_swapped", day_index=day_index, slot_index=slot_index)
    return itinerary.model_copy(
        update={"days": days, "total_score": sum(d.total_score for d in days)}
    )
