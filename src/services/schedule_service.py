"""Festival schedule helpers: clock parsing, day-name dates, grid and clashes.

Lineup times are local ``HH:MM`` strings and lineup days are weekday names
("Friday").  Late-night sets may be written past midnight as ``25:30``.
Day names resolve to calendar dates relative to the festival's first day.
"""

from __future__ import annotations

import re
from datetime import date, timedelta
from typing import Iterable

from src.config.tuning import (
    DEFAULT_STAGE_NAME,
    GRID_END_HOUR,
    GRID_START_HOUR,
    GRID_STEP_MINUTES,
)
from src.models.festival import (
    Festival,
    FestivalArtistMatch,
    ScheduleConflict,
    ScheduleDay,
    ScheduleSlot,
)
from src.utils.errors import InvalidInputError

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::\d{2})?$")

WEEKDAYS: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


def time_to_minutes(value: str) -> int:
    """Convert ``HH:MM`` (or ``HH:MM:SS``) to minutes after midnight.

    Raises
    ------
    InvalidInputError
        If *value* is not a clock time.
    """
    match = _TIME_PATTERN.match(value.strip()) if value else None
    if match is None:
        raise InvalidInputError(f"Invalid time {value!r}, expected HH:MM")
    hours, minutes = int(match.group(1)), int(match.group(2))
    if minutes >= 60 or hours >= 48:
        raise InvalidInputError(f"Invalid time {value!r}, expected HH:MM")
    return hours * 60 + minutes


def minutes_to_time(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidInputError(f"Invalid date {value!r}, expected YYYY-MM-DD") from exc


def date_for_day_name(day_name: str | None, festival_start: str) -> date | None:
    """Resolve a weekday name to the first matching date on or after the start.

    Returns ``None`` for names that are not weekdays (e.g. "Day 1").
    """
    if not day_name:
        return None
    target = day_name.strip().lower()
    if target not in WEEKDAYS:
        return None
    start = parse_date(festival_start)
    offset = (WEEKDAYS.index(target) - start.weekday()) % 7
    return start + timedelta(days=offset)


def day_date_string(day_name: str | None, festival_start: str) -> str:
    resolved = date_for_day_name(day_name, festival_start)
    return resolved.isoformat() if resolved else ""


def detect_conflicts(agenda: Iterable[FestivalArtistMatch]) -> list[ScheduleConflict]:
    """Find every pair of same-day picks whose sets overlap.

    Sets missing a start or end time are never reported.
    """
    picks = list(agenda)
    conflicts: list[ScheduleConflict] = []

    for i, first in enumerate(picks):
        for second in picks[i + 1:]:
            if first.day != second.day:
                continue
            if not (first.start_time and first.end_time and second.start_time and second.end_time):
                continue
            first_start = time_to_minutes(first.start_time)
            first_end = time_to_minutes(first.end_time)
            second_start = time_to_minutes(second.start_time)
            second_end = time_to_minutes(second.end_time)

            if first_start < second_end and second_start < first_end:
                conflicts.append(
                    ScheduleConflict(
                        artist1=first,
                        artist2=second,
                        overlap_minutes=min(first_end, second_end) - max(first_start, second_start),
                        day=first.day or "",
                    )
                )

    return conflicts


def build_schedule_grid(
    lineup: Iterable[FestivalArtistMatch],
    festival: Festival,
) -> list[ScheduleDay]:
    """Lay the lineup out as per-day, per-stage half-hour rows (12:00–24:30).

    A set appears in the row matching its exact start time.  Without any
    day information, one empty day per festival date is produced.
    """
    lineup = list(lineup)
    days: list[str] = []
    stages_by_day: dict[str, list[str]] = {}

    for artist in lineup:
        if not artist.day:
            continue
        if artist.day not in stages_by_day:
            days.append(artist.day)
            stages_by_day[artist.day] = []
        if artist.stage and artist.stage not in stages_by_day[artist.day]:
            stages_by_day[artist.day].append(artist.stage)

    if not days:
        current = parse_date(festival.dates.start)
        end = parse_date(festival.dates.end)
        while current <= end:
            name = WEEKDAYS[current.weekday()].title()
            if name not in days:
                days.append(name)
            current += timedelta(days=1)

    schedule: list[ScheduleDay] = []
    for day_name in days:
        stages = stages_by_day.get(day_name) or [DEFAULT_STAGE_NAME]
        day_artists = [a for a in lineup if a.day == day_name]

        rows: list[list[ScheduleSlot]] = []
        for minutes in range(
            GRID_START_HOUR * 60, GRID_END_HOUR * 60 + 60, GRID_STEP_MINUTES
        ):
            time = minutes_to_time(minutes)
            row = []
            for stage in stages:
                artist = next(
                    (
                        a
                        for a in day_artists
                        if a.stage == stage
                        and a.start_time
                        and time_to_minutes(a.start_time) == minutes
                    ),
                    None,
                )
                row.append(
                    ScheduleSlot(time=time, stage=stage, artist=artist, is_empty=artist is None)
                )
            rows.append(row)

        schedule.append(
            ScheduleDay(
                date=day_date_string(day_name, festival.dates.start),
                day_name=day_name,
                stages=stages,
                slots=rows,
            )
        )

    return schedule
