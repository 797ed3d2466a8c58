"""iCalendar (RFC 5545) export of festival picks.

Produces plain ``.ics`` text with one VEVENT per set.  Times are floating
local times (no ``Z`` and no TZID) because lineup times are already in the
festival's local clock.  Sets without a start time, or whose day name does
not resolve to a date, are left out.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable

import structlog

from src.config.tuning import DEFAULT_SLOT_MINUTES
from src.models.festival import Festival, FestivalArtistMatch
from src.models.group import GeneratedGroupItinerary
from src.models.itinerary import GeneratedItinerary
from src.services.itinerary_generator import window_for
from src.services.schedule_service import date_for_day_name

logger = structlog.get_logger(logger_name=__name__)

PRODID = "-//Stageside//Festival Planner//EN"
UID_DOMAIN = "stageside.app"
_ICS_DATETIME = "%Y%m%dT%H%M%S"


def escape_text(value: str) -> str:
    """Escape a TEXT property value."""
    return (
        value.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\r\n", "\\n")
        .replace("\n", "\\n")
    )


def _event_lines(festival: Festival, artist: FestivalArtistMatch) -> list[str] | None:
    day = date_for_day_name(artist.day, festival.dates.start)
    window = window_for(artist)
    if day is None or window is None:
        return None

    midnight = datetime(day.year, day.month, day.day)
    start = midnight + timedelta(minutes=window.start)
    end = midnight + timedelta(minutes=window.end)
    if not artist.end_time:
        end = start + timedelta(minutes=DEFAULT_SLOT_MINUTES)

    location = artist.stage or festival.location.venue or festival.name
    description = f"{artist.match_reason or ''} - {festival.name}"
    return [
        "BEGIN:VEVENT",
        f"UID:{festival.id}-{artist.id}@{UID_DOMAIN}",
        f"DTSTART:{start.strftime(_ICS_DATETIME)}",
        f"DTEND:{end.strftime(_ICS_DATETIME)}",
        f"SUMMARY:{escape_text(artist.artist_name)}",
        f"LOCATION:{escape_text(location)}",
        f"DESCRIPTION:{escape_text(description)}",
        "END:VEVENT",
    ]


def generate_ics(festival: Festival, artists: Iterable[FestivalArtistMatch]) -> str:
    """Render *artists* as a VCALENDAR document with CRLF line endings."""
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        f"PRODID:{PRODID}",
        "CALSCALE:GREGORIAN",
        "METHOD:PUBLISH",
    ]
    exported = 0
    for artist in artists:
        event = _event_lines(festival, artist)
        if event is None:
            continue
        lines.extend(event)
        exported += 1
    lines.append("END:VCALENDAR")

    logger.debug("calendar_exported", festival_id=festival.id, events=exported)
    return "\r\n".join(lines) + "\r\n"


def itinerary_to_ics(
    festival: Festival,
    itinerary: GeneratedItinerary | GeneratedGroupItinerary,
) -> str:
    """Export every scheduled slot of a single-user or group itinerary.

    Single-user slots use the slot's reason as the event description.
    """
    artists: list[FestivalArtistMatch] = []
    for day in itinerary.days:
        for slot in day.slots:
            reason = getattr(slot, "reason", None) or slot.artist.match_reason
            artists.append(slot.artist.model_copy(update={"match_reason": reason}))
    return generate_ics(festival, artists)
