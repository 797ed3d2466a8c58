# =============================================================================
# src/cli/plan.py - CLI Festival Planner
# =============================================================================
#
# Plans a festival from a JSON file without running the API server:
#
#   1. Read the festival, its lineup and the listener's taste
#   2. Score the lineup against the taste (perfect / genre / discovery)
#   3. Generate the itinerary and print it (or its JSON)
#   4. Optionally write an .ics calendar of the scheduled sets
#
# Typical usage:
#   python -m src.cli.plan coachella.json
#   python -m src.cli.plan coachella.json --json > plan.json
#   python -m src.cli.plan coachella.json --ics plan.ics --max-per-day 5
#
# Input file keys:
#   festival   - Festival object (id, name, dates.start, dates.end, ...)
#   lineup     - list of FestivalArtist objects
#   profile    - UserMusicProfile, OR
#   services   - {service_id: ServiceProfile} raw per-service data that
#                is aggregated into a profile first, OR
#   members    - list of {user_id, username, display_name, profile} for a
#                group itinerary instead of a single-user one
# =============================================================================

"""Standalone CLI for planning a festival itinerary.

Usage::

    python -m src.cli.plan input.json
    python -m src.cli.plan input.json --json
    python -m src.cli.plan input.json --ics plan.ics --rest-break 60
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Sequence

from pydantic import TypeAdapter, ValidationError

from src.api.schemas import GroupItineraryMember
from src.config.settings import Settings
from src.models.festival import Festival, FestivalArtist
from src.models.group import GeneratedGroupItinerary
from src.models.itinerary import GeneratedItinerary
from src.models.music import MusicConnection, ServiceId, ServiceProfile, UserMusicProfile
from src.services.artist_aggregator import create_unified_profile
from src.services.calendar_export import itinerary_to_ics
from src.services.group_itinerary_generator import build_member_taste, generate_group_itinerary
from src.services.itinerary_generator import generate_smart_itinerary
from src.services.match_scorer import score_lineup
from src.utils.errors import StagesideError
from src.utils.logging import configure_logging

_LINEUP = TypeAdapter(list[FestivalArtist])
_SERVICES = TypeAdapter(dict[ServiceId, ServiceProfile])
_MEMBERS = TypeAdapter(list[GroupItineraryMember])


# ---------------------------------------------------------------------------
# Input
# ---------------------------------------------------------------------------


def _load_profile(data: dict[str, Any]) -> UserMusicProfile:
    if "profile" in data:
        return UserMusicProfile.model_validate(data["profile"])
    services = _SERVICES.validate_python(data.get("services") or {})
    connections = [MusicConnection(service=service) for service in services]
    return create_unified_profile(connections, services)


# ---------------------------------------------------------------------------
# Formatting helpers
# ---------------------------------------------------------------------------


def _format_itinerary(festival: Festival, itinerary: GeneratedItinerary) -> str:
    lines: list[str] = []
    sep = "=" * 60
    lines.append(sep)
    lines.append(f"  {festival.name} — Your Plan")
    lines.append(sep)
    lines.append(
        f"Coverage: {itinerary.coverage}%  |  Total score: {itinerary.total_score:g}"
    )
    for highlight in itinerary.highlights:
        lines.append(f"  * {highlight}")

    for day in itinerary.days:
        lines.append("")
        lines.append(f"{day.day_name} {day.date}".rstrip())
        lines.append("-" * 40)
        if not day.slots:
            lines.append("  (nothing scheduled)")
        for slot in day.slots:
            when = slot.artist.start_time or "--:--"
            stage = f" @ {slot.artist.stage}" if slot.artist.stage else ""
            lines.append(
                f"  {when}  {slot.artist.artist_name}{stage}  [{slot.priority.value}] {slot.reason}"
            )
            for alt in slot.alternatives:
                lines.append(f"           instead of {alt.artist_name}")

    if itinerary.conflicts:
        lines.append("")
        lines.append("CONFLICTS")
        lines.append("-" * 40)
        for conflict in itinerary.conflicts:
            lines.append(
                f"  {conflict.day}: missing {conflict.artist2.artist_name} "
                f"because of {conflict.artist1.artist_name} "
                f"({conflict.overlap_minutes} min overlap)"
            )
    lines.append(sep)
    return "\n".join(lines)


def _format_group_itinerary(festival: Festival, itinerary: GeneratedGroupItinerary) -> str:
    lines: list[str] = []
    sep = "=" * 60
    lines.append(sep)
    lines.append(f"  {festival.name} — Group Plan")
    lines.append(sep)
    for highlight in itinerary.highlights:
        lines.append(f"  * {highlight}")

    for day in itinerary.days:
        lines.append("")
        lines.append(f"{day.day_name} {day.date}".rstrip())
        lines.append("-" * 40)
        for slot in day.slots:
            when = slot.artist.start_time or "--:--"
            decided = slot.decided_by.value
            if slot.winning_member is not None:
                decided += f" ({slot.winning_member.username})"
            lines.append(f"  {when}  {slot.artist.artist_name}  [{decided}]")
            if slot.conflict_resolution is not None:
                lines.append(f"           {slot.conflict_resolution.reason}")

    lines.append("")
    lines.append("MEMBERS")
    lines.append("-" * 40)
    for member in itinerary.member_satisfaction:
        lines.append(
            f"  {member.username}: {member.satisfaction_score}% satisfied "
            f"({member.must_sees_covered}/{member.must_sees_total} must-sees, "
            f"{member.compromises} compromises)"
        )
    lines.append(sep)
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def _build_parser(settings: Settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m src.cli.plan",
        description="Plan a festival itinerary from a lineup and a music profile.",
    )
    parser.add_argument("input", type=str, help="Path to the JSON input file.")
    parser.add_argument(
        "--json",
        action="store_true",
        dest="json_output",
        help="Print the itinerary as JSON instead of formatted text.",
    )
    parser.add_argument(
        "--ics",
        type=str,
        default=None,
        help="Also write the scheduled sets to this .ics calendar file.",
    )
    parser.add_argument(
        "--max-per-day",
        type=int,
        default=settings.default_max_per_day,
        help="Maximum sets per day (default: %(default)s).",
    )
    parser.add_argument(
        "--rest-break",
        type=int,
        default=None,
        help="Minutes kept free around every set "
        f"(default: {settings.default_rest_break_minutes}, "
        f"{settings.group_rest_break_minutes} for groups).",
    )
    parser.add_argument(
        "--no-discoveries",
        action="store_true",
        help="Do not schedule discovery picks.",
    )
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the planner.  Returns the process exit code."""
    settings = Settings()
    args = _build_parser(settings).parse_args(argv)

    # Warnings only, on stderr, so stdout carries nothing but the plan.
    configure_logging(log_level="WARNING", app_env=settings.app_env, stream=sys.stderr)

    input_path = Path(args.input)
    if not input_path.is_file():
        print(f"Error: File not found: {input_path}", file=sys.stderr)
        return 1

    try:
        data = json.loads(input_path.read_text(encoding="utf-8"))
        festival = Festival.model_validate(data["festival"])
        lineup = _LINEUP.validate_python(data.get("lineup") or [])

        if "members" in data:
            members = [
                build_member_taste(m.user_id, m.username, m.display_name, m.profile, lineup)
                for m in _MEMBERS.validate_python(data["members"])
            ]
            itinerary: GeneratedItinerary | GeneratedGroupItinerary = generate_group_itinerary(
                lineup,
                festival,
                members,
                max_per_day=args.max_per_day,
                rest_break_minutes=(
                    args.rest_break
                    if args.rest_break is not None
                    else settings.group_rest_break_minutes
                ),
            )
            text = _format_group_itinerary(festival, itinerary)
        else:
            itinerary = generate_smart_itinerary(
                score_lineup(lineup, _load_profile(data)),
                festival,
                max_per_day=args.max_per_day,
                include_discoveries=not args.no_discoveries,
                rest_break_minutes=(
                    args.rest_break
                    if args.rest_break is not None
                    else settings.default_rest_break_minutes
                ),
            )
            text = _format_itinerary(festival, itinerary)
    except (json.JSONDecodeError, KeyError, TypeError, ValidationError) as exc:
        print(f"Error: Invalid input file: {exc}", file=sys.stderr)
        return 1
    except StagesideError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(itinerary.model_dump_json(indent=2) if args.json_output else text)

    if args.ics:
        Path(args.ics).write_text(itinerary_to_ics(festival, itinerary), encoding="utf-8", newline="")
        print(f"Calendar written to: {args.ics}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
