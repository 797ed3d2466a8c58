"""Concert notification digests.

Decides when a user is due a digest and which matched concerts go in it.
Delivery (email, push) happens elsewhere; this module only selects.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Sequence

import structlog

from src.config.tuning import (
    DIGEST_DAILY_MIN_HOURS,
    DIGEST_MAX_CONCERTS,
    DIGEST_REMEMBERED_IDS,
    DIGEST_WEEKLY_MIN_HOURS,
)
from src.models.concert import Concert
from src.models.notification import DigestFrequency, NotificationPreference

logger = structlog.get_logger(logger_name=__name__)

_MIN_HOURS: dict[DigestFrequency, float] = {
    DigestFrequency.INSTANT: 0,
    DigestFrequency.DAILY: DIGEST_DAILY_MIN_HOURS,
    DigestFrequency.WEEKLY: DIGEST_WEEKLY_MIN_HOURS,
}


def is_digest_due(pref: NotificationPreference, now: datetime | None = None) -> bool:
    """True when enough time has passed since the last digest.

    Daily digests wait 20 hours and weekly ones 160, so a job running on
    a fixed schedule never skips a cycle because of drift.  Naive
    datetimes are treated as UTC.
    """
    if not pref.enabled:
        return False
    if pref.frequency == DigestFrequency.INSTANT or pref.last_notified_at is None:
        return True

    now = _as_utc(now or datetime.now(timezone.utc))
    elapsed = now - _as_utc(pref.last_notified_at)
    return elapsed.total_seconds() / 3600 >= _MIN_HOURS[pref.frequency]


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def select_digest_concerts(
    concerts: Iterable[Concert],
    pref: NotificationPreference,
    limit: int = DIGEST_MAX_CONCERTS,
) -> list[Concert]:
    """Pick the matched concerts not yet sent, best match first.

    Concerts must already carry a ``match_score``; unscored ones are
    skipped.
    """
    if not pref.enabled:
        return []

    already_sent = set(pref.last_concert_ids)
    eligible = [
        c
        for c in concerts
        if c.match_score is not None
        and c.match_score >= pref.min_match_score
        and c.id not in already_sent
    ]
    eligible.sort(key=lambda c: -(c.match_score or 0.0))
    selected = eligible[:limit]
    logger.debug("digest_selected", eligible=len(eligible), selected=len(selected))
    return selected


def remember_notified_ids(
    previous: Sequence[str],
    new: Iterable[str],
    keep: int = DIGEST_REMEMBERED_IDS,
) -> list[str]:
    """Append newly sent ids, keeping only the most recent *keep*."""
    combined = list(previous)
    for concert_id in new:
        if concert_id in combined:
            combined.remove(concert_id)
        combined.append(concert_id)
    return combined[-keep:] if keep > 0 else []
