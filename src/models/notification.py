"""Concert notification digest preferences."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class DigestFrequency(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    INSTANT = "instant"
    DAILY = "daily"
    WEEKLY = "weekly"


class NotificationPreference(BaseModel):
    """A user's digest settings plus what was last sent to them."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    frequency: DigestFrequency = DigestFrequency.WEEKLY
    min_match_score: float = 0.0
    last_notified_at: datetime | None = None
    # Ids already sent, oldest first.
    last_concert_ids: list[str] = Field(default_factory=list)
