"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK (Junior Developer Guide) ───────────────────────
#
# This class uses pydantic-settings to automatically read configuration
# from TWO sources (in priority order):
#
#   1. **Environment variables** - e.g., TICKETMASTER_API_KEY=abc123
#      (highest priority - always wins)
#   2. **.env file** - key=value lines in the project root .env file
#      (lower priority - used for local development)
#
# The mapping is automatic: field name `seatgeek_client_id` maps to env var
# `SEATGEEK_CLIENT_ID` (pydantic-settings uppercases and matches).
#
# SECURITY: The .env file is in .gitignore - never committed to the repo.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict

from src.config.tuning import (
    DEFAULT_GROUP_REST_BREAK_MINUTES,
    DEFAULT_MAX_PER_DAY,
    DEFAULT_REST_BREAK_MINUTES,
)


class Settings(BaseSettings):
    """Stageside application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # === Ticketing Sources ===
    # Empty string = "not configured" → the source is left out of searches.
    ticketmaster_api_key: str = ""
    seatgeek_client_id: str = ""
    seatgeek_client_secret: str = ""
    bandsintown_app_id: str = "stageside"

    # Seconds a source's search result stays in the in-memory cache.
    source_cache_ttl: int = 3600
    source_timeout_seconds: float = 15.0

    # === Itinerary Defaults ===
    default_max_per_day: int = DEFAULT_MAX_PER_DAY
    default_rest_break_minutes: int = DEFAULT_REST_BREAK_MINUTES
    group_rest_break_minutes: int = DEFAULT_GROUP_REST_BREAK_MINUTES

    # === App Config ===
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_enabled_sources(self) -> list[str]:
        """Return the ticketing sources that can be queried, in merge priority order."""
        sources: list[str] = []
        if self.ticketmaster_api_key:
            sources.append("ticketmaster")
        if self.seatgeek_client_id:
            sources.append("seatgeek")
        if self.bandsintown_app_id:
            sources.append("bandsintown")
        return sources
