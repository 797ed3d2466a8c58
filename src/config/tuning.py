"""Product-tuned scoring and scheduling constants.

# ─── TUNING KNOBS (Junior Developer Guide) ─────────────────────────────
#
# Every number below is a product decision, not an algorithmic invariant.
# None of them is derived from anything: they were picked by hand so that
# the ranked concert feed and the generated festival itineraries "feel
# right".  Change them here, never inline them at the call site.
#
#   - Service weights rank how much we trust each streaming service's
#     listening data (Spotify's top-artist endpoint is the most faithful).
#   - Scoring constants drive the concert match score and the festival
#     match tiers.
#   - Group constants drive the group ranking signal (capped at 150 on
#     purpose: it is a "show this first" signal, not a percentage).
#   - Itinerary constants drive the greedy scheduler defaults.
# ──────────────────────────────────────────────────────────────────────
"""

from __future__ import annotations

# ═════════════════════════════════════════════════════════════════════════
# 1. NAME MATCHING
# ═════════════════════════════════════════════════════════════════════════

# Shorter name must be at least this long for substring containment to count.
FUZZY_SUBSTRING_MIN_LENGTH = 4
# Both names must be longer than this for the edit-distance rule to apply.
FUZZY_EDIT_RATIO_MIN_LENGTH = 5
# Levenshtein distance / longer length must stay strictly below this.
FUZZY_EDIT_RATIO_MAX = 0.2

# ═════════════════════════════════════════════════════════════════════════
# 2. ARTIST AGGREGATION
# ═════════════════════════════════════════════════════════════════════════

SERVICE_WEIGHTS: dict[str, float] = {
    "spotify": 1.0,
    "apple_music": 0.95,
    "tidal": 0.9,
    "deezer": 0.85,
    "youtube_music": 0.7,
}
# Weight used for a service missing from SERVICE_WEIGHTS.
DEFAULT_SERVICE_WEIGHT = 0.5

ARTIST_POSITION_BASE = 100
ARTIST_POSITION_FLOOR = 10
MAX_AGGREGATED_ARTISTS = 200

GENRE_POSITION_BASE = 20
GENRE_POSITION_FLOOR = 1
MAX_AGGREGATED_GENRES = 30

MAX_RECENT_ARTISTS_PER_SERVICE = 20

# ═════════════════════════════════════════════════════════════════════════
# 3. CONCERT MATCH SCORING
# ═════════════════════════════════════════════════════════════════════════

TOP_ARTIST_BASE_SCORE = 100
RANK_BONUS_MAX = 50
RANK_BONUS_STEP = 0.5
MULTI_SOURCE_BONUS = 10
RECENT_ARTIST_SCORE = 70
GENRE_MATCH_BONUS = 15

# ═════════════════════════════════════════════════════════════════════════
# 4. FESTIVAL TIERS
# ═════════════════════════════════════════════════════════════════════════

PERFECT_MATCH_SCORE = 100
GENRE_TIER_BASE = 30
GENRE_TIER_STEP = 15
GENRE_TIER_CAP = 70
DISCOVERY_SCORE = 40

FESTIVAL_BONUS_TIER1_MIN_PERFECT = 5
FESTIVAL_BONUS_TIER1 = 10
FESTIVAL_BONUS_TIER1_CAP = 95
FESTIVAL_BONUS_TIER2_MIN_PERFECT = 10
FESTIVAL_BONUS_TIER2 = 5
FESTIVAL_BONUS_TIER2_CAP = 98
FESTIVAL_MATCH_CEILING = 98

# ═════════════════════════════════════════════════════════════════════════
# 5. GROUP MATCHING
# ═════════════════════════════════════════════════════════════════════════

GROUP_OVERLAP_ARTIST_BONUS = 50
GROUP_OVERLAP_GENRE_BONUS = 20
GROUP_SCORE_CAP = 150
GROUP_MAJORITY_FRACTION = 0.5
# Overlap lists returned with a group match are cut to this length.
GROUP_OVERLAP_DISPLAY_LIMIT = 10

# Member taste built for a group itinerary.
MEMBER_TOP_ARTIST_SCORE = 100
MEMBER_TOP_ARTIST_FLOOR = 50
MEMBER_TOP_RANKED_REASON_LIMIT = 10
MEMBER_GENRE_SCORE = 40
MEMBER_MUST_SEE_THRESHOLD = 80

# ═════════════════════════════════════════════════════════════════════════
# 6. ITINERARY SCHEDULING
# ═════════════════════════════════════════════════════════════════════════

DEFAULT_MAX_PER_DAY = 8
DEFAULT_REST_BREAK_MINUTES = 90
DEFAULT_GROUP_REST_BREAK_MINUTES = 60
DEFAULT_SLOT_MINUTES = 60
# Times before this hour belong to the previous festival day (after-hours sets).
DAY_ROLLOVER_HOUR = 6
RECOMMENDED_MIN_SCORE = 50
SPARSE_DAY_THRESHOLD = 3
FILLER_DAY_CAP = 4
DEFAULT_DAY_NAME = "Day 1"

# Schedule grid: 30-minute rows from 12:00 through 24:30.
GRID_START_HOUR = 12
GRID_END_HOUR = 24
GRID_STEP_MINUTES = 30
DEFAULT_STAGE_NAME = "Main Stage"

# ═════════════════════════════════════════════════════════════════════════
# 7. CONCERT SOURCES AND NOTIFICATIONS
# ═════════════════════════════════════════════════════════════════════════

PLACEHOLDER_IMAGE = "/placeholder-concert.jpg"
SOURCE_PRIORITY: tuple[str, ...] = ("ticketmaster", "seatgeek", "bandsintown")
BANDSINTOWN_BATCH_SIZE = 10
BANDSINTOWN_BATCH_DELAY_SECONDS = 0.1
BANDSINTOWN_MAX_ARTISTS = 30

DIGEST_DAILY_MIN_HOURS = 20
DIGEST_WEEKLY_MIN_HOURS = 160
DIGEST_MAX_CONCERTS = 10
DIGEST_REMEMBERED_IDS = 100
