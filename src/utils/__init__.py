"""Utility modules for Stageside.

- **errors** -- exception hierarchy rooted at StagesideError; the core
  raises only InvalidInputError, the ticketing boundary raises the
  provider errors.
- **concurrency** -- semaphore-throttled gather and batched fan-out for
  the ticketing APIs.
- **logging** -- structlog setup (console in development, JSON in
  production) and request-context binding.
- **text_normalizer** -- the single place artist and genre names are
  normalized and fuzzily compared.
"""

# -- Domain exception hierarchy --------------------------------------------
from src.utils.errors import (
    ConfigurationError,
    InvalidInputError,
    ItineraryError,
    ProviderUnavailableError,
    RateLimitError,
    StagesideError,
    TicketSourceError,
)

# -- Async concurrency helpers ---------------------------------------------
from src.utils.concurrency import batched_gather, throttled_gather

# -- Structured logging setup ----------------------------------------------
from src.utils.logging import configure_logging, get_logger

# -- Name normalization and fuzzy identity ---------------------------------
from src.utils.text_normalizer import (
    fuzzy_equal,
    is_same_artist,
    normalize_artist_name,
    normalize_name,
)

__all__ = [
    "ConfigurationError",
    "InvalidInputError",
    "ItineraryError",
    "ProviderUnavailableError",
    "RateLimitError",
    "StagesideError",
    "TicketSourceError",
    "batched_gather",
    "configure_logging",
    "fuzzy_equal",
    "get_logger",
    "is_same_artist",
    "normalize_artist_name",
    "normalize_name",
    "throttled_gather",
]
