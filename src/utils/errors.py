"""Custom exception hierarchy for Stageside.

All application exceptions inherit from :class:`StagesideError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "ticketmaster", "seatgeek", "bandsintown") caused
the failure.

The matching and itinerary core never raises for missing data or for a
candidate that simply does not match; those conditions come back as zero
scores and empty collections.  Exceptions are reserved for malformed input
and for the network boundary:

    StagesideError  (base -- catch-all for any stageside error)
    +-- InvalidInputError        (input violates a basic shape expectation)
    +-- ItineraryError           (itinerary cannot be built or edited)
    +-- ConfigurationError       (startup / missing config)
    +-- TicketSourceError        (ticketing API returned an unusable payload)
    +-- RateLimitError           (provider rate-limit exceeded)
    +-- ProviderUnavailableError (external service down / unreachable)
"""


class StagesideError(Exception):
    """Base exception for all Stageside errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  The ``__str__`` method prefixes the provider name in brackets
    for structured log output, e.g. ``[seatgeek] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Core input errors
# ---------------------------------------------------------------------------

class InvalidInputError(StagesideError):
    """Raised when an input record is malformed (e.g. a time that is not HH:MM)."""

    def __init__(
        self,
        message: str = "Invalid input",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ItineraryError(StagesideError):
    """Raised when an itinerary edit refers to something that does not exist."""

    def __init__(
        self,
        message: str = "Itinerary operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# External service / provider errors
# ---------------------------------------------------------------------------

class ProviderUnavailableError(StagesideError):
    """Raised when an external ticketing service is unreachable.

    The aggregation service catches this per source so that the remaining
    sources still contribute their listings.
    """

    def __init__(
        self,
        message: str = "External service is unavailable",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class RateLimitError(StagesideError):
    """Raised when an API rate limit is exceeded."""

    def __init__(
        self,
        message: str = "Rate limit exceeded",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class TicketSourceError(StagesideError):
    """Raised when a ticketing API responds with a payload that cannot be read."""

    def __init__(
        self,
        message: str = "Ticket source returned an invalid response",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Configuration errors
# ---------------------------------------------------------------------------

class ConfigurationError(StagesideError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
