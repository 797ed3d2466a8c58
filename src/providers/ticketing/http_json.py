"""JSON GET helper shared by the ticketing-source adapters.

Maps httpx failures onto the Stageside error hierarchy so the aggregation
service can log and skip a failing source:

* timeouts, connection errors, 5xx -> ``ProviderUnavailableError``
* HTTP 429                         -> ``RateLimitError``
* other HTTP errors, bad JSON      -> ``TicketSourceError``

A 404 can optionally be treated as "nothing found" (Bandsintown answers
404 for unknown artists).
"""

from __future__ import annotations

from typing import Any

import httpx

from src.utils.errors import ProviderUnavailableError, RateLimitError, TicketSourceError


async def get_json(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, Any] | None,
    provider_name: str,
    not_found_ok: bool = False,
) -> Any:
    """GET *url* and return the decoded JSON body.

    Returns ``None`` for a 404 when *not_found_ok* is set.
    """
    try:
        response = await client.get(url, params=params)
        if not_found_ok and response.status_code == 404:
            return None
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise ProviderUnavailableError(
            message=f"Timeout calling {url}: {exc}",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status == 429:
            raise RateLimitError(
                message=f"Rate limited by {url}",
                provider_name=provider_name,
            ) from exc
        if status >= 500:
            raise ProviderUnavailableError(
                message=f"HTTP {status} from {url}",
                provider_name=provider_name,
            ) from exc
        raise TicketSourceError(
            message=f"HTTP {status} from {url}",
            provider_name=provider_name,
        ) from exc
    except httpx.HTTPError as exc:
        raise ProviderUnavailableError(
            message=f"HTTP error calling {url}: {exc}",
            provider_name=provider_name,
        ) from exc

    try:
        return response.json()
    except ValueError as exc:
        raise TicketSourceError(
            message=f"Invalid JSON from {url}",
            provider_name=provider_name,
        ) from exc
