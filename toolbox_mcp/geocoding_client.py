from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

from .config import Settings
from .errors import UpstreamDomainError, UpstreamHttpError

logger = logging.getLogger(__name__)

# Nominatim's usage policy requires an identifying User-Agent.
USER_AGENT = "MCP-Geocode-Tool/1.0"


class GeocodingClient:
    """
    Thin async wrapper around the Nominatim search API.

    One `httpx.AsyncClient` is opened per request, so concurrent calls share
    no connection state. Pass `transport` to route requests elsewhere (tests
    use `httpx.MockTransport`).
    """

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = settings.geocode_url
        self._timeout = settings.upstream_timeout
        self._transport = transport

    async def search(self, query: str) -> List[Dict[str, Any]]:
        """Return at most one match for `query`, or an empty list."""
        params = {
            "q": query,
            "format": "json",
            "limit": "1",
            "addressdetails": "1",
        }
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._timeout,
            headers={"User-Agent": USER_AGENT},
        ) as client:
            response = await client.get(self._url, params=params)

        if not response.is_success:
            logger.warning("Geocoding upstream returned %s for %r", response.status_code, query)
            raise UpstreamHttpError(response.status_code, response.reason_phrase)

        data = response.json()
        if not isinstance(data, list):
            logger.warning("Geocoding upstream returned a non-list body for %r", query)
            raise UpstreamDomainError("Unexpected response from geocoding service.")
        return data
