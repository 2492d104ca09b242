from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .config import Settings
from .errors import UpstreamDomainError, UpstreamHttpError

logger = logging.getLogger(__name__)

HOURLY_VARIABLES = (
    "temperature_2m",
    "relative_humidity_2m",
    "precipitation",
    "weather_code",
    "wind_speed_10m",
)
DAILY_VARIABLES = (
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "weather_code",
)


class ForecastClient:
    """Async wrapper around the Open-Meteo forecast API."""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._url = settings.forecast_url
        self._timeout = settings.upstream_timeout
        self._transport = transport

    async def forecast(self, latitude: float, longitude: float, forecast_days: int) -> Dict[str, Any]:
        params = {
            "latitude": str(latitude),
            "longitude": str(longitude),
            "forecast_days": str(forecast_days),
            "hourly": ",".join(HOURLY_VARIABLES),
            "daily": ",".join(DAILY_VARIABLES),
            "timezone": "auto",
        }
        async with httpx.AsyncClient(transport=self._transport, timeout=self._timeout) as client:
            response = await client.get(self._url, params=params)

        if not response.is_success:
            logger.warning(
                "Forecast upstream returned %s for (%s, %s)",
                response.status_code,
                latitude,
                longitude,
            )
            raise UpstreamHttpError(response.status_code, response.reason_phrase)

        data = response.json()
        # Open-Meteo reports domain errors as {"error": true, "reason": "..."}.
        if data.get("error"):
            raise UpstreamDomainError(data.get("reason") or "Unknown error")
        return data
