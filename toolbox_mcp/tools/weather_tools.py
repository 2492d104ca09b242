from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional, Sequence

from ..forecast_client import ForecastClient
from ..formatting import format_number
from ..models import FieldSpec, InputContract, OutputContract, TextResult
from . import ToolRegistry

RULE = "━" * 40

# WMO weather interpretation codes.
WEATHER_CODES: Dict[int, str] = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    56: "Light freezing drizzle",
    57: "Dense freezing drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    66: "Light freezing rain",
    67: "Heavy freezing rain",
    71: "Slight snowfall",
    73: "Moderate snowfall",
    75: "Heavy snowfall",
    77: "Snow grains",
    80: "Slight rain showers",
    81: "Moderate rain showers",
    82: "Violent rain showers",
    85: "Slight snow showers",
    86: "Heavy snow showers",
    95: "Thunderstorm",
    96: "Thunderstorm with slight hail",
    99: "Thunderstorm with heavy hail",
}


def describe_weather(code: Any) -> str:
    if code is None:
        return "unknown"
    try:
        return WEATHER_CODES[int(code)]
    except (KeyError, TypeError, ValueError):
        return f"code: {format_number(code)}"


def short_date(value: str) -> str:
    """'2025-12-15' -> 'Mon, Dec 15'; unparseable values are returned as-is."""
    try:
        day = date.fromisoformat(value)
    except (TypeError, ValueError):
        return str(value)
    return f"{day:%a}, {day:%b} {day.day}"


def _first(values: Optional[Sequence[Any]]) -> Any:
    return values[0] if values else None


def _at(values: Sequence[Any], index: int) -> Any:
    return values[index] if index < len(values) else None


def render_forecast(
    latitude: float,
    longitude: float,
    forecast_days: int,
    data: Dict[str, Any],
) -> str:
    hourly = data.get("hourly") or {}
    current_time = _first(hourly.get("time")) or "now"
    temperature = _first(hourly.get("temperature_2m"))
    humidity = _first(hourly.get("relative_humidity_2m"))
    wind_speed = _first(hourly.get("wind_speed_10m"))
    weather_code = _first(hourly.get("weather_code"))

    lines: List[str] = [
        f"Location: latitude {format_number(latitude)}, longitude {format_number(longitude)}",
        f"Forecast period: {forecast_days} days",
        "",
        f"Current weather ({current_time})",
        RULE,
    ]
    if temperature is not None:
        lines.append(f"Temperature: {format_number(temperature)}°C")
    if humidity is not None:
        lines.append(f"Humidity: {format_number(humidity)}%")
    if wind_speed is not None:
        lines.append(f"Wind speed: {format_number(wind_speed)} km/h")
    if weather_code is not None:
        lines.append(f"Conditions: {describe_weather(weather_code)}")
    lines.append("")

    daily = data.get("daily") or {}
    days = daily.get("time")
    if days:
        lines.append(f"{forecast_days}-day forecast")
        lines.append(RULE)
        max_temps = daily.get("temperature_2m_max") or []
        min_temps = daily.get("temperature_2m_min") or []
        precipitation = daily.get("precipitation_sum") or []
        codes = daily.get("weather_code") or []

        count = min(forecast_days, len(days))
        blocks = []
        for i in range(count):
            blocks.append(
                "\n".join(
                    [
                        short_date(days[i]),
                        f"  High: {format_number(_at(max_temps, i))}°C"
                        f" | Low: {format_number(_at(min_temps, i))}°C",
                        f"  Precipitation: {format_number(_at(precipitation, i))} mm",
                        f"  Conditions: {describe_weather(_at(codes, i))}",
                    ]
                )
            )
        lines.append("\n\n".join(blocks))

    return "\n".join(lines).rstrip("\n")


def register_tools(registry: ToolRegistry, forecaster: ForecastClient) -> None:
    async def _handle_weather(arguments: Dict[str, Any]) -> TextResult:
        latitude = arguments["latitude"]
        longitude = arguments["longitude"]
        forecast_days = arguments["forecast_days"]
        data = await forecaster.forecast(latitude, longitude, forecast_days)
        return TextResult(render_forecast(latitude, longitude, forecast_days, data))

    input_contract = InputContract(
        parameters=(
            FieldSpec(name="latitude", kind="number", description="Latitude (WGS84)"),
            FieldSpec(name="longitude", kind="number", description="Longitude (WGS84)"),
            FieldSpec(
                name="forecast_days",
                kind="integer",
                description="Forecast length in days (default: 7, max: 16)",
                required=False,
                default=7,
                minimum=1,
                maximum=16,
            ),
        )
    )

    registry.add_tool(
        "get-weather",
        "Return current conditions and a daily forecast for a latitude/longitude.",
        _handle_weather,
        error_prefix="Weather lookup failed",
        input_contract=input_contract,
        output_contract=OutputContract(description="Weather information"),
    )
