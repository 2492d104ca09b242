from __future__ import annotations

from typing import Any, Dict, List

from ..formatting import format_number
from ..geocoding_client import GeocodingClient
from ..models import FieldSpec, InputContract, OutputContract, TextResult
from . import ToolRegistry


def render_geocode(query: str, matches: List[Dict[str, Any]]) -> str:
    if not matches:
        return f'No results found for "{query}".'

    match = matches[0]
    lat = format_number(float(match["lat"]))
    lon = format_number(float(match["lon"]))
    display_name = match.get("display_name") or query
    return (
        f"Address: {display_name}\n"
        f"Latitude: {lat}\n"
        f"Longitude: {lon}\n"
        f"Coordinates: ({lat}, {lon})"
    )


def register_tools(registry: ToolRegistry, geocoder: GeocodingClient) -> None:
    async def _handle_geocode(arguments: Dict[str, Any]) -> TextResult:
        query = arguments["query"]
        matches = await geocoder.search(query)
        return TextResult(render_geocode(query, matches))

    input_contract = InputContract(
        parameters=(
            FieldSpec(
                name="query",
                kind="string",
                description='City name or address to look up (e.g. "Seoul", "New York")',
            ),
        )
    )

    registry.add_tool(
        "geocode",
        "Look up the latitude and longitude of a city name or address.",
        _handle_geocode,
        error_prefix="Geocoding failed",
        input_contract=input_contract,
        output_contract=OutputContract(description="Latitude and longitude"),
    )
