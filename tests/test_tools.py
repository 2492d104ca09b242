"""Tests for the six capability handlers."""

import base64
import re
from datetime import datetime, timezone

import pytest

from conftest import FORECAST, FakeInferenceClient, forbid_network, json_transport
from toolbox_mcp.errors import (
    InvalidTimezoneError,
    MissingCredentialError,
    ToolCallError,
    UpstreamDomainError,
    UpstreamHttpError,
    UpstreamInferenceError,
)
from toolbox_mcp.forecast_client import ForecastClient
from toolbox_mcp.geocoding_client import USER_AGENT, GeocodingClient
from toolbox_mcp.inference_client import ImageClient
from toolbox_mcp.tools.calculator_tools import calculate
from toolbox_mcp.tools.clock_tools import current_time
from toolbox_mcp.tools.geocode_tools import render_geocode
from toolbox_mcp.tools.weather_tools import describe_weather, render_forecast, short_date

pytestmark = pytest.mark.anyio


class TestGreeting:
    async def test_korean(self, dispatcher):
        envelope = await dispatcher.call_tool("greet", {"name": "민수", "language": "ko"})
        assert envelope.text == "안녕하세요, 민수님!"

    async def test_english_is_default(self, dispatcher):
        envelope = await dispatcher.call_tool("greet", {"name": "Alex"})
        assert envelope.text == "Hey there, Alex! 👋 Nice to meet you!"

    async def test_unsupported_language_rejected(self, dispatcher):
        with pytest.raises(Exception) as exc_info:
            await dispatcher.call_tool("greet", {"name": "Alex", "language": "fr"})
        assert "language" in str(exc_info.value)


class TestCalculator:
    @pytest.mark.parametrize(
        "n1,op,n2,expected",
        [
            (1, "+", 2, "1 + 2 = 3"),
            (10, "-", 4.5, "10 - 4.5 = 5.5"),
            (2, "*", 3, "2 * 3 = 6"),
            (5, "/", 2, "5 / 2 = 2.5"),
            (-7, "/", 7, "-7 / 7 = -1"),
            (0.1, "+", 0.2, "0.1 + 0.2 = 0.30000000000000004"),
        ],
    )
    async def test_arithmetic(self, dispatcher, n1, op, n2, expected):
        envelope = await dispatcher.call_tool(
            "calculator", {"number1": n1, "number2": n2, "operator": op}
        )
        assert envelope.text == expected

    @pytest.mark.parametrize("n1", [0, 1, -3.5, 1e9])
    async def test_division_by_zero_always_fails(self, dispatcher, n1):
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("calculator", {"number1": n1, "number2": 0, "operator": "/"})
        assert str(exc_info.value).startswith("Calculation failed: ")

    def test_zero_divisor_allowed_for_other_operators(self):
        assert calculate(3.0, 0.0, "*") == "3 * 0 = 0"


class TestClock:
    async def test_utc_format(self, dispatcher):
        envelope = await dispatcher.call_tool("time", {"timezone": "UTC"})
        assert envelope.text.startswith("Current time in UTC: ")
        assert re.search(r"\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}$", envelope.text)

    def test_fixed_instant_in_seoul(self):
        now = datetime(2025, 1, 1, 0, 0, 0, tzinfo=timezone.utc)
        assert current_time("Asia/Seoul", now=now) == "Current time in Asia/Seoul: 2025-01-01 09:00:00"

    @pytest.mark.parametrize("zone", ["Not/AZone", "", "../etc/passwd"])
    def test_invalid_timezone(self, zone):
        with pytest.raises(InvalidTimezoneError):
            current_time(zone)

    async def test_invalid_timezone_through_dispatcher(self, dispatcher):
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("time", {"timezone": "Not/AZone"})
        assert str(exc_info.value) == "Time lookup failed: Invalid timezone: Not/AZone"
        assert isinstance(exc_info.value.__cause__, InvalidTimezoneError)


class TestGeocode:
    async def test_hit(self, dispatcher, geocode_requests):
        envelope = await dispatcher.call_tool("geocode", {"query": "Seoul"})
        assert "37.5" in envelope.text
        assert "127" in envelope.text
        assert "Seoul" in envelope.text
        assert "Coordinates: (37.5, 127)" in envelope.text

        request = geocode_requests[0]
        assert request.method == "GET"
        assert request.headers["User-Agent"] == USER_AGENT
        assert dict(request.url.params) == {
            "q": "Seoul",
            "format": "json",
            "limit": "1",
            "addressdetails": "1",
        }

    async def test_no_results_is_not_a_failure(self, settings, make_dispatcher):
        dispatcher = make_dispatcher(geocoder=GeocodingClient(settings, transport=json_transport([])))
        envelope = await dispatcher.call_tool("geocode", {"query": "Atlantis"})
        assert '"Atlantis"' in envelope.text
        assert envelope.text.startswith("No results found")

    async def test_http_error(self, settings, make_dispatcher):
        dispatcher = make_dispatcher(
            geocoder=GeocodingClient(settings, transport=json_transport({}, status=503))
        )
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("geocode", {"query": "Seoul"})
        assert str(exc_info.value) == "Geocoding failed: API request failed: 503 Service Unavailable"
        assert exc_info.value.__cause__.status == 503

    async def test_object_body_is_domain_error(self, settings, make_dispatcher):
        dispatcher = make_dispatcher(
            geocoder=GeocodingClient(settings, transport=json_transport({"error": "bad"}))
        )
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("geocode", {"query": "Seoul"})
        assert str(exc_info.value) == (
            "Geocoding failed: Unexpected response from geocoding service."
        )
        assert isinstance(exc_info.value.__cause__, UpstreamDomainError)

    def test_display_name_falls_back_to_query(self):
        text = render_geocode("Somewhere", [{"lat": "1.25", "lon": "-2"}])
        assert text.startswith("Address: Somewhere")
        assert "(1.25, -2)" in text


class TestWeather:
    async def test_day_blocks_capped_by_forecast_days(self, dispatcher, forecast_requests):
        envelope = await dispatcher.call_tool(
            "get-weather", {"latitude": 37.5, "longitude": 127.0, "forecast_days": 3}
        )
        assert envelope.text.count("  High:") == 3
        assert "Mon, Dec 15" in envelope.text
        assert "Wed, Dec 17" in envelope.text
        assert "Thu, Dec 18" not in envelope.text

        params = forecast_requests[0].url.params
        assert params["forecast_days"] == "3"
        assert params["timezone"] == "auto"
        assert params["hourly"] == (
            "temperature_2m,relative_humidity_2m,precipitation,weather_code,wind_speed_10m"
        )
        assert params["daily"] == (
            "temperature_2m_max,temperature_2m_min,precipitation_sum,weather_code"
        )

    async def test_default_horizon_is_seven_days(self, dispatcher, forecast_requests):
        envelope = await dispatcher.call_tool("get-weather", {"latitude": 0, "longitude": 0})
        assert envelope.text.count("  High:") == 7
        assert forecast_requests[0].url.params["forecast_days"] == "7"

    def test_never_more_blocks_than_available_days(self):
        data = {"daily": {"time": ["2025-12-15", "2025-12-16"]}}
        text = render_forecast(0.0, 0.0, 16, data)
        assert text.count("  High:") == 2
        assert "High: n/a°C | Low: n/a°C" in text

    def test_current_conditions(self):
        text = render_forecast(37.5, 127.0, 1, FORECAST)
        assert "Current weather (2025-12-15T00:00)" in text
        assert "Temperature: 1.5°C" in text
        assert "Humidity: 60%" in text
        assert "Wind speed: 12.3 km/h" in text
        assert "Conditions: Overcast" in text

    def test_missing_hourly_values_are_omitted(self):
        text = render_forecast(0.0, 0.0, 1, {"hourly": {"time": ["t0"]}})
        assert "Temperature:" not in text
        assert "Humidity:" not in text

    def test_unlisted_code(self):
        assert describe_weather(42) == "code: 42"
        assert describe_weather(95) == "Thunderstorm"

    def test_short_date(self):
        assert short_date("2025-12-15") == "Mon, Dec 15"
        assert short_date("garbage") == "garbage"

    async def test_upstream_domain_error(self, settings, make_dispatcher):
        payload = {"error": True, "reason": "Latitude must be in range of -90 to 90°."}
        dispatcher = make_dispatcher(
            forecaster=ForecastClient(settings, transport=json_transport(payload))
        )
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("get-weather", {"latitude": 0, "longitude": 0})
        assert str(exc_info.value) == (
            "Weather lookup failed: Latitude must be in range of -90 to 90°."
        )
        assert isinstance(exc_info.value.__cause__, UpstreamDomainError)

    async def test_upstream_http_error(self, settings, make_dispatcher):
        dispatcher = make_dispatcher(
            forecaster=ForecastClient(settings, transport=json_transport({}, status=500))
        )
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("get-weather", {"latitude": 0, "longitude": 0})
        assert isinstance(exc_info.value.__cause__, UpstreamHttpError)
        assert "500" in str(exc_info.value)


class TestImageGeneration:
    async def test_missing_credential_fails_without_network(self, make_dispatcher):
        dispatcher = make_dispatcher(
            image_client=ImageClient(token=None, client_factory=forbid_network)
        )
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("generate-image", {"prompt": "a cat"})
        assert str(exc_info.value).startswith("Image generation failed: ")
        assert isinstance(exc_info.value.__cause__, MissingCredentialError)

    async def test_success_encodes_png(self, dispatcher, fake_inference):
        envelope = await dispatcher.call_tool("generate-image", {"prompt": "a cat"})
        item = envelope.content[0]
        assert base64.b64decode(item["data"]) == fake_inference.image
        assert item["mimeType"] == "image/png"
        assert fake_inference.calls == [
            {
                "prompt": "a cat",
                "model": "black-forest-labs/FLUX.1-schnell",
                "num_inference_steps": 5,
            }
        ]

    async def test_pil_like_image_is_saved_as_png(self):
        class FakeImage:
            def save(self, buffer, format):
                assert format == "PNG"
                buffer.write(b"png-bytes")

        client = ImageClient(
            token="t",
            client_factory=lambda token: FakeInferenceClient(token, image=FakeImage()),
        )
        data = await client.generate_png("a cat")
        assert base64.b64decode(data) == b"png-bytes"

    async def test_provider_failure_wrapped(self, make_dispatcher):
        failing = FakeInferenceClient("t", error=RuntimeError("Model is overloaded"))
        dispatcher = make_dispatcher(
            image_client=ImageClient(token="t", client_factory=lambda token: failing)
        )
        with pytest.raises(ToolCallError) as exc_info:
            await dispatcher.call_tool("generate-image", {"prompt": "a cat"})
        assert str(exc_info.value) == "Image generation failed: Model is overloaded"
        assert isinstance(exc_info.value.__cause__, UpstreamInferenceError)
