"""Shared pytest fixtures for toolbox tests."""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from toolbox_mcp.config import Settings
from toolbox_mcp.forecast_client import ForecastClient
from toolbox_mcp.geocoding_client import GeocodingClient
from toolbox_mcp.inference_client import ImageClient
from toolbox_mcp.main import create_registry
from toolbox_mcp.tools import ToolRegistry
from toolbox_mcp.tools.dispatcher import Dispatcher


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


def json_transport(
    payload: Any,
    status: int = 200,
    seen: Optional[List[httpx.Request]] = None,
) -> httpx.MockTransport:
    """Transport that answers every request with `payload` and records requests."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, json=payload)

    return httpx.MockTransport(handler)


class FakeInferenceClient:
    """Stands in for huggingface_hub.InferenceClient."""

    def __init__(self, token: str, image: Any = b"\x89PNG fake image", error: Exception | None = None):
        self.token = token
        self.image = image
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def text_to_image(self, prompt: str, *, model: str, num_inference_steps: int) -> Any:
        self.calls.append({"prompt": prompt, "model": model, "num_inference_steps": num_inference_steps})
        if self.error is not None:
            raise self.error
        return self.image


def forbid_network(token: str) -> Any:
    raise AssertionError("inference client must not be created")


SEOUL = [{"lat": "37.5", "lon": "127.0", "display_name": "Seoul"}]

FORECAST: Dict[str, Any] = {
    "hourly": {
        "time": ["2025-12-15T00:00"],
        "temperature_2m": [1.5],
        "relative_humidity_2m": [60],
        "wind_speed_10m": [12.3],
        "weather_code": [3],
    },
    "daily": {
        "time": [f"2025-12-{day}" for day in range(15, 25)],
        "temperature_2m_max": [5.0 + i for i in range(10)],
        "temperature_2m_min": [-2.0 + i for i in range(10)],
        "precipitation_sum": [0.0] * 10,
        "weather_code": [0, 1, 2, 3, 45, 61, 71, 80, 95, 42],
    },
}


@pytest.fixture
def settings() -> Settings:
    return Settings(_env_file=None, hf_token=None)


@pytest.fixture
def geocode_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def forecast_requests() -> List[httpx.Request]:
    return []


@pytest.fixture
def geocoder(settings: Settings, geocode_requests: List[httpx.Request]) -> GeocodingClient:
    return GeocodingClient(settings, transport=json_transport(SEOUL, seen=geocode_requests))


@pytest.fixture
def forecaster(settings: Settings, forecast_requests: List[httpx.Request]) -> ForecastClient:
    return ForecastClient(settings, transport=json_transport(FORECAST, seen=forecast_requests))


@pytest.fixture
def fake_inference() -> FakeInferenceClient:
    return FakeInferenceClient("hf_test")


@pytest.fixture
def image_client(fake_inference: FakeInferenceClient) -> ImageClient:
    return ImageClient(token="hf_test", client_factory=lambda token: fake_inference)


@pytest.fixture
def registry(
    settings: Settings,
    geocoder: GeocodingClient,
    forecaster: ForecastClient,
    image_client: ImageClient,
) -> ToolRegistry:
    return create_registry(
        settings,
        geocoder=geocoder,
        forecaster=forecaster,
        image_client=image_client,
    )


@pytest.fixture
def dispatcher(registry: ToolRegistry) -> Dispatcher:
    return Dispatcher(registry)


@pytest.fixture
def make_dispatcher(settings: Settings) -> Callable[..., Dispatcher]:
    """Build a dispatcher with specific upstream clients."""

    def _make(**clients: Any) -> Dispatcher:
        clients.setdefault("geocoder", GeocodingClient(settings, transport=json_transport(SEOUL)))
        clients.setdefault("forecaster", ForecastClient(settings, transport=json_transport(FORECAST)))
        clients.setdefault("image_client", ImageClient(token=None, client_factory=forbid_network))
        return Dispatcher(create_registry(settings, **clients))

    return _make
