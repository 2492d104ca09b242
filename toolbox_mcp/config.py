from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the toolbox MCP server.

    All values are loaded from environment variables with `TOOLBOX_` prefix.
    You can also use a `.env` file in the working directory during development.
    Nothing here is required: a missing `hf_token` only disables image generation.
    """

    model_config = SettingsConfigDict(
        env_prefix="TOOLBOX_",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    # General
    server_name: str = "mcp-toolbox"
    server_version: str = "1.0.0"
    server_port: int = 8000
    server_host: str = "0.0.0.0"
    transport: str = "stdio"  # "stdio" or "http"
    log_level: str = "INFO"

    # Upstream services
    geocode_url: str = "https://nominatim.openstreetmap.org/search"
    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    # None keeps upstream calls unbounded.
    upstream_timeout: Optional[float] = None

    # Hugging Face inference
    hf_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("TOOLBOX_HF_TOKEN", "HF_TOKEN", "hf_token"),
    )
    image_model: str = "black-forest-labs/FLUX.1-schnell"
    image_steps: int = 5


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from environment."""
    return Settings()
