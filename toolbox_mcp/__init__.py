"""
MCP toolbox server package.

This package exposes MCP capabilities for:
- Greetings, arithmetic and timezone clocks
- Geocoding (Nominatim) and weather forecasts (Open-Meteo)
- Text-to-image generation (Hugging Face inference)
- Server introspection (resource) and code review prompts

Every call goes through one registry and one dispatcher, which validate
arguments against declared contracts and return a uniform envelope.
"""

__version__ = "1.0.0"
