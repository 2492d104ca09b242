from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Iterable, List, Optional, Tuple

import anyio
from mcp import types
from mcp.server import Server
from mcp.server.lowlevel.helper_types import ReadResourceContents
from mcp.server.stdio import stdio_server
from pydantic import AnyUrl

from .config import Settings, get_settings
from .forecast_client import ForecastClient
from .geocoding_client import GeocodingClient
from .inference_client import ImageClient
from .models import ContentItem, ResponseEnvelope
from .tools import CapabilityKind, ToolRegistry
from .tools import (
    calculator_tools,
    clock_tools,
    geocode_tools,
    greeting_tools,
    image_tools,
    review_prompts,
    server_info,
    weather_tools,
)
from .tools.dispatcher import Dispatcher

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    # stdout carries the stdio transport, so logs go to stderr.
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        stream=sys.stderr,
    )


def create_registry(
    settings: Settings,
    geocoder: Optional[GeocodingClient] = None,
    forecaster: Optional[ForecastClient] = None,
    image_client: Optional[ImageClient] = None,
) -> ToolRegistry:
    """
    Build and seal the registry with every tool, resource and prompt.

    Upstream clients default to ones built from `settings`; pass your own to
    redirect or stub network traffic.
    """
    registry = ToolRegistry()

    greeting_tools.register_tools(registry)
    calculator_tools.register_tools(registry)
    clock_tools.register_tools(registry)
    geocode_tools.register_tools(registry, geocoder=geocoder or GeocodingClient(settings))
    weather_tools.register_tools(registry, forecaster=forecaster or ForecastClient(settings))
    image_tools.register_tools(
        registry,
        image_client=image_client or ImageClient.from_settings(settings),
    )
    server_info.register_tools(registry, settings)
    review_prompts.register_tools(registry)

    registry.seal()
    logger.debug("Registered %d capabilities", len(registry))
    return registry


def to_mcp_content(envelope: ResponseEnvelope) -> List[types.TextContent | types.ImageContent]:
    return [_to_mcp_item(item) for item in envelope.content]


def _to_mcp_item(item: ContentItem) -> types.TextContent | types.ImageContent:
    if item["type"] == "image":
        return types.ImageContent(type="image", data=item["data"], mimeType=item["mimeType"])
    return types.TextContent(type="text", text=item["text"])


def create_server_with_dispatcher(
    settings: Optional[Settings] = None,
    registry: Optional[ToolRegistry] = None,
) -> Tuple[Server, Dispatcher]:
    """
    Create the MCP server and the dispatcher it routes through.
    """
    settings = settings or get_settings()
    registry = registry or create_registry(settings)
    dispatcher = Dispatcher(registry)

    server = Server(settings.server_name, version=settings.server_version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return registry.list_tools()

    # Input validation is the dispatcher's job, not the SDK's.
    @server.call_tool(validate_input=False)
    async def call_tool(
        name: str,
        arguments: Dict[str, Any],
    ) -> Tuple[List[types.TextContent | types.ImageContent], Dict[str, Any]]:
        # Errors raised here become isError results with the message as text.
        envelope = await dispatcher.call_tool(name, arguments)
        return to_mcp_content(envelope), envelope.structured_content

    @server.list_resources()
    async def list_resources() -> List[types.Resource]:
        return registry.list_resources()

    @server.read_resource()
    async def read_resource(uri: AnyUrl) -> Iterable[ReadResourceContents]:
        descriptor = registry.lookup(CapabilityKind.RESOURCE, _normalize_uri(uri))
        envelope = await dispatcher.read_resource(descriptor.key)
        return [
            ReadResourceContents(content=item["text"], mime_type=descriptor.mime_type)
            for item in envelope.content
            if item["type"] == "text"
        ]

    @server.list_prompts()
    async def list_prompts() -> List[types.Prompt]:
        return registry.list_prompts()

    @server.get_prompt()
    async def get_prompt(name: str, arguments: Optional[Dict[str, str]]) -> types.GetPromptResult:
        descriptor = registry.lookup(CapabilityKind.PROMPT, name)
        envelope = await dispatcher.get_prompt(name, arguments or {})
        return types.GetPromptResult(
            description=descriptor.description,
            messages=[
                types.PromptMessage(role="user", content=content)
                for content in to_mcp_content(envelope)
            ],
        )

    return server, dispatcher


def create_server(settings: Optional[Settings] = None) -> Server:
    """
    Create and configure the MCP server with all registered capabilities.
    """
    server, _ = create_server_with_dispatcher(settings)
    return server


def _normalize_uri(uri: Any) -> str:
    text = str(uri)
    return text[:-1] if text.endswith("/") else text


async def run_stdio_server(server: Server) -> None:
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


def main() -> None:
    """
    Entrypoint for running the MCP server.

    Supports two transport modes:
    - stdio: For direct process-to-process communication (default)
    - http: For HTTP/SSE transport behind reverse proxy
    """
    settings = get_settings()
    configure_logging(settings)

    if settings.transport == "http":
        from .http_server import run_http_server

        logger.info("Starting %s over HTTP on %s:%s", settings.server_name, settings.server_host, settings.server_port)
        anyio.run(run_http_server, settings.server_host, settings.server_port)
    else:
        logger.info("Starting %s over stdio", settings.server_name)
        server = create_server(settings)
        anyio.run(run_stdio_server, server)


if __name__ == "__main__":
    main()
