from __future__ import annotations

import json
import logging
from typing import Any, AsyncIterator, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .config import Settings, get_settings
from .errors import NotFoundError, ToolCallError, ValidationError
from .main import create_server_with_dispatcher
from .tools import CapabilityKind
from .tools.dispatcher import Dispatcher

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2025-06-18"


def _rpc_result(message_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message_id, "result": result}


def _rpc_error(message_id: Any, code: int, message: str) -> Dict[str, Any]:
    return {"jsonrpc": "2.0", "id": message_id, "error": {"code": code, "message": message}}


def create_http_app(
    settings: Optional[Settings] = None,
    dispatcher: Optional[Dispatcher] = None,
) -> FastAPI:
    """
    Create FastAPI app that exposes the toolbox over HTTP/SSE.

    - Client sends POST requests with JSON-RPC messages in body
    - Server responds with SSE stream containing JSON-RPC responses
    - Each SSE event format: "data: <json-rpc-response>\\n\\n"
    """
    settings = settings or get_settings()
    if dispatcher is None:
        _, dispatcher = create_server_with_dispatcher(settings)

    app = FastAPI(
        title=settings.server_name,
        version=settings.server_version,
        description="MCP toolbox server",
    )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok", "service": settings.server_name}

    @app.get("/")
    async def root():
        """Root endpoint with service info."""
        return {
            "service": settings.server_name,
            "version": settings.server_version,
            "protocol": "mcp",
            "transport": "http/sse",
            "endpoints": {
                "health": "/health",
                "mcp_stream": "/mcp/stream",
            },
        }

    @app.post("/mcp/stream")
    async def mcp_stream(request: Request):
        """
        MCP SSE stream endpoint.

        Supported MCP methods: initialize, tools/list, tools/call,
        resources/list, resources/read, prompts/list, prompts/get.
        """
        body = await request.body()
        if not body:
            return JSONResponse(_rpc_error(None, -32600, "Invalid Request: empty body"), status_code=400)

        try:
            message = json.loads(body)
        except json.JSONDecodeError as e:
            return JSONResponse(_rpc_error(None, -32700, f"Parse error: {e}"), status_code=400)

        if not isinstance(message, dict) or message.get("jsonrpc") != "2.0":
            message_id = message.get("id") if isinstance(message, dict) else None
            return JSONResponse(
                _rpc_error(message_id, -32600, "Invalid Request: jsonrpc must be '2.0'"),
                status_code=400,
            )

        method = message.get("method")
        message_id = message.get("id")
        params = message.get("params") or {}
        if not method:
            return JSONResponse(
                _rpc_error(message_id, -32600, "Invalid Request: method is required"),
                status_code=400,
            )

        async def generate_sse() -> AsyncIterator[str]:
            """Generate SSE events from dispatcher responses."""
            response = await handle_mcp_request(settings, dispatcher, method, params, message_id)
            yield f"data: {json.dumps(response, ensure_ascii=False)}\n\n"

        return StreamingResponse(
            generate_sse(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering
            },
        )

    return app


async def handle_mcp_request(
    settings: Settings,
    dispatcher: Dispatcher,
    method: str,
    params: Dict[str, Any],
    message_id: Any,
) -> Dict[str, Any]:
    """
    Handle one MCP JSON-RPC request by routing it through the dispatcher.

    Capability failures come back as successful responses with `isError`
    set, mirroring the stdio server. Only unknown methods and unregistered
    capabilities produce JSON-RPC errors.
    """
    registry = dispatcher.registry
    try:
        if method == "initialize":
            return _rpc_result(
                message_id,
                {
                    "protocolVersion": PROTOCOL_VERSION,
                    "capabilities": {
                        "tools": {"listChanged": False},
                        "resources": {"listChanged": False},
                        "prompts": {"listChanged": False},
                    },
                    "serverInfo": {
                        "name": settings.server_name,
                        "version": settings.server_version,
                    },
                },
            )

        elif method == "tools/list":
            tools = registry.list_tools()
            return _rpc_result(
                message_id,
                {"tools": [t.model_dump(mode="json", exclude_none=True) for t in tools]},
            )

        elif method == "tools/call":
            tool_name = params.get("name")
            if not tool_name:
                return _rpc_error(message_id, -32602, "Invalid params: 'name' is required")
            try:
                envelope = await dispatcher.call_tool(tool_name, params.get("arguments") or {})
            except (ToolCallError, ValidationError) as e:
                return _rpc_result(
                    message_id,
                    {"content": [{"type": "text", "text": str(e)}], "isError": True},
                )
            return _rpc_result(message_id, {**envelope.to_wire(), "isError": False})

        elif method == "resources/list":
            resources = registry.list_resources()
            return _rpc_result(
                message_id,
                {"resources": [r.model_dump(mode="json", exclude_none=True) for r in resources]},
            )

        elif method == "resources/read":
            uri = params.get("uri")
            if not uri:
                return _rpc_error(message_id, -32602, "Invalid params: 'uri' is required")
            descriptor = registry.lookup(CapabilityKind.RESOURCE, uri)
            envelope = await dispatcher.read_resource(uri)
            return _rpc_result(
                message_id,
                {
                    "contents": [
                        {"uri": uri, "mimeType": descriptor.mime_type, "text": item["text"]}
                        for item in envelope.content
                        if item["type"] == "text"
                    ]
                },
            )

        elif method == "prompts/list":
            prompts = registry.list_prompts()
            return _rpc_result(
                message_id,
                {"prompts": [p.model_dump(mode="json", exclude_none=True) for p in prompts]},
            )

        elif method == "prompts/get":
            name = params.get("name")
            if not name:
                return _rpc_error(message_id, -32602, "Invalid params: 'name' is required")
            descriptor = registry.lookup(CapabilityKind.PROMPT, name)
            try:
                envelope = await dispatcher.get_prompt(name, params.get("arguments") or {})
            except ValidationError as e:
                return _rpc_error(message_id, -32602, str(e))
            return _rpc_result(
                message_id,
                {
                    "description": descriptor.description,
                    "messages": [{"role": "user", "content": item} for item in envelope.content],
                },
            )

        else:
            return _rpc_error(message_id, -32601, f"Method not found: {method}")

    except NotFoundError as e:
        return _rpc_error(message_id, -32601, str(e))
    except Exception as e:
        logger.exception("Error handling MCP method %s", method)
        return _rpc_error(message_id, -32603, f"Internal error: {e}")


async def run_http_server(host: str = "0.0.0.0", port: int = 8000) -> None:
    """Run the HTTP server using uvicorn."""
    import uvicorn

    app = create_http_app()
    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level="info",
        access_log=True,
    )
    server = uvicorn.Server(config)
    await server.serve()
