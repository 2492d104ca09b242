"""
Read-only introspection resource.

The tool listing is derived from the registry's descriptors at request time,
so it cannot drift from what the dispatcher actually accepts.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Callable, Dict

from ..config import Settings
from ..models import TextResult
from . import CapabilityDescriptor, CapabilityKind, ToolRegistry

SERVER_INFO_URI = "mcp://server-info"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def build_server_info(
    registry: ToolRegistry,
    name: str,
    version: str,
    now: Callable[[], datetime] = _utcnow,
) -> Dict[str, Any]:
    tools = [
        {
            "name": d.name,
            "description": d.description,
            "parameters": d.input_contract.describe(),
        }
        for d in registry.list(CapabilityKind.TOOL)
    ]
    return {
        "name": name,
        "version": version,
        "timestamp": now().isoformat(),
        "tools": tools,
        "totalTools": len(tools),
    }


def register_tools(
    registry: ToolRegistry,
    settings: Settings,
    now: Callable[[], datetime] = _utcnow,
) -> None:
    async def _handle_server_info(arguments: Dict[str, Any]) -> TextResult:
        info = build_server_info(registry, settings.server_name, settings.server_version, now)
        return TextResult(json.dumps(info, indent=2, ensure_ascii=False))

    registry.register(
        CapabilityDescriptor(
            kind=CapabilityKind.RESOURCE,
            name="server-info",
            title="Server info",
            description="Current server information and the list of available tools",
            uri=SERVER_INFO_URI,
            mime_type="application/json",
            handler=_handle_server_info,
            error_prefix="Server info failed",
        )
    )
