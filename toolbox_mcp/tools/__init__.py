"""
Capability registration utilities.

Each module in this package exposes a `register_tools(registry, ...)` function
that adds its capabilities to the central registry used by the MCP server.
Dependencies such as upstream clients are passed in at registration time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Iterator, List, Optional

from mcp import types

from ..errors import DuplicateNameError, NotFoundError
from ..models import DomainResult, InputContract, OutputContract

CapabilityHandler = Callable[[Dict[str, Any]], Awaitable[DomainResult]]


class CapabilityKind(str, Enum):
    TOOL = "tool"
    RESOURCE = "resource"
    PROMPT = "prompt"


@dataclass(frozen=True)
class CapabilityDescriptor:
    kind: CapabilityKind
    name: str
    description: str
    handler: CapabilityHandler
    error_prefix: str
    input_contract: InputContract = field(default_factory=InputContract)
    output_contract: OutputContract = field(default_factory=OutputContract)
    title: Optional[str] = None
    uri: Optional[str] = None
    mime_type: Optional[str] = None

    @property
    def key(self) -> str:
        """Lookup key: resources are addressed by URI, everything else by name."""
        if self.kind is CapabilityKind.RESOURCE and self.uri:
            return self.uri
        return self.name


class ToolRegistry:
    """
    In-memory registry of tools, resources and prompts.

    Populated once at startup, then sealed. Each kind has its own namespace
    and keeps registration order.
    """

    def __init__(self) -> None:
        self._capabilities: Dict[CapabilityKind, Dict[str, CapabilityDescriptor]] = {
            kind: {} for kind in CapabilityKind
        }
        self._sealed = False

    def register(self, descriptor: CapabilityDescriptor) -> None:
        if self._sealed:
            raise RuntimeError(
                f"Registry is sealed; cannot register {descriptor.kind.value} '{descriptor.key}'"
            )
        partition = self._capabilities[descriptor.kind]
        if descriptor.key in partition:
            raise DuplicateNameError(
                f"{descriptor.kind.value.capitalize()} '{descriptor.key}' already registered"
            )
        partition[descriptor.key] = descriptor

    def add_tool(
        self,
        name: str,
        description: str,
        handler: CapabilityHandler,
        *,
        error_prefix: str,
        input_contract: InputContract,
        output_contract: OutputContract,
    ) -> None:
        self.register(
            CapabilityDescriptor(
                kind=CapabilityKind.TOOL,
                name=name,
                description=description,
                handler=handler,
                error_prefix=error_prefix,
                input_contract=input_contract,
                output_contract=output_contract,
            )
        )

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def lookup(self, kind: CapabilityKind, name: str) -> CapabilityDescriptor:
        try:
            return self._capabilities[kind][name]
        except KeyError:
            raise NotFoundError(f"Unknown {kind.value} '{name}'") from None

    def list(self, kind: CapabilityKind) -> Iterator[CapabilityDescriptor]:
        # A fresh iterator per call, so listings can be restarted.
        return iter(list(self._capabilities[kind].values()))

    def __len__(self) -> int:
        return sum(len(p) for p in self._capabilities.values())

    # MCP views

    def list_tools(self) -> List[types.Tool]:
        return [
            types.Tool(
                name=d.name,
                description=d.description,
                inputSchema=d.input_contract.to_json_schema(),
                outputSchema=d.output_contract.to_json_schema(),
            )
            for d in self.list(CapabilityKind.TOOL)
        ]

    def list_resources(self) -> List[types.Resource]:
        return [
            types.Resource(
                uri=d.key,
                name=d.name,
                title=d.title,
                description=d.description,
                mimeType=d.mime_type,
            )
            for d in self.list(CapabilityKind.RESOURCE)
        ]

    def list_prompts(self) -> List[types.Prompt]:
        return [
            types.Prompt(
                name=d.name,
                title=d.title,
                description=d.description,
                arguments=[
                    types.PromptArgument(
                        name=p.name,
                        description=p.description or None,
                        required=p.required,
                    )
                    for p in d.input_contract.parameters
                ],
            )
            for d in self.list(CapabilityKind.PROMPT)
        ]
