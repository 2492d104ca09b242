"""Dispatcher for routing capability calls to their handlers."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..errors import ToolCallError, ToolFailure, ValidationError
from ..models import ResponseEnvelope, build_envelope, content_item
from . import CapabilityKind, ToolRegistry

LOGGER = logging.getLogger(__name__)


class Dispatcher:
    """
    Validate, invoke and normalize one capability call.

    Every call goes Received -> Validating -> (Rejected | Invoking) ->
    (Succeeded | Failed) -> Responded. Nothing is retried.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def invoke(
        self,
        kind: CapabilityKind,
        name: str,
        raw_arguments: Optional[Dict[str, Any]] = None,
    ) -> ResponseEnvelope:
        """
        Run a capability and return its envelope.

        Raises:
            NotFoundError: the capability is not registered (wiring defect).
            ValidationError: arguments violate the input contract.
            ToolCallError: the handler failed; the message is operation-prefixed.
        """
        # Lookup failures propagate unchanged.
        descriptor = self._registry.lookup(kind, name)
        LOGGER.debug("%s '%s': received", kind.value, name)

        LOGGER.debug("%s '%s': validating", kind.value, name)
        try:
            arguments = descriptor.input_contract.validate_arguments(raw_arguments, capability=name)
        except ValidationError as exc:
            LOGGER.warning("%s '%s': rejected: %s", kind.value, name, exc)
            raise

        LOGGER.debug("%s '%s': invoking", kind.value, name)
        try:
            result = await descriptor.handler(arguments)
        except ToolFailure as exc:
            LOGGER.warning("%s '%s': failed: %s", kind.value, name, exc)
            raise ToolCallError(f"{descriptor.error_prefix}: {exc}") from exc
        except Exception as exc:
            LOGGER.exception("%s '%s': unexpected handler error", kind.value, name)
            cause = str(exc) or type(exc).__name__
            raise ToolCallError(f"{descriptor.error_prefix}: {cause}") from exc

        LOGGER.info("%s '%s': succeeded", kind.value, name)
        return build_envelope([content_item(result)])

    async def call_tool(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ResponseEnvelope:
        return await self.invoke(CapabilityKind.TOOL, name, arguments)

    async def read_resource(self, uri: str) -> ResponseEnvelope:
        return await self.invoke(CapabilityKind.RESOURCE, uri, {})

    async def get_prompt(self, name: str, arguments: Optional[Dict[str, Any]] = None) -> ResponseEnvelope:
        return await self.invoke(CapabilityKind.PROMPT, name, arguments)
