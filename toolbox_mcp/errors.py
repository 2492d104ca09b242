"""Exception hierarchy for the toolbox server."""

from __future__ import annotations

from typing import List, Optional, Sequence

from pydantic import BaseModel


class ToolboxError(Exception):
    """Base exception for all toolbox errors."""


class Violation(BaseModel):
    """A single contract violation for one input field."""

    field: str
    message: str


class ValidationError(ToolboxError):
    """Arguments failed the capability's input contract."""

    def __init__(self, capability: str, violations: Sequence[Violation]) -> None:
        self.capability = capability
        self.violations: List[Violation] = list(violations)
        details = "; ".join(f"{v.field}: {v.message}" for v in self.violations)
        super().__init__(f"Invalid arguments for '{capability}': {details}")


class NotFoundError(ToolboxError, KeyError):
    """Capability name not registered."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Not found"


class DuplicateNameError(ToolboxError, ValueError):
    """Capability name already registered for that kind."""


class ToolFailure(ToolboxError):
    """Base class for failures raised from inside a capability handler."""


class DivisionByZeroError(ToolFailure):
    """Calculator was asked to divide by zero."""


class InvalidTimezoneError(ToolFailure):
    """Timezone identifier could not be resolved or rendered."""


class UpstreamHttpError(ToolFailure):
    """An external service answered with a non-success status."""

    def __init__(self, status: int, reason: Optional[str] = None) -> None:
        self.status = status
        self.reason = reason or ""
        super().__init__(f"API request failed: {status} {self.reason}".rstrip())


class UpstreamDomainError(ToolFailure):
    """An external service answered successfully but reported an error."""


class MissingCredentialError(ToolFailure):
    """A handler needs a credential that is not configured."""


class UpstreamInferenceError(ToolFailure):
    """The hosted inference provider failed."""


class ToolCallError(ToolboxError):
    """
    The single user-facing error produced by the dispatcher.

    Its message is always "<operation> failed: <cause>"; the original
    exception is only available through ``__cause__``.
    """
