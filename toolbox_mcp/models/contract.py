"""
Inspectable input/output contracts for capabilities.

A contract is plain data (field name -> kind, bounds, default, enum). From it
we derive three things mechanically: a strict pydantic validator, the JSON
Schema advertised to MCP clients, and the parameter listing served by the
introspection resource.
"""

from __future__ import annotations

import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Type

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PrivateAttr, create_model
from pydantic import ValidationError as PydanticValidationError

from ..errors import ValidationError, Violation

FieldKind = Literal["string", "number", "integer", "boolean"]
ContentType = Literal["text", "image"]

_PYTHON_TYPES: Dict[str, type] = {
    "string": str,
    "number": float,
    "integer": int,
    "boolean": bool,
}

_UNSET = object()


def _integral_float(value: Any) -> Any:
    # 7.0 is an integer in JSON terms; 3.5 still fails strict int validation.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


class FieldSpec(BaseModel):
    """One named input field."""

    model_config = ConfigDict(frozen=True)

    name: str
    kind: FieldKind
    description: str = ""
    required: bool = True
    default: Any = None
    enum: Optional[Tuple[Any, ...]] = None
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def annotation(self) -> Any:
        if self.enum:
            base: Any = Literal[self.enum]  # type: ignore[valid-type]
        else:
            base = _PYTHON_TYPES[self.kind]
            if self.kind == "integer":
                base = Annotated[int, BeforeValidator(_integral_float)]
        if not self.required and self.default is None:
            return Optional[base]
        return base

    def field_info(self) -> Any:
        default: Any = ... if self.required else self.default
        return Field(
            default=default,
            description=self.description or None,
            ge=self.minimum,
            le=self.maximum,
        )

    def json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": self.kind}
        if self.description:
            schema["description"] = self.description
        if self.enum:
            schema["enum"] = list(self.enum)
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema

    def describe(self) -> Dict[str, Any]:
        """Parameter metadata in the shape served by the server-info resource."""
        meta: Dict[str, Any] = {"type": self.kind}
        if self.enum:
            meta["enum"] = list(self.enum)
        if not self.required:
            meta["optional"] = True
        if self.default is not None:
            meta["default"] = self.default
        if self.minimum is not None:
            meta["min"] = self.minimum
        if self.maximum is not None:
            meta["max"] = self.maximum
        if self.description:
            meta["description"] = self.description
        return meta


class InputContract(BaseModel):
    """Ordered set of fields a capability accepts."""

    model_config = ConfigDict(frozen=True)

    parameters: Tuple[FieldSpec, ...] = ()

    _validator: Optional[Type[BaseModel]] = PrivateAttr(default=None)

    @property
    def field_names(self) -> List[str]:
        return [p.name for p in self.parameters]

    def _validator_model(self) -> Type[BaseModel]:
        if self._validator is None:
            definitions = {p.name: (p.annotation(), p.field_info()) for p in self.parameters}
            model_name = re.sub(r"\W", "_", "_".join(self.field_names) or "empty") + "_Arguments"
            self._validator = create_model(  # type: ignore[call-overload]
                model_name,
                __config__=ConfigDict(strict=True, extra="ignore"),
                **definitions,
            )
        return self._validator

    def validate_arguments(self, raw: Any, capability: str = "") -> Dict[str, Any]:
        """
        Validate raw arguments and return them with defaults applied.

        Unknown fields are dropped. Every violated field is reported in a
        single ValidationError rather than stopping at the first.
        """
        model = self._validator_model()
        try:
            parsed = model.model_validate(raw if raw is not None else {})
        except PydanticValidationError as exc:
            raise ValidationError(capability, _violations(exc)) from exc
        return parsed.model_dump()

    def to_json_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {p.name: p.json_schema() for p in self.parameters},
            "additionalProperties": True,
        }
        required = [p.name for p in self.parameters if p.required]
        if required:
            schema["required"] = required
        return schema

    def describe(self) -> Dict[str, Dict[str, Any]]:
        return {p.name: p.describe() for p in self.parameters}


class OutputContract(BaseModel):
    """Shape of the envelope a tool handler produces."""

    model_config = ConfigDict(frozen=True)

    item_type: ContentType = "text"
    description: str = ""

    def to_json_schema(self) -> Dict[str, Any]:
        if self.item_type == "image":
            item: Dict[str, Any] = {
                "type": "object",
                "properties": {
                    "type": {"type": "string", "const": "image"},
                    "data": {"type": "string", "description": "Base64-encoded image data"},
                    "mimeType": {"type": "string", "description": "Image MIME type"},
                },
                "required": ["type", "data", "mimeType"],
            }
        else:
            item = {
                "type": "object",
                "properties": {
                    "type": {"type": "string", "const": "text"},
                    "text": {"type": "string", "description": self.description},
                },
                "required": ["type", "text"],
            }
        return {
            "type": "object",
            "properties": {
                "content": {
                    "type": "array",
                    "items": item,
                    "description": self.description,
                }
            },
            "required": ["content"],
        }


def _violations(exc: PydanticValidationError) -> List[Violation]:
    violations: List[Violation] = []
    seen = set()
    for error in exc.errors():
        loc = error.get("loc") or ()
        field = str(loc[0]) if loc else "arguments"
        message = error.get("msg", "invalid value")
        if (field, message) in seen:
            continue
        seen.add((field, message))
        violations.append(Violation(field=field, message=message))
    return violations
