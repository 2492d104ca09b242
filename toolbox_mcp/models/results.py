"""Domain results and the dual-form response envelope."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Union

ContentItem = Dict[str, str]


@dataclass(frozen=True)
class TextResult:
    """Plain text produced by a handler."""

    text: str


@dataclass(frozen=True)
class ImageResult:
    """Base64-encoded binary produced by a handler."""

    data: str
    mime_type: str = "image/png"


DomainResult = Union[TextResult, ImageResult]


@dataclass(frozen=True)
class ResponseEnvelope:
    """
    Uniform output of every invocation.

    `content` is the display form; `structured_content` carries the same
    items under a "content" key for programmatic consumers. Only
    `build_envelope` should construct one.
    """

    content: List[ContentItem]
    structured_content: Dict[str, List[ContentItem]] = field(default_factory=dict)

    def to_wire(self) -> Dict[str, Any]:
        return {"content": self.content, "structuredContent": self.structured_content}

    @property
    def text(self) -> str:
        return "\n".join(item["text"] for item in self.content if item.get("type") == "text")


def content_item(result: DomainResult) -> ContentItem:
    if isinstance(result, TextResult):
        return {"type": "text", "text": result.text}
    if isinstance(result, ImageResult):
        return {"type": "image", "data": result.data, "mimeType": result.mime_type}
    raise TypeError(f"Unsupported handler result: {type(result).__name__}")


def build_envelope(items: Sequence[ContentItem]) -> ResponseEnvelope:
    return ResponseEnvelope(
        content=[dict(item) for item in items],
        structured_content={"content": [dict(item) for item in items]},
    )
