from .contract import FieldSpec, InputContract, OutputContract
from .results import (
    ContentItem,
    DomainResult,
    ImageResult,
    ResponseEnvelope,
    TextResult,
    build_envelope,
    content_item,
)

__all__ = [
    "ContentItem",
    "DomainResult",
    "FieldSpec",
    "ImageResult",
    "InputContract",
    "OutputContract",
    "ResponseEnvelope",
    "TextResult",
    "build_envelope",
    "content_item",
]
