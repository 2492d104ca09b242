from __future__ import annotations

from typing import Any, Dict

from ..inference_client import ImageClient
from ..models import FieldSpec, ImageResult, InputContract, OutputContract
from . import ToolRegistry


def register_tools(registry: ToolRegistry, image_client: ImageClient) -> None:
    """Register the image generation tool with its credential-bound client."""

    async def _handle_generate_image(arguments: Dict[str, Any]) -> ImageResult:
        data = await image_client.generate_png(arguments["prompt"])
        return ImageResult(data=data, mime_type="image/png")

    input_contract = InputContract(
        parameters=(
            FieldSpec(name="prompt", kind="string", description="Text prompt describing the image"),
        )
    )

    registry.add_tool(
        "generate-image",
        "Generate an image from a text prompt.",
        _handle_generate_image,
        error_prefix="Image generation failed",
        input_contract=input_contract,
        output_contract=OutputContract(item_type="image", description="Generated image"),
    )
