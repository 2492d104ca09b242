from __future__ import annotations

import base64
import io
import logging
from typing import Any, Callable, Optional

import anyio
from huggingface_hub import InferenceClient

from .config import Settings
from .errors import MissingCredentialError, UpstreamInferenceError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str], Any]


def _default_factory(token: str) -> InferenceClient:
    return InferenceClient(provider="auto", token=token)


class ImageClient:
    """
    Minimal text-to-image wrapper around the Hugging Face inference SDK.

    The credential is bound at construction. Its absence is only an error when
    `generate_png` is called, and it is raised before any network traffic.
    The SDK is synchronous, so calls run in a worker thread.
    """

    def __init__(
        self,
        token: Optional[str],
        model: str = "black-forest-labs/FLUX.1-schnell",
        steps: int = 5,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        self._token = token
        self._model = model
        self._steps = steps
        self._client_factory = client_factory or _default_factory

    @classmethod
    def from_settings(cls, settings: Settings, client_factory: Optional[ClientFactory] = None) -> "ImageClient":
        return cls(
            token=settings.hf_token,
            model=settings.image_model,
            steps=settings.image_steps,
            client_factory=client_factory,
        )

    @property
    def configured(self) -> bool:
        return bool(self._token)

    async def generate_png(self, prompt: str) -> str:
        """Generate an image for `prompt` and return it as base64-encoded PNG."""
        if not self._token:
            raise MissingCredentialError(
                "HF token is not configured. Set TOOLBOX_HF_TOKEN to enable image generation."
            )

        client = self._client_factory(self._token)
        try:
            image = await anyio.to_thread.run_sync(
                lambda: client.text_to_image(
                    prompt,
                    model=self._model,
                    num_inference_steps=self._steps,
                )
            )
        except Exception as e:
            logger.warning("Inference provider failed for model %s: %s", self._model, e)
            raise UpstreamInferenceError(str(e) or type(e).__name__) from e

        return base64.b64encode(_to_png_bytes(image)).decode("ascii")


def _to_png_bytes(image: Any) -> bytes:
    if isinstance(image, (bytes, bytearray)):
        return bytes(image)
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()
