"""Hugging Face Inference API provider.

Calls the hosted Stable Diffusion XL model, which replies with raw image
bytes. The bytes are returned to the caller as a ``data:`` URL so the
function endpoint can pass them on as JSON.

An API token is optional; anonymous calls are rate limited upstream.
"""

from __future__ import annotations

import logging

from postsync.config import Settings
from postsync.core.providers._base import GeneratorCard, post_json, to_data_url
from postsync.schemas import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)

GENERATOR_CARDS: list[GeneratorCard] = [
    GeneratorCard(
        id="hf_sdxl",
        name="Stable Diffusion XL (Hugging Face)",
        description="SDXL base 1.0 via the Hugging Face Inference API.",
    ),
]

STYLE_KEYWORDS: dict[str, str] = {
    "modern": "modern, clean, contemporary, sleek design",
    "vintage": "vintage, retro, classic, nostalgic style",
    "minimalist": "minimalist, simple, clean lines, uncluttered",
    "bold": "bold, vibrant, striking colors, dynamic",
    "professional": "professional, business, corporate, polished",
    "artistic": "artistic, creative, expressive, imaginative",
}

_FALLBACK_STYLE = "beautiful style"


def enhance_prompt(prompt: str, style: str | None) -> str:
    """Append style keywords and quality boosters to a prompt."""
    keywords = STYLE_KEYWORDS.get((style or "").lower(), _FALLBACK_STYLE)
    return f"{prompt}, {keywords}, high quality, detailed, 4k"


class HuggingFaceGenerator:
    """Text-to-image generation through the Hugging Face Inference API.

    Args:
        settings: Application settings (model URL, token, timeout).
    """

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate one poster image.

        Args:
            request: Validated prompt and style.

        Returns:
            The image as a JPEG ``data:`` URL.
        """
        prompt = enhance_prompt(request.prompt.strip(), request.style)
        logger.info("Generating image with prompt: %s", prompt)

        headers = {"Content-Type": "application/json"}
        if self._settings.hf_token:
            headers["Authorization"] = f"Bearer {self._settings.hf_token}"

        response = post_json(
            self._settings.hf_model_url,
            {
                "inputs": prompt,
                "parameters": {"num_inference_steps": 30, "guidance_scale": 7.5},
            },
            headers=headers,
            timeout=self._settings.http_timeout,
            label="Hugging Face",
        )
        logger.info("Image generated, %d bytes", len(response.content))

        mime_type = response.headers.get("Content-Type", "image/jpeg").split(";")[0]
        if not mime_type.startswith("image/"):
            mime_type = "image/jpeg"
        return GenerationResult(
            image_url=to_data_url(response.content, mime_type),
            provider_id=GENERATOR_CARDS[0].id,
        )


def create(settings: Settings) -> HuggingFaceGenerator:
    """Factory function called by the provider registry."""
    return HuggingFaceGenerator(settings=settings)
