"""Image-generation function: validates the prompt and proxies a provider.

The handler is framework-free so the composer can call it in-process when
no deployed endpoint is configured; ``postsync.functions.app`` exposes it
over HTTP.

Upstream failures are reported with HTTP 200 and an ``error`` body, so
callers always get a JSON answer they can show to the user.
"""

from __future__ import annotations

import logging
from typing import Any

from postsync.config import Settings
from postsync.core.providers import ImageGenerator
from postsync.errors import ExternalServiceError, ModelWarmingError
from postsync.schemas import GenerationRequest

logger = logging.getLogger(__name__)


def handle_generate(
    body: Any,
    generator: ImageGenerator,
    settings: Settings,
) -> tuple[dict[str, Any], int]:
    """Process one generation request body.

    Args:
        body: Decoded JSON request body.
        generator: Provider used to create the image.
        settings: Application settings (minimum prompt length).

    Returns:
        ``(payload, status)`` ready to be serialised as JSON.
    """
    if not isinstance(body, dict):
        return {"error": "Request body must be a JSON object"}, 400

    prompt = body.get("prompt") or ""
    style = body.get("style") or ""
    logger.info("Received request - prompt: %r, style: %r", prompt, style)

    if not isinstance(prompt, str) or len(prompt.strip()) < settings.function_prompt_min_chars:
        return {
            "error": f"Prompt must be at least {settings.function_prompt_min_chars} characters"
        }, 400
    if not isinstance(style, str) or not style:
        return {"error": "Style is required"}, 400

    try:
        result = generator.generate(GenerationRequest(prompt=prompt, style=style))
    except ModelWarmingError as exc:
        return {
            "error": "AI model is warming up",
            "message": str(exc),
            "status": 503,
        }, 200
    except ExternalServiceError as exc:
        logger.error("Image generation failed: %s", exc)
        return {"error": "Failed to generate image", "details": str(exc)}, 200

    return {"image_url": result.image_url, "success": True}, 200
