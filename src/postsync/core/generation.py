"""Client side of AI poster generation.

The composer validates the prompt, sends it to the generation function and
turns the returned URL into a poster image. When ``generate_endpoint`` is
not configured the function handler is called in-process instead of over
HTTP. Nothing is retried automatically; the user repeats the request.
"""

from __future__ import annotations

import logging

import requests
from PIL import Image

from postsync.config import Settings
from postsync.core.providers import ImageGenerator, default_generator
from postsync.core.providers._base import extract_image_url
from postsync.core.sources import load_image_from_url
from postsync.errors import ExternalServiceError, ValidationError
from postsync.functions.generate_image import handle_generate

logger = logging.getLogger(__name__)

# Display name → style key understood by the generation function.
STYLE_PRESETS: dict[str, str] = {
    "Modern & Clean": "modern",
    "Vintage Retro": "vintage",
    "Bold & Colorful": "bold",
    "Minimalist": "minimalist",
    "Professional": "professional",
    "Artistic": "artistic",
}

EXAMPLE_PROMPTS: tuple[str, ...] = (
    "A motivational poster with 'Never Give Up' in bold white typography on a "
    "gradient background from deep blue to purple, with subtle geometric patterns",
    "A product launch announcement for a tech gadget with futuristic blue and cyan "
    "tones, featuring holographic effects and clean modern design",
    "A summer music festival flyer with vibrant yellow and pink colors, palm trees, "
    "and energetic typography in a retro 80s style",
)


def append_style(prompt: str, style_name: str) -> str:
    """Append `` in a {style} style`` to *prompt* unless already present."""
    style_text = f" in a {style_name.lower()} style"
    if style_text in prompt:
        return prompt
    return prompt + style_text


def validate_prompt(prompt: str, style: str, settings: Settings) -> str:
    """Check the prompt against the generation form's contract.

    Args:
        prompt: Free-text description of the poster.
        style: Style key, one of the ``STYLE_PRESETS`` values.
        settings: Application settings (length bounds).

    Returns:
        The trimmed prompt.

    Raises:
        ValidationError: If the prompt length or the style is invalid.
    """
    text = (prompt or "").strip()
    lo, hi = settings.prompt_min_chars, settings.prompt_max_chars
    if not lo <= len(text) <= hi:
        raise ValidationError(
            f"Describe your poster in {lo}–{hi} characters (currently {len(text)})."
        )
    if style not in STYLE_PRESETS.values():
        raise ValidationError(f"Choose a style: {', '.join(STYLE_PRESETS)}.")
    return text


def _call_endpoint(prompt: str, style: str, settings: Settings) -> dict:
    headers = {"Content-Type": "application/json"}
    if settings.functions_api_key:
        headers["Authorization"] = f"Bearer {settings.functions_api_key}"
        headers["apikey"] = settings.functions_api_key
    try:
        response = requests.post(
            settings.generate_endpoint,
            json={"prompt": prompt, "style": style},
            headers=headers,
            timeout=settings.http_timeout,
        )
        response.raise_for_status()
        return response.json()
    except requests.RequestException as exc:
        raise ExternalServiceError(f"Failed to generate image: {exc}") from exc
    except ValueError as exc:
        raise ExternalServiceError("Generation endpoint returned invalid JSON.") from exc


def request_generation(
    prompt: str,
    style: str,
    settings: Settings,
    generator: ImageGenerator | None = None,
) -> str:
    """Ask the generation function for an image and return its URL.

    Raises:
        ValidationError: If the prompt is rejected locally.
        ExternalServiceError: If generation fails or no URL comes back.
    """
    text = validate_prompt(prompt, style, settings)

    if settings.generate_endpoint:
        payload = _call_endpoint(text, style, settings)
    else:
        payload, status = handle_generate(
            {"prompt": text, "style": style},
            generator or default_generator(settings),
            settings,
        )
        if status != 200:
            raise ExternalServiceError(payload.get("error", f"HTTP {status}"))

    if isinstance(payload, dict) and payload.get("error"):
        error = payload["error"]
        detail = payload.get("message") or payload.get("details")
        raise ExternalServiceError(f"{error}: {detail}" if detail else error)

    return extract_image_url(payload)


def generate_poster(
    prompt: str,
    style: str,
    settings: Settings,
    generator: ImageGenerator | None = None,
) -> Image.Image:
    """Generate a poster and decode it into an image.

    Raises:
        ValidationError: If the prompt is rejected locally.
        ExternalServiceError: If generation or decoding fails.
    """
    url = request_generation(prompt, style, settings, generator)
    image = load_image_from_url(url, settings)
    logger.info("Generated poster %dx%d", *image.size)
    return image
