"""Base types and shared utilities for image-generation providers.

This module defines the ``GeneratorCard`` schema (what a provider *is*),
the ``ImageGenerator`` protocol (what a provider *does*), and low-level
HTTP helpers reused across provider implementations.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, Protocol, runtime_checkable

import requests
from pydantic import BaseModel

from postsync.errors import ExternalServiceError, ModelWarmingError
from postsync.schemas import GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)

# Keys under which an image URL may come back from a generation endpoint,
# in order of preference.
IMAGE_URL_KEYS: tuple[str, ...] = ("image_url", "url", "output_url", "result")


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


class GeneratorCard(BaseModel):
    """Metadata describing a single generation provider.

    Attributes:
        id: Unique machine-readable identifier (e.g. ``"hf_sdxl"``).
        name: Human-readable display name for the UI.
        description: Short description shown in the UI tooltip.
        requires_token: Whether the provider refuses to run without an
            API token in the settings.
    """

    model_config = {"frozen": True}

    id: str
    name: str
    description: str = ""
    requires_token: bool = False


# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class ImageGenerator(Protocol):
    """Interface that every generation provider must implement."""

    def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate one image for a validated request.

        Raises:
            ExternalServiceError: On any upstream failure.
        """
        ...


# ---------------------------------------------------------------------------
# Shared HTTP helpers
# ---------------------------------------------------------------------------


def post_json(
    url: str,
    payload: dict[str, Any],
    headers: dict[str, str] | None = None,
    timeout: float = 60.0,
    label: str = "service",
) -> requests.Response:
    """POST a JSON body and return the successful response.

    Args:
        url: Endpoint URL.
        payload: JSON-serialisable request body.
        headers: Extra request headers.
        timeout: Timeout in seconds.
        label: Human-readable service name for messages.

    Returns:
        The ``requests.Response`` for a 2xx reply.

    Raises:
        ModelWarmingError: On HTTP 503.
        ExternalServiceError: On network errors or any other non-2xx status.
    """
    try:
        response = requests.post(url, json=payload, headers=headers, timeout=timeout)
    except requests.RequestException as exc:
        raise ExternalServiceError(f"{label} request failed: {exc}") from exc

    if response.status_code == 503:
        raise ModelWarmingError(
            f"{label} is warming up. This typically takes 20-30 seconds; "
            "please try again in a moment."
        )
    if not response.ok:
        logger.error("%s returned %d: %s", label, response.status_code, response.text[:500])
        raise ExternalServiceError(
            f"{label} returned HTTP {response.status_code}: {response.text[:200]}"
        )
    return response


def extract_image_url(payload: Any) -> str:
    """Pick the image URL out of a generation response body.

    Raises:
        ExternalServiceError: If no known key holds a non-empty string.
    """
    if isinstance(payload, dict):
        for key in IMAGE_URL_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    raise ExternalServiceError("No image URL returned.")


def to_data_url(data: bytes, mime_type: str = "image/jpeg") -> str:
    """Encode raw image bytes as a base64 ``data:`` URL."""
    return f"data:{mime_type};base64,{base64.b64encode(data).decode('ascii')}"
