"""Loading posters from uploads and generated-image URLs."""

from __future__ import annotations

import base64
import binascii
import io
import logging

import requests
from PIL import Image, UnidentifiedImageError

from postsync.config import Settings
from postsync.errors import ExternalServiceError, InvalidImageError, ValidationError

logger = logging.getLogger(__name__)


def validate_upload(
    filename: str,
    mime_type: str,
    size: int,
    settings: Settings,
) -> None:
    """Check an upload's declared type and size.

    Args:
        filename: Original filename, used in messages only.
        mime_type: MIME type reported by the browser.
        size: Upload size in bytes.
        settings: Application settings (allowed types, size limit).

    Raises:
        ValidationError: If the type is not allowed or the file is too big.
    """
    if mime_type not in settings.supported_mime_types:
        raise ValidationError(
            f"Unsupported file type '{mime_type or 'unknown'}' for {filename or 'upload'}. "
            f"Allowed: {', '.join(settings.supported_mime_types)}"
        )
    if size > settings.max_upload_bytes:
        raise ValidationError(
            f"{filename or 'Upload'} is {size / (1024 * 1024):.1f} MB; "
            f"the limit is {settings.max_upload_mb:.0f} MB."
        )


def decode_image(data: bytes) -> Image.Image:
    """Decode raw bytes into a fully loaded PIL image.

    Raises:
        InvalidImageError: If the bytes are not a readable image.
    """
    if not data:
        raise InvalidImageError("The file is empty.")
    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError) as exc:
        raise InvalidImageError(f"Could not read image: {exc}") from exc
    if image.width == 0 or image.height == 0:
        raise InvalidImageError("The image has no pixels.")
    return image


def load_upload(
    data: bytes,
    mime_type: str,
    settings: Settings,
    filename: str = "",
) -> Image.Image:
    """Validate and decode an uploaded poster."""
    validate_upload(filename, mime_type, len(data), settings)
    image = decode_image(data)
    logger.info("Loaded upload %s (%s, %dx%d)", filename, mime_type, *image.size)
    return image


def decode_data_url(url: str) -> bytes:
    """Return the payload of a base64 ``data:`` URL.

    Raises:
        ExternalServiceError: If the URL is not a base64 data URL.
    """
    header, sep, payload = url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ExternalServiceError("Generated image URL is not a base64 data URL.")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ExternalServiceError(f"Generated image data is corrupt: {exc}") from exc


def load_image_from_url(url: str, settings: Settings) -> Image.Image:
    """Fetch and decode a generated image.

    Args:
        url: A ``data:`` URL or an ``http(s)`` URL.
        settings: Application settings (HTTP timeout).

    Returns:
        The decoded image.

    Raises:
        ExternalServiceError: If the image cannot be fetched or decoded.
    """
    if url.startswith("data:"):
        data = decode_data_url(url)
    elif url.startswith(("http://", "https://")):
        try:
            response = requests.get(url, timeout=settings.http_timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise ExternalServiceError(f"Could not download generated image: {exc}") from exc
        data = response.content
    else:
        raise ExternalServiceError(f"Unsupported image URL scheme: {url[:32]}")

    try:
        return decode_image(data)
    except InvalidImageError as exc:
        raise ExternalServiceError(f"Generated image is unreadable: {exc}") from exc
