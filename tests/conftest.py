"""Shared fixtures for the PostSync test suite."""

import io

import numpy as np
import pytest
from PIL import Image

from postsync.config import Settings


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only (no .env, no generation endpoint)."""
    return Settings(_env_file=None, generate_endpoint="", functions_api_key="")


@pytest.fixture
def rgb_image() -> Image.Image:
    """A small 100x80 RGB test image with a gradient."""
    arr = np.zeros((80, 100, 3), dtype=np.uint8)
    arr[:, :, 0] = np.linspace(0, 255, 100, dtype=np.uint8)  # red gradient
    arr[:, :, 1] = 128
    arr[:, :, 2] = 64
    return Image.fromarray(arr, mode="RGB")


@pytest.fixture
def rgba_image(rgb_image: Image.Image) -> Image.Image:
    """A small RGBA test image (RGB + full-opaque alpha)."""
    return rgb_image.convert("RGBA")


@pytest.fixture
def split_image() -> Image.Image:
    """A 100x80 image: left half red, right half blue."""
    arr = np.zeros((80, 100, 3), dtype=np.uint8)
    arr[:, :50, 0] = 255
    arr[:, 50:, 2] = 255
    return Image.fromarray(arr, mode="RGB")


@pytest.fixture
def noisy_image() -> Image.Image:
    """A 120x90 RGB image of seeded noise (hard to compress)."""
    rng = np.random.default_rng(seed=7)
    arr = rng.integers(0, 256, size=(90, 120, 3), dtype=np.uint8)
    return Image.fromarray(arr, mode="RGB")


@pytest.fixture
def png_bytes(rgb_image: Image.Image) -> bytes:
    """The gradient image encoded as PNG."""
    buffer = io.BytesIO()
    rgb_image.save(buffer, format="PNG")
    return buffer.getvalue()
