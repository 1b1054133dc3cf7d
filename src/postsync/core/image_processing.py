"""Poster adjustment engine.

All functions in this module operate on PIL images and are independent of
the exporter and the UI layer. The rendering pipeline mirrors how a browser
canvas draws the poster: a CSS-style filter chain is applied to the source
pixels, which are then drawn through a centre-anchored rotate + scale
transform into a canvas of the source's own size.

Typical usage::

    from postsync.core.image_processing import AdjustmentEngine

    engine = AdjustmentEngine()
    engine.load(poster)
    engine.set_adjustment("brightness", 20)
    engine.apply_filter_preset("vintage")
    engine.rotate90()
    rendered = engine.render()
"""

from __future__ import annotations

import logging
import math
from typing import Callable, NamedTuple

from PIL import Image, ImageEnhance

from postsync.schemas import AdjustmentState, FilterPreset

logger = logging.getLogger(__name__)

RenderCallback = Callable[[Image.Image], None]

_FIELDS = frozenset(AdjustmentState.model_fields)


# ---------------------------------------------------------------------------
# Filter chain
# ---------------------------------------------------------------------------


class FilterOp(NamedTuple):
    """A single CSS filter function, e.g. ``saturate(150%)``.

    ``amount`` is a ratio (1.0 = 100%) for every function except
    ``hue-rotate``, where it is in degrees.
    """

    name: str
    amount: float


_PRESET_OPS: dict[FilterPreset, tuple[FilterOp, ...]] = {
    FilterPreset.NONE: (),
    FilterPreset.VIVID: (FilterOp("saturate", 1.5), FilterOp("contrast", 1.1)),
    FilterPreset.BW: (FilterOp("grayscale", 1.0),),
    FilterPreset.VINTAGE: (FilterOp("sepia", 0.5), FilterOp("contrast", 0.9)),
    FilterPreset.COOL: (FilterOp("hue-rotate", 180.0), FilterOp("saturate", 1.2)),
}


def build_filter_chain(state: AdjustmentState) -> list[FilterOp]:
    """Translate an adjustment state into an ordered filter chain.

    The numeric adjustments always come first; preset operations are
    appended after them so they compound instead of replacing them.
    """
    chain = [
        FilterOp("brightness", (100 + state.brightness) / 100.0),
        FilterOp("contrast", (100 + state.contrast) / 100.0),
        FilterOp("saturate", (100 + state.saturation) / 100.0),
    ]
    chain.extend(_PRESET_OPS[state.filter_preset])
    return chain


def filter_string(chain: list[FilterOp]) -> str:
    """Render a filter chain as a CSS ``filter`` value."""
    parts = []
    for op in chain:
        if op.name == "hue-rotate":
            parts.append(f"hue-rotate({op.amount:g}deg)")
        else:
            parts.append(f"{op.name}({op.amount * 100:g}%)")
    return " ".join(parts)


def _saturate_matrix(s: float) -> tuple[float, ...]:
    return (
        0.213 + 0.787 * s, 0.715 - 0.715 * s, 0.072 - 0.072 * s, 0,
        0.213 - 0.213 * s, 0.715 + 0.285 * s, 0.072 - 0.072 * s, 0,
        0.213 - 0.213 * s, 0.715 - 0.715 * s, 0.072 + 0.928 * s, 0,
    )


def _grayscale_matrix(amount: float) -> tuple[float, ...]:
    a = 1.0 - min(1.0, amount)
    return (
        0.2126 + 0.7874 * a, 0.7152 - 0.7152 * a, 0.0722 - 0.0722 * a, 0,
        0.2126 - 0.2126 * a, 0.7152 + 0.2848 * a, 0.0722 - 0.0722 * a, 0,
        0.2126 - 0.2126 * a, 0.7152 - 0.7152 * a, 0.0722 + 0.9278 * a, 0,
    )


def _sepia_matrix(amount: float) -> tuple[float, ...]:
    a = 1.0 - min(1.0, amount)
    return (
        0.393 + 0.607 * a, 0.769 - 0.769 * a, 0.189 - 0.189 * a, 0,
        0.349 - 0.349 * a, 0.686 + 0.314 * a, 0.168 - 0.168 * a, 0,
        0.272 - 0.272 * a, 0.534 - 0.534 * a, 0.131 + 0.869 * a, 0,
    )


def _hue_rotate_matrix(degrees: float) -> tuple[float, ...]:
    rad = math.radians(degrees)
    c, s = math.cos(rad), math.sin(rad)
    return (
        0.213 + c * 0.787 - s * 0.213,
        0.715 - c * 0.715 - s * 0.715,
        0.072 - c * 0.072 + s * 0.928,
        0,
        0.213 - c * 0.213 + s * 0.143,
        0.715 + c * 0.285 + s * 0.140,
        0.072 - c * 0.072 - s * 0.283,
        0,
        0.213 - c * 0.213 - s * 0.787,
        0.715 - c * 0.715 + s * 0.715,
        0.072 + c * 0.928 + s * 0.072,
        0,
    )


_MATRIX_OPS: dict[str, Callable[[float], tuple[float, ...]]] = {
    "saturate": _saturate_matrix,
    "grayscale": _grayscale_matrix,
    "sepia": _sepia_matrix,
    "hue-rotate": _hue_rotate_matrix,
}


def _apply_op(rgb: Image.Image, op: FilterOp) -> Image.Image:
    """Apply one filter function to an RGB image."""
    if op.name == "brightness":
        if op.amount == 1.0:
            return rgb
        return ImageEnhance.Brightness(rgb).enhance(op.amount)

    if op.name == "contrast":
        if op.amount == 1.0:
            return rgb
        # CSS contrast pivots around mid-grey, not the image mean.
        lut = [
            max(0, min(255, int(round((v - 127.5) * op.amount + 127.5))))
            for v in range(256)
        ]
        return rgb.point(lut * 3)

    if op.name in _MATRIX_OPS:
        if op.name == "saturate" and op.amount == 1.0:
            return rgb
        return rgb.convert("RGB", _MATRIX_OPS[op.name](op.amount))

    raise ValueError(f"Unknown filter function '{op.name}'")


def apply_filter_chain(image: Image.Image, chain: list[FilterOp]) -> Image.Image:
    """Apply a filter chain to an image, preserving its alpha channel.

    Args:
        image: Any PIL image.
        chain: Ordered filter operations from ``build_filter_chain``.

    Returns:
        A new RGBA image with the same size as *image*.
    """
    rgba = image.convert("RGBA")
    alpha = rgba.getchannel("A")
    rgb = rgba.convert("RGB")

    for op in chain:
        rgb = _apply_op(rgb, op)

    result = rgb.convert("RGBA")
    result.putalpha(alpha)
    return result


# ---------------------------------------------------------------------------
# Geometric transform
# ---------------------------------------------------------------------------

# Exact (cos, sin) for the four allowed rotations.
_ROTATION_TRIG: dict[int, tuple[int, int]] = {
    0: (1, 0),
    90: (0, 1),
    180: (-1, 0),
    270: (0, -1),
}


def apply_transform(image: Image.Image, rotation: int, zoom: float) -> Image.Image:
    """Rotate and zoom *image* about its centre within its own bounds.

    Equivalent to ``translate(centre) · rotate · scale · translate(-centre)``
    on a canvas of the same size. Pixels not covered by the transformed
    image are fully transparent.

    Args:
        image: RGBA image.
        rotation: Clockwise rotation in degrees (0, 90, 180 or 270).
        zoom: Scale factor.

    Returns:
        A new RGBA image of the same size as *image*.
    """
    if rotation == 0 and zoom == 1.0:
        return image.copy()

    cos_t, sin_t = _ROTATION_TRIG[rotation % 360]
    cx, cy = image.width / 2.0, image.height / 2.0

    # PIL's affine transform maps output coordinates back to input
    # coordinates, so the inverse matrix is passed.
    a = cos_t / zoom
    b = sin_t / zoom
    d = -sin_t / zoom
    e = cos_t / zoom
    c = cx - a * cx - b * cy
    f = cy - d * cx - e * cy

    return image.transform(
        image.size,
        Image.Transform.AFFINE,
        (a, b, c, d, e, f),
        resample=Image.Resampling.BICUBIC,
        fillcolor=(0, 0, 0, 0),
    )


def render_adjusted(source: Image.Image, state: AdjustmentState) -> Image.Image:
    """Render *state* against *source* at the source's native resolution."""
    filtered = apply_filter_chain(source, build_filter_chain(state))
    return apply_transform(filtered, state.rotation, state.zoom)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class AdjustmentEngine:
    """Owns the adjustment state of one poster and keeps its render current.

    Every mutating call re-renders and notifies subscribers with the new
    buffer. Until a source image is loaded, rendering is a no-op.

    Args:
        zoom_step: Zoom change applied by ``zoom_in``/``zoom_out``.
    """

    def __init__(self, zoom_step: float = 0.1) -> None:
        self._zoom_step = zoom_step
        self._source: Image.Image | None = None
        self._state = AdjustmentState()
        self._rendered: Image.Image | None = None
        self._subscribers: list[RenderCallback] = []

    # -- accessors ---------------------------------------------------------

    @property
    def state(self) -> AdjustmentState:
        return self._state

    @property
    def source(self) -> Image.Image | None:
        return self._source

    @property
    def rendered(self) -> Image.Image | None:
        return self._rendered

    def is_ready(self) -> bool:
        """Return ``True`` once a render is available."""
        return self._rendered is not None

    def subscribe(self, callback: RenderCallback) -> None:
        """Register *callback* to receive every new render."""
        self._subscribers.append(callback)

    # -- mutations ---------------------------------------------------------

    def load(self, image: Image.Image) -> Image.Image | None:
        """Set the source image and render it with the current state."""
        self._source = image.convert("RGBA")
        self._rendered = None
        logger.debug("Loaded source image %s", self._source.size)
        return self.render()

    def set_state(self, state: AdjustmentState) -> Image.Image | None:
        """Replace the whole adjustment state and re-render."""
        self._state = state
        return self.render()

    def set_adjustment(self, field: str, value) -> Image.Image | None:
        """Set one adjustment field, clamping *value* into its range.

        Raises:
            ValueError: If *field* is not an adjustment field name.
        """
        if field not in _FIELDS:
            raise ValueError(
                f"Unknown adjustment '{field}'. Known: {sorted(_FIELDS)}"
            )
        values = self._state.model_dump()
        values[field] = value
        return self.set_state(AdjustmentState(**values))

    def apply_filter_preset(self, name: str | FilterPreset) -> Image.Image | None:
        return self.set_adjustment("filter_preset", name)

    def rotate90(self) -> Image.Image | None:
        return self.set_adjustment("rotation", (self._state.rotation + 90) % 360)

    def zoom_in(self) -> Image.Image | None:
        return self.set_adjustment("zoom", round(self._state.zoom + self._zoom_step, 1))

    def zoom_out(self) -> Image.Image | None:
        return self.set_adjustment("zoom", round(self._state.zoom - self._zoom_step, 1))

    def reset(self) -> Image.Image | None:
        return self.set_state(AdjustmentState())

    # -- rendering ---------------------------------------------------------

    def render(self) -> Image.Image | None:
        """Recompute the rendered buffer from the source and state.

        Returns:
            The new render, or the previous one (possibly ``None``) when no
            source image is loaded.
        """
        if self._source is None:
            logger.debug("Render skipped: no source image loaded.")
            return self._rendered

        self._rendered = render_adjusted(self._source, self._state)
        for callback in self._subscribers:
            callback(self._rendered)
        return self._rendered
