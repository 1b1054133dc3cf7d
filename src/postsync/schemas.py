"""Pydantic data contracts shared across modules.

Every cross-module boundary is typed through one of these schemas.
The editing flow is::

    PIL.Image (upload or generated URL)
        → AdjustmentEngine.load()         (AdjustmentState)
        → AdjustmentEngine.render()       → RGBA PIL.Image
        → export_all(…, ExportTarget[], ExportRequest) → ExportResult[]
"""

from __future__ import annotations

import datetime
import math
from enum import Enum

from pydantic import BaseModel, Field, ValidationInfo, field_validator

ADJUSTMENT_BOUNDS: tuple[int, int] = (-100, 100)
ZOOM_BOUNDS: tuple[float, float] = (0.5, 3.0)


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


# ---------------------------------------------------------------------------
# Adjustment
# ---------------------------------------------------------------------------


class FilterPreset(str, Enum):
    """Named filter presets layered on top of the numeric adjustments."""

    NONE = "none"
    VIVID = "vivid"
    BW = "bw"
    VINTAGE = "vintage"
    COOL = "cool"


class AdjustmentState(BaseModel):
    """Visual edit parameters applied to a poster before export.

    Out-of-range values are clamped rather than rejected, and values that
    are not numbers at all fall back to the field default. The model is
    frozen: every edit produces a new state.

    Attributes:
        brightness: Signed percent in ``[-100, 100]``; ``0`` is neutral.
        contrast: Signed percent in ``[-100, 100]``.
        saturation: Signed percent in ``[-100, 100]``.
        rotation: Clockwise rotation, one of 0, 90, 180, 270 degrees.
        zoom: Scale factor in ``[0.5, 3.0]``.
        filter_preset: Preset applied after the numeric adjustments.
    """

    model_config = {"frozen": True}

    brightness: int = 0
    contrast: int = 0
    saturation: int = 0
    rotation: int = 0
    zoom: float = 1.0
    filter_preset: FilterPreset = FilterPreset.NONE

    @field_validator("brightness", "contrast", "saturation", mode="before")
    @classmethod
    def _clamp_percent(cls, value, info: ValidationInfo) -> int:
        number = _as_number(value, cls.model_fields[info.field_name].default)
        lo, hi = ADJUSTMENT_BOUNDS
        return int(round(_clamp(number, lo, hi)))

    @field_validator("rotation", mode="before")
    @classmethod
    def _snap_rotation(cls, value) -> int:
        number = _as_number(value, 0)
        return int(round(number / 90.0)) * 90 % 360

    @field_validator("zoom", mode="before")
    @classmethod
    def _clamp_zoom(cls, value) -> float:
        number = _as_number(value, 1.0)
        lo, hi = ZOOM_BOUNDS
        return round(_clamp(number, lo, hi), 2)

    @field_validator("filter_preset", mode="before")
    @classmethod
    def _known_preset(cls, value) -> FilterPreset:
        try:
            return FilterPreset(value)
        except ValueError:
            return FilterPreset.NONE

    def is_default(self) -> bool:
        """Return ``True`` if every field holds its neutral default."""
        return self == AdjustmentState()


def _as_number(value, default: float) -> float:
    """Coerce *value* to a finite ``float``, returning *default* when impossible."""
    if isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        return default
    return number if math.isfinite(number) else default


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


class ExportFormat(str, Enum):
    """Encoded output formats offered by the exporter."""

    PNG = "png"
    JPG = "jpg"
    WEBP = "webp"

    @property
    def pil_format(self) -> str:
        return {"png": "PNG", "jpg": "JPEG", "webp": "WEBP"}[self.value]

    @property
    def mime_type(self) -> str:
        return {"png": "image/png", "jpg": "image/jpeg", "webp": "image/webp"}[
            self.value
        ]


class ExportTarget(BaseModel):
    """A named output size.

    Attributes:
        label: Display name, slugified into the exported filename.
        width: Output width in pixels.
        height: Output height in pixels.
        enabled: Whether the target takes part in the next export run.
    """

    model_config = {"frozen": True}

    label: str
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    enabled: bool = False

    @property
    def size(self) -> tuple[int, int]:
        return (self.width, self.height)


class ExportRequest(BaseModel):
    """Encoding options for an export run.

    ``quality`` only affects JPEG output; PNG and WebP ignore it.
    """

    format: ExportFormat = ExportFormat.PNG
    quality: int = Field(default=90, ge=1, le=100)


class ExportResult(BaseModel):
    """One encoded image produced by the exporter.

    Attributes:
        filename: Download filename, e.g. ``facebook-1200x630.png``.
        data: Encoded file contents.
        mime_type: MIME type matching the encoded format.
        size: Pixel ``(width, height)`` of the encoded image.
    """

    filename: str
    data: bytes
    mime_type: str
    size: tuple[int, int]


# ---------------------------------------------------------------------------
# Copywriting
# ---------------------------------------------------------------------------


class CopyFeedback(BaseModel):
    """Heuristic feedback on a caption."""

    tone: str
    sentiment: str
    suggestions: list[str]
    cta_suggestion: str
    score: int = Field(..., ge=0, le=100)


# ---------------------------------------------------------------------------
# Image generation
# ---------------------------------------------------------------------------


class GenerationRequest(BaseModel):
    """Request accepted by the generation function and providers."""

    prompt: str
    style: str | None = None


class GenerationResult(BaseModel):
    """Image returned by a generation provider.

    Attributes:
        image_url: ``data:`` URL or remote URL of the generated image.
        provider_id: Id of the provider card that produced it.
    """

    image_url: str
    provider_id: str = ""


# ---------------------------------------------------------------------------
# Team
# ---------------------------------------------------------------------------


class InvitationRequest(BaseModel):
    """Body of a team invitation request. Empty strings mean missing."""

    invitee_email: str = ""
    inviter_name: str = ""
    invite_token: str = ""
    role: str = ""


# ---------------------------------------------------------------------------
# Scheduling
# ---------------------------------------------------------------------------


class PlatformChoice(BaseModel):
    """A publishing platform the post may be scheduled for."""

    name: str
    selected: bool = True


class ScheduleDraft(BaseModel):
    """Form state of the scheduler before the post is confirmed."""

    has_image: bool = False
    caption: str = ""
    date: datetime.date | None = None
    time: datetime.time | None = None
    platforms: list[PlatformChoice] = Field(default_factory=list)

    @property
    def selected_platforms(self) -> list[str]:
        return [p.name for p in self.platforms if p.selected]


class ScheduledPost(BaseModel):
    """A confirmed schedule. Nothing executes it; it is only stored."""

    scheduled_at: datetime.datetime
    platforms: list[str]
    caption: str

    @property
    def scheduled_at_iso(self) -> str:
        """``YYYY-MM-DDTHH:MM`` form of the scheduled moment."""
        return self.scheduled_at.strftime("%Y-%m-%dT%H:%M")
