"""Multi-target export of the rendered poster.

Each enabled ``ExportTarget`` yields one encoded file, stretched to the
target's exact size. Targets are processed one after the other and
independently: a failure on one target is logged and the batch carries on.

Typical usage::

    from postsync.core.export import default_targets, export_all, toggle_target
    from postsync.schemas import ExportFormat, ExportRequest

    targets = toggle_target(default_targets(), 0)
    request = ExportRequest(format=ExportFormat.JPG, quality=80)
    for result in export_all(engine.rendered, targets, request):
        Path(result.filename).write_bytes(result.data)
"""

from __future__ import annotations

import io
import logging
import re
import zipfile
from typing import Iterable, Iterator

from PIL import Image

from postsync.errors import NotReadyError
from postsync.schemas import ExportFormat, ExportRequest, ExportResult, ExportTarget

logger = logging.getLogger(__name__)

DEFAULT_FILENAME_STEM = "edited-image"
CUSTOM_LABEL = "custom"

PLATFORM_PRESETS: tuple[tuple[str, int, int], ...] = (
    ("Instagram Post", 1080, 1080),
    ("Instagram Story", 1080, 1920),
    ("Facebook", 1200, 630),
    ("Twitter", 1200, 675),
    ("LinkedIn", 1200, 627),
    ("Pinterest", 1000, 1500),
)


# ---------------------------------------------------------------------------
# Targets
# ---------------------------------------------------------------------------


def default_targets() -> list[ExportTarget]:
    """Return the built-in platform presets, all disabled."""
    return [
        ExportTarget(label=label, width=width, height=height)
        for label, width, height in PLATFORM_PRESETS
    ]


def toggle_target(targets: list[ExportTarget], index: int) -> list[ExportTarget]:
    """Return a copy of *targets* with the target at *index* flipped."""
    return [
        t.model_copy(update={"enabled": not t.enabled}) if i == index else t
        for i, t in enumerate(targets)
    ]


def toggle_all(targets: list[ExportTarget]) -> list[ExportTarget]:
    """Enable every target, or disable them all if all are already enabled."""
    enable = not all(t.enabled for t in targets)
    return [t.model_copy(update={"enabled": enable}) for t in targets]


def parse_custom_target(width: str, height: str) -> ExportTarget | None:
    """Build the custom target from raw form input.

    Args:
        width: Width as typed by the user.
        height: Height as typed by the user.

    Returns:
        An enabled target labelled ``custom``, or ``None`` if either field
        is empty, not an integer, or not positive.
    """
    w, h = (width or "").strip(), (height or "").strip()
    if not w or not h:
        return None
    try:
        w_px, h_px = int(w), int(h)
    except ValueError:
        logger.debug("Ignoring non-numeric custom size %r x %r", width, height)
        return None
    if w_px <= 0 or h_px <= 0:
        return None
    return ExportTarget(label=CUSTOM_LABEL, width=w_px, height=h_px, enabled=True)


def slugify(label: str) -> str:
    """Lower-case *label* and replace whitespace runs with ``-``."""
    return re.sub(r"\s+", "-", label.lower())


def target_filename(target: ExportTarget, fmt: ExportFormat) -> str:
    return f"{slugify(target.label)}-{target.width}x{target.height}.{fmt.value}"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_image(image: Image.Image, request: ExportRequest) -> bytes:
    """Encode *image* in the requested format.

    JPEG uses ``request.quality`` and has no alpha channel, so transparent
    pixels are flattened onto black the way a browser canvas does. PNG and
    WebP ignore ``quality`` and keep transparency.

    Args:
        image: Any PIL image.
        request: Encoding options.

    Returns:
        Raw file contents as ``bytes``.
    """
    buffer = io.BytesIO()
    fmt = request.format

    if fmt is ExportFormat.JPG:
        rgba = image.convert("RGBA")
        flat = Image.new("RGB", rgba.size, (0, 0, 0))
        flat.paste(rgba, mask=rgba.getchannel("A"))
        flat.save(buffer, format=fmt.pil_format, quality=request.quality)
    else:
        image.save(buffer, format=fmt.pil_format)

    return buffer.getvalue()


def _export_one(
    rendered: Image.Image,
    size: tuple[int, int],
    filename: str,
    request: ExportRequest,
) -> ExportResult:
    if rendered.size == size:
        resized = rendered
    else:
        resized = rendered.resize(size, Image.Resampling.LANCZOS)
    return ExportResult(
        filename=filename,
        data=encode_image(resized, request),
        mime_type=request.format.mime_type,
        size=resized.size,
    )


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------


def export_all(
    rendered: Image.Image | None,
    targets: Iterable[ExportTarget],
    request: ExportRequest,
    custom: ExportTarget | None = None,
) -> Iterator[ExportResult]:
    """Yield one encoded image per enabled target.

    Enabled presets come first, then *custom*. When nothing is selected a
    single ``edited-image.{format}`` at native resolution is produced.

    Args:
        rendered: The current render of the poster.
        targets: Candidate targets; disabled ones are skipped.
        request: Format and quality.
        custom: The parsed custom target, if the user entered one.

    Yields:
        ``ExportResult`` objects, in target order.

    Raises:
        NotReadyError: If *rendered* is ``None``. Raised before anything
            is produced.
    """
    if rendered is None:
        raise NotReadyError("No rendered image is available to export.")

    selected = [t for t in targets if t.enabled]
    if custom is not None:
        selected.append(custom)

    if not selected:
        filename = f"{DEFAULT_FILENAME_STEM}.{request.format.value}"
        yield _export_one(rendered, rendered.size, filename, request)
        return

    for target in selected:
        filename = target_filename(target, request.format)
        try:
            result = _export_one(rendered, target.size, filename, request)
        except (OSError, ValueError, MemoryError) as exc:
            logger.warning("Export of %s failed: %s", filename, exc)
            continue
        logger.info("Exported %s (%d bytes)", filename, len(result.data))
        yield result


def package_zip(results: Iterable[ExportResult]) -> bytes:
    """Bundle export results into a single zip archive.

    Args:
        results: Results from ``export_all``.

    Returns:
        Raw zip file contents.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as archive:
        for result in results:
            archive.writestr(result.filename, result.data)
    return buffer.getvalue()
