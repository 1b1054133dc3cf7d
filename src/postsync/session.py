"""Per-user composer session.

A ``ComposerSession`` owns everything one user is working on: the poster,
its adjustment engine, export choices, caption and schedule. UI components
receive the session by reference and change it only through its methods;
every change is announced to subscribers with a short event name.
"""

from __future__ import annotations

import datetime
import logging
from typing import Callable

from PIL import Image

from postsync.config import Settings
from postsync.core import copywriting, export, scheduling
from postsync.core.image_processing import AdjustmentEngine
from postsync.errors import ValidationError
from postsync.schemas import (
    CopyFeedback,
    ExportFormat,
    ExportRequest,
    ExportResult,
    ExportTarget,
    PlatformChoice,
    ScheduleDraft,
    ScheduledPost,
)

logger = logging.getLogger(__name__)

ChangeCallback = Callable[["ComposerSession", str], None]


class ComposerSession:
    """State of one post being composed.

    Args:
        settings: Application settings.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self.engine = self._new_engine()
        self.poster_origin: str | None = None

        self.targets: list[ExportTarget] = export.default_targets()
        self.custom_width = ""
        self.custom_height = ""
        self.export_request = ExportRequest(quality=settings.default_quality)

        self.caption = ""
        self.feedback: CopyFeedback | None = None

        self.schedule_date: datetime.date | None = None
        self.schedule_time: datetime.time | None = None
        self.platforms: list[PlatformChoice] = scheduling.default_platforms()
        self.scheduled_post: ScheduledPost | None = None

        self._subscribers: list[ChangeCallback] = []

    # -- observers ---------------------------------------------------------

    def on_change(self, callback: ChangeCallback) -> None:
        self._subscribers.append(callback)

    def _notify(self, event: str) -> None:
        for callback in self._subscribers:
            callback(self, event)

    # -- poster ------------------------------------------------------------

    @property
    def poster(self) -> Image.Image | None:
        return self.engine.source

    def _new_engine(self) -> AdjustmentEngine:
        engine = AdjustmentEngine(zoom_step=self.settings.zoom_step)
        engine.subscribe(lambda _buffer: self._notify("render"))
        return engine

    def set_poster(self, image: Image.Image, origin: str = "upload") -> None:
        """Load a new poster with default adjustments."""
        self.engine = self._new_engine()
        self.engine.load(image)
        self.poster_origin = origin
        self.scheduled_post = None
        logger.info("Poster set from %s (%dx%d)", origin, *image.size)
        self._notify("poster")

    def clear_poster(self) -> None:
        self.engine = self._new_engine()
        self.poster_origin = None
        self.scheduled_post = None
        self._notify("poster")

    # -- export ------------------------------------------------------------

    def toggle_target(self, index: int) -> None:
        self.targets = export.toggle_target(self.targets, index)
        self._notify("targets")

    def toggle_all_targets(self) -> None:
        self.targets = export.toggle_all(self.targets)
        self._notify("targets")

    def set_custom_size(self, width: str, height: str) -> None:
        self.custom_width, self.custom_height = width, height
        self._notify("targets")

    def set_export_options(self, fmt: ExportFormat | str, quality: int) -> None:
        self.export_request = ExportRequest(format=ExportFormat(fmt), quality=quality)
        self._notify("export_options")

    def export(self) -> list[ExportResult]:
        """Run the export for the current selection.

        Raises:
            NotReadyError: If no poster is loaded.
            ValidationError: If only a half-filled custom size is selected.
        """
        custom = export.parse_custom_target(self.custom_width, self.custom_height)
        custom_entered = bool(self.custom_width.strip() or self.custom_height.strip())
        if custom is None and custom_entered and not any(t.enabled for t in self.targets):
            raise ValidationError("Enter a numeric width and height for the custom size.")
        return list(
            export.export_all(self.engine.rendered, self.targets, self.export_request, custom)
        )

    # -- caption -----------------------------------------------------------

    def set_caption(self, caption: str) -> None:
        if caption != self.caption:
            self.caption = caption
            self.feedback = None
            self._notify("caption")

    def analyze_caption(self) -> CopyFeedback:
        """Score the current caption.

        Raises:
            ValidationError: If the caption is blank.
        """
        self.feedback = copywriting.analyze_caption(self.caption)
        self._notify("feedback")
        return self.feedback

    # -- schedule ----------------------------------------------------------

    def set_schedule(
        self,
        date: datetime.date | None,
        time: datetime.time | None,
    ) -> None:
        self.schedule_date, self.schedule_time = date, time
        self._notify("schedule")

    def toggle_platform(self, name: str) -> None:
        self.platforms = scheduling.toggle_platform(self.platforms, name)
        self._notify("schedule")

    def schedule_draft(self) -> ScheduleDraft:
        return ScheduleDraft(
            has_image=self.poster is not None,
            caption=self.caption,
            date=self.schedule_date,
            time=self.schedule_time,
            platforms=self.platforms,
        )

    def schedule(self, today: datetime.date | None = None) -> ScheduledPost:
        """Confirm the schedule.

        Raises:
            ValidationError: If the draft is incomplete or in the past.
        """
        self.scheduled_post = scheduling.schedule_post(self.schedule_draft(), today)
        self._notify("scheduled")
        return self.scheduled_post
