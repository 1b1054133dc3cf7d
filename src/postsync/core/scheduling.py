"""Post scheduling.

Scheduling only records when and where a post should go out. Nothing in
this package publishes or executes a scheduled post.
"""

from __future__ import annotations

import datetime
import logging

from postsync.errors import ValidationError
from postsync.schemas import PlatformChoice, ScheduleDraft, ScheduledPost

logger = logging.getLogger(__name__)

PUBLISH_PLATFORMS: tuple[str, ...] = ("X", "LinkedIn", "Facebook", "Instagram")


def default_platforms() -> list[PlatformChoice]:
    """Every publishing platform, selected."""
    return [PlatformChoice(name=name) for name in PUBLISH_PLATFORMS]


def toggle_platform(platforms: list[PlatformChoice], name: str) -> list[PlatformChoice]:
    return [
        p.model_copy(update={"selected": not p.selected}) if p.name == name else p
        for p in platforms
    ]


def missing_requirements(draft: ScheduleDraft) -> list[str]:
    """List what still has to be provided before the post can be scheduled."""
    missing = []
    if not draft.has_image:
        missing.append("Upload an image")
    if not draft.caption.strip():
        missing.append("Write a caption")
    if draft.date is None:
        missing.append("Pick a date")
    if draft.time is None:
        missing.append("Set a time")
    if not draft.selected_platforms:
        missing.append("Select platforms")
    return missing


def can_schedule(draft: ScheduleDraft) -> bool:
    return not missing_requirements(draft)


def schedule_post(
    draft: ScheduleDraft,
    today: datetime.date | None = None,
) -> ScheduledPost:
    """Confirm a schedule draft.

    Args:
        draft: Current scheduler form state.
        today: Earliest allowed date; defaults to the local date.

    Returns:
        The confirmed ``ScheduledPost``.

    Raises:
        ValidationError: If anything is missing or the date is in the past.
    """
    missing = missing_requirements(draft)
    if missing:
        raise ValidationError(" • ".join(missing))

    today = today or datetime.date.today()
    if draft.date < today:
        raise ValidationError(f"Pick a date on or after {today.isoformat()}.")

    post = ScheduledPost(
        scheduled_at=datetime.datetime.combine(draft.date, draft.time.replace(second=0, microsecond=0)),
        platforms=draft.selected_platforms,
        caption=draft.caption,
    )
    logger.info("Post scheduled for %s on %s", post.scheduled_at_iso, ", ".join(post.platforms))
    return post
