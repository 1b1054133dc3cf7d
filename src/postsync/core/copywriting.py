"""Heuristic caption feedback.

A fixed set of regular-expression checks over the caption text. Nothing
here calls a language model; the score is fully deterministic.
"""

from __future__ import annotations

import re

from postsync.errors import ValidationError
from postsync.schemas import CopyFeedback

_EMOJI_RE = re.compile("[\U0001F300-\U0001F9FF]")
_CTA_RE = re.compile(
    r"check|try|get|learn|discover|join|sign up|download|start",
    re.IGNORECASE,
)

TONE_ENERGETIC = "Energetic & Enthusiastic"
TONE_PROFESSIONAL = "Professional & Informative"
BALANCED_MESSAGE = "Great caption! Well balanced and engaging."


def can_analyze(caption: str) -> bool:
    """The check is only offered for non-blank captions."""
    return bool(caption and caption.strip())


def caption_stats(caption: str) -> tuple[int, int]:
    """Return ``(characters, words)`` for the caption counter."""
    return len(caption), len(caption.split())


def _sentiment(score: int) -> str:
    if score >= 80:
        return "Positive"
    if score >= 60:
        return "Neutral"
    return "Needs Improvement"


def analyze_caption(caption: str) -> CopyFeedback:
    """Score a caption and suggest improvements.

    Args:
        caption: Post caption.

    Returns:
        A ``CopyFeedback`` with tone, sentiment, suggestions and score.

    Raises:
        ValidationError: If the caption is blank.
    """
    if not can_analyze(caption):
        raise ValidationError("Write a caption before checking it.")

    word_count = len(caption.split())
    has_emoji = _EMOJI_RE.search(caption) is not None
    has_hashtag = "#" in caption
    has_cta = _CTA_RE.search(caption) is not None

    suggestions: list[str] = []
    if word_count > 50:
        suggestions.append("Consider shortening for better engagement")
    if not has_emoji and word_count > 10:
        suggestions.append("Add an emoji to make it more engaging")
    if not has_hashtag:
        suggestions.append("Include relevant hashtags for better reach")
    if not has_cta:
        suggestions.append("Add a clear call-to-action")
    if word_count < 10:
        suggestions.append("Add more context to your message")

    score = min(
        100,
        60
        + (15 if has_cta else 0)
        + (10 if has_hashtag else 0)
        + (10 if has_emoji else 0)
        + (15 if 15 <= word_count <= 40 else 0),
    )

    return CopyFeedback(
        tone=TONE_ENERGETIC if "!" in caption else TONE_PROFESSIONAL,
        sentiment=_sentiment(score),
        suggestions=suggestions or [BALANCED_MESSAGE],
        cta_suggestion=(
            "CTA detected: Good!" if has_cta else 'Try: "Check it out →" or "Learn more"'
        ),
        score=score,
    )
