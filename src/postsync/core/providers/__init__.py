"""Provider registry — lists image-generation backends and creates them.

Adding a new provider requires two steps:

1. Create a provider module in this package (e.g. ``my_service.py``) that
   exports ``GENERATOR_CARDS`` (list of ``GeneratorCard``) and a ``create``
   factory function with signature ``(settings: Settings) -> ImageGenerator``.
2. Register the module below.

Typical usage::

    from postsync.core.providers import create_generator, discover_available

    cards = discover_available(settings)
    generator = create_generator(cards[0], settings)
"""

from __future__ import annotations

import logging
from typing import Callable

from postsync.config import Settings
from postsync.core.providers._base import GeneratorCard, ImageGenerator
from postsync.core.providers import huggingface

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[Settings], ImageGenerator]

# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

# Maps generator card id → (GeneratorCard, factory function).
_REGISTRY: dict[str, tuple[GeneratorCard, ProviderFactory]] = {}


def _register_provider_module(
    cards: list[GeneratorCard],
    factory: ProviderFactory,
) -> None:
    """Register all generator cards from a provider module."""
    for card in cards:
        if card.id in _REGISTRY:
            logger.warning("Duplicate generator id '%s' — skipping.", card.id)
            continue
        _REGISTRY[card.id] = (card, factory)


_register_provider_module(huggingface.GENERATOR_CARDS, huggingface.create)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def get_all_cards() -> list[GeneratorCard]:
    """Return every registered generator card."""
    return [card for card, _ in _REGISTRY.values()]


def discover_available(settings: Settings) -> list[GeneratorCard]:
    """Return generator cards that can run with the current settings.

    Cards that require a token are skipped while ``hf_token`` is empty.

    Returns:
        Usable cards, sorted by display name.
    """
    available = [
        card
        for card, _ in _REGISTRY.values()
        if not card.requires_token or settings.hf_token
    ]
    available.sort(key=lambda c: c.name)
    return available


def create_generator(card: GeneratorCard, settings: Settings) -> ImageGenerator:
    """Instantiate the provider for a specific card.

    Raises:
        ValueError: If the card id is not registered.
    """
    if card.id not in _REGISTRY:
        raise ValueError(
            f"Unknown generator id '{card.id}'. "
            f"Registered: {sorted(_REGISTRY.keys())}"
        )
    _, factory = _REGISTRY[card.id]
    return factory(settings)


def default_generator(settings: Settings) -> ImageGenerator:
    """Create the first available provider.

    Raises:
        ValueError: If no provider can run with *settings*.
    """
    cards = discover_available(settings)
    if not cards:
        raise ValueError("No image-generation provider is available.")
    return create_generator(cards[0], settings)


__all__ = [
    "GeneratorCard",
    "ImageGenerator",
    "create_generator",
    "default_generator",
    "discover_available",
    "get_all_cards",
]
