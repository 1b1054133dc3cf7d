"""Logging configuration for PostSync."""

from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Configure the ``postsync`` logger.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).

    Returns:
        The root ``postsync`` logger.
    """
    formatter = logging.Formatter(
        fmt="%(asctime)s | %(levelname)-8s | %(name)-30s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger("postsync")
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Streamlit re-runs the script on every interaction.
    if not root_logger.handlers:
        root_logger.addHandler(handler)

    return root_logger
