"""Logging helpers for the jettoncodec CLI."""

from __future__ import annotations

import sys

from loguru import logger


def init_logging(level: str = "WARNING", colorize: bool = True) -> None:
    """Configure loguru with a single stderr sink.

    Library modules only emit records; sinks are set up here by the CLI.
    """

    logger.remove()
    logger.add(
        sys.stderr,
        colorize=colorize,
        level=level.upper(),
        format="<dim>{time:HH:mm:ss}</dim> <level>{level: <7}</level> {message}",
    )
