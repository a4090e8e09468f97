"""Logging setup for the engine: Rich on stderr, plain text to an optional file."""

from __future__ import annotations

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "meal_plan_engine"

stderr_console = Console(stderr=True)


def resolve_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    return getattr(logging, str(level).upper(), logging.INFO)


def setup_logging(level: str | int = "info", log_file: Path | None = None) -> logging.Logger:
    """Attach a RichHandler (and optionally a FileHandler) to the engine logger.

    Calling it again replaces the handlers from the previous call.
    """
    numeric = resolve_level(level)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)
    logger.handlers.clear()

    rich_handler = RichHandler(
        console=stderr_console,
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    rich_handler.setLevel(numeric)
    logger.addHandler(rich_handler)

    if log_file is not None:
        # File output keeps debug detail such as ignored duplicate meals
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(name)s %(levelname)s %(message)s")
        )
        logger.addHandler(file_handler)
        logger.setLevel(logging.DEBUG)

    return logger


def setup_from_config(config: dict) -> logging.Logger:
    """Apply the logging section of an engine config."""
    section = config.get("logging", {})
    log_file = section.get("file")
    return setup_logging(
        level=section.get("level") or "info",
        log_file=Path(log_file) if log_file else None,
    )
