"""Logging utilities tailored for territory allocation."""

from __future__ import annotations

import logging
from typing import IO, Optional, Union

DEFAULT_NAMESPACE = "territory"
LOG_FORMAT = "%(asctime)s | %(levelname)-7s | %(name)s | %(message)s"


def resolve_level(level: Union[int, str], default: int = logging.WARNING) -> int:
    """Map a level name such as ``"debug"`` to its numeric value."""

    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else default


def configure_logging(
    level: Union[int, str] = logging.INFO, stream: Optional[IO[str]] = None
) -> None:
    """Install a single formatted handler on the root logger.

    Per-trial detail from the allocator is logged at DEBUG and case-level
    progress at INFO. The handler writes to stderr unless ``stream`` is
    given, so a report printed to stdout stays clean.
    """

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%H:%M:%S"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(resolve_level(level))


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a namespaced logger, configuring defaults if needed."""

    if not logging.getLogger().handlers:
        configure_logging()
    return logging.getLogger(name or DEFAULT_NAMESPACE)
