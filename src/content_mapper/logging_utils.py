"""Logging setup helpers using Rich."""

from __future__ import annotations

import logging
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

PACKAGE_LOGGER = "content_mapper"
# Third-party loggers that log every request at INFO.
NOISY_LOGGERS = ("httpx", "httpcore")


def _level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[str, int] = "INFO", console: Optional[Console] = None) -> None:
    """Route log records through a Rich handler on stderr.

    Unknown level names fall back to INFO. Request logging from httpx is
    raised to WARNING unless ``level`` is DEBUG.
    """
    resolved = _level(level)
    handler = RichHandler(
        console=console or Console(stderr=True),
        rich_tracebacks=False,
        show_path=False,
        markup=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    logging.basicConfig(level=resolved, handlers=[handler], force=True)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if resolved <= logging.DEBUG else logging.WARNING)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return ``name`` as a logger under the package namespace."""
    if not name or name == PACKAGE_LOGGER:
        return logging.getLogger(PACKAGE_LOGGER)
    if name.startswith(PACKAGE_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
