"""Mini README: Application-wide logging helpers for the KPiR portal.

Structure:
    * configure_root_logger - install the shared stream handler once.
    * get_logger - factory returning module loggers with baseline config.
    * mask_secret - shorten tokens before they reach a log line.

Usage:
    Modules create ``LOGGER = get_logger(__name__)`` at import time. The root
    handler is attached exactly once so uvicorn reloads and repeated test
    imports do not duplicate output.
"""

from __future__ import annotations

import logging
from typing import Optional

_LOGGER_INITIALISED = False


def configure_root_logger(level: int = logging.INFO) -> None:
    """Configure the root logger with a compact, timestamped formatter."""

    global _LOGGER_INITIALISED
    if _LOGGER_INITIALISED:
        return

    handler = logging.StreamHandler()
    handler.setFormatter(
        logging.Formatter(
            "[%(asctime)s] [%(levelname)s] %(name)s - %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(handler)
    _LOGGER_INITIALISED = True


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-specific logger ensuring baseline configuration."""

    configure_root_logger()
    return logging.getLogger(name)


def mask_secret(value: Optional[str], visible: int = 4) -> str:
    """Return ``value`` with everything but the first characters hidden."""

    if not value:
        return "<none>"
    if len(value) <= visible:
        return "*" * len(value)
    return f"{value[:visible]}…({len(value)} chars)"
