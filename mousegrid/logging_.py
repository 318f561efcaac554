"""Logging utilities for consistent CLI logging."""

from __future__ import annotations

import logging
from typing import Optional

FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: int = logging.INFO) -> None:
    """Configure root logger with a concise formatter."""

    root = logging.getLogger()
    if root.handlers:
        # Assume another configuration already exists; only adjust the level.
        root.setLevel(level)
        return

    logging.basicConfig(level=level, format=FORMAT)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a module-level logger after ensuring configuration."""

    configure_logging()
    return logging.getLogger(name)


__all__ = ["configure_logging", "get_logger"]
