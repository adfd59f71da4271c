"""Centralized logging configuration for the image tools service."""
from __future__ import annotations

import logging
import os
import sys

STRUCTURED_FORMAT = (
    "%(asctime)s | %(name)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
)
SIMPLE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str | None = None, format_type: str = "structured") -> logging.Logger:
    """
    Configure the ``src`` logger hierarchy once.

    Environment Variables:
        LOG_LEVEL: DEBUG, INFO, WARNING, ERROR or CRITICAL (default INFO)
        LOG_FORMAT: "structured" or "simple"
    """
    logger = logging.getLogger("src")

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logger.setLevel(getattr(logging, level_name, logging.INFO))

    # Avoid duplicate handlers when the app factory runs more than once
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        fmt = os.getenv("LOG_FORMAT", format_type).lower()
        if fmt == "structured":
            handler.setFormatter(logging.Formatter(STRUCTURED_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        else:
            handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
        logger.addHandler(handler)

    return logger
