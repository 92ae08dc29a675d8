"""Utility helpers."""

from cadence.utils.logging import ContextLogger, get_logger, setup_logger
from cadence.utils.time import get_timezone, localize, to_utc, utc_now

__all__ = [
    "ContextLogger",
    "get_logger",
    "setup_logger",
    "get_timezone",
    "localize",
    "to_utc",
    "utc_now",
]
