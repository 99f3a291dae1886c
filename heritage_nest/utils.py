"""Shared utilities: logging and clock helpers."""
import logging
from datetime import datetime, timezone

from .config import LOG_LEVEL


def get_logger(name=__name__):
    logging.basicConfig(
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        level=getattr(logging, LOG_LEVEL, logging.INFO)
    )
    return logging.getLogger(name)

logger = get_logger("heritage-nest")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def now_iso() -> str:
    # millisecond precision with a trailing Z, e.g. 2024-05-01T10:00:00.000Z
    return utcnow().isoformat(timespec="milliseconds").replace("+00:00", "Z")
