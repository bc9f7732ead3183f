import logging
import math
import sys
import structlog
from typing import Any, Optional

from survival_lab import config

__all__ = [
    "configure_logging",
    "stringify_tag_value",
    "normalise_whitespace",
    "round_half_up",
]


def configure_logging(level: Optional[str] = None, json_logs: Optional[bool] = None) -> None:
    """Install structured logging for the engine and anything embedding it."""
    level = (level or config.LOG_LEVEL).upper()
    json_logs = config.LOG_JSON if json_logs is None else json_logs

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def stringify_tag_value(raw: Any) -> str:
    """
    Flatten a raw extractor tag value into a single trimmed string.

    Lists and tuples are joined with ", " (missing entries become empty
    strings); None yields an empty string.
    """
    if raw is None:
        return ""
    if isinstance(raw, (list, tuple)):
        return ", ".join("" if item is None else str(item) for item in raw).strip()
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace").strip()
    return str(raw).strip()


def normalise_whitespace(value: Optional[str]) -> str:
    """Trim and collapse every run of whitespace to a single space."""
    if not value:
        return ""
    return " ".join(value.split())


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (12.5 -> 13)."""
    return int(math.floor(value + 0.5))
