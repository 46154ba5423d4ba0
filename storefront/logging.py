"""
Logging for the storefront client.

Modules log through `get_logger(__name__)`. Output is attached once, by the
application root, via `configure_logging(settings)`: one stdout handler on
the "storefront" logger, level from `Settings.log_level`, short format when
`Settings.is_production`.
"""

import logging
import sys
from functools import cache

from storefront.config import Settings

PACKAGE_LOGGER = "storefront"

_FORMAT_DETAILED = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_FORMAT_SIMPLE = "%(levelname)s - %(name)s - %(message)s"

# Newlines and tabs in user input could forge extra log entries
_LOG_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": None})


class _StorefrontHandler(logging.StreamHandler):
    """Marker type so repeated configuration replaces rather than stacks."""


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach the stdout handler to the package logger. Safe to call again."""
    logger = logging.getLogger(PACKAGE_LOGGER)

    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.INFO
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if isinstance(h, _StorefrontHandler)]:
        logger.removeHandler(handler)

    handler = _StorefrontHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter(_FORMAT_SIMPLE if settings.is_production else _FORMAT_DETAILED)
    )
    logger.addHandler(handler)

    # Every API call goes through httpx; keep its request log quiet
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return logger


@cache
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def sanitize_id_for_logging(id_value: str | int | None) -> str:
    """Product, order and user ids: escaped, cut to 8 chars, "N/A" when empty."""
    if id_value is None or id_value == "":
        return "N/A"
    return str(id_value).translate(_LOG_ESCAPES)[:8]


def sanitize_string_for_logging(value: str | None, max_length: int = 50) -> str:
    """Emails typed at login and registration."""
    if not value:
        return "N/A"
    safe_value = str(value).translate(_LOG_ESCAPES)
    if len(safe_value) <= max_length:
        return safe_value
    return safe_value[:max_length] + "..."


__all__ = [
    "configure_logging",
    "get_logger",
    "sanitize_id_for_logging",
    "sanitize_string_for_logging",
]
