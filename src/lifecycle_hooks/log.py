"""Loguru setup and best-effort structured log events."""

import sys
from typing import Any, Optional

from loguru import logger

from .config import Config

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> | <level>{message}</level> | {extra}"
)


def configure_logging(
    level: Optional[str] = None,
    debug: Optional[bool] = None,
    sink: Any = None,
) -> int:
    """
    Replace loguru's default handler with the structured console format.

    Args:
        level: Minimum level (defaults to Config.LOG_LEVEL)
        debug: Force DEBUG level (defaults to Config.DEBUG)
        sink: Destination (defaults to stderr)

    Returns:
        The loguru handler id
    """
    if debug is None:
        debug = Config.DEBUG
    if level is None:
        level = Config.LOG_LEVEL
    if debug:
        level = "DEBUG"

    logger.remove()
    return logger.add(sink or sys.stderr, format=LOG_FORMAT, level=level)


def log_event(level: str, message: str, **context: Any) -> None:
    """
    Emit a leveled event with bound context.

    Logging is fire-and-forget: a failing sink or formatter never reaches
    the caller.
    """
    try:
        logger.bind(**context).log(level, message)
    except Exception:
        pass
