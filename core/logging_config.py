"""
Loguru setup for the forum API.

Development logs are colorized for the console, production logs are JSON
lines. Both carry the request correlation id, and a rotating file under
``logs/`` is always kept.
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from core.correlation import get_correlation_id

if TYPE_CHECKING:
    from loguru import Record

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[correlation_id]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

# Console level per environment; anything unknown is treated like production
CONSOLE_LEVELS = {
    "development": "DEBUG",
    "test": "WARNING",
    "production": "INFO",
}


def correlation_filter(record: "Record") -> bool:
    """Stamp the current correlation id onto the record (never drops)."""
    record["extra"]["correlation_id"] = get_correlation_id() or "-"
    return True


def configure_logging(environment: str = "development", log_dir: str = "logs") -> None:
    """
    Replace loguru's default sink with the forum's sinks.

    Args:
        environment: "development", "test" or "production".
        log_dir: Directory of the rotating ``app.log`` file.
    """
    logger.remove()

    readable = environment != "production"
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT if readable else "{message}",
        level=CONSOLE_LEVELS.get(environment, "INFO"),
        filter=correlation_filter,
        colorize=readable,
        serialize=not readable,
    )

    Path(log_dir).mkdir(parents=True, exist_ok=True)
    logger.add(
        str(Path(log_dir) / "app.log"),
        format=CONSOLE_FORMAT if readable else "{message}",
        level="INFO",
        filter=correlation_filter,
        rotation="10 MB",
        retention="7 days",
        serialize=not readable,
    )
