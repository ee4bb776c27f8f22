"""
Logging Configuration
Structured logging with loguru
Source: https://github.com/Delgan/loguru
"""

import sys
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

if TYPE_CHECKING:
    from src.core.config import ExportSettings


def setup_logging(
    level: str = "INFO",
    log_file: str | None = None,
    json_logs: bool = False,
) -> None:
    """
    Configure exporter logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional log file path
        json_logs: Whether to output JSON format
    """
    logger.remove()
    logger.configure(extra={"name": "root"})

    if json_logs:
        logger.add(
            sys.stderr,
            format="{message}",
            level=level,
            serialize=True,
        )
    else:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{extra[name]}</cyan> - <level>{message}</level>",
            level=level,
            colorize=True,
        )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_file,
            rotation="100 MB",
            retention="30 days",
            compression="zip",
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]} - {message}",
            level=level,
            serialize=json_logs,
        )

    logger.bind(name=__name__).info(f"Logging configured: level={level}, json_logs={json_logs}")


def setup_logging_from_settings(settings: "ExportSettings") -> None:
    """Configure logging from the export settings."""
    setup_logging(
        level=settings.LOG_LEVEL,
        log_file=settings.LOG_FILE,
        json_logs=settings.JSON_LOGS,
    )


def get_logger(name: str = __name__):  # type: ignore[no-untyped-def]
    """
    Get a logger bound to a module name.

    Example:
        >>> from src.utils.logging import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("Export started")
    """
    return logger.bind(name=name)
