"""
Centralized logging configuration for the market bias analyzer.

Console output is colored and human-readable by default; a JSON line format
and rotating file output are available. Settings come from arguments or the
LOG_LEVEL / LOG_FILE / LOG_JSON / LOG_CONSOLE environment variables.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Optional

HUMAN_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(module)s:%(funcName)s:%(lineno)d - %(message)s"
HUMAN_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
JSON_FORMAT = (
    '{"timestamp": "%(asctime)s", "level": "%(levelname)s", '
    '"logger": "%(name)s", "module": "%(module)s", '
    '"function": "%(funcName)s", "line": %(lineno)d, '
    '"message": "%(message)s"}'
)
JSON_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"


def _env_flag(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").lower() == "true"


class ColoredFormatter(logging.Formatter):
    """Formatter that colors the level name for terminal output."""

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        levelname = record.levelname
        if levelname in self.COLORS:
            record.levelname = f"{self.COLORS[levelname]}{levelname}{self.RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def setup_logging(
    name: Optional[str] = None,
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    console: bool = True,
    json_format: bool = False,
    rotation: bool = True,
    max_bytes: int = 10 * 1024 * 1024,  # 10MB
    backup_count: int = 5,
) -> logging.Logger:
    """
    Configure a logger (the root logger when ``name`` is None).

    Args:
        name: Logger name
        level: Log level name; falls back to $LOG_LEVEL, then INFO
        log_file: Path to log file; falls back to $LOG_FILE, then no file
        console: Enable console logging (stderr)
        json_format: Use the JSON line format
        rotation: Use a rotating file handler
        max_bytes: Maximum log file size before rotation
        backup_count: Number of rotated files to keep

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if level is None:
        level = os.getenv("LOG_LEVEL", "INFO")
    if log_file is None:
        log_file = os.getenv("LOG_FILE")

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(numeric_level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_format, date_format = (
        (JSON_FORMAT, JSON_DATE_FORMAT) if json_format else (HUMAN_FORMAT, HUMAN_DATE_FORMAT)
    )

    if console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(numeric_level)
        if json_format:
            console_handler.setFormatter(logging.Formatter(log_format, date_format))
        else:
            console_handler.setFormatter(ColoredFormatter(log_format, date_format))
        logger.addHandler(console_handler)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)

        if rotation:
            file_handler: logging.Handler = logging.handlers.RotatingFileHandler(
                log_file,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        else:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")

        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter(log_format, date_format))
        logger.addHandler(file_handler)

    if name is not None:
        logger.propagate = False

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger, installing default root configuration on first use.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Module initialized")
    """
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)


def log_exception(
    logger: logging.Logger,
    exc: Exception,
    message: str = "An exception occurred",
    level: int = logging.ERROR,
) -> None:
    """Log an exception with full traceback."""
    logger.log(level, f"{message}: {exc}", exc_info=True)


def configure_default_logging() -> logging.Logger:
    """
    Configure the root logger from environment variables:

    - LOG_LEVEL: Logging level (default: INFO)
    - LOG_FILE: Log file path (default: none)
    - LOG_JSON: Use JSON format (default: false)
    - LOG_CONSOLE: Enable console output (default: true)
    """
    root = setup_logging(
        level=os.getenv("LOG_LEVEL", "INFO"),
        log_file=os.getenv("LOG_FILE"),
        console=_env_flag("LOG_CONSOLE", True),
        json_format=_env_flag("LOG_JSON", False),
    )
    logging.getLogger("market_bias").debug(
        "Logging initialized (level=%s, file=%s)",
        logging.getLevelName(root.level),
        os.getenv("LOG_FILE"),
    )
    return root
