"""Logging configuration using Loguru.

Provides structured logging with:
- Console output for development
- Optional file rotation
- No credentials in logs (use mask_secret before logging any key)
"""

import sys
from pathlib import Path

from loguru import logger


def setup_logging(
    level: str = "INFO",
    log_dir: str = "logs",
    enable_file: bool = False,
) -> None:
    """Configure application logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files
        enable_file: Whether to enable file logging
    """
    # Remove default handler
    logger.remove()

    logger.add(
        sys.stderr,
        format=(
            "<green>{time:HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>"
        ),
        level=level,
        colorize=True,
        backtrace=True,
        diagnose=False,
    )

    if enable_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)

        logger.add(
            log_path / "polyvoice_{time:YYYY-MM-DD}.log",
            format=(
                "{time:YYYY-MM-DD HH:mm:ss.SSS} | "
                "{level: <8} | "
                "{name}:{function}:{line} | "
                "{message}"
            ),
            level=level,
            rotation="20 MB",
            retention="14 days",
            compression="gz",
            backtrace=True,
            diagnose=False,  # Locals may hold decrypted keys
        )

    logger.info(f"Logging initialized at {level} level")


def get_logger(name: str) -> "logger":
    """Get a logger instance with the given name.

    Usage:
        from polyvoice.logging_config import get_logger
        logger = get_logger(__name__)
        logger.info("Message")
    """
    return logger.bind(name=name)


def mask_secret(value: str | None) -> str:
    """Mask a credential for logging: sk-abcdef123456 -> sk-a****3456."""
    if not value or len(value) < 10:
        return "****"
    return f"{value[:4]}****{value[-4:]}"


def sanitize_for_log(data: dict) -> dict:
    """Mask credential-looking values in a dict before logging.

    Any key containing KEY, SECRET or TOKEN is masked.
    """
    result = {}

    for key, value in data.items():
        upper = key.upper()
        if any(marker in upper for marker in ("KEY", "SECRET", "TOKEN")) and isinstance(value, str):
            result[key] = mask_secret(value)
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        else:
            result[key] = value

    return result
